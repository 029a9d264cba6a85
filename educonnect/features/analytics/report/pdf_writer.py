"""
Minimal single-page PDF 1.4 writer.

Builds the report without a PDF library: a flat list of positioned text
lines becomes one content stream, and PdfDocumentWriter serialises the
numbered objects in sequence while keeping an offset ledger for the xref
table that is written last.

Known limitation: no wrapping and no pagination. Lines that run past the
bottom margin are still emitted and simply fall off the page.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

PDF_HEADER = b"%PDF-1.4\n"
EOF_MARKER = b"%%EOF"

PAGE_WIDTH = 612
PAGE_HEIGHT = 792
PAGE_MARGIN = 64
DEFAULT_LINE_GAP = 18
DEFAULT_FONT_SIZE = 12

# WinAnsi covers the bullet and en dash used in the report; anything else becomes "?"
TEXT_ENCODING = "cp1252"


class FontStyle(str, Enum):
    REGULAR = "F1"
    BOLD = "F2"


FONT_FACES: dict[FontStyle, str] = {
    FontStyle.REGULAR: "Helvetica",
    FontStyle.BOLD: "Helvetica-Bold",
}


@dataclass(frozen=True, slots=True)
class PdfLine:
    text: str
    style: FontStyle = FontStyle.REGULAR
    size: int = DEFAULT_FONT_SIZE
    margin_top: int | None = None


def escape_pdf_text(text: str) -> str:
    """Backslash-escape the characters that would end or corrupt a literal string."""
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def encode_pdf_text(text: str) -> bytes:
    return escape_pdf_text(text).encode(TEXT_ENCODING, errors="replace")


def build_content_stream(lines: list[PdfLine]) -> bytes:
    """One BT/ET text block per line, moving the baseline down by each line's gap."""
    y = PAGE_HEIGHT - PAGE_MARGIN
    parts: list[bytes] = []
    for index, line in enumerate(lines):
        if index > 0:
            y -= line.margin_top if line.margin_top is not None else DEFAULT_LINE_GAP
        parts.append(
            b"BT\n"
            + f"/{line.style.value} {line.size} Tf\n".encode("ascii")
            + f"1 0 0 1 {PAGE_MARGIN} {y} Tm\n".encode("ascii")
            + b"("
            + encode_pdf_text(line.text)
            + b") Tj\nET\n"
        )
    return b"".join(parts)


class PdfDocumentWriter:
    """
    Streaming writer with an offset ledger.

    Object numbers are handed out by allocate(); write_object() appends the
    serialised object and records its byte offset. finish() appends the
    cross-reference table and trailer and returns the document bytes.
    """

    def __init__(self) -> None:
        self._buffer = bytearray(PDF_HEADER)
        self._offsets: dict[int, int] = {}
        self._allocated = 0
        self._finished = False

    def allocate(self) -> int:
        self._allocated += 1
        return self._allocated

    @property
    def offsets(self) -> dict[int, int]:
        return dict(self._offsets)

    def _claim(self, number: int) -> None:
        """Record the offset where object ``number`` starts."""
        if self._finished:
            raise RuntimeError("PDF document already finished")
        if number < 1 or number > self._allocated:
            raise ValueError(f"Object {number} was never allocated")
        if number in self._offsets:
            raise ValueError(f"Object {number} written twice")
        self._offsets[number] = len(self._buffer)

    def write_object(self, number: int, body: bytes | str) -> None:
        if isinstance(body, str):
            body = body.encode("ascii")
        self._claim(number)
        self._buffer += f"{number} 0 obj ".encode("ascii") + body + b" endobj\n"

    def write_stream(self, number: int, data: bytes) -> None:
        self._claim(number)
        self._buffer += (
            f"{number} 0 obj << /Length {len(data)} >>\nstream\n".encode("ascii")
            + data
            + b"\nendstream\nendobj\n"
        )

    def finish(self, root: int) -> bytes:
        missing = [n for n in range(1, self._allocated + 1) if n not in self._offsets]
        if missing:
            raise ValueError(f"Objects allocated but never written: {missing}")

        startxref = len(self._buffer)
        size = self._allocated + 1
        xref = [f"xref\n0 {size}\n", "0000000000 65535 f \n"]
        for number in range(1, size):
            xref.append(f"{self._offsets[number]:010d} 00000 n \n")
        xref.append("trailer\n")
        xref.append(f"<< /Size {size} /Root {root} 0 R >>\n")
        xref.append(f"startxref\n{startxref}\n")

        self._buffer += "".join(xref).encode("ascii") + EOF_MARKER
        self._finished = True
        return bytes(self._buffer)


def compose_pdf(lines: list[PdfLine]) -> bytes:
    """Lay the lines out on a single Letter page and return the PDF bytes."""
    writer = PdfDocumentWriter()
    catalog = writer.allocate()
    pages = writer.allocate()
    page = writer.allocate()
    contents = writer.allocate()
    fonts = {style: writer.allocate() for style in FontStyle}

    font_refs = " ".join(f"/{style.value} {number} 0 R" for style, number in fonts.items())

    writer.write_object(catalog, f"<< /Type /Catalog /Pages {pages} 0 R >>")
    writer.write_object(pages, f"<< /Type /Pages /Count 1 /Kids [{page} 0 R] >>")
    writer.write_object(
        page,
        f"<< /Type /Page /Parent {pages} 0 R /MediaBox [0 0 {PAGE_WIDTH} {PAGE_HEIGHT}] "
        f"/Contents {contents} 0 R /Resources << /Font << {font_refs} >> >> >>",
    )
    writer.write_stream(contents, build_content_stream(lines))
    for style, number in fonts.items():
        writer.write_object(
            number,
            f"<< /Type /Font /Subtype /Type1 /BaseFont /{FONT_FACES[style]} "
            "/Encoding /WinAnsiEncoding >>",
        )
    return writer.finish(root=catalog)
