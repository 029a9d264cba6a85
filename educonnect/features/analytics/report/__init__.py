"""
PDF export of the analytics snapshot.
"""

from .composer import (
    REPORT_MEDIA_TYPE,
    compose_report_lines,
    render_analytics_pdf,
    report_filename,
)
from .pdf_writer import PdfDocumentWriter, PdfLine, compose_pdf

__all__ = [
    "REPORT_MEDIA_TYPE",
    "PdfDocumentWriter",
    "PdfLine",
    "compose_pdf",
    "compose_report_lines",
    "render_analytics_pdf",
    "report_filename",
]
