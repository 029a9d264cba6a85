"""
Analytics summary report.

Turns an AnalyticsSnapshot into the ordered PdfLine list for the one-page
report and renders it with the minimal PDF writer.
"""

from datetime import date, datetime

from educonnect.config import settings

from ..domain.models import AnalyticsSnapshot, DistributionRow
from .pdf_writer import FontStyle, PdfLine, compose_pdf

REPORT_TITLE = "EduConnect Analytics Summary"
REPORT_MEDIA_TYPE = "application/pdf"

MAX_METHOD_ROWS = 6
MAX_REASON_ROWS = 6
MAX_TREND_ROWS = 8

BULLET = "•"


def format_generated_at(value: datetime) -> str:
    hour = value.hour % 12 or 12
    return f"{value.month}/{value.day}/{value.year}, {hour}:{value:%M:%S} {value:%p}"


def format_average(value: float) -> str:
    """Whole numbers print without a trailing .0 (3, not 3.0)."""
    return str(int(value)) if float(value).is_integer() else str(value)


def _heading(text: str, margin_top: int) -> PdfLine:
    return PdfLine(text=text, style=FontStyle.BOLD, size=14, margin_top=margin_top)


def _bullet(text: str) -> PdfLine:
    return PdfLine(text=f"{BULLET} {text}")


def _section(
    title: str,
    rows: tuple[DistributionRow, ...],
    limit: int,
    empty_text: str,
    margin_top: int,
) -> list[PdfLine]:
    lines = [_heading(title, margin_top)]
    if not rows:
        lines.append(_bullet(empty_text))
        return lines
    lines.extend(_bullet(f"{row.label}: {row.count} contact(s)") for row in rows[:limit])
    return lines


def compose_report_lines(snapshot: AnalyticsSnapshot) -> list[PdfLine]:
    lines = [
        PdfLine(text=REPORT_TITLE, style=FontStyle.BOLD, size=20),
        PdfLine(text=f"Generated on {format_generated_at(snapshot.generated_at)}", margin_top=26),
        PdfLine(text=f"Time range: {snapshot.range_label}"),
    ]

    if snapshot.active_filters:
        lines.append(PdfLine(text=f"Active filters: {', '.join(snapshot.active_filters)}"))
    else:
        lines.append(PdfLine(text="Active filters: All methods and reasons"))

    kpis = snapshot.kpis
    lines.append(_heading("Key metrics", 28))
    lines.append(_bullet(f"Total contacts: {kpis.total_contacts}"))
    lines.append(_bullet(f"Students reached: {kpis.students_reached}"))
    lines.append(_bullet(f"Average contacts per week: {format_average(kpis.avg_per_week)}"))

    lines += _section(
        "Method breakdown",
        snapshot.method_distribution,
        MAX_METHOD_ROWS,
        "No communication logged in this range.",
        28,
    )
    lines += _section(
        "Reason breakdown",
        snapshot.reason_distribution,
        MAX_REASON_ROWS,
        "No reasons recorded in this range.",
        24,
    )
    lines += _section(
        "Cadence overview",
        snapshot.trend_series,
        MAX_TREND_ROWS,
        "No activity to plot.",
        24,
    )
    return lines


def render_analytics_pdf(snapshot: AnalyticsSnapshot) -> bytes:
    return compose_pdf(compose_report_lines(snapshot))


def report_filename(today: date) -> str:
    return f"{settings.REPORT_FILENAME_PREFIX}-{today.isoformat()}.pdf"
