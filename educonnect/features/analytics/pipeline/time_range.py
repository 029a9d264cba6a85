"""
Time-range resolution for the analytics dashboard.

Maps a preset ("week", "month", ...) plus the caller's current time onto a
concrete [start, end] interval and the bucket size used for the trend chart.
All boundaries are computed in the tzinfo carried by ``now``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from ..domain.models import Bucket, ResolvedRange, TimeRangePreset

TRAILING_WINDOW_DAYS = 30
TERM_WEEKS = 12
SEMESTER_WEEKS = 20
ACADEMIC_YEAR_START_MONTH = 8  # August
DAY_BUCKET_MAX_SPAN_DAYS = 35
# Custom ranges longer than five years keep only their most recent five years
MAX_CUSTOM_SPAN_DAYS = 5 * 366


@dataclass(frozen=True, slots=True)
class PresetOption:
    value: TimeRangePreset
    label: str
    helper: str


TIME_RANGE_PRESETS: tuple[PresetOption, ...] = (
    PresetOption(TimeRangePreset.WEEK, "This week", "Mon – today"),
    PresetOption(TimeRangePreset.MONTH, "Last 30 days", "Rolling"),
    PresetOption(TimeRangePreset.TERM, "This term", "~12 weeks"),
    PresetOption(TimeRangePreset.SEMESTER, "This semester", "~20 weeks"),
    PresetOption(TimeRangePreset.YEAR, "Academic year", "Aug – Jul"),
    PresetOption(TimeRangePreset.CUSTOM, "Custom", "Choose dates"),
)


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: datetime) -> datetime:
    # Last millisecond of the day
    return value.replace(hour=23, minute=59, second=59, microsecond=999_000)


def start_of_week(value: datetime) -> datetime:
    """Monday 00:00 of the week containing ``value``; Sunday belongs to the prior week."""
    return start_of_day(value - timedelta(days=value.weekday()))


def monday_of(day: date) -> date:
    return day - timedelta(days=day.weekday())


def academic_year_bounds(now: datetime) -> tuple[datetime, datetime]:
    """Aug 1 through Jul 31 of the academic year containing ``now``."""
    first_year = now.year if now.month >= ACADEMIC_YEAR_START_MONTH else now.year - 1
    start = datetime.combine(date(first_year, ACADEMIC_YEAR_START_MONTH, 1), time.min, tzinfo=now.tzinfo)
    last_day = date(first_year + 1, ACADEMIC_YEAR_START_MONTH, 1) - timedelta(days=1)
    end = end_of_day(datetime.combine(last_day, time.min, tzinfo=now.tzinfo))
    return start, end


def parse_calendar_date(value: str | date | None) -> date | None:
    """Parse ``YYYY-MM-DD`` (or a longer ISO timestamp) into a date; None if unusable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def default_custom_dates(now: datetime) -> tuple[date, date]:
    """Dates a client should prefill when switching to the custom preset."""
    today = now.date()
    return today - timedelta(days=TRAILING_WINDOW_DAYS - 1), today


def resolve_range(
    preset: TimeRangePreset | str,
    now: datetime,
    custom_start: str | date | None = None,
    custom_end: str | date | None = None,
) -> ResolvedRange:
    """
    Resolve a preset into a concrete interval.

    Never raises for bad custom dates: an unparseable or missing start falls
    back to the trailing 30-day window start, an unparseable or missing end
    falls back to the end of today. Reversed custom dates are swapped, and a
    span longer than MAX_CUSTOM_SPAN_DAYS is cut down to its most recent part.
    Unknown presets are treated as "week".
    """
    try:
        preset = TimeRangePreset(preset)
    except ValueError:
        preset = TimeRangePreset.WEEK

    today = start_of_day(now)
    end = end_of_day(now)

    if preset is TimeRangePreset.WEEK:
        return ResolvedRange(start=start_of_week(now), end=end, bucket=Bucket.DAY)

    if preset is TimeRangePreset.MONTH:
        start = today - timedelta(days=TRAILING_WINDOW_DAYS - 1)
        return ResolvedRange(start=start, end=end, bucket=Bucket.DAY)

    if preset is TimeRangePreset.TERM:
        return ResolvedRange(start=today - timedelta(weeks=TERM_WEEKS), end=end, bucket=Bucket.WEEK)

    if preset is TimeRangePreset.SEMESTER:
        return ResolvedRange(
            start=today - timedelta(weeks=SEMESTER_WEEKS), end=end, bucket=Bucket.WEEK
        )

    if preset is TimeRangePreset.YEAR:
        start, year_end = academic_year_bounds(now)
        return ResolvedRange(start=start, end=year_end, bucket=Bucket.WEEK)

    fallback_start, fallback_end = default_custom_dates(now)
    start_date = parse_calendar_date(custom_start) or fallback_start
    end_date = parse_calendar_date(custom_end) or fallback_end
    if start_date > end_date:
        start_date, end_date = end_date, start_date
    if (end_date - start_date).days >= MAX_CUSTOM_SPAN_DAYS:
        start_date = end_date - timedelta(days=MAX_CUSTOM_SPAN_DAYS - 1)

    span_days = (end_date - start_date).days + 1
    bucket = Bucket.DAY if span_days <= DAY_BUCKET_MAX_SPAN_DAYS else Bucket.WEEK
    return ResolvedRange(
        start=datetime.combine(start_date, time.min, tzinfo=now.tzinfo),
        end=end_of_day(datetime.combine(end_date, time.min, tzinfo=now.tzinfo)),
        bucket=bucket,
    )


def _format_long_date(value: datetime) -> str:
    return f"{value:%b} {value.day}, {value.year}"


def format_range_label(start: datetime, end: datetime) -> str:
    """Human label for an interval, e.g. "Jan 5, 2026 – Feb 3, 2026"."""
    start_label = _format_long_date(start)
    end_label = _format_long_date(end)
    return start_label if start_label == end_label else f"{start_label} – {end_label}"
