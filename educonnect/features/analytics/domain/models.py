"""
Domain models for the analytics feature.

ContactRecord is parsed from database rows with pydantic so malformed rows
are rejected at the repository boundary. Everything the pipeline derives
(ranges, aggregates, snapshots) is a frozen dataclass: built fresh per call,
never mutated, and comparable by value.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator


class Method(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    IN_PERSON = "in_person"
    VIDEO = "video"
    MESSAGE = "message"
    OTHER = "other"


class Reason(str, Enum):
    ACADEMIC = "academic"
    BEHAVIOR = "behavior"
    ATTENDANCE = "attendance"
    POSITIVE = "positive"
    ADMIN = "admin"
    OTHER = "other"


class Bucket(str, Enum):
    DAY = "day"
    WEEK = "week"


class TimeRangePreset(str, Enum):
    WEEK = "week"
    MONTH = "month"
    TERM = "term"
    SEMESTER = "semester"
    YEAR = "year"
    CUSTOM = "custom"


UNCATEGORIZED = "uncategorized"

METHOD_LABELS: dict[str, str] = {
    Method.EMAIL.value: "Email",
    Method.PHONE.value: "Phone",
    Method.IN_PERSON.value: "In person",
    Method.VIDEO.value: "Video",
    Method.MESSAGE.value: "Message",
    Method.OTHER.value: "Other",
}

REASON_LABELS: dict[str, str] = {
    Reason.ACADEMIC.value: "Academic",
    Reason.BEHAVIOR.value: "Behavior",
    Reason.ATTENDANCE.value: "Attendance",
    Reason.POSITIVE.value: "Positive",
    Reason.ADMIN.value: "Admin",
    Reason.OTHER.value: "Other",
}


def method_label(value: str) -> str:
    # Unknown values pass through so newer enum members still render
    return METHOD_LABELS.get(value, value)


def reason_label(value: str) -> str:
    if value == UNCATEGORIZED:
        return "Uncategorized"
    return REASON_LABELS.get(value, value)


class ContactRecord(BaseModel):
    """One logged family contact, as read from the contacts table."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    owner_id: str
    student_id: str | None = None
    occurred_at: datetime
    created_at: datetime
    method: str
    category: str | None = None

    @field_validator("id", "owner_id", "student_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value):
        # uuid columns come back as uuid.UUID from psycopg
        return str(value) if value is not None else None

    @field_validator("occurred_at", "created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("method")
    @classmethod
    def _method_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("method must not be blank")
        return value

    @field_validator("category")
    @classmethod
    def _blank_category_is_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value.strip()


@dataclass(frozen=True, slots=True)
class ResolvedRange:
    """Concrete [start, end] interval plus the trend granularity."""

    start: datetime
    end: datetime
    bucket: Bucket


@dataclass(frozen=True, slots=True)
class DistributionRow:
    label: str
    count: int


@dataclass(frozen=True, slots=True)
class AnalyticsKpis:
    total_contacts: int
    students_reached: int
    avg_per_week: float


@dataclass(frozen=True, slots=True)
class AnalyticsAggregate:
    """Output of the aggregation engine before presentation fields are added."""

    kpis: AnalyticsKpis
    trend_series: tuple[DistributionRow, ...]
    method_distribution: tuple[DistributionRow, ...]
    reason_distribution: tuple[DistributionRow, ...]


@dataclass(frozen=True, slots=True)
class AnalyticsSnapshot:
    """Everything the dashboard charts and the PDF report are built from."""

    range_label: str
    generated_at: datetime
    kpis: AnalyticsKpis
    trend_series: tuple[DistributionRow, ...]
    method_distribution: tuple[DistributionRow, ...]
    reason_distribution: tuple[DistributionRow, ...]
    active_filters: tuple[str, ...] = field(default_factory=tuple)
