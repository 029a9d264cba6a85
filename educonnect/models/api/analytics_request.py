# educonnect/models/api/analytics_request.py
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import BaseModel, ConfigDict, Field, field_validator

from educonnect.config import settings
from educonnect.features.analytics.domain.models import Method, Reason, TimeRangePreset


def zone_from_name(name: str | None) -> ZoneInfo:
    """Resolve an IANA zone name, falling back to the configured default when empty."""
    key = (name or "").strip() or settings.ANALYTICS_DEFAULT_TIMEZONE
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown time zone: {key}") from e


class AnalyticsQuery(BaseModel):
    """Range and filter selection for one analytics request."""

    model_config = ConfigDict(extra="ignore")

    preset: TimeRangePreset = TimeRangePreset.WEEK
    start: str | None = Field(None, description="Custom range start, YYYY-MM-DD")
    end: str | None = Field(None, description="Custom range end, YYYY-MM-DD")
    methods: list[Method] = Field(default_factory=list)
    reasons: list[Reason] = Field(default_factory=list)
    tz: str | None = Field(None, description="IANA time zone for day boundaries")

    @field_validator("tz")
    @classmethod
    def _known_zone(cls, value: str | None) -> str | None:
        if value is not None and value.strip():
            zone_from_name(value)
        return value

    def zone(self) -> ZoneInfo:
        return zone_from_name(self.tz)
