# educonnect/models/api/analytics_response.py
from datetime import date, datetime

from pydantic import BaseModel, Field

from educonnect.features.analytics.domain.models import AnalyticsSnapshot, DistributionRow


class DistributionRowResponse(BaseModel):
    label: str
    count: int = Field(..., ge=0)

    @classmethod
    def from_domain(cls, row: DistributionRow) -> "DistributionRowResponse":
        return cls(label=row.label, count=row.count)


class KpisResponse(BaseModel):
    total_contacts: int = Field(..., ge=0)
    students_reached: int = Field(..., ge=0)
    avg_per_week: float = Field(..., ge=0)


class AnalyticsSnapshotResponse(BaseModel):
    """Response for GET /analytics/summary"""

    range_label: str
    generated_at: datetime
    active_filters: list[str]
    kpis: KpisResponse
    trend_series: list[DistributionRowResponse]
    method_distribution: list[DistributionRowResponse]
    reason_distribution: list[DistributionRowResponse]

    @classmethod
    def from_domain(cls, snapshot: AnalyticsSnapshot) -> "AnalyticsSnapshotResponse":
        return cls(
            range_label=snapshot.range_label,
            generated_at=snapshot.generated_at,
            active_filters=list(snapshot.active_filters),
            kpis=KpisResponse(
                total_contacts=snapshot.kpis.total_contacts,
                students_reached=snapshot.kpis.students_reached,
                avg_per_week=snapshot.kpis.avg_per_week,
            ),
            trend_series=[DistributionRowResponse.from_domain(r) for r in snapshot.trend_series],
            method_distribution=[
                DistributionRowResponse.from_domain(r) for r in snapshot.method_distribution
            ],
            reason_distribution=[
                DistributionRowResponse.from_domain(r) for r in snapshot.reason_distribution
            ],
        )


class PresetOptionResponse(BaseModel):
    value: str
    label: str
    helper: str


class VocabularyOption(BaseModel):
    value: str
    label: str


class AnalyticsOptionsResponse(BaseModel):
    """Response for GET /analytics/options"""

    presets: list[PresetOptionResponse]
    methods: list[VocabularyOption]
    reasons: list[VocabularyOption]
    default_custom_start: date
    default_custom_end: date
