from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from educonnect.db.helpers import DatabaseError
from educonnect.features.analytics.domain.models import Method, Reason
from educonnect.features.analytics.pipeline.aggregation import aggregate_contacts, build_snapshot
from educonnect.features.analytics.pipeline.time_range import resolve_range
from educonnect.features.analytics.services import analytics_service as service_module
from educonnect.features.analytics.services.analytics_service import (
    RENDER_FAILED_MESSAGE,
    AnalyticsLoadError,
    AnalyticsService,
    ReportRenderError,
)
from educonnect.models.api.analytics_request import AnalyticsQuery

WEDNESDAY = datetime(2025, 10, 15, 14, 30, tzinfo=UTC)


@pytest.mark.asyncio
async def test_load_snapshot_fetches_resolved_range_with_filters(make_contact, make_repository):
    repository = make_repository(
        [make_contact(WEDNESDAY - timedelta(days=1), method="phone", category="academic")]
    )
    service = AnalyticsService(repository=repository)
    query = AnalyticsQuery(
        preset="week", methods=[Method.PHONE], reasons=[Reason.ACADEMIC], tz="UTC"
    )

    snapshot = await service.load_snapshot("teacher-123", query, now=WEDNESDAY)

    call = repository.calls[0]
    assert call["owner_id"] == "teacher-123"
    assert call["start"] == datetime(2025, 10, 13, tzinfo=UTC)
    assert call["end"].date() == WEDNESDAY.date()
    assert call["methods"] == [Method.PHONE]
    assert call["reasons"] == [Reason.ACADEMIC]

    assert snapshot.kpis.total_contacts == 1
    assert snapshot.active_filters == ("Method: Phone", "Reason: Academic")
    assert snapshot.generated_at == WEDNESDAY
    assert [row.count for row in snapshot.trend_series] == [0, 1, 0]


@pytest.mark.asyncio
async def test_load_snapshot_uses_query_time_zone(make_repository):
    repository = make_repository()
    service = AnalyticsService(repository=repository)
    query = AnalyticsQuery(preset="month", tz="America/Chicago")

    snapshot = await service.load_snapshot("teacher-123", query, now=WEDNESDAY)

    start = repository.calls[0]["start"]
    assert start.utcoffset() == timedelta(hours=-5)
    assert start == datetime(2025, 9, 16, tzinfo=ZoneInfo("America/Chicago"))
    assert snapshot.generated_at.tzinfo == ZoneInfo("America/Chicago")


@pytest.mark.asyncio
async def test_load_snapshot_turns_database_errors_into_load_errors(make_repository):
    repository = make_repository(error=DatabaseError("boom", operation="fetch_all"))
    service = AnalyticsService(repository=repository)

    with pytest.raises(AnalyticsLoadError) as exc_info:
        await service.load_snapshot("teacher-123", AnalyticsQuery(), now=WEDNESDAY)

    assert str(exc_info.value) == "Failed to load analytics."


@pytest.mark.asyncio
async def test_custom_query_resolves_to_week_buckets_for_long_spans(make_repository):
    repository = make_repository()
    service = AnalyticsService(repository=repository)
    query = AnalyticsQuery(preset="custom", start="2025-01-01", end="2025-06-30", tz="UTC")

    snapshot = await service.load_snapshot("teacher-123", query, now=WEDNESDAY)

    assert snapshot.range_label == "Jan 1, 2025 – Jun 30, 2025"
    assert snapshot.trend_series[0].label.startswith("Week of ")


def test_render_report_returns_pdf(make_repository):
    service = AnalyticsService(repository=make_repository())
    resolved = resolve_range("week", WEDNESDAY)
    snapshot = build_snapshot(aggregate_contacts([], resolved), resolved, generated_at=WEDNESDAY)

    assert service.render_report(snapshot).startswith(b"%PDF-1.4")


def test_render_report_hides_encoder_failures(monkeypatch, make_repository):
    def _explode(snapshot):
        raise MemoryError("no room")

    monkeypatch.setattr(service_module, "render_analytics_pdf", _explode)
    service = AnalyticsService(repository=make_repository())

    with pytest.raises(ReportRenderError) as exc_info:
        service.render_report(object())

    assert str(exc_info.value) == RENDER_FAILED_MESSAGE
    assert "no room" not in str(exc_info.value)


def test_query_rejects_unknown_time_zone():
    with pytest.raises(ValueError):
        AnalyticsQuery(tz="Mars/Olympus_Mons")


def test_services_package_attribute_is_the_service_module():
    from educonnect.features.analytics import services

    assert services.analytics_service is service_module
    assert service_module.get_analytics_service() is service_module.default_analytics_service
