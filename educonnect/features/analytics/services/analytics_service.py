"""
Analytics service.

Wires the pipeline together for one request: resolve the range, fetch the
teacher's contacts, aggregate, and attach the presentation fields. Also
guards the PDF encoder so a failure there never reaches the user raw.
"""

from datetime import datetime

from educonnect.db.helpers import DatabaseError
from educonnect.features.analytics.domain.models import AnalyticsSnapshot
from educonnect.features.analytics.pipeline.aggregation import (
    ContactAnalyticsAggregator,
    ContactAnalyticsRepository,
    build_snapshot,
    contact_analytics_aggregator,
    describe_filters,
)
from educonnect.features.analytics.pipeline.time_range import resolve_range
from educonnect.features.analytics.report import render_analytics_pdf
from educonnect.infrastructure.observability.logging import get_logger
from educonnect.models.api.analytics_request import AnalyticsQuery

logger = get_logger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load analytics."
RENDER_FAILED_MESSAGE = "We couldn't prepare the PDF. Please try again."


class AnalyticsLoadError(Exception):
    """Contacts could not be fetched; no snapshot was produced."""


class ReportRenderError(Exception):
    """The PDF could not be built. The message is safe to show to users."""


class AnalyticsService:
    def __init__(
        self,
        repository=ContactAnalyticsRepository,
        aggregator: ContactAnalyticsAggregator = contact_analytics_aggregator,
    ):
        self._repository = repository
        self._aggregator = aggregator

    async def load_snapshot(
        self, owner_id: str, query: AnalyticsQuery, now: datetime | None = None
    ) -> AnalyticsSnapshot:
        zone = query.zone()
        now = now.astimezone(zone) if now else datetime.now(zone)
        resolved = resolve_range(query.preset, now, query.start, query.end)

        try:
            records = await self._repository.fetch_contacts(
                owner_id, resolved.start, resolved.end, query.methods, query.reasons
            )
        except DatabaseError as e:
            logger.error(
                "Failed to fetch contacts for analytics",
                owner_id=owner_id,
                preset=query.preset.value,
                operation=e.operation,
                error=str(e),
            )
            raise AnalyticsLoadError(LOAD_FAILED_MESSAGE) from e

        aggregate = self._aggregator.aggregate(records, resolved)
        logger.info(
            "Analytics snapshot built",
            owner_id=owner_id,
            preset=query.preset.value,
            bucket=resolved.bucket.value,
            total_contacts=aggregate.kpis.total_contacts,
        )
        return build_snapshot(
            aggregate,
            resolved,
            generated_at=now,
            active_filters=describe_filters(query.methods, query.reasons),
        )

    def render_report(self, snapshot: AnalyticsSnapshot) -> bytes:
        try:
            return render_analytics_pdf(snapshot)
        except Exception as e:
            logger.exception("Failed to render analytics PDF", error_type=type(e).__name__)
            raise ReportRenderError(RENDER_FAILED_MESSAGE) from e


default_analytics_service = AnalyticsService()


def get_analytics_service() -> AnalyticsService:
    """FastAPI dependency; tests override it with a service over fake data."""
    return default_analytics_service
