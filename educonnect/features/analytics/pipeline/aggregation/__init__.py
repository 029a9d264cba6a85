"""
Aggregation package for the analytics dashboard.

Reads the teacher's contacts for a resolved range and reduces them to the
KPIs, trend series and distributions shown on the dashboard.
"""

from .repository import ContactAnalyticsRepository
from .service import (
    ContactAnalyticsAggregator,
    aggregate_contacts,
    build_snapshot,
    contact_analytics_aggregator,
    describe_filters,
)

__all__ = [
    "ContactAnalyticsAggregator",
    "ContactAnalyticsRepository",
    "aggregate_contacts",
    "build_snapshot",
    "contact_analytics_aggregator",
    "describe_filters",
]
