"""
Domain subpackage for the analytics feature.
"""

from .models import (
    AnalyticsAggregate,
    AnalyticsKpis,
    AnalyticsSnapshot,
    Bucket,
    ContactRecord,
    DistributionRow,
    Method,
    Reason,
    ResolvedRange,
    TimeRangePreset,
)

__all__ = [
    "AnalyticsAggregate",
    "AnalyticsKpis",
    "AnalyticsSnapshot",
    "Bucket",
    "ContactRecord",
    "DistributionRow",
    "Method",
    "Reason",
    "ResolvedRange",
    "TimeRangePreset",
]
