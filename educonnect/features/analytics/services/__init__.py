from .analytics_service import (
    AnalyticsLoadError,
    AnalyticsService,
    ReportRenderError,
    get_analytics_service,
)
from .latest_request import AnalyticsLiveSession, LatestRequestGate

__all__ = [
    "AnalyticsLiveSession",
    "AnalyticsLoadError",
    "AnalyticsService",
    "LatestRequestGate",
    "ReportRenderError",
    "get_analytics_service",
]
