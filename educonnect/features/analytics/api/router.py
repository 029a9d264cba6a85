"""
Analytics routes.

JSON snapshot for the dashboard charts, the PDF summary download, the
filter vocabulary, and a WebSocket for live filter changes.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from fastapi.responses import Response
from pydantic import ValidationError

from educonnect.auth.verify import current_owner_id, owner_id_from_token
from educonnect.features.analytics.domain.models import (
    METHOD_LABELS,
    REASON_LABELS,
    Method,
    Reason,
    TimeRangePreset,
)
from educonnect.features.analytics.pipeline.time_range import (
    TIME_RANGE_PRESETS,
    default_custom_dates,
)
from educonnect.features.analytics.report import REPORT_MEDIA_TYPE, report_filename
from educonnect.features.analytics.services import (
    AnalyticsLiveSession,
    AnalyticsLoadError,
    AnalyticsService,
    ReportRenderError,
    get_analytics_service,
)
from educonnect.infrastructure.observability.logging import get_logger
from educonnect.models.api.analytics_request import AnalyticsQuery, zone_from_name
from educonnect.models.api.analytics_response import (
    AnalyticsOptionsResponse,
    AnalyticsSnapshotResponse,
    PresetOptionResponse,
    VocabularyOption,
)

router = APIRouter(prefix="/analytics", tags=["analytics"])
logger = get_logger(__name__)


def analytics_query(
    preset: TimeRangePreset = Query(TimeRangePreset.WEEK),
    start: str | None = Query(None, description="Custom range start, YYYY-MM-DD"),
    end: str | None = Query(None, description="Custom range end, YYYY-MM-DD"),
    method: list[Method] = Query(default=[]),
    reason: list[Reason] = Query(default=[]),
    tz: str | None = Query(None, description="IANA time zone, e.g. America/Chicago"),
) -> AnalyticsQuery:
    try:
        zone_from_name(tz)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return AnalyticsQuery(preset=preset, start=start, end=end, methods=method, reasons=reason, tz=tz)


@router.get(
    "/options",
    response_model=AnalyticsOptionsResponse,
    dependencies=[Depends(current_owner_id)],
)
async def get_analytics_options(tz: str | None = Query(None)):
    try:
        zone = zone_from_name(tz)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    custom_start, custom_end = default_custom_dates(datetime.now(zone))
    return AnalyticsOptionsResponse(
        presets=[
            PresetOptionResponse(value=p.value.value, label=p.label, helper=p.helper)
            for p in TIME_RANGE_PRESETS
        ],
        methods=[VocabularyOption(value=k, label=v) for k, v in METHOD_LABELS.items()],
        reasons=[VocabularyOption(value=k, label=v) for k, v in REASON_LABELS.items()],
        default_custom_start=custom_start,
        default_custom_end=custom_end,
    )


@router.get("/summary", response_model=AnalyticsSnapshotResponse)
async def get_analytics_summary(
    query: AnalyticsQuery = Depends(analytics_query),
    owner_id: str = Depends(current_owner_id),
    service: AnalyticsService = Depends(get_analytics_service),
):
    try:
        snapshot = await service.load_snapshot(owner_id, query)
    except AnalyticsLoadError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e

    return AnalyticsSnapshotResponse.from_domain(snapshot)


@router.get(
    "/report",
    response_class=Response,
    responses={200: {"content": {REPORT_MEDIA_TYPE: {}}}},
    summary="Download the analytics summary as a PDF",
)
async def download_analytics_report(
    query: AnalyticsQuery = Depends(analytics_query),
    owner_id: str = Depends(current_owner_id),
    service: AnalyticsService = Depends(get_analytics_service),
):
    try:
        snapshot = await service.load_snapshot(owner_id, query)
    except AnalyticsLoadError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e

    try:
        pdf_bytes = service.render_report(snapshot)
    except ReportRenderError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e)
        ) from e

    filename = report_filename(snapshot.generated_at.date())
    logger.info("Analytics report generated", owner_id=owner_id, size_bytes=len(pdf_bytes))
    return Response(
        content=pdf_bytes,
        media_type=REPORT_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.websocket("/live")
async def analytics_live(
    websocket: WebSocket,
    token: str = Query(...),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Live dashboard channel.

    The client sends one JSON object per filter change (same fields as
    AnalyticsQuery). Only the answer to the latest message is sent back.
    """
    owner_id = owner_id_from_token(token)
    if not owner_id:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    session = AnalyticsLiveSession(owner_id, service, websocket.send_json)
    try:
        while True:
            message = await websocket.receive_text()
            try:
                query = AnalyticsQuery.model_validate_json(message)
            except ValidationError as e:
                await websocket.send_json(
                    {"type": "error", "detail": "Invalid analytics filters", "errors": e.error_count()}
                )
                continue
            session.submit(query)
    except WebSocketDisconnect:
        logger.info("Analytics live session disconnected", owner_id=owner_id)
    finally:
        await session.close()
