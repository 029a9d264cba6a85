# educonnect/main.py
"""
EduConnect analytics API.

Serves the dashboard snapshot, the PDF summary and the live filter socket.
The Postgres pool lives for the lifetime of the process.
"""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from educonnect.config import settings
from educonnect.db.pool import db_pool
from educonnect.features.analytics.api.router import router as analytics_router
from educonnect.infrastructure.observability.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
    setup_logging,
)
from educonnect.routes import health

REQUEST_ID_HEADER = "X-Request-ID"

setup_logging(log_level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Analytics service starting",
        service=settings.SERVICE_NAME,
        environment=settings.environment,
        default_timezone=settings.ANALYTICS_DEFAULT_TIMEZONE,
    )
    await db_pool.initialize()
    try:
        yield
    finally:
        logger.info("Analytics service stopping")
        await db_pool.close()


app = FastAPI(
    title="EduConnect Analytics",
    description="Contact analytics and PDF summaries for the EduConnect teacher dashboard",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(analytics_router)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag every log line of a request with its id and log the outcome."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    clear_request_context()
    bind_request_context(request_id=request_id)

    started = time.perf_counter()
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id

    logger.info(
        "HTTP request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("educonnect.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
