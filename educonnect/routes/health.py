# educonnect/routes/health.py
"""
Liveness and readiness probes.

/readyz checks the database pool and the settings the analytics endpoints
depend on. It always answers 200; ``overall_ok`` carries the verdict.
"""

import time
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter

from educonnect.config import settings
from educonnect.db.pool import db_health_check
from educonnect.infrastructure.observability.logging import log_health_check

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz():
    return {"status": "ok", "service": settings.SERVICE_NAME}


async def _database_check() -> dict[str, Any]:
    started = time.perf_counter()
    try:
        db_health = await db_health_check()
    except Exception as e:
        check = {"ok": False, "error": f"{type(e).__name__}: {e}"}
    else:
        check = {"ok": bool(db_health.get("healthy", False))}
        pool_stats = db_health.get("pool_stats")
        if pool_stats:
            check["pool_size"] = pool_stats.get("pool_size", 0)
            check["pool_available"] = pool_stats.get("pool_available", 0)
        if not check["ok"]:
            check["error"] = db_health.get("error", "Database unhealthy")

    check["latency_ms"] = round((time.perf_counter() - started) * 1000, 1)
    log_health_check("database", check["ok"], check["latency_ms"], check.get("error"))
    return check


def _configuration_check() -> dict[str, Any]:
    issues = []
    if not settings.SUPABASE_DB_URL:
        issues.append("SUPABASE_DB_URL not set")
    if not settings.SUPABASE_URL:
        issues.append("SUPABASE_URL not set")
    try:
        ZoneInfo(settings.ANALYTICS_DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        issues.append(f"Unknown ANALYTICS_DEFAULT_TIMEZONE: {settings.ANALYTICS_DEFAULT_TIMEZONE}")

    return {
        "ok": not issues,
        "issues": issues or None,
        "environment": settings.environment,
        "default_timezone": settings.ANALYTICS_DEFAULT_TIMEZONE,
    }


@router.get("/readyz")
async def readyz():
    checks = {
        "database": await _database_check(),
        "configuration": _configuration_check(),
    }
    return {
        "overall_ok": all(check["ok"] for check in checks.values()),
        "checks": checks,
        "timestamp": time.time(),
    }


@router.get("/health/database")
async def database_health():
    """Raw pool statistics for operators."""
    return await db_health_check()
