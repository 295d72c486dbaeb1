"""Liveness and readiness probes."""

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from apoio.db.base import get_session_factory

logger = structlog.get_logger(__name__)

router = APIRouter()

SERVICE_NAME = "apoio-backend"


@router.get("/health")
async def health_check(request: Request):
    """503 while draining after SIGTERM, so the balancer stops sending donors here."""
    if getattr(request.app.state, "shutting_down", False):
        return JSONResponse(status_code=503, content={"status": "shutting_down", "service": SERVICE_NAME})
    return {"status": "healthy", "service": SERVICE_NAME}


@router.get("/ready")
async def readiness_check():
    """Ready once the donations database answers."""
    checks = {"database": False}
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception as exc:
        logger.error("readiness_database_failed", error=str(exc))

    ready = all(checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={"status": "ready" if ready else "degraded", "checks": checks},
    )
