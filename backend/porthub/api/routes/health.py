"""Health & Readiness Probes — process liveness, and whether PortHub can run job transitions.

Invariants:
    - GET /api/v1/health/ is 200 whenever the process is up; it reports open feedback windows
    - GET /api/v1/health/ready is 503 unless the database answers AND the lifecycle
      engine is wired onto app.state (a transition needs both)
    - Notification settings are reported but never block readiness: deliveries
      are best-effort, transitions commit without them
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from porthub.config import Settings, get_settings
from porthub.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check(request: Request):
    engine = getattr(request.app.state, "engine", None)
    return {
        "status": "healthy",
        "service": "porthub-api",
        "open_feedback_windows": len(engine.pending_feedback()) if engine else 0,
    }


@router.get("/ready")
async def readiness_check(request: Request, settings: Settings = Depends(get_settings)):
    manager = database.db_manager
    checks = {
        "database": "healthy" if manager and await manager.health_check() else "unavailable",
        "lifecycle_engine": (
            "wired" if getattr(request.app.state, "engine", None) else "missing"
        ),
        "notification_relay": settings.notification_relay_url or "unset",
        "dispute_escalation": (
            "ops_channel" if settings.ops_channel_identity else "log_only"
        ),
    }
    if checks["database"] != "healthy" or checks["lifecycle_engine"] != "wired":
        logger.warning("Readiness check failed", extra={"checks": checks})
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
