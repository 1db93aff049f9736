"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from app.core.clock import get_clock
from app.core.config import settings
from app.core.logging import get_logger, log_fields
from app.database.connection import db_healthcheck
from app.schemas.common import HealthResponse


router = APIRouter(prefix="/health")

logger = get_logger("health")


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check",
    description="Report whether the database answers. Always 200; read `status`.",
)
async def health_check() -> HealthResponse:
    checks = {"database": await db_healthcheck()}
    healthy = all(checks.values())
    if not healthy:
        failing = [name for name, ok in checks.items() if not ok]
        logger.warning("Health check failing", extra=log_fields(failing=failing))

    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=settings.app_version,
        timestamp=get_clock().now(),
        checks=checks,
    )


@router.get("/live", summary="Liveness check")
async def liveness_check() -> dict:
    """200 while the process can serve requests; touches no dependencies."""
    return {"status": "alive"}
