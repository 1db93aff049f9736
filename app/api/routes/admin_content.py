"""Admin routes for the content cache."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from app.api.dependencies import require_admin
from app.core.logging import get_logger
from app.core.security import TokenData
from app.services.content_refresh import refresh_daily_content


router = APIRouter(prefix="/admin/content", tags=["Admin"])

logger = get_logger("api.admin_content")


@router.post("/refresh")
async def refresh_content(
    admin: TokenData = Depends(require_admin),
) -> dict[str, Any]:
    """Run the daily refresh now. Idempotent for the current day."""
    logger.info(f"Content refresh triggered by {admin.sub}")
    report = await refresh_daily_content()
    return {"message": report.summary(), **report.to_dict()}
