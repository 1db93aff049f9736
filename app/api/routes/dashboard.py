"""Dashboard API routes.

Today's personalized snapshot and per-section feedback.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import require_user
from app.core.security import TokenData
from app.domain.content import DashboardSection
from app.schemas.dashboard import (
    DashboardSnapshotResponse,
    FeedbackHistoryResponse,
    FeedbackRequest,
    FeedbackResponse,
)
from app.services import dashboard as dashboard_service


router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/today", response_model=DashboardSnapshotResponse)
async def get_today(
    refresh: bool = Query(False, description="Recompose sections from the latest cached content"),
    user: TokenData = Depends(require_user),
) -> DashboardSnapshotResponse:
    """Get (or create) today's dashboard snapshot for the current user."""
    return await dashboard_service.compose_or_get(user.sub, force_refresh=refresh)


@router.post(
    "/{snapshot_id}/feedback",
    response_model=FeedbackResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_feedback(
    snapshot_id: int,
    payload: FeedbackRequest,
    user: TokenData = Depends(require_user),
) -> FeedbackResponse:
    """Vote on a snapshot section. Earlier votes are kept as history."""
    return await dashboard_service.record_vote(
        snapshot_id,
        payload.section,
        payload.vote,
        payload.content_id,
        username=user.sub,
    )


@router.get("/{snapshot_id}/feedback", response_model=FeedbackHistoryResponse)
async def get_feedback_history(
    snapshot_id: int,
    section: DashboardSection | None = Query(None, description="Only this section"),
    user: TokenData = Depends(require_user),
) -> FeedbackHistoryResponse:
    """Vote history for one of the current user's snapshots."""
    return await dashboard_service.feedback_history(snapshot_id, section, username=user.sub)
