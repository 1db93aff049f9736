"""Dashboard schemas for API validation.

Usage:
    from app.schemas.dashboard import (
        DashboardSnapshotResponse,
        FeedbackRequest,
        FeedbackResponse,
    )
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.content import DashboardSection


# =============================================================================
# SNAPSHOT SCHEMAS
# =============================================================================


class DashboardSnapshotResponse(BaseModel):
    """Today's personalized dashboard.

    Each section maps asset id -> ``{"contentId": int, "data": {...}}``.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int
    snapshot_date: date = Field(..., alias="snapshotDate")
    market_news: dict[str, Any] = Field(default_factory=dict, alias="marketNews")
    coin_prices: dict[str, Any] = Field(default_factory=dict, alias="coinPrices")
    ai_insight: dict[str, Any] = Field(default_factory=dict, alias="aiInsight")
    meme: dict[str, Any] = Field(default_factory=dict)
    votes: dict[DashboardSection, int] = Field(
        default_factory=dict, description="Current vote per section (unvoted sections omitted)"
    )


# =============================================================================
# FEEDBACK SCHEMAS
# =============================================================================


class FeedbackRequest(BaseModel):
    """Vote on one section of a snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    section: DashboardSection
    vote: int = Field(..., description="-1, 0 or 1")
    content_id: int | None = Field(None, alias="contentId")


class FeedbackResponse(BaseModel):
    """A stored vote."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    snapshot_id: int = Field(..., alias="snapshotId")
    content_id: int | None = Field(None, alias="contentId")
    section: DashboardSection
    vote: int
    created_at: datetime = Field(..., alias="createdAt")


class FeedbackHistoryResponse(BaseModel):
    """Full vote history for a snapshot, oldest first."""

    model_config = ConfigDict(populate_by_name=True)

    snapshot_id: int = Field(..., alias="snapshotId")
    current: dict[DashboardSection, int] = Field(default_factory=dict)
    entries: list[FeedbackResponse] = Field(default_factory=list)
