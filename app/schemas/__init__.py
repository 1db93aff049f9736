"""Pydantic schemas for API request/response validation."""

from .common import (
    ErrorResponse,
    HealthResponse,
)
from .dashboard import (
    DashboardSnapshotResponse,
    FeedbackHistoryResponse,
    FeedbackRequest,
    FeedbackResponse,
)
from .preferences import (
    PreferencesOptionsResponse,
    PreferencesRequest,
    PreferencesResponse,
)


__all__ = [
    "DashboardSnapshotResponse",
    "ErrorResponse",
    "FeedbackHistoryResponse",
    "FeedbackRequest",
    "FeedbackResponse",
    "HealthResponse",
    "PreferencesOptionsResponse",
    "PreferencesRequest",
    "PreferencesResponse",
]
