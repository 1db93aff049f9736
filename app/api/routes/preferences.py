"""Onboarding preference routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from app.api.dependencies import require_user
from app.core.security import TokenData
from app.schemas.preferences import (
    PreferencesOptionsResponse,
    PreferencesRequest,
    PreferencesResponse,
)
from app.services import preferences as preferences_service


router = APIRouter(prefix="/preferences", tags=["Preferences"])


@router.get("/options", response_model=PreferencesOptionsResponse)
async def get_options() -> PreferencesOptionsResponse:
    """Allowed tickers, investor types and content categories."""
    return preferences_service.get_options()


@router.get(
    "",
    response_model=PreferencesResponse,
    responses={204: {"description": "Onboarding not completed"}},
)
async def get_my_preferences(
    user: TokenData = Depends(require_user),
):
    """Current user's preferences; 204 until onboarding is completed."""
    prefs = await preferences_service.get_for_user(user.sub)
    if prefs is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return prefs


@router.put("", response_model=PreferencesResponse)
async def save_my_preferences(
    payload: PreferencesRequest,
    user: TokenData = Depends(require_user),
) -> PreferencesResponse:
    """Save onboarding answers, creating the profile on first save."""
    return await preferences_service.save_for_user(user.sub, payload)
