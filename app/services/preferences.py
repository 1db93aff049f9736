"""Onboarding preferences: options, read and save."""

from __future__ import annotations

from app.core import assets as asset_resolver
from app.core.exceptions import NotFoundError
from app.core.logging import get_logger, log_fields
from app.database.connection import get_session
from app.database.orm import UserPreferences
from app.domain.content import ContentPreference, InvestorType
from app.repositories import preferences_orm as preferences_repo
from app.schemas.preferences import (
    PreferencesOptionsResponse,
    PreferencesRequest,
    PreferencesResponse,
)


logger = get_logger("services.preferences")


def get_options() -> PreferencesOptionsResponse:
    return PreferencesOptionsResponse(
        crypto_asset_suggestions=asset_resolver.supported_tickers(),
        investor_types=list(InvestorType),
        content_preferences=list(ContentPreference),
    )


def _to_response(prefs: UserPreferences) -> PreferencesResponse:
    return PreferencesResponse(
        crypto_assets=list(prefs.crypto_assets or []),
        investor_type=prefs.investor_type,
        market_news=bool(prefs.market_news),
        charts=bool(prefs.charts),
        social=bool(prefs.social),
        fun=bool(prefs.fun),
        completed=True,
    )


async def get_for_user(username: str) -> PreferencesResponse | None:
    """
    Saved preferences, or None if the user hasn't completed onboarding.

    Raises:
        NotFoundError: if the user has no profile
    """
    async with get_session() as session:
        user = await preferences_repo.get_user_with_session(session, username)
        if user is None:
            raise NotFoundError(message=f"User not found: {username}")
        prefs = await preferences_repo.get_preferences_with_session(session, user.id)
        return _to_response(prefs) if prefs is not None else None


async def save_for_user(username: str, request: PreferencesRequest) -> PreferencesResponse:
    """Create the profile on first save and overwrite the user's preferences."""
    async with get_session() as session:
        user = await preferences_repo.get_or_create_user_with_session(session, username)
        user_id = user.id
        prefs = await preferences_repo.save_preferences_with_session(
            session,
            user_id,
            crypto_assets=request.crypto_assets,
            investor_type=request.investor_type.value if request.investor_type else None,
            market_news=request.market_news,
            charts=request.charts,
            social=request.social,
            fun=request.fun,
        )
        response = _to_response(prefs)
        await session.commit()

    unknown = [t for t in request.crypto_assets if asset_resolver.to_provider_id(t) is None]
    logger.info(
        "Preferences saved",
        extra=log_fields(user_id=user_id, assets=len(request.crypto_assets), unknown_assets=unknown),
    )
    return response
