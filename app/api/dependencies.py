"""API dependencies for authentication and provider clients."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Cookie, Depends, Header

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.security import TokenData, decode_access_token
from app.services.ai_insight import AIInsightService
from app.services.data_providers import CoinGeckoClient, CryptoPanicClient


__all__ = [
    "get_coingecko_client",
    "get_cryptopanic_client",
    "get_insight_service",
    "require_admin",
    "require_user",
]


def _extract_token(
    authorization: str | None = Header(default=None),
    session: str | None = Cookie(default=None),
) -> str | None:
    """Extract JWT token from Authorization header or session cookie."""
    # Prefer Authorization header (for API clients)
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token:
            return token

    # Fall back to session cookie (for browser clients)
    if session:
        return session

    return None


async def require_user(
    authorization: str | None = Header(default=None),
    session: str | None = Cookie(default=None),
) -> TokenData:
    """
    Require authenticated user.

    Raises AuthenticationError if the token is missing, invalid or expired.
    """
    token = _extract_token(authorization, session)
    if not token:
        raise AuthenticationError(
            message="Authentication required",
            error_code="MISSING_CREDENTIALS",
        )
    return decode_access_token(token)


async def require_admin(
    user: TokenData = Depends(require_user),
) -> TokenData:
    """
    Require admin user.

    Raises AuthorizationError if not admin.
    """
    if not user.is_admin:
        raise AuthorizationError(
            message="Admin privileges required",
            error_code="ADMIN_REQUIRED",
        )
    return user


# =============================================================================
# PROVIDER DEPENDENCIES (request-scoped, overridable in tests)
# =============================================================================


async def get_coingecko_client() -> AsyncIterator[CoinGeckoClient]:
    client = CoinGeckoClient()
    try:
        yield client
    finally:
        await client.aclose()


async def get_cryptopanic_client() -> AsyncIterator[CryptoPanicClient]:
    client = CryptoPanicClient()
    try:
        yield client
    finally:
        await client.aclose()


async def get_insight_service() -> AsyncIterator[AIInsightService]:
    service = AIInsightService()
    try:
        yield service
    finally:
        await service.aclose()
