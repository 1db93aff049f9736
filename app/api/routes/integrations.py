"""Pass-through endpoints for the external data providers."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import (
    get_coingecko_client,
    get_cryptopanic_client,
    get_insight_service,
    require_user,
)
from app.core.security import TokenData
from app.services import preferences as preferences_service
from app.services.ai_insight import AIInsightService
from app.services.data_providers import CoinGeckoClient, CryptoPanicClient


router = APIRouter(prefix="/integrations", tags=["Integrations"])


@router.get("/news")
async def latest_news(
    kind: str | None = Query(None, description="Filter by kind: news or media"),
    client: CryptoPanicClient = Depends(get_cryptopanic_client),
) -> dict[str, Any]:
    """Latest CryptoPanic posts (an ``error`` body when the provider is down)."""
    return await client.fetch_latest(kind)


@router.get("/prices")
async def simple_prices(
    ids: str = Query(..., description="Comma-separated CoinGecko ids"),
    vs_currency: str = Query("usd", description="Quote currency"),
    client: CoinGeckoClient = Depends(get_coingecko_client),
) -> dict[str, Any]:
    """Simple CoinGecko prices (empty when the provider is down)."""
    coin_ids = [part.strip() for part in ids.split(",") if part.strip()]
    return await client.fetch_simple_prices(coin_ids, vs_currency)


@router.get("/insight")
async def persona_insight(
    user: TokenData = Depends(require_user),
    service: AIInsightService = Depends(get_insight_service),
) -> dict[str, Any]:
    """Fresh, uncached insight for the current user's persona and assets."""
    prefs = await preferences_service.get_for_user(user.sub)
    if prefs is None:
        return await service.generate_for_preferences()
    return await service.generate_for_preferences(prefs.crypto_assets, prefs.investor_type)
