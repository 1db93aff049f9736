"""CoinGecko simple-price client."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx

from app.core.config import settings
from app.core.exceptions import ProviderUnavailableError

from .base import ProviderClient


class CoinGeckoClient(ProviderClient):
    """Batched price lookups against ``/simple/price``."""

    name = "coingecko"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(client, **kwargs)
        self._base_url = (base_url or settings.coingecko_base_url).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.coingecko_api_key

    async def fetch_simple_prices(
        self, asset_ids: Sequence[str], vs_currency: str = "usd"
    ) -> dict[str, Any]:
        """
        Price data for each asset id against one quote currency.

        Returns:
            Mapping asset id -> price data (e.g. ``{"bitcoin": {"usd": 64000}}``),
            or an empty dict when the provider is unavailable.
        """
        if not asset_ids:
            return {}

        params = {"ids": ",".join(asset_ids), "vs_currencies": vs_currency}
        if self._api_key:
            params = {"x_cg_demo_api_key": self._api_key, **params}

        try:
            body = await self._get_json(f"{self._base_url}/simple/price", params=params)
        except ProviderUnavailableError as e:
            self._log_unavailable(e, assets=len(asset_ids))
            return {}

        if not isinstance(body, dict):
            self._log_unavailable(
                ProviderUnavailableError(self.name, "unexpected response shape"),
                assets=len(asset_ids),
            )
            return {}
        return body
