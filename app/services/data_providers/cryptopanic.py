"""CryptoPanic news client."""

from __future__ import annotations

from typing import Any

import httpx

from app.core.config import settings
from app.core.exceptions import ProviderUnavailableError

from .base import ProviderClient


class CryptoPanicClient(ProviderClient):
    """Latest posts from ``/posts/``."""

    name = "cryptopanic"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(client, **kwargs)
        self._base_url = (base_url or settings.cryptopanic_base_url).rstrip("/")
        self._api_key = api_key if api_key is not None else settings.cryptopanic_api_key

    async def fetch_latest(self, kind: str | None = None) -> dict[str, Any]:
        """
        Latest news posts, optionally filtered by kind ("news" or "media").

        Never raises: failures come back as ``{"error": ..., "details": ...}``.
        """
        # CryptoPanic expects the trailing slash on /posts/
        params: dict[str, str] = {"auth_token": self._api_key}
        if kind:
            params["kind"] = kind

        try:
            body = await self._get_json(f"{self._base_url}/posts/", params=params)
        except ProviderUnavailableError as e:
            self._log_unavailable(e, kind=kind)
            return {"error": "Failed to fetch CryptoPanic posts", "details": e.reason}

        if not isinstance(body, dict):
            return {"error": "Failed to fetch CryptoPanic posts", "details": "unexpected response shape"}
        return body
