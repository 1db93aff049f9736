"""Thin client around the Hugging Face Inference API for text generation."""

from __future__ import annotations

from typing import Any

import httpx

from app.core.config import settings
from app.core.exceptions import ProviderUnavailableError

from .base import ProviderClient


class HuggingFaceClient(ProviderClient):
    name = "huggingface"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        api_token: str | None = None,
        model_id: str | None = None,
        base_url: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(client, **kwargs)
        self._api_token = api_token if api_token is not None else settings.huggingface_api_token
        self._model_id = model_id or settings.huggingface_model_id
        self._base_url = (base_url or settings.huggingface_base_url).rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self._api_token and self._api_token.strip())

    async def generate(self, prompt: str) -> str | None:
        """Raw response body for ``prompt``, or None when unconfigured or failing."""
        if not self.is_configured:
            return None

        body = {
            "inputs": prompt,
            "parameters": {"max_new_tokens": 160, "temperature": 0.7},
        }
        try:
            response = await self._request(
                "POST",
                f"{self._base_url}/models/{self._model_id}",
                json=body,
                headers={"Authorization": f"Bearer {self._api_token}"},
            )
        except ProviderUnavailableError as e:
            self._log_unavailable(e, model=self._model_id)
            return None
        return response.text
