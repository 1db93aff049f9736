"""Shared HTTP plumbing for third-party data providers.

Every provider call goes through ``ProviderClient._request``:

1. Transport errors and 5xx responses are retried with exponential backoff
   (tenacity).
2. Whatever still fails is raised as ``ProviderUnavailableError``.

Public provider methods catch that error, log it with structured fields and
return an empty or fallback payload, so nothing past the integration
boundary ever sees a provider exception.
"""

from __future__ import annotations

from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from app.core.config import settings
from app.core.exceptions import ProviderUnavailableError
from app.core.logging import get_logger, log_fields


logger = get_logger("data_providers")


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code >= 500


class ProviderClient:
    """Base class for provider wrappers holding one pooled ``httpx.AsyncClient``."""

    name = "provider"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float | None = None,
        retries: int | None = None,
    ):
        self._client = client
        self._timeout = float(timeout if timeout is not None else settings.external_api_timeout)
        self._retries = retries if retries is not None else settings.external_api_retries

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout, connect=10.0),
                follow_redirects=True,
            )
        return self._client

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        client = self._get_client()
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._retries),
                wait=wait_exponential_jitter(initial=0.5, max=5.0, jitter=0.5),
                retry=retry_if_exception(_is_retryable),
                reraise=True,
            ):
                with attempt:
                    response = await client.request(method, url, **kwargs)
                    if response.status_code >= 500:
                        response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderUnavailableError(self.name, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ProviderUnavailableError(self.name, f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise ProviderUnavailableError(self.name, f"HTTP {response.status_code}")
        return response

    async def _get_json(self, url: str, **kwargs: Any) -> Any:
        response = await self._request("GET", url, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise ProviderUnavailableError(self.name, "malformed JSON body") from e

    def _log_unavailable(self, error: ProviderUnavailableError, **fields: Any) -> None:
        logger.warning(
            f"{self.name} unavailable: {error.reason}",
            extra=log_fields(provider=self.name, reason=error.reason, **fields),
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
