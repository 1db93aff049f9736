"""AI insight generation.

Builds a short prompt from already-fetched content (or from a user's
persona), asks the Hugging Face model for a summary and falls back to a
canned blurb when the model is unavailable or returns nothing usable.

Usage:
    from app.services.ai_insight import AIInsightService

    service = AIInsightService()
    insight = await service.generate_for_asset("bitcoin", {"price": {...}, "news": {...}})
"""

from __future__ import annotations

import json
import zlib
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from app.core.assets import to_provider_id
from app.core.clock import Clock, get_clock, utc_day
from app.core.logging import get_logger, log_fields
from app.domain.content import AiInsightPayload, InvestorType
from app.services.data_providers import HuggingFaceClient
from app.services.text_cleaner import clean_ai_text, strip_prompt_echo, truncate_summary


logger = get_logger("services.ai_insight")

DEFAULT_PERSONA = InvestorType.HODLER.value
DEFAULT_ASSET = "bitcoin"
SNIPPET_LIMIT = 240

FALLBACK_IDEAS: tuple[str, ...] = (
    "Watch intraday volatility; momentum above the 20-day trend looks constructive.",
    "Range-trading regime; consider staggered buys near support.",
    "High funding rates suggest caution on leveraged longs.",
    "On-chain activity is rising; keep an eye on network fees.",
    "Liquidity pockets sit just above recent highs; potential squeeze fuel.",
)

PERSONA_PROMPT = """You are a concise crypto assistant. Provide one short market insight (max 80 words).
Persona: {persona}
Focus assets: {assets}
Tone: practical, cautious, no investment advice language, no emojis.
Output only the insight sentence(s), no preamble.
"""

ASSET_PROMPT = """You are a concise crypto assistant. Provide one short market insight (max 80 words) for {asset}.
Recent price data: {price}
Recent news: {news}
Sentiment/meme: {meme}
Tone: practical, cautious, no investment advice language, no emojis.
Output only the insight sentence(s), no preamble.
"""


def extract_text(raw: str | None) -> str | None:
    """
    Pull the generated text out of an inference response body.

    The API answers either with plain text or with JSON such as
    ``[{"generated_text": "..."}]``. JSON without a ``generated_text`` field
    (for example an ``{"error": ...}`` body) yields None.
    """
    if raw is None or not raw.strip():
        return None
    trimmed = raw.strip()

    if trimmed[0] not in "[{":
        return trimmed

    try:
        body = json.loads(trimmed)
    except ValueError:
        return trimmed

    if isinstance(body, list):
        body = body[0] if body else None
    if isinstance(body, dict):
        text = body.get("generated_text")
        if isinstance(text, str) and text.strip():
            return text.strip()
    return None


def snippet(value: Any, limit: int = SNIPPET_LIMIT) -> str:
    """Compact one-line rendering of a payload for a prompt."""
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        text = json.dumps(value, default=str, separators=(",", ":"))
    else:
        text = str(value)
    return text if len(text) <= limit else text[:limit] + "..."


def pick_fallback(persona: str, asset: str, day: date) -> str:
    """Canned insight, stable for a given persona, asset and day."""
    index = (day.toordinal() + zlib.crc32(asset.encode("utf-8"))) % len(FALLBACK_IDEAS)
    return f"{persona} note on {asset}: {FALLBACK_IDEAS[index]}"


class AIInsightService:
    """Generates ``{date, headline, summary, assetFocus, source}`` insights."""

    def __init__(
        self,
        client: HuggingFaceClient | None = None,
        *,
        clock: Clock | None = None,
    ):
        self._client = client or HuggingFaceClient()
        self._clock = clock or get_clock()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def generate_for_asset(self, asset_id: str, context: Mapping[str, Any]) -> dict[str, Any]:
        """Insight for one asset from the price, news and meme payloads already fetched."""
        prompt = ASSET_PROMPT.format(
            asset=asset_id,
            price=snippet(context.get("price")),
            news=snippet(context.get("news")),
            meme=snippet(context.get("meme")),
        )
        summary, source = await self._summarize(prompt, DEFAULT_PERSONA, asset_id)
        return AiInsightPayload(
            date=utc_day(self._clock).isoformat(),
            headline=f"Daily insight for {asset_id}",
            summary=summary,
            asset_focus=asset_id,
            source=source,
        ).to_payload()

    async def generate_for_preferences(
        self,
        crypto_assets: Sequence[str] | None = None,
        investor_type: str | None = None,
    ) -> dict[str, Any]:
        """Persona-oriented insight focused on the user's first asset."""
        assets = [to_provider_id(a) or a for a in crypto_assets or () if a]
        primary = assets[0] if assets else DEFAULT_ASSET
        persona = investor_type or DEFAULT_PERSONA

        prompt = PERSONA_PROMPT.format(
            persona=persona,
            assets=", ".join(assets) if assets else primary,
        )
        summary, source = await self._summarize(prompt, persona, primary)
        return AiInsightPayload(
            date=utc_day(self._clock).isoformat(),
            headline=f"Daily insight for a {persona}",
            summary=summary,
            asset_focus=primary,
            source=source,
        ).to_payload()

    async def _summarize(self, prompt: str, persona: str, asset: str) -> tuple[str, str]:
        raw = await self._client.generate(prompt)
        text = extract_text(raw)
        if text:
            text = clean_ai_text(strip_prompt_echo(text, prompt))
        if text:
            return truncate_summary(text), "huggingface"

        logger.info(
            "Using fallback insight",
            extra=log_fields(asset=asset, persona=persona, model_responded=raw is not None),
        )
        return pick_fallback(persona, asset, utc_day(self._clock)), "fallback"
