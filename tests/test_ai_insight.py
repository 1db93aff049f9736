"""Tests for AI insight generation and model output cleanup."""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.services.ai_insight import (
    FALLBACK_IDEAS,
    AIInsightService,
    extract_text,
    pick_fallback,
    snippet,
)
from app.services.text_cleaner import clean_ai_text, strip_prompt_echo, truncate_summary


def _service(raw: str | None, clock) -> tuple[AIInsightService, MagicMock]:
    client = MagicMock()
    client.generate = AsyncMock(return_value=raw)
    return AIInsightService(client, clock=clock), client


class TestExtractText:
    """Tests for reading inference responses."""

    def test_generated_text_list(self):
        assert extract_text('[{"generated_text": "  Calm markets. "}]') == "Calm markets."

    def test_generated_text_object(self):
        assert extract_text('{"generated_text": "Volatile"}') == "Volatile"

    def test_plain_text(self):
        assert extract_text("  just words \n") == "just words"

    def test_invalid_json_is_returned_trimmed(self):
        assert extract_text("[not json") == "[not json"

    @pytest.mark.parametrize(
        "raw",
        [None, "", "   ", '{"error": "Model is loading"}', "[]", '[{"generated_text": ""}]'],
    )
    def test_nothing_usable(self, raw):
        assert extract_text(raw) is None


class TestHelpers:
    """Tests for prompt snippets and fallback selection."""

    def test_snippet_truncates(self):
        text = snippet({"k": "x" * 500}, limit=20)
        assert len(text) == 23
        assert text.endswith("...")

    def test_snippet_of_none(self):
        assert snippet(None) == ""

    def test_pick_fallback_is_deterministic(self):
        day = date(2026, 10, 19)
        first = pick_fallback("HODLER", "bitcoin", day)

        assert first == pick_fallback("HODLER", "bitcoin", day)
        assert first.startswith("HODLER note on bitcoin: ")
        assert first.split(": ", 1)[1] in FALLBACK_IDEAS


class TestAIInsightService:
    """Tests for the insight service with a mocked model client."""

    @pytest.mark.asyncio
    async def test_generate_for_asset(self, clock):
        service, client = _service('[{"generated_text": "BTC is \u201cranging\u201d\u2014watch support."}]', clock)

        insight = await service.generate_for_asset(
            "bitcoin", {"price": {"usd": 64000}, "news": {"results": []}, "meme": None}
        )

        assert insight == {
            "date": "2026-10-19",
            "headline": "Daily insight for bitcoin",
            "summary": 'BTC is "ranging"-watch support.',
            "assetFocus": "bitcoin",
            "source": "huggingface",
        }
        prompt = client.generate.await_args.args[0]
        assert "bitcoin" in prompt
        assert '{"usd":64000}' in prompt

    @pytest.mark.asyncio
    async def test_prompt_echo_is_removed(self, clock):
        client = MagicMock()

        async def echo(prompt: str) -> str:
            return prompt + "Accumulation continues."

        client.generate = echo
        service = AIInsightService(client, clock=clock)

        insight = await service.generate_for_asset("ethereum", {})

        assert insight["summary"] == "Accumulation continues."

    @pytest.mark.asyncio
    async def test_fallback_when_model_unavailable(self, clock):
        service, _ = _service(None, clock)

        insight = await service.generate_for_asset("solana", {})

        assert insight["source"] == "fallback"
        assert insight["summary"] == pick_fallback("HODLER", "solana", date(2026, 10, 19))

    @pytest.mark.asyncio
    async def test_fallback_when_model_returns_error_body(self, clock):
        service, _ = _service('{"error": "Model is currently loading"}', clock)

        insight = await service.generate_for_asset("bitcoin", {})

        assert insight["source"] == "fallback"

    @pytest.mark.asyncio
    async def test_generate_for_preferences(self, clock):
        service, client = _service("Stay patient.", clock)

        insight = await service.generate_for_preferences(["ETH", "SOL"], "DAY_TRADER")

        assert insight["headline"] == "Daily insight for a DAY_TRADER"
        assert insight["assetFocus"] == "ethereum"
        assert insight["summary"] == "Stay patient."
        prompt = client.generate.await_args.args[0]
        assert "ethereum, solana" in prompt
        assert "DAY_TRADER" in prompt

    @pytest.mark.asyncio
    async def test_generate_for_preferences_defaults(self, clock):
        service, _ = _service(None, clock)

        insight = await service.generate_for_preferences()

        assert insight["assetFocus"] == "bitcoin"
        assert insight["headline"] == "Daily insight for a HODLER"
        assert insight["summary"].startswith("HODLER note on bitcoin: ")


class TestTextCleaner:
    """Tests for model output cleanup."""

    def test_clean_ai_text(self):
        assert clean_ai_text("It\u2019s  \u201cfine\u201d\u2026\n\nreally") == "It's \"fine\"... really"
        assert clean_ai_text("a -- b") == "a - b"
        assert clean_ai_text(None) is None

    def test_strip_prompt_echo(self):
        assert strip_prompt_echo("PROMPT answer", "PROMPT") == "answer"
        assert strip_prompt_echo("answer only", "PROMPT") == "answer only"

    def test_truncate_prefers_sentence_end(self):
        text = "The market opened quietly and stayed in a narrow range all morning. " + "word " * 200
        assert truncate_summary(text, max_chars=100) == "The market opened quietly and stayed in a narrow range all morning."

    def test_truncate_on_word_boundary(self):
        text = "word " * 200
        result = truncate_summary(text, max_chars=50)
        assert len(result) <= 50
        assert result.endswith("...")

    def test_short_text_unchanged(self):
        assert truncate_summary("short", max_chars=50) == "short"
