"""Tests for the third-party provider clients (mocked HTTP transport)."""

from __future__ import annotations

import json

import httpx
import pytest

from app.domain.content import is_fallback_meme, is_valid_meme
from app.services.data_providers import (
    CoinGeckoClient,
    CryptoPanicClient,
    HuggingFaceClient,
    MemeClient,
)
from app.services.data_providers.memes import FALLBACK_MEMES, extract_reddit_image_url, is_image_url


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestCoinGeckoClient:
    """Tests for batched simple prices."""

    @pytest.mark.asyncio
    async def test_fetch_simple_prices(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"bitcoin": {"usd": 64000}, "ethereum": {"usd": 3100}})

        client = CoinGeckoClient(_client(handler), base_url="https://cg.test/api/v3", api_key="", retries=1)
        prices = await client.fetch_simple_prices(["bitcoin", "ethereum"], "usd")
        await client.aclose()

        assert prices == {"bitcoin": {"usd": 64000}, "ethereum": {"usd": 3100}}
        assert seen["path"] == "/api/v3/simple/price"
        assert seen["params"] == {"ids": "bitcoin,ethereum", "vs_currencies": "usd"}

    @pytest.mark.asyncio
    async def test_api_key_is_sent(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json={})

        client = CoinGeckoClient(_client(handler), api_key="demo-key", retries=1)
        await client.fetch_simple_prices(["bitcoin"])

        assert seen["x_cg_demo_api_key"] == "demo-key"

    @pytest.mark.asyncio
    async def test_empty_ids_skip_the_call(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        client = CoinGeckoClient(_client(handler), retries=1)
        assert await client.fetch_simple_prices([]) == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(429, json={"status": "rate limited"}),
            httpx.Response(200, text="<html>oops</html>"),
            httpx.Response(200, json=["not", "a", "mapping"]),
        ],
    )
    async def test_failures_return_empty(self, response):
        client = CoinGeckoClient(_client(lambda request: response), retries=1)
        assert await client.fetch_simple_prices(["bitcoin"]) == {}

    @pytest.mark.asyncio
    async def test_server_errors_are_retried(self):
        calls = {"n": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            calls["n"] += 1
            if calls["n"] == 1:
                return httpx.Response(502)
            return httpx.Response(200, json={"bitcoin": {"usd": 1}})

        client = CoinGeckoClient(_client(handler), retries=2)
        assert await client.fetch_simple_prices(["bitcoin"]) == {"bitcoin": {"usd": 1}}
        assert calls["n"] == 2

    @pytest.mark.asyncio
    async def test_transport_error_returns_empty(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = CoinGeckoClient(_client(handler), retries=1)
        assert await client.fetch_simple_prices(["bitcoin"]) == {}


class TestCryptoPanicClient:
    """Tests for latest news."""

    @pytest.mark.asyncio
    async def test_fetch_latest_with_kind(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"results": [{"title": "ETF inflows"}]})

        client = CryptoPanicClient(
            _client(handler), base_url="https://cp.test/api/v1", api_key="token", retries=1
        )
        body = await client.fetch_latest("news")

        assert body == {"results": [{"title": "ETF inflows"}]}
        assert seen["path"] == "/api/v1/posts/"
        assert seen["params"] == {"auth_token": "token", "kind": "news"}

    @pytest.mark.asyncio
    async def test_failure_returns_error_payload(self):
        client = CryptoPanicClient(_client(lambda request: httpx.Response(401)), retries=1)

        body = await client.fetch_latest()

        assert body["error"] == "Failed to fetch CryptoPanic posts"
        assert body["details"] == "HTTP 401"


class TestMemeClient:
    """Tests for the meme source chain."""

    @pytest.mark.asyncio
    async def test_meme_api_first(self, clock):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.host == "meme.test"
            return httpx.Response(200, json={"title": "Wen moon", "url": "https://i.redd.it/moon.jpg"})

        client = MemeClient(
            _client(handler), clock=clock, meme_api_url="https://meme.test/gimme", retries=1
        )
        meme = await client.get_meme()

        assert meme == {
            "title": "Wen moon",
            "url": "https://i.redd.it/moon.jpg",
            "servedAt": "2026-10-19T12:00:00+00:00",
            "source": "meme-api",
        }

    @pytest.mark.asyncio
    async def test_reddit_when_meme_api_fails(self, clock):
        reddit_body = {
            "data": {
                "children": [
                    {"data": {"title": "text post", "url_overridden_by_dest": "https://reddit.com/r/x"}},
                    {
                        "data": {
                            "title": "Preview post",
                            "preview": {
                                "images": [{"source": {"url": "https://i.redd.it/a.png?w=1&amp;s=2"}}]
                            },
                        }
                    },
                ]
            }
        }

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "meme.test":
                return httpx.Response(503)
            assert request.headers["User-Agent"]
            return httpx.Response(200, json=reddit_body)

        client = MemeClient(
            _client(handler),
            clock=clock,
            meme_api_url="https://meme.test/gimme",
            reddit_url="https://reddit.test/r/cryptomemes/top.json",
            retries=1,
        )
        meme = await client.get_meme()

        assert meme["source"] == "reddit"
        assert meme["title"] == "Preview post"
        assert meme["url"] == "https://i.redd.it/a.png?w=1&s=2"

    @pytest.mark.asyncio
    async def test_fallback_when_everything_fails(self, clock):
        client = MemeClient(_client(lambda request: httpx.Response(500)), clock=clock, retries=1)

        meme = await client.get_meme()

        # 2026-10-19 is day 292 of the year
        assert meme["source"] == "fallback"
        assert meme["title"] == FALLBACK_MEMES[292 % len(FALLBACK_MEMES)]["title"]
        assert is_fallback_meme(meme)
        assert is_valid_meme(meme)

    @pytest.mark.asyncio
    async def test_non_image_meme_api_result_is_ignored(self, clock):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "meme.test":
                return httpx.Response(200, json={"title": "video", "url": "https://v.redd.it/clip"})
            return httpx.Response(200, json={"data": {"children": []}})

        client = MemeClient(
            _client(handler),
            clock=clock,
            meme_api_url="https://meme.test/gimme",
            reddit_url="https://reddit.test/top.json",
            retries=1,
        )
        meme = await client.get_meme()

        assert meme["source"] == "fallback"

    def test_fallback_rotates_daily(self, clock):
        client = MemeClient(clock=clock)
        today = client.fallback().title
        clock.advance(days=1)
        tomorrow = client.fallback().title

        assert today != tomorrow


class TestMemeHelpers:
    """Tests for image url detection."""

    def test_is_image_url(self):
        assert is_image_url("https://example.com/a.PNG")
        assert is_image_url("https://i.imgur.com/abc")
        assert not is_image_url("https://example.com/page")
        assert not is_image_url(None)

    def test_extract_prefers_direct_link(self):
        post = {
            "url_overridden_by_dest": "https://i.redd.it/direct.gif",
            "thumbnail": "https://b.thumbs.redditmedia.com/t.jpg",
        }
        assert extract_reddit_image_url(post) == "https://i.redd.it/direct.gif"

    def test_extract_thumbnail_last(self):
        post = {"thumbnail": "https://b.thumbs.redditmedia.com/t.jpg"}
        assert extract_reddit_image_url(post) == "https://b.thumbs.redditmedia.com/t.jpg"
        assert extract_reddit_image_url({"thumbnail": "self"}) is None


class TestHuggingFaceClient:
    """Tests for the inference client."""

    @pytest.mark.asyncio
    async def test_unconfigured_returns_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        client = HuggingFaceClient(_client(handler), api_token="", retries=1)

        assert client.is_configured is False
        assert await client.generate("hi") is None

    @pytest.mark.asyncio
    async def test_generate_posts_prompt(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=[{"generated_text": "Calm markets."}])

        client = HuggingFaceClient(
            _client(handler),
            api_token="hf_test",
            model_id="org/model",
            base_url="https://hf.test",
            retries=1,
        )
        raw = await client.generate("Say something")

        assert json.loads(raw) == [{"generated_text": "Calm markets."}]
        assert seen["path"] == "/models/org/model"
        assert seen["auth"] == "Bearer hf_test"
        assert seen["body"]["inputs"] == "Say something"
        assert seen["body"]["parameters"]["max_new_tokens"] == 160

    @pytest.mark.asyncio
    async def test_error_returns_none(self):
        client = HuggingFaceClient(
            _client(lambda request: httpx.Response(503, json={"error": "loading"})),
            api_token="hf_test",
            retries=1,
        )

        assert await client.generate("hi") is None
