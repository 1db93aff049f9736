"""Daily content refresh.

Fetches prices, news and a meme once for every supported asset, generates
an AI insight per asset from that content and stores everything in the
content cache. The store's write policy makes the pass idempotent per day,
so it is safe to run at startup, on the cron schedule and on demand.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Awaitable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from app.core import assets as asset_resolver
from app.core.clock import Clock, get_clock, utc_day
from app.core.config import settings
from app.core.logging import get_logger, log_fields
from app.domain.content import ContentKind
from app.repositories import content_orm as content_repo
from app.repositories.content_orm import PutOutcome
from app.services.ai_insight import AIInsightService
from app.services.data_providers import CoinGeckoClient, CryptoPanicClient, MemeClient


logger = get_logger("services.content_refresh")

T = TypeVar("T")


@dataclass
class RefreshReport:
    """Outcome of one refresh pass."""

    day: date
    assets: list[str] = field(default_factory=list)
    outcomes: dict[str, Counter] = field(default_factory=dict)
    failed_writes: int = 0
    skipped: bool = False

    def record(self, kind: ContentKind, outcome: PutOutcome) -> None:
        self.outcomes.setdefault(kind.value, Counter())[outcome.value] += 1

    def count(self, kind: ContentKind, outcome: PutOutcome) -> int:
        return self.outcomes.get(kind.value, Counter())[outcome.value]

    def summary(self) -> str:
        if self.skipped:
            return f"Refresh for {self.day.isoformat()} skipped: no supported assets"
        parts = [
            f"{kind}=" + ",".join(f"{name}:{n}" for name, n in sorted(counts.items()))
            for kind, counts in sorted(self.outcomes.items())
        ]
        text = f"Refreshed {len(self.assets)} assets for {self.day.isoformat()}"
        if parts:
            text += " (" + "; ".join(parts) + ")"
        if self.failed_writes:
            text += f", {self.failed_writes} failed writes"
        return text

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "assets": list(self.assets),
            "outcomes": {kind: dict(counts) for kind, counts in self.outcomes.items()},
            "failed_writes": self.failed_writes,
            "skipped": self.skipped,
        }


async def _guarded(awaitable: Awaitable[T], default: T, **fields: Any) -> T:
    """Await a provider call; unexpected failures become ``default``."""
    try:
        return await awaitable
    except Exception:
        logger.warning("Provider call failed", exc_info=True, extra=log_fields(**fields))
        return default


async def _store(
    report: RefreshReport,
    kind: ContentKind,
    asset: str,
    payload: Any,
    now: datetime,
) -> None:
    try:
        outcome = await content_repo.put(kind, asset, payload, now)
    except SQLAlchemyError:
        report.failed_writes += 1
        logger.exception(
            "Failed to store content",
            extra=log_fields(kind=kind.value, asset=asset),
        )
        return
    report.record(kind, outcome)


async def refresh_daily_content(
    clock: Clock | None = None,
    *,
    prices_client: CoinGeckoClient | None = None,
    news_client: CryptoPanicClient | None = None,
    meme_client: MemeClient | None = None,
    insight_service: AIInsightService | None = None,
    vs_currency: str | None = None,
) -> RefreshReport:
    """
    Fetch and cache today's content for every supported asset.

    Collaborators not passed in are created here and closed afterwards.

    Returns:
        RefreshReport with per-kind write outcomes
    """
    clock = clock or get_clock()
    now = clock.now()
    report = RefreshReport(day=utc_day(clock))

    asset_ids = asset_resolver.supported_ids()
    if not asset_ids:
        logger.warning("No supported asset ids found; skipping daily content refresh")
        report.skipped = True
        return report
    report.assets = list(asset_ids)

    owned: list[Any] = []
    if prices_client is None:
        prices_client = CoinGeckoClient()
        owned.append(prices_client)
    if news_client is None:
        news_client = CryptoPanicClient()
        owned.append(news_client)
    if meme_client is None:
        meme_client = MemeClient(clock=clock)
        owned.append(meme_client)
    if insight_service is None:
        insight_service = AIInsightService(clock=clock)
        owned.append(insight_service)

    try:
        prices, news, meme = await asyncio.gather(
            _guarded(
                prices_client.fetch_simple_prices(asset_ids, vs_currency or settings.price_vs_currency),
                {},
                provider="coingecko",
            ),
            _guarded(news_client.fetch_latest(), {}, provider="cryptopanic"),
            _guarded(meme_client.get_meme(), None, provider="memes"),
        )

        for asset_id in asset_ids:
            await _store(report, ContentKind.PRICE, asset_id, prices.get(asset_id), now)
            await _store(report, ContentKind.NEWS, asset_id, news, now)
            await _store(report, ContentKind.MEME, asset_id, meme, now)

        insights = await asyncio.gather(
            *(
                _guarded(
                    insight_service.generate_for_asset(
                        asset_id,
                        {"price": prices.get(asset_id), "news": news, "meme": meme},
                    ),
                    None,
                    provider="huggingface",
                    asset=asset_id,
                )
                for asset_id in asset_ids
            )
        )
        for asset_id, insight in zip(asset_ids, insights):
            await _store(report, ContentKind.AI_INSIGHT, asset_id, insight, now)
    finally:
        for client in owned:
            await client.aclose()

    logger.info(report.summary(), extra=log_fields(**report.to_dict()))
    return report


async def preload_on_startup(clock: Clock | None = None) -> RefreshReport | None:
    """Run the refresh once at startup; failures are logged, never raised."""
    try:
        return await refresh_daily_content(clock)
    except Exception:
        logger.warning("Failed to refresh content on startup", exc_info=True)
        return None
