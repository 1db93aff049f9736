"""Resolve user-facing tickers to CoinGecko asset ids."""

from __future__ import annotations

from collections.abc import Iterable


SUPPORTED_TICKERS: tuple[str, ...] = (
    "BTC",
    "ETH",
    "USDT",
    "USDC",
    "BNB",
    "XRP",
    "SOL",
    "DOT",
    "ADA",
    "DOGE",
)

TICKER_TO_COINGECKO: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "USDT": "tether",
    "USDC": "usd-coin",
    "BNB": "binancecoin",
    "XRP": "ripple",
    "SOL": "solana",
    "DOT": "polkadot",
    "ADA": "cardano",
    "DOGE": "dogecoin",
}


def to_provider_id(ticker: str | None) -> str | None:
    """Translate a ticker (case-insensitive) to its CoinGecko id, or None if unknown."""
    if not ticker:
        return None
    return TICKER_TO_COINGECKO.get(ticker.strip().upper())


def supported_tickers() -> list[str]:
    return list(SUPPORTED_TICKERS)


def supported_ids() -> list[str]:
    """CoinGecko ids for every supported ticker, in curated order."""
    ids = (to_provider_id(ticker) for ticker in SUPPORTED_TICKERS)
    return [asset_id for asset_id in ids if asset_id is not None]


def resolve_ids(tickers: Iterable[str] | None) -> list[str]:
    """Map tickers to ids, dropping unknown ones and duplicates, keeping order."""
    resolved: list[str] = []
    for ticker in tickers or ():
        asset_id = to_provider_id(ticker)
        if asset_id is not None and asset_id not in resolved:
            resolved.append(asset_id)
    return resolved
