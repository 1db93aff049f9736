"""Content domain models.

Kinds of cached content, the shapes we know about, and the rules used to
classify meme payloads.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ContentKind(str, Enum):
    """Category of cached content."""

    PRICE = "PRICE"
    NEWS = "NEWS"
    MEME = "MEME"
    AI_INSIGHT = "AI_INSIGHT"


class DashboardSection(str, Enum):
    """Sections of a daily snapshot that can be voted on."""

    NEWS = "NEWS"
    PRICES = "PRICES"
    MEME = "MEME"
    AI_INSIGHT = "AI_INSIGHT"


class InvestorType(str, Enum):
    """Investor personas offered during onboarding."""

    HODLER = "HODLER"
    DAY_TRADER = "DAY_TRADER"
    NFT_COLLECTOR = "NFT_COLLECTOR"
    DEFI_DGEN = "DEFI_DGEN"
    LONG_TERM_INVESTOR = "LONG_TERM_INVESTOR"


class ContentPreference(str, Enum):
    """Content topics a user can opt into."""

    MARKET_NEWS = "MARKET_NEWS"
    CHARTS = "CHARTS"
    SOCIAL = "SOCIAL"
    FUN = "FUN"


class MemePayload(BaseModel):
    """A meme served by one of the meme sources."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = "Meme"
    url: str
    served_at: str = Field(..., alias="servedAt")
    source: Literal["meme-api", "reddit", "fallback"]

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class AiInsightPayload(BaseModel):
    """Generated commentary for one asset (or one persona)."""

    model_config = ConfigDict(populate_by_name=True)

    date: str
    headline: str
    summary: str
    asset_focus: str = Field(..., alias="assetFocus")
    source: Literal["huggingface", "fallback"]

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


def is_empty_payload(payload: Any) -> bool:
    """None, or an empty mapping/sequence/string."""
    if payload is None:
        return True
    if isinstance(payload, (dict, list, tuple, str)):
        return len(payload) == 0
    return False


def is_error_payload(payload: Any) -> bool:
    """Provider error marker, e.g. ``{"error": ..., "details": ...}``."""
    return isinstance(payload, dict) and "error" in payload


def is_fallback_meme(payload: Any) -> bool:
    """Locally generated placeholder meme (fallback source or data-URI image)."""
    if not isinstance(payload, dict):
        return False
    if payload.get("source") == "fallback":
        return True
    url = payload.get("url")
    return isinstance(url, str) and url.startswith("data:image/")


def is_valid_meme(payload: Any) -> bool:
    """Candidate meme with a usable url."""
    if not isinstance(payload, dict):
        return False
    url = payload.get("url")
    return url is not None and len(str(url)) > 5
