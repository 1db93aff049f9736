"""Onboarding preference schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.content import ContentPreference, InvestorType


class PreferencesRequest(BaseModel):
    """Save onboarding answers."""

    model_config = ConfigDict(populate_by_name=True)

    crypto_assets: list[str] = Field(default_factory=list, alias="cryptoAssets", max_length=50)
    investor_type: InvestorType | None = Field(None, alias="investorType")
    market_news: bool = Field(False, alias="marketNews")
    charts: bool = False
    social: bool = False
    fun: bool = False

    @field_validator("crypto_assets")
    @classmethod
    def strip_assets(cls, v: list[str]) -> list[str]:
        return [item.strip() for item in v if item and item.strip()]


class PreferencesResponse(BaseModel):
    """Stored onboarding answers."""

    model_config = ConfigDict(populate_by_name=True)

    crypto_assets: list[str] = Field(default_factory=list, alias="cryptoAssets")
    investor_type: str | None = Field(None, alias="investorType")
    market_news: bool = Field(False, alias="marketNews")
    charts: bool = False
    social: bool = False
    fun: bool = False
    completed: bool = True


class PreferencesOptionsResponse(BaseModel):
    """Choices the onboarding form can offer."""

    model_config = ConfigDict(populate_by_name=True)

    crypto_asset_suggestions: list[str] = Field(..., alias="cryptoAssetSuggestions")
    investor_types: list[InvestorType] = Field(..., alias="investorTypes")
    content_preferences: list[ContentPreference] = Field(..., alias="contentPreferences")
