"""Domain models for strongly-typed data throughout the application.

Usage:
    from app.domain import ContentKind, MemePayload

    meme = MemePayload(url="https://i.redd.it/x.png", served_at=now, source="reddit")
    data = meme.to_payload()
"""

from app.domain.content import (
    AiInsightPayload,
    ContentKind,
    ContentPreference,
    DashboardSection,
    InvestorType,
    MemePayload,
)

__all__ = [
    # Enums
    "ContentKind",
    "ContentPreference",
    "DashboardSection",
    "InvestorType",
    # Payloads
    "AiInsightPayload",
    "MemePayload",
]
