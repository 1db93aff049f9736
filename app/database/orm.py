"""SQLAlchemy ORM models for the daily brief.

This module defines all database tables using SQLAlchemy 2.0 ORM style.
Uses async support via asyncpg driver (aiosqlite in tests).

Usage:
    from app.database.orm import ContentRecord
    from app.database.connection import get_session

    async with get_session() as session:
        record = await session.get(ContentRecord, 42)
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    MetaData,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


# Naming convention for constraints and indexes (deterministic names for Alembic)
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Base class for all ORM models with naming convention."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# =============================================================================
# USERS & PREFERENCES
# =============================================================================


class UserAccount(Base):
    """Profile row owning snapshots and preferences (no credentials)."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    preferences: Mapped[UserPreferences | None] = relationship(back_populates="user")
    snapshots: Mapped[list[DashboardSnapshot]] = relationship(back_populates="user")


class UserPreferences(Base):
    """Onboarding answers: tracked assets, persona and content flags."""
    __tablename__ = "user_preferences"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    crypto_assets: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    investor_type: Mapped[str | None] = mapped_column(String(32))
    market_news: Mapped[bool] = mapped_column(Boolean, default=False)
    charts: Mapped[bool] = mapped_column(Boolean, default=False)
    social: Mapped[bool] = mapped_column(Boolean, default=False)
    fun: Mapped[bool] = mapped_column(Boolean, default=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user: Mapped[UserAccount] = relationship(back_populates="preferences")


# =============================================================================
# CONTENT CACHE
# =============================================================================


class ContentRecord(Base):
    """One fetched payload for (kind, asset, UTC day).

    ``content_day`` is the UTC calendar day of ``fetched_at``; the unique
    constraint makes it the cache identity. Replace-policy kinds update the
    row in place.
    """
    __tablename__ = "content"

    id: Mapped[int] = mapped_column(primary_key=True)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    asset: Mapped[str] = mapped_column(String(128), nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)  # JSON text
    content_day: Mapped[date] = mapped_column(Date, nullable=False)
    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint(
            "kind IN ('PRICE', 'NEWS', 'MEME', 'AI_INSIGHT')", name="kind"
        ),
        UniqueConstraint("kind", "asset", "content_day", name="uq_content_kind_asset_day"),
        Index("idx_content_kind_fetched", "kind", "fetched_at"),
    )


# =============================================================================
# DASHBOARD
# =============================================================================


class DashboardSnapshot(Base):
    """A user's composed view for one day.

    Section columns hold JSON text mapping asset id to ``{contentId, data}``.
    """
    __tablename__ = "dashboard_snapshots"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    snapshot_date: Mapped[date] = mapped_column(Date, nullable=False)
    market_news_json: Mapped[str | None] = mapped_column(Text)
    coin_prices_json: Mapped[str | None] = mapped_column(Text)
    meme_json: Mapped[str | None] = mapped_column(Text)
    ai_insight_json: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user: Mapped[UserAccount] = relationship(back_populates="snapshots")
    feedback: Mapped[list[DashboardFeedback]] = relationship(back_populates="snapshot")

    __table_args__ = (
        UniqueConstraint("user_id", "snapshot_date", name="uq_dashboard_snapshot_user_day"),
    )


class DashboardFeedback(Base):
    """Append-only vote on a snapshot section."""
    __tablename__ = "dashboard_feedback"

    id: Mapped[int] = mapped_column(primary_key=True)
    snapshot_id: Mapped[int] = mapped_column(
        ForeignKey("dashboard_snapshots.id", ondelete="CASCADE"), nullable=False
    )
    content_id: Mapped[int | None] = mapped_column(ForeignKey("content.id", ondelete="SET NULL"))
    section: Mapped[str] = mapped_column(String(32), nullable=False)
    vote: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    snapshot: Mapped[DashboardSnapshot] = relationship(back_populates="feedback")

    __table_args__ = (
        CheckConstraint("vote IN (-1, 0, 1)", name="vote"),
        CheckConstraint(
            "section IN ('NEWS', 'PRICES', 'MEME', 'AI_INSIGHT')", name="section"
        ),
        Index("idx_dashboard_feedback_latest", "snapshot_id", "section", "created_at", "id"),
    )
