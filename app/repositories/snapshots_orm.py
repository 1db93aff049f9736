"""Dashboard snapshot repository using SQLAlchemy ORM.

One snapshot per (user, day), enforced by ``uq_dashboard_snapshot_user_day``.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger, log_fields
from app.database.orm import DashboardSnapshot


logger = get_logger("repositories.snapshots_orm")


async def get_for_user_day_with_session(
    session: AsyncSession, user_id: int, snapshot_date: date
) -> DashboardSnapshot | None:
    result = await session.execute(
        select(DashboardSnapshot).where(
            DashboardSnapshot.user_id == user_id,
            DashboardSnapshot.snapshot_date == snapshot_date,
        )
    )
    return result.scalar_one_or_none()


async def get_by_id_with_session(session: AsyncSession, snapshot_id: int) -> DashboardSnapshot | None:
    return await session.get(DashboardSnapshot, snapshot_id)


async def get_or_create_with_session(
    session: AsyncSession,
    user_id: int,
    snapshot_date: date,
    now: datetime,
) -> tuple[DashboardSnapshot, bool]:
    """
    Today's snapshot for the user, inserting an empty one if missing.

    Concurrent creators race on the unique constraint; the loser commits
    nothing, rolls back and re-reads the winner's row.

    Returns:
        Tuple of (snapshot, created)
    """
    existing = await get_for_user_day_with_session(session, user_id, snapshot_date)
    if existing is not None:
        return existing, False

    snapshot = DashboardSnapshot(
        user_id=user_id,
        snapshot_date=snapshot_date,
        created_at=now,
        updated_at=now,
    )
    session.add(snapshot)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.info(
            "Snapshot created concurrently, re-reading",
            extra=log_fields(user_id=user_id, snapshot_date=snapshot_date.isoformat()),
        )
        existing = await get_for_user_day_with_session(session, user_id, snapshot_date)
        if existing is None:
            raise
        return existing, False

    return snapshot, True


def set_sections(
    snapshot: DashboardSnapshot,
    *,
    market_news_json: str,
    coin_prices_json: str,
    meme_json: str,
    ai_insight_json: str,
    now: datetime,
) -> None:
    """Overwrite the snapshot's section blobs."""
    snapshot.market_news_json = market_news_json
    snapshot.coin_prices_json = coin_prices_json
    snapshot.meme_json = meme_json
    snapshot.ai_insight_json = ai_insight_json
    snapshot.updated_at = now
