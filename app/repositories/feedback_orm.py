"""Dashboard feedback ledger using SQLAlchemy ORM.

Votes are append-only. The current vote for a (snapshot, section) is the
newest entry by ``created_at``, ties going to the higher id; the
``idx_dashboard_feedback_latest`` index serves that lookup.

Usage:
    from app.repositories import feedback_orm as feedback_repo

    async with get_session() as session:
        entry = await feedback_repo.append_with_session(session, snapshot_id, section, 1, None, now)
        await session.commit()
        vote = await feedback_repo.current_vote_with_session(session, snapshot_id, section)
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger, log_fields
from app.database.connection import get_session
from app.database.orm import DashboardFeedback
from app.domain.content import DashboardSection


logger = get_logger("repositories.feedback_orm")


async def append_with_session(
    session: AsyncSession,
    snapshot_id: int,
    section: DashboardSection,
    vote: int,
    content_id: int | None,
    now: datetime,
) -> DashboardFeedback:
    """Insert a new feedback row; existing rows are never touched."""
    entry = DashboardFeedback(
        snapshot_id=snapshot_id,
        section=DashboardSection(section).value,
        vote=vote,
        content_id=content_id,
        created_at=now,
    )
    session.add(entry)
    await session.flush()
    logger.info(
        "Vote recorded",
        extra=log_fields(snapshot_id=snapshot_id, section=entry.section, vote=vote),
    )
    return entry


async def current_vote_with_session(
    session: AsyncSession,
    snapshot_id: int,
    section: DashboardSection,
) -> int | None:
    result = await session.execute(
        select(DashboardFeedback.vote)
        .where(
            DashboardFeedback.snapshot_id == snapshot_id,
            DashboardFeedback.section == DashboardSection(section).value,
        )
        .order_by(DashboardFeedback.created_at.desc(), DashboardFeedback.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def current_votes_with_session(
    session: AsyncSession,
    snapshot_id: int,
) -> dict[DashboardSection, int]:
    """Current vote per section; sections without votes are omitted."""
    votes: dict[DashboardSection, int] = {}
    for section in DashboardSection:
        vote = await current_vote_with_session(session, snapshot_id, section)
        if vote is not None:
            votes[section] = vote
    return votes


async def list_history_with_session(
    session: AsyncSession,
    snapshot_id: int,
    section: DashboardSection | None = None,
) -> list[DashboardFeedback]:
    """All entries for a snapshot, oldest first."""
    query = select(DashboardFeedback).where(DashboardFeedback.snapshot_id == snapshot_id)
    if section is not None:
        query = query.where(DashboardFeedback.section == DashboardSection(section).value)
    result = await session.execute(
        query.order_by(DashboardFeedback.created_at.asc(), DashboardFeedback.id.asc())
    )
    return list(result.scalars().all())


async def current_votes(snapshot_id: int) -> dict[DashboardSection, int]:
    async with get_session() as session:
        return await current_votes_with_session(session, snapshot_id)


async def list_history(
    snapshot_id: int, section: DashboardSection | None = None
) -> list[DashboardFeedback]:
    async with get_session() as session:
        return await list_history_with_session(session, snapshot_id, section)
