"""Daily dashboard snapshots and section feedback.

A snapshot is composed once per user per day from the content cache and is
then served unchanged until the user asks for a refresh. Votes are appended
to the feedback ledger; the current vote per section is read back on every
render.

Usage:
    from app.services import dashboard

    view = await dashboard.compose_or_get("alice")
    entry = await dashboard.record_vote(view.id, DashboardSection.MEME, 1, username="alice")
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core import assets as asset_resolver
from app.core.clock import Clock, get_clock, local_day, utc_day
from app.core.config import settings
from app.core.exceptions import InvalidVoteError, NotFoundError, SerializationError
from app.core.logging import get_logger, log_fields
from app.database.connection import get_session
from app.database.orm import ContentRecord, DashboardFeedback, DashboardSnapshot
from app.domain.content import ContentKind, DashboardSection
from app.repositories import content_orm as content_repo
from app.repositories import feedback_orm as feedback_repo
from app.repositories import preferences_orm as preferences_repo
from app.repositories import snapshots_orm as snapshots_repo
from app.repositories.content_orm import PARSE_ERROR_MARKER, load_payload, read_payload
from app.schemas.dashboard import DashboardSnapshotResponse, FeedbackHistoryResponse, FeedbackResponse


logger = get_logger("services.dashboard")

VALID_VOTES = (-1, 0, 1)


# =============================================================================
# COMPOSITION
# =============================================================================


def working_set(tickers: Sequence[str] | None) -> list[str]:
    """Provider ids for the user's tickers, or every supported asset if none resolve."""
    return asset_resolver.resolve_ids(tickers) or asset_resolver.supported_ids()


def _wrap(record: ContentRecord) -> dict[str, Any]:
    return {"contentId": record.id, "data": read_payload(record)}


async def compose_sections_with_session(
    session: AsyncSession,
    asset_ids: Sequence[str],
    content_day: date,
) -> dict[ContentKind, dict[str, Any]]:
    """
    Build the four section mappings (asset id -> wrapped record) for a day.

    News is substituted when missing: with no news at all every asset gets
    the most recent news record ever stored; otherwise assets without news
    borrow the first asset's news that has one. Other kinds are omitted when
    missing.
    """
    sections: dict[ContentKind, dict[str, Any]] = {kind: {} for kind in ContentKind}

    for asset_id in asset_ids:
        for kind in ContentKind:
            record = await content_repo.get_latest_for_day_with_session(
                session, kind, asset_id, content_day
            )
            if record is not None:
                sections[kind][asset_id] = _wrap(record)

    news = sections[ContentKind.NEWS]
    if not news:
        latest = await content_repo.get_latest_any_with_session(session, ContentKind.NEWS)
        if latest is not None:
            shared = _wrap(latest)
            for asset_id in asset_ids:
                news[asset_id] = shared
    else:
        donor = next(news[asset_id] for asset_id in asset_ids if asset_id in news)
        for asset_id in asset_ids:
            news.setdefault(asset_id, donor)

    # keep working-set order
    sections[ContentKind.NEWS] = {a: news[a] for a in asset_ids if a in news}
    return sections


def _dump(section: dict[str, Any]) -> str:
    return json.dumps(section, default=str)


def _load_section(raw: str | None) -> dict[str, Any]:
    if raw is None:
        return {}
    try:
        data = load_payload(raw)
    except SerializationError:
        return dict(PARSE_ERROR_MARKER)
    return data if isinstance(data, dict) else dict(PARSE_ERROR_MARKER)


def _to_response(snapshot: DashboardSnapshot, votes: dict[DashboardSection, int]) -> DashboardSnapshotResponse:
    return DashboardSnapshotResponse(
        id=snapshot.id,
        snapshot_date=snapshot.snapshot_date,
        market_news=_load_section(snapshot.market_news_json),
        coin_prices=_load_section(snapshot.coin_prices_json),
        ai_insight=_load_section(snapshot.ai_insight_json),
        meme=_load_section(snapshot.meme_json),
        votes=votes,
    )


async def compose_or_get(
    username: str,
    force_refresh: bool = False,
    *,
    clock: Clock | None = None,
) -> DashboardSnapshotResponse:
    """
    Today's snapshot for ``username``, composing it on first request.

    Args:
        username: Profile owner
        force_refresh: Recompose sections from the current cache

    Raises:
        NotFoundError: if the user has no profile
    """
    clock = clock or get_clock()
    now = clock.now()
    snapshot_day = local_day(clock, settings.snapshot_timezone)
    content_day = utc_day(clock)

    async with get_session() as session:
        user = await preferences_repo.get_user_with_session(session, username)
        if user is None:
            raise NotFoundError(message=f"User not found: {username}")
        user_id = user.id

        prefs = await preferences_repo.get_preferences_with_session(session, user_id)
        tickers = list(prefs.crypto_assets or []) if prefs is not None else []

        snapshot, created = await snapshots_repo.get_or_create_with_session(
            session, user_id, snapshot_day, now
        )

        # A concurrent creator may not have stored its sections yet
        needs_sections = snapshot.market_news_json is None
        if created or force_refresh or needs_sections:
            asset_ids = working_set(tickers)
            sections = await compose_sections_with_session(session, asset_ids, content_day)
            snapshots_repo.set_sections(
                snapshot,
                market_news_json=_dump(sections[ContentKind.NEWS]),
                coin_prices_json=_dump(sections[ContentKind.PRICE]),
                meme_json=_dump(sections[ContentKind.MEME]),
                ai_insight_json=_dump(sections[ContentKind.AI_INSIGHT]),
                now=now,
            )
            await session.commit()
            logger.info(
                "Snapshot composed",
                extra=log_fields(
                    snapshot_id=snapshot.id,
                    user_id=user_id,
                    snapshot_date=snapshot_day.isoformat(),
                    assets=len(asset_ids),
                    refreshed=force_refresh,
                ),
            )

        votes = await feedback_repo.current_votes_with_session(session, snapshot.id)
        return _to_response(snapshot, votes)


# =============================================================================
# FEEDBACK
# =============================================================================


def feedback_response(entry: DashboardFeedback) -> FeedbackResponse:
    return FeedbackResponse(
        id=entry.id,
        snapshot_id=entry.snapshot_id,
        content_id=entry.content_id,
        section=DashboardSection(entry.section),
        vote=entry.vote,
        created_at=entry.created_at,
    )


async def _owned_snapshot(
    session: AsyncSession, snapshot_id: int, username: str | None
) -> DashboardSnapshot:
    snapshot = await snapshots_repo.get_by_id_with_session(session, snapshot_id)
    if snapshot is None:
        raise NotFoundError(message=f"Snapshot not found: {snapshot_id}")

    if username is not None:
        user = await preferences_repo.get_user_with_session(session, username)
        if user is None or user.id != snapshot.user_id:
            raise NotFoundError(message=f"Snapshot not found: {snapshot_id}")
    return snapshot


async def record_vote(
    snapshot_id: int,
    section: DashboardSection | str,
    vote: int,
    content_id: int | None = None,
    *,
    username: str | None = None,
    clock: Clock | None = None,
) -> FeedbackResponse:
    """
    Append a vote for a snapshot section.

    When ``username`` is given the snapshot must belong to that user.

    Raises:
        InvalidVoteError: if vote is not -1, 0 or 1
        NotFoundError: if the snapshot (or the referenced content) doesn't exist
    """
    if not isinstance(vote, int) or isinstance(vote, bool) or vote not in VALID_VOTES:
        raise InvalidVoteError(details={"vote": vote})
    section = DashboardSection(section)
    clock = clock or get_clock()

    async with get_session() as session:
        snapshot = await _owned_snapshot(session, snapshot_id, username)

        if content_id is not None:
            content = await content_repo.get_by_id_with_session(session, content_id)
            if content is None:
                raise NotFoundError(message=f"Content not found: {content_id}")

        entry = await feedback_repo.append_with_session(
            session, snapshot.id, section, vote, content_id, clock.now()
        )
        await session.commit()
        return feedback_response(entry)


async def current_vote(snapshot_id: int, section: DashboardSection | str) -> int | None:
    """Latest vote for a section, or None if nobody voted."""
    async with get_session() as session:
        return await feedback_repo.current_vote_with_session(
            session, snapshot_id, DashboardSection(section)
        )


async def feedback_history(
    snapshot_id: int,
    section: DashboardSection | str | None = None,
    *,
    username: str | None = None,
) -> FeedbackHistoryResponse:
    """Every vote on a snapshot, oldest first, plus the current vote per section."""
    section = DashboardSection(section) if section is not None else None

    async with get_session() as session:
        snapshot = await _owned_snapshot(session, snapshot_id, username)
        entries = await feedback_repo.list_history_with_session(session, snapshot.id, section)
        current = await feedback_repo.current_votes_with_session(session, snapshot.id)

    if section is not None:
        current = {s: v for s, v in current.items() if s == section}
    return FeedbackHistoryResponse(
        snapshot_id=snapshot_id,
        current=current,
        entries=[feedback_response(e) for e in entries],
    )
