"""Content cache repository using SQLAlchemy ORM.

Stores fetched provider payloads keyed by (kind, asset, UTC day) and applies
the per-kind write policy:

- MEME: keep today's record unless it is a fallback and the new one is valid
- AI_INSIGHT: always replace today's record
- PRICE, NEWS: write once per day

Usage (recommended - auto session management):
    from app.repositories import content_orm as content_repo

    outcome = await content_repo.put(ContentKind.PRICE, "bitcoin", {"usd": 1}, now)
    record = await content_repo.get_latest_for_day(ContentKind.PRICE, "bitcoin", day)

Usage (advanced - manual session control):
    async with get_session() as session:
        outcome = await content_repo.put_with_session(session, kind, asset, payload, now)
        await session.commit()
"""

from __future__ import annotations

import json
from datetime import date, datetime
from enum import Enum
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import day_of
from app.core.exceptions import SerializationError
from app.core.logging import get_logger, log_fields
from app.database.connection import get_session
from app.database.orm import ContentRecord
from app.domain.content import (
    ContentKind,
    is_empty_payload,
    is_error_payload,
    is_fallback_meme,
    is_valid_meme,
)


logger = get_logger("repositories.content_orm")

PARSE_ERROR_MARKER = {"error": "Failed to parse stored content"}


class PutOutcome(str, Enum):
    """What ``put`` did with a payload."""

    CREATED = "created"
    REPLACED = "replaced"
    SKIPPED_EXISTING = "skipped_existing"
    SKIPPED_EMPTY = "skipped_empty"
    SKIPPED_ERROR = "skipped_error"


# =============================================================================
# PAYLOAD SERIALIZATION
# =============================================================================


def dump_payload(payload: Any) -> str:
    return json.dumps(payload, default=str)


def load_payload(raw: str | None) -> Any:
    """Parse stored JSON text.

    Raises:
        SerializationError: if the text is missing or not valid JSON
    """
    if raw is None:
        raise SerializationError(details={"reason": "empty column"})
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        raise SerializationError(details={"reason": str(e)}) from e


def read_payload(record: ContentRecord) -> Any:
    """Stored payload, or a parse-error marker if the row is corrupted."""
    try:
        return load_payload(record.payload)
    except SerializationError as e:
        logger.warning(
            "Stored content payload is not valid JSON",
            extra=log_fields(content_id=record.id, kind=record.kind, asset=record.asset, **e.details),
        )
        return dict(PARSE_ERROR_MARKER)


def _kind(kind: ContentKind | str) -> str:
    return ContentKind(kind).value


# =============================================================================
# SESSION-BASED FUNCTIONS (for advanced use with manual session control)
# =============================================================================


async def get_latest_for_day_with_session(
    session: AsyncSession,
    kind: ContentKind | str,
    asset: str,
    day: date,
) -> ContentRecord | None:
    """Authoritative record for (kind, asset) on exactly ``day`` (UTC)."""
    result = await session.execute(
        select(ContentRecord)
        .where(
            ContentRecord.kind == _kind(kind),
            ContentRecord.asset == asset,
            ContentRecord.content_day == day,
        )
        .order_by(ContentRecord.fetched_at.desc(), ContentRecord.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_latest_any_with_session(
    session: AsyncSession,
    kind: ContentKind | str,
) -> ContentRecord | None:
    """Most recent record of a kind across all assets and days."""
    result = await session.execute(
        select(ContentRecord)
        .where(ContentRecord.kind == _kind(kind))
        .order_by(ContentRecord.fetched_at.desc(), ContentRecord.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def exists_for_day_with_session(
    session: AsyncSession,
    kind: ContentKind | str,
    asset: str,
    day: date,
) -> bool:
    result = await session.execute(
        select(ContentRecord.id)
        .where(
            ContentRecord.kind == _kind(kind),
            ContentRecord.asset == asset,
            ContentRecord.content_day == day,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def get_by_id_with_session(session: AsyncSession, content_id: int) -> ContentRecord | None:
    return await session.get(ContentRecord, content_id)


async def put_with_session(
    session: AsyncSession,
    kind: ContentKind | str,
    asset: str,
    payload: Any,
    now: datetime,
) -> PutOutcome:
    """
    Store a payload for today under the kind's write policy.

    A unique-key conflict on insert (another writer got there first) rolls
    the session back and is reported as SKIPPED_EXISTING.

    Returns:
        What happened to the payload
    """
    kind = ContentKind(kind)
    fields = {"kind": kind.value, "asset": asset}

    if is_empty_payload(payload):
        logger.debug("Skipping empty payload", extra=log_fields(**fields))
        return PutOutcome.SKIPPED_EMPTY

    if kind == ContentKind.NEWS and is_error_payload(payload):
        logger.warning(
            "Skipping news persistence due to error payload",
            extra=log_fields(**fields, error=payload.get("error")),
        )
        return PutOutcome.SKIPPED_ERROR

    day = day_of(now)
    existing = await get_latest_for_day_with_session(session, kind, asset, day)

    if existing is not None:
        if kind == ContentKind.MEME:
            if is_fallback_meme(read_payload(existing)) and is_valid_meme(payload):
                _replace(existing, payload, now)
                await session.flush()
                logger.info("Replaced fallback meme", extra=log_fields(**fields, content_id=existing.id))
                return PutOutcome.REPLACED
            return PutOutcome.SKIPPED_EXISTING

        if kind == ContentKind.AI_INSIGHT:
            _replace(existing, payload, now)
            await session.flush()
            return PutOutcome.REPLACED

        return PutOutcome.SKIPPED_EXISTING

    record = ContentRecord(
        kind=kind.value,
        asset=asset,
        payload=dump_payload(payload),
        content_day=day,
        fetched_at=now,
    )
    session.add(record)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        logger.info("Content already stored by a concurrent writer", extra=log_fields(**fields))
        return PutOutcome.SKIPPED_EXISTING

    return PutOutcome.CREATED


def _replace(record: ContentRecord, payload: Any, now: datetime) -> None:
    record.payload = dump_payload(payload)
    record.fetched_at = now


# =============================================================================
# CONVENIENCE FUNCTIONS (auto session management)
# =============================================================================


async def put(kind: ContentKind | str, asset: str, payload: Any, now: datetime) -> PutOutcome:
    async with get_session() as session:
        outcome = await put_with_session(session, kind, asset, payload, now)
        if outcome in (PutOutcome.CREATED, PutOutcome.REPLACED):
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return PutOutcome.SKIPPED_EXISTING
        return outcome


async def get_latest_for_day(kind: ContentKind | str, asset: str, day: date) -> ContentRecord | None:
    async with get_session() as session:
        return await get_latest_for_day_with_session(session, kind, asset, day)


async def get_latest_any(kind: ContentKind | str) -> ContentRecord | None:
    async with get_session() as session:
        return await get_latest_any_with_session(session, kind)


async def exists_for_day(kind: ContentKind | str, asset: str, day: date) -> bool:
    async with get_session() as session:
        return await exists_for_day_with_session(session, kind, asset, day)


async def get_by_id(content_id: int) -> ContentRecord | None:
    async with get_session() as session:
        return await get_by_id_with_session(session, content_id)
