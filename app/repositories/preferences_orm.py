"""User and preferences repository using SQLAlchemy ORM."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.database.connection import get_session
from app.database.orm import UserAccount, UserPreferences


logger = get_logger("repositories.preferences_orm")


async def get_user_with_session(session: AsyncSession, username: str) -> UserAccount | None:
    result = await session.execute(
        select(UserAccount).where(UserAccount.username == username)
    )
    return result.scalar_one_or_none()


async def get_or_create_user_with_session(session: AsyncSession, username: str) -> UserAccount:
    """Profile row for ``username``, created on first sight."""
    user = await get_user_with_session(session, username)
    if user is not None:
        return user

    user = UserAccount(username=username)
    session.add(user)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        user = await get_user_with_session(session, username)
        if user is None:
            raise
    else:
        logger.info(f"Created profile for {username}")
    return user


async def get_preferences_with_session(
    session: AsyncSession, user_id: int
) -> UserPreferences | None:
    result = await session.execute(
        select(UserPreferences).where(UserPreferences.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def save_preferences_with_session(
    session: AsyncSession,
    user_id: int,
    *,
    crypto_assets: list[str],
    investor_type: str | None,
    market_news: bool = False,
    charts: bool = False,
    social: bool = False,
    fun: bool = False,
) -> UserPreferences:
    """Insert or overwrite the user's preferences row."""
    prefs = await get_preferences_with_session(session, user_id)
    if prefs is None:
        prefs = UserPreferences(user_id=user_id)
        session.add(prefs)

    prefs.crypto_assets = list(crypto_assets)
    prefs.investor_type = investor_type
    prefs.market_news = market_news
    prefs.charts = charts
    prefs.social = social
    prefs.fun = fun
    await session.flush()
    return prefs


async def get_user(username: str) -> UserAccount | None:
    async with get_session() as session:
        return await get_user_with_session(session, username)


async def get_or_create_user(username: str) -> UserAccount:
    async with get_session() as session:
        user = await get_or_create_user_with_session(session, username)
        await session.commit()
        return user
