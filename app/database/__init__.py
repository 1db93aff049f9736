"""Database module with SQLAlchemy async engine and ORM models.

New code should use SQLAlchemy ORM with get_session().
"""

from .connection import (
    close_database,
    close_sqlalchemy_engine,
    create_tables,
    db_healthcheck,
    get_async_database_url,
    get_engine,
    get_session,
    get_session_factory,
    init_database,
    init_sqlalchemy_engine,
)
from .orm import (
    Base,
    ContentRecord,
    DashboardFeedback,
    DashboardSnapshot,
    UserAccount,
    UserPreferences,
)


__all__ = [
    "init_sqlalchemy_engine",
    "close_sqlalchemy_engine",
    "get_session",
    "get_session_factory",
    "get_engine",
    "get_async_database_url",
    "create_tables",
    "db_healthcheck",
    "init_database",
    "close_database",
    "Base",
    "ContentRecord",
    "DashboardFeedback",
    "DashboardSnapshot",
    "UserAccount",
    "UserPreferences",
]
