"""Data access layer repositories.

Each repository module provides async functions for database operations.
All code uses SQLAlchemy ORM models from `app.database.orm` with the
`get_session()` context manager.

ORM-based repositories:
- content_orm: cached provider payloads keyed by (kind, asset, day)
- preferences_orm: user profiles and onboarding preferences
- snapshots_orm: per-user daily dashboard snapshots
- feedback_orm: append-only dashboard votes
"""

from . import content_orm
from . import feedback_orm
from . import preferences_orm
from . import snapshots_orm

__all__ = [
    "content_orm",
    "feedback_orm",
    "preferences_orm",
    "snapshots_orm",
]
