"""API routes package."""

from . import (
    admin_content,
    dashboard,
    health,
    integrations,
    preferences,
)


__all__ = [
    "admin_content",
    "dashboard",
    "health",
    "integrations",
    "preferences",
]
