"""Business logic services."""

from . import ai_insight, content_refresh, dashboard, preferences


__all__ = [
    "ai_insight",
    "content_refresh",
    "dashboard",
    "preferences",
]
