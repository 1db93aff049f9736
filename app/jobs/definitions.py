"""Built-in job definitions for scheduled tasks.

Jobs:
- content_daily: fetch and cache prices, news, memes and AI insights
  (daily, 00:05 UTC by default)
"""

from __future__ import annotations

from app.core.logging import get_logger
from app.services.content_refresh import refresh_daily_content

from .registry import register_job


logger = get_logger("jobs.definitions")


# =============================================================================
# CONTENT DAILY - Refresh the content cache (00:05 UTC)
# =============================================================================


@register_job("content_daily", cron_setting="content_refresh_cron")
async def content_daily_job() -> str:
    """Refresh today's cached content for every supported asset."""
    report = await refresh_daily_content()
    return report.summary()
