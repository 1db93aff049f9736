"""Meme source chain: meme-api.com, then Reddit r/cryptomemes, then a static SVG.

``get_meme`` always returns a payload; the static fallback is rotated by day
of year so every instance serves the same placeholder on a given day.
"""

from __future__ import annotations

from typing import Any

import httpx

from app.core.clock import Clock, get_clock, utc_day
from app.core.config import settings
from app.core.exceptions import ProviderUnavailableError
from app.domain.content import MemePayload

from .base import ProviderClient


def _svg(title: str, background: str, foreground: str, size: int = 44) -> str:
    return (
        "data:image/svg+xml;utf8,<svg xmlns='http://www.w3.org/2000/svg' width='800' height='480'>"
        f"<rect width='100%' height='100%' fill='{background}'/>"
        f"<text x='50%' y='50%' fill='{foreground}' font-size='{size}' "
        "font-family='Segoe UI, Arial' text-anchor='middle'>"
        f"{title}</text></svg>"
    )


FALLBACK_MEMES: tuple[dict[str, str], ...] = (
    {"title": "HODL vibes", "url": _svg("HODL vibes", "%232563eb", "white", 48)},
    {"title": "Charts at 3am", "url": _svg("Charts at 3am", "%230f172a", "%23e2e8f0")},
    {"title": "Buy the dip?", "url": _svg("Buy the dip?", "%23f59e0b", "%230b1b3d")},
    {"title": "gm frens", "url": _svg("gm frens", "%23f8fafc", "%230f172a")},
    {"title": "Bear to Bull", "url": _svg("Bear to Bull", "%2316a34a", "white")},
)

IMAGE_SUFFIXES = (".jpg", ".jpeg", ".png", ".gif")
IMAGE_HOSTS = ("i.redd.it", "i.imgur.com")


def is_image_url(url: str | None) -> bool:
    if not url:
        return False
    lower = url.lower()
    return lower.endswith(IMAGE_SUFFIXES) or any(host in lower for host in IMAGE_HOSTS)


def extract_reddit_image_url(post: dict[str, Any]) -> str | None:
    """Best image url of a Reddit post: direct link, preview source, then thumbnail."""
    direct = post.get("url_overridden_by_dest")
    if isinstance(direct, str) and is_image_url(direct):
        return direct

    preview = post.get("preview")
    if isinstance(preview, dict):
        images = preview.get("images")
        if isinstance(images, list) and images and isinstance(images[0], dict):
            source = images[0].get("source")
            if isinstance(source, dict) and isinstance(source.get("url"), str):
                # Reddit HTML-escapes & in preview urls
                url = source["url"].replace("&amp;", "&")
                if is_image_url(url):
                    return url

    thumb = post.get("thumbnail")
    if isinstance(thumb, str) and is_image_url(thumb):
        return thumb
    return None


class MemeClient(ProviderClient):
    """Daily crypto meme with a guaranteed local fallback."""

    name = "memes"

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        clock: Clock | None = None,
        meme_api_url: str | None = None,
        reddit_url: str | None = None,
        **kwargs: Any,
    ):
        super().__init__(client, **kwargs)
        self._clock = clock or get_clock()
        self._meme_api_url = meme_api_url or settings.meme_api_url
        self._reddit_url = reddit_url or settings.meme_reddit_url

    async def get_meme(self) -> dict[str, Any]:
        meme = await self._from_meme_api()
        if meme is None:
            meme = await self._from_reddit()
        if meme is None:
            meme = self.fallback()
        return meme.to_payload()

    def _served_at(self) -> str:
        return self._clock.now().isoformat()

    async def _from_meme_api(self) -> MemePayload | None:
        try:
            body = await self._get_json(self._meme_api_url)
        except ProviderUnavailableError as e:
            self._log_unavailable(e, source="meme-api")
            return None

        if not isinstance(body, dict):
            return None
        url = body.get("url")
        if isinstance(url, str) and is_image_url(url):
            title = body.get("title")
            return MemePayload(
                title=str(title) if title is not None else "Meme",
                url=url,
                served_at=self._served_at(),
                source="meme-api",
            )
        return None

    async def _from_reddit(self) -> MemePayload | None:
        try:
            body = await self._get_json(
                self._reddit_url, headers={"User-Agent": settings.meme_user_agent}
            )
        except ProviderUnavailableError as e:
            self._log_unavailable(e, source="reddit")
            return None

        data = body.get("data") if isinstance(body, dict) else None
        children = data.get("children") if isinstance(data, dict) else None
        if not isinstance(children, list):
            return None

        for child in children:
            post = child.get("data") if isinstance(child, dict) else None
            if not isinstance(post, dict):
                continue
            url = extract_reddit_image_url(post)
            if url is None:
                continue
            title = post.get("title")
            return MemePayload(
                title=str(title) if title is not None else "Meme",
                url=url,
                served_at=self._served_at(),
                source="reddit",
            )
        return None

    def fallback(self) -> MemePayload:
        """Static placeholder for today (rotated by day of year)."""
        day = utc_day(self._clock).timetuple().tm_yday
        pick = FALLBACK_MEMES[day % len(FALLBACK_MEMES)]
        return MemePayload(
            title=pick["title"],
            url=pick["url"],
            served_at=self._served_at(),
            source="fallback",
        )
