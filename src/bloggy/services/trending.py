"""Trending technology articles shown next to the home feed."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

import httpx

from bloggy.core.settings import Settings, settings
from bloggy.schemas.post import TrendingArticle

logger = logging.getLogger(__name__)


class TrendingFeed:
    """Fetches the week's top articles from the dev.to API.

    Failures never propagate: the feed degrades to an empty list.
    """

    def __init__(
        self,
        *,
        api_url: str,
        tag: str = "technology",
        top_days: int = 7,
        per_page: int = 5,
        enabled: bool = True,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_url = api_url
        self.tag = tag
        self.top_days = top_days
        self.per_page = per_page
        self.enabled = enabled
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, config: Settings) -> TrendingFeed:
        """Build a feed from application settings."""
        return cls(
            api_url=config.trending_api_url,
            tag=config.trending_tag,
            enabled=config.trending_enabled,
            timeout=config.http_timeout_seconds,
        )

    async def fetch(self) -> list[TrendingArticle]:
        """Return up to ``per_page`` trending articles, or ``[]`` on any failure."""
        if not self.enabled:
            return []

        params = {"tag": self.tag, "top": self.top_days, "per_page": self.per_page}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.api_url, params=params)
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Error fetching trending articles: %s", exc)
            return []

        if not isinstance(payload, list):
            logger.warning("Unexpected trending articles payload: %s", type(payload).__name__)
            return []
        return [article for item in payload if (article := _parse_article(item)) is not None]


def _parse_article(item: Any) -> TrendingArticle | None:
    if not isinstance(item, dict) or not item.get("title") or not item.get("url"):
        return None
    author = item.get("user") if isinstance(item.get("user"), dict) else {}
    return TrendingArticle(
        title=str(item["title"]),
        url=str(item["url"]),
        description=item.get("description") or None,
        author=author.get("name") or None,
    )


@lru_cache(maxsize=1)
def get_trending_feed() -> TrendingFeed:
    """Return the process-wide trending feed built from settings."""
    return TrendingFeed.from_settings(settings)
