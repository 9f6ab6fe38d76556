"""Fetch a candidate URL and classify its body as a feed."""

from __future__ import annotations

import logging
from typing import Optional

from feed_scout.crawler.fetcher import Fetcher
from feed_scout.crawler.models import FetchResponse
from feed_scout.parser.feed_parser import FeedInfo, classify

logger = logging.getLogger("FeedScout.checker")


class FeedCheckError(Exception):
    """The candidate could not be fetched at all (timeout, DNS, connection…)."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Failed to fetch {url}")
        self.url = url


class FeedChecker:
    """Candidate probe shared by the blind, anchor and sitemap strategies."""

    def __init__(self, fetcher: Fetcher) -> None:
        self.fetcher = fetcher

    async def check(self, url: str) -> Optional[FeedInfo]:
        """Return FeedInfo if *url* serves a feed, None otherwise.

        HTTP error pages are classified like any other body (and are never
        feeds in practice); only a missing response raises FeedCheckError.
        """
        response = await self.fetcher.fetch(url)
        if not isinstance(response, FetchResponse):
            raise FeedCheckError(url)
        info = classify(response.text)
        logger.debug("%s -> %s", url, info.kind.value if info else "not a feed")
        return info


__all__ = ["FeedChecker", "FeedCheckError"]
