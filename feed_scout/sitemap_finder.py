"""Sitemap search: probe every URL listed in ``/sitemap.xml`` as a feed candidate."""

from __future__ import annotations

import logging
from typing import Collection, List, Optional

from feed_scout.checker import FeedChecker, FeedCheckError
from feed_scout.config import SearchOptions
from feed_scout.crawler.fetcher import Fetcher
from feed_scout.crawler.models import FetchResponse
from feed_scout.events import EventEmitter
from feed_scout.models import FeedRecord, SessionState
from feed_scout.parser.sitemap_parser import parse_sitemap
from feed_scout.utils import normalize_site, normalize_url, origin_of, remove_duplicates

logger = logging.getLogger("FeedScout.sitemap")

MODULE = "sitemap"
NICE_NAME = "Sitemap"


class SitemapScanner:
    def __init__(
        self,
        site: str,
        options: SearchOptions,
        fetcher: Fetcher,
        checker: FeedChecker,
        events: Optional[EventEmitter] = None,
        max_feeds: Optional[int] = None,
        known: Collection[str] = (),
    ) -> None:
        self.site = normalize_site(site)
        self.options = options
        self.fetcher = fetcher
        self.checker = checker
        self.events = events if events is not None else EventEmitter()
        self.max_feeds = options.max_feeds if max_feeds is None else max_feeds
        self.known = frozenset(known)
        self.state = SessionState()

    @property
    def sitemap_url(self) -> str:
        return f"{origin_of(self.site)}/sitemap.xml"

    async def _locations(self) -> List[str]:
        response = await self.fetcher.fetch(self.sitemap_url)
        if not isinstance(response, FetchResponse) or not response.ok:
            status = response.status if isinstance(response, FetchResponse) else "unavailable"
            message = f"Failed to fetch sitemap: {self.sitemap_url} ({status})"
            logger.info(message)
            self.events.emit("log", {"module": MODULE, "message": message})
            return []
        urls = [
            normalize_url(u)
            for u in parse_sitemap(response.text)
            if u.lower().startswith(("http://", "https://"))
        ]
        return [u for u in remove_duplicates(urls) if u not in self.known]

    async def run(self) -> List[FeedRecord]:
        self.events.emit("start", {"module": MODULE, "nice_name": NICE_NAME})
        urls = await self._locations()
        total = len(urls)
        self.events.emit("log", {"module": MODULE, "total": total})

        feeds: List[FeedRecord] = []
        for index, url in enumerate(urls, start=1):
            try:
                info = await self.checker.check(url)
            except FeedCheckError as exc:
                logger.debug("Sitemap candidate failed %s: %s", url, exc)
                if self.options.show_errors:
                    self.state.errors += 1
                    self.events.emit("error", {"module": MODULE, "error": str(exc)})
                info = None
            self.state.links_visited = index
            self.events.emit("log", {"module": MODULE, "visited": index, "total": total})
            if not info:
                continue
            feeds.append(FeedRecord(url=url, kind=info.kind, title=info.title, discovered_by=MODULE))
            self.state.feeds_found = len(feeds)
            self.events.emit(
                "log", {"module": MODULE, "message": f"Found feed: {url} ({info.kind.value})"}
            )
            if self.max_feeds and len(feeds) >= self.max_feeds:
                self.state.feed_budget_exhausted = True
                break

        self.events.emit("end", {"module": MODULE, "feeds": feeds, "visited": self.state.links_visited})
        return feeds


__all__ = ["SitemapScanner"]
