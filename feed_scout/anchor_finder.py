# === FILE: feed_scout/anchor_finder.py ===

"""Module for finding feeds behind the anchors of an already fetched page.

No judgement is made on anchor text or href shape: every same-site http(s)
target is fetched and classified, so the cost is bounded only by the number
of anchors and by ``max_feeds``.
"""

from __future__ import annotations

import logging
from typing import Collection, List, Optional

from feed_scout.checker import FeedChecker, FeedCheckError
from feed_scout.config import SearchOptions
from feed_scout.crawler.fetcher import Fetcher
from feed_scout.crawler.link_extractor import HrefKind, classify_href, resolve_href
from feed_scout.crawler.models import FetchResponse
from feed_scout.events import EventEmitter
from feed_scout.models import FeedRecord, SessionState
from feed_scout.parser.feed_parser import clean_title
from feed_scout.parser.html_parser import ParsedPage, parse_html
from feed_scout.utils import is_same_domain, normalize_site, normalize_url

logger = logging.getLogger("FeedScout.anchors")

MODULE = "anchors"
NICE_NAME = "Check all anchors"
PROGRESS_EVERY = 10


class AnchorScanner:
    """Class for probing every anchor of a page as a feed candidate."""

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
        # feeds already reported by earlier strategies: not probed, not counted
        self.known = frozenset(known)
        self.state = SessionState()

    async def follow_meta_refresh(self, document: ParsedPage) -> tuple[ParsedPage, str]:
        """Follow at most one ``<meta http-equiv="refresh">`` hop.

        Returns the document to scan and the base URL for relative hrefs;
        any failure falls back to the original document and the site URL.
        """
        if not self.options.follow_meta_refresh or not document.meta_refresh:
            return document, self.site
        try:
            target = resolve_href(document.meta_refresh, self.site)
        except ValueError:
            target = None
        if not target or normalize_url(target) == normalize_url(self.site):
            return document, self.site

        response = await self.fetcher.fetch(target)
        if not isinstance(response, FetchResponse) or not response.ok:
            logger.debug("Meta refresh target unavailable: %s", target)
            return document, self.site
        logger.info("Following meta refresh %s -> %s", self.site, target)
        return parse_html(response.text, response.url), target

    async def scan(self, document: ParsedPage) -> List[FeedRecord]:
        self.events.emit("start", {"module": MODULE, "nice_name": NICE_NAME})
        document, base = await self.follow_meta_refresh(document)

        anchors = document.anchors
        total = len(anchors)
        self.events.emit("log", {"module": MODULE, "total": total})

        feeds: List[FeedRecord] = []
        checked: set[str] = set()
        for index, anchor in enumerate(anchors, start=1):
            if index % PROGRESS_EVERY == 1:
                self.events.emit("log", {"module": MODULE, "visited": index, "total": total})
            url = self._candidate(anchor.href, base)
            if url is None or url in checked or url in self.known:
                continue
            checked.add(url)
            self.state.links_visited = len(checked)

            try:
                info = await self.checker.check(url)
            except FeedCheckError as exc:
                self._handle_error(url, exc)
                continue
            if not info:
                continue

            title = info.title or clean_title(anchor.text) or None
            feeds.append(FeedRecord(url=url, kind=info.kind, title=title, discovered_by=MODULE))
            self.state.feeds_found = len(feeds)
            logger.info("Anchor search found %s feed: %s", info.kind.value, url)
            self.events.emit("log", {"module": MODULE, "found": len(feeds), "url": url})

            if self.max_feeds and len(feeds) >= self.max_feeds:
                self.state.feed_budget_exhausted = True
                message = (
                    f"Stopped due to reaching maximum feeds limit: {len(feeds)} feeds found "
                    f"(max {self.max_feeds} allowed)."
                )
                logger.info(message)
                self.events.emit("log", {"module": MODULE, "message": message})
                break

        self.events.emit("end", {"module": MODULE, "feeds": feeds, "visited": len(checked)})
        return feeds

    def _candidate(self, href: str, base: str) -> Optional[str]:
        """Absolute, same-site candidate URL for *href*, or None to skip it."""
        try:
            kind = classify_href(href)
            if kind is HrefKind.UNSUPPORTED:
                return None
            url = resolve_href(href, base)
        except ValueError:
            self._handle_error(href, ValueError(f"Invalid URL: {href}"))
            return None
        if url is None:
            return None
        url = normalize_url(url)
        if not self.options.check_foreign_feeds and not is_same_domain(url, self.site):
            return None
        return url

    def _handle_error(self, url: str, exc: Exception) -> None:
        logger.debug("Anchor candidate failed %s: %s", url, exc)
        if self.options.show_errors:
            self.state.errors += 1
            self.events.emit("error", {"module": MODULE, "error": f"Error fetching {url}: {exc}"})


__all__ = ["AnchorScanner"]
