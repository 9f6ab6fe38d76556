"""Meta search: feeds advertised by ``<link>`` elements of the root document.

No network I/O: the declared ``type`` is trusted.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from feed_scout.crawler.link_extractor import resolve_href
from feed_scout.events import EventEmitter
from feed_scout.models import FeedKind, FeedRecord
from feed_scout.parser.feed_parser import clean_title
from feed_scout.parser.html_parser import LinkTag, ParsedPage
from feed_scout.utils import normalize_site, normalize_url

logger = logging.getLogger("FeedScout.meta")

MODULE = "meta"
NICE_NAME = "Meta links"

# Scanned in this order; all links of one type before the next type.
FEED_MIME_TYPES: dict[str, FeedKind] = {
    "application/feed+json": FeedKind.JSON,
    "application/rss+xml": FeedKind.RSS,
    "application/atom+xml": FeedKind.ATOM,
    "application/rdf+xml": FeedKind.RSS,
}

FEED_HREF_PATTERNS = ("/rss", "/feed", "/atom", ".rss", ".atom", ".xml", ".json")


def media_type(link: LinkTag) -> str:
    """Declared ``type`` without parameters such as ``; charset=utf-8``."""
    return link.type.split(";", 1)[0].strip()


def guess_kind(link: LinkTag) -> FeedKind:
    """Declared type first, then the href extension, else RSS."""
    declared = FEED_MIME_TYPES.get(media_type(link))
    if declared:
        return declared
    for marker, kind in (("rss", FeedKind.RSS), ("atom", FeedKind.ATOM), ("json", FeedKind.JSON)):
        if marker in link.type:
            return kind
    href = link.href.lower()
    if ".rss" in href or ".xml" in href:
        return FeedKind.RSS
    if ".atom" in href:
        return FeedKind.ATOM
    if ".json" in href:
        return FeedKind.JSON
    return FeedKind.RSS


def _looks_like_feed(link: LinkTag) -> bool:
    if "alternate" not in link.rel or "html" in link.type:
        return False
    href = link.href.lower()
    return any(pattern in href for pattern in FEED_HREF_PATTERNS)


class MetaLinkScanner:
    def __init__(self, site: str, events: Optional[EventEmitter] = None) -> None:
        self.site = normalize_site(site)
        self.events = events if events is not None else EventEmitter()

    def scan(self, document: ParsedPage) -> List[FeedRecord]:
        self.events.emit("start", {"module": MODULE, "nice_name": NICE_NAME})
        candidates: List[LinkTag] = []
        for mime in FEED_MIME_TYPES:
            self.events.emit("log", {"module": MODULE, "feed_type": mime})
            candidates.extend(link for link in document.link_tags if media_type(link) == mime)
        candidates.extend(link for link in document.link_tags if _looks_like_feed(link))

        feeds: List[FeedRecord] = []
        seen: set[str] = set()
        for link in candidates:
            try:
                url = resolve_href(link.href, self.site)
            except ValueError:
                logger.debug("Skipping malformed link href %r", link.href)
                continue
            if url is None:
                continue
            url = normalize_url(url)
            if url in seen:
                continue
            seen.add(url)
            feeds.append(
                FeedRecord(
                    url=url,
                    kind=guess_kind(link),
                    title=clean_title(link.title) or None,
                    discovered_by=MODULE,
                )
            )

        logger.info("Meta search: %d feed links on %s", len(feeds), self.site)
        self.events.emit("end", {"module": MODULE, "feeds": feeds})
        return feeds


__all__ = ["MetaLinkScanner", "FEED_MIME_TYPES", "guess_kind", "media_type"]
