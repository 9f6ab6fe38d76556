# feed_scout/crawler/models.py
"""
Data models for the FeedScout fetcher and crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final, List

from feed_scout.models import FeedRecord, SessionState


class Unavailable:
    """Sentinel for a fetch that produced no response (timeout, DNS, refused…)."""

    _instance: "Unavailable | None" = None

    def __new__(cls) -> "Unavailable":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNAVAILABLE"


UNAVAILABLE: Final[Unavailable] = Unavailable()


@dataclass(slots=True)
class FetchResponse:
    """A completed HTTP exchange; error statuses are still responses."""

    url: str
    status: int
    content_type: str
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_html(self) -> bool:
        return "html" in self.content_type


@dataclass(frozen=True, slots=True)
class CrawlTask:
    """Frontier entry. ``crawl=False`` means probe only, never extract links."""

    url: str
    depth: int
    crawl: bool = True


@dataclass(slots=True)
class CrawlResult:
    feeds: List[FeedRecord] = field(default_factory=list)
    state: SessionState = field(default_factory=SessionState)

    @property
    def visited(self) -> int:
        return self.state.links_visited
