"""
Data models shared by all FeedScout search strategies.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class FeedKind(str, Enum):
    """Syndication format detected by the classifier."""

    RSS = "rss"
    ATOM = "atom"
    JSON = "json"


class StopReason(str, Enum):
    """Why a strategy or a whole search session stopped."""

    COMPLETED = "completed"
    FIRST_FOUND = "first_found"
    MAX_FEEDS = "max_feeds"
    MAX_ERRORS = "max_errors"
    MAX_LINKS = "max_links"
    NO_FEEDS = "no_feeds"


@dataclass(frozen=True, slots=True)
class FeedRecord:
    """A discovered feed. Identity is the absolute ``url``."""

    url: str
    kind: FeedKind
    title: Optional[str] = None
    discovered_by: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "type": self.kind.value,
            "title": self.title,
            "discoveredBy": self.discovered_by,
        }


@dataclass(slots=True)
class SessionState:
    """Counters and budget flags of one strategy run."""

    feeds_found: int = 0
    errors: int = 0
    links_visited: int = 0
    feed_budget_exhausted: bool = False
    error_budget_exhausted: bool = False
    link_budget_exhausted: bool = False

    @property
    def stop_reason(self) -> StopReason:
        if self.error_budget_exhausted:
            return StopReason.MAX_ERRORS
        if self.feed_budget_exhausted:
            return StopReason.MAX_FEEDS
        if self.link_budget_exhausted:
            return StopReason.MAX_LINKS
        return StopReason.COMPLETED

    @property
    def draining(self) -> bool:
        """True once the error or feed budget forces the frontier to drain."""
        return self.error_budget_exhausted or self.feed_budget_exhausted


__all__ = ["FeedKind", "StopReason", "FeedRecord", "SessionState"]
