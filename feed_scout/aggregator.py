# File: feed_scout/aggregator.py
"""feed_scout.aggregator: Модуль агрегатора результатов поиска фидов."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from feed_scout.models import FeedRecord, StopReason


@dataclass(slots=True)
class FeedReport:
    """Результат одного сеанса поиска: фиды, запущенные стратегии и причина остановки."""

    site: str
    feeds: List[FeedRecord] = field(default_factory=list)
    strategies: List[str] = field(default_factory=list)
    stop_reason: StopReason = StopReason.COMPLETED
    visited: int = 0
    errors: int = 0

    @property
    def found(self) -> int:
        return len(self.feeds)

    @property
    def message(self) -> str:
        """Итоговая строка для CLI."""
        if not self.feeds:
            return "No feeds found"
        noun = "feed" if self.found == 1 else "feeds"
        return f"{self.found} {noun} found ({self.stop_reason.value})"

    def to_list(self) -> List[Dict[str, Any]]:
        return [feed.to_dict() for feed in self.feeds]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "site": self.site,
            "feeds": self.to_list(),
            "strategies": list(self.strategies),
            "stopReason": self.stop_reason.value,
            "visited": self.visited,
            "errors": self.errors,
        }

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-список фидов (форма вывода CLI)."""
        return json.dumps(self.to_list(), ensure_ascii=False, indent=2 if pretty else None)


def merge_feeds(
    existing: List[FeedRecord], new: Iterable[FeedRecord], limit: Optional[int] = None
) -> List[FeedRecord]:
    """Добавляет новые фиды к уже найденным без дублей по URL.

    Первая находка побеждает: запись более поздней стратегии с тем же URL
    отбрасывается. ``limit`` (> 0) обрезает результат.
    """
    merged = list(existing)
    seen = {feed.url for feed in merged}
    for feed in new:
        if feed.url in seen:
            continue
        seen.add(feed.url)
        merged.append(feed)
    if limit:
        merged = merged[:limit]
    return merged


__all__ = ["FeedReport", "merge_feeds"]
