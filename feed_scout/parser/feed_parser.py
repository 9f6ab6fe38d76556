# File: feed_scout/parser/feed_parser.py
"""feed_scout.parser.feed_parser: определение типа фида (RSS, Atom, JSON Feed) и его заголовка.

Проверки идут в фиксированном порядке: RSS → Atom → JSON Feed. Первая
сработавшая побеждает, поэтому документ с корнем ``<rss version="2.0">`` и
случайным ``<entry>`` внутри остаётся RSS.

Пример:
```python
from feed_scout.parser.feed_parser import classify

info = classify(body)
if info:
    print(info.kind, info.title)
```
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Optional

from feed_scout.models import FeedKind

__all__ = ["FeedInfo", "classify", "clean_title", "check_rss", "check_atom", "check_json"]

_CDATA_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)
_WS_RE = re.compile(r"\s+")

_RSS_VERSION_RE = re.compile(r"<rss\b[^>]*\sversion\s*=\s*[\"'][\d.]+[\"']", re.IGNORECASE)
_ITEM_RE = re.compile(r"<item\b[^>]*>", re.IGNORECASE)
_CHANNEL_RE = re.compile(r"<channel\b[^>]*>(.*?)</channel>", re.IGNORECASE | re.DOTALL)

_ATOM_ROOT_RE = re.compile(r"<feed\b[^>]*\sxmlns(?::\w+)?\s*=", re.IGNORECASE)
_ENTRY_RE = re.compile(r"<entry\b[^>]*>", re.IGNORECASE)

_TITLE_RE = re.compile(r"<title\b[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)

_OEMBED_TYPES = frozenset({"rich", "video", "photo", "link"})


@dataclass(frozen=True, slots=True)
class FeedInfo:
    """Результат классификации: тип фида и очищенный заголовок."""

    kind: FeedKind
    title: Optional[str]


def clean_title(title: Optional[str]) -> Optional[str]:
    """Убирает обёртки CDATA, схлопывает пробелы и обрезает края.

    Идемпотентна: ``clean_title(clean_title(x)) == clean_title(x)``.
    """
    if title is None:
        return None
    text = str(title)
    # nested or adjacent wrappers can expose a new marker after one pass
    while True:
        stripped = _CDATA_RE.sub(r"\1", text)
        if stripped == text:
            break
        text = stripped
    return _WS_RE.sub(" ", text).strip()


def _first_title(fragment: str) -> Optional[str]:
    match = _TITLE_RE.search(fragment)
    if not match:
        return None
    return clean_title(match.group(1)) or None


def _title_before(content: str, marker: re.Pattern[str]) -> Optional[str]:
    """Заголовок уровня канала/фида: первый <title> до первого элемента *marker*."""
    first = marker.search(content)
    head = content[: first.start()] if first else content
    return _first_title(head)


def check_rss(content: str) -> Optional[FeedInfo]:
    if not (_RSS_VERSION_RE.search(content) or _ITEM_RE.search(content)):
        return None
    channel = _CHANNEL_RE.search(content)
    scope = channel.group(1) if channel else content
    title = _title_before(scope, _ITEM_RE) or _first_title(scope)
    return FeedInfo(FeedKind.RSS, title)


def check_atom(content: str) -> Optional[FeedInfo]:
    if not _ATOM_ROOT_RE.search(content):
        return None
    if not _ENTRY_RE.search(content) or not _TITLE_RE.search(content):
        return None
    title = _title_before(content, _ENTRY_RE) or _first_title(content)
    return FeedInfo(FeedKind.ATOM, title)


def _is_oembed(data: dict[str, Any]) -> bool:
    kind = data.get("type")
    if kind is None:
        return False
    if kind in _OEMBED_TYPES and "version" in data:
        return True
    return "version" in data and "html" in data


def check_json(content: str) -> Optional[FeedInfo]:
    text = content.lstrip()
    if not text.startswith("{"):
        return None
    try:
        data = json.loads(text)
    except ValueError:
        return None
    if not isinstance(data, dict) or _is_oembed(data):
        return None

    version = data.get("version")
    is_feed = (
        (isinstance(version, str) and "jsonfeed" in version.lower())
        or isinstance(data.get("items"), list)
        or "feed_url" in data
    )
    if not is_feed:
        return None
    raw_title = data.get("title") or data.get("name")
    title = clean_title(raw_title) if isinstance(raw_title, str) else None
    return FeedInfo(FeedKind.JSON, title or None)


def classify(content: Optional[str]) -> Optional[FeedInfo]:
    """Возвращает FeedInfo для RSS/Atom/JSON Feed или None, если это не фид."""
    if not content:
        return None
    return check_rss(content) or check_atom(content) or check_json(content)
