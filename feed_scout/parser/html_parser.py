# === FILE: feed_scout/parser/html_parser.py ===
"""HTML parsing utilities for FeedScout.

Every strategy that reads a page works on a :class:`ParsedPage` produced by
:func:`parse_html`; the markup is parsed once per document.

* anchors      : every ``<a href>`` in document order (raw href + text).
* link_tags    : every ``<link href>`` with its rel/type/title attributes.
* meta_refresh : target of ``<meta http-equiv="refresh">`` (raw, unresolved).

Hrefs are kept raw; resolving them is the caller's job since each strategy
resolves against a different base.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__: Sequence[str] = ("Anchor", "LinkTag", "ParsedPage", "parse_html")

_REFRESH_URL_RE = re.compile(r"url\s*=\s*['\"]?([^'\";]+)", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class Anchor:
    href: str
    text: str


@dataclass(frozen=True, slots=True)
class LinkTag:
    href: str
    rel: tuple[str, ...] = ()
    type: str = ""
    title: Optional[str] = None


@dataclass(slots=True)
class ParsedPage:
    """Lightweight representation of an HTML page."""

    url: str
    anchors: list[Anchor] = field(default_factory=list)
    link_tags: list[LinkTag] = field(default_factory=list)
    meta_refresh: Optional[str] = None

    # Convenience helpers ---------------------------------------------------
    def hrefs(self) -> list[str]:
        """Raw anchor hrefs in document order."""
        return [a.href for a in self.anchors]


def _attr(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value.strip() if isinstance(value, str) else ""


def _meta_refresh(soup: BeautifulSoup) -> Optional[str]:
    for meta in soup.find_all("meta"):
        if not isinstance(meta, Tag):
            continue
        if _attr(meta, "http-equiv").lower() != "refresh":
            continue
        match = _REFRESH_URL_RE.search(_attr(meta, "content"))
        if match:
            return match.group(1).strip()
    return None


def parse_html(html: str, url: str = "") -> ParsedPage:
    """Parse raw HTML markup fetched from *url*."""
    soup = BeautifulSoup(html or "", "html.parser")

    anchors: list[Anchor] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        anchors.append(Anchor(href=_attr(tag, "href"), text=tag.get_text(" ", strip=True)))

    link_tags: list[LinkTag] = []
    for tag in soup.find_all("link", href=True):
        if not isinstance(tag, Tag):
            continue
        rel = tag.get("rel") or ()
        if isinstance(rel, str):
            rel = rel.split()
        link_tags.append(
            LinkTag(
                href=_attr(tag, "href"),
                rel=tuple(r.lower() for r in rel),
                type=_attr(tag, "type").lower(),
                title=tag.get("title") if isinstance(tag.get("title"), str) else None,
            )
        )

    return ParsedPage(
        url=url,
        anchors=anchors,
        link_tags=link_tags,
        meta_refresh=_meta_refresh(soup),
    )
