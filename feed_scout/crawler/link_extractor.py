# feed_scout/crawler/link_extractor.py
"""
Href classification and resolution utilities for FeedScout.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional
from urllib.parse import urldefrag, urljoin, urlsplit

_HTTP_SCHEMES = ("http", "https")


class HrefKind(Enum):
    ABSOLUTE = "absolute"
    RELATIVE = "relative"
    UNSUPPORTED = "unsupported"


def classify_href(href: str) -> HrefKind:
    """
    ABSOLUTE for http(s) URLs, RELATIVE for scheme-less references
    (``/a``, ``a/b``, ``//host/a``, ``?q``), UNSUPPORTED for mailto:,
    javascript:, tel:, ftp: and the like.
    """
    raw = href.strip()
    if not raw:
        return HrefKind.UNSUPPORTED
    scheme = urlsplit(raw).scheme.lower()
    if not scheme:
        return HrefKind.RELATIVE
    if scheme in _HTTP_SCHEMES:
        return HrefKind.ABSOLUTE
    return HrefKind.UNSUPPORTED


def resolve_href(href: str, base_url: str) -> Optional[str]:
    """
    Resolve *href* against *base_url* and drop the fragment.

    Returns None for unsupported schemes and fragment-only links.
    May raise ValueError for malformed hrefs (e.g. broken IPv6 literals).
    """
    kind = classify_href(href)
    if kind is HrefKind.UNSUPPORTED:
        return None
    raw = href.strip()
    if raw.startswith("#"):
        return None
    absolute = raw if kind is HrefKind.ABSOLUTE else urljoin(base_url, raw)
    absolute, _ = urldefrag(absolute)
    parsed = urlsplit(absolute)
    if parsed.scheme.lower() not in _HTTP_SCHEMES or not parsed.hostname:
        return None
    return absolute

