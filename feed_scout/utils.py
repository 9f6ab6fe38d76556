# File: feed_scout/utils.py
"""feed_scout.utils: Утилитарные функции для обработки URL и сравнения доменов."""

from __future__ import annotations

from functools import lru_cache
from typing import Collection, List, Sequence
from urllib.parse import urlsplit, urlunsplit

import tldextract

from feed_scout.logger import logger

__all__: Sequence[str] = (
    "EXCLUDED_EXTENSIONS",
    "normalize_site",
    "normalize_url",
    "origin_of",
    "registrable_domain",
    "is_same_domain",
    "is_excluded_file",
    "remove_duplicates",
)

# Архивы, документы, изображения, аудио и видео: их не качаем при обходе.
EXCLUDED_EXTENSIONS: tuple[str, ...] = (
    ".zip", ".rar", ".7z", ".tar.gz", ".tar.bz2", ".tar.xz", ".tar", ".gz", ".bz2", ".xz", ".tgz",
    ".epub", ".mobi", ".azw",
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff", ".svg", ".webp", ".ico",
    ".mp3", ".wav", ".flac",
    ".mp4", ".avi", ".mov", ".wmv", ".mpg", ".mpeg", ".flv", ".mkv", ".webm",
    ".ogg", ".ogv", ".ogx",
)

# Offline public suffix snapshot: no network access, no cache directory.
_EXTRACT = tldextract.TLDExtract(suffix_list_urls=(), cache_dir=None)


def normalize_site(site: str) -> str:
    """Приводит адрес сайта к абсолютному URL (https по умолчанию).

    Raises ValueError for anything that is not an http(s) URL with a host.
    """
    if not isinstance(site, str) or not site.strip():
        raise ValueError("site must be a non-empty string")
    site = site.strip()
    if "://" not in site:
        site = f"https://{site}"
    parts = urlsplit(site)
    if parts.scheme.lower() not in ("http", "https"):
        raise ValueError(f"Unsupported scheme in site URL: {site!r}")
    if not parts.hostname:
        raise ValueError(f"Site URL has no host: {site!r}")
    path = parts.path or "/"
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, ""))


def normalize_url(url: str) -> str:
    """Нормализует URL для сравнения: схема и хост в нижнем регистре, без фрагмента."""
    parts = urlsplit(url)
    path = parts.path or "/"
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, ""))


def origin_of(url: str) -> str:
    """Возвращает ``scheme://host[:port]`` без пути."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


@lru_cache(maxsize=4096)
def _registrable(hostname: str) -> str:
    ext = _EXTRACT(hostname)
    if ext.domain and ext.suffix:
        return f"{ext.domain}.{ext.suffix}"
    # localhost, IP addresses, bare intranet names
    return hostname


def registrable_domain(url: str) -> str:
    """Возвращает регистрируемый домен (``example.co.uk``) или hostname, если его нет."""
    hostname = urlsplit(url).hostname or ""
    return _registrable(hostname.lower())


def is_same_domain(url: str, other: str) -> bool:
    """True, если оба URL относятся к одному регистрируемому домену."""
    try:
        return registrable_domain(url) == registrable_domain(other)
    except ValueError:
        logger.debug("Cannot compare domains of %s and %s", url, other)
        return False


def is_excluded_file(url: str) -> bool:
    """True для ссылок на бинарные/медиа файлы из :data:`EXCLUDED_EXTENSIONS`."""
    path = urlsplit(url).path.lower()
    return path.endswith(EXCLUDED_EXTENSIONS)


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
