"""Blind search: перебор типичных адресов фидов на каждом уровне пути сайта."""

from __future__ import annotations

import logging
from typing import Collection, List, Optional, Sequence
from urllib.parse import urlsplit

from feed_scout.checker import FeedChecker, FeedCheckError
from feed_scout.config import SearchOptions
from feed_scout.events import EventEmitter
from feed_scout.models import FeedKind, FeedRecord, SessionState
from feed_scout.utils import normalize_site, normalize_url, remove_duplicates

logger = logging.getLogger("FeedScout.blind")

MODULE = "blind"
NICE_NAME = "Blind search"

# Порядок фиксирован: кандидаты проверяются строго в этой последовательности.
# "&..." добавляется к query string, остальные записи – к пути.
FEED_ENDPOINTS: Sequence[str] = tuple(
    dict.fromkeys(
        (
            "&_rss=1",  # eBay
            ".rss",  # Reddit
            "/blog?format=rss",  # Squarespace
            "/?format=feed",  # Joomla
            "/index.php?format=feed",  # Joomla
            "api/rss.xml",
            "atom.xml",
            "blog-feed.xml",  # Wix
            "catalog.xml",
            "deals.xml",
            "episodes.rss",
            "events.rss",
            "extern.php?action=feed&type=atom",
            "export/rss.xml",
            "external?type=rss2",
            "feed",
            "feed.aspx",  # ASP.NET
            "feed.cml",  # Wix, Webflow
            "feed/atom",
            "feed/atom.rss",
            "feed/atom.xml",
            "feed/rdf",
            "feed/rss/",
            "feed/rss.xml",
            "feed/rss2",
            "feeds",
            "forum.rss",
            "gallery.rss",
            "index.php?action=.xml;type=rss",
            "index.rss",
            "index.xml",
            "inventory.rss",
            "jobs.rss",
            "latest/feed",
            "latest.rss",
            "news.xml",
            "podcast.rss",
            "posts.rss",
            "products.rss",
            "public/feed.xml",
            "rss",
            "rss.aspx",  # ASP.NET
            "rss.cfm",  # ColdFusion
            "rss.php",
            "rss/news/rss.xml",
            "rss/rss.php",
            "rssfeed.rdf",
            "rssfeed.xml",
            "rss.xml",
            "sitenews",
            "spip.php?page=backend",
            "spip.php?page=backend-breve",
            "spip.php?page=backend-sites",
            "syndicate/rss.xml",
            "syndication.php",
            "videos.rss",
            "xml",
            "feed.xml",
            "feed.json",
            "feeds/posts/default",  # Blogger
            "?feed=rss2",  # WordPress without pretty permalinks
            "index.atom",
        )
    )
)


def path_ladder(site: str) -> List[str]:
    """Базовые пути от самого конкретного до origin, без завершающего слеша.

    ``https://a.com/x/y/`` → ``[https://a.com/x/y, https://a.com/x, https://a.com]``
    """
    parts = urlsplit(site)
    origin = f"{parts.scheme}://{parts.netloc}"
    segments = [s for s in parts.path.split("/") if s]
    return [
        origin + "".join(f"/{s}" for s in segments[:level])
        for level in range(len(segments), -1, -1)
    ]


def _join(base: str, endpoint: str, query: str) -> str:
    if endpoint.startswith("&"):
        flag = endpoint[1:]
        return f"{base}?{query}&{flag}" if query else f"{base}?{flag}"
    candidate = f"{base}/{endpoint.lstrip('/')}"
    if query:
        candidate += ("&" if "?" in candidate else "?") + query
    return candidate


def generate_endpoint_urls(site: str, keep_query_params: bool = False) -> List[str]:
    """Все кандидаты: уровни пути снаружи, каталог FEED_ENDPOINTS внутри."""
    query = urlsplit(site).query if keep_query_params else ""
    urls = [_join(base, endpoint, query) for base in path_ladder(site) for endpoint in FEED_ENDPOINTS]
    return remove_duplicates(urls)


class EndpointGuesser:
    """Последовательно проверяет кандидатов из generate_endpoint_urls()."""

    def __init__(
        self,
        site: str,
        options: SearchOptions,
        checker: FeedChecker,
        events: Optional[EventEmitter] = None,
        max_feeds: Optional[int] = None,
        known: Collection[str] = (),
    ) -> None:
        """max_feeds переопределяет options.max_feeds (остаток общего бюджета);
        known: фиды, уже найденные другими стратегиями, они не проверяются повторно."""
        self.site = normalize_site(site)
        self.options = options
        self.checker = checker
        self.events = events if events is not None else EventEmitter()
        self.max_feeds = options.max_feeds if max_feeds is None else max_feeds
        self.known = frozenset(known)
        self.state = SessionState()

    def _budget_reached(self, feeds: List[FeedRecord]) -> bool:
        return bool(self.max_feeds) and len(feeds) >= self.max_feeds

    async def run(self) -> List[FeedRecord]:
        """Перебирает кандидатов и возвращает найденные фиды в порядке обнаружения."""
        self.events.emit("start", {"module": MODULE, "nice_name": NICE_NAME})
        urls = generate_endpoint_urls(self.site, self.options.keep_query_params)
        total = len(urls)
        self.events.emit("log", {"module": MODULE, "total": total})
        logger.info("Blind search: %d candidates for %s", total, self.site)

        feeds: List[FeedRecord] = []
        found_urls: set[str] = set()
        kinds_seen: set[FeedKind] = set()

        for index, url in enumerate(urls, start=1):
            if url not in found_urls and normalize_url(url) not in self.known:
                try:
                    info = await self.checker.check(url)
                except FeedCheckError as exc:
                    self._handle_error(url, exc)
                    info = None
                if info:
                    found_urls.add(url)
                    kinds_seen.add(info.kind)
                    feeds.append(FeedRecord(url=url, kind=info.kind, title=info.title, discovered_by=MODULE))
                    self.state.feeds_found = len(feeds)
                    logger.info("Blind search found %s feed: %s", info.kind.value, url)
                    self.events.emit("log", {"module": MODULE, "found": len(feeds), "url": url})

            self.state.links_visited = index
            self.events.emit("log", {"module": MODULE, "visited": index, "total": total})

            if self._budget_reached(feeds):
                self.state.feed_budget_exhausted = True
                self._milestone(
                    f"Stopped due to reaching maximum feeds limit: {len(feeds)} feeds found "
                    f"(max {self.max_feeds} allowed)."
                )
                break
            if self.options.stop_at_first and {FeedKind.RSS, FeedKind.ATOM} <= kinds_seen:
                logger.info("Blind search: RSS and Atom found, stopping after %d/%d", index, total)
                break

        self.events.emit("end", {"module": MODULE, "feeds": feeds, "visited": self.state.links_visited})
        return feeds

    def _handle_error(self, url: str, exc: Exception) -> None:
        logger.debug("Blind search candidate failed %s: %s", url, exc)
        if self.options.show_errors:
            self.state.errors += 1
            self.events.emit("error", {"module": MODULE, "error": f"Error fetching {url}: {exc}"})

    def _milestone(self, message: str) -> None:
        logger.info(message)
        self.events.emit("log", {"module": MODULE, "message": message})


__all__ = ["EndpointGuesser", "FEED_ENDPOINTS", "path_ladder", "generate_endpoint_urls"]
