# File: feed_scout/engine.py
"""feed_scout.engine: Orchestration layer для запуска стратегий поиска и агрегации результатов."""

from __future__ import annotations

import logging
from typing import Collection, Dict, List, Optional, Tuple

from aiohttp import ClientSession

from feed_scout.aggregator import FeedReport, merge_feeds
from feed_scout.anchor_finder import AnchorScanner
from feed_scout.bruteforce import EndpointGuesser
from feed_scout.checker import FeedChecker
from feed_scout.config import SearchOptions
from feed_scout.crawler.crawler import SiteCrawler
from feed_scout.crawler.fetcher import Fetcher
from feed_scout.crawler.models import FetchResponse
from feed_scout.events import EventEmitter
from feed_scout.meta_finder import MetaLinkScanner
from feed_scout.models import FeedRecord, SessionState, StopReason
from feed_scout.parser.html_parser import ParsedPage, parse_html
from feed_scout.sitemap_finder import SitemapScanner
from feed_scout.utils import normalize_site

__all__ = ["Engine", "SEQUENTIAL_ORDER"]

logger = logging.getLogger("FeedScout.engine")

MODULE = "engine"

# Порядок последовательного режима: от дешёвых стратегий к дорогим.
SEQUENTIAL_ORDER = ("meta", "anchors", "blind", "deep")


class Engine(EventEmitter):
    """Фасад для CLI и тестов: один сеанс поиска фидов для одного сайта.

    Использование::

        async with Engine("example.com", options) as engine:
            engine.on("start", print)
            report = await engine.run()

    Все стратегии публикуют события через сам Engine; слушатели необязательны.
    """

    def __init__(
        self,
        site: str,
        options: Optional[SearchOptions] = None,
        session: Optional[ClientSession] = None,
    ) -> None:
        """Нормализует сайт (ValueError для неверного адреса) и готовит Fetcher."""
        super().__init__()
        self.site = normalize_site(site)
        self.options = options or SearchOptions()
        self.fetcher = Fetcher(self.options, session=session)
        self.checker = FeedChecker(self.fetcher)
        self.document: Optional[ParsedPage] = None
        self.states: Dict[str, SessionState] = {}

    async def __aenter__(self) -> Engine:
        await self.fetcher.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.fetcher.__aexit__(exc_type, exc, tb)

    async def initialize(self) -> ParsedPage:
        """Загружает и разбирает корневой документ один раз за сеанс."""
        if self.document is not None:
            return self.document

        response = await self.fetcher.fetch(self.site)
        if isinstance(response, FetchResponse) and response.ok:
            self.document = parse_html(response.text, response.url)
            self.emit("initialized", {"module": MODULE, "url": self.site, "ok": True})
            return self.document

        reason = f"HTTP {response.status}" if isinstance(response, FetchResponse) else "unavailable"
        logger.warning("Root document of %s could not be loaded (%s)", self.site, reason)
        if self.options.show_errors:
            self.emit("error", {"module": MODULE, "error": f"Failed to load {self.site}: {reason}"})
        self.emit("initialized", {"module": MODULE, "url": self.site, "ok": False})
        self.document = ParsedPage(url=self.site)
        return self.document

    # --- стратегии -------------------------------------------------------

    async def meta_links(self) -> List[FeedRecord]:
        document = await self.initialize()
        feeds = MetaLinkScanner(self.site, events=self).scan(document)
        self.states["meta"] = SessionState(feeds_found=len(feeds))
        return feeds

    async def check_all_anchors(
        self, max_feeds: Optional[int] = None, known: Collection[str] = ()
    ) -> List[FeedRecord]:
        document = await self.initialize()
        scanner = AnchorScanner(
            self.site,
            self.options,
            self.fetcher,
            self.checker,
            events=self,
            max_feeds=max_feeds,
            known=known,
        )
        feeds = await scanner.scan(document)
        self.states["anchors"] = scanner.state
        return feeds

    async def blind_search(
        self, max_feeds: Optional[int] = None, known: Collection[str] = ()
    ) -> List[FeedRecord]:
        guesser = EndpointGuesser(
            self.site, self.options, self.checker, events=self, max_feeds=max_feeds, known=known
        )
        feeds = await guesser.run()
        self.states["blind"] = guesser.state
        return feeds

    async def deep_search(
        self, max_feeds: Optional[int] = None, known: Collection[str] = ()
    ) -> List[FeedRecord]:
        crawler = SiteCrawler(
            self.site, self.options, self.fetcher, events=self, max_feeds=max_feeds, known=known
        )
        result = await crawler.crawl()
        self.states["deep"] = result.state
        return result.feeds

    async def sitemap_search(
        self, max_feeds: Optional[int] = None, known: Collection[str] = ()
    ) -> List[FeedRecord]:
        scanner = SitemapScanner(
            self.site,
            self.options,
            self.fetcher,
            self.checker,
            events=self,
            max_feeds=max_feeds,
            known=known,
        )
        feeds = await scanner.run()
        self.states["sitemap"] = scanner.state
        return feeds

    async def run_strategy(
        self, name: str, max_feeds: Optional[int] = None, known: Collection[str] = ()
    ) -> List[FeedRecord]:
        """Запускает одну стратегию по имени.

        URL из *known* уже найдены: стратегия их не проверяет и не тратит на них *max_feeds*.
        """
        if name == "meta":
            return await self.meta_links()
        runners = {
            "anchors": self.check_all_anchors,
            "blind": self.blind_search,
            "deep": self.deep_search,
            "sitemap": self.sitemap_search,
        }
        try:
            runner = runners[name]
        except KeyError:
            raise ValueError(f"Unknown strategy: {name!r}") from None
        return await runner(max_feeds=max_feeds, known=known)

    # --- оркестрация -----------------------------------------------------

    def planned_strategies(self) -> Tuple[str, ...]:
        if self.options.strategy:
            return (self.options.strategy,)
        if self.options.deep_search:
            return SEQUENTIAL_ORDER
        return SEQUENTIAL_ORDER[:-1]

    async def run(self) -> FeedReport:
        """Запускает стратегии согласно режиму и возвращает агрегированный отчёт."""
        report = FeedReport(site=self.site)
        limit = self.options.max_feeds
        plan = self.planned_strategies()
        logger.info("Starting feed search for %s: %s", self.site, ", ".join(plan))

        stopped_early = False
        for index, name in enumerate(plan):
            remaining = limit - report.found if limit else None
            known = {feed.url for feed in report.feeds}
            feeds = await self.run_strategy(name, max_feeds=remaining, known=known)
            before = report.found
            report.feeds = merge_feeds(report.feeds, feeds, limit)
            report.strategies.append(name)
            logger.info("%s: %d feeds, %d new", name, len(feeds), report.found - before)

            more_left = index < len(plan) - 1
            if limit and report.found >= limit:
                stopped_early = more_left
                break
            if not limit and self.options.stop_at_first and report.found > before:
                stopped_early = more_left
                break

        for name in report.strategies:
            state = self.states.get(name)
            if state is not None:
                report.visited += state.links_visited
                report.errors += state.errors
        report.stop_reason = self._stop_reason(report, stopped_early)
        logger.info("Feed search finished for %s: %s", self.site, report.message)
        return report

    def _stop_reason(self, report: FeedReport, stopped_early: bool) -> StopReason:
        if not report.feeds:
            last = self.states.get(report.strategies[-1]) if report.strategies else None
            if last is not None and last.stop_reason is StopReason.MAX_ERRORS:
                return StopReason.MAX_ERRORS
            return StopReason.NO_FEEDS
        limit = self.options.max_feeds
        if limit and report.found >= limit:
            return StopReason.MAX_FEEDS
        if stopped_early:
            return StopReason.FIRST_FOUND
        last = self.states.get(report.strategies[-1])
        return last.stop_reason if last is not None else StopReason.COMPLETED
