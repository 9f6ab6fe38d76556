# === FILE: feed_scout/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import logging
import time
from typing import Collection, List, Optional, Set

from feed_scout.config import SearchOptions
from feed_scout.crawler.fetcher import Fetcher
from feed_scout.crawler.link_extractor import resolve_href
from feed_scout.crawler.models import CrawlResult, CrawlTask, FetchResponse
from feed_scout.events import EventEmitter
from feed_scout.models import FeedRecord, SessionState
from feed_scout.parser.feed_parser import FeedInfo, classify
from feed_scout.parser.html_parser import parse_html
from feed_scout.utils import is_excluded_file, is_same_domain, normalize_site, normalize_url

__all__ = ("SiteCrawler", "MODULE", "NICE_NAME")

MODULE = "deep"
NICE_NAME = "Deep search"


class SiteCrawler:
    """
    Breadth-first, depth-bounded crawl of one registrable domain.

    Every task is fetched once: the body is first classified as a feed, and
    only non-feed pages of the site below the depth limit have their links
    extracted. Links found on a page at depth ``d`` become tasks at ``d + 1``;
    foreign links (with ``check_foreign_feeds``) are probe-only tasks.

    Budgets: ``max_links`` caps admissions to the frontier (exact here, since
    admission happens between awaits on a single event loop; treat it as
    best-effort if workers ever move to threads), ``max_errors`` and
    ``max_feeds`` drain the frontier while in-flight tasks finish.

    URLs in ``known`` (feeds reported by earlier strategies) are never admitted.
    """

    def __init__(
        self,
        site: str,
        options: SearchOptions,
        fetcher: Fetcher,
        events: Optional[EventEmitter] = None,
        max_feeds: Optional[int] = None,
        known: Collection[str] = (),
    ) -> None:
        self.site = normalize_site(site)
        self.options = options
        self.fetcher = fetcher
        self.events = events if events is not None else EventEmitter()
        self.max_feeds = options.max_feeds if max_feeds is None else max_feeds
        self.known = frozenset(known)
        self.concurrency = options.concurrency
        self.state = SessionState()
        self.feeds: List[FeedRecord] = []
        self.visited: Set[str] = set()
        self.scheduled: Set[str] = set()
        self.logger = logging.getLogger("FeedScout.crawler")
        self._feed_urls: Set[str] = set()
        self._queue: Optional[asyncio.Queue[CrawlTask]] = None
        self._link_budget_logged = False

    async def crawl(self) -> CrawlResult:
        self.events.emit("start", {"module": MODULE, "nice_name": NICE_NAME})
        self.logger.info("Deep search start: %s (depth=%d)", self.site, self.options.depth)
        start = time.monotonic()

        queue: asyncio.Queue[CrawlTask] = asyncio.Queue()
        self._queue = queue
        self._admit(CrawlTask(normalize_url(self.site), 0, crawl=True))
        workers = [asyncio.create_task(self._worker(queue)) for _ in range(self.concurrency)]
        await queue.join()
        for w in workers:
            w.cancel()
        await asyncio.gather(*workers, return_exceptions=True)

        duration = time.monotonic() - start
        self.logger.info(
            "Deep search finished: %d pages, %d feeds, %d errors in %.2f s (%s)",
            self.state.links_visited,
            len(self.feeds),
            self.state.errors,
            duration,
            self.state.stop_reason.value,
        )
        result = CrawlResult(feeds=list(self.feeds), state=self.state)
        self.events.emit(
            "end", {"module": MODULE, "feeds": result.feeds, "visited": self.state.links_visited}
        )
        return result

    async def _worker(self, queue: asyncio.Queue[CrawlTask]) -> None:
        while True:
            task = await queue.get()
            try:
                if not self.state.draining:
                    await self._process(task)
            except Exception as exc:
                # one broken page counts against the error budget, the crawl goes on
                self.logger.debug("Processing %s failed", task.url, exc_info=True)
                self._record_error(task, f"{type(exc).__name__}: {exc}")
            finally:
                queue.task_done()

    async def _process(self, task: CrawlTask) -> None:
        if task.url in self.visited:
            return
        if self.state.links_visited >= self.options.max_links:
            self._link_budget_hit()
            return
        self.visited.add(task.url)
        self.state.links_visited += 1

        response = await self.fetcher.fetch(task.url)
        if not isinstance(response, FetchResponse):
            self._record_error(task, "Failed to fetch URL - timeout or network error")
            return
        final_url = normalize_url(response.url)
        self.visited.add(final_url)

        if task.crawl and not response.ok:
            self._record_error(task, f"HTTP {response.status}")
            return

        info = classify(response.text)
        if info:
            self._record_feed(task, info)
            return
        self.events.emit(
            "log", {"module": MODULE, "url": task.url, "depth": task.depth, "is_feed": False}
        )

        if not task.crawl or task.depth >= self.options.depth or self.state.draining:
            return
        self._enqueue_links(task, response)

    def _enqueue_links(self, task: CrawlTask, response: FetchResponse) -> None:
        page = parse_html(response.text, response.url)
        for href in page.hrefs():
            if self.state.draining:
                break
            try:
                link = resolve_href(href, response.url)
            except ValueError:
                self._record_error(task, f"Invalid URL: {href}")
                continue
            if link is None or is_excluded_file(link):
                continue
            link = normalize_url(link)
            same_domain = is_same_domain(link, self.site)
            if not same_domain and not self.options.check_foreign_feeds:
                continue
            if not self._admit(CrawlTask(link, task.depth + 1, crawl=same_domain)):
                break

    def _admit(self, task: CrawlTask) -> bool:
        """Put *task* on the frontier. False means no further admissions are possible."""
        if self.state.draining or self._queue is None:
            return False
        if task.url in self.scheduled or task.url in self.visited or task.url in self.known:
            return True
        if len(self.scheduled) >= self.options.max_links:
            self._link_budget_hit()
            return False
        self.scheduled.add(task.url)
        self._queue.put_nowait(task)
        return True

    def _record_feed(self, task: CrawlTask, info: FeedInfo) -> None:
        if task.url in self._feed_urls:
            return
        if self.max_feeds and len(self.feeds) >= self.max_feeds:
            return
        self._feed_urls.add(task.url)
        self.feeds.append(
            FeedRecord(url=task.url, kind=info.kind, title=info.title, discovered_by=MODULE)
        )
        self.state.feeds_found = len(self.feeds)
        self.events.emit(
            "log",
            {
                "module": MODULE,
                "url": task.url,
                "depth": task.depth,
                "is_feed": True,
                "type": info.kind.value,
            },
        )
        if self.max_feeds and len(self.feeds) >= self.max_feeds:
            self.state.feed_budget_exhausted = True
            self._drain()
            self._milestone(
                f"Stopped due to reaching maximum feeds limit: {len(self.feeds)} feeds found "
                f"(max {self.max_feeds} allowed)."
            )

    def _record_error(self, task: CrawlTask, message: str) -> None:
        if self.state.error_budget_exhausted:
            return
        self.state.errors += 1
        self.events.emit(
            "log", {"module": MODULE, "url": task.url, "depth": task.depth, "error": message}
        )
        if self.options.show_errors:
            self.events.emit("error", {"module": MODULE, "error": f"{message}: {task.url}"})
        if self.state.errors >= self.options.max_errors:
            self.state.error_budget_exhausted = True
            self._drain()
            self._milestone(
                f"Stopped due to {self.state.errors} errors (max {self.options.max_errors} allowed)."
            )

    def _link_budget_hit(self) -> None:
        self.state.link_budget_exhausted = True
        if not self._link_budget_logged:
            self._link_budget_logged = True
            self._milestone(f"Max links limit of {self.options.max_links} reached. Stopping deep search.")

    def _milestone(self, message: str) -> None:
        self.logger.info(message)
        self.events.emit("log", {"module": MODULE, "message": message})

    def _drain(self) -> None:
        """Drop every queued task; in-flight tasks still finish."""
        queue = self._queue
        if queue is None:
            return
        while True:
            try:
                queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            queue.task_done()
