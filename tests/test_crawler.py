# File: tests/test_crawler.py
# Test-suite for the FeedScout deep search crawler
from __future__ import annotations

import asyncio
import time
from collections import Counter

import pytest
from feed_scout.config import SearchOptions
from feed_scout.crawler.crawler import SiteCrawler
from feed_scout.crawler.fetcher import Fetcher
from feed_scout.events import EventEmitter
from feed_scout.models import FeedKind, StopReason

#: number of seconds a “slow” handler sleeps in the concurrency test
SLOW_SLEEP: float = 0.5
#: pages linked from the root in the stress test
STRESS_PAGES: int = 120


def html_links(*hrefs: str) -> tuple[str, str]:
    return "".join(f'<a href="{h}">{h}</a>' for h in hrefs), "text/html"


async def run_crawler(site: str, options: SearchOptions, events: EventEmitter | None = None):
    """Run the crawler inside a generous overall timeout."""
    async with Fetcher(options) as fetcher:
        crawler = SiteCrawler(site, options, fetcher, events=events)
        result = await asyncio.wait_for(crawler.crawl(), timeout=30)
    return crawler, result


@pytest.mark.asyncio()
async def test_finds_feed_behind_pages(site_factory, fast_options, rss_body):
    base = await site_factory(
        {
            "/": html_links("/blog"),
            "/blog": html_links("/blog/feed.xml"),
            "/blog/feed.xml": (rss_body, "application/rss+xml"),
        }
    )
    _, result = await run_crawler(base, fast_options)

    assert [(f.url, f.kind, f.discovered_by) for f in result.feeds] == [
        (f"{base}/blog/feed.xml", FeedKind.RSS, "deep")
    ]
    assert result.visited == 3
    assert result.state.stop_reason is StopReason.COMPLETED


@pytest.mark.asyncio()
async def test_depth_bound(site_factory, fast_options):
    hits = Counter()
    base = await site_factory(
        {
            "/": html_links("/p1"),
            "/p1": html_links("/p2"),
            "/p2": html_links("/p3"),
            "/p3": html_links("/p4"),
        },
        hits,
    )
    crawler, result = await run_crawler(base, fast_options.with_overrides(depth=2))

    assert hits["/p2"] == 1
    assert hits["/p3"] == 0
    assert hits["/p4"] == 0
    assert result.visited == 3


@pytest.mark.asyncio()
async def test_depth_zero_fetches_root_only(site_factory, fast_options):
    hits = Counter()
    base = await site_factory({"/": html_links("/p1")}, hits)
    _, result = await run_crawler(base, fast_options.with_overrides(depth=0))
    assert result.visited == 1
    assert hits["/p1"] == 0


@pytest.mark.asyncio()
async def test_visit_once(site_factory, fast_options):
    hits = Counter()
    base = await site_factory(
        {
            "/": html_links("/a", "/b", "/a#section", "/A/../a"),
            "/a": html_links("/", "/b", "/a"),
            "/b": html_links("/a#x", "/", "/b"),
        },
        hits,
    )
    crawler, result = await run_crawler(base, fast_options.with_overrides(concurrency=5))

    assert hits["/"] == 1
    assert hits["/a"] == 1
    assert hits["/b"] == 1
    assert result.visited == 3
    assert crawler.fetcher.requests_made == 3


@pytest.mark.asyncio()
async def test_unreachable_root_with_single_error_budget(unused_tcp_port):
    options = SearchOptions(timeout=1.0, max_errors=1)
    events = EventEmitter()
    messages = []
    events.on("log", lambda data: data.get("message") and messages.append(data["message"]))
    crawler, result = await run_crawler(f"http://localhost:{unused_tcp_port}", options, events)

    assert result.feeds == []
    assert result.state.errors == 1
    assert result.state.error_budget_exhausted
    assert result.state.stop_reason is StopReason.MAX_ERRORS
    assert crawler.fetcher.requests_made == 1
    assert any("errors" in m for m in messages)


@pytest.mark.asyncio()
async def test_http_errors_count_against_budget(site_factory, fast_options):
    base = await site_factory({"/": html_links("/missing", "/broken"), "/broken": 500})
    logged = []
    events = EventEmitter().on("log", lambda data: "error" in data and logged.append(data["error"]))
    _, result = await run_crawler(base, fast_options, events)

    assert result.state.errors == 2
    assert sorted(logged) == ["HTTP 404", "HTTP 500"]


@pytest.mark.asyncio()
async def test_error_budget_drains_frontier(site_factory):
    hits = Counter()
    pages = {f"/missing{i}": 404 for i in range(10)}
    base = await site_factory({"/": html_links(*pages), **pages}, hits)
    options = SearchOptions(timeout=2.0, max_errors=2, concurrency=1)
    _, result = await run_crawler(base, options)

    assert result.state.errors == 2
    assert result.state.stop_reason is StopReason.MAX_ERRORS
    assert sum(hits[p] for p in pages) == 2


@pytest.mark.asyncio()
async def test_max_feeds_budget(site_factory, fast_options, rss_body):
    feeds = {f"/feed{i}.xml": (rss_body, "application/rss+xml") for i in range(6)}
    base = await site_factory({"/": html_links(*feeds), **feeds})
    _, result = await run_crawler(base, fast_options.with_overrides(max_feeds=2))

    assert len(result.feeds) == 2
    assert len({f.url for f in result.feeds}) == 2
    assert result.state.stop_reason is StopReason.MAX_FEEDS


@pytest.mark.asyncio()
async def test_max_links_budget(site_factory, fast_options):
    hits = Counter()
    pages = {f"/page{i}": html_links("/") for i in range(10)}
    base = await site_factory({"/": html_links(*pages), **pages}, hits)
    crawler, result = await run_crawler(base, fast_options.with_overrides(max_links=4))

    assert result.visited == 4
    assert sum(hits.values()) == 4
    assert result.state.link_budget_exhausted
    assert result.state.stop_reason is StopReason.MAX_LINKS


@pytest.mark.asyncio()
async def test_excluded_files_are_not_fetched(site_factory, fast_options):
    hits = Counter()
    base = await site_factory(
        {"/": html_links("/report.pdf", "/logo.PNG", "/video.mp4", "/page")}, hits
    )
    _, result = await run_crawler(base, fast_options)

    assert hits["/report.pdf"] == 0
    assert hits["/logo.PNG"] == 0
    assert hits["/video.mp4"] == 0
    assert result.visited == 2


@pytest.mark.asyncio()
async def test_foreign_links_probed_but_not_crawled(site_factory, fast_options, rss_body):
    foreign_hits = Counter()
    foreign = await site_factory(
        {
            "/feed": (rss_body, "application/rss+xml"),
            "/page": html_links("/deeper"),
        },
        foreign_hits,
    )
    foreign = foreign.replace("localhost", "127.0.0.1")
    base = await site_factory({"/": html_links(f"{foreign}/feed", f"{foreign}/page")})

    _, result = await run_crawler(base, fast_options)
    assert result.feeds == []
    assert sum(foreign_hits.values()) == 0

    _, result = await run_crawler(base, fast_options.with_overrides(check_foreign_feeds=True))
    assert [f.url for f in result.feeds] == [f"{foreign}/feed"]
    assert foreign_hits["/page"] == 1
    assert foreign_hits["/deeper"] == 0


@pytest.mark.asyncio()
async def test_concurrency(site_factory, monkeypatch):
    """Ensure that two slow pages are fetched concurrently."""
    base = await site_factory({"/": html_links("/slow1", "/slow2")})
    options = SearchOptions(timeout=5.0, concurrency=5, depth=1)
    original_fetch = Fetcher.fetch

    async def slow_fetch(self, url):
        if "/slow" in url:
            await asyncio.sleep(SLOW_SLEEP)
        return await original_fetch(self, url)

    monkeypatch.setattr(Fetcher, "fetch", slow_fetch)
    start = time.perf_counter()
    _, result = await run_crawler(base, options)
    elapsed = time.perf_counter() - start

    assert elapsed < SLOW_SLEEP * 1.8
    assert result.visited == 3


@pytest.mark.asyncio()
async def test_stress_crawl(site_factory, fast_options):
    hits = Counter()
    pages = {f"/page{i}": ("<h1>Page</h1>", "text/html") for i in range(1, STRESS_PAGES + 1)}
    base = await site_factory({"/": html_links(*pages), **pages}, hits)
    _, result = await run_crawler(base, fast_options.with_overrides(concurrency=10, depth=1))

    assert result.visited == STRESS_PAGES + 1
    assert all(hits[p] == 1 for p in pages)


@pytest.mark.asyncio()
async def test_lifecycle_events(site_factory, fast_options):
    base = await site_factory({"/": html_links("/a"), "/a": ("<p>a</p>", "text/html")})
    seen = []
    events = EventEmitter()
    events.on("start", lambda data: seen.append(("start", data["module"], data["nice_name"])))
    events.on("end", lambda data: seen.append(("end", data["module"], data["visited"])))
    await run_crawler(base, fast_options, events)

    assert seen == [("start", "deep", "Deep search"), ("end", "deep", 2)]


@pytest.mark.asyncio()
async def test_known_feeds_not_fetched_again(site_factory, fast_options, rss_body):
    hits = Counter()
    base = await site_factory(
        {
            "/": html_links("/old.xml", "/new.xml"),
            "/old.xml": (rss_body, "application/rss+xml"),
            "/new.xml": (rss_body, "application/rss+xml"),
        },
        hits,
    )
    options = fast_options.with_overrides(max_feeds=1)
    async with Fetcher(options) as fetcher:
        crawler = SiteCrawler(base, options, fetcher, known={f"{base}/old.xml"})
        result = await asyncio.wait_for(crawler.crawl(), timeout=30)

    assert [f.url for f in result.feeds] == [f"{base}/new.xml"]
    assert result.state.stop_reason is StopReason.MAX_FEEDS
    assert hits["/old.xml"] == 0
