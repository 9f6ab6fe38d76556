# File: tests/test_blind_search.py
from collections import Counter

import pytest
from feed_scout.bruteforce import FEED_ENDPOINTS, EndpointGuesser, generate_endpoint_urls, path_ladder
from feed_scout.checker import FeedChecker
from feed_scout.config import SearchOptions
from feed_scout.crawler.fetcher import Fetcher
from feed_scout.events import EventEmitter
from feed_scout.models import FeedKind, StopReason


async def run_blind(site, options, events=None):
    async with Fetcher(options) as fetcher:
        guesser = EndpointGuesser(site, options, FeedChecker(fetcher), events=events)
        feeds = await guesser.run()
    return guesser, feeds


def test_path_ladder_goes_up_to_origin():
    assert path_ladder("https://a.com/x/y/") == ["https://a.com/x/y", "https://a.com/x", "https://a.com"]
    assert path_ladder("https://a.com/") == ["https://a.com"]


def test_catalog_has_no_duplicates():
    assert len(set(FEED_ENDPOINTS)) == len(FEED_ENDPOINTS)


def test_generate_urls_keeps_query_params():
    urls = generate_endpoint_urls("https://example.com/?lang=en", keep_query_params=True)
    assert "https://example.com/rss.xml?lang=en" in urls
    assert "https://example.com?lang=en&_rss=1" in urls
    assert "https://example.com/blog?format=rss&lang=en" in urls
    assert len(urls) == len(FEED_ENDPOINTS)


def test_generate_urls_most_specific_level_first():
    urls = generate_endpoint_urls("https://example.com/blog/news")
    assert urls[0] == "https://example.com/blog/news?_rss=1"
    assert urls.index("https://example.com/blog/news/rss.xml") < urls.index("https://example.com/blog/rss.xml")
    assert urls.index("https://example.com/blog/rss.xml") < urls.index("https://example.com/rss.xml")
    assert len(urls) == 3 * len(FEED_ENDPOINTS)


@pytest.mark.asyncio()
async def test_stops_once_rss_and_atom_seen(site_factory, fast_options, rss_body, atom_body, json_feed_body):
    hits = Counter()
    base = await site_factory(
        {
            "/atom.xml": (atom_body, "application/atom+xml"),
            "/feed": (rss_body, "application/rss+xml"),
            "/rss.xml": (rss_body, "application/rss+xml"),
            "/feed.json": (json_feed_body, "application/json"),
        },
        hits,
    )
    guesser, feeds = await run_blind(base, fast_options)

    assert [(f.url, f.kind) for f in feeds] == [
        (f"{base}/atom.xml", FeedKind.ATOM),
        (f"{base}/feed", FeedKind.RSS),
    ]
    assert hits["/rss.xml"] == 0
    assert hits["/feed.json"] == 0
    assert guesser.state.links_visited == list(FEED_ENDPOINTS).index("feed") + 1


@pytest.mark.asyncio()
async def test_json_alone_does_not_stop(site_factory, fast_options, rss_body, json_feed_body):
    base = await site_factory(
        {
            "/rss.xml": (rss_body, "application/rss+xml"),
            "/feed.json": (json_feed_body, "application/json"),
        }
    )
    guesser, feeds = await run_blind(base, fast_options)

    assert {f.kind for f in feeds} == {FeedKind.RSS, FeedKind.JSON}
    assert guesser.state.links_visited == len(FEED_ENDPOINTS)
    assert all(f.discovered_by == "blind" for f in feeds)


@pytest.mark.asyncio()
async def test_walks_every_ladder_level(site_factory, fast_options, rss_body):
    base = await site_factory({"/blog/rss.xml": (rss_body, "application/rss+xml")})
    site = f"{base}/blog/news"
    guesser, feeds = await run_blind(site, fast_options)

    assert [f.url for f in feeds] == [f"{base}/blog/rss.xml"]
    assert feeds[0].title == "Example News"
    assert guesser.state.links_visited == len(generate_endpoint_urls(site))


@pytest.mark.asyncio()
async def test_max_feeds_stops_at_budget(site_factory, fast_options, rss_body, atom_body):
    base = await site_factory(
        {
            "/atom.xml": (atom_body, "application/atom+xml"),
            "/feed": (rss_body, "application/rss+xml"),
        }
    )
    options = fast_options.with_overrides(max_feeds=1)
    messages = []
    events = EventEmitter().on("log", lambda data: data.get("message") and messages.append(data["message"]))
    guesser, feeds = await run_blind(base, options, events)

    assert [f.url for f in feeds] == [f"{base}/atom.xml"]
    assert guesser.state.stop_reason is StopReason.MAX_FEEDS
    assert any("maximum feeds limit" in m for m in messages)


@pytest.mark.asyncio()
async def test_empty_origin_exhausts_catalog(site_factory, fast_options):
    hits = Counter()
    base = await site_factory({}, hits)
    progress = []
    events = EventEmitter().on("log", lambda data: "visited" in data and progress.append(data["visited"]))
    guesser, feeds = await run_blind(base, fast_options, events)

    assert feeds == []
    assert guesser.state.links_visited == len(FEED_ENDPOINTS)
    assert progress == list(range(1, len(FEED_ENDPOINTS) + 1))
    assert sum(hits.values()) > 0


@pytest.mark.asyncio()
async def test_unreachable_site_counts_errors_only_when_shown(unused_tcp_port):
    site = f"http://localhost:{unused_tcp_port}"
    errors = []
    events = EventEmitter().on("error", errors.append)

    quiet = SearchOptions(timeout=1.0, show_errors=False)
    guesser, feeds = await run_blind(site, quiet, events)
    assert feeds == []
    assert guesser.state.errors == 0
    assert errors == []

    loud = SearchOptions(timeout=1.0, show_errors=True)
    guesser, feeds = await run_blind(site, loud, events)
    assert feeds == []
    assert guesser.state.errors == len(FEED_ENDPOINTS)
    assert len(errors) == len(FEED_ENDPOINTS)
    assert all(e["module"] == "blind" for e in errors)



@pytest.mark.asyncio()
async def test_known_feeds_skipped_and_not_counted(site_factory, fast_options, rss_body, atom_body):
    hits = Counter()
    base = await site_factory(
        {
            "/atom.xml": (atom_body, "application/atom+xml"),
            "/feed": (rss_body, "application/rss+xml"),
        },
        hits,
    )
    options = fast_options.with_overrides(max_feeds=1)
    async with Fetcher(options) as fetcher:
        guesser = EndpointGuesser(base, options, FeedChecker(fetcher), known={f"{base}/atom.xml"})
        feeds = await guesser.run()

    assert [f.url for f in feeds] == [f"{base}/feed"]
    assert hits["/atom.xml"] == 0
