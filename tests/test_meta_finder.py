# File: tests/test_meta_finder.py
"""Meta search works on an already parsed document, no network involved."""
from feed_scout.events import EventEmitter
from feed_scout.meta_finder import MetaLinkScanner, guess_kind
from feed_scout.models import FeedKind, FeedRecord
from feed_scout.parser.html_parser import LinkTag, parse_html


def scan(html: str, site: str = "https://example.com"):
    return MetaLinkScanner(site).scan(parse_html(html, site))


def test_single_rss_link():
    feeds = scan('<head><link type="application/rss+xml" href="/feed.xml" title="Feed"></head>')
    assert feeds == [
        FeedRecord(url="https://example.com/feed.xml", kind=FeedKind.RSS, title="Feed", discovered_by="meta")
    ]


def test_types_scanned_in_fixed_order_and_deduplicated():
    html = """
    <head>
      <link rel="alternate" type="application/atom+xml" href="/atom.xml" title="Atom">
      <link rel="alternate" type="application/rss+xml" href="/rss.xml" title="RSS">
      <link rel="alternate" type="application/feed+json" href="/feed.json" title="JSON">
      <link rel="alternate" type="application/rss+xml" href="https://example.com/rss.xml">
      <link rel="alternate" href="/comments/feed">
      <link rel="alternate" type="text/html" href="/feed/page">
      <link rel="stylesheet" href="/style.css">
    </head>
    """
    feeds = scan(html)
    assert [f.url for f in feeds] == [
        "https://example.com/feed.json",
        "https://example.com/rss.xml",
        "https://example.com/atom.xml",
        "https://example.com/comments/feed",
    ]
    assert [f.kind for f in feeds] == [FeedKind.JSON, FeedKind.RSS, FeedKind.ATOM, FeedKind.RSS]
    assert len({f.url for f in feeds}) == len(feeds)


def test_no_links_no_feeds():
    assert scan("<html><head><title>Nothing</title></head></html>") == []


def test_guess_kind_falls_back_to_href():
    assert guess_kind(LinkTag(href="/x.atom")) is FeedKind.ATOM
    assert guess_kind(LinkTag(href="/x.json")) is FeedKind.JSON
    assert guess_kind(LinkTag(href="/feed")) is FeedKind.RSS
    assert guess_kind(LinkTag(href="/x", type="application/rdf+xml")) is FeedKind.RSS


def test_emits_start_and_end():
    events = EventEmitter()
    seen = []
    events.on("start", lambda data: seen.append(("start", data["module"])))
    events.on("end", lambda data: seen.append(("end", len(data["feeds"]))))
    MetaLinkScanner("example.com", events=events).scan(
        parse_html('<link type="application/atom+xml" href="atom.xml">', "https://example.com/")
    )
    assert seen == [("start", "meta"), ("end", 1)]


def test_type_parameters_and_host_case_ignored():
    feeds = scan('<link type="application/rss+xml; charset=utf-8" href="https://EXAMPLE.com/Feed.xml">')
    assert [(f.url, f.kind) for f in feeds] == [("https://example.com/Feed.xml", FeedKind.RSS)]
