# File: tests/test_parsers.py
import logging

from feed_scout.logger import LOGGER_NAME, configure
from feed_scout.parser.html_parser import parse_html
from feed_scout.parser.sitemap_parser import parse_sitemap


def test_parse_html_collects_anchors_links_and_refresh():
    html = """
    <html><head>
      <title> Example </title>
      <link rel="Alternate" type="Application/RSS+XML" href="/feed" title="Main">
      <meta http-equiv="Refresh" content="5; URL='/moved/'">
    </head><body>
      <a href="/one">One <b>link</b></a>
      <a>no href</a>
      <a href=" /two ">Two</a>
    </body></html>
    """
    page = parse_html(html, "https://example.com/")
    assert page.hrefs() == ["/one", "/two"]
    assert page.anchors[0].text == "One link"
    link = page.link_tags[0]
    assert link.rel == ("alternate",)
    assert link.type == "application/rss+xml"
    assert link.title == "Main"
    assert page.meta_refresh == "/moved/"


def test_parse_html_tolerates_garbage():
    page = parse_html("<<<not really html", "https://example.com/")
    assert page.anchors == []
    assert page.meta_refresh is None


def test_parse_sitemap_with_namespace():
    xml = (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">'
        "<url><loc>https://example.com/a</loc></url>"
        "<url><loc>\n https://example.com/b \n</loc></url>"
        "<url><loc></loc></url>"
        "</urlset>"
    )
    assert parse_sitemap(xml) == ["https://example.com/a", "https://example.com/b"]


def test_parse_sitemap_index_and_broken_input():
    index = "<sitemapindex><sitemap><loc>https://example.com/s1.xml</loc></sitemap></sitemapindex>"
    assert parse_sitemap(index) == ["https://example.com/s1.xml"]
    assert parse_sitemap("") == []
    assert parse_sitemap("<html><body>Not found</body></html>") == []


def test_configure_adds_rotating_file(tmp_path):
    log_file = tmp_path / "feed_scout.log"
    lg = configure(level="DEBUG", log_file=log_file)
    try:
        assert lg.name == LOGGER_NAME
        assert lg.propagate is False
        assert len(lg.handlers) == 2
        logging.getLogger(f"{LOGGER_NAME}.tests").debug("hello from tests")
        for handler in lg.handlers:
            handler.flush()
        assert "hello from tests" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()
        lg.setLevel(logging.NOTSET)
        lg.propagate = True
