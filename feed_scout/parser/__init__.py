# File: feed_scout/parser/__init__.py
"""feed_scout.parser: разбор HTML, sitemap.xml и определение типа фида."""

from .feed_parser import FeedInfo, classify, clean_title
from .html_parser import ParsedPage, parse_html

__all__ = ["FeedInfo", "classify", "clean_title", "ParsedPage", "parse_html"]
