# File: feed_scout/crawler/__init__.py
"""feed_scout.crawler: HTTP-доступ и deep search (обход сайта с ограничениями)."""

from .crawler import SiteCrawler
from .fetcher import Fetcher
from .models import UNAVAILABLE, CrawlResult, CrawlTask, FetchResponse

__all__ = ["SiteCrawler", "Fetcher", "FetchResponse", "CrawlTask", "CrawlResult", "UNAVAILABLE"]
