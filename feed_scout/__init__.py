# feed_scout/__init__.py
"""
FeedScout package initializer.
Defines package version and exposes the search entry points.
"""
__version__ = "0.1.0"

from feed_scout.aggregator import FeedReport
from feed_scout.config import SearchOptions, load_config
from feed_scout.engine import Engine
from feed_scout.models import FeedKind, FeedRecord, StopReason
from feed_scout.scanner import start_scan

__all__ = [
    "__version__",
    "Engine",
    "FeedKind",
    "FeedRecord",
    "FeedReport",
    "SearchOptions",
    "StopReason",
    "load_config",
    "start_scan",
]
