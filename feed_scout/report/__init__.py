# File: feed_scout/report/__init__.py
"""feed_scout.report: запись отчётов поиска, используемая CLI и тестами."""

from .json_report import render_json

__all__ = ["render_json"]
