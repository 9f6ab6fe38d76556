# === FILE: feed_scout/scanner.py ===
"""
Модуль-обёртка для функции запуска поиска фидов.
"""
from typing import Any, Callable, Mapping, Optional

from feed_scout.aggregator import FeedReport
from feed_scout.config import SearchOptions
from feed_scout.engine import Engine


async def start_scan(
    site: str,
    options: Optional[SearchOptions] = None,
    listeners: Optional[Mapping[str, Callable[[dict], Any]]] = None,
) -> FeedReport:
    """
    Запускает Engine в контексте и возвращает отчёт.

    Parameters
    ----------
    site : str
        Адрес сайта (голый хост или полный URL).
    options : SearchOptions, optional
        Параметры поиска; по умолчанию ``SearchOptions()``.
    listeners : Mapping[str, Callable], optional
        Слушатели событий ``start``/``log``/``error``/``end``/``initialized``.

    Returns
    -------
    FeedReport
        Найденные фиды, запущенные стратегии и причина остановки.
    """
    async with Engine(site, options) as engine:
        for event, listener in (listeners or {}).items():
            engine.on(event, listener)
        report = await engine.run()
    return report

__all__ = ["start_scan"]
