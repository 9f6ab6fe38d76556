"""feed_scout.events: lifecycle events between the search core and any presentation layer.

Event names
-----------
``start``
    ``{"module", "nice_name"}`` – a strategy begins.
``log``
    ``{"module", ...}`` – progress (``visited``/``total``), found feeds,
    crawl steps (``url``, ``depth``, ``is_feed``) or milestone ``message``.
``error``
    ``{"module", "error"}`` – non-fatal failure, only when errors are surfaced.
``end``
    ``{"module", "feeds", "visited"?}`` – a strategy finished.
``initialized``
    ``{"module", "url", "ok"}`` – the root document was fetched (or not).

The core works with no listener attached.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping

logger = logging.getLogger("FeedScout.events")

Listener = Callable[[Dict[str, Any]], Any]


class EventEmitter:
    """Minimal observer: listeners are called synchronously in registration order."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}

    def on(self, event: str, listener: Listener) -> EventEmitter:
        if not callable(listener):
            raise TypeError("listener must be callable")
        listeners = self._listeners.setdefault(event, [])
        if listener not in listeners:
            listeners.append(listener)
        return self

    def once(self, event: str, listener: Listener) -> EventEmitter:
        def _wrapper(payload: Dict[str, Any]) -> Any:
            self.off(event, _wrapper)
            return listener(payload)

        _wrapper.original = listener  # type: ignore[attr-defined]
        return self.on(event, _wrapper)

    def off(self, event: str, listener: Listener) -> EventEmitter:
        listeners = self._listeners.get(event)
        if not listeners:
            return self
        listeners[:] = [
            l for l in listeners if l != listener and getattr(l, "original", None) != listener
        ]
        if not listeners:
            del self._listeners[event]
        return self

    def emit(self, event: str, payload: Mapping[str, Any]) -> bool:
        """Call every listener of *event*; returns False when nobody listens."""
        listeners = self._listeners.get(event)
        if not listeners:
            return False
        data = dict(payload)
        for listener in list(listeners):
            try:
                listener(data)
            except Exception:
                # a broken presentation layer must not abort the search
                logger.exception("Listener for %r failed", event)
        return True

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))

    def event_names(self) -> List[str]:
        return list(self._listeners)

    def remove_all_listeners(self, event: str | None = None) -> EventEmitter:
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)
        return self


__all__ = ["EventEmitter", "Listener"]
