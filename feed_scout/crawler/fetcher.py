# feed_scout/crawler/fetcher.py
"""
Fetcher module: HTTP GET with a per-call timeout and a browser-like header set.

Network failures never raise: they resolve to :data:`UNAVAILABLE` so callers
treat them as a normal outcome.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Union

from aiohttp import ClientError, ClientSession, ClientTimeout

from feed_scout.config import SearchOptions
from feed_scout.crawler.models import UNAVAILABLE, FetchResponse, Unavailable

logger = logging.getLogger("FeedScout.fetcher")

FetchOutcome = Union[FetchResponse, Unavailable]


def browser_headers(user_agent: str) -> Dict[str, str]:
    """Headers of a regular desktop browser navigation, to get past basic anti-bot checks."""
    return {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        # no "br": decoding it would need the optional brotli package
        "Accept-Encoding": "gzip, deflate",
        "Upgrade-Insecure-Requests": "1",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "none",
        "Cache-Control": "max-age=0",
    }


class Fetcher:
    """Handles HTTP fetching with timeout; one instance per search session."""

    def __init__(self, options: SearchOptions, session: Optional[ClientSession] = None) -> None:
        self.options = options
        self.session = session
        self._owns_session = session is None
        self.headers = browser_headers(options.user_agent)
        self.requests_made = 0

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(headers=self.headers, raise_for_status=False)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str) -> FetchOutcome:
        """
        GET *url* and read the body as text.

        Returns FetchResponse for any HTTP status, UNAVAILABLE on failure/timeout.
        """
        if not self.session:
            raise RuntimeError("Session not initialized")

        self.requests_made += 1
        timeout = ClientTimeout(total=self.options.timeout)
        try:
            async with self.session.get(
                url, timeout=timeout, headers=self.headers, allow_redirects=True
            ) as resp:
                ctype = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                text = await resp.text(errors="replace")
                return FetchResponse(url=str(resp.url), status=resp.status, content_type=ctype, text=text)
        except asyncio.TimeoutError:
            logger.debug("Timeout after %.1fs: %s", self.options.timeout, url)
        except (ClientError, LookupError, ValueError) as exc:
            # ValueError covers URLs aiohttp refuses to build, LookupError unknown charsets
            logger.debug("Fetch failed %s: %s", url, exc)
        return UNAVAILABLE


__all__ = ["Fetcher", "FetchOutcome", "browser_headers", "UNAVAILABLE"]
