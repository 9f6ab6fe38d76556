# File: tests/conftest.py
from collections import Counter
from typing import Awaitable, Callable, Dict, Optional, Tuple, Union

import pytest
import pytest_asyncio
from aiohttp import web

from feed_scout.config import SearchOptions

#: path -> (body, content type), a bare HTTP status or an aiohttp handler
Route = Union[Tuple[str, str], int, Callable[[web.Request], Awaitable[web.StreamResponse]]]

RSS_BODY = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title><![CDATA[ Example   News ]]></title>
    <link>https://example.com/</link>
    <item><title>First post</title></item>
  </channel>
</rss>"""

ATOM_BODY = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Example Atom</title>
  <entry><title>Entry one</title></entry>
</feed>"""

JSON_FEED_BODY = (
    '{"version": "https://jsonfeed.org/version/1.1", "title": "Example JSON",'
    ' "items": [{"id": "1", "content_text": "hi"}]}'
)


@pytest.fixture()
def rss_body() -> str:
    return RSS_BODY


@pytest.fixture()
def atom_body() -> str:
    return ATOM_BODY


@pytest.fixture()
def json_feed_body() -> str:
    return JSON_FEED_BODY


@pytest.fixture()
def fast_options() -> SearchOptions:
    """
    Options with short timeouts for tests against local servers.
    """
    return SearchOptions(timeout=2.0, max_errors=50, concurrency=4)


def build_app(routes: Dict[str, Route], hits: Optional[Counter] = None) -> web.Application:
    """
    Create an aiohttp application serving *routes*; unknown paths answer 404.

    Every request path (with query string) is counted in *hits*.
    """

    @web.middleware
    async def count_hits(request, handler):
        if hits is not None:
            hits[request.path_qs] += 1
        return await handler(request)

    app = web.Application(middlewares=[count_hits])

    def make_handler(route: Route):
        async def handler(_):
            if isinstance(route, int):
                return web.Response(status=route, text="error")
            body, content_type = route
            return web.Response(text=body, content_type=content_type)

        return handler

    for path, route in routes.items():
        app.router.add_get(path, route if callable(route) else make_handler(route))
    return app


@pytest_asyncio.fixture
async def site_factory(unused_tcp_port_factory):
    """
    Start local test sites; yields ``async (routes, hits=None) -> base_url``.
    """
    runners = []

    async def _serve(routes: Dict[str, Route], hits: Optional[Counter] = None) -> str:
        port = unused_tcp_port_factory()
        runner = web.AppRunner(build_app(routes, hits))
        await runner.setup()
        site = web.TCPSite(runner, "localhost", port)
        await site.start()
        runners.append(runner)
        return f"http://localhost:{port}"

    yield _serve
    for runner in runners:
        await runner.cleanup()
