"""Test configuration and helper fixtures."""

from __future__ import annotations

import asyncio
import inspect
import io
import zipfile
from typing import Awaitable, Callable, Dict, List

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer


@pytest.hookimpl
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the test-suite."""

    config.addinivalue_line("markers", "asyncio: run the test inside an event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute ``async def`` tests marked with ``@pytest.mark.asyncio``."""

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    fixture_names = pyfuncitem._fixtureinfo.argnames  # type: ignore[attr-defined]
    call_kwargs = {name: pyfuncitem.funcargs[name] for name in fixture_names}
    asyncio.run(test_func(**call_kwargs))
    return True


def build_zip(entries: Dict[str, bytes]) -> bytes:
    """Return the bytes of a zip archive holding ``entries``."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def make_zip() -> Callable[[Dict[str, bytes]], bytes]:
    return build_zip


@pytest.fixture
def serve_app() -> Callable[[web.Application], Awaitable[TestServer]]:
    """
    Start an ``aiohttp`` application on a local test server.

    Servers are closed by the coroutine returned from ``serve_app.cleanup``,
    which tests must await before their event loop ends.
    """

    active_servers: List[TestServer] = []

    async def factory(app: web.Application) -> TestServer:
        server = TestServer(app)
        await server.start_server()
        active_servers.append(server)
        return server

    async def cleanup() -> None:
        for server in active_servers:
            await server.close()
        active_servers.clear()

    factory.cleanup = cleanup  # type: ignore[attr-defined]
    return factory
