# File: tests/conftest.py
from __future__ import annotations

import asyncio
import threading
import time
from collections import Counter
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Set

import pytest
from aiohttp import web

from site_mirror.crawler.models import Address, FetchError
from site_mirror.logger import configure


@contextmanager
def serve_app(app: web.Application) -> Iterator[str]:
    """
    Serve *app* on a free localhost port from a background event loop.

    The crawler is thread based, so the aiohttp server gets its own loop in
    its own thread; yields ``host:port``.
    """
    loop = asyncio.new_event_loop()
    runner = web.AppRunner(app)
    loop.run_until_complete(runner.setup())
    site = web.TCPSite(runner, "127.0.0.1", 0)
    loop.run_until_complete(site.start())
    host, port = runner.addresses[0][:2]

    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()
    try:
        yield f"{host}:{port}"
    finally:
        loop.call_soon_threadsafe(loop.stop)
        thread.join(5)
        loop.run_until_complete(runner.cleanup())
        loop.close()


class SyntheticSite:
    """
    In-memory page source for coordinator tests.

    By default every fetched page links to two brand new pages, so the link
    supply never runs out. ``pages`` pins the body of specific paths and
    ``failing`` lists paths whose fetch raises FetchError. ``delay`` slows
    every fetch; ``delays`` slows single paths.
    """

    def __init__(
        self,
        host: str = "example.com",
        pages: Optional[Dict[str, str]] = None,
        failing: Optional[Set[str]] = None,
        infinite: bool = True,
        delay: float = 0.0,
        delays: Optional[Dict[str, float]] = None,
    ) -> None:
        self.host = host
        self.pages = pages or {}
        self.failing = failing or set()
        self.infinite = infinite
        self.delay = delay
        self.delays = delays or {}
        self.fetches: Counter = Counter()
        self._lock = threading.Lock()
        self._next = 0

    def fetch(self, address: Address) -> bytes:
        with self._lock:
            self.fetches[address] += 1
            if self.infinite:
                a, b = self._next, self._next + 1
                self._next += 2
        if self.delay or address.path in self.delays:
            time.sleep(self.delays.get(address.path, self.delay))
        if address.path in self.failing:
            raise FetchError(address, ConnectionRefusedError("refused"))
        if address.path in self.pages:
            return self.pages[address.path].encode()
        if not self.infinite:
            return b"<html><body>leaf</body></html>"
        return f'<a href="/p/{a}">a</a><a href="/p/{b}">b</a>'.encode()


class MemorySink:
    """Thread-safe page sink keeping bodies in a dict; ``delays`` slows single paths."""

    def __init__(self, failing: Optional[Set[str]] = None, delays: Optional[Dict[str, float]] = None) -> None:
        self.failing = failing or set()
        self.delays = delays or {}
        self.saved: Dict[Address, bytes] = {}
        self.calls = 0
        self._lock = threading.Lock()

    def save(self, address: Address, body: bytes) -> bool:
        if address.path in self.delays:
            time.sleep(self.delays[address.path])
        with self._lock:
            self.calls += 1
            if address.path in self.failing:
                return False
            if address in self.saved:
                raise AssertionError(f"{address} saved twice")
            self.saved[address] = body
            return True


@pytest.fixture(autouse=True)
def reset_logging():
    """CLI tests bind handlers to CliRunner streams; restore console logging afterwards."""
    yield
    configure(level="INFO")
