# site_mirror/crawler/fetcher.py
"""
Fetcher module: blocking HTTP GET with optional retry/backoff and timeout.
"""
from __future__ import annotations

import threading
from typing import List, Optional

import requests

from site_mirror.crawler.models import Address, FetchError
from site_mirror.logger import logger


class Fetcher:
    """Retrieves raw page bodies; one requests.Session per worker thread."""

    def __init__(
        self,
        user_agent: str = "SiteMirrorBot/1.0",
        request_timeout: Optional[float] = 30.0,
        retry_times: int = 0,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.retry_times = retry_times
        # backoff waits on this, so a crawl stop cuts a retry short
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()

    @classmethod
    def from_config(cls, config, stop_event: Optional[threading.Event] = None) -> Fetcher:
        return cls(
            user_agent=config.user_agent,
            request_timeout=config.request_timeout,
            retry_times=config.retry_times,
            stop_event=stop_event,
        )

    def _session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = self.user_agent
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def fetch(self, address: Address) -> bytes:
        """
        GET *address* and return the body bytes.

        Any status code with a readable body counts as success. Network-level
        errors raise FetchError once the retry budget is spent, or as soon as
        the stop event is set during a backoff.
        """
        url = str(address)
        attempts = 0
        while True:
            try:
                with self._session().get(url, timeout=self.request_timeout) as resp:
                    body = resp.content
                    if not resp.ok:
                        logger.debug("GET %s -> HTTP %s, keeping body", url, resp.status_code)
                    return body
            except requests.RequestException as exc:
                attempts += 1
                if attempts > self.retry_times or self.stop_event.is_set():
                    raise FetchError(address, exc) from exc
                # exponential backoff, cap at 60s
                backoff = min(2**attempts, 60)
                logger.debug(
                    "Retry %d/%d for %s after %d s: %s", attempts, self.retry_times, url, backoff, exc
                )
                if self.stop_event.wait(backoff):
                    logger.debug("Stop requested, giving up on %s", url)
                    raise FetchError(address, exc) from exc

    def close(self) -> None:
        """Close every session opened by any worker thread."""
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
