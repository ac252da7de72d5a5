# site_mirror/crawler/coordinator.py
"""
Crawl coordinator: a fixed pool of worker threads sharing one frontier.

Each worker repeats pop -> claim -> fetch -> save -> extract -> push until the
shared stop event fires. :meth:`Coordinator.run` doubles as the termination
watcher and stops the crawl when the page limit is reached, the timeout
elapses or the frontier runs dry.
"""
from __future__ import annotations

import threading
import time
from typing import List, Optional, Protocol, Tuple

from site_mirror.config import CrawlConfig
from site_mirror.crawler.fetcher import Fetcher
from site_mirror.crawler.frontier import Frontier
from site_mirror.crawler.link_extractor import extract_links
from site_mirror.crawler.models import Address, CrawlStats, FetchError
from site_mirror.crawler.visited import VisitedSet
from site_mirror.logger import logger
from site_mirror.storage import PageSink

__all__ = ("Coordinator", "CrawlState", "STOP_PAGE_LIMIT", "STOP_TIMEOUT", "STOP_EXHAUSTED", "STOP_REQUESTED")

STOP_PAGE_LIMIT = "page-limit"
STOP_TIMEOUT = "timeout"
STOP_EXHAUSTED = "exhausted"
STOP_REQUESTED = "requested"


class PageFetcher(Protocol):
    def fetch(self, address: Address) -> bytes: ...


class PageWriter(Protocol):
    def save(self, address: Address, body: bytes) -> bool: ...


class CrawlState:
    """
    Saved-page accounting plus the cooperative stop signal.

    Before writing a page a worker reserves a slot; the slot is committed on
    a successful save and released on failure. With a page limit of N this
    guarantees no more than N pages are ever written, whatever the number of
    workers racing on the last slot.

    A worker that finds every remaining slot held by in-flight saves waits
    for one of them to finish instead of dropping its page, since a failed
    save hands its slot back.
    """

    def __init__(self, page_limit: Optional[int] = None) -> None:
        self.page_limit = page_limit
        self.stop_event = threading.Event()
        self.stop_reason: Optional[str] = None
        self._cond = threading.Condition(threading.Lock())
        self._saved = 0
        self._reserved = 0
        self._fetch_failures = 0
        self._save_failures = 0

    @property
    def saved(self) -> int:
        with self._cond:
            return self._saved

    @property
    def fetch_failures(self) -> int:
        with self._cond:
            return self._fetch_failures

    @property
    def save_failures(self) -> int:
        with self._cond:
            return self._save_failures

    @property
    def stopped(self) -> bool:
        return self.stop_event.is_set()

    def _slots_taken(self) -> bool:
        return self.page_limit is not None and self._saved + self._reserved >= self.page_limit

    def reserve(self) -> bool:
        """
        Claim the right to save one page.

        Blocks while the remaining slots are all held by pending saves.
        Returns False only once the crawl has stopped.
        """
        with self._cond:
            while not self.stop_event.is_set() and self._reserved > 0 and self._slots_taken():
                self._cond.wait()
            if self.stop_event.is_set() or self._slots_taken():
                return False
            self._reserved += 1
            return True

    def commit(self, success: bool) -> None:
        """Finish a reservation; a successful save may trigger the page-limit stop."""
        with self._cond:
            self._reserved -= 1
            if success:
                self._saved += 1
                if self.page_limit is not None and self._saved >= self.page_limit:
                    self._stop_locked(STOP_PAGE_LIMIT)
            else:
                self._save_failures += 1
            self._cond.notify_all()

    def record_fetch_failure(self) -> None:
        with self._cond:
            self._fetch_failures += 1

    def counters(self) -> Tuple[int, int, int]:
        """``(saved, fetch_failures, save_failures)`` read in one go."""
        with self._cond:
            return self._saved, self._fetch_failures, self._save_failures

    def stop(self, reason: str) -> bool:
        """Broadcast the stop signal; only the first reason is kept."""
        with self._cond:
            return self._stop_locked(reason)

    def _stop_locked(self, reason: str) -> bool:
        if self.stop_event.is_set():
            return False
        self.stop_reason = reason
        self.stop_event.set()
        self._cond.notify_all()
        return True


class Coordinator:
    """Runs one crawl of ``config.seed``'s host with ``config.workers`` threads."""

    #: how long an idle worker blocks on the frontier before re-checking the stop flag
    POLL_INTERVAL: float = 0.1
    #: grace period for workers to finish their current item after the stop
    JOIN_TIMEOUT: float = 5.0

    def __init__(
        self,
        config: CrawlConfig,
        fetcher: Optional[PageFetcher] = None,
        sink: Optional[PageWriter] = None,
    ) -> None:
        self.config = config
        self.seed = config.seed
        self.host = self.seed.host
        self.state = CrawlState(config.page_limit)
        if fetcher is None:
            fetcher = Fetcher.from_config(config, stop_event=self.state.stop_event)
        self.fetcher = fetcher
        self.sink = sink if sink is not None else PageSink(config.output_dir)
        self.visited = VisitedSet(self.host)
        self.frontier = Frontier(self.visited)
        self.logger = logger
        self._threads: List[threading.Thread] = []

    def run(self) -> CrawlStats:
        """Crawl until a stop condition fires and return the run summary."""
        start = time.monotonic()
        deadline = start + self.config.deadline
        self.logger.info(
            "Crawling %s with %d worker(s), timeout=%s, page limit=%s",
            self.seed, self.config.workers, self.config.timeout, self.config.page_limit,
        )

        for n in range(self.config.workers):
            t = threading.Thread(target=self._worker, name=f"crawl-worker-{n}", daemon=True)
            t.start()
            self._threads.append(t)
        self.frontier.push(self.seed)

        try:
            self._watch(deadline)
        finally:
            self._shutdown()

        stats = self.stats(time.monotonic() - start)
        if self.state.stop_reason == STOP_PAGE_LIMIT:
            self.logger.info("Reached page download limit=%d", self.config.page_limit)
        elif self.state.stop_reason == STOP_TIMEOUT:
            self.logger.info("Timeout of %.0f s elapsed", self.config.deadline)
        elif self.state.stop_reason == STOP_EXHAUSTED:
            self.logger.info("No more addresses to visit on %s", self.host)
        else:
            self.logger.info("Crawl stopped on request")
        self.logger.info(
            "Finished: %d page(s) saved, %d address(es) claimed in %.2f s",
            stats.pages_saved, stats.claimed, stats.elapsed,
        )
        return stats

    def stop(self, reason: str = STOP_REQUESTED) -> None:
        """Ask every worker to stop after its current item."""
        self.state.stop(reason)

    def stats(self, elapsed: float = 0.0) -> CrawlStats:
        saved, fetch_failures, save_failures = self.state.counters()
        return CrawlStats(
            pages_saved=saved,
            claimed=self.visited.size(),
            fetch_failures=fetch_failures,
            save_failures=save_failures,
            skipped=self.frontier.skipped,
            stop_reason=self.state.stop_reason or "",
            elapsed=elapsed,
        )

    # ------------------------------------------------------------------ #
    # Termination watcher                                                #
    # ------------------------------------------------------------------ #

    def _watch(self, deadline: float) -> None:
        while not self.state.stopped:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self.state.stop(STOP_TIMEOUT)
                break
            if self.frontier.idle():
                self.state.stop(STOP_EXHAUSTED)
                break
            self.state.stop_event.wait(min(self.POLL_INTERVAL, remaining))

    def _shutdown(self) -> None:
        self.state.stop(STOP_REQUESTED)
        self.frontier.close()
        for t in self._threads:
            t.join(self.JOIN_TIMEOUT)
        alive = [t.name for t in self._threads if t.is_alive()]
        if alive:
            self.logger.warning("Abandoning in-flight work in %s", ", ".join(alive))
        close = getattr(self.fetcher, "close", None)
        if callable(close):
            close()

    # ------------------------------------------------------------------ #
    # Worker                                                             #
    # ------------------------------------------------------------------ #

    def _worker(self) -> None:
        while not self.state.stopped:
            address = self.frontier.pop(timeout=self.POLL_INTERVAL)
            if address is None:
                continue
            try:
                self._process(address)
            except Exception:
                self.logger.exception("Unexpected error while processing %s", address)
            finally:
                self.frontier.task_done()

    def _process(self, address: Address) -> None:
        if not self.visited.claim(address):
            return
        self.logger.debug("Received url=%s", address)

        try:
            body = self.fetcher.fetch(address)
        except FetchError as exc:
            self.state.record_fetch_failure()
            self.logger.warning("Could not fetch %s: %s", address, exc.cause)
            return

        if not self.state.reserve():
            self.logger.debug("Crawl stopped, not saving %s", address)
            return
        saved = False
        try:
            saved = self.sink.save(address, body)
        finally:
            self.state.commit(saved)
        if saved:
            self.logger.info("Saved %s (%d/%s)", address, self.state.saved, self.config.page_limit or "-")

        if self.state.stopped:
            return
        for link in extract_links(body, self.host):
            self.frontier.push(link)
