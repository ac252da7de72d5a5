# site_mirror/crawler/frontier.py
"""
Frontier: FIFO of addresses waiting for a worker.

The queue is a growable deque guarded by a condition built on the
:class:`VisitedSet` lock. Pushes never block, so a page with a large fan-out
cannot stall the worker that parsed it, and an address that has already been
claimed is dropped at push time instead of piling up in the queue.
"""
from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Optional

from site_mirror.crawler.models import Address
from site_mirror.crawler.visited import VisitedSet


class Frontier:
    """Unbounded, thread-safe FIFO sharing its lock with the visited set."""

    def __init__(self, visited: VisitedSet) -> None:
        self._visited = visited
        self._cond = threading.Condition(visited.lock)
        self._queue: Deque[Address] = deque()
        self._closed = False
        # popped but not yet marked done
        self._active = 0
        self.skipped = 0

    def push(self, address: Address) -> bool:
        """Append *address*; return False if it was already claimed or the frontier is closed."""
        with self._cond:
            if self._closed or self._visited.seen_locked(address):
                self.skipped += 1
                return False
            self._queue.append(address)
            self._cond.notify()
            return True

    def pop(self, timeout: Optional[float] = None) -> Optional[Address]:
        """
        Remove and return the oldest address.

        Blocks while the frontier is empty. Returns None when *timeout*
        expires first or the frontier has been closed. Every address
        returned must be followed by a :meth:`task_done` call.
        """
        with self._cond:
            if not self._cond.wait_for(lambda: self._queue or self._closed, timeout):
                return None
            if self._closed:
                return None
            self._active += 1
            return self._queue.popleft()

    def task_done(self) -> None:
        with self._cond:
            if self._active <= 0:
                raise ValueError("task_done() called too many times")
            self._active -= 1

    def idle(self) -> bool:
        """True when nothing is queued and no popped address is still being processed."""
        with self._cond:
            return not self._queue and self._active == 0

    def close(self) -> None:
        """Wake every blocked consumer; later pushes are dropped."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._queue)
