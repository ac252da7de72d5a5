# site_mirror/crawler/visited.py
"""
Thread-safe set of addresses already claimed by a worker.
"""
from __future__ import annotations

import threading
from typing import Dict

from site_mirror.crawler.models import Address


class VisitedSet:
    """Claim registry scoped to one crawled host; entries are never removed."""

    def __init__(self, host: str) -> None:
        self.host = host
        self.lock = threading.Lock()
        self._seen: Dict[Address, bool] = {}
        self._size = 0

    def claim(self, address: Address) -> bool:
        """
        Record *address* and return True if nobody claimed it before.

        The check and the insert happen under one lock, so concurrent claims
        for the same address never both succeed.
        """
        with self.lock:
            if address in self._seen:
                return False
            self._seen[address] = True
            self._size += 1
            return True

    def size(self) -> int:
        with self.lock:
            return self._size

    def __contains__(self, address: object) -> bool:
        with self.lock:
            return address in self._seen

    def seen_locked(self, address: Address) -> bool:
        """Membership check for callers already holding :attr:`lock`."""
        return address in self._seen
