# site_mirror/crawler/models.py
"""
Data models for the SiteMirror crawler.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Address:
    """Canonical same-host address: scheme, host and path only."""

    scheme: str
    host: str
    path: str

    def __str__(self) -> str:
        return f"{self.scheme}://{self.host}{self.path}"


@dataclass(slots=True)
class CrawlStats:
    """Summary of one finished crawl."""

    pages_saved: int = 0
    claimed: int = 0
    fetch_failures: int = 0
    save_failures: int = 0
    skipped: int = 0
    stop_reason: str = ""
    elapsed: float = 0.0


class SeedError(ValueError):
    """Seed address cannot be used to start a crawl."""


class FetchError(Exception):
    """Network-level failure while retrieving one address."""

    def __init__(self, address: Address, cause: BaseException) -> None:
        super().__init__(f"failed to GET {address}: {cause}")
        self.address = address
        self.cause = cause
