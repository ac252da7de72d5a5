# site_mirror/storage.py
"""
Page sink: writes fetched bodies under ``<root>/<host>/<path>/index.html``.
"""
from __future__ import annotations

from pathlib import Path
from typing import Union

from site_mirror.crawler.models import Address
from site_mirror.logger import logger

__all__ = ["PageSink", "DEFAULT_ROOT"]

DEFAULT_ROOT = Path("/tmp/scraper")


class PageSink:
    """Persists one page per address; safe to share between worker threads."""

    def __init__(self, root: Union[str, Path] = DEFAULT_ROOT) -> None:
        self.root = Path(root)

    def path_for(self, address: Address) -> Path:
        parts = [p for p in address.path.split("/") if p not in ("", ".", "..")]
        return self.root.joinpath(address.host, *parts, "index.html")

    def save(self, address: Address, body: bytes) -> bool:
        """Write *body*; return False (and log) if the file cannot be written."""
        target = self.path_for(address)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(body)
        except OSError as exc:
            logger.error("Cannot write %s for %s: %s", target, address, exc)
            return False
        logger.debug("Saved %s -> %s (%d bytes)", address, target, len(body))
        return True
