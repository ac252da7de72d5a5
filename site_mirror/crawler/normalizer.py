# site_mirror/crawler/normalizer.py
"""
Address normalization for same-host crawling.

``normalize`` turns a raw ``href`` into a canonical :class:`Address` or
rejects it (returns ``None``). ``parse_seed`` validates the crawl's starting
point once, before any worker runs.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

from site_mirror.crawler.models import Address, SeedError
from site_mirror.logger import logger

__all__ = ("normalize", "parse_seed", "DEFAULT_SCHEME")

DEFAULT_SCHEME = "https"


def normalize(href: str, target_host: str) -> Optional[Address]:
    """
    Return the canonical same-host Address for *href*, or None if rejected.

    Host-relative links get *target_host*; links to another host, to the
    root (`""` or `"/"`) and to non-http schemes are rejected.
    """
    if not href or not href.strip():
        return None

    try:
        parts = urlsplit(href.strip())
        host = parts.netloc.lower()
    except ValueError as exc:
        logger.debug("Unparseable href %r: %s", href, exc)
        return None

    target = target_host.lower()
    path = parts.path

    if not host:
        host = target
        if path and not path.startswith("/"):
            path = "/" + path
    elif host != target:
        return None

    if path in ("", "/"):
        return None

    scheme = parts.scheme.lower() or DEFAULT_SCHEME
    # mailto, ftp, javascript, data, ...
    if "http" not in scheme:
        return None

    return Address(scheme, host, path)


def parse_seed(raw: str) -> Address:
    """Parse the seed address; raise SeedError when it cannot start a crawl."""
    if not raw or not raw.strip():
        raise SeedError("host needs to be set")
    try:
        parts = urlsplit(raw.strip())
    except ValueError as exc:
        raise SeedError(f"Could not parse target url {raw!r}: {exc}") from exc

    if not parts.netloc:
        raise SeedError(f"Try the format https://www.example.com. No host found in {raw}")

    scheme = parts.scheme.lower() or DEFAULT_SCHEME
    if "http" not in scheme:
        raise SeedError(f"Unsupported scheme {parts.scheme!r} in {raw}")

    return Address(scheme, parts.netloc.lower(), parts.path or "/")
