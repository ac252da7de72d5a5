# site_mirror/crawler/link_extractor.py
"""
Link extraction for SiteMirror: same-host anchors in document order.
"""
from __future__ import annotations

from typing import Iterator

from bs4 import BeautifulSoup, SoupStrainer
from bs4.element import Tag

from site_mirror.crawler.models import Address
from site_mirror.crawler.normalizer import normalize
from site_mirror.logger import logger


_ANCHORS = SoupStrainer("a")


def extract_links(body: bytes, target_host: str) -> Iterator[Address]:
    """
    Yield same-host Addresses found in ``<a href>`` tags of *body*.

    Duplicates are kept; rejected hrefs are dropped. Broken markup never
    raises, the sequence just ends with what was parsed so far.
    """
    try:
        soup = BeautifulSoup(body, "html.parser", parse_only=_ANCHORS)
        anchors = soup.find_all("a")
    except Exception as exc:  # html.parser gives up on some truncated documents
        logger.debug("HTML parse stopped early for host %s: %s", target_host, exc)
        return

    for tag in anchors:
        if not isinstance(tag, Tag):
            continue
        href = tag.get("href")
        if not isinstance(href, str):
            continue
        address = normalize(href, target_host)
        if address is not None:
            yield address
