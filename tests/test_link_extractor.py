# File: tests/test_link_extractor.py
import types

from site_mirror.crawler.link_extractor import extract_links

HOST = "example.com"


def paths(body: bytes):
    return [a.path for a in extract_links(body, HOST)]


def test_document_order_and_duplicates_kept():
    html = b"""
    <html><body>
      <a href="/one">1</a>
      <p><a href="https://example.com/two">2</a></p>
      <a href="/one">1 again</a>
    </body></html>
    """
    assert paths(html) == ["/one", "/two", "/one"]


def test_only_anchor_hrefs_are_read():
    html = b"""
    <link href="/style.css" rel="stylesheet">
    <img src="/pic.png">
    <a name="no-href">x</a>
    <a href="/kept">y</a>
    """
    assert paths(html) == ["/kept"]


def test_rejected_links_are_dropped():
    html = b"""
    <a href="https://other.com/x">ext</a>
    <a href="mailto:a@b.com">mail</a>
    <a href="javascript:void(0)">js</a>
    <a href="/">home</a>
    <a href="">empty</a>
    <a href="/ok">ok</a>
    """
    assert paths(html) == ["/ok"]


def test_truncated_html_keeps_earlier_links():
    html = b'<html><body><a href="/first">f</a><a href="/second">s</a><a href="/thi'
    assert paths(html)[:2] == ["/first", "/second"]


def test_non_html_body_yields_nothing():
    assert paths(b"\x89PNG\r\n\x1a\n\x00\x00binary") == []


def test_result_is_a_generator():
    links = extract_links(b'<a href="/x">x</a>', HOST)
    assert isinstance(links, types.GeneratorType)
    assert [a.path for a in links] == ["/x"]
    assert list(links) == []
