# File: tests/test_frontier.py
from __future__ import annotations

import threading
import time

import pytest

from site_mirror.crawler.frontier import Frontier
from site_mirror.crawler.models import Address
from site_mirror.crawler.visited import VisitedSet


def addr(path: str) -> Address:
    return Address("https", "example.com", path)


@pytest.fixture()
def visited() -> VisitedSet:
    return VisitedSet("example.com")


@pytest.fixture()
def frontier(visited) -> Frontier:
    return Frontier(visited)


# --------------------------------------------------------------------------- #
#                                 VisitedSet                                  #
# --------------------------------------------------------------------------- #


def test_claim_is_granted_once(visited):
    assert visited.claim(addr("/a")) is True
    assert visited.claim(addr("/a")) is False
    assert visited.claim(addr("/b")) is True
    assert visited.size() == 2
    assert addr("/a") in visited
    assert addr("/c") not in visited


def test_concurrent_claims_have_single_winner(visited):
    contenders = 16
    barrier = threading.Barrier(contenders)
    results: list[bool] = []
    results_lock = threading.Lock()

    def contend():
        barrier.wait()
        won = visited.claim(addr("/contested"))
        with results_lock:
            results.append(won)

    threads = [threading.Thread(target=contend) for _ in range(contenders)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1
    assert visited.size() == 1


# --------------------------------------------------------------------------- #
#                                  Frontier                                   #
# --------------------------------------------------------------------------- #


def test_fifo_order(frontier):
    for p in ("/1", "/2", "/3"):
        assert frontier.push(addr(p))
    assert [frontier.pop(0.1) for _ in range(3)] == [addr("/1"), addr("/2"), addr("/3")]


def test_push_never_blocks_under_large_fan_out(frontier):
    start = time.monotonic()
    for i in range(10_000):
        frontier.push(addr(f"/p/{i}"))
    assert len(frontier) == 10_000
    assert time.monotonic() - start < 5


def test_push_skips_claimed_addresses(frontier, visited):
    visited.claim(addr("/done"))
    assert frontier.push(addr("/done")) is False
    assert frontier.skipped == 1
    assert len(frontier) == 0


def test_pop_times_out_on_empty(frontier):
    start = time.monotonic()
    assert frontier.pop(timeout=0.05) is None
    assert time.monotonic() - start >= 0.04


def test_pop_wakes_on_push(frontier):
    got = []
    t = threading.Thread(target=lambda: got.append(frontier.pop(timeout=5)))
    t.start()
    time.sleep(0.05)
    frontier.push(addr("/late"))
    t.join(5)
    assert got == [addr("/late")]


def test_close_releases_waiters_and_drops_pushes(frontier):
    got = []
    t = threading.Thread(target=lambda: got.append(frontier.pop(timeout=5)))
    t.start()
    time.sleep(0.05)
    frontier.close()
    t.join(5)
    assert got == [None]
    assert frontier.closed
    assert frontier.push(addr("/x")) is False


def test_idle_tracks_in_progress_items(frontier):
    assert frontier.idle()
    frontier.push(addr("/a"))
    assert not frontier.idle()
    assert frontier.pop(0.1) == addr("/a")
    # popped but not finished yet
    assert not frontier.idle()
    frontier.task_done()
    assert frontier.idle()


def test_task_done_without_pop_raises(frontier):
    with pytest.raises(ValueError):
        frontier.task_done()
