# File: tests/test_dedup.py
import asyncio

import pytest

from listing_scout.crawler.dedup import Deduplicator, identity_key
from listing_scout.crawler.models import ListingRecord
from listing_scout.crawler.state import CrawlState


def record(**kw) -> ListingRecord:
    base = dict(url=None, make="Chevrolet", model="Malibu", strategy_used="test")
    base.update(kw)
    return ListingRecord(**base)


def test_identity_key_precedence():
    assert identity_key(record(vin="abc", listing_id="1", url="https://x/1")) == "vin:ABC"
    assert identity_key(record(listing_id="1", url="https://x/1")) == "id:1"
    assert identity_key(record(url="https://x/1")) == "url:https://x/1"
    assert identity_key(record()) is None


@pytest.mark.asyncio()
async def test_first_seen_wins():
    dedup = Deduplicator(CrawlState(results_wanted=10, max_pages=1))
    assert await dedup.accept(record(vin="VIN1", price=1))
    assert not await dedup.accept(record(vin="vin1", price=2))
    assert await dedup.accept(record(url="https://x/1"))
    assert not await dedup.accept(record(url="https://x/1"))
    assert not await dedup.accept(record())
    assert dedup.rejected == 3


@pytest.mark.asyncio()
async def test_concurrent_accepts_insert_each_key_once():
    dedup = Deduplicator(CrawlState(results_wanted=10, max_pages=1))
    results = await asyncio.gather(*(dedup.accept(record(vin=f"VIN{i % 5}")) for i in range(50)))
    assert sum(results) == 5
    assert len(dedup.state.seen_keys) == 5


def test_filter_keeps_order():
    dedup = Deduplicator(CrawlState(results_wanted=10, max_pages=1))
    recs = [record(vin="B"), record(vin="A"), record(vin="B"), record(vin="C")]
    assert [r.vin for r in dedup.filter_locked(recs)] == ["B", "A", "C"]


@pytest.mark.asyncio()
async def test_budget_reservation_never_overshoots():
    state = CrawlState(results_wanted=7, max_pages=10)

    async def complete(n: int) -> int:
        async with state.lock:
            granted = state.reserve_budget_locked(n)
        await asyncio.sleep(0)
        return granted

    granted = await asyncio.gather(*(complete(3) for _ in range(5)))
    assert sum(granted) == 7
    assert state.saved_count == 7
    assert state.remaining == 0


@pytest.mark.asyncio()
async def test_reserve_page_stops_at_cap():
    state = CrawlState(results_wanted=1, max_pages=2)
    assert await state.reserve_page()
    assert await state.reserve_page()
    assert not await state.reserve_page()
    assert state.pages_visited == 2
