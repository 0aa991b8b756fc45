# File: tests/test_pagination.py
import pytest

from listing_scout.crawler.models import PageRequest, RawPage
from listing_scout.crawler.pagination import next_request
from listing_scout.crawler.state import CrawlGoal, StateSnapshot

ORIGIN = "https://cars.example.com"
NEXT = 'a[data-test="pagination-next"]'
START = f"{ORIGIN}/used-cars-for-sale/listings/?makeSlug=chevrolet&modelSlug=malibu"


def snapshot(saved=0, visited=1, wanted=20, max_pages=10) -> StateSnapshot:
    return StateSnapshot(saved, visited, CrawlGoal(results_wanted=wanted, max_pages=max_pages))


def page(content: str = "<html></html>", url: str = START) -> RawPage:
    return RawPage(content=content, status_code=200, source_url=url)


def resolve(raw: RawPage, request: PageRequest, state: StateSnapshot):
    return next_request(raw, request, state, next_selector=NEXT, origin=ORIGIN)


def test_follows_explicit_next_link():
    raw = page('<a data-test="pagination-next" href="/used-cars-for-sale/listings/?page=2&amp;x=1">Next</a>')
    nxt = resolve(raw, PageRequest(START, 1), snapshot())
    assert nxt == PageRequest(f"{ORIGIN}/used-cars-for-sale/listings/?page=2&x=1", 2)


def test_increments_missing_page_param():
    nxt = resolve(page(), PageRequest(START, 1), snapshot())
    assert nxt is not None
    assert nxt.page_number == 2
    assert nxt.url == f"{START}&page=2"


def test_increments_existing_page_param():
    nxt = resolve(page(), PageRequest(f"{START}&page=4", 4), snapshot(visited=4))
    assert nxt.url == f"{START}&page=5"
    assert nxt.page_number == 5


def test_unparseable_page_param_stops():
    assert resolve(page(), PageRequest(f"{START}&page=last", 3), snapshot()) is None


@pytest.mark.parametrize(
    "state",
    [snapshot(saved=20), snapshot(saved=25), snapshot(visited=10), snapshot(saved=1, visited=2, max_pages=2)],
)
def test_terminal_state_returns_none(state):
    raw = page('<a data-test="pagination-next" href="/next">Next</a>')
    assert resolve(raw, PageRequest(START, 1), state) is None


def test_next_link_pointing_to_itself_is_ignored():
    raw = page(f'<a data-test="pagination-next" href="{START.replace("&", "&amp;")}">Next</a>')
    assert resolve(raw, PageRequest(START, 1), snapshot()) is None
