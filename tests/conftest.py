# File: tests/conftest.py
import json
from typing import Callable, Dict, List, Optional

import pytest

from listing_scout.config import ScoutConfig
from listing_scout.crawler.models import PageRequest, RawPage
from listing_scout.errors import FetchError


def _state_entry(vin: Optional[str], idx: int, **overrides) -> Dict:
    entry = {
        "__typename": "ConsumerSummaryListing",
        "id": f"L{idx}",
        "vin": vin,
        "vehicle": {
            "year": 2019,
            "make": {"name": "Chevrolet", "slug": "chevrolet"},
            "model": {"name": "Malibu", "slug": "malibu"},
            "trim": {"name": "LT"},
            "mileage": 30000 + idx,
            "exteriorColor": "Silver",
            "interiorColor": "Black",
            "fuelType": "Gasoline",
            "transmission": "Automatic",
        },
        "pricing": {"listPrice": 18000 + idx},
        "location": {"city": "Austin", "state": "TX"},
    }
    entry.update(overrides)
    return entry


@pytest.fixture()
def state_entry() -> Callable[..., Dict]:
    """Factory for one Apollo ``ConsumerSummaryListing`` entry."""
    return _state_entry


@pytest.fixture()
def next_data_html() -> Callable[..., str]:
    """
    Build a results page with ``script#__NEXT_DATA__``.

    Accepts a list of VINs (entries are generated) or ready entries via *entries*.
    """

    def build(vins: List[str] = (), entries: Optional[List[Dict]] = None, next_href: Optional[str] = None,
              title: str = "Used Chevrolet Malibu for sale") -> str:
        if entries is None:
            entries = [_state_entry(vin, i) for i, vin in enumerate(vins)]
        state = {f"ConsumerSummaryListing:{i}": e for i, e in enumerate(entries)}
        state["ROOT_QUERY"] = {"__typename": "Query"}
        payload = json.dumps({"props": {"pageProps": {"__APOLLO_STATE__": state}}})
        nav = f'<a data-test="pagination-next" href="{next_href}">Next</a>' if next_href else ""
        return (
            f"<html><head><title>{title}</title></head><body>"
            f'<script id="__NEXT_DATA__" type="application/json">{payload}</script>'
            f"{nav}</body></html>"
        )

    return build


@pytest.fixture()
def cards_html() -> Callable[..., str]:
    """Build a results page with markup listing cards only."""

    def card(year="2018", make="Chevrolet", model="Malibu", price="$15,995", mileage="42,100 mi",
             href="/used-cars-for-sale/listing/1G1ZD5ST0JF000001/", trim="LS") -> str:
        parts = [
            f'<span data-test="vehicleCardYear">{year}</span>' if year is not None else "",
            f'<span data-test="vehicleCardMake">{make}</span>' if make is not None else "",
            f'<span data-test="vehicleCardModel">{model}</span>' if model is not None else "",
            f'<span data-test="vehicleCardTrim">{trim}</span>' if trim is not None else "",
            f'<div data-test="vehicleCardPrice">{price}</div>' if price is not None else "",
            f'<div data-test="vehicleCardMileage">{mileage}</div>' if mileage is not None else "",
            f'<a data-test="vehicleCardLink" href="{href}">View</a>' if href is not None else "",
        ]
        return f'<div data-test="cardContent">{"".join(parts)}</div>'

    def build(cards: List[str] = (), extra: str = "") -> str:
        return f"<html><head><title>Results</title></head><body>{''.join(cards)}{extra}</body></html>"

    build.card = card
    return build


@pytest.fixture()
def basic_config(tmp_path) -> ScoutConfig:
    """Return a basic valid ScoutConfig pointing at a fake site."""
    return ScoutConfig(
        base_url="https://cars.example.com/used-cars-for-sale/listings/",
        origin="https://cars.example.com",
        results_wanted=20,
        max_pages=10,
        concurrency=2,
        timeout=2.0,
        retry_times=0,
        output=tmp_path / "listings.jsonl",
        debug_dir=tmp_path / "debug",
    )


class FakeTransport:
    """Serves canned pages by page number and records every request."""

    def __init__(self, pages: Dict[int, str], failing: tuple = ()) -> None:
        self.pages = pages
        self.failing = set(failing)
        self.requests: List[PageRequest] = []

    async def fetch(self, request: PageRequest) -> RawPage:
        self.requests.append(request)
        if request.page_number in self.failing:
            raise FetchError(request.url, "simulated failure", attempts=1)
        content = self.pages.get(request.page_number, "<html><body></body></html>")
        return RawPage(content=content, status_code=200, source_url=request.url)


@pytest.fixture()
def fake_transport() -> Callable[..., FakeTransport]:
    return FakeTransport
