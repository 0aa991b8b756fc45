"""Structured-state extraction from the embedded Next.js payload.

The results page ships its Apollo cache inside ``script#__NEXT_DATA__``::

    {"props": {"pageProps": {"__APOLLO_STATE__": {
        "ConsumerSummaryListing:123": {"__typename": "ConsumerSummaryListing",
                                       "vin": "...", "vehicle": {...}, ...},
        ...}}}}

Nested objects may be inlined or normalized into ``{"__ref": "<key>"}`` links;
both forms are accepted.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from listing_scout.crawler.models import ListingRecord, RawPage
from listing_scout.errors import ParseError
from listing_scout.logger import logger
from listing_scout.parser.base import ExtractionStrategy

__all__ = ("StructuredStateExtractor", "LISTING_TYPENAME")

LISTING_TYPENAME = "ConsumerSummaryListing"
_MAX_REF_DEPTH = 8


def _resolve(state: Dict[str, Any], value: Any, depth: int = 0) -> Any:
    """Follow Apollo ``__ref`` links until a concrete value is reached."""
    while isinstance(value, dict) and "__ref" in value and depth < _MAX_REF_DEPTH:
        value = state.get(value["__ref"])
        depth += 1
    return value


def _obj(state: Dict[str, Any], parent: Any, key: str) -> Dict[str, Any]:
    if not isinstance(parent, dict):
        return {}
    value = _resolve(state, parent.get(key))
    return value if isinstance(value, dict) else {}


def _scalar(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _named(state: Dict[str, Any], parent: Any, key: str) -> Optional[str]:
    """Field that is either a plain string or an object with a ``name``."""
    if not isinstance(parent, dict):
        return None
    value = _resolve(state, parent.get(key))
    if isinstance(value, dict):
        return _scalar(value.get("name"))
    return _scalar(value)


def _int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class StructuredStateExtractor(ExtractionStrategy):
    """Decodes listing summaries from the embedded Apollo state."""

    name = "next_data"

    def __init__(self, anchor: str = "script#__NEXT_DATA__", origin: str = "https://www.truecar.com") -> None:
        self.anchor = anchor
        self.origin = origin

    def load_state(self, page: RawPage) -> Dict[str, Any]:
        """Return the Apollo state map or raise :class:`ParseError`."""
        soup = BeautifulSoup(page.content or "", "html.parser")
        script = soup.select_one(self.anchor)
        payload = (script.string or "") if script is not None else ""
        if not payload.strip():
            raise ParseError(f"state anchor {self.anchor!r} not found")
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise ParseError(f"malformed state payload: {exc}") from exc
        state: Any = data
        for key in ("props", "pageProps", "__APOLLO_STATE__"):
            state = state.get(key) if isinstance(state, dict) else None
        if not isinstance(state, dict):
            raise ParseError("payload has no __APOLLO_STATE__ map")
        return state

    def extract(self, page: RawPage) -> List[ListingRecord]:
        state = self.load_state(page)
        records: List[ListingRecord] = []
        dropped = 0
        for entry in state.values():
            if not isinstance(entry, dict) or entry.get("__typename") != LISTING_TYPENAME:
                continue
            record = self._to_record(state, entry)
            if record is None:
                dropped += 1
                continue
            records.append(record)
        if dropped:
            logger.debug("Skipped %d state listings without VIN on %s", dropped, page.source_url)
        return records

    def _to_record(self, state: Dict[str, Any], entry: Dict[str, Any]) -> Optional[ListingRecord]:
        vehicle = _obj(state, entry, "vehicle")
        vin = _scalar(vehicle.get("vin")) or _scalar(entry.get("vin"))
        if vin is None:
            return None

        pricing = _obj(state, entry, "pricing")
        location = _obj(state, entry, "location")
        make = _obj(state, vehicle, "make")
        model = _obj(state, vehicle, "model")
        style = _obj(state, vehicle, "style")

        city, region = _scalar(location.get("city")), _scalar(location.get("state"))
        trim = _scalar(style.get("trimName")) or _named(state, style, "trim") or _named(state, vehicle, "trim")

        return ListingRecord(
            listing_id=_scalar(entry.get("id")),
            vin=vin,
            year=_int(vehicle.get("year")),
            make=_scalar(make.get("name")) or _named(state, vehicle, "make"),
            model=_scalar(model.get("name")) or _named(state, vehicle, "model"),
            trim=trim,
            style=_scalar(style.get("name")),
            price=_int(pricing.get("listPrice")),
            mileage=_int(vehicle.get("mileage")),
            location=f"{city}, {region}" if city and region else None,
            exterior_color=_named(state, vehicle, "exteriorColor"),
            interior_color=_named(state, vehicle, "interiorColor"),
            fuel_type=_named(state, vehicle, "fuelType"),
            transmission=_named(state, vehicle, "transmission"),
            engine=_named(state, vehicle, "engine"),
            condition=_named(state, entry, "condition") or _named(state, vehicle, "condition"),
            url=self._listing_url(vin, _scalar(make.get("slug")), _scalar(model.get("slug"))),
            strategy_used=self.name,
        )

    def _listing_url(self, vin: str, make_slug: Optional[str], model_slug: Optional[str]) -> str:
        if make_slug and model_slug:
            path = f"/used-cars-for-sale/listing/{make_slug}/{model_slug}/{vin}/"
        else:
            path = f"/used-cars-for-sale/listing/{vin}/"
        return urljoin(self.origin, path)
