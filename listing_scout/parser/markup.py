"""Markup fallback: scan listing cards in the rendered results page.

Used when the embedded state is missing or empty. Cards rarely expose a VIN,
so identity falls back to the listing link during deduplication.
"""
from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from listing_scout.config import SelectorConfig
from listing_scout.crawler.models import ListingRecord, RawPage
from listing_scout.parser.base import ExtractionStrategy
from listing_scout.utils import absolute_url, clean_text, parse_int

__all__ = ("MarkupExtractor",)


def _text(card: Tag, selector: str) -> Optional[str]:
    node = card.select_one(selector)
    return clean_text(node.get_text(" ", strip=True)) if node is not None else None


class MarkupExtractor(ExtractionStrategy):
    """Reads ``[data-test="cardContent"]`` cards (selectors are configurable)."""

    name = "html_fallback"

    def __init__(self, selectors: SelectorConfig | None = None, origin: str = "https://www.truecar.com") -> None:
        self.selectors = selectors or SelectorConfig()
        self.origin = origin

    def extract(self, page: RawPage) -> List[ListingRecord]:
        soup = BeautifulSoup(page.content or "", "html.parser")
        records: List[ListingRecord] = []
        for card in soup.select(self.selectors.card):
            record = self._to_record(card)
            if record is not None:
                records.append(record)
        return records

    def _to_record(self, card: Tag) -> Optional[ListingRecord]:
        sel = self.selectors
        make, model = _text(card, sel.make), _text(card, sel.model)
        if not make or not model:
            return None

        link = card.select_one(sel.link)
        href = link.get("href") if link is not None else None

        return ListingRecord(
            year=parse_int(_text(card, sel.year), strip_non_digits=False),
            make=make,
            model=model,
            trim=_text(card, sel.trim),
            price=parse_int(_text(card, sel.price)),
            mileage=parse_int(_text(card, sel.mileage)),
            location=_text(card, sel.location),
            url=absolute_url(href if isinstance(href, str) else None, self.origin),
            strategy_used=self.name,
        )
