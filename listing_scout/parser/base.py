"""Common interface of listing extraction strategies."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from listing_scout.crawler.models import ListingRecord, RawPage


class ExtractionStrategy(ABC):
    """
    One way of turning a results page into listing records.

    Implementations return an empty list when they find nothing and raise
    :class:`~listing_scout.errors.ParseError` when their input is unusable.
    """

    name: str = "strategy"

    @abstractmethod
    def extract(self, page: RawPage) -> List[ListingRecord]:
        ...
