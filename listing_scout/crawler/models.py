# listing_scout/crawler/models.py
"""
Data models for the ListingScout crawler.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class BlockVerdict(str, Enum):
    """Verdict of the anti-block classifier."""

    CLEAN = "clean"
    BLOCKED = "blocked"


@dataclass(frozen=True, slots=True)
class PageRequest:
    """One results page to fetch. Consumed exactly once by the controller."""

    url: str
    page_number: int = 1
    retry_count: int = 0


@dataclass(frozen=True, slots=True)
class RawPage:
    """Holds the fetched markup (or rendered DOM snapshot) of a results page."""

    content: str
    status_code: int
    source_url: str


@dataclass(frozen=True, slots=True)
class ListingRecord:
    """A single vehicle listing as produced by one extraction strategy."""

    url: Optional[str]
    make: Optional[str]
    model: Optional[str]
    strategy_used: str
    listing_id: Optional[str] = None
    vin: Optional[str] = None
    year: Optional[int] = None
    trim: Optional[str] = None
    style: Optional[str] = None
    price: Optional[int] = None
    mileage: Optional[int] = None
    location: Optional[str] = None
    exterior_color: Optional[str] = None
    interior_color: Optional[str] = None
    fuel_type: Optional[str] = None
    transmission: Optional[str] = None
    engine: Optional[str] = None
    condition: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Dataset row: every field, with ``strategy_used`` stored as ``_source``."""
        data = asdict(self)
        data["_source"] = data.pop("strategy_used")
        return data


@dataclass(frozen=True, slots=True)
class ExtractionOutcome:
    """Result of running the extraction pipeline on one page."""

    records: Tuple[ListingRecord, ...] = ()
    strategy_used: Optional[str] = None
    reasons: Tuple[str, ...] = ()

    @property
    def empty(self) -> bool:
        return not self.records


@dataclass(slots=True)
class CrawlSummary:
    """Итог одного запуска: счётчики и проблемные страницы."""

    saved_count: int = 0
    pages_visited: int = 0
    failed_urls: List[str] = field(default_factory=list)
    blocked_pages: List[str] = field(default_factory=list)
    empty_pages: List[str] = field(default_factory=list)
    failed_saves: List[str] = field(default_factory=list)
    rejected: int = 0
    strategies: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
