"""Identity-based deduplication of listing records."""
from __future__ import annotations

from typing import Iterable, List, Optional

from listing_scout.crawler.models import ListingRecord
from listing_scout.crawler.state import CrawlState
from listing_scout.logger import logger

__all__ = ("identity_key", "Deduplicator")


def identity_key(record: ListingRecord) -> Optional[str]:
    """VIN, else listing id, else URL. None means the record cannot be deduplicated."""
    if record.vin:
        return f"vin:{record.vin.strip().upper()}"
    if record.listing_id:
        return f"id:{record.listing_id}"
    if record.url:
        return f"url:{record.url}"
    return None


class Deduplicator:
    """First-seen wins; the key set only grows for the lifetime of the run."""

    def __init__(self, state: CrawlState) -> None:
        self.state = state
        self.rejected = 0

    def accept_locked(self, record: ListingRecord) -> bool:
        """Same as :meth:`accept` for callers already holding ``state.lock``."""
        key = identity_key(record)
        if key is None:
            logger.debug("Dropping unidentifiable record from %s", record.strategy_used)
            self.rejected += 1
            return False
        if not self.state.insert_key_locked(key):
            self.rejected += 1
            return False
        return True

    async def accept(self, record: ListingRecord) -> bool:
        async with self.state.lock:
            return self.accept_locked(record)

    def forget_locked(self, records: Iterable[ListingRecord]) -> None:
        """Drop the keys of records that were accepted but not persisted."""
        for record in records:
            key = identity_key(record)
            if key is not None:
                self.state.discard_key_locked(key)

    def filter_locked(self, records: Iterable[ListingRecord]) -> List[ListingRecord]:
        """Accepted records in their original order."""
        return [r for r in records if self.accept_locked(r)]
