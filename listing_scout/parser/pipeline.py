"""Extraction pipeline: strategies in priority order, first non-empty result wins."""
from __future__ import annotations

from typing import List, Optional, Sequence

from listing_scout.config import ScoutConfig
from listing_scout.crawler.models import ExtractionOutcome, RawPage
from listing_scout.errors import ParseError
from listing_scout.logger import logger
from listing_scout.parser.base import ExtractionStrategy
from listing_scout.parser.markup import MarkupExtractor
from listing_scout.parser.structured import StructuredStateExtractor

__all__ = ("ExtractionPipeline", "default_strategies")


def default_strategies(config: Optional[ScoutConfig] = None) -> List[ExtractionStrategy]:
    """Embedded state first, markup cards second."""
    if config is None:
        return [StructuredStateExtractor(), MarkupExtractor()]
    origin = str(config.origin)
    return [
        StructuredStateExtractor(anchor=config.selectors.state_script, origin=origin),
        MarkupExtractor(selectors=config.selectors, origin=origin),
    ]


class ExtractionPipeline:
    """
    Runs each strategy until one yields records.

    A :class:`ParseError` only moves on to the next strategy. When every
    strategy fails the outcome is empty and ``reasons`` says why.
    """

    def __init__(self, strategies: Sequence[ExtractionStrategy]) -> None:
        if not strategies:
            raise ValueError("at least one extraction strategy is required")
        self.strategies = list(strategies)

    def extract(self, page: RawPage) -> ExtractionOutcome:
        reasons: List[str] = []
        for strategy in self.strategies:
            try:
                records = strategy.extract(page)
            except ParseError as exc:
                logger.warning("%s failed on %s: %s", strategy.name, page.source_url, exc)
                reasons.append(f"{strategy.name}: {exc}")
                continue
            if records:
                logger.info("Extracted %d listings via %s", len(records), strategy.name)
                return ExtractionOutcome(
                    records=tuple(records), strategy_used=strategy.name, reasons=tuple(reasons)
                )
            logger.warning("No listings from %s on %s, trying next strategy", strategy.name, page.source_url)
            reasons.append(f"{strategy.name}: no listings")
        return ExtractionOutcome(records=(), strategy_used=None, reasons=tuple(reasons))
