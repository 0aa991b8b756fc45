# === FILE: listing_scout/crawler/controller.py ===
from __future__ import annotations

import asyncio
import time
from typing import List, Optional, Protocol, Sequence

from listing_scout.config import ScoutConfig
from listing_scout.crawler.dedup import Deduplicator
from listing_scout.crawler.models import (
    BlockVerdict,
    CrawlSummary,
    ExtractionOutcome,
    ListingRecord,
    PageRequest,
    RawPage,
)
from listing_scout.crawler.pagination import next_request
from listing_scout.crawler.state import CrawlState
from listing_scout.errors import BlockedError, FetchError, NoDataError
from listing_scout.logger import get_logger
from listing_scout.parser.block_detector import classify, detect_block_reason
from listing_scout.parser.pipeline import ExtractionPipeline, default_strategies
from listing_scout.storage import DebugStore, ListingSink
from listing_scout.utils import build_start_url

__all__ = ("Transport", "CrawlController")


class Transport(Protocol):
    async def fetch(self, request: PageRequest) -> RawPage: ...


class CrawlController:
    """
    Асинхронный обход страниц результатов с бюджетом и лимитом страниц.

    Each page goes fetch → classify → extract → dedup → persist → paginate.
    ``concurrency`` workers share one :class:`CrawlState`; once the budget or
    the page cap is reached nothing new is enqueued, in-flight pages still
    finish and are truncated to whatever budget is left.
    """

    def __init__(
        self,
        config: ScoutConfig,
        transport: Transport,
        sink: ListingSink,
        debug_store: DebugStore,
        pipeline: Optional[ExtractionPipeline] = None,
    ) -> None:
        self.config = config
        self.transport = transport
        self.sink = sink
        self.debug_store = debug_store
        self.pipeline = pipeline or ExtractionPipeline(default_strategies(config))
        self.state = CrawlState(config.results_wanted, config.max_pages)
        self.dedup = Deduplicator(self.state)
        self.summary = CrawlSummary()
        self.logger = get_logger("crawler")

    async def run(self, seeds: Optional[Sequence[PageRequest]] = None) -> CrawlSummary:
        if not seeds:
            seeds = [PageRequest(url=build_start_url(self.config), page_number=1)]
        self.logger.info("Старт обхода: %s", ", ".join(s.url for s in seeds))
        start = time.monotonic()

        queue: asyncio.Queue[PageRequest] = asyncio.Queue()
        for seed in seeds:
            await queue.put(seed)
        workers = [asyncio.create_task(self._worker(queue)) for _ in range(self.config.concurrency)]
        await queue.join()
        for w in workers:
            w.cancel()
        await asyncio.gather(*workers, return_exceptions=True)

        self.summary.saved_count = self.state.saved_count
        self.summary.pages_visited = self.state.pages_visited
        self.summary.rejected = self.dedup.rejected
        duration = time.monotonic() - start
        self.logger.info(
            "Scraper finished: %d/%d listings from %d pages in %.2f s",
            self.state.saved_count, self.config.results_wanted, self.state.pages_visited, duration,
        )
        return self.summary

    async def _worker(self, queue: asyncio.Queue[PageRequest]) -> None:
        while True:
            try:
                request = await queue.get()
            except asyncio.CancelledError:
                break
            try:
                follow_up = await self.process(request)
                if follow_up is not None:
                    await queue.put(follow_up)
            except Exception:
                self.logger.exception("Unexpected error on %s", request.url)
                self.summary.failed_urls.append(request.url)
            finally:
                queue.task_done()

    async def process(self, request: PageRequest) -> Optional[PageRequest]:
        """Handle one page request and return the next one to enqueue, if any."""
        if await self.state.budget_met():
            self.logger.debug("Budget met, dropping %s", request.url)
            return None
        if not await self.state.reserve_page():
            self.logger.debug("Page cap reached, dropping %s", request.url)
            return None

        self.logger.info("Processing %s (Page %d)", request.url, request.page_number)
        try:
            page = await self.transport.fetch(request)
        except FetchError as exc:
            self.logger.warning("Request failed %s: %s", request.url, exc)
            self.summary.failed_urls.append(request.url)
            # no content to read a next link from; the page parameter can still advance
            page = RawPage(content="", status_code=0, source_url=request.url)
        else:
            outcome = self._extract(request, page)
            await self._persist(page, outcome)

        snapshot = self.state.snapshot()
        return next_request(
            page,
            request,
            snapshot,
            next_selector=self.config.selectors.next_page,
            origin=str(self.config.origin),
            page_param=self.config.page_param,
        )

    def _extract(self, request: PageRequest, page: RawPage) -> ExtractionOutcome:
        captured = False
        if classify(page, self.config.block_indicators) is BlockVerdict.BLOCKED:
            blocked = BlockedError(page.source_url, detect_block_reason(page, self.config.block_indicators) or "blocked")
            self.logger.warning("Blocked page detected: %s", blocked)
            self.summary.blocked_pages.append(page.source_url)
            self.debug_store.store(f"blocked_page_pg{request.page_number}", page.content)
            captured = True
            if self.config.block_policy == "skip":
                return ExtractionOutcome(reasons=(blocked.reason,))

        outcome = self.pipeline.extract(page)
        if outcome.empty:
            missing = NoDataError(page.source_url, "; ".join(outcome.reasons) or None)
            self.logger.warning("No data extracted! %s", missing)
            self.summary.empty_pages.append(page.source_url)
            if not captured:
                self.debug_store.store(f"debug_page_pg{request.page_number}", page.content)
        elif outcome.strategy_used:
            strategies = self.summary.strategies
            strategies[outcome.strategy_used] = strategies.get(outcome.strategy_used, 0) + 1
        return outcome

    async def _persist(self, page: RawPage, outcome: ExtractionOutcome) -> None:
        async with self.state.lock:
            accepted = self.dedup.filter_locked(outcome.records)
            granted = self.state.reserve_budget_locked(len(accepted))
            saved_count = self.state.saved_count
        to_save: List[ListingRecord] = accepted[:granted]
        if not to_save:
            return
        try:
            self.sink.append(to_save)
        except Exception as exc:
            # nothing was persisted: the slots and identity keys go back to the pool
            async with self.state.lock:
                self.state.release_budget_locked(granted)
                self.dedup.forget_locked(accepted)
            self.logger.error("Failed to save %d listings from %s: %s", len(to_save), page.source_url, exc)
            self.summary.failed_saves.append(page.source_url)
            return
        self.logger.info(
            "Saved %d listings. Progress: %d/%d", len(to_save), saved_count, self.config.results_wanted
        )
