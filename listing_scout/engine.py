# File: listing_scout/engine.py
"""listing_scout.engine: сборка транспорта, хранилищ и контроллера для одного запуска."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from aiohttp import ClientSession

from listing_scout.config import ScoutConfig
from listing_scout.crawler.controller import CrawlController
from listing_scout.crawler.fetcher import Fetcher
from listing_scout.crawler.models import CrawlSummary, ListingRecord
from listing_scout.logger import logger
from listing_scout.storage import FanOutSink, FileDebugStore, JsonLinesSink, MemorySink

__all__ = ["ScrapeRun", "start_scrape"]


@dataclass(slots=True)
class ScrapeRun:
    """Итог запуска: сводка и сохранённые объявления в порядке сохранения."""

    summary: CrawlSummary
    records: List[ListingRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "listings": [r.to_dict() for r in self.records],
        }


async def start_scrape(cfg: ScoutConfig) -> ScrapeRun:
    """
    Запускает обход в контексте aiohttp-сессии и возвращает ScrapeRun.

    Records are appended to ``cfg.output`` as JSON lines while the crawl runs;
    pages with no data or a block verdict are saved under ``cfg.debug_dir``.
    """
    memory = MemorySink()
    sink = FanOutSink(JsonLinesSink(cfg.output), memory)
    async with ClientSession() as session:
        controller = CrawlController(
            cfg,
            transport=Fetcher(session, cfg),
            sink=sink,
            debug_store=FileDebugStore(cfg.debug_dir),
        )
        summary = await controller.run()
    logger.info("Dataset written to %s", cfg.output)
    return ScrapeRun(summary=summary, records=memory.records)
