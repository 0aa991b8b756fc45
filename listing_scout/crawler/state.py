"""Shared, synchronized state of one crawl run."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Set


@dataclass(frozen=True, slots=True)
class CrawlGoal:
    results_wanted: int
    max_pages: int


@dataclass(frozen=True, slots=True)
class StateSnapshot:
    """Immutable view of the counters, consumed by the pagination resolver."""

    saved_count: int
    pages_visited: int
    goal: CrawlGoal

    @property
    def budget_met(self) -> bool:
        return self.saved_count >= self.goal.results_wanted

    @property
    def page_cap_reached(self) -> bool:
        return self.pages_visited >= self.goal.max_pages

    @property
    def terminal(self) -> bool:
        return self.budget_met or self.page_cap_reached


class CrawlState:
    """
    Счётчики и множество ключей идентичности одного запуска.

    Every mutation goes through ``lock``. Callers that need several steps to be
    atomic together (dedup + budget reservation for one page) hold the lock
    themselves and use the ``*_locked`` methods.
    """

    def __init__(self, results_wanted: int, max_pages: int) -> None:
        self.goal = CrawlGoal(results_wanted=results_wanted, max_pages=max_pages)
        self.saved_count = 0
        self.pages_visited = 0
        self.seen_keys: Set[str] = set()
        self.lock = asyncio.Lock()

    @property
    def remaining(self) -> int:
        return max(0, self.goal.results_wanted - self.saved_count)

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(self.saved_count, self.pages_visited, self.goal)

    def insert_key_locked(self, key: str) -> bool:
        """Check-and-insert; True when *key* was not seen before."""
        if key in self.seen_keys:
            return False
        self.seen_keys.add(key)
        return True

    def reserve_budget_locked(self, wanted: int) -> int:
        """Reserve up to *wanted* result slots and return how many were granted."""
        granted = min(max(0, wanted), self.remaining)
        self.saved_count += granted
        return granted

    def release_budget_locked(self, count: int) -> None:
        """Give back slots reserved for records that were never persisted."""
        self.saved_count = max(0, self.saved_count - max(0, count))

    def discard_key_locked(self, key: str) -> None:
        self.seen_keys.discard(key)

    async def reserve_page(self) -> bool:
        """Count a page request against ``max_pages``; False once the cap is reached."""
        async with self.lock:
            if self.pages_visited >= self.goal.max_pages:
                return False
            self.pages_visited += 1
            return True

    async def budget_met(self) -> bool:
        async with self.lock:
            return self.saved_count >= self.goal.results_wanted
