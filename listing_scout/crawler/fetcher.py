# listing_scout/crawler/fetcher.py
"""
Fetcher module: the HTTP transport with header rotation, proxy rotation,
retry/backoff and timeout.
"""
from __future__ import annotations

import asyncio
import itertools
import random
from typing import Dict, Iterator, Optional, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from listing_scout.config import ScoutConfig
from listing_scout.crawler.models import PageRequest, RawPage
from listing_scout.errors import FetchError
from listing_scout.logger import get_logger

__all__ = ("Fetcher", "RETRY_STATUS", "CONTENT_ERROR_STATUS")

RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)
# challenge pages: not a success, but their body is what the block classifier reads
CONTENT_ERROR_STATUS: Sequence[int] = (401, 403)

_NAVIGATION_HEADERS: Dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "sec-ch-ua": '"Chromium";v="122", "Not(A:Brand";v="24", "Google Chrome";v="122"',
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": '"Windows"',
    "sec-fetch-dest": "document",
    "sec-fetch-mode": "navigate",
    "sec-fetch-site": "none",
    "sec-fetch-user": "?1",
    "upgrade-insecure-requests": "1",
}


class Fetcher:
    """Handles HTTP fetching with rotated headers/proxies, retries/backoff, and timeout."""

    def __init__(
        self,
        session: ClientSession,
        config: ScoutConfig,
        retry_status: Sequence[int] = RETRY_STATUS,
        max_backoff: float = 60.0,
    ) -> None:
        self.session = session
        self.config = config
        self._retry_status = retry_status
        self._max_backoff = max_backoff
        self._proxies: Optional[Iterator[str]] = itertools.cycle(config.proxies) if config.proxies else None
        self.logger = get_logger("crawler")

    def headers(self) -> Dict[str, str]:
        """Browser-like navigation headers with a randomly chosen User-Agent."""
        return {"User-Agent": random.choice(self.config.user_agents), **_NAVIGATION_HEADERS}

    def _next_proxy(self) -> Optional[str]:
        return next(self._proxies) if self._proxies is not None else None

    async def fetch(self, request: PageRequest) -> RawPage:
        """
        Fetch one results page.

        Returns RawPage for successful responses and for 401/403 challenge
        pages, which are still content for the block classifier. Any other
        4xx raises FetchError at once; 5xx, 429, network errors and timeouts
        raise it once ``retry_times`` retries are exhausted.
        """
        attempts = 0
        while True:
            try:
                async with self.session.get(
                    request.url,
                    headers=self.headers(),
                    proxy=self._next_proxy(),
                    timeout=ClientTimeout(total=self.config.timeout),
                    raise_for_status=False,
                ) as resp:
                    if resp.status in self._retry_status:
                        raise ClientError(f"Retryable status {resp.status}")
                    if resp.status >= 400 and resp.status not in CONTENT_ERROR_STATUS:
                        raise FetchError(request.url, f"HTTP {resp.status}", attempts + 1)
                    text = await resp.text(errors="replace")
                    return RawPage(content=text, status_code=resp.status, source_url=str(resp.url))
            except (ClientError, asyncio.TimeoutError) as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    raise FetchError(request.url, f"giving up after {attempts} attempts: {exc!r}", attempts) from exc
                # exponential backoff, capped
                backoff = min(self._max_backoff, 2**attempts + random.random())
                self.logger.debug(
                    "Retry %d/%d for %s after %.2f s (%s)",
                    attempts, self.config.retry_times, request.url, backoff, exc,
                )
                await asyncio.sleep(backoff)
