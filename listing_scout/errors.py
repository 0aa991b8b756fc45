"""Исключения ListingScout.

Only :class:`ConfigurationError` is fatal; everything else is handled per page
by the crawl controller or the extraction pipeline.
"""
from __future__ import annotations

from typing import Optional

__all__ = (
    "ScoutError",
    "FetchError",
    "ParseError",
    "NoDataError",
    "BlockedError",
    "ConfigurationError",
)


class ScoutError(Exception):
    """Base class for all ListingScout errors."""


class FetchError(ScoutError):
    """Transport gave up on a request (network error, timeout, error status)."""

    def __init__(self, url: str, message: str, attempts: int = 0) -> None:
        super().__init__(message)
        self.url = url
        self.attempts = attempts


class ParseError(ScoutError):
    """Structured payload is missing or malformed."""


class NoDataError(ScoutError):
    """Every extraction strategy came back empty for a page."""

    def __init__(self, url: str, reason: Optional[str] = None) -> None:
        super().__init__(reason or f"no listings extracted from {url}")
        self.url = url
        self.reason = reason


class BlockedError(ScoutError):
    """The page looks like an anti-bot challenge."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class ConfigurationError(ScoutError, ValueError):
    """Invalid or contradictory run configuration."""
