"""Anti-block classifier: does a fetched page look like a bot challenge?

Pure functions over page content, no network access. The crawl controller
decides what to do with a ``BLOCKED`` verdict.
"""
from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from bs4 import BeautifulSoup

from listing_scout.crawler.models import BlockVerdict, RawPage

__all__ = ("classify", "detect_block_reason")


def _haystacks(content: str) -> tuple[str, str]:
    soup = BeautifulSoup(content, "html.parser")
    title_tag = soup.find("title")
    title = title_tag.get_text(" ", strip=True) if title_tag else ""
    return " ".join(title.lower().split()), " ".join(content.lower().split())


def detect_block_reason(page: RawPage, indicators: Iterable[str]) -> Optional[str]:
    """Return a human-readable reason if *page* matches a block indicator, else None."""
    title, body = _haystacks(page.content or "")
    for needle in indicators:
        needle = needle.lower()
        if needle in title:
            return f"Title contains: {needle}"
        if needle in body:
            return f"Page contains: {needle}"
    return None


def classify(page: RawPage, indicators: Iterable[str]) -> BlockVerdict:
    """``BLOCKED`` iff the page's title or content contains any indicator substring."""
    if detect_block_reason(page, indicators) is None:
        return BlockVerdict.CLEAN
    return BlockVerdict.BLOCKED
