"""Pagination resolver: decide the next results page from the current one.

Pure given its inputs; it parses the page but never fetches or mutates state.
"""
from __future__ import annotations

from typing import Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from listing_scout.crawler.models import PageRequest, RawPage
from listing_scout.crawler.state import StateSnapshot
from listing_scout.utils import absolute_url, get_query_param, set_query_param

__all__ = ("next_request", "find_next_link")


def find_next_link(page: RawPage, selector: str, origin: str) -> Optional[str]:
    """Absolute URL of the explicit "next page" link, if the page has one."""
    soup = BeautifulSoup(page.content or "", "html.parser")
    tag = soup.select_one(selector)
    if not isinstance(tag, Tag):
        return None
    href = tag.get("href")
    if not isinstance(href, str):
        return None
    return absolute_url(href, origin)


def _increment_page_param(request: PageRequest, param: str) -> Optional[str]:
    current = get_query_param(request.url, param)
    if current is None:
        # first page usually carries no page parameter
        return set_query_param(request.url, param, str(request.page_number + 1))
    try:
        number = int(current)
    except ValueError:
        return None
    return set_query_param(request.url, param, str(number + 1))


def next_request(
    page: RawPage,
    request: PageRequest,
    state: StateSnapshot,
    *,
    next_selector: str,
    origin: str,
    page_param: str = "page",
) -> Optional[PageRequest]:
    """
    Decision order:

    1. budget met or page cap reached → None;
    2. explicit next link → that URL, ``page_number + 1``;
    3. otherwise bump the page query parameter of the current URL;
    4. nothing resolvable (non-numeric page parameter) → None.
    """
    if state.terminal:
        return None

    url = find_next_link(page, next_selector, origin)
    if url is None:
        url = _increment_page_param(request, page_param)
    if url is None or url == request.url:
        return None
    return PageRequest(url=url, page_number=request.page_number + 1)
