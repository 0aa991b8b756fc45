"""listing_scout.utils: URL helpers and tolerant parsing of card text."""

from __future__ import annotations

import re
from typing import Optional, Sequence
from urllib.parse import parse_qsl, urlencode, urljoin, urlparse, urlunparse

from listing_scout.config import ScoutConfig
from listing_scout.logger import logger

__all__: Sequence[str] = (
    "build_start_url",
    "absolute_url",
    "set_query_param",
    "get_query_param",
    "parse_int",
    "clean_text",
)

_NON_DIGITS = re.compile(r"[^0-9]")


def build_start_url(config: ScoutConfig) -> str:
    """Первая страница: ``start_url`` или base_url с makeSlug/modelSlug/yearMin/yearMax/zip."""
    if config.start_url is not None:
        return str(config.start_url)
    url = str(config.base_url)
    params = (
        ("makeSlug", config.make),
        ("modelSlug", config.model),
        ("yearMin", config.year_min),
        ("yearMax", config.year_max),
        ("zip", config.zip),
    )
    for name, value in params:
        if value:
            url = set_query_param(url, name, str(value))
    logger.debug("Start URL: %s", url)
    return url


def absolute_url(href: Optional[str], origin: str) -> Optional[str]:
    """Resolve *href* against the site's origin; blank or script links give None."""
    if not href:
        return None
    href = href.strip()
    if not href or href.startswith(("javascript:", "mailto:", "#")):
        return None
    return urljoin(origin, href)


def set_query_param(url: str, name: str, value: str) -> str:
    """Return *url* with query parameter *name* set to *value*, other params kept in order."""
    parsed = urlparse(url)
    pairs = [(k, v) for k, v in parse_qsl(parsed.query, keep_blank_values=True) if k != name]
    pairs.append((name, value))
    return urlunparse(parsed._replace(query=urlencode(pairs)))


def get_query_param(url: str, name: str) -> Optional[str]:
    for key, value in parse_qsl(urlparse(url).query, keep_blank_values=True):
        if key == name:
            return value
    return None


def parse_int(text: Optional[str], *, strip_non_digits: bool = True) -> Optional[int]:
    """``"$21,995"`` → 21995. Anything without digits → None."""
    if text is None:
        return None
    raw = _NON_DIGITS.sub("", text) if strip_non_digits else text.strip()
    try:
        return int(raw)
    except ValueError:
        return None


def clean_text(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    text = " ".join(text.split())
    return text or None
