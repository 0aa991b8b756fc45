"""Logging setup for **ListingScout**.

All project loggers live under the ``ListingScout`` namespace::

    from listing_scout.logger import logger, get_logger
    logger.info("Crawl started")
    get_logger("crawler").debug("Queue drained")

Records go to *stderr* so that ``listing-scout scrape`` can print its JSON
summary to stdout untouched; an optional rotating file receives the same
records. Chatty transport loggers (``aiohttp.*``) are held at WARNING unless
the project itself runs at DEBUG.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Optional, TextIO, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "ListingScout"
THIRD_PARTY_LOGGERS: Final[tuple[str, ...]] = ("aiohttp.client", "aiohttp.internal", "aiohttp.access")

_LevelT = Union[int, str]


def _level_no(level: _LevelT) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def get_logger(suffix: Optional[str] = None) -> logging.Logger:
    """``ListingScout`` or its child ``ListingScout.<suffix>``."""
    return logging.getLogger(f"{LOGGER_NAME}.{suffix}" if suffix else LOGGER_NAME)


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """(Re)configure the project logger, replacing its handlers.

    Parameters
    ----------
    level
        Numeric or textual level for the ``ListingScout`` tree.
    log_file
        Rotating logfile (5 MB x 3). *None* → console only.
    log_format
        Format string shared by every handler.
    stream
        Console stream; ``sys.stderr`` by default.
    """
    level_no = _level_no(level)
    formatter = logging.Formatter(log_format)

    lg = get_logger()
    lg.setLevel(level_no)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console.setFormatter(formatter)
    lg.addHandler(console)

    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(
            filename=str(log_file), maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        rotating.setFormatter(formatter)
        lg.addHandler(rotating)

    lg.propagate = False

    third_party = logging.DEBUG if level_no <= logging.DEBUG else logging.WARNING
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party)
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Entry point used by the CLI."""
    return configure(level=level, log_file=log_file, log_format=log_format)


logger: logging.Logger = init_logging()

__all__ = ["logger", "get_logger", "configure", "init_logging", "LOGGER_NAME", "DEFAULT_FORMAT"]
