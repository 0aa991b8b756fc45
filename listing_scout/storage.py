"""listing_scout.storage: куда сохраняются объявления и отладочные страницы."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import List, Protocol, Sequence, Tuple, Union

from listing_scout.crawler.models import ListingRecord
from listing_scout.logger import logger

__all__ = (
    "ListingSink",
    "DebugStore",
    "JsonLinesSink",
    "MemorySink",
    "FanOutSink",
    "FileDebugStore",
    "MemoryDebugStore",
)

_UNSAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]+")


class ListingSink(Protocol):
    def append(self, records: Sequence[ListingRecord]) -> int: ...


class DebugStore(Protocol):
    def store(self, key: str, content: str) -> None: ...


class JsonLinesSink:
    """Dataset file: one JSON object per listing, appended in call order."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def append(self, records: Sequence[ListingRecord]) -> int:
        if not records:
            return 0
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            for record in records:
                f.write(json.dumps(record.to_dict(), ensure_ascii=False) + "\n")
        return len(records)


class MemorySink:
    """Keeps records in memory (reports, tests)."""

    def __init__(self) -> None:
        self.records: List[ListingRecord] = []
        self.calls = 0

    def append(self, records: Sequence[ListingRecord]) -> int:
        self.calls += 1
        self.records.extend(records)
        return len(records)


class FanOutSink:
    """Writes the same batch to several sinks."""

    def __init__(self, *sinks: ListingSink) -> None:
        self.sinks = sinks

    def append(self, records: Sequence[ListingRecord]) -> int:
        for sink in self.sinks:
            sink.append(records)
        return len(records)


class FileDebugStore:
    """Writes ``<key>.html`` into a directory. Failures are logged, never raised."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)

    def store(self, key: str, content: str) -> None:
        target = self.directory / f"{_UNSAFE_KEY.sub('_', key)}.html"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        except OSError as exc:
            logger.error("Could not save debug page %s: %s", target, exc)
            return
        logger.info("Saved debug page %s", target)


class MemoryDebugStore:
    def __init__(self) -> None:
        self.items: List[Tuple[str, str]] = []

    def store(self, key: str, content: str) -> None:
        self.items.append((key, content))

    @property
    def keys(self) -> List[str]:
        return [k for k, _ in self.items]
