"""Shared search state.

A ``SearchContext`` owns the options, the record set and everything derived
from it. Derived structures (engine indexes, taxonomy maps, cached results)
are stored in ``GenerationCache`` instances and tagged with the generation
they were built for. Every mutation of the record set bumps the generation
of the affected kind, so stale entries are rebuilt on their next read.
"""

import logging
import threading
import time
from collections.abc import Callable, Hashable
from typing import Any, TypeVar

from marksearch.config import SearchOptions
from marksearch.core.models import INDEXED_KINDS, Record, RecordKind, SearchData

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GenerationCache:
    """Cache whose entries are only valid for the generation they were built for."""

    def __init__(self, max_entries: int | None = None):
        self.max_entries = max_entries
        self._entries: dict[Hashable, tuple[int, Any]] = {}

    def get(self, key: Hashable, generation: int) -> Any | None:
        """Get a value, dropping it if it belongs to another generation."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry[0] != generation:
            del self._entries[key]
            return None
        return entry[1]

    def put(self, key: Hashable, generation: int, value: Any) -> None:
        if self.max_entries is not None and len(self._entries) >= self.max_entries:
            # Evict the oldest entry
            self._entries.pop(next(iter(self._entries)))
        self._entries[key] = (generation, value)

    def get_or_build(
        self, key: Hashable, generation: int, build: Callable[[], T]
    ) -> T:
        """Get a value or build and store it for this generation."""
        value = self.get(key, generation)
        if value is None:
            value = build()
            self.put(key, generation, value)
        return value

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries


class SearchContext:
    """Options, records and derived indexes of one search session.

    The record set and its derived indexes form one unit guarded by ``lock``.
    Writers hold it while mutating and invalidating, readers while searching.
    """

    def __init__(
        self,
        options: SearchOptions | None = None,
        data: SearchData | None = None,
        active_url: str | None = None,
        result_cache_size: int = 256,
        now_ms: float | None = None,
    ):
        self.options = options or SearchOptions()
        self.data = data if data is not None else SearchData()
        self.active_url = active_url
        # Reference time the record set was loaded at, in epoch milliseconds
        self.now_ms = time.time() * 1000 if now_ms is None else now_ms
        self.lock = threading.RLock()
        self.derived = GenerationCache()
        self.results = GenerationCache(max_entries=result_cache_size)
        self._generations = dict.fromkeys(INDEXED_KINDS, 0)

    @property
    def generation(self) -> int:
        """Generation of the whole record set."""
        return sum(self._generations.values())

    def kind_generation(self, kind: RecordKind) -> int:
        return self._generations[kind]

    def invalidate(self, kind: RecordKind | None = None) -> None:
        """Mark one kind (or all kinds) as changed."""
        with self.lock:
            kinds = [kind] if kind is not None else list(INDEXED_KINDS)
            for k in kinds:
                self._generations[k] += 1
            logger.debug(
                f"Invalidated {', '.join(k.value for k in kinds)} "
                f"(generation {self.generation})"
            )

    def replace_data(self, data: SearchData, now_ms: float | None = None) -> None:
        """Swap in a freshly loaded record set."""
        with self.lock:
            self.data = data
            self.now_ms = time.time() * 1000 if now_ms is None else now_ms
            self.invalidate()

    def replace_options(self, options: SearchOptions) -> None:
        """Swap in new options. Everything derived is rebuilt."""
        with self.lock:
            self.options = options
            self.derived.clear()
            self.results.clear()
            self.invalidate()

    def records(self, kind: RecordKind) -> list[Record]:
        return self.data.records(kind)

    def find_record(self, kind: RecordKind, source_id: str) -> Record | None:
        """Find a stored record by its origin id."""
        for record in self.records(kind):
            if record.source_id == str(source_id):
                return record
        return None
