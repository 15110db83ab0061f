"""Platform data providers.

A provider delivers the raw bookmark tree, tab list and history list, and
persists bookmark edits. All calls are coroutines since real platforms
answer asynchronously.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import msgspec

from marksearch.core.exceptions import DataProviderError, RecordNotFoundError

logger = logging.getLogger(__name__)

MS_PER_DAY = 24 * 60 * 60 * 1000


class PlatformDataProvider(ABC):
    """Abstract interface to the host platform's data APIs."""

    @abstractmethod
    async def get_bookmark_tree(self) -> list[dict[str, Any]]:
        """Get the full bookmark tree as a list of root nodes."""
        pass

    @abstractmethod
    async def get_tabs(self) -> list[dict[str, Any]]:
        """Get all open tabs."""
        pass

    @abstractmethod
    async def get_history(
        self, max_age_days: float, max_items: int
    ) -> list[dict[str, Any]]:
        """Get history items visited within the last ``max_age_days`` days.

        Args:
            max_age_days: Retention window in days
            max_items: Maximum number of items, most recent first
        """
        pass

    @abstractmethod
    async def update_bookmark(
        self, bookmark_id: str, title: str | None = None, url: str | None = None
    ) -> None:
        """Persist a title and/or url change of one bookmark.

        Raises:
            RecordNotFoundError: If no bookmark has this id
        """
        pass

    @abstractmethod
    async def remove_bookmark(self, bookmark_id: str) -> None:
        """Remove one bookmark.

        Raises:
            RecordNotFoundError: If no bookmark has this id
        """
        pass


def filter_history(
    history: list[dict[str, Any]],
    max_age_days: float,
    max_items: int,
    now_ms: float | None = None,
) -> list[dict[str, Any]]:
    """Apply the retention window and item limit to raw history items."""
    now_ms = time.time() * 1000 if now_ms is None else now_ms
    cutoff = now_ms - max_age_days * MS_PER_DAY
    recent = [
        item for item in history if (item.get("lastVisitTime") or now_ms) >= cutoff
    ]
    recent.sort(key=lambda item: item.get("lastVisitTime") or 0, reverse=True)
    return recent[:max_items]


def find_bookmark_node(
    nodes: list[dict[str, Any]], bookmark_id: str
) -> tuple[list[dict[str, Any]], dict[str, Any]] | None:
    """Find a bookmark node and the list that holds it."""
    for node in nodes:
        if str(node.get("id")) == bookmark_id and "url" in node:
            return nodes, node
        if children := node.get("children"):
            found = find_bookmark_node(children, bookmark_id)
            if found:
                return found
    return None


class StaticDataProvider(PlatformDataProvider):
    """Provider backed by in-memory payloads.

    Used for tests, for snapshots and as the fallback dataset when the real
    platform is unavailable.
    """

    def __init__(
        self,
        bookmark_tree: list[dict[str, Any]] | None = None,
        tabs: list[dict[str, Any]] | None = None,
        history: list[dict[str, Any]] | None = None,
    ):
        self.bookmark_tree = bookmark_tree or []
        self.tabs = tabs or []
        self.history = history or []

    async def get_bookmark_tree(self) -> list[dict[str, Any]]:
        return self.bookmark_tree

    async def get_tabs(self) -> list[dict[str, Any]]:
        return self.tabs

    async def get_history(
        self, max_age_days: float, max_items: int
    ) -> list[dict[str, Any]]:
        return filter_history(self.history, max_age_days, max_items)

    async def update_bookmark(
        self, bookmark_id: str, title: str | None = None, url: str | None = None
    ) -> None:
        found = find_bookmark_node(self.bookmark_tree, bookmark_id)
        if not found:
            raise RecordNotFoundError(bookmark_id)
        _, node = found
        if title is not None:
            node["title"] = title
        if url is not None:
            node["url"] = url

    async def remove_bookmark(self, bookmark_id: str) -> None:
        found = find_bookmark_node(self.bookmark_tree, bookmark_id)
        if not found:
            raise RecordNotFoundError(bookmark_id)
        siblings, node = found
        siblings.remove(node)


class Snapshot(msgspec.Struct, kw_only=True):
    """On-disk JSON snapshot of platform data."""

    bookmarks: list[dict[str, Any]] = msgspec.field(default_factory=list)
    tabs: list[dict[str, Any]] = msgspec.field(default_factory=list)
    history: list[dict[str, Any]] = msgspec.field(default_factory=list)


class JsonFileProvider(StaticDataProvider):
    """Provider reading a JSON snapshot and writing edits back to it."""

    def __init__(self, path: Path):
        super().__init__()
        self.path = Path(path)
        self._loaded = False

    def _read(self) -> None:
        try:
            snapshot = msgspec.json.decode(self.path.read_bytes(), type=Snapshot)
        except FileNotFoundError as e:
            raise DataProviderError(f"Data file not found: {self.path}") from e
        except (OSError, msgspec.DecodeError) as e:
            raise DataProviderError(f"Cannot read data file {self.path}: {e}") from e

        self.bookmark_tree = snapshot.bookmarks
        self.tabs = snapshot.tabs
        self.history = snapshot.history
        self._loaded = True
        logger.debug(f"Loaded data snapshot from {self.path}")

    def _write(self) -> None:
        snapshot = Snapshot(
            bookmarks=self.bookmark_tree, tabs=self.tabs, history=self.history
        )
        temp_path = self.path.with_suffix(".tmp")
        try:
            temp_path.write_bytes(msgspec.json.format(msgspec.json.encode(snapshot)))
            temp_path.replace(self.path)
        except OSError as e:
            raise DataProviderError(f"Cannot write data file {self.path}: {e}") from e

    async def _ensure_loaded(self) -> None:
        if not self._loaded:
            await asyncio.to_thread(self._read)

    async def get_bookmark_tree(self) -> list[dict[str, Any]]:
        await self._ensure_loaded()
        return self.bookmark_tree

    async def get_tabs(self) -> list[dict[str, Any]]:
        await self._ensure_loaded()
        return self.tabs

    async def get_history(
        self, max_age_days: float, max_items: int
    ) -> list[dict[str, Any]]:
        await self._ensure_loaded()
        return filter_history(self.history, max_age_days, max_items)

    async def update_bookmark(
        self, bookmark_id: str, title: str | None = None, url: str | None = None
    ) -> None:
        await self._ensure_loaded()
        await super().update_bookmark(bookmark_id, title=title, url=url)
        await asyncio.to_thread(self._write)

    async def remove_bookmark(self, bookmark_id: str) -> None:
        await self._ensure_loaded()
        await super().remove_bookmark(bookmark_id)
        await asyncio.to_thread(self._write)

    def reload(self) -> None:
        """Forget cached data so the next call reads the file again."""
        self._loaded = False
