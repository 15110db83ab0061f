"""Conversion of raw platform payloads into normalized records.

Raw payloads follow the browser extension APIs:

* bookmark tree: nested nodes with ``id``, ``title``, ``url`` (leaves only),
  ``children`` (folders only) and ``dateAdded`` in epoch milliseconds
* tabs: ``id``, ``title``, ``url``, ``active`` and ``lastAccessed`` (ms)
* history: ``id``, ``title``, ``url``, ``visitCount`` and ``lastVisitTime`` (ms)

History entries that share a URL with a bookmark or tab are merged into that
record and removed from the history array. The merge follows a fixed
precedence table, see ``HISTORY_MERGE_PRECEDENCE``.
"""

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any

from marksearch.config import SearchOptions
from marksearch.core.models import Record, RecordKind, SearchData
from marksearch.core.titles import parse_bookmark_title
from marksearch.core.urls import clean_up_url

logger = logging.getLogger(__name__)

# Folder depth at which the trail starts. The root node (depth 1) and the
# top level system folders such as "Bookmarks Bar" (depth 2) are skipped.
FOLDER_TRAIL_MIN_DEPTH = 3

# Record field -> which side wins when a history entry is merged into a
# bookmark or tab. "own" means the history value is only used when the
# record has no value of its own. Fields not listed are never merged.
HISTORY_MERGE_PRECEDENCE = {
    "visit_count": "own",
    "last_visit_seconds_ago": "own",
}


@dataclass
class RawData:
    """Raw payloads as delivered by a platform data provider."""

    bookmark_tree: list[dict[str, Any]] = field(default_factory=list)
    tabs: list[dict[str, Any]] = field(default_factory=list)
    history: list[dict[str, Any]] = field(default_factory=list)


def _now_ms() -> float:
    return time.time() * 1000


def _usable_url(url: Any) -> str | None:
    if not isinstance(url, str):
        return None
    url = url.strip()
    if not url or not clean_up_url(url):
        return None
    return url


def _seconds_ago(timestamp_ms: Any, now_ms: float) -> float | None:
    if not isinstance(timestamp_ms, int | float):
        return None
    return max(0.0, (now_ms - timestamp_ms) / 1000)


def convert_bookmarks(
    tree: list[dict[str, Any]], options: SearchOptions
) -> list[Record]:
    """Flatten a bookmark tree into bookmark records."""
    ignored_folders = set(options.bookmarks_ignore_folder_list)
    records: list[Record] = []

    def walk(nodes: list[dict[str, Any]], trail: list[str], depth: int) -> None:
        for node in nodes:
            if "children" in node and not node.get("url"):
                title = node.get("title") or ""
                if title and title in ignored_folders:
                    logger.debug(f"Skipping ignored bookmark folder '{title}'")
                    continue
                folder_trail = trail
                if title and depth >= FOLDER_TRAIL_MIN_DEPTH:
                    folder_trail = [*trail, title]
                walk(node.get("children") or [], folder_trail, depth + 1)
                continue

            url = _usable_url(node.get("url"))
            if url is None:
                continue

            parsed = parse_bookmark_title(node.get("title") or "")
            records.append(
                Record(
                    kind=RecordKind.BOOKMARK,
                    source_id=str(node.get("id", "")),
                    url=url,
                    title=parsed.title,
                    tags=parsed.tags,
                    folder_path=list(trail),
                    custom_bonus=parsed.custom_bonus,
                    date_added=node.get("dateAdded"),
                )
            )

    walk(tree, [], 1)

    if options.detect_duplicate_bookmarks:
        flag_duplicates(records)

    return assign_indices(records)


def flag_duplicates(records: list[Record]) -> int:
    """Flag records whose normalized URL was already seen.

    Emits one warning per duplicate. Returns the number of duplicates.
    """
    seen: dict[str, Record] = {}
    duplicates = 0
    for record in records:
        first = seen.get(record.normalized_url)
        if first is None:
            seen[record.normalized_url] = record
            continue
        first.dupe = True
        record.dupe = True
        duplicates += 1
        logger.warning(
            f"Duplicate bookmark detected: {record.url} "
            f"(folder: /{'/'.join(record.folder_path)})"
        )
    return duplicates


def convert_tabs(
    tabs: list[dict[str, Any]], options: SearchOptions, now_ms: float | None = None
) -> list[Record]:
    """Convert open tabs into tab records."""
    now_ms = _now_ms() if now_ms is None else now_ms
    records = []
    for tab in tabs:
        url = _usable_url(tab.get("url"))
        if url is None:
            continue
        records.append(
            Record(
                kind=RecordKind.TAB,
                source_id=str(tab.get("id", "")),
                url=url,
                title=(tab.get("title") or "").strip(),
                active=bool(tab.get("active", False)),
                last_visit_seconds_ago=_seconds_ago(tab.get("lastAccessed"), now_ms),
            )
        )
    return assign_indices(records)


def _ignore_pattern(ignore_list: list[str]) -> re.Pattern[str] | None:
    substrings = [s for s in ignore_list if s]
    if not substrings:
        return None
    return re.compile("|".join(re.escape(s) for s in substrings))


def convert_history(
    history: list[dict[str, Any]],
    options: SearchOptions,
    now_ms: float | None = None,
) -> list[Record]:
    """Convert history items, dropping those matching the ignore list."""
    now_ms = _now_ms() if now_ms is None else now_ms
    ignore = _ignore_pattern(options.history_ignore_list)
    records = []
    ignored = 0
    for item in history:
        url = _usable_url(item.get("url"))
        if url is None:
            continue
        if ignore and ignore.search(url):
            ignored += 1
            continue
        records.append(
            Record(
                kind=RecordKind.HISTORY,
                source_id=str(item.get("id", "")),
                url=url,
                title=(item.get("title") or "").strip(),
                visit_count=item.get("visitCount"),
                last_visit_seconds_ago=_seconds_ago(item.get("lastVisitTime"), now_ms),
            )
        )
    if ignored:
        logger.debug(f"Ignored {ignored} history items matching the ignore list")
    return assign_indices(records)


def merge_history(record: Record, entry: Record) -> Record:
    """Merge a history entry's usage signals into a bookmark or tab.

    Follows ``HISTORY_MERGE_PRECEDENCE``: the record's own value wins
    whenever it is set.
    """
    for name, winner in HISTORY_MERGE_PRECEDENCE.items():
        own = getattr(record, name)
        merged = getattr(entry, name)
        if winner == "own":
            value = own if own is not None else merged
        else:
            value = merged if merged is not None else own
        setattr(record, name, value)
    return record


def merge_history_into(
    bookmarks: list[Record], tabs: list[Record], history: list[Record]
) -> list[Record]:
    """Merge history into matching bookmarks/tabs and return the leftovers."""
    by_url: dict[str, Record] = {}
    for entry in history:
        by_url.setdefault(entry.normalized_url, entry)

    merged_urls = set()
    for record in [*bookmarks, *tabs]:
        entry = by_url.get(record.normalized_url)
        if entry is not None:
            merge_history(record, entry)
            merged_urls.add(record.normalized_url)

    remaining = [e for e in history if e.normalized_url not in merged_urls]
    return assign_indices(remaining)


def flag_open_tabs(bookmarks: list[Record], tabs: list[Record]) -> None:
    """Mark bookmarks that are currently open in a tab."""
    open_urls = {tab.normalized_url for tab in tabs}
    for bookmark in bookmarks:
        bookmark.open_tab = bookmark.normalized_url in open_urls


def assign_indices(records: list[Record]) -> list[Record]:
    """Give records dense, contiguous positions."""
    for position, record in enumerate(records):
        record.index = position
    return records


def normalize(
    raw: RawData, options: SearchOptions, now_ms: float | None = None
) -> SearchData:
    """Normalize all raw payloads into one ``SearchData`` set."""
    now_ms = _now_ms() if now_ms is None else now_ms

    bookmarks = (
        convert_bookmarks(raw.bookmark_tree, options)
        if options.enable_bookmarks
        else []
    )
    tabs = convert_tabs(raw.tabs, options, now_ms) if options.enable_tabs else []
    history = (
        convert_history(raw.history, options, now_ms) if options.enable_history else []
    )

    history = merge_history_into(bookmarks, tabs, history)
    flag_open_tabs(bookmarks, tabs)

    logger.debug(
        f"Normalized {len(bookmarks)} bookmarks, {len(tabs)} tabs "
        f"and {len(history)} history entries"
    )
    return SearchData(bookmarks=bookmarks, tabs=tabs, history=history)
