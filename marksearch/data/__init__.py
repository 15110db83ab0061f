"""Acquisition and normalization of bookmark, tab and history data."""

from marksearch.data.loader import fetch_raw_data, load_search_data
from marksearch.data.normalizer import (
    HISTORY_MERGE_PRECEDENCE,
    RawData,
    convert_bookmarks,
    convert_history,
    convert_tabs,
    merge_history,
    normalize,
)
from marksearch.data.providers import (
    JsonFileProvider,
    PlatformDataProvider,
    StaticDataProvider,
)

__all__ = [
    "HISTORY_MERGE_PRECEDENCE",
    "JsonFileProvider",
    "PlatformDataProvider",
    "RawData",
    "StaticDataProvider",
    "convert_bookmarks",
    "convert_history",
    "convert_tabs",
    "fetch_raw_data",
    "load_search_data",
    "merge_history",
    "normalize",
]
