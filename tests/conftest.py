"""Pytest configuration and shared fixtures."""

import os

import pytest

from marksearch.config import SearchOptions
from marksearch.data.normalizer import RawData, normalize
from marksearch.search.context import SearchContext
from marksearch.search.engine import SearchOrchestrator

# Fixed reference time for all timestamps in the sample payloads
NOW_MS = 1_700_000_000_000
DAY_MS = 24 * 60 * 60 * 1000


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Isolate environment variables and config locations for each test."""
    original_env = os.environ.copy()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for name in list(os.environ):
        if name.startswith("MARKSEARCH_"):
            monkeypatch.delenv(name)

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def now_ms():
    return NOW_MS


@pytest.fixture
def options():
    """Default options."""
    return SearchOptions()


@pytest.fixture
def bookmark_tree():
    """A browser bookmark tree with system folders, nesting and noise."""
    return [
        {
            "id": "0",
            "title": "",
            "children": [
                {
                    "id": "1",
                    "title": "Bookmarks Bar",
                    "children": [
                        {
                            "id": "10",
                            "title": "Try pandoc! #md",
                            "url": "https://pandoc.org/try/",
                            "dateAdded": NOW_MS - 10 * DAY_MS,
                        },
                        {
                            "id": "11",
                            "title": "JSON Spec #json #spec",
                            "url": "https://www.json.org/json-en.html",
                        },
                        {
                            "id": "12",
                            "title": "JSON:API +5 #jsonapi",
                            "url": "https://jsonapi.org/",
                        },
                        {
                            "id": "20",
                            "title": "Work",
                            "children": [
                                {
                                    "id": "21",
                                    "title": "Python docs #python #docs",
                                    "url": "https://docs.python.org/3/",
                                },
                                {
                                    "id": "22",
                                    "title": "Team Wiki",
                                    "url": "https://wiki.example.com/team",
                                },
                                {
                                    "id": "23",
                                    "title": "Reference",
                                    "children": [
                                        {
                                            "id": "24",
                                            "title": "MDN Web Docs #docs",
                                            "url": "https://developer.mozilla.org/",
                                        }
                                    ],
                                },
                            ],
                        },
                    ],
                },
                {
                    "id": "2",
                    "title": "Other Bookmarks",
                    "children": [
                        {
                            "id": "30",
                            "title": "Example +5 #alpha #beta",
                            "url": "https://example.com/",
                        },
                        {"id": "31", "title": "Entry without url"},
                        {"id": "32", "title": "Broken", "url": ""},
                    ],
                },
            ],
        }
    ]


@pytest.fixture
def tabs_payload():
    """Open tabs; one of them is the active tab."""
    return [
        {
            "id": 100,
            "title": "Python docs",
            "url": "https://docs.python.org/3/",
            "active": False,
            "lastAccessed": NOW_MS - 60_000,
        },
        {
            "id": 101,
            "title": "GitHub",
            "url": "https://github.com/",
            "active": True,
            "lastAccessed": NOW_MS - 1_000,
        },
        {
            "id": 102,
            "title": "Hacker News",
            "url": "https://news.ycombinator.com/",
            "active": False,
            "lastAccessed": NOW_MS - 3_600_000,
        },
    ]


@pytest.fixture
def history_payload():
    """History items overlapping with bookmarks and tabs."""
    return [
        {
            "id": "h1",
            "title": "Try pandoc!",
            "url": "https://pandoc.org/try",
            "visitCount": 12,
            "lastVisitTime": NOW_MS - DAY_MS,
        },
        {
            "id": "h2",
            "title": "The Rust Programming Language",
            "url": "https://doc.rust-lang.org/book/",
            "visitCount": 3,
            "lastVisitTime": NOW_MS - 2 * DAY_MS,
        },
        {
            "id": "h3",
            "title": "Extension popup",
            "url": "chrome-extension://abcdef/popup.html",
            "visitCount": 1,
            "lastVisitTime": NOW_MS - 1_000,
        },
        {
            "id": "h4",
            "title": "GitHub",
            "url": "https://github.com/",
            "visitCount": 40,
            "lastVisitTime": NOW_MS - 5_000,
        },
    ]


@pytest.fixture
def raw_data(bookmark_tree, tabs_payload, history_payload):
    return RawData(
        bookmark_tree=bookmark_tree, tabs=tabs_payload, history=history_payload
    )


@pytest.fixture
def search_data(raw_data, options):
    """Normalized sample records."""
    return normalize(raw_data, options, now_ms=NOW_MS)


@pytest.fixture
def context(search_data, options):
    """Search context over the sample records."""
    return SearchContext(options, search_data)


@pytest.fixture
def orchestrator(context):
    """Orchestrator without a platform provider."""
    return SearchOrchestrator(context)
