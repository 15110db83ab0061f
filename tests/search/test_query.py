"""Tests for query mode detection."""

import pytest

from marksearch.core.models import RecordKind
from marksearch.search.query import QueryMode, parse_query


class TestParseQuery:
    """Test prefix-based mode detection."""

    @pytest.mark.parametrize(
        ("raw", "mode", "term"),
        [
            ("pandoc", QueryMode.ALL, "pandoc"),
            ("h rust", QueryMode.HISTORY, "rust"),
            ("b json api", QueryMode.BOOKMARKS, "json api"),
            ("t github", QueryMode.TABS, "github"),
            ("s weather", QueryMode.SEARCH, "weather"),
            ("#json", QueryMode.TAGS, "json"),
            ("~work", QueryMode.FOLDERS, "work"),
        ],
    )
    def test_modes(self, raw: str, mode: QueryMode, term: str) -> None:
        """Each prefix selects its mode and is stripped."""
        parsed = parse_query(raw)
        assert parsed.mode is mode
        assert parsed.term == term

    def test_prefix_requires_space(self) -> None:
        """Letters without a following space are search text."""
        parsed = parse_query("bash")
        assert parsed.mode is QueryMode.ALL
        assert parsed.term == "bash"

    def test_normalization_before_detection(self) -> None:
        """Case, leading and repeated spaces are normalized first."""
        parsed = parse_query("  B   React ")
        assert parsed.mode is QueryMode.BOOKMARKS
        assert parsed.term == "react"
        assert parsed.text == "b react "

    def test_first_prefix_wins(self) -> None:
        """Prefixes are checked in a fixed order."""
        assert parse_query("h #tag").mode is QueryMode.HISTORY
        assert parse_query("#h tag").mode is QueryMode.TAGS

    def test_empty_terms(self) -> None:
        """A bare prefix yields an empty term."""
        assert parse_query("").is_empty
        assert parse_query("b ").is_empty
        assert parse_query("#").is_empty
        assert parse_query("#").mode is QueryMode.TAGS
        assert not parse_query("x").is_empty


class TestQueryMode:
    """Test mode properties."""

    def test_kinds(self) -> None:
        """Modes search their own record kinds."""
        assert QueryMode.HISTORY.kinds == (RecordKind.TAB, RecordKind.HISTORY)
        assert QueryMode.BOOKMARKS.kinds == (RecordKind.BOOKMARK,)
        assert QueryMode.SEARCH.kinds == ()
        assert len(QueryMode.ALL.kinds) == 3

    def test_flags(self) -> None:
        """Taxonomy and fallback flags."""
        assert QueryMode.TAGS.is_taxonomy
        assert QueryMode.FOLDERS.is_taxonomy
        assert not QueryMode.ALL.is_taxonomy
        assert QueryMode.ALL.offers_fallbacks
        assert QueryMode.SEARCH.offers_fallbacks
        assert not QueryMode.BOOKMARKS.offers_fallbacks
