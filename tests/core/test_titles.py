"""Tests for bookmark title parsing and search term helpers."""

from marksearch.core.titles import (
    format_bookmark_title,
    lower_keep_offsets,
    normalize_search_term,
    parse_bookmark_title,
    parse_taxonomy_terms,
    split_search_terms,
)


class TestParseBookmarkTitle:
    """Test splitting raw titles into title, tags and bonus."""

    def test_title_with_tags_and_bonus(self) -> None:
        """Tags follow the first # and +N is a custom bonus."""
        parsed = parse_bookmark_title("Example +5 #alpha #beta")
        assert parsed.title == "Example"
        assert parsed.tags == ["alpha", "beta"]
        assert parsed.custom_bonus == 5

    def test_plain_title(self) -> None:
        """Titles without markers are kept as is."""
        parsed = parse_bookmark_title("Team Wiki")
        assert parsed == ("Team Wiki", [], None)

    def test_duplicate_and_empty_tags(self) -> None:
        """Repeated and blank tags are dropped."""
        parsed = parse_bookmark_title("Docs #python # #python #docs")
        assert parsed.tags == ["python", "docs"]

    def test_plus_inside_word_is_not_a_bonus(self) -> None:
        """Only a standalone +N token counts."""
        parsed = parse_bookmark_title("C++ notes a+1 #cpp")
        assert parsed.title == "C++ notes a+1"
        assert parsed.custom_bonus is None

    def test_bonus_after_tags_is_a_tag(self) -> None:
        """A +N after the first # belongs to the tag text."""
        parsed = parse_bookmark_title("Title #tag +3")
        assert parsed.custom_bonus is None
        assert parsed.tags == ["tag +3"]

    def test_empty_title(self) -> None:
        """Empty or missing titles parse to empty values."""
        assert parse_bookmark_title("") == ("", [], None)
        assert parse_bookmark_title(None) == ("", [], None)

    def test_whitespace_collapsed(self) -> None:
        """Whitespace left behind by the bonus is collapsed."""
        parsed = parse_bookmark_title("  Two   words +2  ")
        assert parsed.title == "Two words"
        assert parsed.custom_bonus == 2


class TestFormatBookmarkTitle:
    """Test serializing titles back into raw form."""

    def test_format_full(self) -> None:
        """Bonus is placed before the tags."""
        assert format_bookmark_title("Example", ["alpha", "beta"], 5) == (
            "Example +5 #alpha #beta"
        )

    def test_format_strips_tag_markers(self) -> None:
        """Tags typed with a leading # are not doubled."""
        assert format_bookmark_title("Docs", ["#python", " ", "web "]) == (
            "Docs #python #web"
        )

    def test_round_trip(self) -> None:
        """Formatting a parsed title reproduces the original."""
        raw = "JSON:API +5 #jsonapi #spec"
        assert format_bookmark_title(*parse_bookmark_title(raw)) == raw


class TestSearchTerms:
    """Test search term normalization and splitting."""

    def test_normalize_search_term(self) -> None:
        """Terms are lowercased, left-trimmed and space-collapsed."""
        assert normalize_search_term("  Foo   BAR ") == "foo bar "

    def test_split_search_terms(self) -> None:
        """Terms split on any whitespace."""
        assert split_search_terms("foo  bar\tbaz") == ["foo", "bar", "baz"]
        assert split_search_terms("") == []

    def test_lower_keep_offsets(self) -> None:
        """Lowercasing keeps the text length."""
        assert lower_keep_offsets("JSON Docs") == "json docs"
        assert lower_keep_offsets("İİ Guide") == "İİ guide"

    def test_parse_taxonomy_terms(self) -> None:
        """The first word after each marker is taken."""
        assert parse_taxonomy_terms("react #JS #web dev", "#") == ["js", "web"]
        assert parse_taxonomy_terms("~Work ~", "~") == ["work"]
        assert parse_taxonomy_terms("no markers", "#") == []
