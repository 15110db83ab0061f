"""Tests for URL normalization helpers."""

import pytest

from marksearch.core.urls import (
    build_search_url,
    clean_up_url,
    looks_like_url,
    strip_trailing_slash,
    to_navigable_url,
)


class TestUrlForms:
    """Test the normalized and display URL forms."""

    def test_strip_trailing_slash(self) -> None:
        """Only a single trailing slash is removed."""
        assert strip_trailing_slash("https://a.org/try/") == "https://a.org/try"
        assert strip_trailing_slash("https://a.org") == "https://a.org"
        assert strip_trailing_slash("https://a.org//") == "https://a.org/"

    def test_clean_up_url(self) -> None:
        """Scheme, www and trailing slash are dropped and case is folded."""
        assert clean_up_url("https://www.JSON.org/") == "json.org"
        assert clean_up_url("http://pandoc.org/try/") == "pandoc.org/try"
        assert clean_up_url("https://docs.python.org/3/") == "docs.python.org/3"

    def test_clean_up_url_keeps_other_schemes(self) -> None:
        """Non-http schemes are kept in the display form."""
        assert clean_up_url("ftp://files.example.com/") == "ftp://files.example.com"


class TestUrlDetection:
    """Test recognition of navigable terms."""

    @pytest.mark.parametrize(
        "term",
        [
            "example.com",
            "docs.python.org/3/library",
            "https://pandoc.org/try",
            "localhost:8080",
            "sub.domain.co.uk:443/path?q=1",
        ],
    )
    def test_url_like_terms(self, term: str) -> None:
        """Hostnames and absolute URLs look like URLs."""
        assert looks_like_url(term)

    @pytest.mark.parametrize("term", ["", "pandoc", "foo bar.com", "json api"])
    def test_non_url_terms(self, term: str) -> None:
        """Plain words and phrases do not look like URLs."""
        assert not looks_like_url(term)

    def test_to_navigable_url(self) -> None:
        """A scheme is added only when missing."""
        assert to_navigable_url("example.com") == "https://example.com"
        assert to_navigable_url("http://example.com") == "http://example.com"


class TestSearchUrls:
    """Test search-engine URL construction."""

    def test_placeholder_replaced(self) -> None:
        """The $s placeholder receives the encoded term."""
        url = build_search_url("https://www.google.com/search?q=$s&hl=en", "a b")
        assert url == "https://www.google.com/search?q=a%20b&hl=en"

    def test_term_appended_without_placeholder(self) -> None:
        """Prefixes without a placeholder get the term appended."""
        url = build_search_url("https://duckduckgo.com/?q=", "c++ & rust")
        assert url == "https://duckduckgo.com/?q=c%2B%2B%20%26%20rust"
