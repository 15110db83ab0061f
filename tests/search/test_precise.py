"""Tests for the precise prefix-index engine."""

import pytest

from marksearch.config import SearchOptions
from marksearch.core.models import Field, Record, RecordKind, SearchData
from marksearch.data.normalizer import assign_indices
from marksearch.search.backends import PreciseEngine
from marksearch.search.context import SearchContext


def bookmark_context(*titles, **option_values):
    records = assign_indices(
        [
            Record(
                kind=RecordKind.BOOKMARK,
                source_id=str(i),
                url=f"https://example.org/{i}",
                title=title,
            )
            for i, title in enumerate(titles)
        ]
    )
    return SearchContext(SearchOptions(**option_values), SearchData(bookmarks=records))


class TestTokenizing:
    """Test whoosh based tokenization."""

    def test_tokenize(self, context) -> None:
        """Text splits on non-word characters and is lowercased."""
        engine = PreciseEngine(context)
        assert engine.tokenize("JSON:API docs_v2") == ["json", "api", "docs", "v2"]

    def test_prefix_tokens(self, context) -> None:
        """Every prefix of every token is produced."""
        engine = PreciseEngine(context)
        assert engine.prefix_tokens("Try it") == {"t", "tr", "try", "i", "it"}

    def test_min_token_length(self) -> None:
        """Prefixes shorter than the minimum match length are not indexed."""
        engine = PreciseEngine(bookmark_context("x", search_min_match_char_length=2))
        assert engine.prefix_tokens("Try") == {"tr", "try"}


class TestMatchRatio:
    """Test the minimum term match ratio."""

    def test_all_terms_required(self) -> None:
        """With ratio 1.0 a record matching one of two words is dropped."""
        engine = PreciseEngine(bookmark_context("foo"))
        assert engine.search("foo bar", [RecordKind.BOOKMARK]) == []

    def test_partial_match_allowed(self) -> None:
        """With ratio 0.5 the record is returned at reduced quality."""
        context = bookmark_context("foo", score_min_search_term_match_ratio=0.5)
        engine = PreciseEngine(context)
        candidates = engine.search("foo bar", [RecordKind.BOOKMARK])
        assert len(candidates) == 1
        assert candidates[0].record.title == "foo"
        assert candidates[0].match_quality == pytest.approx(0.5)
        assert candidates[0].matched_fields == {Field.TITLE}

    def test_full_match_quality(self) -> None:
        """A record matching every word keeps its full quality."""
        engine = PreciseEngine(bookmark_context("foo bar", "foo"))
        candidates = engine.search("foo bar", [RecordKind.BOOKMARK])
        assert [c.record.title for c in candidates] == ["foo bar"]
        assert candidates[0].match_quality == pytest.approx(1.0)


class TestPreciseSearch:
    """Test searching the sample records."""

    def test_title_and_url_match(self, context) -> None:
        """Matches in several fields accumulate with diminishing returns."""
        engine = PreciseEngine(context)
        candidates = engine.search("pandoc", [RecordKind.BOOKMARK])
        assert [c.record.source_id for c in candidates] == ["10"]
        assert candidates[0].matched_fields == {Field.TITLE, Field.URL}
        assert candidates[0].match_quality == pytest.approx(1.0 + 0.6 / 5)

    def test_prefix_match(self, context) -> None:
        """A query word matches tokens it is a prefix of."""
        engine = PreciseEngine(context)
        candidates = engine.search("pan", [RecordKind.BOOKMARK])
        assert [c.record.source_id for c in candidates] == ["10"]

    def test_infix_does_not_match(self, context) -> None:
        """Words are matched from the start only."""
        engine = PreciseEngine(context)
        assert engine.search("andoc", [RecordKind.BOOKMARK]) == []

    def test_tag_and_folder_fields(self, context) -> None:
        """Tags and folders are searchable fields of bookmarks."""
        engine = PreciseEngine(context)
        docs = engine.search("docs", [RecordKind.BOOKMARK])
        assert [c.record.source_id for c in docs] == ["21", "24"]
        assert Field.TAG in docs[1].matched_fields

        work = engine.search("work", [RecordKind.BOOKMARK])
        assert [c.record.source_id for c in work] == ["21", "22", "24"]
        assert all(c.matched_fields == {Field.FOLDER} for c in work)
        assert work[0].match_quality == pytest.approx(0.5)

    def test_multiple_kinds(self, context) -> None:
        """Candidates come from every requested kind."""
        engine = PreciseEngine(context)
        candidates = engine.search(
            "python", [RecordKind.BOOKMARK, RecordKind.TAB, RecordKind.HISTORY]
        )
        kinds = [(c.record.kind, c.record.source_id) for c in candidates]
        assert kinds == [(RecordKind.BOOKMARK, "21"), (RecordKind.TAB, "100")]

    def test_punctuation_term(self, context) -> None:
        """Terms without word characters match as substrings."""
        engine = PreciseEngine(context)
        candidates = engine.search(":", [RecordKind.BOOKMARK])
        assert [c.record.source_id for c in candidates] == ["12"]

    def test_words_below_min_length_ignored(self, context) -> None:
        """Terms shorter than the minimum length produce no candidates."""
        context.replace_options(SearchOptions(search_min_match_char_length=3))
        engine = PreciseEngine(context)
        assert engine.search("py", [RecordKind.BOOKMARK]) == []

    def test_long_word_confirmed_in_matched_field(self) -> None:
        """Words longer than the indexed prefix count only where they occur."""
        word = "internationalizationframework"
        record = Record(
            kind=RecordKind.BOOKMARK,
            source_id="0",
            url=f"https://example.org/{word}",
            title="internationalizationframe",
        )
        context = SearchContext(
            SearchOptions(), SearchData(bookmarks=assign_indices([record]))
        )
        candidates = PreciseEngine(context).search(word, [RecordKind.BOOKMARK])
        assert len(candidates) == 1
        assert candidates[0].matched_fields == {Field.URL}


class TestIndexCaching:
    """Test index reuse across generations."""

    def test_index_reused(self, context) -> None:
        """The same index serves repeated searches."""
        engine = PreciseEngine(context)
        assert engine.index_for(RecordKind.BOOKMARK) is engine.index_for(
            RecordKind.BOOKMARK
        )

    def test_index_rebuilt_after_invalidation(self, context) -> None:
        """Mutations become visible after invalidating their kind."""
        engine = PreciseEngine(context)
        tabs_index = engine.index_for(RecordKind.TAB)
        assert engine.search("wiki", [RecordKind.BOOKMARK])

        record = context.find_record(RecordKind.BOOKMARK, "22")
        record.title = "Knowledge base"
        record.refresh_derived()
        context.invalidate(RecordKind.BOOKMARK)

        assert engine.search("knowledge", [RecordKind.BOOKMARK])
        assert engine.index_for(RecordKind.TAB) is tabs_index
