"""Tag and folder search over bookmarks.

Tags and folder names are collected into maps from lowercased name to the
bookmark indices carrying it. The maps are memoized in the search context
and rebuilt whenever the bookmark generation changes.

Queries may name several taxonomy terms (``#json #api``); a bookmark has to
match every term. A name equal to a term scores 1.0, a name only starting
with it 0.8, and the best single match is the bookmark's match quality.
"""

import logging
from dataclasses import dataclass, field

from marksearch.core.models import Field, Record, RecordKind, SearchCandidate

from .context import SearchContext

logger = logging.getLogger(__name__)

EXACT_MATCH_QUALITY = 1.0
PREFIX_MATCH_QUALITY = 0.8

TAG_MARKER = "#"
FOLDER_MARKER = "~"


@dataclass
class TaxonomyIndex:
    """Name -> bookmark indices, plus the name as first written."""

    indices: dict[str, list[int]] = field(default_factory=dict)
    display_names: dict[str, str] = field(default_factory=dict)

    def add(self, name: str, record_index: int) -> None:
        key = name.lower()
        positions = self.indices.setdefault(key, [])
        if record_index not in positions:
            positions.append(record_index)
        self.display_names.setdefault(key, name)

    def counts(self) -> dict[str, int]:
        """Display name -> number of bookmarks, sorted by name."""
        return {
            self.display_names[key]: len(self.indices[key])
            for key in sorted(self.indices)
        }


def build_tag_index(bookmarks: list[Record]) -> TaxonomyIndex:
    index = TaxonomyIndex()
    for bookmark in bookmarks:
        for tag in bookmark.tags:
            index.add(tag, bookmark.index)
    return index


def build_folder_index(bookmarks: list[Record]) -> TaxonomyIndex:
    index = TaxonomyIndex()
    for bookmark in bookmarks:
        for folder in bookmark.folder_path:
            index.add(folder, bookmark.index)
    return index


def split_taxonomy_terms(term: str, marker: str) -> list[str]:
    """Split ``"json #api"`` into ``["json", "api"]``."""
    return [part.strip().lower() for part in term.split(marker) if part.strip()]


class TaxonomySearch:
    """Exact and prefix search for tags and folders."""

    def __init__(self, context: SearchContext):
        self.context = context

    def _index(self, name: str, build) -> TaxonomyIndex:
        context = self.context
        return context.derived.get_or_build(
            ("taxonomy", name),
            context.kind_generation(RecordKind.BOOKMARK),
            lambda: build(context.records(RecordKind.BOOKMARK)),
        )

    @property
    def tags(self) -> TaxonomyIndex:
        return self._index("tags", build_tag_index)

    @property
    def folders(self) -> TaxonomyIndex:
        return self._index("folders", build_folder_index)

    def list_tags(self) -> dict[str, int]:
        return self.tags.counts()

    def list_folders(self) -> dict[str, int]:
        return self.folders.counts()

    def search_tags(self, term: str) -> list[SearchCandidate]:
        return self._search(
            self.tags, split_taxonomy_terms(term, TAG_MARKER), Field.TAG
        )

    def search_folders(self, term: str) -> list[SearchCandidate]:
        return self._search(
            self.folders, split_taxonomy_terms(term, FOLDER_MARKER), Field.FOLDER
        )

    def all_tagged(self) -> list[SearchCandidate]:
        """Every tagged bookmark, ordered by tag name."""
        return self._all(self.tags, Field.TAG)

    def all_in_folders(self) -> list[SearchCandidate]:
        """Every bookmark inside a folder, ordered by folder name."""
        return self._all(self.folders, Field.FOLDER)

    def _all(self, index: TaxonomyIndex, matched: Field) -> list[SearchCandidate]:
        bookmarks = self.context.records(RecordKind.BOOKMARK)
        seen = set()
        candidates = []
        for key in sorted(index.indices):
            for position in index.indices[key]:
                if position in seen:
                    continue
                seen.add(position)
                candidates.append(
                    SearchCandidate(bookmarks[position], 1.0, matched_fields={matched})
                )
        return candidates

    def _search(
        self, index: TaxonomyIndex, terms: list[str], matched: Field
    ) -> list[SearchCandidate]:
        if not terms:
            return []

        # bookmark index -> best quality, per term
        per_term: list[dict[int, float]] = []
        for term in terms:
            qualities: dict[int, float] = {}
            for key, positions in index.indices.items():
                if key == term:
                    quality = EXACT_MATCH_QUALITY
                elif key.startswith(term):
                    quality = PREFIX_MATCH_QUALITY
                else:
                    continue
                for position in positions:
                    qualities[position] = max(qualities.get(position, 0.0), quality)
            per_term.append(qualities)

        matching = set(per_term[0])
        for qualities in per_term[1:]:
            matching &= set(qualities)

        bookmarks = self.context.records(RecordKind.BOOKMARK)
        candidates = [
            SearchCandidate(
                record=bookmarks[position],
                match_quality=max(q[position] for q in per_term),
                matched_fields={matched},
            )
            for position in sorted(matching)
        ]
        logger.debug(f"Taxonomy search for {terms} found {len(candidates)} bookmarks")
        return candidates
