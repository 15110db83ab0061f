"""Base matching engine interface."""

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from marksearch.core.models import Field, Record, RecordKind, SearchCandidate, Span
from marksearch.core.titles import split_search_terms

from ..context import SearchContext
from ..ranking import FieldWeights, accumulate_quality

logger = logging.getLogger(__name__)


@dataclass
class FieldHit:
    """One query term matching one field of one record."""

    quality: float = 1.0
    spans: list[Span] = field(default_factory=list)


# record index -> field -> hit
TermMatches = dict[int, dict[Field, FieldHit]]


@dataclass
class _Tally:
    terms: int = 0
    field_scores: dict[Field, float] = field(default_factory=dict)
    spans: dict[Field, list[Span]] = field(default_factory=lambda: defaultdict(list))


class MatchingEngine(ABC):
    """Abstract interface for term matching strategies.

    Subclasses build one index per record kind and match single terms
    against it. Term splitting, the minimum match ratio and the combination
    of field matches into one match quality are shared.
    """

    name: str = "engine"

    def __init__(self, context: SearchContext):
        self.context = context

    @abstractmethod
    def build(self, records: list[Record], kind: RecordKind) -> Any:
        """Build the index for one kind's records.

        Args:
            records: The kind's densely indexed records
            kind: Record kind, determines the indexed fields

        Returns:
            Engine specific index object
        """
        pass

    @abstractmethod
    def match_term(self, index: Any, term: str) -> TermMatches:
        """Match one query term against an index.

        Returns:
            Field hits per record index
        """
        pass

    def index_for(self, kind: RecordKind) -> Any:
        """Get the index for a kind, rebuilding it if the records changed."""
        context = self.context
        return context.derived.get_or_build(
            (self.name, kind),
            context.kind_generation(kind),
            lambda: self._build_logged(kind),
        )

    def _build_logged(self, kind: RecordKind) -> Any:
        records = self.context.records(kind)
        logger.debug(
            f"Building {self.name} index for {len(records)} {kind.value} records"
        )
        return self.build(records, kind)

    def query_terms(self, term: str) -> list[str]:
        """Split a term, dropping words shorter than the minimum match length."""
        min_length = self.context.options.search_min_match_char_length
        return [t for t in split_search_terms(term.lower()) if len(t) >= min_length]

    def search(
        self, term: str, kinds: tuple[RecordKind, ...] | list[RecordKind]
    ) -> list[SearchCandidate]:
        """Search the given kinds for a term.

        Returns no candidates when no query word is long enough.
        """
        terms = self.query_terms(term)
        if not terms:
            return []

        options = self.context.options
        weights = FieldWeights.from_options(options)
        min_ratio = options.score_min_search_term_match_ratio
        candidates = []

        for kind in kinds:
            records = self.context.records(kind)
            if not records:
                continue
            index = self.index_for(kind)

            tallies: dict[int, _Tally] = defaultdict(_Tally)
            for query_term in terms:
                for record_index, hits in self.match_term(index, query_term).items():
                    tally = tallies[record_index]
                    tally.terms += 1
                    for hit_field, hit in hits.items():
                        field_score = weights.get_weight(hit_field) * hit.quality
                        if field_score > tally.field_scores.get(hit_field, 0.0):
                            tally.field_scores[hit_field] = field_score
                        tally.spans[hit_field].extend(hit.spans)

            for record_index in sorted(tallies):
                tally = tallies[record_index]
                ratio = tally.terms / len(terms)
                if ratio < min_ratio:
                    continue
                quality = accumulate_quality(list(tally.field_scores.values())) * ratio
                candidates.append(
                    SearchCandidate(
                        record=records[record_index],
                        match_quality=quality,
                        matched_fields=set(tally.field_scores),
                        highlights={f: s for f, s in tally.spans.items() if s},
                    )
                )

        logger.debug(
            f"{self.name} search for '{term}' found {len(candidates)} candidates"
        )
        return candidates
