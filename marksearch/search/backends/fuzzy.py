"""Approximate matching backed by rapidfuzz.

Each query word is compared against every field with a partial ratio, so it
may match anywhere inside a longer text and tolerates typos. The matched
character range is kept for highlighting.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from marksearch.core.exceptions import FuzzyBackendUnavailable
from marksearch.core.models import KIND_FIELDS, Field, Record, RecordKind, Span
from marksearch.core.titles import lower_keep_offsets

from .base import FieldHit, MatchingEngine, TermMatches

logger = logging.getLogger(__name__)

# Highest accepted fuzzyness lowers the cutoff to this partial ratio
MIN_SCORE_CUTOFF = 50.0
MAX_SPANS_PER_FIELD = 5


def score_cutoff(fuzzyness: float) -> float:
    """Map a 0..1 fuzzyness setting to a rapidfuzz score cutoff.

    0 accepts exact substrings only, 1 accepts a partial ratio of 50.
    """
    return 100.0 - (100.0 - MIN_SCORE_CUTOFF) * fuzzyness


@dataclass
class FuzzyIndex:
    """Lowercased field texts per field for one record kind.

    Texts keep the length of the record field so match spans can be applied
    to the original text.
    """

    records: list[Record]
    choices: dict[Field, dict[int, str]] = field(default_factory=dict)


class FuzzyEngine(MatchingEngine):
    """Typo tolerant approximate matching."""

    name = "fuzzy"

    def __init__(self, context):
        super().__init__(context)
        try:
            from rapidfuzz import fuzz, process
        except ImportError as e:
            raise FuzzyBackendUnavailable(
                "Fuzzy search requires the 'rapidfuzz' package"
            ) from e
        self._fuzz = fuzz
        self._process = process
        self.cutoff = score_cutoff(context.options.search_fuzzyness)

    def build(self, records: list[Record], kind: RecordKind) -> FuzzyIndex:
        index = FuzzyIndex(records=records)
        for index_field in KIND_FIELDS[kind]:
            texts = {}
            for record in records:
                text = record.field_text(index_field)
                if text:
                    texts[record.index] = lower_keep_offsets(text)
            if texts:
                index.choices[index_field] = texts
        return index

    def match_term(self, index: FuzzyIndex, term: str) -> TermMatches:
        matches: TermMatches = defaultdict(dict)
        for index_field, texts in index.choices.items():
            hits = self._process.extract(
                term,
                texts,
                scorer=self._fuzz.partial_ratio,
                score_cutoff=self.cutoff,
                limit=None,
            )
            for text, score, record_index in hits:
                matches[record_index][index_field] = FieldHit(
                    quality=score / 100, spans=self._spans(term, text)
                )
        return dict(matches)

    def _spans(self, term: str, text: str) -> list[Span]:
        """Character ranges in text that matched term."""
        spans = []
        start = text.find(term)
        while start != -1 and len(spans) < MAX_SPANS_PER_FIELD:
            spans.append(Span(start, start + len(term)))
            start = text.find(term, start + len(term))
        if spans:
            return spans

        alignment: Any = self._fuzz.partial_ratio_alignment(term, text)
        if alignment is None or alignment.dest_end <= alignment.dest_start:
            return []
        return [Span(alignment.dest_start, alignment.dest_end)]
