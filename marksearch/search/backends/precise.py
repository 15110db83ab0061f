"""Precise matching with forward-prefix token indexes.

Every field is tokenized with a whoosh analyzer chain and each token is
indexed under all of its prefixes, so a query word matches any token it is
a prefix of. Lookups are plain dictionary hits.
"""

from collections import defaultdict
from dataclasses import dataclass, field

from whoosh.analysis import LowercaseFilter, NgramFilter, RegexTokenizer

from marksearch.core.models import KIND_FIELDS, Field, Record, RecordKind

from .base import FieldHit, MatchingEngine, TermMatches

# Tokens are indexed under prefixes up to this length. Longer query words
# are confirmed against the text of the field they matched in.
MAX_PREFIX_LENGTH = 24

TOKEN_PATTERN = r"[^\W_]+"


@dataclass
class PrefixIndex:
    """Per-field posting lists for one record kind."""

    records: list[Record]
    postings: dict[Field, dict[str, set[int]]] = field(
        default_factory=lambda: defaultdict(lambda: defaultdict(set))
    )

    def lookup(self, index_field: Field, prefix: str) -> set[int]:
        field_postings = self.postings.get(index_field)
        if not field_postings:
            return set()
        return field_postings.get(prefix[:MAX_PREFIX_LENGTH], set())

    @property
    def fields(self) -> list[Field]:
        return list(self.postings)


class PreciseEngine(MatchingEngine):
    """Token index based exact/prefix matching."""

    name = "precise"

    def __init__(self, context):
        super().__init__(context)
        self.min_token_length = context.options.search_min_match_char_length
        self._tokenizer = RegexTokenizer(TOKEN_PATTERN) | LowercaseFilter()
        self._prefix_analyzer = self._tokenizer | NgramFilter(
            minsize=self.min_token_length,
            maxsize=max(self.min_token_length, MAX_PREFIX_LENGTH),
            at="start",
        )

    def tokenize(self, text: str) -> list[str]:
        """Split text into lowercase word tokens."""
        # whoosh reuses one Token object, copy the text out right away
        return [token.text for token in self._tokenizer(text)]

    def prefix_tokens(self, text: str) -> set[str]:
        """All indexed prefixes of all tokens in text."""
        return {token.text for token in self._prefix_analyzer(text, mode="index")}

    def build(self, records: list[Record], kind: RecordKind) -> PrefixIndex:
        index = PrefixIndex(records=records)
        for record in records:
            for index_field in KIND_FIELDS[kind]:
                text = record.field_text(index_field)
                if not text:
                    continue
                for prefix in self.prefix_tokens(text):
                    index.postings[index_field][prefix].add(record.index)
        return index

    def match_term(self, index: PrefixIndex, term: str) -> TermMatches:
        words = [w for w in self.tokenize(term) if len(w) >= self.min_token_length]
        matches: TermMatches = defaultdict(dict)

        if not words:
            # Nothing tokenizable (e.g. only punctuation): substring match
            for record in index.records:
                for index_field in index.fields:
                    if term in record.field_text(index_field).lower():
                        matches[record.index][index_field] = FieldHit()
            return dict(matches)

        for index_field in index.fields:
            found: set[int] | None = None
            for word in words:
                hits = index.lookup(index_field, word)
                found = set(hits) if found is None else found & hits
                if not found:
                    break
            if not found:
                continue

            long_words = [w for w in words if len(w) > MAX_PREFIX_LENGTH]
            for record_index in found:
                record = index.records[record_index]
                if long_words:
                    text = record.field_text(index_field).lower()
                    if not all(w in text for w in long_words):
                        continue
                matches[record_index][index_field] = FieldHit()

        return dict(matches)
