"""Highlighting of matched text in search results."""

import html
from dataclasses import dataclass

from marksearch.core.models import Field, RankedResult, Span
from marksearch.core.titles import lower_keep_offsets, split_search_terms


@dataclass
class Highlight:
    """A highlighted fragment of a field."""

    text: str
    start_offset: int
    end_offset: int


def merge_spans(spans: list[Span]) -> list[Span]:
    """Merge overlapping or touching spans."""
    if not spans:
        return []

    ordered = sorted(spans, key=lambda s: (s.start, s.end))
    merged = [ordered[0]]
    for span in ordered[1:]:
        current = merged[-1]
        if span.start <= current.end:
            merged[-1] = Span(current.start, max(current.end, span.end))
        else:
            merged.append(span)
    return merged


class Highlighter:
    """Renders matched spans with HTML emphasis tags."""

    def __init__(self, highlight_tag: str = "mark"):
        self.highlight_tag = highlight_tag

    def highlights(self, text: str, spans: list[Span]) -> list[Highlight]:
        """Resolve spans to text fragments, dropping out-of-range ones."""
        return [
            Highlight(text[s.start : s.end], s.start, s.end)
            for s in merge_spans(spans)
            if 0 <= s.start < s.end <= len(text)
        ]

    def render(self, text: str, spans: list[Span]) -> str:
        """Escape text and wrap every span in the highlight tag."""
        tag = self.highlight_tag
        parts = []
        position = 0
        for highlight in self.highlights(text, spans):
            parts.append(html.escape(text[position : highlight.start_offset]))
            parts.append(f"<{tag}>{html.escape(highlight.text)}</{tag}>")
            position = highlight.end_offset
        parts.append(html.escape(text[position:]))
        return "".join(parts)

    def find_term_spans(self, text: str, term: str) -> list[Span]:
        """Case-insensitive occurrences of every word of term in text."""
        lowered = lower_keep_offsets(text)
        spans = []
        for word in split_search_terms(term.lower()):
            start = lowered.find(word)
            while start != -1:
                spans.append(Span(start, start + len(word)))
                start = lowered.find(word, start + len(word))
        return merge_spans(spans)

    def highlight_result(
        self, result: RankedResult, term: str = ""
    ) -> dict[Field, str]:
        """Rendered title and url of a result.

        Spans recorded by the engine are used where present, otherwise the
        words of ``term`` are located in the text.
        """
        record = result.record
        rendered = {}
        for hl_field, text in (
            (Field.TITLE, record.title),
            (Field.URL, record.display_url),
        ):
            spans = result.highlights.get(hl_field)
            if spans is None:
                spans = self.find_term_spans(text, term) if term else []
            rendered[hl_field] = self.render(text, spans)
        return rendered
