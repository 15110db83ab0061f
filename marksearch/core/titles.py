"""Parsing and formatting of bookmark titles.

Bookmark titles carry user-authored metadata inline::

    Example +5 #alpha #beta

Everything before the first ``#`` is the display title, every following
``#``-delimited segment is a tag, and a ``+N`` token before the first tag is
a custom score bonus.
"""

import re
from typing import NamedTuple

_CUSTOM_BONUS_RE = re.compile(r"(?:^|\s)\+(\d+)(?=\s|$)")
_WHITESPACE_RE = re.compile(r"\s+")


class ParsedTitle(NamedTuple):
    title: str
    tags: list[str]
    custom_bonus: int | None


def parse_bookmark_title(raw_title: str) -> ParsedTitle:
    """Split a raw bookmark title into title, tags and custom bonus."""
    head, _, tail = (raw_title or "").partition("#")

    custom_bonus = None
    match = _CUSTOM_BONUS_RE.search(head)
    if match:
        custom_bonus = int(match.group(1), 10)
        head = head[: match.start()] + " " + head[match.end() :]

    tags: list[str] = []
    for segment in tail.split("#"):
        tag = segment.strip()
        if tag and tag not in tags:
            tags.append(tag)

    title = _WHITESPACE_RE.sub(" ", head).strip()
    return ParsedTitle(title, tags, custom_bonus)


def format_bookmark_title(
    title: str, tags: list[str] | None = None, custom_bonus: int | None = None
) -> str:
    """Serialize title, custom bonus and tags back into one raw title."""
    parts = [title.strip()] if title and title.strip() else []
    if custom_bonus is not None:
        parts.append(f"+{custom_bonus}")
    for tag in tags or []:
        tag = tag.strip().lstrip("#").strip()
        if tag:
            parts.append(f"#{tag}")
    return " ".join(parts)


def normalize_search_term(raw: str) -> str:
    """Lowercase, left-trim and collapse repeated spaces."""
    return re.sub(r" {2,}", " ", (raw or "").lower().lstrip())


def split_search_terms(term: str) -> list[str]:
    """Split a search term on whitespace."""
    return [part for part in term.split() if part]


def lower_keep_offsets(text: str) -> str:
    """Lowercase text character by character without changing its length.

    Characters whose lowercase form is longer (such as "\u0130") are kept, so
    offsets into the result are valid offsets into the original text.
    """
    return "".join(ch.lower() if len(ch.lower()) == 1 else ch for ch in text)


def parse_taxonomy_terms(query: str, marker: str) -> list[str]:
    """Extract the words directly following each marker character.

    >>> parse_taxonomy_terms("react #js #web", "#")
    ['js', 'web']
    """
    terms = []
    for segment in query.split(marker)[1:]:
        words = segment.split()
        if words:
            terms.append(words[0].lower())
    return terms
