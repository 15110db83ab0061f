"""Query mode parsing."""

import enum
from dataclasses import dataclass

from marksearch.core.models import RecordKind
from marksearch.core.titles import normalize_search_term


class QueryMode(enum.Enum):
    """What a query searches in."""

    ALL = "all"
    HISTORY = "history"
    BOOKMARKS = "bookmarks"
    TABS = "tabs"
    SEARCH = "search"
    TAGS = "tags"
    FOLDERS = "folders"

    @property
    def kinds(self) -> tuple[RecordKind, ...]:
        """Record kinds searched in this mode."""
        return MODE_KINDS[self]

    @property
    def is_taxonomy(self) -> bool:
        return self in (QueryMode.TAGS, QueryMode.FOLDERS)

    @property
    def offers_fallbacks(self) -> bool:
        """Whether search engine and direct URL candidates are added."""
        return self in (QueryMode.ALL, QueryMode.SEARCH)


MODE_KINDS = {
    QueryMode.ALL: (RecordKind.BOOKMARK, RecordKind.TAB, RecordKind.HISTORY),
    QueryMode.HISTORY: (RecordKind.TAB, RecordKind.HISTORY),
    QueryMode.BOOKMARKS: (RecordKind.BOOKMARK,),
    QueryMode.TABS: (RecordKind.TAB,),
    QueryMode.SEARCH: (),
    QueryMode.TAGS: (RecordKind.BOOKMARK,),
    QueryMode.FOLDERS: (RecordKind.BOOKMARK,),
}

# Checked in order, first match wins
MODE_PREFIXES = (
    ("h ", QueryMode.HISTORY),
    ("b ", QueryMode.BOOKMARKS),
    ("t ", QueryMode.TABS),
    ("s ", QueryMode.SEARCH),
    ("#", QueryMode.TAGS),
    ("~", QueryMode.FOLDERS),
)


@dataclass(frozen=True)
class ParsedQuery:
    """A raw query split into mode and search term."""

    mode: QueryMode
    term: str
    text: str

    @property
    def is_empty(self) -> bool:
        return not self.term


def parse_query(raw_query: str) -> ParsedQuery:
    """Detect the query mode and strip its prefix.

    The prefix is checked against the lowercased, left-trimmed query with
    repeated spaces collapsed, so ``"b  React"`` searches bookmarks for
    ``"react"``.
    """
    text = normalize_search_term(raw_query)
    for prefix, mode in MODE_PREFIXES:
        if text.startswith(prefix):
            return ParsedQuery(mode, text[len(prefix) :].strip(), text)
    return ParsedQuery(QueryMode.ALL, text.strip(), text)
