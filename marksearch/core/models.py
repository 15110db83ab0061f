"""Core data models for the search index.

A ``Record`` is the unit of search. Bookmarks, tabs and history entries are
normalized into this single shape, and search-engine fallbacks and direct
navigation targets are synthesized into it at query time.

Records are mutable: the bookmark edit interface rewrites title, url and tags
in place and then recomputes the derived fields through ``refresh_derived``.
"""

import enum
from dataclasses import dataclass, field

import msgspec

from .urls import clean_up_url, strip_trailing_slash


class RecordKind(enum.Enum):
    """Closed set of record kinds."""

    BOOKMARK = "bookmark"
    TAB = "tab"
    HISTORY = "history"
    SEARCH_ENGINE = "search"
    CUSTOM_SEARCH = "customSearch"
    DIRECT_URL = "direct"

    @property
    def is_indexed(self) -> bool:
        """Whether records of this kind live in the record set and its indexes."""
        return self in INDEXED_KINDS


INDEXED_KINDS = (RecordKind.BOOKMARK, RecordKind.TAB, RecordKind.HISTORY)


class Field(enum.Enum):
    """Searchable record fields."""

    TITLE = "title"
    URL = "url"
    TAG = "tag"
    FOLDER = "folder"


# Fields that carry data for each indexed kind
KIND_FIELDS: dict[RecordKind, tuple[Field, ...]] = {
    RecordKind.BOOKMARK: (Field.TITLE, Field.URL, Field.TAG, Field.FOLDER),
    RecordKind.TAB: (Field.TITLE, Field.URL),
    RecordKind.HISTORY: (Field.TITLE, Field.URL),
}

SEARCH_STRING_SEPARATOR = "¦"


class Record(msgspec.Struct, kw_only=True):
    """A normalized, searchable record."""

    kind: RecordKind
    source_id: str
    url: str
    title: str = ""
    index: int = 0
    normalized_url: str = ""
    display_url: str = ""
    tags: list[str] = msgspec.field(default_factory=list)
    folder_path: list[str] = msgspec.field(default_factory=list)
    visit_count: int | None = None
    last_visit_seconds_ago: float | None = None
    custom_bonus: int | None = None
    date_added: int | None = None
    search_string_lower: str = ""
    dupe: bool = False
    open_tab: bool = False
    active: bool = False

    def __post_init__(self):
        """Compute derived fields when they were not supplied."""
        if not self.normalized_url or not self.display_url:
            self.refresh_derived()

    @property
    def tags_text(self) -> str:
        """Tags rendered the way they are typed in a query."""
        return " ".join(f"#{tag}" for tag in self.tags)

    @property
    def folder_text(self) -> str:
        """Folder path rendered the way it is typed in a query."""
        return " ".join(f"~{folder}" for folder in self.folder_path)

    def field_text(self, field: Field) -> str:
        """Get the raw text indexed for a field."""
        if field is Field.TITLE:
            return self.title
        if field is Field.URL:
            return self.display_url
        if field is Field.TAG:
            return " ".join(self.tags)
        return " ".join(self.folder_path)

    def refresh_derived(self) -> None:
        """Recompute URL forms and the lowercase search string."""
        self.normalized_url = strip_trailing_slash(self.url)
        self.display_url = clean_up_url(self.url)
        self.search_string_lower = SEARCH_STRING_SEPARATOR.join(
            [self.title, self.display_url, self.tags_text, self.folder_text]
        ).lower()


class SearchData(msgspec.Struct, kw_only=True):
    """The three normalized record arrays, each densely indexed."""

    bookmarks: list[Record] = msgspec.field(default_factory=list)
    tabs: list[Record] = msgspec.field(default_factory=list)
    history: list[Record] = msgspec.field(default_factory=list)

    def records(self, kind: RecordKind) -> list[Record]:
        """Get the backing array for an indexed kind."""
        if kind is RecordKind.BOOKMARK:
            return self.bookmarks
        if kind is RecordKind.TAB:
            return self.tabs
        if kind is RecordKind.HISTORY:
            return self.history
        raise ValueError(f"{kind.value} records are not stored")

    def __len__(self) -> int:
        return len(self.bookmarks) + len(self.tabs) + len(self.history)


@dataclass(frozen=True)
class Span:
    """Half-open character range ``[start, end)`` within a field's text."""

    start: int
    end: int


@dataclass
class SearchCandidate:
    """An engine's match output for one record."""

    record: Record
    match_quality: float
    matched_fields: set[Field] = field(default_factory=set)
    highlights: dict[Field, list[Span]] = field(default_factory=dict)


@dataclass
class RankedResult:
    """A scored candidate, as handed to the rendering layer."""

    record: Record
    score: float
    match_quality: float
    matched_fields: set[Field] = field(default_factory=set)
    highlights: dict[Field, list[Span]] = field(default_factory=dict)

    @property
    def kind(self) -> RecordKind:
        return self.record.kind
