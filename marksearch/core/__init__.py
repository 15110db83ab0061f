"""Core domain models and helpers."""

from marksearch.core.exceptions import (
    ConfigurationError,
    DataProviderError,
    FuzzyBackendUnavailable,
    MarkSearchError,
    RecordNotFoundError,
    UnsupportedStrategyError,
)
from marksearch.core.models import (
    Field,
    RankedResult,
    Record,
    RecordKind,
    SearchCandidate,
    SearchData,
    Span,
)
from marksearch.core.titles import (
    ParsedTitle,
    format_bookmark_title,
    parse_bookmark_title,
)
from marksearch.core.urls import clean_up_url, looks_like_url, strip_trailing_slash

__all__ = [
    "ConfigurationError",
    "DataProviderError",
    "Field",
    "FuzzyBackendUnavailable",
    "MarkSearchError",
    "ParsedTitle",
    "RankedResult",
    "Record",
    "RecordKind",
    "RecordNotFoundError",
    "SearchCandidate",
    "SearchData",
    "Span",
    "UnsupportedStrategyError",
    "clean_up_url",
    "format_bookmark_title",
    "looks_like_url",
    "parse_bookmark_title",
    "strip_trailing_slash",
]
