"""Candidates shown while the search term is empty."""

from marksearch.core.models import Record, RecordKind, SearchCandidate
from marksearch.core.urls import strip_trailing_slash

from .context import SearchContext
from .query import QueryMode
from .taxonomy import TaxonomySearch

NEUTRAL_MATCH_QUALITY = 1.0


def _candidates(records: list[Record]) -> list[SearchCandidate]:
    return [SearchCandidate(record, NEUTRAL_MATCH_QUALITY) for record in records]


def by_recency(records: list[Record]) -> list[Record]:
    """Most recently used first; records without a timestamp go last."""
    return sorted(
        records,
        key=lambda r: (
            r.last_visit_seconds_ago is None,
            r.last_visit_seconds_ago or 0.0,
        ),
    )


def context_candidates(context: SearchContext) -> list[SearchCandidate]:
    """Bookmarks and history entries for the currently active page.

    Bookmarks match when their URL starts with the active URL, history
    entries only on an exact match. Recently used tabs follow.
    """
    records: list[Record] = []
    active_url = context.active_url
    if active_url:
        active_url = strip_trailing_slash(active_url)
        records.extend(
            bookmark
            for bookmark in context.records(RecordKind.BOOKMARK)
            if bookmark.normalized_url.startswith(active_url)
        )
        records.extend(
            entry
            for entry in context.records(RecordKind.HISTORY)
            if entry.normalized_url == active_url
        )

    max_tabs = context.options.max_recent_tabs_to_show
    if max_tabs:
        tabs = [tab for tab in context.records(RecordKind.TAB) if not tab.active]
        records.extend(by_recency(tabs)[:max_tabs])

    return _candidates(records)


def default_candidates(
    context: SearchContext, mode: QueryMode
) -> list[SearchCandidate]:
    """Candidates for a query mode without search term."""
    if mode is QueryMode.ALL:
        return context_candidates(context)
    if mode is QueryMode.TAGS:
        return TaxonomySearch(context).all_tagged()
    if mode is QueryMode.FOLDERS:
        return TaxonomySearch(context).all_in_folders()
    if mode is QueryMode.BOOKMARKS:
        return _candidates(list(context.records(RecordKind.BOOKMARK)))
    if mode is QueryMode.TABS:
        return _candidates(by_recency(context.records(RecordKind.TAB)))
    if mode is QueryMode.HISTORY:
        records = [
            *context.records(RecordKind.TAB),
            *context.records(RecordKind.HISTORY),
        ]
        return _candidates(by_recency(records))
    return []
