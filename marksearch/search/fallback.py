"""Synthesized candidates: web search engines and direct navigation."""

from marksearch.config import CustomSearchEngine, SearchEngineChoice, SearchOptions
from marksearch.core.models import Field, Record, RecordKind, SearchCandidate
from marksearch.core.urls import build_search_url, looks_like_url, to_navigable_url

FALLBACK_MATCH_QUALITY = 1.0


def search_engine_candidate(
    engine: SearchEngineChoice | CustomSearchEngine,
    term: str,
    kind: RecordKind = RecordKind.SEARCH_ENGINE,
) -> SearchCandidate:
    """A candidate that searches the web for the term."""
    if term:
        url = build_search_url(engine.url_prefix, term)
    else:
        url = getattr(engine, "blank", "") or build_search_url(engine.url_prefix, "")
    record = Record(
        kind=kind,
        source_id=f"{kind.value}:{engine.name}",
        title=f'{engine.name}: "{term}"',
        url=url,
    )
    return SearchCandidate(
        record, FALLBACK_MATCH_QUALITY, matched_fields={Field.TITLE}
    )


def search_engine_candidates(
    options: SearchOptions, term: str
) -> list[SearchCandidate]:
    """One candidate per configured search engine choice."""
    if not options.enable_search_engines:
        return []
    return [
        search_engine_candidate(engine, term)
        for engine in options.search_engine_choices
    ]


def custom_search_candidates(
    options: SearchOptions, query_text: str
) -> list[SearchCandidate]:
    """Candidates for custom search engines whose alias starts the query.

    ``"g python"`` searches Google for ``"python"``. An alias followed only by
    a space opens the engine's blank page.
    """
    if not options.enable_search_engines:
        return []
    candidates = []
    for engine in options.custom_search_engines:
        for alias in engine.alias:
            alias = alias.lower()
            if query_text.startswith(alias + " "):
                term = query_text[len(alias) :].strip()
                candidates.append(
                    search_engine_candidate(engine, term, RecordKind.CUSTOM_SEARCH)
                )
                break
    return candidates


def direct_url_candidate(
    options: SearchOptions, term: str
) -> SearchCandidate | None:
    """A navigation candidate if the term looks like a URL."""
    if not options.enable_direct_url or not looks_like_url(term):
        return None
    url = to_navigable_url(term)
    record = Record(
        kind=RecordKind.DIRECT_URL,
        source_id=f"direct:{url}",
        title=f"Direct: {term}",
        url=url,
    )
    return SearchCandidate(
        record, FALLBACK_MATCH_QUALITY, matched_fields={Field.URL}
    )


def fallback_candidates(
    options: SearchOptions, term: str, query_text: str | None = None
) -> list[SearchCandidate]:
    """All synthesized candidates for a term."""
    candidates = custom_search_candidates(options, query_text or term)
    candidates.extend(search_engine_candidates(options, term))
    direct = direct_url_candidate(options, term)
    if direct:
        candidates.append(direct)
    return candidates
