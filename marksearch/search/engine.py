"""Search orchestration.

The ``SearchOrchestrator`` turns a raw query string into ranked results:
it detects the query mode, collects candidates from the taxonomy search or
the selected matching engine, adds search engine and direct URL fallbacks,
scores everything and applies the minimum score and result cap.

It also owns the bookmark edit interface, since every edit has to
invalidate the derived indexes before the next search reads them.
"""

import logging
import time
from dataclasses import dataclass, field

from marksearch.config import STRATEGIES, SearchOptions
from marksearch.core.exceptions import RecordNotFoundError, UnsupportedStrategyError
from marksearch.core.models import Field, RankedResult, Record, RecordKind
from marksearch.core.titles import format_bookmark_title
from marksearch.core.urls import clean_up_url
from marksearch.data.loader import load_search_data
from marksearch.data.normalizer import assign_indices, flag_open_tabs
from marksearch.data.providers import PlatformDataProvider

from .backends import FuzzyEngine, MatchingEngine, PreciseEngine
from .context import SearchContext
from .defaults import default_candidates
from .fallback import fallback_candidates
from .highlighting import Highlighter
from .query import ParsedQuery, QueryMode, parse_query
from .ranking import ScoringEngine
from .taxonomy import TaxonomySearch

logger = logging.getLogger(__name__)

ENGINE_CLASSES: dict[str, type[MatchingEngine]] = {
    "precise": PreciseEngine,
    "fuzzy": FuzzyEngine,
}

# Empty-term modes whose default order is kept instead of sorting by score
ORDERED_DEFAULT_MODES = (
    QueryMode.TABS,
    QueryMode.HISTORY,
    QueryMode.TAGS,
    QueryMode.FOLDERS,
)


@dataclass
class BookmarkEditView:
    """What the bookmark edit form shows."""

    bookmark_id: str
    title: str
    url: str
    tags: list[str]
    custom_bonus: int | None = None
    known_tags: list[str] = field(default_factory=list)


class SearchOrchestrator:
    """Entry point for searching and editing the record set."""

    def __init__(
        self,
        context: SearchContext,
        provider: PlatformDataProvider | None = None,
        fallback_provider: PlatformDataProvider | None = None,
    ):
        self.context = context
        self.provider = provider
        self.fallback_provider = fallback_provider
        self.taxonomy = TaxonomySearch(context)
        self.highlighter = Highlighter()
        self._engines: dict[str, MatchingEngine] = {}
        self._engine_options: SearchOptions | None = None

    @classmethod
    async def create(
        cls,
        provider: PlatformDataProvider,
        options: SearchOptions | None = None,
        active_url: str | None = None,
        fallback_provider: PlatformDataProvider | None = None,
    ) -> "SearchOrchestrator":
        """Load all data from a provider and set up an orchestrator."""
        options = options or SearchOptions()
        now_ms = time.time() * 1000
        data = await load_search_data(
            provider, options, fallback=fallback_provider, now_ms=now_ms
        )
        context = SearchContext(options, data, active_url=active_url, now_ms=now_ms)
        return cls(context, provider, fallback_provider)

    @property
    def options(self) -> SearchOptions:
        return self.context.options

    async def refresh(self) -> None:
        """Reload all records from the provider."""
        if self.provider is None:
            return
        now_ms = time.time() * 1000
        data = await load_search_data(
            self.provider, self.options, fallback=self.fallback_provider, now_ms=now_ms
        )
        self.context.replace_data(data, now_ms=now_ms)
        logger.info(f"Refreshed search data: {len(data)} records")

    def engine(self, strategy: str) -> MatchingEngine:
        """Get the matching engine for a strategy, constructing it lazily."""
        if strategy not in STRATEGIES:
            raise UnsupportedStrategyError(strategy)

        if self._engine_options is not self.options:
            self._engines.clear()
            self._engine_options = self.options

        engine = self._engines.get(strategy)
        if engine is None:
            engine = ENGINE_CLASSES[strategy](self.context)
            self._engines[strategy] = engine
        return engine

    def search(
        self, raw_query: str, strategy: str | None = None
    ) -> list[RankedResult]:
        """Search for a raw query string.

        Args:
            raw_query: Query as typed, including any mode prefix
            strategy: "precise" or "fuzzy", defaults to the configured one

        Returns:
            Ranked results, best first

        Raises:
            UnsupportedStrategyError: If the strategy is unknown
            FuzzyBackendUnavailable: If fuzzy matching cannot be set up
        """
        strategy = strategy or self.options.search_strategy
        if strategy not in STRATEGIES:
            raise UnsupportedStrategyError(strategy)

        query = parse_query(raw_query)
        context = self.context

        with context.lock:
            if query.is_empty:
                return self._search(query, strategy)

            key = (query.term, strategy, query.mode)
            generation = context.generation
            cached = context.results.get(key, generation)
            if cached is not None:
                logger.debug(f"Result cache hit for '{query.term}'")
                return list(cached)

            results = self._search(query, strategy)
            context.results.put(key, generation, results)
            return list(results)

    def _search(self, query: ParsedQuery, strategy: str) -> list[RankedResult]:
        start_time = time.time()
        options = self.options
        scoring = ScoringEngine.from_options(options)

        if query.is_empty:
            candidates = default_candidates(self.context, query.mode)
            results = scoring.score(
                candidates,
                "",
                query=query.text,
                now_ms=self.context.now_ms,
                sort=query.mode not in ORDERED_DEFAULT_MODES,
            )
        else:
            if query.mode is QueryMode.TAGS:
                candidates = self.taxonomy.search_tags(query.term)
            elif query.mode is QueryMode.FOLDERS:
                candidates = self.taxonomy.search_folders(query.term)
            elif query.mode is QueryMode.SEARCH:
                candidates = []
            else:
                candidates = self.engine(strategy).search(query.term, query.mode.kinds)

            if query.mode.offers_fallbacks:
                candidates.extend(fallback_candidates(options, query.term, query.text))

            results = scoring.score(
                candidates, query.term, query=query.text, now_ms=self.context.now_ms
            )

        results = [r for r in results if r.score >= options.score_min_score]
        if not query.mode.is_taxonomy:
            results = results[: options.search_max_results]

        if options.display_search_match_highlight and query.term:
            self._add_term_highlights(results, query.term)

        took_ms = int((time.time() - start_time) * 1000)
        logger.debug(
            f"Search '{query.text}' ({query.mode.value}, {strategy}) "
            f"returned {len(results)} results in {took_ms}ms"
        )
        return results

    def _add_term_highlights(self, results: list[RankedResult], term: str) -> None:
        """Locate term words in results that carry no engine spans."""
        for result in results:
            if result.highlights or not result.record.kind.is_indexed:
                continue
            record = result.record
            for hl_field, text in (
                (Field.TITLE, record.title),
                (Field.URL, record.display_url),
            ):
                spans = self.highlighter.find_term_spans(text, term)
                if spans:
                    result.highlights[hl_field] = spans

    # Taxonomy listing

    def list_tags(self) -> dict[str, int]:
        return self.taxonomy.list_tags()

    def list_folders(self) -> dict[str, int]:
        return self.taxonomy.list_folders()

    # Bookmark editing

    def _bookmark(self, bookmark_id: str) -> Record:
        record = self.context.find_record(RecordKind.BOOKMARK, str(bookmark_id))
        if record is None:
            raise RecordNotFoundError(str(bookmark_id))
        return record

    def edit_bookmark(self, bookmark_id: str) -> BookmarkEditView:
        """Get the current state of a bookmark for editing."""
        record = self._bookmark(bookmark_id)
        return BookmarkEditView(
            bookmark_id=record.source_id,
            title=record.title,
            url=record.url,
            tags=list(record.tags),
            custom_bonus=record.custom_bonus,
            known_tags=list(self.list_tags()),
        )

    async def update_bookmark(
        self,
        bookmark_id: str,
        title: str,
        tags: list[str] | None = None,
        url: str | None = None,
    ) -> Record:
        """Change title, tags and optionally url of a bookmark.

        The record and all derived indexes are updated before the change is
        persisted through the provider. If persisting fails the previous
        state is restored and the provider error is raised.

        Raises:
            RecordNotFoundError: If no bookmark has this id
            ValueError: If the new url is not usable
            DataProviderError: If the provider cannot store the change
        """
        if url is not None and not clean_up_url(url.strip()):
            raise ValueError(f"Invalid bookmark URL: {url!r}")

        with self.context.lock:
            record = self._bookmark(bookmark_id)
            previous = (record.title, record.tags, record.url)
            self._set_bookmark_fields(
                record,
                title.strip(),
                _clean_tags(tags or []),
                record.url if url is None else url.strip(),
            )

        raw_title = format_bookmark_title(
            record.title, record.tags, record.custom_bonus
        )
        if self.provider is not None:
            try:
                await self.provider.update_bookmark(
                    record.source_id, title=raw_title, url=record.url if url else None
                )
            except Exception:
                logger.warning(f"Reverting bookmark {record.source_id}: update failed")
                with self.context.lock:
                    self._set_bookmark_fields(record, *previous)
                raise
        logger.info(f"Updated bookmark {record.source_id}: {raw_title}")
        return record

    def _set_bookmark_fields(
        self, record: Record, title: str, tags: list[str], url: str
    ) -> None:
        record.title = title
        record.tags = tags
        record.url = url
        record.refresh_derived()
        flag_open_tabs([record], self.context.records(RecordKind.TAB))
        self.context.invalidate(RecordKind.BOOKMARK)

    async def delete_bookmark(self, bookmark_id: str) -> Record:
        """Remove a bookmark from the record set and the platform.

        If the provider cannot remove it, the bookmark is put back at its
        old position and the provider error is raised.

        Raises:
            RecordNotFoundError: If no bookmark has this id
            DataProviderError: If the provider cannot remove the bookmark
        """
        with self.context.lock:
            record = self._bookmark(bookmark_id)
            position = record.index
            bookmarks = self.context.records(RecordKind.BOOKMARK)
            del bookmarks[position]
            assign_indices(bookmarks)
            self.context.invalidate(RecordKind.BOOKMARK)

        if self.provider is not None:
            try:
                await self.provider.remove_bookmark(record.source_id)
            except Exception:
                logger.warning(f"Restoring bookmark {record.source_id}: delete failed")
                with self.context.lock:
                    bookmarks = self.context.records(RecordKind.BOOKMARK)
                    bookmarks.insert(position, record)
                    assign_indices(bookmarks)
                    self.context.invalidate(RecordKind.BOOKMARK)
                raise
        logger.info(f"Deleted bookmark {record.source_id} ({record.url})")
        return record


def _clean_tags(tags: list[str]) -> list[str]:
    cleaned: list[str] = []
    for tag in tags:
        tag = tag.strip().lstrip("#").strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned
