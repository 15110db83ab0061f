"""Search and ranking over normalized records."""

from marksearch.search.context import GenerationCache, SearchContext
from marksearch.search.engine import BookmarkEditView, SearchOrchestrator
from marksearch.search.highlighting import Highlighter
from marksearch.search.query import ParsedQuery, QueryMode, parse_query
from marksearch.search.ranking import FieldWeights, ScoringBonuses, ScoringEngine
from marksearch.search.scheduler import SearchScheduler
from marksearch.search.taxonomy import TaxonomySearch

__all__ = [
    "BookmarkEditView",
    "FieldWeights",
    "GenerationCache",
    "Highlighter",
    "ParsedQuery",
    "QueryMode",
    "ScoringBonuses",
    "ScoringEngine",
    "SearchContext",
    "SearchOrchestrator",
    "SearchScheduler",
    "TaxonomySearch",
    "parse_query",
]
