"""Matching engines for the precise and fuzzy search strategies."""

from marksearch.search.backends.base import FieldHit, MatchingEngine, TermMatches
from marksearch.search.backends.fuzzy import FuzzyEngine
from marksearch.search.backends.precise import PreciseEngine

__all__ = [
    "FieldHit",
    "FuzzyEngine",
    "MatchingEngine",
    "PreciseEngine",
    "TermMatches",
]
