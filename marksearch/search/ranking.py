"""Scoring of search candidates.

The final score of a candidate is built in five steps:

1. base score by record kind
2. multiplied by the candidate's match quality
3. plus match bonuses (starts-with or includes, exact title/url phrase,
   exact tag and folder matches)
4. plus usage signals (visit count, recency, bookmark open as tab)
5. plus the record's custom bonus

Scoring is a pure function of candidates, term and configuration.
"""

from dataclasses import dataclass

from marksearch.config import SearchOptions
from marksearch.core.models import (
    Field,
    RankedResult,
    Record,
    RecordKind,
    SearchCandidate,
)
from marksearch.core.titles import parse_taxonomy_terms, split_search_terms

SECONDS_PER_DAY = 24 * 60 * 60
MS_PER_DAY = SECONDS_PER_DAY * 1000


class FieldWeights:
    """Field-specific weight configuration for ranking."""

    def __init__(self, weights: dict[Field, float] | None = None):
        """Initialize field weights.

        Args:
            weights: Dict mapping fields to weight multipliers
        """
        self.weights = {
            Field.TITLE: 1.0,
            Field.TAG: 0.7,
            Field.URL: 0.6,
            Field.FOLDER: 0.5,
        }

        if weights:
            self.weights.update(weights)

    @classmethod
    def from_options(cls, options: SearchOptions) -> "FieldWeights":
        return cls(
            {
                Field.TITLE: options.score_title_weight,
                Field.TAG: options.score_tag_weight,
                Field.URL: options.score_url_weight,
                Field.FOLDER: options.score_folder_weight,
            }
        )

    def get_weight(self, field: Field) -> float:
        """Get weight for a field."""
        return self.weights.get(field, 1.0)


def accumulate_quality(field_scores: list[float]) -> float:
    """Combine per-field match scores with diminishing returns.

    The best field counts fully, every further field adds a fifth of its
    own score.
    """
    if not field_scores:
        return 0.0
    ordered = sorted(field_scores, reverse=True)
    return ordered[0] + sum(ordered[1:]) / 5


@dataclass
class ScoringBonuses:
    """Base scores and bonus constants."""

    bookmark_base: float = 100
    tab_base: float = 70
    history_base: float = 45
    search_engine_base: float = 30
    custom_search_engine_base: float = 400
    direct_url_base: float = 500

    exact_includes: float = 5
    exact_includes_min_chars: int = 3
    exact_starts_with: float = 10
    exact_equals: float = 15
    exact_tag_match: float = 10
    exact_folder_match: float = 5

    visited_per_visit: float = 0.5
    visited_maximum: float = 20
    recent_maximum: float = 20
    history_days_ago: float = 14
    open_tab: float = 10
    date_added_maximum: float = 0
    date_added_per_day: float = 0.1

    custom_bonus_enabled: bool = True

    @classmethod
    def from_options(cls, options: SearchOptions) -> "ScoringBonuses":
        return cls(
            bookmark_base=options.score_bookmark_base,
            tab_base=options.score_tab_base,
            history_base=options.score_history_base,
            search_engine_base=options.score_search_engine_base,
            custom_search_engine_base=options.score_custom_search_engine_base,
            direct_url_base=options.score_direct_url_base,
            exact_includes=options.score_exact_includes_bonus,
            exact_includes_min_chars=options.score_exact_includes_bonus_min_chars,
            exact_starts_with=options.score_exact_starts_with_bonus,
            exact_equals=options.score_exact_equals_bonus,
            exact_tag_match=options.score_exact_tag_match_bonus,
            exact_folder_match=options.score_exact_folder_match_bonus,
            visited_per_visit=options.score_visited_bonus_score,
            visited_maximum=options.score_visited_bonus_score_maximum,
            recent_maximum=options.score_recent_bonus_score_maximum,
            history_days_ago=options.history_days_ago,
            open_tab=options.score_open_tab_bonus,
            date_added_maximum=options.score_date_added_bonus_score_maximum,
            date_added_per_day=options.score_date_added_bonus_score_per_day,
            custom_bonus_enabled=options.score_custom_bonus_score,
        )

    def base_score(self, kind: RecordKind) -> float:
        if kind is RecordKind.BOOKMARK:
            return self.bookmark_base
        if kind is RecordKind.TAB:
            return self.tab_base
        if kind is RecordKind.HISTORY:
            return self.history_base
        if kind is RecordKind.SEARCH_ENGINE:
            return self.search_engine_base
        if kind is RecordKind.CUSTOM_SEARCH:
            return self.custom_search_engine_base
        if kind is RecordKind.DIRECT_URL:
            return self.direct_url_base
        raise ValueError(f"Unknown record kind: {kind!r}")


class ScoringEngine:
    """Turns search candidates into ranked results."""

    def __init__(
        self,
        field_weights: FieldWeights | None = None,
        bonuses: ScoringBonuses | None = None,
    ):
        self.field_weights = field_weights or FieldWeights()
        self.bonuses = bonuses or ScoringBonuses()

    @classmethod
    def from_options(cls, options: SearchOptions) -> "ScoringEngine":
        return cls(
            FieldWeights.from_options(options), ScoringBonuses.from_options(options)
        )

    def score(
        self,
        candidates: list[SearchCandidate],
        term: str,
        query: str | None = None,
        now_ms: float | None = None,
        sort: bool = True,
    ) -> list[RankedResult]:
        """Score candidates and sort them, highest first.

        Args:
            candidates: Engine output
            term: Search term without mode prefix
            query: Full query text, used for ``#tag`` and ``~folder`` bonuses.
                Defaults to ``term``.
            now_ms: Reference time for the date-added bonus. Without it the
                date-added bonus is not applied.
            sort: Keep the input order when false

        Returns:
            Ranked results. Equal scores keep their input order.
        """
        query = term if query is None else query
        tag_terms = parse_taxonomy_terms(query, "#")
        folder_terms = parse_taxonomy_terms(query, "~")

        results = []
        for candidate in candidates:
            record = candidate.record
            total = self.bonuses.base_score(record.kind) * candidate.match_quality
            total += self.match_bonus(record, term)
            total += self.taxonomy_bonus(record, tag_terms, folder_terms)
            total += self.usage_bonus(record, now_ms)
            if self.bonuses.custom_bonus_enabled and record.custom_bonus:
                total += record.custom_bonus

            results.append(
                RankedResult(
                    record=record,
                    score=total,
                    match_quality=candidate.match_quality,
                    matched_fields=set(candidate.matched_fields),
                    highlights=dict(candidate.highlights),
                )
            )

        if not sort:
            return results
        # sorted() is stable, ties keep input order
        return sorted(results, key=lambda r: r.score, reverse=True)

    def match_bonus(self, record: Record, term: str) -> float:
        """Starts-with/includes bonus plus exact phrase bonuses."""
        term = term.strip()
        if not term:
            return 0.0

        bonuses = self.bonuses
        title_weight = self.field_weights.get_weight(Field.TITLE)
        url_weight = self.field_weights.get_weight(Field.URL)
        title = record.title.lower().strip()
        url = record.display_url
        url_term = term.replace(" ", "-")
        bonus = 0.0

        if title.startswith(term):
            bonus += bonuses.exact_starts_with * title_weight
        elif url.startswith(url_term):
            bonus += bonuses.exact_starts_with * url_weight
        else:
            bonus += self._includes_bonus(record, title, url, term)

        if title == term:
            bonus += bonuses.exact_equals * title_weight
        if " " in term and url_term in url:
            bonus += bonuses.exact_equals * url_weight

        return bonus

    def _includes_bonus(
        self, record: Record, title: str, url: str, term: str
    ) -> float:
        bonus = 0.0
        weights = self.field_weights
        tags = [tag.lower() for tag in record.tags]
        folders = [folder.lower() for folder in record.folder_path]
        for word in split_search_terms(term):
            if len(word) < self.bonuses.exact_includes_min_chars:
                continue
            if word in title:
                bonus += self.bonuses.exact_includes * weights.get_weight(Field.TITLE)
            elif word in url:
                bonus += self.bonuses.exact_includes * weights.get_weight(Field.URL)
            elif any(word in tag for tag in tags):
                bonus += self.bonuses.exact_includes * weights.get_weight(Field.TAG)
            elif any(word in folder for folder in folders):
                bonus += self.bonuses.exact_includes * weights.get_weight(Field.FOLDER)
        return bonus

    def taxonomy_bonus(
        self, record: Record, tag_terms: list[str], folder_terms: list[str]
    ) -> float:
        """Bonus for every ``#tag`` / ``~folder`` term matched exactly."""
        bonus = 0.0
        if tag_terms and record.tags:
            tags = {tag.lower() for tag in record.tags}
            bonus += self.bonuses.exact_tag_match * sum(t in tags for t in tag_terms)
        if folder_terms and record.folder_path:
            folders = {folder.lower() for folder in record.folder_path}
            bonus += self.bonuses.exact_folder_match * sum(
                t in folders for t in folder_terms
            )
        return bonus

    def usage_bonus(self, record: Record, now_ms: float | None = None) -> float:
        """Visit count, recency, open tab and date-added bonuses."""
        bonuses = self.bonuses
        bonus = 0.0

        if record.visit_count:
            bonus += min(
                bonuses.visited_maximum, record.visit_count * bonuses.visited_per_visit
            )

        if record.last_visit_seconds_ago is not None and bonuses.recent_maximum:
            window = bonuses.history_days_ago * SECONDS_PER_DAY
            freshness = 1 - record.last_visit_seconds_ago / window
            bonus += max(0.0, freshness * bonuses.recent_maximum)

        if record.kind is RecordKind.BOOKMARK and record.open_tab:
            bonus += bonuses.open_tab

        if bonuses.date_added_maximum and record.date_added and now_ms is not None:
            days_ago = max(0.0, (now_ms - record.date_added) / MS_PER_DAY)
            bonus += max(
                0.0, bonuses.date_added_maximum - days_ago * bonuses.date_added_per_day
            )

        return bonus
