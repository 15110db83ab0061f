"""Keystroke driven search scheduling.

Typing triggers a search after a quiet period. Only the latest keystroke's
search may publish results: each keystroke takes a new token from a single
slot, and a search checks the slot still holds its token both after the
quiet period and before publishing. Older searches are discarded.
"""

import asyncio
import itertools
import logging
from collections.abc import Callable

from marksearch.core.exceptions import MarkSearchError
from marksearch.core.models import RankedResult
from marksearch.reporting import ErrorReporter

from .engine import SearchOrchestrator

logger = logging.getLogger(__name__)

# Keys that move the selection or leave the input without changing the query
NAVIGATION_KEYS = frozenset(
    {
        "ArrowUp",
        "ArrowDown",
        "ArrowLeft",
        "ArrowRight",
        "PageUp",
        "PageDown",
        "Home",
        "End",
        "Enter",
        "Escape",
        "Tab",
        "Shift",
        "Control",
        "Alt",
        "Meta",
    }
)


class SearchScheduler:
    """Debounces keystrokes into searches and publishes the latest results."""

    def __init__(
        self,
        orchestrator: SearchOrchestrator,
        publish: Callable[[list[RankedResult]], None],
        reporter: ErrorReporter | None = None,
        debounce_ms: int | None = None,
    ):
        self.orchestrator = orchestrator
        self.publish = publish
        self.reporter = reporter or ErrorReporter()
        if debounce_ms is None:
            debounce_ms = orchestrator.options.search_debounce_ms
        self.debounce_ms = debounce_ms
        self._tokens = itertools.count(1)
        self._latest = 0

    @property
    def latest_token(self) -> int:
        return self._latest

    @staticmethod
    def is_navigation_key(key: str | None) -> bool:
        return key in NAVIGATION_KEYS

    def _is_current(self, token: int) -> bool:
        return self._latest == token

    async def on_input(
        self, raw_query: str, key: str | None = None, strategy: str | None = None
    ) -> bool:
        """Handle one keystroke.

        Returns:
            True if this keystroke's results were published
        """
        if self.is_navigation_key(key):
            return False

        token = next(self._tokens)
        self._latest = token

        if self.debounce_ms:
            await asyncio.sleep(self.debounce_ms / 1000)
        if not self._is_current(token):
            logger.debug(f"Search for '{raw_query}' superseded during debounce")
            return False

        try:
            results = self.orchestrator.search(raw_query, strategy)
        except MarkSearchError as e:
            self.reporter.report(e, f"Search for '{raw_query}'")
            return False

        if not self._is_current(token):
            logger.debug(f"Discarding stale results for '{raw_query}'")
            return False

        self.publish(results)
        return True
