"""Error reporting boundary.

Fatal conditions raised while searching are collected here instead of
interrupting the search flow. All errors since the last dismissal stay
available to the rendering layer.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

logger = logging.getLogger(__name__)


@dataclass
class ReportedError:
    """An error together with where and when it happened."""

    error: Exception
    context: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def message(self) -> str:
        if self.context:
            return f"{self.context}: {self.error}"
        return str(self.error)


class ErrorReporter:
    """Accumulates errors until they are dismissed."""

    def __init__(self):
        self._errors: list[ReportedError] = []
        self._listeners: list[Callable[[ReportedError], None]] = []

    def subscribe(self, callback: Callable[[ReportedError], None]) -> None:
        """Call ``callback`` for every reported error."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    def unsubscribe(self, callback: Callable[[ReportedError], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def report(self, error: Exception, context: str = "") -> ReportedError:
        reported = ReportedError(error=error, context=context)
        self._errors.append(reported)
        logger.error(reported.message)

        for callback in list(self._listeners):
            try:
                callback(reported)
            except Exception as e:
                logger.error(f"Error listener failed: {e}")

        return reported

    @property
    def errors(self) -> list[ReportedError]:
        return list(self._errors)

    @property
    def has_errors(self) -> bool:
        return bool(self._errors)

    def dismiss(self) -> int:
        """Forget all errors. Returns how many were dismissed."""
        count = len(self._errors)
        self._errors.clear()
        return count
