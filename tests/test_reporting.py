"""Tests for the error reporting boundary."""

import logging

from marksearch.core.exceptions import ConfigurationError
from marksearch.reporting import ErrorReporter, ReportedError


class TestErrorReporter:
    """Test accumulation and dismissal of errors."""

    def test_accumulates_until_dismissed(self) -> None:
        """All errors are kept until dismissed."""
        reporter = ErrorReporter()
        reporter.report(ConfigurationError("first"))
        reporter.report(ValueError("second"), "Search for 'x'")

        assert reporter.has_errors
        assert [e.message for e in reporter.errors] == [
            "first",
            "Search for 'x': second",
        ]
        assert reporter.dismiss() == 2
        assert not reporter.has_errors
        assert reporter.dismiss() == 0

    def test_errors_logged(self, caplog) -> None:
        """Reported errors are logged at error level."""
        with caplog.at_level(logging.ERROR):
            ErrorReporter().report(ConfigurationError("broken"), "startup")
        assert "startup: broken" in caplog.text

    def test_listeners(self) -> None:
        """Subscribers are called for every report until unsubscribed."""
        reporter = ErrorReporter()
        seen: list[ReportedError] = []
        reporter.subscribe(seen.append)
        reporter.subscribe(seen.append)

        reporter.report(ValueError("a"))
        assert len(seen) == 1

        reporter.unsubscribe(seen.append)
        reporter.report(ValueError("b"))
        assert len(seen) == 1

    def test_failing_listener(self, caplog) -> None:
        """A failing listener does not break reporting."""
        reporter = ErrorReporter()

        def broken(reported):
            raise RuntimeError("listener down")

        reporter.subscribe(broken)
        with caplog.at_level(logging.ERROR):
            reported = reporter.report(ValueError("a"))
        assert reported.error.args == ("a",)
        assert "listener down" in caplog.text
        assert len(reporter.errors) == 1
