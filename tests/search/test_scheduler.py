"""Tests for keystroke scheduling."""

import asyncio

import pytest

from marksearch.reporting import ErrorReporter
from marksearch.search.scheduler import SearchScheduler


class Published:
    """Collects published result lists."""

    def __init__(self):
        self.batches = []

    def __call__(self, results):
        self.batches.append(results)


class TestSearchScheduler:
    """Test debouncing and stale result suppression."""

    @pytest.mark.asyncio
    async def test_publishes_results(self, orchestrator) -> None:
        """A lone keystroke publishes its results."""
        published = Published()
        scheduler = SearchScheduler(orchestrator, published, debounce_ms=0)
        assert await scheduler.on_input("pandoc")
        assert len(published.batches) == 1
        assert published.batches[0][0].record.source_id == "10"
        assert scheduler.latest_token == 1

    @pytest.mark.asyncio
    async def test_navigation_keys_ignored(self, orchestrator) -> None:
        """Navigation keys never trigger a search."""
        published = Published()
        scheduler = SearchScheduler(orchestrator, published, debounce_ms=0)
        assert not await scheduler.on_input("pandoc", key="ArrowDown")
        assert published.batches == []
        assert scheduler.latest_token == 0

    @pytest.mark.asyncio
    async def test_only_latest_published(self, orchestrator) -> None:
        """Keystrokes within the quiet period are superseded."""
        published = Published()
        scheduler = SearchScheduler(orchestrator, published, debounce_ms=20)
        first, second = await asyncio.gather(
            scheduler.on_input("pan"), scheduler.on_input("pandoc")
        )
        assert (first, second) == (False, True)
        assert len(published.batches) == 1

    @pytest.mark.asyncio
    async def test_errors_reported(self, orchestrator) -> None:
        """Search errors go to the reporter instead of propagating."""
        reporter = ErrorReporter()
        published = Published()
        scheduler = SearchScheduler(orchestrator, published, reporter, debounce_ms=0)
        assert not await scheduler.on_input("pandoc", strategy="semantic")
        assert published.batches == []
        assert reporter.has_errors
        assert "Unsupported search strategy" in reporter.errors[0].message

    def test_debounce_from_options(self, orchestrator) -> None:
        """The quiet period defaults to the configured value."""
        scheduler = SearchScheduler(orchestrator, Published())
        assert scheduler.debounce_ms == 100
