"""Exception hierarchy for marksearch."""


class MarkSearchError(Exception):
    """Base exception for all marksearch errors."""


class ConfigurationError(MarkSearchError):
    """Invalid or unsupported configuration. Always fatal."""


class UnsupportedStrategyError(ConfigurationError):
    """Raised when the configured search strategy is not known."""

    def __init__(self, strategy: str):
        self.strategy = strategy
        super().__init__(
            f"Unsupported search strategy: {strategy!r} (expected 'precise' or 'fuzzy')"
        )


class FuzzyBackendUnavailable(ConfigurationError):
    """Raised when fuzzy search is selected but its backing library is missing."""


class DataProviderError(MarkSearchError):
    """Raised when the platform data provider cannot deliver data."""


class RecordNotFoundError(MarkSearchError):
    """Raised when an edit or delete targets an unknown record."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"No bookmark with id {record_id!r}")
