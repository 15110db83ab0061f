"""Search configuration.

Options form a flat key/value mapping. They are read from YAML files in the
usual XDG and project locations, deep-merged, overridden by ``MARKSEARCH_*``
environment variables and finally validated into a ``SearchOptions`` struct.
"""

import logging
import os
from pathlib import Path
from typing import Annotated, Any

import msgspec
import yaml

from marksearch.core.exceptions import ConfigurationError, UnsupportedStrategyError

logger = logging.getLogger(__name__)

STRATEGIES = ("precise", "fuzzy")

Weight = Annotated[float, msgspec.Meta(ge=0)]
Ratio = Annotated[float, msgspec.Meta(ge=0, le=1)]
NonNegative = Annotated[int, msgspec.Meta(ge=0)]


class SearchEngineChoice(msgspec.Struct, kw_only=True):
    """A search engine offered as a fallback result."""

    name: str
    url_prefix: str


class CustomSearchEngine(msgspec.Struct, kw_only=True):
    """A search engine triggered by typing one of its aliases first."""

    alias: list[str]
    name: str
    url_prefix: str
    blank: str = ""


def _default_search_engines() -> list[SearchEngineChoice]:
    return [
        SearchEngineChoice(
            name="Google", url_prefix="https://www.google.com/search?q=$s"
        ),
        SearchEngineChoice(name="Bing", url_prefix="https://www.bing.com/search?q=$s"),
        SearchEngineChoice(name="dict.cc", url_prefix="https://www.dict.cc/?s=$s"),
    ]


def _default_custom_search_engines() -> list[CustomSearchEngine]:
    return [
        CustomSearchEngine(
            alias=["g", "google"],
            name="Google",
            url_prefix="https://www.google.com/search?q=$s",
            blank="https://www.google.com",
        ),
        CustomSearchEngine(
            alias=["d", "dict"],
            name="dict.cc",
            url_prefix="https://www.dict.cc/?s=$s",
            blank="https://www.dict.cc",
        ),
    ]


class SearchOptions(msgspec.Struct, kw_only=True):
    """All tunables of the search and ranking engine."""

    # Search
    search_strategy: str = "precise"
    search_max_results: Annotated[int, msgspec.Meta(ge=1)] = 32
    search_min_match_char_length: Annotated[int, msgspec.Meta(ge=1)] = 1
    search_fuzzyness: Ratio = 0.6
    search_debounce_ms: NonNegative = 100
    display_search_match_highlight: bool = True

    # Sources
    enable_tabs: bool = True
    enable_bookmarks: bool = True
    enable_history: bool = True
    enable_search_engines: bool = True
    enable_direct_url: bool = True
    max_recent_tabs_to_show: NonNegative = 16

    # Bookmarks
    bookmarks_ignore_folder_list: list[str] = msgspec.field(default_factory=list)
    detect_duplicate_bookmarks: bool = True

    # History
    history_days_ago: Annotated[float, msgspec.Meta(gt=0)] = 14
    history_max_items: NonNegative = 1024
    history_ignore_list: list[str] = msgspec.field(
        default_factory=lambda: ["extension://"]
    )

    # Search engines
    search_engine_choices: list[SearchEngineChoice] = msgspec.field(
        default_factory=_default_search_engines
    )
    custom_search_engines: list[CustomSearchEngine] = msgspec.field(
        default_factory=_default_custom_search_engines
    )

    # Thresholds
    score_min_score: float = 30
    score_min_search_term_match_ratio: Ratio = 1.0

    # Base scores
    score_bookmark_base: Weight = 100
    score_tab_base: Weight = 70
    score_history_base: Weight = 45
    score_search_engine_base: Weight = 30
    score_custom_search_engine_base: Weight = 400
    score_direct_url_base: Weight = 500

    # Field weights
    score_title_weight: Weight = 1.0
    score_tag_weight: Weight = 0.7
    score_url_weight: Weight = 0.6
    score_folder_weight: Weight = 0.5

    # Bonuses
    score_custom_bonus_score: bool = True
    score_exact_includes_bonus: Weight = 5
    score_exact_includes_bonus_min_chars: NonNegative = 3
    score_exact_starts_with_bonus: Weight = 10
    score_exact_equals_bonus: Weight = 15
    score_exact_tag_match_bonus: Weight = 10
    score_exact_folder_match_bonus: Weight = 5
    score_visited_bonus_score: Weight = 0.5
    score_visited_bonus_score_maximum: Weight = 20
    score_recent_bonus_score_maximum: Weight = 20
    score_open_tab_bonus: Weight = 10
    score_date_added_bonus_score_maximum: Weight = 0
    score_date_added_bonus_score_per_day: Weight = 0.1

    def __post_init__(self):
        if self.search_strategy not in STRATEGIES:
            raise UnsupportedStrategyError(self.search_strategy)

    def to_dict(self) -> dict[str, Any]:
        return msgspec.to_builtins(self)


# Environment variable -> option name
ENV_OVERRIDES = {
    "MARKSEARCH_STRATEGY": "search_strategy",
    "MARKSEARCH_MAX_RESULTS": "search_max_results",
    "MARKSEARCH_MIN_SCORE": "score_min_score",
    "MARKSEARCH_MATCH_RATIO": "score_min_search_term_match_ratio",
}


class Config:
    """Configuration file handling."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Error reading config file: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {path} must contain a mapping, got {type(data).__name__}"
            )
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths to check."""
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        return [
            xdg_config_home / "marksearch" / "config.yaml",
            Path(".marksearch.yaml"),
        ]

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def env_overrides() -> dict[str, Any]:
    """Collect option overrides from the environment."""
    overrides = {}
    for env_name, option in ENV_OVERRIDES.items():
        if (value := os.environ.get(env_name)) is not None:
            overrides[option] = value
    return overrides


def build_options(data: dict[str, Any]) -> SearchOptions:
    """Validate a raw mapping into ``SearchOptions``."""
    try:
        return msgspec.convert(data, SearchOptions, strict=False)
    except msgspec.ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def load_options(
    path: Path | None = None, overrides: dict[str, Any] | None = None
) -> SearchOptions:
    """Load options from config files, the environment and explicit overrides.

    An explicit ``path`` replaces the default search locations. Later sources
    win for conflicting keys.
    """
    config: dict[str, Any] = {}

    paths = [path] if path else Config.get_config_paths()
    for config_path in paths:
        if config_path.exists():
            logger.debug(f"Loading configuration from {config_path}")
            config = Config.merge_configs(config, Config.from_file(config_path))
        elif path:
            raise ConfigurationError(f"Config file not found: {config_path}")

    config = Config.merge_configs(config, env_overrides(), overrides or {})
    return build_options(config)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
