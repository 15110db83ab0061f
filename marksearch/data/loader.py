"""Loading search data from a platform provider."""

import asyncio
import logging

from marksearch.config import SearchOptions
from marksearch.core.models import SearchData

from .normalizer import RawData, normalize
from .providers import PlatformDataProvider, StaticDataProvider

logger = logging.getLogger(__name__)


async def fetch_raw_data(
    provider: PlatformDataProvider, options: SearchOptions
) -> RawData:
    """Fetch the payloads of all enabled sources concurrently."""
    fetches = {}
    if options.enable_bookmarks:
        fetches["bookmark_tree"] = provider.get_bookmark_tree()
    if options.enable_tabs:
        fetches["tabs"] = provider.get_tabs()
    if options.enable_history:
        fetches["history"] = provider.get_history(
            options.history_days_ago, options.history_max_items
        )

    payloads = await asyncio.gather(*fetches.values())
    return RawData(**dict(zip(fetches, payloads)))


async def load_search_data(
    provider: PlatformDataProvider,
    options: SearchOptions,
    fallback: PlatformDataProvider | None = None,
    now_ms: float | None = None,
) -> SearchData:
    """Fetch and normalize all records.

    If the provider fails, a single warning is logged and the fallback
    dataset (empty unless given) is used instead.
    """
    try:
        raw = await fetch_raw_data(provider, options)
    except Exception as e:
        logger.warning(
            f"Platform data unavailable ({type(e).__name__}: {e}), "
            f"using fallback dataset"
        )
        raw = await fetch_raw_data(fallback or StaticDataProvider(), options)

    return normalize(raw, options, now_ms=now_ms)
