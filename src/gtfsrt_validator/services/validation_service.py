"""Validation service: fetch a feed snapshot and validate it against the previous one.

Keeps the last snapshot of each feed URL in module state so that consecutive
iterations can be compared. The reference index is loaded from the configured
GTFS database on first use. Fetch failures are logged and return None;
structural errors in the reference data propagate.
"""

import asyncio
import logging
import time
from pathlib import Path

import httpx

from gtfsrt_validator.data.config import ValidatorConfig, get_validator_config
from gtfsrt_validator.data.gtfsrt_client import GTFSRTClient, parse_feed_message
from gtfsrt_validator.errors import FeedDecodeError
from gtfsrt_validator.models.realtime import FeedSnapshot
from gtfsrt_validator.models.results import RuleGroup, ValidationReport
from gtfsrt_validator.validation.engine import ValidationEngine
from gtfsrt_validator.validation.index import ReferenceIndex

logger = logging.getLogger(__name__)

# Feeds whose previous snapshot is kept; the least recently validated is dropped first
MAX_TRACKED_FEEDS = 64

# Module-level state (lazy-initialized)
_config: ValidatorConfig | None = None
_engine: ValidationEngine | None = None
_index: ReferenceIndex | None = None
# E010 groups of _index, computed once per index
_reference_groups: list[RuleGroup] = []
_index_lock = asyncio.Lock()
_previous_feeds: dict[str, FeedSnapshot] = {}
_feed_locks: dict[str, asyncio.Lock] = {}


def _get_config() -> ValidatorConfig:
    """Get or create the validator config singleton."""
    global _config
    if _config is None:
        _config = get_validator_config()
    return _config


def _get_engine() -> ValidationEngine:
    """Get or create the engine singleton."""
    global _engine
    if _engine is None:
        _engine = ValidationEngine(config=_get_config())
    return _engine


async def get_reference_index(
    db_path: Path | None = None, force_reload: bool = False
) -> ReferenceIndex:
    """Load the reference index from the static GTFS database (cached).

    Raises:
        FileNotFoundError: If the database doesn't exist.
        DataError: If the static data is inconsistent.
    """
    async with _index_lock:
        if _index is None or force_reload:
            _set_index(await ReferenceIndex.from_database(db_path or _get_config().db_path))
        return _index


def set_reference_index(index: ReferenceIndex | None) -> None:
    """Replace the cached reference index (e.g. after a new GTFS ingestion)."""
    _set_index(index)


def _set_index(index: ReferenceIndex | None) -> None:
    global _index, _reference_groups
    _index = index
    _reference_groups = _get_engine().check_reference(index).groups if index is not None else []


def validate_snapshot(
    feed: FeedSnapshot,
    previous_feed: FeedSnapshot | None = None,
    index: ReferenceIndex | None = None,
    current_time: int | None = None,
) -> ValidationReport:
    """Validate an already decoded snapshot."""
    if current_time is None:
        current_time = int(time.time())
    return _get_engine().evaluate(current_time, index, feed, previous_feed)


def validate_feed_bytes(
    data: bytes,
    previous_data: bytes | None = None,
    index: ReferenceIndex | None = None,
    current_time: int | None = None,
) -> ValidationReport:
    """Decode protobuf bytes (and optionally the previous iteration) and validate.

    Raises:
        FeedDecodeError: If either payload is not a valid FeedMessage.
    """
    feed = parse_feed_message(data)
    previous_feed = parse_feed_message(previous_data) if previous_data is not None else None
    return validate_snapshot(feed, previous_feed, index, current_time)


async def validate_feed_url(
    url: str | None = None, current_time: int | None = None
) -> ValidationReport | None:
    """Run one fetch-and-validate iteration for a feed URL.

    The fetched snapshot becomes the previous snapshot for the next iteration
    of the same URL.

    Reference data checks (E010) of the loaded index are appended to the report.

    Returns:
        ValidationReport if the feed was fetched, None if unavailable or error.
    """
    config = _get_config()
    url = url or config.feed_url
    if not url:
        logger.debug("No feed URL given or configured, cannot validate")
        return None

    index = _index
    if index is None:
        try:
            index = await get_reference_index()
        except FileNotFoundError as e:
            logger.warning(f"Reference index not loaded, reference checks will not run: {e}")

    # Serialize iterations per feed so each compares against its true predecessor
    lock = _feed_locks.setdefault(url, asyncio.Lock())
    async with lock:
        try:
            async with GTFSRTClient(config) as client:
                feed = await client.fetch_feed(url)
        except (httpx.HTTPError, FeedDecodeError) as e:
            logger.warning(f"Failed to fetch feed {url}: {e}")
            return None

        previous_feed = _previous_feeds.get(url)
        report = validate_snapshot(feed, previous_feed, index, current_time)
        if index is not None and index is _index:
            report.groups.extend(_reference_groups)
        _remember(url, feed)
        return report


def _remember(url: str, feed: FeedSnapshot) -> None:
    """Store feed as the previous snapshot of url, dropping the oldest feeds past the limit."""
    _previous_feeds.pop(url, None)
    _previous_feeds[url] = feed
    while len(_previous_feeds) > MAX_TRACKED_FEEDS:
        oldest = next(iter(_previous_feeds))
        del _previous_feeds[oldest]
        logger.debug(f"No longer tracking previous snapshot of {oldest}")
    # locks of untracked feeds, unless an iteration holds them
    for stale in [u for u, lock in _feed_locks.items() if u not in _previous_feeds]:
        if not _feed_locks[stale].locked():
            del _feed_locks[stale]


def reset_service() -> None:
    """Reset the service state completely.

    Clears previous snapshots, the cached index and config. Useful for testing.
    """
    global _config, _engine, _index, _reference_groups
    _config = None
    _engine = None
    _index = None
    _reference_groups = []
    _previous_feeds.clear()
    _feed_locks.clear()
    # Clear the lru_cache on get_validator_config so it re-reads .env/environment
    # (hasattr check handles case where function is mocked in tests)
    if hasattr(get_validator_config, "cache_clear"):
        get_validator_config.cache_clear()
