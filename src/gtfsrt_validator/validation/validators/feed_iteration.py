"""Header timestamp changes between two sequential feed iterations.

E017 - content changed but the header timestamp stayed the same
E018 - header timestamp decreased
"""

import logging

from gtfsrt_validator.models.realtime import FeedSnapshot
from gtfsrt_validator.models.results import RuleGroup
from gtfsrt_validator.validation.collector import OccurrenceCollector
from gtfsrt_validator.validation.index import ReferenceIndex
from gtfsrt_validator.validation.rules import Rule

logger = logging.getLogger(__name__)


def check_header_iteration(
    current_time: int,
    index: ReferenceIndex | None,
    feed: FeedSnapshot,
    previous_feed: FeedSnapshot | None,
) -> list[RuleGroup]:
    if previous_feed is None:
        return []

    timestamp = feed.header.timestamp
    previous_timestamp = previous_feed.header.timestamp
    if not timestamp or not previous_timestamp:
        # W001 covers unpopulated header timestamps
        return []

    collector = OccurrenceCollector(Rule.E017, Rule.E018, log=logger)
    if timestamp < previous_timestamp:
        collector.add(
            Rule.E018,
            f"header timestamp {timestamp} is less than the header timestamp "
            f"{previous_timestamp}",
        )
    elif timestamp == previous_timestamp and feed.entities != previous_feed.entities:
        collector.add(Rule.E017, f"header timestamp {timestamp}")

    return collector.groups()
