"""Timestamp checks within a single snapshot.

W001 - timestamp not populated (header, trip_update, vehicle)
E001 - timestamp is not POSIX seconds
E012 - trip_update or vehicle timestamp is greater than the header timestamp
"""

import logging

from gtfsrt_validator.models.realtime import FeedSnapshot
from gtfsrt_validator.models.results import RuleGroup
from gtfsrt_validator.validation.collector import OccurrenceCollector
from gtfsrt_validator.validation.index import ReferenceIndex
from gtfsrt_validator.validation.rules import Rule
from gtfsrt_validator.validation.time_utils import is_posix_time
from gtfsrt_validator.validation.validators import trip_update_locator, vehicle_locator

logger = logging.getLogger(__name__)


def check_timestamps(
    current_time: int,
    index: ReferenceIndex | None,
    feed: FeedSnapshot,
    previous_feed: FeedSnapshot | None,
) -> list[RuleGroup]:
    collector = OccurrenceCollector(Rule.W001, Rule.E001, Rule.E012, log=logger)

    # an unset header timestamp decodes as None, some producers send 0
    header_timestamp = feed.header.timestamp or None
    if header_timestamp is None:
        collector.add(Rule.W001, "header")
    elif not is_posix_time(header_timestamp):
        collector.add(Rule.E001, f"header timestamp {header_timestamp}")

    for entity in feed.entities:
        if entity.trip_update is not None:
            _check_entity(
                collector,
                trip_update_locator(entity),
                entity.trip_update.timestamp,
                header_timestamp,
            )
        if entity.vehicle is not None:
            _check_entity(
                collector, vehicle_locator(entity), entity.vehicle.timestamp, header_timestamp
            )

    return collector.groups()


def _check_entity(
    collector: OccurrenceCollector,
    locator: str,
    timestamp: int | None,
    header_timestamp: int | None,
) -> None:
    if not timestamp:
        collector.add(Rule.W001, locator)
        return
    if not is_posix_time(timestamp):
        collector.add(Rule.E001, f"{locator} timestamp {timestamp}")
    if header_timestamp is not None and timestamp > header_timestamp:
        collector.add(Rule.E012, f"{locator} timestamp {timestamp}")
