"""E002 - stop_time_updates must be sorted by strictly increasing stop_sequence."""

import logging

from gtfsrt_validator.models.realtime import FeedSnapshot
from gtfsrt_validator.models.results import RuleGroup
from gtfsrt_validator.validation.collector import OccurrenceCollector
from gtfsrt_validator.validation.index import ReferenceIndex
from gtfsrt_validator.validation.rules import Rule
from gtfsrt_validator.validation.validators import trip_update_locator

logger = logging.getLogger(__name__)


def check_stop_sequence(
    current_time: int,
    index: ReferenceIndex | None,
    feed: FeedSnapshot,
    previous_feed: FeedSnapshot | None,
) -> list[RuleGroup]:
    collector = OccurrenceCollector(Rule.E002, log=logger)

    for entity in feed.entities:
        if entity.trip_update is None:
            continue
        locator = trip_update_locator(entity)
        previous: int | None = None
        for update in entity.trip_update.stop_time_update:
            # updates identified only by stop_id can't be ordered
            if update.stop_sequence is None:
                continue
            if previous is not None and update.stop_sequence <= previous:
                collector.add(
                    Rule.E002,
                    f"{locator} stop_sequence {update.stop_sequence} follows "
                    f"stop_sequence {previous}",
                )
            previous = update.stop_sequence

    return collector.groups()
