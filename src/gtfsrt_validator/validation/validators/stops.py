"""Stop references in trip updates and vehicle positions.

E011 - stop_id does not appear in GTFS stops.txt
E015 - stop_id does not have location_type=0 in GTFS stops.txt
"""

import logging

from gtfsrt_validator.models.realtime import FeedSnapshot
from gtfsrt_validator.models.results import RuleGroup
from gtfsrt_validator.validation.collector import OccurrenceCollector
from gtfsrt_validator.validation.index import ReferenceIndex
from gtfsrt_validator.validation.rules import Rule
from gtfsrt_validator.validation.validators import (
    require_index,
    trip_update_locator,
    vehicle_locator,
)

logger = logging.getLogger(__name__)


def check_stop_ids(
    current_time: int,
    index: ReferenceIndex | None,
    feed: FeedSnapshot,
    previous_feed: FeedSnapshot | None,
) -> list[RuleGroup]:
    index = require_index(index, "stops")
    collector = OccurrenceCollector(Rule.E011, Rule.E015, log=logger)

    for entity in feed.entities:
        if entity.trip_update is not None:
            locator = trip_update_locator(entity)
            for update in entity.trip_update.stop_time_update:
                if update.stop_id:
                    _check_stop(collector, index, locator, update.stop_id)
        if entity.vehicle is not None and entity.vehicle.stop_id:
            _check_stop(collector, index, vehicle_locator(entity), entity.vehicle.stop_id)

    return collector.groups()


def _check_stop(
    collector: OccurrenceCollector, index: ReferenceIndex, locator: str, stop_id: str
) -> None:
    if stop_id not in index.stop_ids:
        collector.add(Rule.E011, f"{locator} stop_id {stop_id}")
    elif stop_id not in index.platform_stop_ids:
        collector.add(Rule.E015, f"{locator} stop_id {stop_id}")
