"""Checks on the TripDescriptor of trip updates and vehicle positions.

E003 - trip_id does not appear in GTFS data (unless schedule_relationship is ADDED)
E004 - route_id does not appear in GTFS data
E013 - frequency exact_times=0 trip schedule_relationship is not UNSCHEDULED or empty
E016 - trip_id with schedule_relationship ADDED appears in GTFS data
E020 - invalid start_time format
E021 - invalid start_date format
E023 - start_time does not match the GTFS initial arrival_time
W006 - trip descriptor missing trip_id
"""

import logging

from gtfsrt_validator.models.realtime import FeedSnapshot, ScheduleRelationship, TripDescriptor
from gtfsrt_validator.models.results import RuleGroup
from gtfsrt_validator.validation.collector import OccurrenceCollector
from gtfsrt_validator.validation.index import ReferenceIndex
from gtfsrt_validator.validation.rules import Rule
from gtfsrt_validator.validation.time_utils import (
    is_valid_date_format,
    is_valid_time_format,
    seconds_to_clock,
)
from gtfsrt_validator.validation.validators import require_index

logger = logging.getLogger(__name__)


def check_trip_descriptor(
    current_time: int,
    index: ReferenceIndex | None,
    feed: FeedSnapshot,
    previous_feed: FeedSnapshot | None,
) -> list[RuleGroup]:
    index = require_index(index, "trip_descriptor")
    collector = OccurrenceCollector(
        Rule.E003,
        Rule.E004,
        Rule.E013,
        Rule.E016,
        Rule.E020,
        Rule.E021,
        Rule.E023,
        Rule.W006,
        log=logger,
    )

    for entity in feed.entities:
        if entity.trip_update is not None:
            _check(collector, index, entity.trip_update.trip, entity.id, prefix="")
        if entity.vehicle is not None and entity.vehicle.trip is not None:
            vehicle = entity.vehicle.vehicle
            vehicle_id = vehicle.id if vehicle else None
            _check(
                collector,
                index,
                entity.vehicle.trip,
                entity.id,
                prefix=f"vehicle_id {vehicle_id} ",
            )

    return collector.groups()


def _check(
    collector: OccurrenceCollector,
    index: ReferenceIndex,
    trip: TripDescriptor,
    entity_id: str,
    prefix: str,
) -> None:
    """Run every descriptor rule for one trip descriptor.

    prefix is prepended to trip_id/route_id locators of vehicle positions.
    """
    trip_id = trip.trip_id or None
    locator = f"{prefix}trip_id {trip_id}"

    if trip_id is None:
        collector.add(Rule.W006, f"entity ID {entity_id}")
    elif trip_id not in index.trip_ids:
        if not trip.is_added:
            collector.add(Rule.E003, locator)
    elif trip.is_added:
        collector.add(Rule.E016, locator)

    if (
        trip_id is not None
        and trip_id in index.exact_times_zero_trip_ids
        and trip.schedule_relationship is not None
        and trip.schedule_relationship != ScheduleRelationship.UNSCHEDULED
    ):
        collector.add(
            Rule.E013, f"{locator} schedule_relationship {trip.schedule_relationship.value}"
        )

    if trip.start_time is not None:
        start_time = trip.start_time
        if not is_valid_time_format(start_time):
            collector.add(Rule.E020, f"{locator} start_time is {start_time}")
        # only scheduled (non-frequencies.txt) trips known to the static data
        if (
            trip_id is not None
            and trip_id in index.trip_ids
            and not index.is_frequency_trip(trip_id)
        ):
            first_arrival = seconds_to_clock(index.first_arrival_time(trip_id))
            if start_time != first_arrival:
                collector.add(
                    Rule.E023,
                    f"GTFS-rt {locator} start_time is {start_time} and GTFS initial "
                    f"arrival_time is {first_arrival}",
                )

    if trip.start_date is not None and not is_valid_date_format(trip.start_date):
        collector.add(Rule.E021, f"{locator} start_date is {trip.start_date}")

    route_id = trip.route_id
    if route_id and route_id not in index.route_ids:
        collector.add(Rule.E004, f"{prefix}route_id {route_id}")
