"""Vehicle checks.

W002 - vehicle_id not populated on a trip update or vehicle position
W003 - trip_id or vehicle_id present in only one of trip updates and vehicle positions
W004 - vehicle position speed outside the plausible range
"""

import logging

from gtfsrt_validator.models.realtime import FeedSnapshot
from gtfsrt_validator.models.results import RuleGroup
from gtfsrt_validator.validation.collector import OccurrenceCollector
from gtfsrt_validator.validation.index import ReferenceIndex
from gtfsrt_validator.validation.rules import Rule
from gtfsrt_validator.validation.validators import trip_update_locator, vehicle_locator

logger = logging.getLogger(__name__)

DEFAULT_MIN_SPEED = 0.0
DEFAULT_MAX_SPEED = 44.7  # meters/second, ~100 mph


def check_vehicles(
    current_time: int,
    index: ReferenceIndex | None,
    feed: FeedSnapshot,
    previous_feed: FeedSnapshot | None,
    *,
    min_speed: float = DEFAULT_MIN_SPEED,
    max_speed: float = DEFAULT_MAX_SPEED,
) -> list[RuleGroup]:
    collector = OccurrenceCollector(Rule.W002, Rule.W003, Rule.W004, log=logger)

    # ordered sets (dict keys) of ids seen on each side
    tu_trip_ids: dict[str, None] = {}
    tu_vehicle_ids: dict[str, None] = {}
    vp_trip_ids: dict[str, None] = {}
    vp_vehicle_ids: dict[str, None] = {}
    has_trip_updates = False
    has_vehicle_positions = False

    for entity in feed.entities:
        tu = entity.trip_update
        if tu is not None:
            has_trip_updates = True
            if tu.trip.trip_id:
                tu_trip_ids[tu.trip.trip_id] = None
            if tu.vehicle is not None and tu.vehicle.id:
                tu_vehicle_ids[tu.vehicle.id] = None
            else:
                collector.add(Rule.W002, trip_update_locator(entity))

        vp = entity.vehicle
        if vp is not None:
            has_vehicle_positions = True
            if vp.trip is not None and vp.trip.trip_id:
                vp_trip_ids[vp.trip.trip_id] = None
            if vp.vehicle is not None and vp.vehicle.id:
                vp_vehicle_ids[vp.vehicle.id] = None
            else:
                trip_id = vp.trip.trip_id if vp.trip else None
                collector.add(
                    Rule.W002,
                    f"entity ID {entity.id}" + (f" trip_id {trip_id}" if trip_id else ""),
                )

            speed = vp.position.speed if vp.position is not None else None
            if speed is not None and not (min_speed <= speed <= max_speed):
                collector.add(Rule.W004, f"{vehicle_locator(entity)} speed {speed} m/s")

    if has_trip_updates and has_vehicle_positions:
        _check_mismatch(collector, "trip_id", tu_trip_ids, vp_trip_ids)
        # vehicle_ids can only be compared when both sides populate them
        if tu_vehicle_ids and vp_vehicle_ids:
            _check_mismatch(collector, "vehicle_id", tu_vehicle_ids, vp_vehicle_ids)

    return collector.groups()


def _check_mismatch(
    collector: OccurrenceCollector,
    field: str,
    trip_update_ids: dict[str, None],
    vehicle_ids: dict[str, None],
) -> None:
    for value in trip_update_ids:
        if value not in vehicle_ids:
            collector.add(Rule.W003, f"{field} {value}")
    for value in vehicle_ids:
        if value not in trip_update_ids:
            collector.add(Rule.W003, f"{field} {value}")
