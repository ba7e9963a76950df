"""Feed validators.

Every validator has the signature

    (current_time, index, feed, previous_feed) -> list[RuleGroup]

and only reads its inputs. ``current_time`` is POSIX seconds, ``index`` may
be None when no static data was loaded, ``previous_feed`` is None for the
first snapshot of a feed.
"""

from collections.abc import Callable

from gtfsrt_validator.errors import DataError
from gtfsrt_validator.models.realtime import FeedEntity, FeedSnapshot
from gtfsrt_validator.models.results import RuleGroup
from gtfsrt_validator.validation.index import ReferenceIndex

Validator = Callable[
    [int, ReferenceIndex | None, FeedSnapshot, FeedSnapshot | None], list[RuleGroup]
]


def require_index(index: ReferenceIndex | None, validator: str) -> ReferenceIndex:
    """Return the index, or raise DataError when it was never built."""
    if index is None:
        raise DataError(
            "Reference index not built",
            source=validator,
            suggested_action="load static GTFS data before validating",
        )
    return index


def trip_update_locator(entity: FeedEntity) -> str:
    """'trip_id X' for the entity's trip update, or 'entity ID Y' when there is no trip_id."""
    trip_id = entity.trip_update.trip.trip_id if entity.trip_update else None
    return f"trip_id {trip_id}" if trip_id else f"entity ID {entity.id}"


def vehicle_locator(entity: FeedEntity) -> str:
    """'vehicle_id X' for the entity's vehicle position, or 'entity ID Y' without one."""
    vp = entity.vehicle
    vehicle_id = vp.vehicle.id if vp and vp.vehicle else None
    return f"vehicle_id {vehicle_id}" if vehicle_id else f"entity ID {entity.id}"


__all__ = [
    "Validator",
    "require_index",
    "trip_update_locator",
    "vehicle_locator",
]
