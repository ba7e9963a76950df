"""Pydantic models for decoded GTFS-RT feeds.

These mirror the subset of the GTFS-RT FeedMessage that the validator reads.
All models are frozen: a decoded snapshot is never modified after parsing,
and two snapshots compare equal when their fields are equal.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ScheduleRelationship(str, Enum):
    """TripDescriptor.schedule_relationship (GTFS-RT standard enum)."""

    SCHEDULED = "SCHEDULED"
    ADDED = "ADDED"
    UNSCHEDULED = "UNSCHEDULED"
    CANCELED = "CANCELED"
    REPLACEMENT = "REPLACEMENT"
    DUPLICATED = "DUPLICATED"
    DELETED = "DELETED"
    NEW = "NEW"


class FeedModel(BaseModel):
    """Base for immutable feed models."""

    model_config = ConfigDict(frozen=True)


class StopTimeEvent(FeedModel):
    """Predicted arrival or departure at a stop."""

    delay: int | None = None  # seconds late (positive) or early (negative)
    time: int | None = None  # predicted unix timestamp


class StopTimeUpdate(FeedModel):
    """Update for a single stop in a trip."""

    stop_sequence: int | None = None
    stop_id: str | None = None
    arrival: StopTimeEvent | None = None
    departure: StopTimeEvent | None = None


class TripDescriptor(FeedModel):
    """Identifies the trip a trip update or vehicle position refers to."""

    trip_id: str | None = None
    route_id: str | None = None
    direction_id: int | None = None
    start_time: str | None = None  # HH:MM:SS, hours may exceed 23
    start_date: str | None = None  # YYYYMMDD
    schedule_relationship: ScheduleRelationship | None = None

    @property
    def is_added(self) -> bool:
        return self.schedule_relationship == ScheduleRelationship.ADDED


class VehicleDescriptor(FeedModel):
    """Identifies a vehicle."""

    id: str | None = None
    label: str | None = None
    license_plate: str | None = None


class TripUpdate(FeedModel):
    """Real-time update for a single trip."""

    trip: TripDescriptor
    vehicle: VehicleDescriptor | None = None
    stop_time_update: tuple[StopTimeUpdate, ...] = ()
    timestamp: int | None = None
    delay: int | None = None


class Position(FeedModel):
    """Geographic position of a vehicle."""

    latitude: float
    longitude: float
    bearing: float | None = None
    speed: float | None = None  # meters/second


class VehiclePosition(FeedModel):
    """Real-time position of a transit vehicle."""

    trip: TripDescriptor | None = None
    vehicle: VehicleDescriptor | None = None
    position: Position | None = None
    current_stop_sequence: int | None = None
    stop_id: str | None = None
    timestamp: int | None = None


class FeedEntity(FeedModel):
    """One entity of a feed; carries a trip update and/or a vehicle position."""

    id: str
    is_deleted: bool = False
    trip_update: TripUpdate | None = None
    vehicle: VehiclePosition | None = None


class FeedHeader(FeedModel):
    """Header information from a GTFS-RT feed."""

    gtfs_realtime_version: str
    timestamp: int | None = None


class FeedSnapshot(FeedModel):
    """One decoded FeedMessage captured at a point in time."""

    header: FeedHeader
    entities: tuple[FeedEntity, ...] = ()

    @property
    def trip_updates(self) -> list[TripUpdate]:
        """Trip updates in feed order."""
        return [e.trip_update for e in self.entities if e.trip_update is not None]

    @property
    def vehicle_positions(self) -> list[VehiclePosition]:
        """Vehicle positions in feed order."""
        return [e.vehicle for e in self.entities if e.vehicle is not None]
