"""Shared builders and assertions for validator tests."""

from gtfsrt_validator.models.gtfs import Frequency, Route, Stop, StopTime, Trip
from gtfsrt_validator.models.realtime import (
    FeedEntity,
    FeedHeader,
    FeedSnapshot,
    Position,
    ScheduleRelationship,
    StopTimeUpdate,
    TripDescriptor,
    TripUpdate,
    VehicleDescriptor,
    VehiclePosition,
)
from gtfsrt_validator.models.results import RuleGroup
from gtfsrt_validator.validation.index import ReferenceIndex
from gtfsrt_validator.validation.rules import Rule

HEADER_TIMESTAMP = 1700000000


def assert_results(expected: dict[Rule, int], results: list[RuleGroup]) -> None:
    """Assert the number of occurrences per rule; every other rule must have none."""
    counts = {group.code: group.count for group in results}
    for rule in Rule:
        assert counts.get(rule.code, 0) == expected.get(rule, 0), (
            f"{rule.code}: expected {expected.get(rule, 0)}, got {counts.get(rule.code, 0)}"
        )
    # a group is only emitted when it has occurrences
    assert all(group.count > 0 for group in results)


def build_index() -> ReferenceIndex:
    """Small static dataset.

    T1: scheduled, first arrival 08:00:00 (rows given out of order)
    T2: scheduled, first arrival 25:30:00
    FREQ0: frequencies.txt exact_times=0
    FREQ1: frequencies.txt exact_times=1
    STATION is a location_type=1 stop referenced from stop_times (E010)
    """
    routes = [
        Route(route_id="R1", route_type=3),
        Route(route_id="R2", route_type=3),
    ]
    stops = [
        Stop(stop_id="S1", stop_name="Main St", location_type=0),
        Stop(stop_id="S2", stop_name="Oak Ave"),
        Stop(stop_id="STATION", stop_name="Central Station", location_type=1),
    ]
    trips = [
        Trip(trip_id="T1", route_id="R1", service_id="WEEKDAY"),
        Trip(trip_id="T2", route_id="R1", service_id="WEEKDAY"),
        Trip(trip_id="FREQ0", route_id="R2", service_id="WEEKDAY"),
        Trip(trip_id="FREQ1", route_id="R2", service_id="WEEKDAY"),
        Trip(trip_id="T3", route_id="R2", service_id="WEEKDAY"),
    ]
    stop_times = [
        StopTime(trip_id="T1", arrival_time="08:10:00", departure_time="08:10:00",
                 stop_id="S2", stop_sequence=2),
        StopTime(trip_id="T1", arrival_time="08:00:00", departure_time="08:00:00",
                 stop_id="S1", stop_sequence=1),
        StopTime(trip_id="T2", arrival_time="25:30:00", departure_time="25:30:00",
                 stop_id="S1", stop_sequence=1),
        StopTime(trip_id="T2", arrival_time="25:45:00", departure_time="25:45:00",
                 stop_id="S2", stop_sequence=2),
        StopTime(trip_id="FREQ0", arrival_time="00:00:00", departure_time="00:00:00",
                 stop_id="S1", stop_sequence=1),
        StopTime(trip_id="FREQ1", arrival_time="00:00:00", departure_time="00:00:00",
                 stop_id="S1", stop_sequence=1),
        StopTime(trip_id="T3", arrival_time="09:00:00", departure_time="09:00:00",
                 stop_id="STATION", stop_sequence=1),
    ]
    frequencies = [
        Frequency(trip_id="FREQ0", start_time="06:00:00", end_time="10:00:00",
                  headway_secs=600, exact_times=0),
        Frequency(trip_id="FREQ1", start_time="06:00:00", end_time="10:00:00",
                  headway_secs=600, exact_times=1),
    ]
    return ReferenceIndex.build(routes, stops, trips, stop_times, frequencies)


def trip_update_entity(
    entity_id: str = "e1",
    trip_id: str | None = "T1",
    route_id: str | None = None,
    start_time: str | None = None,
    start_date: str | None = None,
    schedule_relationship: ScheduleRelationship | None = None,
    vehicle_id: str | None = "V1",
    timestamp: int | None = HEADER_TIMESTAMP,
    stop_sequences: list[int] | None = None,
    stop_ids: list[str] | None = None,
) -> FeedEntity:
    """Trip update entity; fully populated by default so it raises no warnings."""
    updates: list[StopTimeUpdate] = []
    for seq in stop_sequences or []:
        updates.append(StopTimeUpdate(stop_sequence=seq))
    for stop_id in stop_ids or []:
        updates.append(StopTimeUpdate(stop_id=stop_id))
    return FeedEntity(
        id=entity_id,
        trip_update=TripUpdate(
            trip=TripDescriptor(
                trip_id=trip_id,
                route_id=route_id,
                start_time=start_time,
                start_date=start_date,
                schedule_relationship=schedule_relationship,
            ),
            vehicle=VehicleDescriptor(id=vehicle_id) if vehicle_id else None,
            stop_time_update=updates,
            timestamp=timestamp,
        ),
    )


def vehicle_entity(
    entity_id: str = "v1",
    vehicle_id: str | None = "V1",
    trip_id: str | None = "T1",
    route_id: str | None = None,
    start_time: str | None = None,
    schedule_relationship: ScheduleRelationship | None = None,
    speed: float | None = None,
    stop_id: str | None = None,
    timestamp: int | None = HEADER_TIMESTAMP,
) -> FeedEntity:
    """Vehicle position entity; fully populated by default so it raises no warnings."""
    trip = None
    if trip_id is not None or route_id is not None or start_time is not None:
        trip = TripDescriptor(
            trip_id=trip_id,
            route_id=route_id,
            start_time=start_time,
            schedule_relationship=schedule_relationship,
        )
    return FeedEntity(
        id=entity_id,
        vehicle=VehiclePosition(
            trip=trip,
            vehicle=VehicleDescriptor(id=vehicle_id) if vehicle_id else None,
            position=Position(latitude=45.5, longitude=-73.6, speed=speed),
            stop_id=stop_id,
            timestamp=timestamp,
        ),
    )


def make_feed(*entities: FeedEntity, timestamp: int | None = HEADER_TIMESTAMP) -> FeedSnapshot:
    return FeedSnapshot(
        header=FeedHeader(gtfs_realtime_version="2.0", timestamp=timestamp),
        entities=list(entities),
    )
