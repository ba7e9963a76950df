"""Tests for vehicle checks (W002, W003, W004)."""

from gtfsrt_validator.validation.rules import Rule
from gtfsrt_validator.validation.validators.vehicles import check_vehicles
from util import assert_results, make_feed, trip_update_entity, vehicle_entity


def run(*entities, **kwargs):
    return check_vehicles(0, None, make_feed(*entities), None, **kwargs)


class TestVehicleId:
    def test_populated(self):
        assert run(trip_update_entity(), vehicle_entity()) == []

    def test_trip_update_without_vehicle(self):
        results = run(trip_update_entity(trip_id="T1", vehicle_id=None))
        assert_results({Rule.W002: 1}, results)
        assert results[0].occurrences[0].prefix == "trip_id T1"

    def test_vehicle_position_without_vehicle(self):
        results = run(vehicle_entity(entity_id="v9", vehicle_id=None, trip_id="T1"))
        assert_results({Rule.W002: 1}, results)
        assert results[0].occurrences[0].prefix == "entity ID v9 trip_id T1"


class TestFeedMismatch:
    def test_only_trip_updates_is_not_compared(self):
        assert run(trip_update_entity(trip_id="T1"), trip_update_entity("e2", trip_id="T2")) == []

    def test_trip_missing_on_each_side(self):
        results = run(
            trip_update_entity(trip_id="T1", vehicle_id="V1"),
            trip_update_entity("e2", trip_id="T2", vehicle_id="V2"),
            vehicle_entity(vehicle_id="V1", trip_id="T1"),
            vehicle_entity("v2", vehicle_id="V2", trip_id="T3"),
        )
        assert_results({Rule.W003: 2}, results)
        assert [o.prefix for o in results[0].occurrences] == ["trip_id T2", "trip_id T3"]

    def test_vehicle_missing(self):
        results = run(
            trip_update_entity(trip_id="T1", vehicle_id="V1"),
            vehicle_entity(vehicle_id="V8", trip_id="T1"),
        )
        assert [o.prefix for o in results[0].occurrences] == ["vehicle_id V1", "vehicle_id V8"]


class TestSpeed:
    def test_plausible_speed(self):
        assert run(vehicle_entity(speed=12.5)) == []

    def test_too_fast(self):
        results = run(vehicle_entity(vehicle_id="V1", speed=80.0))
        assert_results({Rule.W004: 1}, results)
        assert results[0].occurrences[0].prefix == "vehicle_id V1 speed 80.0 m/s"

    def test_negative(self):
        assert_results({Rule.W004: 1}, run(vehicle_entity(speed=-1.0)))

    def test_configured_range(self):
        assert run(vehicle_entity(speed=80.0), max_speed=100.0) == []
        assert_results({Rule.W004: 1}, run(vehicle_entity(speed=5.0), min_speed=10.0))
