"""Tests for the trip descriptor validator."""

import pytest

from gtfsrt_validator.errors import DataError
from gtfsrt_validator.models.realtime import ScheduleRelationship
from gtfsrt_validator.validation.index import ReferenceIndex
from gtfsrt_validator.validation.rules import Rule
from gtfsrt_validator.validation.validators.trip_descriptor import check_trip_descriptor
from util import assert_results, build_index, make_feed, trip_update_entity, vehicle_entity


@pytest.fixture(scope="module")
def index() -> ReferenceIndex:
    return build_index()


def run(index, *entities):
    return check_trip_descriptor(0, index, make_feed(*entities), None)


class TestTripIds:
    """E003, E016 and W006."""

    def test_known_trip_has_no_errors(self, index) -> None:
        assert run(index, trip_update_entity(trip_id="T1")) == []

    def test_missing_trip_id_is_warning_keyed_by_entity(self, index) -> None:
        results = run(index, trip_update_entity(entity_id="ent-7", trip_id=None))
        assert_results({Rule.W006: 1}, results)
        assert results[0].occurrences[0].prefix == "entity ID ent-7"

    def test_empty_trip_id_counts_as_missing(self, index) -> None:
        assert_results({Rule.W006: 1}, run(index, trip_update_entity(trip_id="")))

    def test_unknown_trip_not_added(self, index) -> None:
        results = run(index, trip_update_entity(trip_id="NOPE"))
        assert_results({Rule.E003: 1}, results)
        assert results[0].occurrences[0].prefix == "trip_id NOPE"

    def test_unknown_trip_scheduled_explicitly(self, index) -> None:
        entity = trip_update_entity(
            trip_id="NOPE", schedule_relationship=ScheduleRelationship.SCHEDULED
        )
        assert_results({Rule.E003: 1}, run(index, entity))

    def test_unknown_added_trip_is_valid(self, index) -> None:
        entity = trip_update_entity(
            trip_id="NEW1", schedule_relationship=ScheduleRelationship.ADDED
        )
        assert run(index, entity) == []

    def test_known_added_trip(self, index) -> None:
        entity = trip_update_entity(trip_id="T1", schedule_relationship=ScheduleRelationship.ADDED)
        results = run(index, entity)
        assert_results({Rule.E016: 1}, results)
        assert results[0].occurrences[0].prefix == "trip_id T1"

    def test_vehicle_position_locator_includes_vehicle_id(self, index) -> None:
        results = run(index, vehicle_entity(vehicle_id="BUS9", trip_id="NOPE"))
        assert_results({Rule.E003: 1}, results)
        assert results[0].occurrences[0].prefix == "vehicle_id BUS9 trip_id NOPE"

    def test_vehicle_without_trip_descriptor_is_skipped(self, index) -> None:
        assert run(index, vehicle_entity(trip_id=None)) == []

    def test_same_unknown_trip_reported_once(self, index) -> None:
        results = run(
            index,
            trip_update_entity(entity_id="a", trip_id="NOPE"),
            trip_update_entity(entity_id="b", trip_id="NOPE"),
        )
        assert_results({Rule.E003: 1}, results)


class TestStartTime:
    """E020 and E023."""

    def test_matching_start_time(self, index) -> None:
        assert run(index, trip_update_entity(trip_id="T1", start_time="08:00:00")) == []

    def test_post_midnight_start_time(self, index) -> None:
        assert run(index, trip_update_entity(trip_id="T2", start_time="25:30:00")) == []

    def test_invalid_format_also_mismatches_schedule(self, index) -> None:
        results = run(index, trip_update_entity(trip_id="T1", start_time="8:00:00"))
        assert_results({Rule.E020: 1, Rule.E023: 1}, results)
        assert [g.code for g in results] == ["E020", "E023"]

    def test_mismatch_goes_to_its_own_group(self, index) -> None:
        results = run(index, trip_update_entity(trip_id="T1", start_time="08:05:00"))
        assert_results({Rule.E023: 1}, results)
        assert results[0].occurrences[0].prefix == (
            "GTFS-rt trip_id T1 start_time is 08:05:00 and GTFS initial arrival_time is 08:00:00"
        )

    def test_frequency_trips_skip_schedule_match(self, index) -> None:
        results = run(
            index,
            trip_update_entity(entity_id="a", trip_id="FREQ0", start_time="06:10:00"),
            trip_update_entity(entity_id="b", trip_id="FREQ1", start_time="06:10:00"),
        )
        assert results == []

    def test_unknown_trip_skips_schedule_match(self, index) -> None:
        results = run(index, trip_update_entity(trip_id="NOPE", start_time="12:00:00"))
        assert_results({Rule.E003: 1}, results)

    def test_invalid_format_without_trip_id(self, index) -> None:
        results = run(index, trip_update_entity(trip_id=None, start_time="25:30"))
        assert_results({Rule.W006: 1, Rule.E020: 1}, results)

    def test_trailing_newline_is_invalid(self, index) -> None:
        results = run(index, trip_update_entity(trip_id="FREQ1", start_time="06:00:00\n"))
        assert_results({Rule.E020: 1}, results)


class TestStartDate:
    def test_valid_date(self, index) -> None:
        assert run(index, trip_update_entity(start_date="20240229")) == []

    @pytest.mark.parametrize(
        "value", ["2024-01-01", "20241301", "20230229", "2024011", "20240101\n"]
    )
    def test_invalid_date(self, index, value: str) -> None:
        results = run(index, trip_update_entity(start_date=value))
        assert_results({Rule.E021: 1}, results)
        assert results[0].occurrences[0].prefix == f"trip_id T1 start_date is {value}"


class TestRouteId:
    def test_known_route(self, index) -> None:
        assert run(index, trip_update_entity(route_id="R1")) == []

    def test_unknown_route(self, index) -> None:
        results = run(index, trip_update_entity(route_id="R99"))
        assert_results({Rule.E004: 1}, results)
        assert results[0].occurrences[0].prefix == "route_id R99"

    def test_unknown_route_on_vehicle(self, index) -> None:
        results = run(index, vehicle_entity(vehicle_id="BUS1", route_id="R99"))
        assert results[0].occurrences[0].prefix == "vehicle_id BUS1 route_id R99"

    def test_empty_route_is_ignored(self, index) -> None:
        assert run(index, trip_update_entity(route_id="")) == []


class TestFrequencyScheduleRelationship:
    """E013."""

    def test_unscheduled_is_valid(self, index) -> None:
        entity = trip_update_entity(
            trip_id="FREQ0", schedule_relationship=ScheduleRelationship.UNSCHEDULED
        )
        assert run(index, entity) == []

    def test_empty_is_valid(self, index) -> None:
        assert run(index, trip_update_entity(trip_id="FREQ0")) == []

    def test_scheduled_is_error(self, index) -> None:
        entity = trip_update_entity(
            trip_id="FREQ0", schedule_relationship=ScheduleRelationship.SCHEDULED
        )
        assert_results({Rule.E013: 1}, run(index, entity))

    def test_exact_times_one_is_not_checked(self, index) -> None:
        entity = trip_update_entity(
            trip_id="FREQ1", schedule_relationship=ScheduleRelationship.SCHEDULED
        )
        assert run(index, entity) == []


def test_occurrences_keep_feed_order(index) -> None:
    results = run(
        index,
        trip_update_entity(entity_id="a", trip_id="Z"),
        trip_update_entity(entity_id="b", trip_id="A"),
        trip_update_entity(entity_id="c", trip_id="M"),
    )
    assert [o.prefix for o in results[0].occurrences] == ["trip_id Z", "trip_id A", "trip_id M"]


def test_requires_reference_index() -> None:
    with pytest.raises(DataError):
        check_trip_descriptor(0, None, make_feed(trip_update_entity()), None)
