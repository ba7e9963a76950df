"""Tests for stop_id checks (E011, E015)."""

import pytest

from gtfsrt_validator.errors import DataError
from gtfsrt_validator.validation.rules import Rule
from gtfsrt_validator.validation.validators.stops import check_stop_ids
from util import assert_results, build_index, make_feed, trip_update_entity, vehicle_entity


@pytest.fixture(scope="module")
def index():
    return build_index()


def test_platform_stops_are_valid(index):
    feed = make_feed(trip_update_entity(stop_ids=["S1", "S2"]), vehicle_entity(stop_id="S1"))
    assert check_stop_ids(0, index, feed, None) == []


def test_unknown_stop(index):
    feed = make_feed(trip_update_entity(trip_id="T1", stop_ids=["S1", "GONE"]))
    results = check_stop_ids(0, index, feed, None)
    assert_results({Rule.E011: 1}, results)
    assert results[0].occurrences[0].prefix == "trip_id T1 stop_id GONE"


def test_station_stop(index):
    feed = make_feed(vehicle_entity(vehicle_id="V3", stop_id="STATION"))
    results = check_stop_ids(0, index, feed, None)
    assert_results({Rule.E015: 1}, results)
    assert results[0].occurrences[0].prefix == "vehicle_id V3 stop_id STATION"


def test_both_rules_in_declaration_order(index):
    feed = make_feed(
        vehicle_entity(stop_id="STATION"),
        trip_update_entity(stop_ids=["GONE"]),
    )
    results = check_stop_ids(0, index, feed, None)
    assert [g.code for g in results] == ["E011", "E015"]


def test_requires_reference_index():
    with pytest.raises(DataError):
        check_stop_ids(0, None, make_feed(), None)
