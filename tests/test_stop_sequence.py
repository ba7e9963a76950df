"""Tests for stop_sequence ordering (E002)."""

from gtfsrt_validator.models.realtime import FeedEntity, StopTimeUpdate, TripDescriptor, TripUpdate
from gtfsrt_validator.validation.rules import Rule
from gtfsrt_validator.validation.validators.stop_sequence import check_stop_sequence
from util import assert_results, make_feed, trip_update_entity


def run(*entities):
    return check_stop_sequence(0, None, make_feed(*entities), None)


def test_increasing_sequence_is_valid():
    assert run(trip_update_entity(stop_sequences=[1, 2, 3])) == []


def test_repeated_sequence_reported_once():
    results = run(trip_update_entity(trip_id="T1", stop_sequences=[1, 2, 2, 5]))
    assert_results({Rule.E002: 1}, results)
    assert results[0].occurrences[0].prefix == "trip_id T1 stop_sequence 2 follows stop_sequence 2"


def test_decreasing_sequence():
    results = run(trip_update_entity(trip_id="T1", stop_sequences=[1, 5, 3, 4]))
    assert_results({Rule.E002: 1}, results)
    assert results[0].occurrences[0].prefix == "trip_id T1 stop_sequence 3 follows stop_sequence 5"


def test_each_trip_update_checked_separately():
    results = run(
        trip_update_entity(entity_id="a", trip_id="T1", stop_sequences=[3, 1]),
        trip_update_entity(entity_id="b", trip_id="T2", stop_sequences=[1, 3]),
        trip_update_entity(entity_id="c", trip_id="T3", stop_sequences=[2, 2]),
    )
    assert_results({Rule.E002: 2}, results)
    assert [o.prefix.split(" stop_sequence")[0] for o in results[0].occurrences] == [
        "trip_id T1",
        "trip_id T3",
    ]


def test_updates_without_stop_sequence_are_skipped():
    entity = FeedEntity(
        id="e1",
        trip_update=TripUpdate(
            trip=TripDescriptor(trip_id="T1"),
            stop_time_update=[
                StopTimeUpdate(stop_sequence=1),
                StopTimeUpdate(stop_id="S1"),
                StopTimeUpdate(stop_sequence=2),
            ],
        ),
    )
    assert run(entity) == []


def test_runs_without_reference_index():
    assert run(trip_update_entity(stop_sequences=[2, 1])) != []
