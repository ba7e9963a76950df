"""Pre-computed, read-only lookups over a static GTFS dataset.

The ReferenceIndex is built once per dataset and shared by every validation
run. Lookups are hash-based and never modify the index.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

import aiosqlite

from gtfsrt_validator.data.database import get_db
from gtfsrt_validator.errors import DataError
from gtfsrt_validator.models.gtfs import Frequency, Route, Stop, StopTime, Trip
from gtfsrt_validator.validation.time_utils import gtfs_time_to_seconds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexedStopTime:
    """Stop time with times converted to seconds since midnight."""

    stop_id: str
    stop_sequence: int
    arrival_time: int | None  # may exceed 86400 for trips past midnight
    departure_time: int | None


@dataclass(frozen=True)
class ReferenceIndex:
    """Static schedule lookups used by the validators.

    Usage:
        index = ReferenceIndex.build(routes, stops, trips, stop_times, frequencies)
        index = await ReferenceIndex.from_database(db_path)
    """

    trip_ids: frozenset[str]
    route_ids: frozenset[str]
    stop_ids: frozenset[str]
    platform_stop_ids: frozenset[str]  # location_type 0 or empty
    trip_stop_times: Mapping[str, tuple[IndexedStopTime, ...]]  # sorted by stop_sequence
    exact_times_zero_trip_ids: frozenset[str]
    exact_times_one_trips: Mapping[str, tuple[Frequency, ...]]
    # stops referenced from stop_times.txt whose location_type is not 0
    non_platform_stop_time_stop_ids: tuple[str, ...] = ()

    @classmethod
    def build(
        cls,
        routes: Iterable[Route],
        stops: Iterable[Stop],
        trips: Iterable[Trip],
        stop_times: Iterable[StopTime],
        frequencies: Iterable[Frequency] = (),
    ) -> "ReferenceIndex":
        """Build the index from static GTFS rows.

        Raises:
            DataError: If the static dataset is not referentially consistent.
        """
        route_ids = frozenset(r.route_id for r in routes)

        trip_ids: set[str] = set()
        for trip in trips:
            if trip.route_id not in route_ids:
                raise DataError(
                    f"trip_id {trip.trip_id} references unknown route_id {trip.route_id}",
                    source="trips.txt",
                )
            trip_ids.add(trip.trip_id)

        stops_by_id = {s.stop_id: s for s in stops}
        platform_stop_ids = frozenset(s.stop_id for s in stops_by_id.values() if s.is_platform)

        by_trip: dict[str, list[IndexedStopTime]] = {}
        non_platform: set[str] = set()
        for st in stop_times:
            if st.trip_id not in trip_ids:
                raise DataError(
                    f"stop_time references unknown trip_id {st.trip_id}",
                    source="stop_times.txt",
                )
            if st.stop_id not in stops_by_id:
                raise DataError(
                    f"stop_time for trip_id {st.trip_id} references unknown stop_id {st.stop_id}",
                    source="stop_times.txt",
                )
            if st.stop_id not in platform_stop_ids:
                non_platform.add(st.stop_id)
            by_trip.setdefault(st.trip_id, []).append(
                IndexedStopTime(
                    stop_id=st.stop_id,
                    stop_sequence=st.stop_sequence,
                    arrival_time=_to_seconds(st.arrival_time, st.trip_id),
                    departure_time=_to_seconds(st.departure_time, st.trip_id),
                )
            )

        trip_stop_times: dict[str, tuple[IndexedStopTime, ...]] = {}
        for trip_id in sorted(trip_ids):
            times = by_trip.get(trip_id)
            if not times:
                raise DataError(f"trip_id {trip_id} has no stop_times", source="stop_times.txt")
            times.sort(key=lambda t: t.stop_sequence)
            if times[0].arrival_time is None:
                raise DataError(
                    f"first stop_time of trip_id {trip_id} has no arrival_time",
                    source="stop_times.txt",
                )
            trip_stop_times[trip_id] = tuple(times)

        exact_zero: set[str] = set()
        exact_one: dict[str, list[Frequency]] = {}
        for freq in frequencies:
            if freq.trip_id not in trip_ids:
                raise DataError(
                    f"frequency references unknown trip_id {freq.trip_id}",
                    source="frequencies.txt",
                )
            if freq.exact_times == 1:
                exact_one.setdefault(freq.trip_id, []).append(freq)
            elif freq.exact_times == 0:
                exact_zero.add(freq.trip_id)
            else:
                raise DataError(
                    f"frequency for trip_id {freq.trip_id} has invalid exact_times "
                    f"{freq.exact_times}",
                    source="frequencies.txt",
                )

        index = cls(
            trip_ids=frozenset(trip_ids),
            route_ids=route_ids,
            stop_ids=frozenset(stops_by_id),
            platform_stop_ids=platform_stop_ids,
            trip_stop_times=MappingProxyType(trip_stop_times),
            exact_times_zero_trip_ids=frozenset(exact_zero),
            exact_times_one_trips=MappingProxyType(
                {trip_id: tuple(f) for trip_id, f in exact_one.items()}
            ),
            non_platform_stop_time_stop_ids=tuple(sorted(non_platform)),
        )
        logger.info(
            f"ReferenceIndex built: {len(index.trip_ids)} trips, {len(index.route_ids)} routes, "
            f"{len(index.stop_ids)} stops, {len(exact_zero) + len(exact_one)} frequency trips"
        )
        return index

    @classmethod
    async def from_database(cls, db_path: Path | None = None) -> "ReferenceIndex":
        """Load static rows from the SQLite database and build the index.

        Raises:
            FileNotFoundError: If the database file doesn't exist.
            DataError: If the static dataset is not referentially consistent.
        """
        async with get_db(db_path) as db:
            logger.info("Loading ReferenceIndex from database...")
            routes = [Route(**row) async for row in _rows(db, "routes", Route)]
            stops = [Stop(**row) async for row in _rows(db, "stops", Stop)]
            trips = [Trip(**row) async for row in _rows(db, "trips", Trip)]
            stop_times = [StopTime(**row) async for row in _rows(db, "stop_times", StopTime)]
            frequencies = [
                Frequency(**row) async for row in _rows(db, "frequencies", Frequency)
            ]

        return cls.build(routes, stops, trips, stop_times, frequencies)

    def is_frequency_trip(self, trip_id: str) -> bool:
        """True if the trip is defined in frequencies.txt (either exact_times value)."""
        return trip_id in self.exact_times_zero_trip_ids or trip_id in self.exact_times_one_trips

    def first_arrival_time(self, trip_id: str) -> int:
        """Arrival time (seconds since midnight) of the trip's first stop_time.

        Raises:
            KeyError: If the trip is not in the static data.
        """
        first = self.trip_stop_times[trip_id][0]
        return first.arrival_time  # type: ignore[return-value]


def _to_seconds(value: str | None, trip_id: str) -> int | None:
    if value is None or value.strip() == "":
        return None
    try:
        return gtfs_time_to_seconds(value)
    except ValueError as e:
        raise DataError(
            f"stop_time for trip_id {trip_id} has invalid time {value}", source="stop_times.txt"
        ) from e


async def _rows(db: aiosqlite.Connection, table: str, model: type):
    """Yield table rows as dicts limited to the model's fields."""
    columns = list(model.model_fields)
    async with db.execute(f"SELECT {','.join(columns)} FROM {table}") as cursor:
        async for row in cursor:
            yield {col: row[col] for col in columns if row[col] is not None}
