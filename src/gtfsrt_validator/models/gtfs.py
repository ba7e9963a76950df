"""Pydantic models for the static GTFS rows the reference index is built from."""

from pydantic import BaseModel


class Route(BaseModel):
    """GTFS route entity."""

    route_id: str
    agency_id: str | None = None
    route_short_name: str | None = None
    route_long_name: str | None = None
    route_type: int


class Stop(BaseModel):
    """GTFS stop entity."""

    stop_id: str
    stop_code: str | None = None
    stop_name: str | None = None
    stop_lat: float | None = None
    stop_lon: float | None = None
    location_type: int | None = None  # 0 or empty=stop/platform, 1=station, 2=entrance
    parent_station: str | None = None

    @property
    def is_platform(self) -> bool:
        return self.location_type in (None, 0)


class Trip(BaseModel):
    """GTFS trip entity."""

    trip_id: str
    route_id: str
    service_id: str
    trip_headsign: str | None = None
    direction_id: int | None = None
    block_id: str | None = None
    shape_id: str | None = None


class StopTime(BaseModel):
    """GTFS stop_times entity."""

    trip_id: str
    arrival_time: str | None = None  # HH:MM:SS (can exceed 24:00:00)
    departure_time: str | None = None
    stop_id: str
    stop_sequence: int


class Frequency(BaseModel):
    """GTFS frequencies entity."""

    trip_id: str
    start_time: str  # HH:MM:SS
    end_time: str  # HH:MM:SS
    headway_secs: int
    exact_times: int = 0  # 0=frequency-based, 1=schedule-based repeats
