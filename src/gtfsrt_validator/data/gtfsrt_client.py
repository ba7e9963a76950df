"""Decoding of GTFS-RT protobuf feeds and an async client to fetch them."""

import logging

import httpx
from google.protobuf.message import DecodeError
from google.transit import gtfs_realtime_pb2

from gtfsrt_validator.data.config import ValidatorConfig
from gtfsrt_validator.errors import FeedDecodeError
from gtfsrt_validator.models.realtime import (
    FeedEntity,
    FeedHeader,
    FeedSnapshot,
    Position,
    ScheduleRelationship,
    StopTimeEvent,
    StopTimeUpdate,
    TripDescriptor,
    TripUpdate,
    VehicleDescriptor,
    VehiclePosition,
)

logger = logging.getLogger(__name__)


def parse_feed_message(data: bytes) -> FeedSnapshot:
    """Decode serialized FeedMessage bytes into a FeedSnapshot.

    Raises:
        FeedDecodeError: If the bytes are not a valid FeedMessage.
    """
    feed = gtfs_realtime_pb2.FeedMessage()
    try:
        feed.ParseFromString(data)
    except DecodeError as e:
        raise FeedDecodeError(f"Could not decode GTFS-RT feed: {e}", source="protobuf") from e
    return feed_from_message(feed)


def feed_from_message(feed: gtfs_realtime_pb2.FeedMessage) -> FeedSnapshot:
    """Convert a parsed protobuf FeedMessage into a FeedSnapshot."""
    header = FeedHeader(
        gtfs_realtime_version=feed.header.gtfs_realtime_version,
        timestamp=feed.header.timestamp if feed.header.HasField("timestamp") else None,
    )
    entities = [_parse_entity(entity) for entity in feed.entity]
    return FeedSnapshot(header=header, entities=entities)


def _parse_entity(entity: gtfs_realtime_pb2.FeedEntity) -> FeedEntity:
    trip_update = None
    if entity.HasField("trip_update"):
        trip_update = _parse_trip_update(entity.trip_update)

    vehicle = None
    if entity.HasField("vehicle"):
        vehicle = _parse_vehicle_position(entity.vehicle)

    return FeedEntity(
        id=entity.id,
        is_deleted=entity.is_deleted,
        trip_update=trip_update,
        vehicle=vehicle,
    )


def _parse_trip_update(tu: gtfs_realtime_pb2.TripUpdate) -> TripUpdate:
    """Parse a single trip update."""
    return TripUpdate(
        trip=_parse_trip_descriptor(tu.trip),
        vehicle=_parse_vehicle_descriptor(tu.vehicle) if tu.HasField("vehicle") else None,
        stop_time_update=[_parse_stop_time_update(stu) for stu in tu.stop_time_update],
        timestamp=tu.timestamp if tu.HasField("timestamp") else None,
        delay=tu.delay if tu.HasField("delay") else None,
    )


def _parse_stop_time_update(stu: gtfs_realtime_pb2.TripUpdate.StopTimeUpdate) -> StopTimeUpdate:
    """Parse a single stop time update."""
    return StopTimeUpdate(
        stop_sequence=stu.stop_sequence if stu.HasField("stop_sequence") else None,
        stop_id=stu.stop_id if stu.HasField("stop_id") else None,
        arrival=_parse_stop_time_event(stu.arrival) if stu.HasField("arrival") else None,
        departure=_parse_stop_time_event(stu.departure) if stu.HasField("departure") else None,
    )


def _parse_stop_time_event(event: gtfs_realtime_pb2.TripUpdate.StopTimeEvent) -> StopTimeEvent:
    return StopTimeEvent(
        delay=event.delay if event.HasField("delay") else None,
        time=event.time if event.HasField("time") else None,
    )


def _parse_vehicle_position(vp: gtfs_realtime_pb2.VehiclePosition) -> VehiclePosition:
    """Parse a single vehicle position."""
    position = None
    if vp.HasField("position"):
        position = Position(
            latitude=vp.position.latitude,
            longitude=vp.position.longitude,
            bearing=vp.position.bearing if vp.position.HasField("bearing") else None,
            speed=vp.position.speed if vp.position.HasField("speed") else None,
        )

    return VehiclePosition(
        trip=_parse_trip_descriptor(vp.trip) if vp.HasField("trip") else None,
        vehicle=_parse_vehicle_descriptor(vp.vehicle) if vp.HasField("vehicle") else None,
        position=position,
        current_stop_sequence=(
            vp.current_stop_sequence if vp.HasField("current_stop_sequence") else None
        ),
        stop_id=vp.stop_id if vp.HasField("stop_id") else None,
        timestamp=vp.timestamp if vp.HasField("timestamp") else None,
    )


def _parse_vehicle_descriptor(vd: gtfs_realtime_pb2.VehicleDescriptor) -> VehicleDescriptor:
    return VehicleDescriptor(
        id=vd.id if vd.HasField("id") else None,
        label=vd.label if vd.HasField("label") else None,
        license_plate=vd.license_plate if vd.HasField("license_plate") else None,
    )


def _parse_trip_descriptor(td: gtfs_realtime_pb2.TripDescriptor) -> TripDescriptor:
    """Parse a trip descriptor."""
    # parse schedule relationship (GTFS-RT enum -> our enum)
    schedule_relationship = None
    if td.HasField("schedule_relationship"):
        name = gtfs_realtime_pb2.TripDescriptor.ScheduleRelationship.Name(
            td.schedule_relationship
        )
        try:
            schedule_relationship = ScheduleRelationship(name)
        except ValueError:
            logger.warning(f"Unknown schedule_relationship {name} for trip_id {td.trip_id}")

    return TripDescriptor(
        trip_id=td.trip_id if td.HasField("trip_id") else None,
        route_id=td.route_id if td.HasField("route_id") else None,
        direction_id=td.direction_id if td.HasField("direction_id") else None,
        start_time=td.start_time if td.HasField("start_time") else None,
        start_date=td.start_date if td.HasField("start_date") else None,
        schedule_relationship=schedule_relationship,
    )


class GTFSRTClient:
    """Async HTTP client for fetching GTFS-RT feeds.

    Usage:
        async with GTFSRTClient(config) as client:
            snapshot = await client.fetch_feed()
    """

    def __init__(self, config: ValidatorConfig):
        """Initialize the client.

        Args:
            config: Validator configuration with feed URL, API key and timeout.
        """
        self._config = config
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "GTFSRTClient":
        """Enter async context - create HTTP client."""
        headers = {}
        if self._config.api_key:
            headers["apikey"] = self._config.api_key
        self._client = httpx.AsyncClient(
            headers=headers, timeout=self._config.http_timeout_seconds
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context - close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_feed(self, url: str | None = None) -> FeedSnapshot:
        """Fetch and decode one feed snapshot.

        Args:
            url: Feed URL; defaults to the configured feed_url.

        Returns:
            The decoded FeedSnapshot.

        Raises:
            RuntimeError: If client not initialized.
            ValueError: If no URL is given or configured.
            httpx.HTTPError: If the HTTP request fails.
            FeedDecodeError: If the response is not a valid FeedMessage.
        """
        if not self._client:
            raise RuntimeError("Client not initialized - use 'async with'")

        url = url or self._config.feed_url
        if not url:
            raise ValueError("No feed URL given and GTFSRT_FEED_URL is not set")

        response = await self._client.get(url)
        response.raise_for_status()

        snapshot = parse_feed_message(response.content)
        logger.debug(f"Fetched {len(snapshot.entities)} entities from {url}")
        return snapshot
