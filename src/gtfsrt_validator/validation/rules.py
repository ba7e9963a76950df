"""Catalog of validation rules.

Each Rule member is keyed by its code and carries the rule's fixed metadata.
The catalog is read-only; collaborators resolve a code with get_rule().
"""

from enum import Enum

from gtfsrt_validator.models.results import Severity, ValidationRule


def _rule(
    code: str, severity: Severity, title: str, description: str, occurrence_suffix: str
) -> ValidationRule:
    return ValidationRule(
        code=code,
        severity=severity,
        title=title,
        description=description,
        occurrence_suffix=occurrence_suffix,
    )


class Rule(Enum):
    """All rules the validator can report, warnings first."""

    # Warnings
    W001 = _rule(
        "W001",
        Severity.WARNING,
        "Timestamp not populated",
        "Timestamps should be populated for all elements",
        "does not have a timestamp",
    )
    W002 = _rule(
        "W002",
        Severity.WARNING,
        "Vehicle_id not populated",
        "vehicle_id should be populated for TripUpdates and VehiclePositions",
        "does not have a vehicle_id",
    )
    W003 = _rule(
        "W003",
        Severity.WARNING,
        "VehiclePosition and TripUpdate feed mismatch",
        "If both vehicle positions and trip updates are provided, VehicleDescriptor "
        "or TripDescriptor values should match between the two feeds",
        "does not appear in both VehiclePositions and TripUpdates feeds",
    )
    W004 = _rule(
        "W004",
        Severity.WARNING,
        "VehiclePosition has unrealistic speed",
        "vehicle.position.speed has an unrealistic speed that may be incorrect",
        "is unrealistic",
    )
    W006 = _rule(
        "W006",
        Severity.WARNING,
        "trip_update missing trip_id",
        "trip_updates should include a trip_id",
        "does not have a trip_id",
    )

    # Errors
    E001 = _rule(
        "E001",
        Severity.ERROR,
        "Not in POSIX time",
        "All timestamps must be in POSIX time (i.e., number of seconds since "
        "January 1st 1970 00:00:00 UTC)",
        "is not POSIX time",
    )
    E002 = _rule(
        "E002",
        Severity.ERROR,
        "Unsorted stop_sequence",
        "stop_time_updates for a given trip_id must be sorted by increasing stop_sequence",
        "is not sorted by increasing stop_sequence",
    )
    E003 = _rule(
        "E003",
        Severity.ERROR,
        "GTFS-rt trip_id does not appear in GTFS data",
        "All trip_ids provided in the GTFS-rt feed must appear in the GTFS data, "
        "unless the schedule_relationship is ADDED",
        "does not appear in the GTFS data and does not have schedule_relationship of ADDED",
    )
    E004 = _rule(
        "E004",
        Severity.ERROR,
        "GTFS-rt route_id does not appear in GTFS data",
        "All route_ids provided in the GTFS-rt feed must appear in the GTFS data",
        "does not appear in the GTFS data",
    )
    E010 = _rule(
        "E010",
        Severity.ERROR,
        "location_type not 0 in stops.txt",
        "If location_type is used in stops.txt, all stops referenced in stop_times.txt "
        "must have location_type of 0",
        "is not location_type 0",
    )
    E011 = _rule(
        "E011",
        Severity.ERROR,
        "GTFS-rt stop_id does not appear in GTFS data",
        "All stop_ids referenced in GTFS-rt feeds must appear in GTFS stops.txt",
        "does not appear in GTFS data stops.txt",
    )
    E012 = _rule(
        "E012",
        Severity.ERROR,
        "Header timestamp should be greater than or equal to all other timestamps",
        "No timestamps for individual entities (TripUpdate, VehiclePosition) in the "
        "feeds should be greater than the header timestamp",
        "is greater than the header",
    )
    E013 = _rule(
        "E013",
        Severity.ERROR,
        "Frequency type 0 trip schedule_relationship should be UNSCHEDULED or empty",
        "For frequency-based exact_times=0 trips, schedule_relationship should be "
        "UNSCHEDULED or empty.",
        "schedule_relationship is not UNSCHEDULED or empty",
    )
    E015 = _rule(
        "E015",
        Severity.ERROR,
        "All stop_ids referenced in GTFS-rt feeds must have the location_type = 0",
        "All stop_ids referenced in GTFS-rt feeds must have the location_type = 0 "
        "in GTFS stops.txt",
        "does not have location_type=0 in GTFS stops.txt",
    )
    E016 = _rule(
        "E016",
        Severity.ERROR,
        "trip_ids with schedule_relationship ADDED must not be in GTFS data",
        "Trips that have a schedule_relationship of ADDED must not be included in the GTFS data",
        "has a schedule_relationship of ADDED but appears in the GTFS data",
    )
    E017 = _rule(
        "E017",
        Severity.ERROR,
        "GTFS-rt content changed but has the same header timestamp",
        "The GTFS-rt header timestamp value should always change if the feed contents "
        "change - the feed contents must not change without updating the header timestamp",
        "was the same for this and the previous feed iteration but the feed content "
        "was not the same",
    )
    E018 = _rule(
        "E018",
        Severity.ERROR,
        "GTFS-rt header timestamp decreased between two sequential iterations",
        "The GTFS-rt header timestamp should be monotonically increasing - it should "
        "always be the same value or greater than previous feed iterations if the feed "
        "contents are different",
        "from the previous feed iteration",
    )
    E020 = _rule(
        "E020",
        Severity.ERROR,
        "Invalid start_time format",
        "start_time must be in the format HH:MM:SS, hours may exceed 23 for trips "
        "that run past midnight",
        "does not match the format HH:MM:SS",
    )
    E021 = _rule(
        "E021",
        Severity.ERROR,
        "Invalid start_date format",
        "start_date must be a valid calendar date in the format YYYYMMDD",
        "does not match the format YYYYMMDD",
    )
    E023 = _rule(
        "E023",
        Severity.ERROR,
        "start_time does not match GTFS initial arrival_time",
        "For trips that are not frequency-based, start_time must match the "
        "arrival_time of the first stop_time in GTFS stop_times.txt",
        "does not match the GTFS initial arrival_time",
    )

    @property
    def code(self) -> str:
        return self.value.code

    @property
    def severity(self) -> Severity:
        return self.value.severity

    @property
    def title(self) -> str:
        return self.value.title

    @property
    def description(self) -> str:
        return self.value.description

    @property
    def occurrence_suffix(self) -> str:
        return self.value.occurrence_suffix


def get_rule(code: str) -> Rule:
    """Resolve a rule code (case-insensitive) to its catalog entry.

    Raises:
        KeyError: If no rule has that code.
    """
    return Rule[code.strip().upper()]


def list_rules(severity: Severity | None = None) -> list[ValidationRule]:
    """Return the catalog in declaration order, optionally filtered by severity."""
    return [r.value for r in Rule if severity is None or r.severity == severity]
