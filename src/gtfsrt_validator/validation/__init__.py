"""Rule evaluation engine for GTFS-realtime feeds."""

from gtfsrt_validator.validation.index import IndexedStopTime, ReferenceIndex
from gtfsrt_validator.validation.rules import Rule, get_rule, list_rules
from gtfsrt_validator.validation.engine import (
    RegisteredValidator,
    ValidationEngine,
    default_validators,
    evaluate,
)

__all__ = [
    # Engine
    "ValidationEngine",
    "RegisteredValidator",
    "default_validators",
    "evaluate",
    # Reference data
    "ReferenceIndex",
    "IndexedStopTime",
    # Rule catalog
    "Rule",
    "get_rule",
    "list_rules",
]
