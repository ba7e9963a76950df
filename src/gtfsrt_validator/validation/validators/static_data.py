"""E010 - stops referenced in stop_times.txt must have location_type 0.

Checked once per reference index rather than per feed.
"""

import logging

from gtfsrt_validator.models.results import RuleGroup
from gtfsrt_validator.validation.collector import OccurrenceCollector
from gtfsrt_validator.validation.index import ReferenceIndex
from gtfsrt_validator.validation.rules import Rule
from gtfsrt_validator.validation.validators import require_index

logger = logging.getLogger(__name__)


def check_static_data(index: ReferenceIndex | None) -> list[RuleGroup]:
    index = require_index(index, "static_data")
    collector = OccurrenceCollector(Rule.E010, log=logger)
    for stop_id in index.non_platform_stop_time_stop_ids:
        collector.add(Rule.E010, f"stop_id {stop_id}")
    return collector.groups()
