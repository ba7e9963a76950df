"""Runs the registered validators against one feed snapshot.

This is the only module that knows the full validator list. Results are
merged in registration order; within a validator, in rule declaration order.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from typing import Any

from gtfsrt_validator.data.config import ValidatorConfig, get_validator_config
from gtfsrt_validator.errors import DataError, ValidatorError
from gtfsrt_validator.models.realtime import FeedSnapshot
from gtfsrt_validator.models.results import RuleGroup, ValidationReport, ValidatorFailure
from gtfsrt_validator.validation.index import ReferenceIndex
from gtfsrt_validator.validation.validators import Validator
from gtfsrt_validator.validation.validators.feed_iteration import check_header_iteration
from gtfsrt_validator.validation.validators.static_data import check_static_data
from gtfsrt_validator.validation.validators.stop_sequence import check_stop_sequence
from gtfsrt_validator.validation.validators.stops import check_stop_ids
from gtfsrt_validator.validation.validators.timestamps import check_timestamps
from gtfsrt_validator.validation.validators.trip_descriptor import check_trip_descriptor
from gtfsrt_validator.validation.validators.vehicles import check_vehicles

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegisteredValidator:
    """A validator and the name it is reported under when it cannot run."""

    name: str
    check: Validator


def default_validators(config: ValidatorConfig | None = None) -> list[RegisteredValidator]:
    """The standard validator set in registration order."""
    if config is None:
        config = get_validator_config()
    return [
        RegisteredValidator("timestamps", check_timestamps),
        RegisteredValidator("stop_sequence", check_stop_sequence),
        RegisteredValidator("trip_descriptor", check_trip_descriptor),
        RegisteredValidator("stops", check_stop_ids),
        RegisteredValidator("feed_iteration", check_header_iteration),
        RegisteredValidator(
            "vehicles",
            partial(check_vehicles, min_speed=config.min_speed, max_speed=config.max_speed),
        ),
    ]


class ValidationEngine:
    """Evaluates feed snapshots against the registered validators.

    Usage:
        engine = ValidationEngine()
        report = engine.evaluate(now, index, feed, previous_feed)
    """

    def __init__(
        self,
        validators: list[RegisteredValidator] | None = None,
        config: ValidatorConfig | None = None,
    ):
        if validators is None:
            validators = default_validators(config)
        self._validators = list(validators)

    @property
    def validators(self) -> list[RegisteredValidator]:
        return list(self._validators)

    def evaluate(
        self,
        current_time: int,
        index: ReferenceIndex | None,
        feed: FeedSnapshot,
        previous_feed: FeedSnapshot | None = None,
    ) -> ValidationReport:
        """Run every validator sequentially and merge their rule groups.

        Raises:
            DataError: If there is no feed snapshot to validate.
        """
        _require_feed(feed)
        results = [
            self._run(v.name, v.check, current_time, index, feed, previous_feed)
            for v in self._validators
        ]
        return self._merge(results)

    async def evaluate_concurrently(
        self,
        current_time: int,
        index: ReferenceIndex | None,
        feed: FeedSnapshot,
        previous_feed: FeedSnapshot | None = None,
    ) -> ValidationReport:
        """Run validators in worker threads; the report equals evaluate()'s."""
        _require_feed(feed)
        results = await asyncio.gather(
            *(
                asyncio.to_thread(
                    self._run, v.name, v.check, current_time, index, feed, previous_feed
                )
                for v in self._validators
            )
        )
        return self._merge(list(results))

    def check_reference(self, index: ReferenceIndex | None) -> ValidationReport:
        """Check the static data itself (E010); run once per index."""
        return self._merge([self._run("static_data", check_static_data, index)])

    def _run(
        self, name: str, check: Callable[..., list[RuleGroup]], *args: Any
    ) -> list[RuleGroup] | ValidatorFailure:
        """Call one validator, turning a ValidatorError into a ValidatorFailure."""
        try:
            return check(*args)
        except ValidatorError as e:
            logger.warning(f"Validator {name} could not run: {e}")
            return ValidatorFailure(
                validator=name,
                error_type=e.error_type,
                message=str(e.args[0]),
            )

    def _merge(self, results: list[list[RuleGroup] | ValidatorFailure]) -> ValidationReport:
        report = ValidationReport()
        for result in results:
            if isinstance(result, ValidatorFailure):
                report.failures.append(result)
            else:
                report.groups.extend(g for g in result if g.occurrences)
        logger.info(
            f"Validation finished: {len(report.groups)} rule groups, "
            f"{sum(g.count for g in report.groups)} occurrences, "
            f"{len(report.failures)} validators failed"
        )
        return report


def _require_feed(feed: FeedSnapshot | None) -> None:
    if feed is None:
        raise DataError("No feed snapshot to validate", source="engine")


_default_engine: ValidationEngine | None = None


def get_engine() -> ValidationEngine:
    """Get or create the engine built from the default configuration."""
    global _default_engine
    if _default_engine is None:
        _default_engine = ValidationEngine()
    return _default_engine


def reset_engine() -> None:
    """Drop the default engine so it is rebuilt from fresh configuration."""
    global _default_engine
    _default_engine = None


def evaluate(
    current_time: int,
    index: ReferenceIndex | None,
    feed: FeedSnapshot,
    previous_feed: FeedSnapshot | None = None,
) -> ValidationReport:
    """Evaluate a snapshot with the default engine."""
    return get_engine().evaluate(current_time, index, feed, previous_feed)
