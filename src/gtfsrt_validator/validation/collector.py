"""Per-run accumulation of occurrences, grouped by rule."""

import logging

from gtfsrt_validator.models.results import Occurrence, RuleGroup
from gtfsrt_validator.validation.rules import Rule

logger = logging.getLogger(__name__)


class OccurrenceCollector:
    """Collects occurrences for a validator during one pass over a feed.

    Groups are returned in the order the rules were declared, and only for
    rules with at least one occurrence. Occurrences keep insertion order;
    adding the same prefix twice for a rule records it once.
    """

    def __init__(self, *rules: Rule, log: logging.Logger | None = None):
        self._occurrences: dict[Rule, dict[str, Occurrence]] = {rule: {} for rule in rules}
        self._log = log or logger

    def add(self, rule: Rule, prefix: str) -> None:
        """Record one occurrence of a rule."""
        occurrences = self._occurrences.setdefault(rule, {})
        if prefix in occurrences:
            return
        occurrences[prefix] = Occurrence(prefix=prefix)
        self._log.debug(f"{prefix} {rule.occurrence_suffix}")

    def count(self, rule: Rule) -> int:
        return len(self._occurrences.get(rule, {}))

    def groups(self) -> list[RuleGroup]:
        """Non-empty rule groups in declaration order."""
        return [
            RuleGroup(rule=rule.value, occurrences=list(occurrences.values()))
            for rule, occurrences in self._occurrences.items()
            if occurrences
        ]
