"""Result models produced by a validation run.

A run yields one RuleGroup per rule that has at least one occurrence.
A rule without a group had zero occurrences in that run.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """How serious a rule violation is."""

    WARNING = "WARNING"
    ERROR = "ERROR"


class ValidationRule(BaseModel):
    """Fixed metadata describing one rule."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(description="Unique rule code, e.g. 'E003'")
    severity: Severity
    title: str
    description: str
    occurrence_suffix: str = Field(
        description="Text appended to an occurrence prefix when describing it"
    )


class Occurrence(BaseModel):
    """One concrete violation, located by a human-readable prefix."""

    prefix: str = Field(description="Locator such as 'trip_id 123'")


class RuleGroup(BaseModel):
    """All occurrences of one rule found in one run, in feed order."""

    rule: ValidationRule
    occurrences: list[Occurrence]

    @property
    def code(self) -> str:
        return self.rule.code

    @property
    def count(self) -> int:
        return len(self.occurrences)

    def messages(self) -> list[str]:
        """Full text of each occurrence ('<prefix> <suffix>')."""
        return [f"{o.prefix} {self.rule.occurrence_suffix}" for o in self.occurrences]


class ValidatorFailure(BaseModel):
    """A validator that could not run because its inputs were unusable."""

    validator: str
    error_type: str
    message: str


class ValidationReport(BaseModel):
    """Ordered rule groups of one run plus the validators that failed to run."""

    groups: list[RuleGroup] = []
    failures: list[ValidatorFailure] = []

    @property
    def complete(self) -> bool:
        """True when every registered validator ran."""
        return not self.failures

    def codes(self) -> list[str]:
        return [g.code for g in self.groups]

    def count(self, code: str) -> int:
        """Number of occurrences for a rule code (0 when the rule has no group)."""
        return sum(g.count for g in self.groups if g.code == code)

    def get_group(self, code: str) -> RuleGroup | None:
        for group in self.groups:
            if group.code == code:
                return group
        return None
