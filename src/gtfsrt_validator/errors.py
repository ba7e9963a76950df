"""Structural errors raised when a validation run cannot be carried out.

Rule violations are never raised; they are reported as occurrences.
"""


class ValidatorError(Exception):
    """Base class for errors that stop a validation step from running."""

    def __init__(
        self, message: str, source: str | None = None, suggested_action: str | None = None
    ):
        super().__init__(message)
        self.error_type = self.__class__.__name__
        self.source = source or "unknown"
        self.suggested_action = suggested_action

    def __str__(self) -> str:
        base = f"[{self.error_type}] {self.args[0]}"
        if self.source:
            base += f" (source={self.source})"
        if self.suggested_action:
            base += f" | action: {self.suggested_action}"
        return base


class DataError(ValidatorError):
    """Reference data missing or internally inconsistent."""


class FeedDecodeError(ValidatorError):
    """Bytes could not be decoded as a GTFS-realtime FeedMessage."""
