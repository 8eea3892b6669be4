"""Error kinds raised by the tracker and the result store."""

from __future__ import annotations


class TypeScoreError(Exception):
    """Base class for all typescore errors."""


class ValidationError(TypeScoreError):
    """Input is malformed or out of range. Nothing was written."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class InvalidStateError(TypeScoreError):
    """A tracker operation was called out of sequence."""


class StoreUnavailableError(TypeScoreError):
    """The persistence layer could not be read or written."""
