"""Exceptions that abort a tauria-tsgen run."""

from __future__ import annotations


class TsGenError(RuntimeError):
    """Base class for fatal tauria-tsgen errors."""


class FatalError(TsGenError):
    """Raised when the input tree cannot be analyzed at all."""


class InvariantViolation(TsGenError):
    """Raised when the assembled model breaks an ownership invariant."""


class WriteError(TsGenError):
    """Raised when generated artifacts cannot be committed to disk."""


class SourceParseError(TsGenError):
    """Raised by the declaration parser for a file it cannot parse."""

    def __init__(self, reason: str, line: int, column: int) -> None:
        super().__init__(f"{reason} at line {line}, column {column}")
        self.reason = reason
        self.line = line
        self.column = column


__all__ = [
    "FatalError",
    "InvariantViolation",
    "SourceParseError",
    "TsGenError",
    "WriteError",
]
