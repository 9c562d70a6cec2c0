"""Non-fatal findings collected while analyzing a source tree."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Dict, Optional


@dataclass(frozen=True)
class Diagnostic:
    """A localized finding attached to a source file."""

    message: str
    path: Optional[str] = None
    line: Optional[int] = None
    column: Optional[int] = None

    code: ClassVar[str] = "diagnostic"
    severity: ClassVar[str] = "warning"

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    def location(self) -> str:
        if self.path is None:
            return "<tree>"
        parts = [self.path]
        if self.line is not None:
            parts.append(str(self.line))
            if self.column is not None:
                parts.append(str(self.column))
        return ":".join(parts)

    def format(self) -> str:
        return f"{self.location()}: {self.severity}[{self.code}]: {self.message}"

    def to_dict(self) -> Dict[str, object]:
        return {
            "code": self.code,
            "severity": self.severity,
            "message": self.message,
            "path": self.path,
            "line": self.line,
            "column": self.column,
        }


class SourceSyntaxError(Diagnostic):
    """A file could not be parsed; its declarations are absent from the model."""

    code = "syntax-error"
    severity = "error"


class SourceReadError(Diagnostic):
    """A file could not be read or decoded."""

    code = "read-error"
    severity = "error"


class UnsupportedTypeWarning(Diagnostic):
    """A type expression had no client-side mapping."""

    code = "unsupported-type"


class UnstaticEventNameWarning(Diagnostic):
    """A broadcast call used a computed event name or target."""

    code = "unstatic-event-name"


class NameCollisionWarning(Diagnostic):
    """Two declarations share one output identity."""

    code = "name-collision"


__all__ = [
    "Diagnostic",
    "NameCollisionWarning",
    "SourceReadError",
    "SourceSyntaxError",
    "UnstaticEventNameWarning",
    "UnsupportedTypeWarning",
]
