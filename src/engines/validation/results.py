"""
Validation result types shared by every engine component.

Violations are returned, never raised. Only programmer errors (blank
property names and similar caller bugs) raise ValueError.
"""

from enum import Enum
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Severity of a validation result."""
    ERROR = "error"      # Blocks persistence
    WARNING = "warning"  # Surface and log, does not block
    INFO = "info"


class ValidationResult(BaseModel):
    """A single violation found by a check."""

    model_config = ConfigDict(frozen=True)

    message: str
    fields: List[str] = Field(default_factory=list)
    severity: Severity = Severity.ERROR
    code: Optional[str] = None

    @property
    def is_blocking(self) -> bool:
        return self.severity == Severity.ERROR

    @classmethod
    def error(cls, message: str, fields: Iterable[str], code: Optional[str] = None) -> "ValidationResult":
        return cls(message=message, fields=list(fields), severity=Severity.ERROR, code=code)

    @classmethod
    def warning(cls, message: str, fields: Iterable[str], code: Optional[str] = None) -> "ValidationResult":
        return cls(message=message, fields=list(fields), severity=Severity.WARNING, code=code)


def require_property_name(property_name: Optional[str], argument: str = "property_name") -> str:
    """Fail fast on a missing property name; this is a caller bug, not bad data."""
    if property_name is None or not str(property_name).strip():
        raise ValueError(f"{argument} must be a non-blank string")
    return property_name


def has_errors(results: Iterable[ValidationResult]) -> bool:
    return any(r.is_blocking for r in results)


def errors(results: Iterable[ValidationResult]) -> List[ValidationResult]:
    return [r for r in results if r.severity == Severity.ERROR]


def warnings(results: Iterable[ValidationResult]) -> List[ValidationResult]:
    return [r for r in results if r.severity == Severity.WARNING]
