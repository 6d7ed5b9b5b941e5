"""
Validation Engine - activity name and result primitives.

Layers:
1. Result types (local) - ValidationResult, Severity
2. Activity names (local) - length, format, reserved names, vocabulary

The state machine, sequencer, transfer tracker and integrity checker build
on these; ActivityValidationService lives in validation_service.
"""

from src.engines.validation.results import (
    Severity,
    ValidationResult,
    errors,
    has_errors,
    require_property_name,
    warnings,
)
from src.engines.validation.activity_validator import ActivityValidator

__all__ = [
    "Severity",
    "ValidationResult",
    "errors",
    "has_errors",
    "require_property_name",
    "warnings",
    "ActivityValidator",
]
