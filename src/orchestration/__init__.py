"""Orchestration layer - activity state machine and sequence whitelists."""

from src.orchestration.state_machine import (
    admissibility_reasons,
    available_activities,
    expected_next_activities,
    is_admissible,
    is_expected_sequence,
    validate_sequence,
    validate_state_consistency,
    validate_transition,
)

__all__ = [
    "admissibility_reasons",
    "available_activities",
    "expected_next_activities",
    "is_admissible",
    "is_expected_sequence",
    "validate_sequence",
    "validate_state_consistency",
    "validate_transition",
]
