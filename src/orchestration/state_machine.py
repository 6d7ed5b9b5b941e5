"""
State machine for Matter, Document and Revision activities.

Entity state flags are owned by the persistence layer. This module only
decides whether a proposed activity is admissible for a snapshot of those
flags, and whether two adjacent activities form an expected sequence.
"""

from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from src.engines.validation.results import ValidationResult, require_property_name
from src.kernel.events.event_types import EntityKind
from src.kernel.events.taxonomy import (
    canonicalize_activity,
    is_transfer_activity,
    normalize_activity,
    valid_activities,
)
from src.kernel.models.activity import EntityState
from src.logging_config import get_logger

logger = get_logger(__name__)

_Guard = Tuple[Callable[[EntityState], bool], str]


# activity -> guards that must all hold; reason templates take {entity}
_COMMON_GUARDS: Dict[str, List[_Guard]] = {
    "ARCHIVED": [
        (lambda s: not s.is_archived, "Cannot archive a {entity} that is already archived."),
        (lambda s: not s.is_deleted, "Cannot archive a deleted {entity}."),
    ],
    "UNARCHIVED": [
        (lambda s: s.is_archived, "Cannot unarchive a {entity} that is not archived."),
        (lambda s: not s.is_deleted, "Cannot unarchive a deleted {entity}."),
    ],
    "DELETED": [
        (lambda s: not s.is_deleted, "The {entity} is already deleted."),
    ],
    "RESTORED": [
        (lambda s: s.is_deleted, "Cannot restore a {entity} that is not deleted."),
    ],
    "CREATED": [
        (lambda s: False, "Cannot record CREATED against an existing {entity}."),
    ],
    "VIEWED": [
        (lambda s: not s.is_deleted, "Cannot view a deleted {entity}."),
    ],
    "SAVED": [
        (lambda s: not s.is_deleted, "Cannot save a deleted {entity}."),
    ],
}

_DOCUMENT_GUARDS: Dict[str, List[_Guard]] = {
    "CHECKED_OUT": [
        (lambda s: not s.is_checked_out, "Cannot check out a {entity} that is already checked out."),
        (lambda s: not s.is_deleted, "Cannot check out a deleted {entity}."),
    ],
    "CHECKED_IN": [
        (lambda s: s.is_checked_out, "Cannot check in a {entity} that is not checked out."),
    ],
    "SAVED": [
        (lambda s: s.is_checked_out, "The {entity} must be checked out before saving changes."),
    ],
}

_KIND_GUARDS: Dict[EntityKind, Dict[str, List[_Guard]]] = {
    EntityKind.DOCUMENT: _DOCUMENT_GUARDS,
}


def _pairs(mapping: Dict[str, Tuple[str, ...]]) -> FrozenSet[Tuple[str, str]]:
    return frozenset((prev, cur) for prev, nexts in mapping.items() for cur in nexts)


# Professionally expected (previous, current) pairs per kind
_EXPECTED_SEQUENCES: Dict[EntityKind, FrozenSet[Tuple[str, str]]] = {
    EntityKind.REVISION: _pairs({
        "CREATED": ("SAVED", "DELETED"),
        "SAVED": ("SAVED", "DELETED"),
        "DELETED": ("RESTORED",),
        "RESTORED": ("SAVED", "DELETED"),
    }),
    EntityKind.DOCUMENT: _pairs({
        "CREATED": ("CHECKED_OUT", "DELETED"),
        "CHECKED_OUT": ("SAVED", "CHECKED_IN"),
        "SAVED": ("SAVED", "CHECKED_IN"),
        "CHECKED_IN": ("CHECKED_OUT", "DELETED"),
        "DELETED": ("RESTORED",),
        "RESTORED": ("CHECKED_OUT", "DELETED"),
    }),
    EntityKind.MATTER: _pairs({
        "CREATED": ("VIEWED", "ARCHIVED", "DELETED"),
        "VIEWED": ("VIEWED", "ARCHIVED", "DELETED"),
        "UNARCHIVED": ("VIEWED", "ARCHIVED", "DELETED"),
        "RESTORED": ("VIEWED", "ARCHIVED", "DELETED"),
        "ARCHIVED": ("VIEWED", "UNARCHIVED", "DELETED"),
        "DELETED": ("RESTORED",),
    }),
    EntityKind.MATTER_DOCUMENT_TRANSFER: frozenset(),
}


def _entity_noun(kind: EntityKind) -> str:
    return "transfer" if kind == EntityKind.MATTER_DOCUMENT_TRANSFER else kind.value


def admissibility_reasons(
    kind: EntityKind,
    activity: Optional[str],
    state: EntityState,
) -> List[str]:
    """Every reason the activity is inadmissible; empty when admissible."""
    kind = EntityKind(kind)
    normalized = normalize_activity(activity, kind)
    if not normalized:
        return [
            f"'{activity}' is not a recognized {_entity_noun(kind)} activity. "
            f"Allowed activities: {', '.join(sorted(valid_activities(kind)))}."
        ]

    guards = list(_COMMON_GUARDS.get(normalized, []))
    guards += _KIND_GUARDS.get(kind, {}).get(normalized, [])

    noun = _entity_noun(kind)
    return [reason.format(entity=noun) for holds, reason in guards if not holds(state)]


def is_admissible(kind: EntityKind, activity: Optional[str], state: EntityState) -> bool:
    return not admissibility_reasons(kind, activity, state)


def validate_transition(
    kind: EntityKind,
    activity: Optional[str],
    state: EntityState,
    property_name: str = "Activity",
) -> List[ValidationResult]:
    """Admissibility as hard-failure ValidationResults."""
    require_property_name(property_name)
    reasons = admissibility_reasons(kind, activity, state)
    if reasons:
        logger.debug(
            "Activity rejected by state machine",
            extra={"kind": EntityKind(kind).value, "activity": str(activity), "reasons": reasons},
        )
    return [
        ValidationResult.error(reason, [property_name], code="INADMISSIBLE_TRANSITION")
        for reason in reasons
    ]


def available_activities(kind: EntityKind, state: EntityState) -> List[str]:
    """Activities admissible for the snapshot, sorted."""
    return sorted(a for a in valid_activities(kind) if is_admissible(kind, a, state))


def expected_next_activities(kind: EntityKind, previous: Optional[str]) -> List[str]:
    canonical = canonicalize_activity(previous)
    return sorted(cur for prev, cur in _EXPECTED_SEQUENCES[EntityKind(kind)] if prev == canonical)


def is_expected_sequence(kind: EntityKind, previous: Optional[str], current: Optional[str]) -> bool:
    """Transfers and a missing previous activity are always expected."""
    prev = canonicalize_activity(previous)
    cur = canonicalize_activity(current)
    if not prev or not cur:
        return True
    if is_transfer_activity(prev) or is_transfer_activity(cur):
        return True
    return (prev, cur) in _EXPECTED_SEQUENCES[EntityKind(kind)]


def validate_sequence(
    kind: EntityKind,
    previous: Optional[str],
    current: Optional[str],
    property_name: str = "Activity",
) -> List[ValidationResult]:
    """Advisory check on an adjacent pair of activities for one entity."""
    require_property_name(property_name)
    if is_expected_sequence(kind, previous, current):
        return []

    prev = canonicalize_activity(previous)
    cur = canonicalize_activity(current)
    expected = expected_next_activities(kind, prev)
    hint = f" Expected one of: {', '.join(expected)}." if expected else ""
    return [ValidationResult.warning(
        f"{property_name}: {cur} after {prev} is not an expected "
        f"{_entity_noun(EntityKind(kind))} activity sequence.{hint}",
        [property_name],
        code="UNEXPECTED_SEQUENCE",
    )]


def validate_state_consistency(
    kind: EntityKind,
    state: EntityState,
    property_prefix: str = "",
) -> List[ValidationResult]:
    """A deleted matter is expected to be archived as well (advisory)."""
    if EntityKind(kind) == EntityKind.MATTER and state.is_deleted and not state.is_archived:
        return [ValidationResult.warning(
            "Deleted matters should be archived for audit trail integrity.",
            [f"{property_prefix}IsArchived", f"{property_prefix}IsDeleted"],
            code="DELETED_NOT_ARCHIVED",
        )]
    return []
