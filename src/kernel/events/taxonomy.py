"""
Activity taxonomy: vocabularies, normalization, categories and impact.
"""

import re
from typing import Dict, FrozenSet, List, Optional, Type
from enum import Enum

from src.kernel.events.event_types import (
    ActivityCategory,
    DocumentActivity,
    EntityKind,
    ImpactLevel,
    MatterActivity,
    RevisionActivity,
    TransferActivity,
)


_VOCABULARY_ENUMS: Dict[EntityKind, Type[Enum]] = {
    EntityKind.MATTER: MatterActivity,
    EntityKind.DOCUMENT: DocumentActivity,
    EntityKind.REVISION: RevisionActivity,
    EntityKind.MATTER_DOCUMENT_TRANSFER: TransferActivity,
}

VOCABULARIES: Dict[EntityKind, FrozenSet[str]] = {
    kind: frozenset(member.value for member in enum_cls)
    for kind, enum_cls in _VOCABULARY_ENUMS.items()
}

TRANSFER_ACTIVITIES: FrozenSet[str] = VOCABULARIES[EntityKind.MATTER_DOCUMENT_TRANSFER]

_CATEGORIES: Dict[str, ActivityCategory] = {
    "CREATED": ActivityCategory.CREATION,
    "SAVED": ActivityCategory.MODIFICATION,
    "CHECKED_IN": ActivityCategory.VERSION_CONTROL,
    "CHECKED_OUT": ActivityCategory.VERSION_CONTROL,
    "DELETED": ActivityCategory.LIFECYCLE,
    "RESTORED": ActivityCategory.LIFECYCLE,
    "ARCHIVED": ActivityCategory.LIFECYCLE,
    "UNARCHIVED": ActivityCategory.LIFECYCLE,
    "MOVED": ActivityCategory.TRANSFER,
    "COPIED": ActivityCategory.TRANSFER,
    "VIEWED": ActivityCategory.ACCESS,
}

_IMPACT: Dict[str, ImpactLevel] = {
    "CREATED": ImpactLevel.HIGH,
    "DELETED": ImpactLevel.HIGH,
    "RESTORED": ImpactLevel.HIGH,
    "MOVED": ImpactLevel.HIGH,
    "SAVED": ImpactLevel.MEDIUM,
    "CHECKED_OUT": ImpactLevel.MEDIUM,
    "ARCHIVED": ImpactLevel.MEDIUM,
    "UNARCHIVED": ImpactLevel.MEDIUM,
    "COPIED": ImpactLevel.MEDIUM,
    "CHECKED_IN": ImpactLevel.LOW,
    "VIEWED": ImpactLevel.LOW,
}

_INVALID_CHARS = re.compile(r"[^A-Z0-9_]+")
_REPEATED_UNDERSCORES = re.compile(r"_{2,}")


def canonicalize_activity(activity: Optional[str]) -> str:
    """
    Canonical spelling of an activity name, without vocabulary checks.

    "checked out" -> "CHECKED_OUT". Idempotent.
    """
    if activity is None:
        return ""
    if isinstance(activity, Enum):
        activity = activity.value
    text = _INVALID_CHARS.sub("_", str(activity).strip().upper())
    return _REPEATED_UNDERSCORES.sub("_", text).strip("_")


def valid_activities(kind: EntityKind) -> FrozenSet[str]:
    """Vocabulary for an entity kind."""
    return VOCABULARIES[EntityKind(kind)]


def normalize_activity(activity: Optional[str], kind: EntityKind) -> str:
    """Canonical activity for the kind, or "" when outside its vocabulary."""
    canonical = canonicalize_activity(activity)
    return canonical if canonical in valid_activities(kind) else ""


def is_activity_allowed(activity: Optional[str], kind: EntityKind) -> bool:
    return normalize_activity(activity, kind) != ""


def is_transfer_activity(activity: Optional[str]) -> bool:
    return canonicalize_activity(activity) in TRANSFER_ACTIVITIES


def are_activities_equivalent(first: Optional[str], second: Optional[str]) -> bool:
    """Same canonical spelling, ignoring blanks."""
    a = canonicalize_activity(first)
    b = canonicalize_activity(second)
    return bool(a) and a == b


def activity_category(activity: Optional[str]) -> ActivityCategory:
    return _CATEGORIES.get(canonicalize_activity(activity), ActivityCategory.UNKNOWN)


def impact_level(activity: Optional[str]) -> ImpactLevel:
    return _IMPACT.get(canonicalize_activity(activity), ImpactLevel.UNKNOWN)


def activities_by_category(kind: EntityKind, category: ActivityCategory) -> List[str]:
    """Vocabulary members of a kind that fall in the given category, sorted."""
    return sorted(a for a in valid_activities(kind) if _CATEGORIES.get(a) == category)
