"""
Activity vocabularies and taxonomy.

Every activity recorded in the append-only audit trail is one of the
closed vocabularies defined here.
"""

from src.kernel.events.event_types import (
    ActivityCategory,
    DocumentActivity,
    EntityKind,
    ImpactLevel,
    MatterActivity,
    RevisionActivity,
    TransferActivity,
    TransferDirection,
)
from src.kernel.events.taxonomy import (
    activity_category,
    canonicalize_activity,
    impact_level,
    is_activity_allowed,
    normalize_activity,
    valid_activities,
)

__all__ = [
    "ActivityCategory",
    "DocumentActivity",
    "EntityKind",
    "ImpactLevel",
    "MatterActivity",
    "RevisionActivity",
    "TransferActivity",
    "TransferDirection",
    "activity_category",
    "canonicalize_activity",
    "impact_level",
    "is_activity_allowed",
    "normalize_activity",
    "valid_activities",
]
