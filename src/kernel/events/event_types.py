"""
Activity type definitions.

Closed vocabularies per entity category. Values are the canonical
upper-case strings stored on every ActivityRecord.
"""

from enum import Enum


class EntityKind(str, Enum):
    """Entity categories that own an activity vocabulary."""

    MATTER = "matter"
    DOCUMENT = "document"
    REVISION = "revision"
    MATTER_DOCUMENT_TRANSFER = "matter_document_transfer"


class MatterActivity(str, Enum):
    CREATED = "CREATED"
    ARCHIVED = "ARCHIVED"
    UNARCHIVED = "UNARCHIVED"
    DELETED = "DELETED"
    RESTORED = "RESTORED"
    VIEWED = "VIEWED"


class DocumentActivity(str, Enum):
    CREATED = "CREATED"
    SAVED = "SAVED"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"
    DELETED = "DELETED"
    RESTORED = "RESTORED"


class RevisionActivity(str, Enum):
    CREATED = "CREATED"
    SAVED = "SAVED"
    DELETED = "DELETED"
    RESTORED = "RESTORED"


class TransferActivity(str, Enum):
    MOVED = "MOVED"
    COPIED = "COPIED"


class ActivityCategory(str, Enum):
    """Functional grouping of an activity."""

    CREATION = "creation"
    MODIFICATION = "modification"
    VERSION_CONTROL = "version_control"
    LIFECYCLE = "lifecycle"
    TRANSFER = "transfer"
    ACCESS = "access"
    UNKNOWN = "unknown"


class ImpactLevel(str, Enum):
    """Professional impact of an activity on the matter record."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    UNKNOWN = "unknown"


class TransferDirection(str, Enum):
    """Which side of a transfer an activity record documents."""

    FROM = "from"  # recorded against the source matter
    TO = "to"      # recorded against the destination matter
