"""
Value models consumed and produced by the audit engine.

These are plain data. The persistence layer maps its rows onto them and
the engine never mutates them.
"""

import uuid
from datetime import date, datetime
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.kernel.events.event_types import EntityKind, TransferDirection
from src.kernel.events.taxonomy import canonicalize_activity
from src.kernel.primitives import NIL_GUID, ensure_utc


class EntityRef(BaseModel):
    """Reference to a matter, document or revision."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    kind: EntityKind

    @model_validator(mode="after")
    def _check_reference(self) -> "EntityRef":
        if self.id == NIL_GUID:
            raise ValueError("EntityRef.id must not be the empty GUID")
        if self.kind == EntityKind.MATTER_DOCUMENT_TRANSFER:
            raise ValueError("EntityRef.kind must be a matter, document or revision")
        return self


class EntityState(BaseModel):
    """
    Snapshot of the flags that decide admissibility.

    Matter reads is_archived/is_deleted, Document reads
    is_checked_out/is_deleted, Revision reads is_deleted.
    """

    model_config = ConfigDict(frozen=True)

    is_archived: bool = False
    is_deleted: bool = False
    is_checked_out: bool = False


class ActivityRecord(BaseModel):
    """One immutable, user-attributed entry of an audit trail."""

    model_config = ConfigDict(frozen=True)

    entity_id: uuid.UUID
    activity_type: str
    user_id: uuid.UUID
    occurred_at: datetime
    # Transfer records only: the counterpart matter
    related_entity_id: Optional[uuid.UUID] = None
    document_id: Optional[uuid.UUID] = None
    direction: Optional[TransferDirection] = None

    @field_validator("activity_type", mode="before")
    @classmethod
    def _canonical_activity(cls, value: object) -> str:
        return canonicalize_activity(value)

    @field_validator("occurred_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def identity(self) -> Tuple[uuid.UUID, str, uuid.UUID, datetime]:
        """Composite identity that must be unique within a history."""
        return (self.entity_id, self.activity_type, self.user_id, self.occurred_at)

    @property
    def occurred_on(self) -> date:
        return self.occurred_at.date()


class TransferOperation(BaseModel):
    """A MOVED or COPIED request between two matters."""

    model_config = ConfigDict(frozen=True)

    activity: str
    source_matter_id: uuid.UUID = NIL_GUID
    destination_matter_id: uuid.UUID = NIL_GUID
    document_id: uuid.UUID = NIL_GUID
    user_id: uuid.UUID = NIL_GUID
    occurred_at: datetime = Field(...)

    @field_validator("occurred_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)
