"""
Transfer Tracker - MOVED/COPIED operations between matters.

Every accepted transfer produces a FROM record on the source matter and a
TO record on the destination matter. A trail holding only one side is
incomplete.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set, Tuple

from pydantic import BaseModel, Field

from src.config import Settings, get_settings
from src.engines.validation.results import ValidationResult, has_errors
from src.kernel.events.event_types import EntityKind, TransferDirection
from src.kernel.events.taxonomy import (
    TRANSFER_ACTIVITIES,
    canonicalize_activity,
    is_transfer_activity,
    normalize_activity,
)
from src.kernel.models.activity import ActivityRecord, TransferOperation
from src.kernel.primitives import ensure_utc, validate_guid, validate_timestamp
from src.logging_config import get_logger

logger = get_logger(__name__)


class TransferRecordResult(BaseModel):
    """Outcome of recording a transfer: the pair to persist, or the reasons none exists."""

    results: List[ValidationResult] = Field(default_factory=list)
    records: List[ActivityRecord] = Field(default_factory=list)

    @property
    def is_recorded(self) -> bool:
        return bool(self.records)


def _mirror_key(record: ActivityRecord) -> Tuple:
    """Key of the record that would mirror this one."""
    return (
        record.related_entity_id,
        record.entity_id,
        record.document_id,
        record.user_id,
        record.occurred_at,
        record.activity_type,
    )


def _own_key(record: ActivityRecord) -> Tuple:
    return (
        record.entity_id,
        record.related_entity_id,
        record.document_id,
        record.user_id,
        record.occurred_at,
        record.activity_type,
    )


_OPPOSITE = {
    TransferDirection.FROM: TransferDirection.TO,
    TransferDirection.TO: TransferDirection.FROM,
}


def _has_mirror(record: ActivityRecord, pool: Dict[Tuple, Set[Optional[TransferDirection]]]) -> bool:
    """A mirror must sit on the opposite side; undirected records match either side."""
    directions = pool.get(_mirror_key(record))
    if not directions:
        return False
    if record.direction is None or None in directions:
        return True
    return _OPPOSITE[record.direction] in directions


class TransferTracker:
    """Validates transfers and produces their bidirectional records."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def validate_transfer(
        self,
        operation: TransferOperation,
        source_deleted: bool,
        destination_deleted: bool,
        document_deleted: bool,
        *,
        now: Optional[datetime] = None,
    ) -> List[ValidationResult]:
        """All violations for a proposed transfer; empty means it may proceed."""
        results: List[ValidationResult] = []

        if not normalize_activity(operation.activity, EntityKind.MATTER_DOCUMENT_TRANSFER):
            results.append(ValidationResult.error(
                f"Activity '{operation.activity}' is not a transfer activity. "
                f"Allowed activities: {', '.join(sorted(TRANSFER_ACTIVITIES))}.",
                ["Activity"],
                code="TRANSFER_ACTIVITY_INVALID",
            ))

        results += validate_guid(operation.source_matter_id, "SourceMatterId", "the source matter")
        results += validate_guid(operation.destination_matter_id, "DestinationMatterId", "the destination matter")
        results += validate_guid(operation.document_id, "DocumentId", "the transferred document")
        results += validate_guid(operation.user_id, "UserId", "the user performing the transfer")

        if operation.source_matter_id == operation.destination_matter_id:
            results.append(ValidationResult.error(
                "Source and destination matters must be different.",
                ["SourceMatterId", "DestinationMatterId"],
                code="TRANSFER_SAME_MATTER",
            ))

        if source_deleted:
            results.append(ValidationResult.error(
                "Cannot transfer a document from a deleted matter. Restore the matter first.",
                ["SourceMatterId"],
                code="TRANSFER_SOURCE_DELETED",
            ))
        if destination_deleted:
            results.append(ValidationResult.error(
                "Cannot transfer a document to a deleted matter. Restore the matter first.",
                ["DestinationMatterId"],
                code="TRANSFER_DESTINATION_DELETED",
            ))
        if document_deleted:
            results.append(ValidationResult.error(
                "Cannot move or copy a deleted document. Restore the document first.",
                ["DocumentId"],
                code="TRANSFER_DOCUMENT_DELETED",
            ))

        if now is not None:
            results += validate_timestamp(
                operation.occurred_at, "OccurredAt", now=now, settings=self.settings
            )
            if operation.occurred_at < ensure_utc(now) - self.settings.max_backdate:
                results.append(ValidationResult.error(
                    f"OccurredAt is more than {self.settings.max_backdate_hours} hours in the past.",
                    ["OccurredAt"],
                    code="BACKDATED_ACTIVITY",
                ))

        return results

    def build_records(self, operation: TransferOperation) -> List[ActivityRecord]:
        """The FROM/TO pair for an operation, without validating it."""
        activity = canonicalize_activity(operation.activity)
        shared = dict(
            activity_type=activity,
            user_id=operation.user_id,
            occurred_at=operation.occurred_at,
            document_id=operation.document_id,
        )
        return [
            ActivityRecord(
                entity_id=operation.source_matter_id,
                related_entity_id=operation.destination_matter_id,
                direction=TransferDirection.FROM,
                **shared,
            ),
            ActivityRecord(
                entity_id=operation.destination_matter_id,
                related_entity_id=operation.source_matter_id,
                direction=TransferDirection.TO,
                **shared,
            ),
        ]

    def record_transfer(
        self,
        operation: TransferOperation,
        source_deleted: bool,
        destination_deleted: bool,
        document_deleted: bool,
        *,
        now: Optional[datetime] = None,
    ) -> TransferRecordResult:
        """Validate, then emit both records together or neither."""
        results = self.validate_transfer(
            operation, source_deleted, destination_deleted, document_deleted, now=now
        )
        if has_errors(results):
            logger.info(
                "Transfer rejected",
                extra={
                    "activity": str(operation.activity),
                    "document_id": str(operation.document_id),
                    "error_count": len(results),
                },
            )
            return TransferRecordResult(results=results)

        records = self.build_records(operation)
        logger.info(
            "Transfer recorded",
            extra={
                "activity": records[0].activity_type,
                "document_id": str(operation.document_id),
                "source_matter_id": str(operation.source_matter_id),
                "destination_matter_id": str(operation.destination_matter_id),
            },
        )
        return TransferRecordResult(results=results, records=records)

    def validate_pairing(
        self,
        records: Iterable[ActivityRecord],
        counterparts: Iterable[ActivityRecord] = (),
        property_name: str = "TransferRecords",
    ) -> List[ValidationResult]:
        """
        Every transfer record must have its mirror.

        The mirror swaps entity and related matter, sits on the opposite
        side, and matches document, user, timestamp and activity. It may
        sit in records or in counterparts (the other matter's trail).
        """
        records = list(records)
        pool: Dict[Tuple, Set[Optional[TransferDirection]]] = {}
        for r in records + list(counterparts):
            pool.setdefault(_own_key(r), set()).add(r.direction)

        results = []
        for record in records:
            if not is_transfer_activity(record.activity_type):
                continue

            if record.related_entity_id is None or record.document_id is None:
                results.append(ValidationResult.error(
                    f"{record.activity_type} record for matter {record.entity_id} at "
                    f"{record.occurred_at.isoformat()} does not identify its counterpart matter and document.",
                    [property_name],
                    code="TRANSFER_RECORD_INCOMPLETE",
                ))
                continue

            if not _has_mirror(record, pool):
                side = record.direction.value if record.direction else "one"
                results.append(ValidationResult.error(
                    f"{record.activity_type} of document {record.document_id} at "
                    f"{record.occurred_at.isoformat()} has only the '{side}' side recorded; "
                    f"the matching record on matter {record.related_entity_id} is missing.",
                    [property_name],
                    code="TRANSFER_UNPAIRED",
                ))

        return results
