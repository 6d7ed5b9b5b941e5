"""
Integrity Checker - validates an entity's complete audit trail.

Runs every check over the timeline (history plus records about to be
persisted, ordered by occurred_at) and returns all violations together.
"""

import uuid
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from pydantic import BaseModel, Field

from src.config import Settings, get_settings
from src.engines.audit.anomaly_detector import AnomalyDetector
from src.engines.transfer.tracker import TransferTracker
from src.engines.validation.results import ValidationResult, Severity, errors
from src.kernel.events.event_types import EntityKind
from src.kernel.events.taxonomy import is_transfer_activity, valid_activities
from src.kernel.models.activity import ActivityRecord
from src.kernel.primitives import ensure_utc, validate_guid, validate_timestamp
from src.logging_config import get_logger
from src.orchestration.state_machine import validate_sequence

logger = get_logger(__name__)

_FIELD = "Activities"


class IntegrityReport(BaseModel):
    """Audit-trail integrity for one entity."""

    entity_id: Optional[uuid.UUID] = None
    checked_at: datetime

    results: List[ValidationResult] = Field(default_factory=list)

    is_valid: bool
    error_count: int = 0
    warning_count: int = 0
    blocking_reasons: List[str] = Field(default_factory=list)


class IntegrityChecker:
    """
    Audit-trail integrity checks.

    Checks (all run, none short-circuits):
    0. Structure - one entity, attributed ids, known activities, unique entries, CREATED first and once
    1. Required coverage - activity present, first revision created, deletion state agrees
    2. Duplicate detection - same activity by same user on same day
    3. Sequence plausibility - advisory adjacent-pair whitelist
    4. Temporal bounds - floor date, clock skew, not before entity creation
    5. Backdating - new entries within the backdate window
    6. Burst detection - per user trailing window
    7. Daily volume - per user per UTC day
    8. Transfer pairing - both sides of every MOVED/COPIED present
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def check(
        self,
        history: Iterable[ActivityRecord],
        entity_kind: EntityKind,
        is_deleted_now: bool,
        *,
        now: datetime,
        new_records: Iterable[ActivityRecord] = (),
        entity_created_at: Optional[datetime] = None,
        revision_number: Optional[int] = None,
        transfer_counterparts: Iterable[ActivityRecord] = (),
    ) -> List[ValidationResult]:
        kind = EntityKind(entity_kind)
        new_records = list(new_records)
        timeline = sorted(list(history) + new_records, key=lambda r: r.occurred_at)

        results: List[ValidationResult] = []
        results += self._check_structure(timeline, kind)
        results += self._check_coverage(timeline, kind, is_deleted_now, revision_number)
        results += AnomalyDetector.check_same_day_duplicates(timeline, _FIELD)
        results += self._check_sequence(timeline, kind)
        results += self._check_temporal_bounds(timeline, now, entity_created_at)
        results += AnomalyDetector.check_backdating(new_records, now, self.settings)
        results += AnomalyDetector.check_bursts(timeline, self.settings, _FIELD)
        results += AnomalyDetector.check_daily_volume(timeline, self.settings, _FIELD)
        results += TransferTracker(self.settings).validate_pairing(
            timeline, transfer_counterparts, _FIELD
        )

        logger.debug(
            "Integrity check complete",
            extra={
                "entity_kind": kind.value,
                "record_count": len(timeline),
                "new_record_count": len(new_records),
                "result_count": len(results),
            },
        )
        return results

    def report(
        self,
        history: Iterable[ActivityRecord],
        entity_kind: EntityKind,
        is_deleted_now: bool,
        *,
        now: datetime,
        new_records: Iterable[ActivityRecord] = (),
        entity_created_at: Optional[datetime] = None,
        revision_number: Optional[int] = None,
        transfer_counterparts: Iterable[ActivityRecord] = (),
        entity_id: Optional[uuid.UUID] = None,
    ) -> IntegrityReport:
        history = list(history)
        new_records = list(new_records)
        results = self.check(
            history,
            entity_kind,
            is_deleted_now,
            now=now,
            new_records=new_records,
            entity_created_at=entity_created_at,
            revision_number=revision_number,
            transfer_counterparts=transfer_counterparts,
        )

        if entity_id is None:
            records = history + new_records
            entity_id = records[0].entity_id if records else None

        blocking = [r.message for r in errors(results)]
        report = IntegrityReport(
            entity_id=entity_id,
            checked_at=ensure_utc(now),
            results=results,
            is_valid=not blocking,
            error_count=len(blocking),
            warning_count=sum(1 for r in results if r.severity == Severity.WARNING),
            blocking_reasons=blocking,
        )

        log = logger.warning if blocking else logger.info
        log(
            "Audit trail integrity %s",
            "failed" if blocking else "passed",
            extra={
                "entity_id": str(entity_id) if entity_id else None,
                "error_count": report.error_count,
                "warning_count": report.warning_count,
            },
        )
        return report

    # 0. Structure

    def _check_structure(self, timeline: Sequence[ActivityRecord], kind: EntityKind) -> List[ValidationResult]:
        results = []

        entity_ids = {r.entity_id for r in timeline}
        if len(entity_ids) > 1:
            results.append(ValidationResult.error(
                f"Audit trail mixes records of {len(entity_ids)} different entities.",
                [_FIELD],
                code="MIXED_ENTITIES",
            ))

        allowed = valid_activities(kind)
        for index, record in enumerate(timeline):
            results += validate_guid(record.entity_id, f"{_FIELD}[{index}].EntityId", "the audited entity")
            results += validate_guid(record.user_id, f"{_FIELD}[{index}].UserId", "the acting user")
            known = record.activity_type in allowed or (
                kind == EntityKind.MATTER and is_transfer_activity(record.activity_type)
            )
            if not known:
                results.append(ValidationResult.error(
                    f"'{record.activity_type}' at {record.occurred_at.isoformat()} is not a "
                    f"recognized {kind.value} activity.",
                    [_FIELD],
                    code="ACTIVITY_UNKNOWN",
                ))

        results += AnomalyDetector.check_exact_duplicates(timeline, _FIELD)

        created = [r for r in timeline if r.activity_type == "CREATED"]
        if len(created) > 1:
            results.append(ValidationResult.error(
                f"CREATED appears {len(created)} times; an entity is created only once.",
                [_FIELD],
                code="CREATED_REPEATED",
            ))
        if created and timeline[0].activity_type != "CREATED":
            results.append(ValidationResult.error(
                f"CREATED must be the first activity, but {timeline[0].activity_type} at "
                f"{timeline[0].occurred_at.isoformat()} precedes it.",
                [_FIELD],
                code="CREATED_NOT_FIRST",
            ))

        return results

    # 1. Required coverage

    def _check_coverage(
        self,
        timeline: Sequence[ActivityRecord],
        kind: EntityKind,
        is_deleted_now: bool,
        revision_number: Optional[int],
    ) -> List[ValidationResult]:
        results = []

        if not timeline and not is_deleted_now:
            results.append(ValidationResult.error(
                f"Active {kind.value} must have at least one activity in its audit trail.",
                [_FIELD],
                code="NO_ACTIVITY",
            ))

        if (
            kind == EntityKind.REVISION
            and revision_number == self.settings.min_revision_number
            and not any(r.activity_type == "CREATED" for r in timeline)
        ):
            results.append(ValidationResult.error(
                "The first revision of a document must include a CREATED activity.",
                [_FIELD],
                code="FIRST_REVISION_NOT_CREATED",
            ))

        lifecycle = [r for r in timeline if r.activity_type in ("DELETED", "RESTORED")]
        deletion_outstanding = bool(lifecycle) and lifecycle[-1].activity_type == "DELETED"

        if deletion_outstanding and not is_deleted_now:
            results.append(ValidationResult.error(
                f"{kind.value.title()} is active but its audit trail ends with DELETED "
                f"and no later RESTORED.",
                [_FIELD, "IsDeleted"],
                code="DELETION_STATE_MISMATCH",
            ))
        elif is_deleted_now and not deletion_outstanding:
            results.append(ValidationResult.error(
                f"{kind.value.title()} is deleted but its audit trail has no outstanding DELETED activity.",
                [_FIELD, "IsDeleted"],
                code="DELETION_STATE_MISMATCH",
            ))

        return results

    # 3. Sequence plausibility

    def _check_sequence(self, timeline: Sequence[ActivityRecord], kind: EntityKind) -> List[ValidationResult]:
        # Transfers sit outside the entity's own lifecycle
        lifecycle = [r for r in timeline if not is_transfer_activity(r.activity_type)]
        results = []
        for previous, current in zip(lifecycle, lifecycle[1:]):
            results += validate_sequence(kind, previous.activity_type, current.activity_type, _FIELD)
        return results

    # 4. Temporal bounds

    def _check_temporal_bounds(
        self,
        timeline: Sequence[ActivityRecord],
        now: datetime,
        entity_created_at: Optional[datetime],
    ) -> List[ValidationResult]:
        results = []
        earliest = (
            ensure_utc(entity_created_at) - self.settings.future_tolerance
            if entity_created_at is not None
            else None
        )

        for index, record in enumerate(timeline):
            property_name = f"{_FIELD}[{index}].OccurredAt"
            # Hard bounds only
            results += errors(validate_timestamp(
                record.occurred_at, property_name, now=now, settings=self.settings
            ))
            if earliest is not None and record.occurred_at < earliest:
                results.append(ValidationResult.error(
                    f"{property_name} ({record.activity_type}) precedes the entity's creation date.",
                    [property_name],
                    code="BEFORE_ENTITY_CREATION",
                ))

        return results


def check_integrity(
    history: Iterable[ActivityRecord],
    entity_kind: EntityKind,
    is_deleted_now: bool,
    *,
    now: datetime,
    new_records: Iterable[ActivityRecord] = (),
    entity_created_at: Optional[datetime] = None,
    revision_number: Optional[int] = None,
    transfer_counterparts: Iterable[ActivityRecord] = (),
    settings: Optional[Settings] = None,
) -> List[ValidationResult]:
    """Every integrity violation of an entity's audit trail; empty means sound."""
    return IntegrityChecker(settings).check(
        history,
        entity_kind,
        is_deleted_now,
        now=now,
        new_records=new_records,
        entity_created_at=entity_created_at,
        revision_number=revision_number,
        transfer_counterparts=transfer_counterparts,
    )
