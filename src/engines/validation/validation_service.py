"""
Validation Service - Orchestrates activity, revision, transfer and audit checks.
"""

import uuid
from datetime import datetime
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from src.config import Settings, get_settings
from src.engines.audit.integrity_checker import IntegrityChecker, IntegrityReport
from src.engines.revision.sequencer import RevisionSequenceAnalysis, RevisionSequencer
from src.engines.transfer.tracker import TransferRecordResult, TransferTracker
from src.engines.validation.activity_validator import ActivityValidator
from src.engines.validation.results import ValidationResult, errors, has_errors, warnings
from src.kernel.events.event_types import EntityKind
from src.kernel.events.taxonomy import normalize_activity
from src.kernel.models.activity import ActivityRecord, EntityState, TransferOperation
from src.logging_config import get_logger
from src.orchestration.state_machine import (
    validate_sequence,
    validate_state_consistency,
    validate_transition,
)

logger = get_logger(__name__)


class ActivityDecision(BaseModel):
    """Whether a proposed activity may be persisted."""

    kind: EntityKind
    activity: str
    normalized_activity: str = ""

    results: List[ValidationResult] = Field(default_factory=list)
    is_allowed: bool
    warnings: List[ValidationResult] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)

    @property
    def reasons(self) -> List[str]:
        return [r.message for r in errors(self.results)]


class RevisionDecision(BaseModel):
    """The revision number to persist, or the reasons none can be assigned."""

    revision_number: Optional[int] = None
    results: List[ValidationResult] = Field(default_factory=list)
    is_allowed: bool
    warnings: List[ValidationResult] = Field(default_factory=list)
    analysis: RevisionSequenceAnalysis


class ActivityValidationService:
    """
    Single entry point for the persistence layer.

    Usage:
        service = ActivityValidationService()
        decision = service.validate_activity(EntityKind.DOCUMENT, "CHECKED_OUT", state)
        if decision.is_allowed:
            ...persist...

    The caller must hold the entity's state steady between this decision
    and the write.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.sequencer = RevisionSequencer(self.settings)
        self.transfer_tracker = TransferTracker(self.settings)
        self.integrity_checker = IntegrityChecker(self.settings)

    def validate_activity(
        self,
        kind: EntityKind,
        activity: Optional[str],
        state: EntityState,
        *,
        previous_activity: Optional[str] = None,
        existing_activities: Iterable[str] = (),
        property_name: str = "Activity",
    ) -> ActivityDecision:
        """
        Run every activity-level check.

        Args:
            kind: Entity category the activity targets
            activity: Proposed activity name, any casing
            state: Current flags of the entity
            previous_activity: Latest recorded activity, for the advisory sequence check
            existing_activities: Activities already recorded, for single-occurrence rules
            property_name: Field name reported in results

        Returns:
            Decision with all results; is_allowed is False on any error
        """
        kind = EntityKind(kind)
        existing_activities = list(existing_activities)

        # Layer 1: Name
        results = ActivityValidator.validate_activity(
            activity, kind, property_name, settings=self.settings
        )
        normalized = normalize_activity(activity, kind)

        # Layer 2: Admissibility against current state
        if normalized:
            results += validate_transition(kind, normalized, state, property_name)

        # Layer 3: State consistency
        results += validate_state_consistency(kind, state)

        # Layer 4: Single occurrence
        if normalized and not ActivityValidator.is_valid_duplication(normalized, existing_activities):
            results.append(ValidationResult.error(
                f"{property_name} {normalized} may only be recorded once per {kind.value}.",
                [property_name],
                code="ACTIVITY_DUPLICATED",
            ))

        # Layer 5: Advisory sequence
        if normalized:
            results += validate_sequence(kind, previous_activity, normalized, property_name)

        is_allowed = not has_errors(results)
        suggestions = []
        if not normalized:
            suggestions = ActivityValidator.suggest_alternatives(activity, kind, settings=self.settings)

        decision = ActivityDecision(
            kind=kind,
            activity=str(activity) if activity is not None else "",
            normalized_activity=normalized,
            results=results,
            is_allowed=is_allowed,
            warnings=warnings(results),
            suggestions=suggestions,
        )

        logger.info(
            "Activity %s",
            "allowed" if is_allowed else "rejected",
            extra={
                "kind": kind.value,
                "activity": decision.activity,
                "error_count": len(decision.reasons),
                "warning_count": len(decision.warnings),
            },
        )
        return decision

    def validate_new_revision(
        self,
        existing_numbers: Iterable[int],
        candidate: Optional[int] = None,
        property_name: str = "RevisionNumber",
    ) -> RevisionDecision:
        """Assign the next number, or validate a caller-supplied candidate."""
        existing_numbers = list(existing_numbers)
        analysis = self.sequencer.analyze_sequence(existing_numbers)

        if candidate is None:
            assignment = self.sequencer.assign_next(existing_numbers, property_name)
            number, results = assignment.revision_number, assignment.results
        else:
            results = self.sequencer.validate_sequential(candidate, existing_numbers, property_name)
            number = None if has_errors(results) else candidate

        is_allowed = number is not None and not has_errors(results)
        logger.info(
            "Revision number %s",
            "assigned" if is_allowed else "rejected",
            extra={
                "revision_number": number,
                "existing_count": len(existing_numbers),
                "has_gaps": analysis.has_gaps,
            },
        )
        return RevisionDecision(
            revision_number=number,
            results=results,
            is_allowed=is_allowed,
            warnings=warnings(results),
            analysis=analysis,
        )

    def record_transfer(
        self,
        operation: TransferOperation,
        source_deleted: bool,
        destination_deleted: bool,
        document_deleted: bool,
        *,
        now: Optional[datetime] = None,
    ) -> TransferRecordResult:
        return self.transfer_tracker.record_transfer(
            operation, source_deleted, destination_deleted, document_deleted, now=now
        )

    def audit(
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
        return self.integrity_checker.report(
            history,
            entity_kind,
            is_deleted_now,
            now=now,
            new_records=new_records,
            entity_created_at=entity_created_at,
            revision_number=revision_number,
            transfer_counterparts=transfer_counterparts,
            entity_id=entity_id,
        )


def get_validation_service(settings: Optional[Settings] = None) -> ActivityValidationService:
    """Service bound to the given settings, or the cached application settings."""
    return ActivityValidationService(settings or get_settings())
