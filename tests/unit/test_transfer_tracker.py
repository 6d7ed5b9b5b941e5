"""Unit tests for the transfer tracker."""

import uuid
from datetime import timedelta

import pytest

from src.engines.transfer.tracker import TransferTracker
from src.kernel.events.event_types import TransferDirection
from src.kernel.models.activity import ActivityRecord, TransferOperation
from src.kernel.primitives import NIL_GUID


@pytest.fixture
def tracker(settings):
    return TransferTracker(settings)


@pytest.fixture
def operation(now):
    return TransferOperation(
        activity="moved",
        source_matter_id=uuid.uuid4(),
        destination_matter_id=uuid.uuid4(),
        document_id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        occurred_at=now - timedelta(minutes=1),
    )


def _codes(results):
    return [r.code for r in results]


class TestValidateTransfer:
    """Tests for validate_transfer."""

    def test_valid_transfer(self, tracker, operation, now):
        assert tracker.validate_transfer(operation, False, False, False, now=now) == []

    def test_self_transfer(self, tracker, operation):
        """Moving a document onto its own matter always fails."""
        same = operation.model_copy(update={"destination_matter_id": operation.source_matter_id})
        assert "TRANSFER_SAME_MATTER" in _codes(tracker.validate_transfer(same, False, False, False))

    def test_non_transfer_activity(self, tracker, operation):
        bad = operation.model_copy(update={"activity": "DELETED"})
        assert _codes(tracker.validate_transfer(bad, False, False, False)) == ["TRANSFER_ACTIVITY_INVALID"]

    def test_missing_ids(self, tracker, now):
        """Every nil identifier is reported on its own field."""
        op = TransferOperation(activity="COPIED", occurred_at=now)
        results = tracker.validate_transfer(op, False, False, False)
        fields = [f for r in results for f in r.fields]
        assert {"SourceMatterId", "DestinationMatterId", "DocumentId", "UserId"} <= set(fields)

    def test_deleted_entities(self, tracker, operation):
        results = tracker.validate_transfer(operation, True, True, True)
        assert _codes(results) == [
            "TRANSFER_SOURCE_DELETED",
            "TRANSFER_DESTINATION_DELETED",
            "TRANSFER_DOCUMENT_DELETED",
        ]

    def test_backdated_with_now(self, tracker, operation, now):
        old = operation.model_copy(update={"occurred_at": now - timedelta(hours=25)})
        assert "BACKDATED_ACTIVITY" in _codes(tracker.validate_transfer(old, False, False, False, now=now))

    def test_no_temporal_checks_without_now(self, tracker, operation, now):
        old = operation.model_copy(update={"occurred_at": now - timedelta(days=30)})
        assert tracker.validate_transfer(old, False, False, False) == []


class TestRecordTransfer:
    """Tests for record_transfer."""

    def test_produces_mirrored_pair(self, tracker, operation, now):
        outcome = tracker.record_transfer(operation, False, False, False, now=now)
        assert outcome.is_recorded
        source, destination = outcome.records

        assert source.entity_id == operation.source_matter_id
        assert source.related_entity_id == operation.destination_matter_id
        assert source.direction == TransferDirection.FROM
        assert destination.entity_id == operation.destination_matter_id
        assert destination.related_entity_id == operation.source_matter_id
        assert destination.direction == TransferDirection.TO

        for record in outcome.records:
            assert record.activity_type == "MOVED"
            assert record.document_id == operation.document_id
            assert record.user_id == operation.user_id
            assert record.occurred_at == operation.occurred_at

    def test_failure_produces_nothing(self, tracker, operation):
        outcome = tracker.record_transfer(operation, False, True, False)
        assert outcome.records == []
        assert not outcome.is_recorded
        assert _codes(outcome.results) == ["TRANSFER_DESTINATION_DELETED"]

    def test_nil_document_produces_nothing(self, tracker, operation):
        op = operation.model_copy(update={"document_id": NIL_GUID})
        assert tracker.record_transfer(op, False, False, False).records == []


class TestValidatePairing:
    """Tests for validate_pairing."""

    def test_complete_pair(self, tracker, operation):
        records = tracker.build_records(operation)
        assert tracker.validate_pairing(records) == []

    def test_orphaned_side(self, tracker, operation):
        source, _ = tracker.build_records(operation)
        results = tracker.validate_pairing([source])
        assert _codes(results) == ["TRANSFER_UNPAIRED"]
        assert "'from' side" in results[0].message

    def test_counterpart_supplied_separately(self, tracker, operation):
        """The other matter's record may come from its own trail."""
        source, destination = tracker.build_records(operation)
        assert tracker.validate_pairing([source], [destination]) == []

    def test_mismatched_timestamp(self, tracker, operation):
        source, destination = tracker.build_records(operation)
        shifted = destination.model_copy(update={"occurred_at": destination.occurred_at + timedelta(seconds=1)})
        assert len(tracker.validate_pairing([source, shifted])) == 2

    def test_same_side_does_not_pair(self, tracker, operation):
        """Two FROM records with swapped matters are not a FROM/TO pair."""
        source, _ = tracker.build_records(operation)
        impostor = source.model_copy(update={
            "entity_id": source.related_entity_id,
            "related_entity_id": source.entity_id,
        })
        assert _codes(tracker.validate_pairing([source, impostor])) == ["TRANSFER_UNPAIRED", "TRANSFER_UNPAIRED"]

    def test_undirected_records_pair(self, tracker, operation):
        records = [r.model_copy(update={"direction": None}) for r in tracker.build_records(operation)]
        assert tracker.validate_pairing(records) == []

    def test_incomplete_transfer_record(self, tracker, operation):
        record = ActivityRecord(
            entity_id=operation.source_matter_id,
            activity_type="COPIED",
            user_id=operation.user_id,
            occurred_at=operation.occurred_at,
        )
        assert _codes(tracker.validate_pairing([record])) == ["TRANSFER_RECORD_INCOMPLETE"]

    def test_non_transfer_records_ignored(self, tracker, operation):
        record = ActivityRecord(
            entity_id=operation.source_matter_id,
            activity_type="VIEWED",
            user_id=operation.user_id,
            occurred_at=operation.occurred_at,
        )
        assert tracker.validate_pairing([record]) == []
