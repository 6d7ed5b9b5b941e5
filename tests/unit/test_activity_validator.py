"""Unit tests for activity name validation."""

import pytest

from src.engines.validation.activity_validator import ActivityValidator
from src.engines.validation.results import Severity
from src.kernel.events.event_types import EntityKind
from src.kernel.events.taxonomy import normalize_activity


def _codes(results):
    return [r.code for r in results]


class TestActivityValidator:
    """Tests for ActivityValidator."""

    def test_valid_activity(self, settings):
        """A vocabulary activity passes every rule."""
        assert ActivityValidator.validate_activity("SAVED", EntityKind.DOCUMENT, settings=settings) == []

    def test_lowercase_with_space_is_valid(self, settings):
        """Spaces and casing are tolerated on input."""
        assert ActivityValidator.is_valid("checked out", EntityKind.DOCUMENT, settings)

    @pytest.mark.parametrize("empty", [None, "", "   "])
    def test_empty_activity(self, empty, settings):
        """An empty activity yields a single 'required' error."""
        results = ActivityValidator.validate_activity(empty, EntityKind.MATTER, settings=settings)
        assert _codes(results) == ["ACTIVITY_REQUIRED"]
        assert results[0].severity == Severity.ERROR

    def test_too_short(self, settings):
        results = ActivityValidator.validate_activity("X", EntityKind.MATTER, settings=settings)
        assert "ACTIVITY_TOO_SHORT" in _codes(results)

    def test_too_long(self, settings):
        results = ActivityValidator.validate_activity("A" * 51, EntityKind.MATTER, settings=settings)
        assert "ACTIVITY_TOO_LONG" in _codes(results)

    def test_punctuation_only(self, settings):
        """Nothing but separators leaves no activity name."""
        results = ActivityValidator.validate_activity("!?-", EntityKind.MATTER, settings=settings)
        assert "ACTIVITY_FORMAT" in _codes(results)

    @pytest.mark.parametrize("spelling", ["checked-out", "Checked Out", "checked__out", "CHECKED_OUT!"])
    def test_separators_agree_with_taxonomy(self, spelling, settings):
        """Any spelling the taxonomy normalizes is accepted as well formed."""
        assert normalize_activity(spelling, EntityKind.DOCUMENT) == "CHECKED_OUT"
        assert ActivityValidator.is_valid_format(spelling)
        assert ActivityValidator.validate_activity(spelling, EntityKind.DOCUMENT, settings=settings) == []

    def test_digits_only_rejected(self):
        assert not ActivityValidator.is_valid_format("12345")

    def test_reserved_name(self, settings):
        """Reserved system names are rejected and also unknown."""
        results = ActivityValidator.validate_activity("system", EntityKind.MATTER, settings=settings)
        assert "ACTIVITY_RESERVED" in _codes(results)
        assert "ACTIVITY_UNKNOWN" in _codes(results)

    def test_wrong_kind(self, settings):
        """Document activities are unknown on matters."""
        results = ActivityValidator.validate_activity("CHECKED_OUT", EntityKind.MATTER, settings=settings)
        assert _codes(results) == ["ACTIVITY_UNKNOWN"]
        assert "Allowed activities" in results[0].message

    def test_blank_property_name_raises(self, settings):
        with pytest.raises(ValueError):
            ActivityValidator.validate_activity("SAVED", EntityKind.DOCUMENT, " ", settings=settings)

    def test_detailed_results(self, settings):
        details = ActivityValidator.detailed_results("ARCHIVED", EntityKind.MATTER, settings)
        assert all(details.values())


class TestDuplication:
    """Tests for single-occurrence rules."""

    def test_created_only_once(self):
        assert ActivityValidator.is_valid_duplication("CREATED", [])
        assert not ActivityValidator.is_valid_duplication("created", ["CREATED", "SAVED"])

    def test_other_activities_repeat(self):
        assert ActivityValidator.is_valid_duplication("SAVED", ["SAVED", "SAVED"])

    def test_duplicates_disallowed(self):
        assert not ActivityValidator.is_valid_duplication("SAVED", ["SAVED"], allow_duplicates=False)

    def test_none_existing_raises(self):
        with pytest.raises(ValueError):
            ActivityValidator.is_valid_duplication("SAVED", None)


class TestSuggestions:
    """Tests for suggest_alternatives and the diagnostic report."""

    def test_similar_names_first(self, settings):
        suggestions = ActivityValidator.suggest_alternatives("CHECKED", EntityKind.DOCUMENT, settings=settings)
        assert suggestions[:2] == ["CHECKED_IN", "CHECKED_OUT"]

    def test_limit(self, settings):
        suggestions = ActivityValidator.suggest_alternatives("zzz", EntityKind.DOCUMENT, 2, settings)
        assert len(suggestions) == 2

    def test_non_positive_limit_raises(self, settings):
        with pytest.raises(ValueError):
            ActivityValidator.suggest_alternatives("SAVED", EntityKind.DOCUMENT, 0, settings)

    def test_report_lists_suggestions_for_invalid(self, settings):
        report = ActivityValidator.validation_report("checkd", EntityKind.DOCUMENT, settings)
        assert "Overall result: INVALID" in report
        assert "Suggestions:" in report

    def test_report_valid(self, settings):
        report = ActivityValidator.validation_report("viewed", EntityKind.MATTER, settings)
        assert "Normalized activity: 'VIEWED'" in report
        assert "Overall result: VALID" in report
