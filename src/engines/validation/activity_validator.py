"""
Activity name validation - local checks on raw activity strings.
"""

import re
from typing import Dict, Iterable, List, Optional

from src.config import Settings, get_settings
from src.engines.validation.results import ValidationResult, require_property_name
from src.kernel.events.event_types import ActivityCategory, EntityKind
from src.kernel.events.taxonomy import (
    activities_by_category,
    activity_category,
    canonicalize_activity,
    valid_activities,
)


class ActivityValidator:
    """
    Validates activity names before they reach the state machine.

    Checks length, character format, reserved names and vocabulary
    membership. Runs locally on the string alone.
    """

    # Letters, digits, underscores; starts and ends alphanumeric; no "__"
    FORMAT_PATTERN = re.compile(r"^[A-Z0-9]+(?:_[A-Z0-9]+)*$")

    # Activities that may appear only once in an entity's history
    SINGLE_OCCURRENCE = frozenset({"CREATED"})

    @classmethod
    def is_valid_format(cls, activity: Optional[str]) -> bool:
        """Canonical spelling is well formed and has at least one letter."""
        canonical = canonicalize_activity(activity)
        return bool(cls.FORMAT_PATTERN.match(canonical)) and any(c.isalpha() for c in canonical)

    @classmethod
    def is_reserved(cls, activity: Optional[str], settings: Optional[Settings] = None) -> bool:
        settings = settings or get_settings()
        return canonicalize_activity(activity) in settings.reserved_activity_names

    @classmethod
    def is_valid_length(cls, activity: Optional[str], settings: Optional[Settings] = None) -> bool:
        settings = settings or get_settings()
        if activity is None or not activity.strip():
            return False
        return settings.activity_min_length <= len(activity.strip()) <= settings.activity_max_length

    @classmethod
    def is_valid(
        cls,
        activity: Optional[str],
        kind: EntityKind,
        settings: Optional[Settings] = None,
    ) -> bool:
        return not cls.validate_activity(activity, kind, "Activity", settings=settings)

    @classmethod
    def validate_activity(
        cls,
        activity: Optional[str],
        kind: EntityKind,
        property_name: str = "Activity",
        *,
        settings: Optional[Settings] = None,
    ) -> List[ValidationResult]:
        """Every applicable violation for a raw activity string."""
        require_property_name(property_name)
        settings = settings or get_settings()

        if activity is None or not activity.strip():
            return [ValidationResult.error(
                f"{property_name} is required and cannot be empty.",
                [property_name],
                code="ACTIVITY_REQUIRED",
            )]

        results = []
        trimmed = activity.strip()

        if len(trimmed) < settings.activity_min_length:
            results.append(ValidationResult.error(
                f"{property_name} must be at least {settings.activity_min_length} characters long.",
                [property_name],
                code="ACTIVITY_TOO_SHORT",
            ))
        elif len(trimmed) > settings.activity_max_length:
            results.append(ValidationResult.error(
                f"{property_name} cannot exceed {settings.activity_max_length} characters.",
                [property_name],
                code="ACTIVITY_TOO_LONG",
            ))

        if not cls.is_valid_format(trimmed):
            results.append(ValidationResult.error(
                f"{property_name} must include at least one letter; spaces and punctuation "
                f"are read as word separators.",
                [property_name],
                code="ACTIVITY_FORMAT",
            ))

        if cls.is_reserved(trimmed, settings):
            results.append(ValidationResult.error(
                f"{property_name} uses a reserved activity name. "
                f"Reserved names: {', '.join(sorted(settings.reserved_activity_names))}.",
                [property_name],
                code="ACTIVITY_RESERVED",
            ))

        allowed = valid_activities(kind)
        if canonicalize_activity(trimmed) not in allowed:
            results.append(ValidationResult.error(
                f"{property_name} '{trimmed}' is not a recognized {EntityKind(kind).value} activity. "
                f"Allowed activities: {', '.join(sorted(allowed))}.",
                [property_name],
                code="ACTIVITY_UNKNOWN",
            ))

        return results

    @classmethod
    def is_valid_duplication(
        cls,
        activity: Optional[str],
        existing_activities: Iterable[str],
        allow_duplicates: bool = True,
    ) -> bool:
        """CREATED may occur once; others repeat unless duplicates are disallowed."""
        if existing_activities is None:
            raise ValueError("existing_activities must not be None")
        canonical = canonicalize_activity(activity)
        if not canonical:
            return False
        if allow_duplicates and canonical not in cls.SINGLE_OCCURRENCE:
            return True
        existing = {canonicalize_activity(a) for a in existing_activities}
        return canonical not in existing

    @classmethod
    def suggest_alternatives(
        cls,
        attempted: Optional[str],
        kind: EntityKind,
        max_suggestions: Optional[int] = None,
        settings: Optional[Settings] = None,
    ) -> List[str]:
        """Vocabulary entries resembling the attempted name, then the rest."""
        settings = settings or get_settings()
        limit = settings.max_activity_suggestions if max_suggestions is None else max_suggestions
        if limit < 1:
            raise ValueError("max_suggestions must be at least 1")

        vocabulary = sorted(valid_activities(kind))
        canonical = canonicalize_activity(attempted)
        if not canonical:
            return vocabulary[:limit]

        similar = [a for a in vocabulary if canonical in a or a in canonical]

        hinted = activity_category(canonical)
        if hinted != ActivityCategory.UNKNOWN:
            similar += [a for a in activities_by_category(kind, hinted) if a not in similar]

        similar += [a for a in vocabulary if a not in similar]
        return similar[:limit]

    @classmethod
    def detailed_results(
        cls,
        activity: Optional[str],
        kind: EntityKind,
        settings: Optional[Settings] = None,
    ) -> Dict[str, bool]:
        settings = settings or get_settings()
        return {
            "is_not_empty": bool(activity and activity.strip()),
            "has_valid_length": cls.is_valid_length(activity, settings),
            "has_valid_format": cls.is_valid_format(activity),
            "is_not_reserved": not cls.is_reserved(activity, settings),
            "is_in_vocabulary": canonicalize_activity(activity) in valid_activities(kind),
            "passes_all_rules": cls.is_valid(activity, kind, settings),
        }

    @classmethod
    def validation_report(
        cls,
        activity: Optional[str],
        kind: EntityKind,
        settings: Optional[Settings] = None,
    ) -> str:
        """Human-readable diagnostic for repair tooling and support."""
        kind = EntityKind(kind)
        lines = [f"{kind.value.title()} activity validation report for: '{activity}'"]
        lines.append("=" * len(lines[0]))

        details = cls.detailed_results(activity, kind, settings)
        for check, passed in details.items():
            lines.append(f"{check}: {'PASS' if passed else 'FAIL'}")

        lines.append("")
        lines.append(f"Normalized activity: '{canonicalize_activity(activity) or '<invalid>'}'")
        lines.append(f"Overall result: {'VALID' if details['passes_all_rules'] else 'INVALID'}")

        if not details["passes_all_rules"]:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in cls.suggest_alternatives(activity, kind, 3, settings):
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)
