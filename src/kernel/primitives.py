"""
Identifier and temporal primitives.

GUID and UTC timestamp checks shared by the taxonomy, sequencer, transfer
tracker and integrity checker. "Now" is always passed in by the caller.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional, Union

from src.config import Settings, get_settings
from src.engines.validation.results import ValidationResult, require_property_name


NIL_GUID = uuid.UUID(int=0)

GuidLike = Union[uuid.UUID, str, None]


def parse_guid(value: GuidLike) -> Optional[uuid.UUID]:
    """Parse a GUID, returning None when it cannot be parsed."""
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (ValueError, AttributeError):
        return None


def is_valid_guid(value: GuidLike) -> bool:
    """True for a parsable, non-nil GUID."""
    parsed = parse_guid(value)
    return parsed is not None and parsed != NIL_GUID


def validate_guid(
    value: GuidLike,
    property_name: str,
    purpose: Optional[str] = None,
) -> List[ValidationResult]:
    require_property_name(property_name)
    if is_valid_guid(value):
        return []
    suffix = f" for {purpose}" if purpose else ""
    return [ValidationResult.error(
        f"{property_name} must be a valid non-empty GUID{suffix}.",
        [property_name],
        code="INVALID_GUID",
    )]


def ensure_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC; aware ones are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_timestamp(
    value: Optional[datetime],
    property_name: str,
    *,
    now: datetime,
    settings: Optional[Settings] = None,
) -> List[ValidationResult]:
    """Bound a timestamp between the configured floor and now + clock skew."""
    require_property_name(property_name)
    settings = settings or get_settings()

    if value is None:
        return [ValidationResult.error(
            f"{property_name} is required.",
            [property_name],
            code="TIMESTAMP_MISSING",
        )]

    results = []
    value = ensure_utc(value)
    now = ensure_utc(now)
    floor = ensure_utc(settings.min_allowed_date)

    if value < floor:
        results.append(ValidationResult.error(
            f"{property_name} cannot be earlier than {floor:%Y-%m-%d}.",
            [property_name],
            code="TIMESTAMP_TOO_OLD",
        ))

    if value > now + settings.future_tolerance:
        results.append(ValidationResult.error(
            f"{property_name} cannot be in the future (beyond clock skew tolerance "
            f"of {settings.future_tolerance_minutes} minutes).",
            [property_name],
            code="TIMESTAMP_IN_FUTURE",
        ))

    age_days = (now - value).total_seconds() / 86400
    if age_days > settings.max_reasonable_age_years * 365:
        results.append(ValidationResult.warning(
            f"{property_name} age exceeds reasonable bounds for active document "
            f"management ({settings.max_reasonable_age_years} years).",
            [property_name],
            code="TIMESTAMP_UNREASONABLE_AGE",
        ))

    return results


def validate_date_sequence(
    created_at: datetime,
    modified_at: datetime,
    created_property: str = "CreationDate",
    modified_property: str = "ModificationDate",
    *,
    settings: Optional[Settings] = None,
) -> List[ValidationResult]:
    """Modification must not precede creation; very long spans are suspicious."""
    require_property_name(created_property, "created_property")
    require_property_name(modified_property, "modified_property")
    settings = settings or get_settings()

    created_at = ensure_utc(created_at)
    modified_at = ensure_utc(modified_at)
    results = []

    if modified_at < created_at:
        results.append(ValidationResult.error(
            f"{modified_property} cannot be before {created_property} for chronological consistency.",
            [modified_property, created_property],
            code="DATE_SEQUENCE_REVERSED",
        ))
    elif modified_at - created_at > settings.max_date_span:
        results.append(ValidationResult.warning(
            f"Time span between {created_property} and {modified_property} exceeds "
            f"reasonable bounds ({settings.max_date_span_days} days).",
            [created_property, modified_property],
            code="DATE_SPAN_EXCESSIVE",
        ))

    return results
