"""
Anomaly Detection - heuristics over an ordered activity timeline.

Detects patterns that suggest a tampered or machine-generated trail:
- Exact duplicate entries (same entity, activity, user, timestamp)
- Same-day repeats of one activity by one user
- Bursts of activity from one user inside a short window
- Excessive daily volume from one user
- Backdated new entries
"""

from collections import Counter, defaultdict, deque
from datetime import datetime
from typing import Deque, Dict, List, Optional, Sequence

from src.config import Settings, get_settings
from src.engines.validation.results import ValidationResult
from src.kernel.models.activity import ActivityRecord
from src.kernel.primitives import ensure_utc


class AnomalyDetector:
    """
    Timeline heuristics.

    Every check takes the timeline already ordered by occurred_at and
    returns ValidationResults. Only exact duplicates and backdating are
    hard failures.
    """

    @classmethod
    def check_exact_duplicates(
        cls,
        timeline: Sequence[ActivityRecord],
        property_name: str = "Activities",
    ) -> List[ValidationResult]:
        """The composite identity must be unique within a history."""
        counts = Counter(r.identity for r in timeline)
        results = []
        for (entity_id, activity, user_id, occurred_at), count in counts.items():
            if count > 1:
                results.append(ValidationResult.error(
                    f"Duplicate audit entry: {activity} by user {user_id} at "
                    f"{occurred_at.isoformat()} appears {count} times.",
                    [property_name],
                    code="DUPLICATE_ENTRY",
                ))
        return results

    @classmethod
    def check_same_day_duplicates(
        cls,
        timeline: Sequence[ActivityRecord],
        property_name: str = "Activities",
    ) -> List[ValidationResult]:
        """One warning per (activity, user, UTC day) group seen more than once."""
        counts = Counter((r.activity_type, r.user_id, r.occurred_on) for r in timeline)
        results = []
        for (activity, user_id, day), count in counts.items():
            if count > 1:
                results.append(ValidationResult.warning(
                    f"Possible duplicate audit entries: {activity} by user {user_id} "
                    f"recorded {count} times on {day.isoformat()}.",
                    [property_name],
                    code="POSSIBLE_DUPLICATE",
                ))
        return results

    @classmethod
    def check_bursts(
        cls,
        timeline: Sequence[ActivityRecord],
        settings: Optional[Settings] = None,
        property_name: str = "Activities",
    ) -> List[ValidationResult]:
        """
        Flag each record whose user already has more than burst_max_count
        records in the trailing window (t - window, t], the record included.
        """
        settings = settings or get_settings()
        windows: Dict[object, Deque[datetime]] = defaultdict(deque)
        results = []

        for position, record in enumerate(timeline, start=1):
            window = windows[record.user_id]
            window.append(record.occurred_at)
            floor = record.occurred_at - settings.burst_window
            while window and window[0] <= floor:
                window.popleft()

            if len(window) > settings.burst_max_count:
                results.append(ValidationResult.warning(
                    f"Suspicious activity burst: record {position} ({record.activity_type} at "
                    f"{record.occurred_at.isoformat()}) is one of {len(window)} records by user "
                    f"{record.user_id} within {settings.burst_window_minutes} minutes.",
                    [property_name],
                    code="ACTIVITY_BURST",
                ))

        return results

    @classmethod
    def check_daily_volume(
        cls,
        timeline: Sequence[ActivityRecord],
        settings: Optional[Settings] = None,
        property_name: str = "Activities",
    ) -> List[ValidationResult]:
        settings = settings or get_settings()
        counts = Counter((r.user_id, r.occurred_on) for r in timeline)
        results = []
        for (user_id, day), count in counts.items():
            if count > settings.max_daily_activity_count:
                results.append(ValidationResult.warning(
                    f"User {user_id} recorded {count} activities on {day.isoformat()}, "
                    f"above the daily limit of {settings.max_daily_activity_count}.",
                    [property_name],
                    code="DAILY_VOLUME_EXCEEDED",
                ))
        return results

    @classmethod
    def check_backdating(
        cls,
        new_records: Sequence[ActivityRecord],
        now: datetime,
        settings: Optional[Settings] = None,
        property_name: str = "OccurredAt",
    ) -> List[ValidationResult]:
        """New entries must be reported within max_backdate_hours of now."""
        settings = settings or get_settings()
        cutoff = ensure_utc(now) - settings.max_backdate
        return [
            ValidationResult.error(
                f"{record.activity_type} at {record.occurred_at.isoformat()} is backdated more than "
                f"{settings.max_backdate_hours} hours and cannot be entered now.",
                [property_name],
                code="BACKDATED_ACTIVITY",
            )
            for record in new_records
            if record.occurred_at < cutoff
        ]
