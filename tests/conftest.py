"""
Pytest fixtures for audit engine tests.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import pytest

from src.config import Settings
from src.kernel.models.activity import ActivityRecord, EntityState


# Fixed clock so temporal checks are deterministic
NOW = datetime(2025, 6, 2, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def settings() -> Settings:
    """Default settings, isolated from any .env in the working directory."""
    return Settings(_env_file=None)


@pytest.fixture
def entity_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def make_record(entity_id: uuid.UUID, user_id: uuid.UUID) -> Callable[..., ActivityRecord]:
    """
    Factory for ActivityRecords on the default entity and user.

    `minutes_ago` is relative to NOW.
    """

    def _make(
        activity: str,
        minutes_ago: float = 60,
        *,
        entity: Optional[uuid.UUID] = None,
        user: Optional[uuid.UUID] = None,
        at: Optional[datetime] = None,
        **extra,
    ) -> ActivityRecord:
        return ActivityRecord(
            entity_id=entity or entity_id,
            activity_type=activity,
            user_id=user or user_id,
            occurred_at=at or NOW - timedelta(minutes=minutes_ago),
            **extra,
        )

    return _make


@pytest.fixture
def active_state() -> EntityState:
    return EntityState()


@pytest.fixture
def deleted_state() -> EntityState:
    return EntityState(is_deleted=True)
