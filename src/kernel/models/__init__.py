"""
Kernel Data Models

Value models for entity references, state snapshots, activity records
and transfer requests.
"""

from src.kernel.models.activity import (
    ActivityRecord,
    EntityRef,
    EntityState,
    TransferOperation,
)

__all__ = [
    "ActivityRecord",
    "EntityRef",
    "EntityState",
    "TransferOperation",
]
