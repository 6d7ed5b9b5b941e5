"""
Transfer Engine - bidirectional MOVED/COPIED tracking between matters.
"""

from src.engines.transfer.tracker import TransferRecordResult, TransferTracker

__all__ = [
    "TransferRecordResult",
    "TransferTracker",
]
