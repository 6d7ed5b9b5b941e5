"""
Revision Engine - sequential revision numbering.
"""

from src.engines.revision.sequencer import (
    RevisionAssignment,
    RevisionSequenceAnalysis,
    RevisionSequencer,
)

__all__ = [
    "RevisionAssignment",
    "RevisionSequenceAnalysis",
    "RevisionSequencer",
]
