"""
Audit Engine - audit-trail integrity checking and anomaly detection.
"""

from src.engines.audit.anomaly_detector import AnomalyDetector
from src.engines.audit.integrity_checker import (
    IntegrityChecker,
    IntegrityReport,
    check_integrity,
)

__all__ = [
    "AnomalyDetector",
    "IntegrityChecker",
    "IntegrityReport",
    "check_integrity",
]
