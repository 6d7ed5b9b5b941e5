"""
Revision Sequencer - gapless, unique revision numbering per document.

Numbers are assigned once at creation and never renumbered, so a sequence
that already has holes is reported, not repaired.
"""

from collections import Counter
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from src.config import Settings, get_settings
from src.engines.validation.results import ValidationResult, has_errors, require_property_name
from src.logging_config import get_logger

logger = get_logger(__name__)


class RevisionSequenceAnalysis(BaseModel):
    """Read-only diagnostic over a document's existing revision numbers."""

    is_valid: bool
    next_number: int
    has_gaps: bool
    missing_numbers: List[int] = Field(default_factory=list)
    highest_revision: int = 0
    total_revisions: int = 0
    duplicate_numbers: List[int] = Field(default_factory=list)
    out_of_range_numbers: List[int] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)


class RevisionAssignment(BaseModel):
    """The number to persist for a new revision, or None when blocked."""

    revision_number: Optional[int] = None
    results: List[ValidationResult] = Field(default_factory=list)

    @property
    def is_assigned(self) -> bool:
        return self.revision_number is not None


class RevisionSequencer:
    """
    Computes and validates revision numbers.

    Rules:
    - Numbers lie in [min_revision_number, max_revision_number]
    - No duplicates
    - The sorted set of numbers is exactly 1..n
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def next_number(self, existing: Iterable[int]) -> int:
        """max(existing) + 1, or the first number for a new document."""
        if existing is None:
            raise ValueError("existing must not be None")
        numbers = list(existing)
        return max(numbers) + 1 if numbers else self.settings.min_revision_number

    def is_in_range(self, number: int) -> bool:
        return self.settings.min_revision_number <= number <= self.settings.max_revision_number

    def validate_number(self, number: int, property_name: str = "RevisionNumber") -> List[ValidationResult]:
        require_property_name(property_name)
        if self.is_in_range(number):
            return []
        return [ValidationResult.error(
            f"{property_name} must be between {self.settings.min_revision_number} "
            f"and {self.settings.max_revision_number}.",
            [property_name],
            code="REVISION_OUT_OF_RANGE",
        )]

    def validate_sequential(
        self,
        candidate: int,
        existing: Iterable[int],
        property_name: str = "RevisionNumber",
    ) -> List[ValidationResult]:
        """
        Validate a candidate against the existing numbers.

        The sorted union of existing and candidate must be exactly 1..n; a
        violation reports the first position where that breaks.
        """
        require_property_name(property_name)
        if existing is None:
            raise ValueError("existing must not be None")

        numbers = set(existing)
        results = self.validate_number(candidate, property_name)

        if candidate in numbers:
            results.append(ValidationResult.error(
                f"{property_name} {candidate} already exists for this document.",
                [property_name],
                code="REVISION_DUPLICATE",
            ))

        union = sorted(numbers | {candidate})
        start = self.settings.min_revision_number
        for expected, actual in enumerate(union, start=start):
            if expected != actual:
                results.append(ValidationResult.error(
                    f"{property_name} sequence has a gap: Expected revision {expected}, found {actual}.",
                    [property_name],
                    code="REVISION_GAP",
                ))
                break

        return results

    def analyze_sequence(self, existing: Iterable[int]) -> RevisionSequenceAnalysis:
        """Diagnostic for repair tooling. The input is never modified."""
        if existing is None:
            raise ValueError("existing must not be None")

        numbers = list(existing)
        unique = sorted(set(numbers))
        counts = Counter(numbers)

        duplicates = sorted(n for n, c in counts.items() if c > 1)
        out_of_range = [n for n in unique if not self.is_in_range(n)]
        in_range = [n for n in unique if self.is_in_range(n)]

        highest = max(unique) if unique else 0
        start = self.settings.min_revision_number
        missing = (
            sorted(set(range(start, max(in_range) + 1)) - set(in_range)) if in_range else []
        )

        suggestions = []
        if missing:
            suggestions.append(
                f"Revision numbers {', '.join(str(n) for n in missing)} are missing; "
                f"existing numbers must not be renumbered, record the gap for review."
            )
        if duplicates:
            suggestions.append(
                f"Revision numbers {', '.join(str(n) for n in duplicates)} are used more than once."
            )
        if out_of_range:
            suggestions.append(
                f"Revision numbers {', '.join(str(n) for n in out_of_range)} fall outside "
                f"{self.settings.min_revision_number}..{self.settings.max_revision_number}."
            )

        next_number = self.next_number(unique)
        if next_number > self.settings.max_revision_number:
            suggestions.append("The maximum revision number has been reached.")

        return RevisionSequenceAnalysis(
            is_valid=not (missing or duplicates or out_of_range),
            next_number=next_number,
            has_gaps=bool(missing),
            missing_numbers=missing,
            highest_revision=highest,
            total_revisions=len(numbers),
            duplicate_numbers=duplicates,
            out_of_range_numbers=out_of_range,
            suggestions=suggestions,
        )

    def assign_next(self, existing: Iterable[int], property_name: str = "RevisionNumber") -> RevisionAssignment:
        """Pick the next number; blocked when the existing set is unsound or exhausted."""
        if existing is None:
            raise ValueError("existing must not be None")
        numbers = list(existing)
        candidate = self.next_number(numbers)
        results = self.validate_sequential(candidate, numbers, property_name)

        analysis = self.analyze_sequence(numbers)
        if analysis.duplicate_numbers:
            results.append(ValidationResult.error(
                f"{property_name} values {analysis.duplicate_numbers} are duplicated in the existing sequence.",
                [property_name],
                code="REVISION_DUPLICATE",
            ))

        if has_errors(results):
            logger.info(
                "Revision number not assigned",
                extra={"candidate": candidate, "existing_count": len(numbers), "error_count": len(results)},
            )
            return RevisionAssignment(revision_number=None, results=results)

        return RevisionAssignment(revision_number=candidate, results=results)
