"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scorer.py
Category assignment and confidence scoring.

Confidence is the MAXIMUM over independent signals, never a sum. The reason
text lists every signal that fired, joined by " + ", whichever one won.
Signal order (fixed):
    1. exact duplicate              0.99
    2. duplicate-looking filename   0.85
    3. age                          0.95 past 90 days, else 0.70 + min(0.25, (days - threshold) / 30)
    4. size                         0.70 + min(0.25, size_mb / 1000)
    5. study keyword in filename    0.75
    6. category floor               Lecture/Assignment/Reference 0.65, Old 0.85, Large 0.75, Other 0.40
    7. exam-mode image cap          min(current, 0.40)
    8. absolute floor 0.1, clamp to 1.0

Category is decided separately (duplicate -> filename keyword -> age -> size -> Other)
and only feeds back through the floor in step 6.
"""

from typing import Callable, List, Optional, Tuple

from studysweep.core import rules
from studysweep.core.models import CandidateFile, FileCategory, ScanMode, Thresholds

EXACT_DUPLICATE_CONFIDENCE = 0.99
DUPLICATE_NAME_CONFIDENCE = 0.85
VERY_OLD_DAYS = 90
VERY_OLD_CONFIDENCE = 0.95
STUDY_KEYWORD_CONFIDENCE = 0.75
IMAGE_CAP = 0.4
MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 1.0

# Age at which a file is categorised "Old", independent of the scan threshold
OLD_CATEGORY_DAYS = 60

CATEGORY_FLOORS = {
    FileCategory.LECTURE: 0.65,
    FileCategory.ASSIGNMENT: 0.65,
    FileCategory.REFERENCE: 0.65,
    FileCategory.OLD: 0.85,
    FileCategory.LARGE: 0.75,
    FileCategory.OTHER: 0.40,
}

DEFAULT_REASON = "General study file"

Signal = Tuple[float, str]


def assign_category(
        filename: str,
        days_old: int,
        size_bytes: int,
        thresholds: Thresholds,
        is_duplicate: bool = False,
) -> FileCategory:
    """Fixed precedence: duplicate, filename keyword, age, size, Other."""
    if is_duplicate:
        return FileCategory.DUPLICATE

    keyword_category = rules.match_category_keyword(filename)
    if keyword_category is not None:
        return keyword_category

    if days_old > OLD_CATEGORY_DAYS:
        return FileCategory.OLD

    if size_bytes > thresholds.large_bytes:
        return FileCategory.LARGE

    return FileCategory.OTHER


class ConfidenceScorer:
    def __init__(self, mode: ScanMode = ScanMode.STUDY):
        self.mode = mode

    def score(
            self,
            file: CandidateFile,
            thresholds: Thresholds,
            duplicate_count: int,
            category: FileCategory,
            days_old: int,
    ) -> Tuple[float, str]:
        """
        Args:
            file: candidate being scored
            thresholds: age/size limits of this scan
            duplicate_count: size of the file's digest group (0 or 1 when unique)
            category: category from assign_category()
            days_old: whole days since last modification

        Returns:
            (confidence in [0.1, 1.0], reason text)
        """
        confidence = 0.0
        reasons: List[str] = []

        signals: List[Callable[[], Optional[Signal]]] = [
            lambda: self._exact_duplicate(duplicate_count),
            lambda: self._duplicate_name(file.name),
            lambda: self._age(days_old, thresholds.age_days),
            lambda: self._size(file.size_bytes, thresholds.large_bytes),
            lambda: self._study_keyword(file.name),
        ]
        for signal in signals:
            fired = signal()
            if fired is None:
                continue
            value, reason = fired
            confidence = max(confidence, value)
            reasons.append(reason)

        floor = CATEGORY_FLOORS.get(category)
        if floor is not None:
            confidence = max(confidence, floor)

        if self.mode == ScanMode.EXAM and file.extension in rules.IMAGE_EXTENSIONS:
            confidence = min(confidence, IMAGE_CAP)
            reasons.append("Screenshot (lower confidence)")

        confidence = min(max(confidence, MIN_CONFIDENCE), MAX_CONFIDENCE)
        reason = " + ".join(reasons) if reasons else DEFAULT_REASON
        return confidence, reason

    @staticmethod
    def _exact_duplicate(duplicate_count: int) -> Optional[Signal]:
        if duplicate_count > 1:
            return EXACT_DUPLICATE_CONFIDENCE, f"Exact duplicate ({duplicate_count} copies)"
        return None

    @staticmethod
    def _duplicate_name(filename: str) -> Optional[Signal]:
        if rules.contains_any(filename, rules.DUPLICATE_KEYWORDS):
            return DUPLICATE_NAME_CONFIDENCE, "Filename suggests duplicate"
        return None

    @staticmethod
    def _age(days_old: int, age_threshold_days: int) -> Optional[Signal]:
        if days_old > VERY_OLD_DAYS:
            return VERY_OLD_CONFIDENCE, f"Very old ({days_old} days)"
        if days_old > age_threshold_days:
            value = 0.70 + min(0.25, (days_old - age_threshold_days) / 30.0)
            return value, f"Old ({days_old} days)"
        return None

    @staticmethod
    def _size(size_bytes: int, large_bytes: int) -> Optional[Signal]:
        if size_bytes > large_bytes:
            size_mb = size_bytes / (1024.0 * 1024.0)
            value = 0.70 + min(0.25, size_mb / 1000.0)
            return value, f"Large file ({size_mb:.1f} MB)"
        return None

    @staticmethod
    def _study_keyword(filename: str) -> Optional[Signal]:
        if rules.contains_any(filename, rules.STUDY_KEYWORDS):
            return STUDY_KEYWORD_CONFIDENCE, "Study-related file"
        return None
