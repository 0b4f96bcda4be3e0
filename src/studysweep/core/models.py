"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for scanning, duplicate detection and suggestion ranking.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional
import os

from studysweep.utils.convert_utils import ConvertUtils


# =============================
# Enums
# =============================

class ScanMode(Enum):
    """
    Selects the extension allowlist and the score adjustments.
    """
    STUDY = "study"
    EXAM = "exam"

    @property
    def display_name(self) -> str:
        """Human-readable name for UI display."""
        mapping = {
            ScanMode.STUDY: "Study",
            ScanMode.EXAM: "Exam",
        }
        return mapping.get(self, self.value)

    @property
    def description(self) -> str:
        """Detailed description for help text."""
        mapping = {
            ScanMode.STUDY:
                "Documents, notebooks and source files; low-confidence files hidden",
            ScanMode.EXAM:
                "Study files plus screenshots; every candidate is kept in the result",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class FileCategory(Enum):
    LECTURE = "Lecture"
    ASSIGNMENT = "Assignment"
    REFERENCE = "Reference"
    OLD = "Old"
    LARGE = "Large"
    DUPLICATE = "Duplicate"
    OTHER = "Other"


class ProtectionLevel(Enum):
    HARD = "hard"  # never scanned, never touched
    SOFT = "soft"  # scanned, confirmation required before any action


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class ProtectionEntry:
    """A protected folder. Owned by the caller, read-only here."""
    path: str
    level: ProtectionLevel


@dataclass
class CandidateFile:
    """
    A file that survived the extension/protection/system-path filters.
    Lives only for the duration of one scan.
    """
    path: str
    size_bytes: int
    modified_time: datetime
    created_time: datetime
    name: Optional[str] = None
    extension: Optional[str] = None

    def __post_init__(self):
        """Extract basename and extension from path if not provided."""
        if self.name is None:
            self.name = os.path.basename(self.path)

        if self.extension is None:
            _, ext = os.path.splitext(self.name)
            self.extension = ext.lower().lstrip(".")  # "Notes.PDF" -> "pdf"

    def __repr__(self):
        return f"<CandidateFile path={self.path}, size={self.size_bytes}>"


@dataclass
class DuplicateGroup:
    """
    Files sharing one content digest.
    All members have identical size and digest.
    """
    digest: str
    size: int
    paths: List[str] = field(default_factory=list)

    @property
    def duplicate_count(self) -> int:
        """How many files are in this group."""
        return len(self.paths)

    def is_duplicate(self) -> bool:
        """True if this group contains at least two files."""
        return self.duplicate_count >= 2

    def __repr__(self):
        return f"<DuplicateGroup digest={self.digest[:12]}, size={self.size}, count={len(self.paths)}>"


@dataclass
class Thresholds:
    """Age/size limits a scan is run with."""
    age_days: int
    size_mb: float

    @property
    def large_bytes(self) -> int:
        return int(self.size_mb * 1024 * 1024)


@dataclass
class FileRecord:
    """
    One ranked suggestion.
    confidence is always within [0.1, 1.0]; category is assigned
    independently of the confidence signals.
    """
    path: str
    size_bytes: int
    modified: datetime
    created: datetime
    days_old: int
    course_tag: str
    file_type: str
    confidence: float
    reason: str
    category: FileCategory
    digest: Optional[str] = None
    is_cloud_synced: bool = False
    is_locked: bool = False

    def __repr__(self):
        return f"<FileRecord path={self.path}, confidence={self.confidence:.2f}, category={self.category.value}>"


@dataclass
class ScanResult:
    """
    Output of one DirectoryScanner.scan() call. Rebuilt on every scan.
    files are sorted by confidence, highest first (stable on ties).
    """
    files: List[FileRecord] = field(default_factory=list)
    duplicate_groups: List[DuplicateGroup] = field(default_factory=list)
    total_files_scanned: int = 0
    total_size_bytes: int = 0
    duplicates_found: int = 0
    old_files_found: int = 0
    large_files_found: int = 0
    cloud_files_found: int = 0
    elapsed_seconds: float = 0.0
    truncated: bool = False

    @property
    def total_suggestions(self) -> int:
        return len(self.files)

    def files_by_category(self, category: FileCategory) -> List[FileRecord]:
        return [f for f in self.files if f.category == category]

    def summary(self) -> str:
        lines = [
            "Scan Results:",
            f"Cleanup suggestions: {self.total_suggestions}",
            f"Total files scanned: {self.total_files_scanned}",
            f"Total size: {ConvertUtils.bytes_to_human(self.total_size_bytes)}",
            f"Scan time: {self.elapsed_seconds:.3f}s",
            f"Duplicates: {self.duplicates_found} / Old: {self.old_files_found} / "
            f"Large: {self.large_files_found} / Cloud: {self.cloud_files_found}",
        ]
        if self.truncated:
            lines.append("Scan stopped early: candidate limit reached")
        return "\n".join(lines)


"""
DTO for scan parameters with built-in validation.
Interface-agnostic: used by both CLI and library callers.
"""

@dataclass
class ScanParams:
    """Parameters for a scan with validation."""
    root_dir: str
    age_threshold_days: int = 60
    size_threshold_mb: float = 100
    mode: ScanMode = ScanMode.STUDY

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.root_dir:
            raise ValueError("Root directory cannot be empty")

        if self.age_threshold_days < 0:
            raise ValueError("Age threshold cannot be negative")

        if self.size_threshold_mb < 0:
            raise ValueError("Size threshold cannot be negative")

    @staticmethod
    def from_human_readable(
            root_dir: str,
            age_days: int = 60,
            size_str: str = "100MB",
            mode: ScanMode = ScanMode.STUDY,
    ) -> 'ScanParams':
        """
        Factory method to create params from human-readable inputs.
        Useful for CLI argument parsing ("100MB", "1.5G", ...).
        """
        size_bytes = ConvertUtils.human_to_bytes(size_str)

        return ScanParams(
            root_dir=root_dir,
            age_threshold_days=int(age_days),
            size_threshold_mb=size_bytes / (1024 * 1024),
            mode=mode,
        )


# =============================
# Decision oracle answers
# =============================

class Concern(Enum):
    """Why a binary skip/proceed confirmation is requested."""
    CLOUD_SYNCED = "cloud-synced"
    SOFT_PROTECTED = "soft-protected"
    PURGE_SNAPSHOTS = "purge-snapshots"


class LockedFileChoice(Enum):
    SKIP = "skip"
    RETRY = "retry"
    CANCEL = "cancel"

    @property
    def display_name(self) -> str:
        mapping = {
            LockedFileChoice.SKIP: "Skip this file",
            LockedFileChoice.RETRY: "Retry in 10 seconds",
            LockedFileChoice.CANCEL: "Cancel all",
        }
        return mapping.get(self, self.value)


class ReminderChoice(Enum):
    CLEAN = "clean"
    SNOOZE = "snooze"
    KEEP_FOREVER = "keep-forever"

    @property
    def display_name(self) -> str:
        mapping = {
            ReminderChoice.CLEAN: "Clean (delete archive)",
            ReminderChoice.SNOOZE: "Snooze 7 days",
            ReminderChoice.KEEP_FOREVER: "Keep forever",
        }
        return mapping.get(self, self.value)
