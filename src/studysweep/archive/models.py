"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

archive/models.py
Snapshot manifest records and cleanup batch results.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from studysweep.core.models import ProtectionLevel
from studysweep.utils.convert_utils import ConvertUtils

MANIFEST_FILENAME = "archive_info.json"
REMINDER_FILENAME = ".reminder_date"
KEEP_FOREVER_FILENAME = ".keep_forever"


class CleanupMode(Enum):
    PREVIEW = "preview"
    RECYCLE = "recycle"
    ARCHIVE = "archive"

    @property
    def description(self) -> str:
        mapping = {
            CleanupMode.PREVIEW: "Show what would happen, change nothing",
            CleanupMode.RECYCLE: "Move files to the system trash",
            CleanupMode.ARCHIVE: "Move files into a dated archive folder",
        }
        return mapping.get(self, self.value)


class FailureKind(Enum):
    METADATA_UNREADABLE = "metadata-unreadable"
    NAME_CONFLICT_EXHAUSTED = "name-conflict-exhausted"
    MOVE_FAILED = "move-failed"
    TRASH_FAILED = "trash-failed"
    DELETE_FAILED = "delete-failed"


class SkipReason(Enum):
    NOT_FOUND = "not-found"
    HARD_PROTECTED = "hard-protected"
    DECLINED = "declined"
    LOCKED = "locked"
    CANCELLED = "cancelled"


@dataclass
class FailedFile:
    path: str
    kind: FailureKind
    message: str


@dataclass
class SkippedFile:
    path: str
    reason: SkipReason


@dataclass
class PreviewEntry:
    path: str
    size_bytes: int
    is_cloud_synced: bool
    is_locked: bool
    protection: Optional[ProtectionLevel] = None


@dataclass
class CleanupResult:
    """
    Outcome of one batch. Per-file failures and skips never abort the batch;
    they are collected here with their cause.
    """
    files_processed: int = 0
    total_size_bytes: int = 0
    successful: List[str] = field(default_factory=list)
    failed: List[FailedFile] = field(default_factory=list)
    skipped: List[SkippedFile] = field(default_factory=list)
    previews: List[PreviewEntry] = field(default_factory=list)
    cancelled: bool = False
    snapshot_dir: Optional[str] = None

    def record_success(self, path: str, size_bytes: int) -> None:
        self.files_processed += 1
        self.total_size_bytes += size_bytes
        self.successful.append(path)

    def record_failure(self, path: str, kind: FailureKind, message: str) -> None:
        self.failed.append(FailedFile(path=path, kind=kind, message=message))

    def record_skip(self, path: str, reason: SkipReason) -> None:
        self.skipped.append(SkippedFile(path=path, reason=reason))

    def summary(self) -> str:
        lines = [
            f"Processed {self.files_processed} files ({ConvertUtils.bytes_to_human(self.total_size_bytes)})",
        ]
        if self.failed:
            lines.append(f"{len(self.failed)} files failed:")
            lines.extend(f"  • {f.path}: {f.message}" for f in self.failed)
        if self.skipped:
            lines.append(f"{len(self.skipped)} files skipped")
        if self.cancelled:
            lines.append("Cancelled by user; remaining files were left untouched")
        return "\n".join(lines)


@dataclass
class ArchivedFileRecord:
    original_path: str
    archived_path: str
    course_tag: str
    file_type: str
    size_bytes: int
    archived_at: datetime
    original_modified_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_path": self.original_path,
            "archived_path": self.archived_path,
            "course_tag": self.course_tag,
            "file_type": self.file_type,
            "size_bytes": self.size_bytes,
            "archived_at": ConvertUtils.datetime_to_rfc3339(self.archived_at),
            "original_modified_at": ConvertUtils.datetime_to_rfc3339(self.original_modified_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ArchivedFileRecord':
        return cls(
            original_path=data["original_path"],
            archived_path=data["archived_path"],
            course_tag=data.get("course_tag", "general"),
            file_type=data.get("file_type", "unknown"),
            size_bytes=int(data.get("size_bytes", 0)),
            archived_at=ConvertUtils.rfc3339_to_datetime(data["archived_at"]),
            original_modified_at=ConvertUtils.rfc3339_to_datetime(data["original_modified_at"]),
        )


@dataclass
class ArchiveSnapshot:
    """
    One calendar day of archived files. Serialized as archive_info.json
    inside the snapshot directory.
    """
    date: date
    directory: str
    files: List[ArchivedFileRecord] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_bytes(self) -> int:
        return sum(f.size_bytes for f in self.files)

    def add(self, record: ArchivedFileRecord) -> None:
        self.files.append(record)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "directory": self.directory,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "files": [f.to_dict() for f in self.files],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ArchiveSnapshot':
        return cls(
            date=date.fromisoformat(data["date"]),
            directory=data["directory"],
            files=[ArchivedFileRecord.from_dict(f) for f in data.get("files", [])],
        )

    def __repr__(self):
        return f"<ArchiveSnapshot date={self.date}, files={self.total_files}>"


@dataclass
class SnapshotInfo:
    path: str
    date: date
    age_days: int
    size_bytes: int


@dataclass
class ArchiveStats:
    total_snapshots: int = 0
    oldest: Optional[date] = None
    newest: Optional[date] = None
    total_bytes: int = 0
    stale: List[SnapshotInfo] = field(default_factory=list)

    def summary(self) -> str:
        if not self.total_snapshots:
            return "No archives found"
        lines = [
            "Archive Statistics:",
            f"Total archives: {self.total_snapshots}",
            f"Oldest: {self.oldest.isoformat()}",
            f"Newest: {self.newest.isoformat()}",
            f"Total size: {ConvertUtils.bytes_to_human(self.total_bytes)}",
        ]
        if self.stale:
            lines.append(f"{len(self.stale)} archives older than 30 days:")
            lines.extend(
                f"  • {s.path} ({s.age_days} days old, {ConvertUtils.bytes_to_human(s.size_bytes)})"
                for s in self.stale
            )
        return "\n".join(lines)
