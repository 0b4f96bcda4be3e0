"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

archive/store.py
Applies a cleanup batch in one of three modes:
- PREVIEW: report only, nothing on disk changes
- RECYCLE: move files to the system trash
- ARCHIVE: move files into <archive_root>/<YYYY-MM-DD>/<course>/ and record
  them in that day's archive_info.json

Every file passes the same guard chain before it is touched:
missing -> Hard protection -> cloud folder -> locked -> Soft protection.
"""

import json
import os
from datetime import timedelta
from pathlib import Path
from typing import Iterable, List, Optional, Union
import logging

from studysweep.archive.models import (
    MANIFEST_FILENAME,
    REMINDER_FILENAME,
    ArchivedFileRecord,
    ArchiveSnapshot,
    CleanupMode,
    CleanupResult,
    FailureKind,
    PreviewEntry,
    SkipReason,
)
from studysweep.context import SweepContext
from studysweep.core import rules
from studysweep.core.classifier import PathClassifier
from studysweep.core.models import Concern, FileRecord, LockedFileChoice, ProtectionLevel
from studysweep.errors import ManifestWriteError, UserCancelled
from studysweep.services.file_service import FileService
from studysweep.utils.convert_utils import ConvertUtils

logger = logging.getLogger(__name__)

REMINDER_INTERVAL_DAYS = 30
LOCKED_RETRY_WAIT_SECONDS = 10
MAX_NAME_ATTEMPTS = 100

CleanupTarget = Union[str, os.PathLike, FileRecord]


class ArchiveStore:
    """
    Moves files out of the study folder, either to the trash or to a dated
    archive snapshot. Per-file problems are recorded in the CleanupResult and
    never stop the batch; only a user cancel ends it early.
    """

    def __init__(
            self,
            context: Optional[SweepContext] = None,
            classifier: Optional[PathClassifier] = None,
            file_service=FileService,
    ):
        self.context = context or SweepContext()
        self.classifier = classifier or PathClassifier(self.context.protection)
        self.file_service = file_service

    def clean(self, files: Iterable[CleanupTarget], mode: CleanupMode) -> CleanupResult:
        """
        Args:
            files: paths or FileRecords, processed in the given order
            mode: PREVIEW, RECYCLE or ARCHIVE

        Returns:
            CleanupResult with successes, failures and skips

        Raises:
            ManifestWriteError: files were archived but the manifest could not be
                written; the exception carries the CleanupResult
        """
        paths = [self._as_path(f) for f in files]
        logger.debug(f"Cleaning {len(paths)} files (mode={mode.value})")

        if mode == CleanupMode.PREVIEW:
            return self._preview(paths)
        if mode == CleanupMode.RECYCLE:
            return self._recycle(paths)
        return self._archive(paths)

    @staticmethod
    def _as_path(item: CleanupTarget) -> str:
        if isinstance(item, FileRecord):
            return item.path
        return os.fspath(item)

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    def _preview(self, paths: List[str]) -> CleanupResult:
        result = CleanupResult()
        for path in paths:
            try:
                size = os.stat(path).st_size
            except OSError:
                result.record_skip(path, SkipReason.NOT_FOUND)
                continue

            entry = self.classifier.protection_for(path)
            result.previews.append(PreviewEntry(
                path=path,
                size_bytes=size,
                is_cloud_synced=self.classifier.is_cloud_synced(path),
                is_locked=self.classifier.is_locked(path),
                protection=entry.level if entry else None,
            ))
            result.total_size_bytes += size
        return result

    def _recycle(self, paths: List[str]) -> CleanupResult:
        result = CleanupResult()
        for idx, path in enumerate(paths):
            try:
                if not self._passes_guards(path, result):
                    continue
            except UserCancelled:
                self._cancel_remaining(paths[idx:], result)
                break

            try:
                size = os.stat(path).st_size
            except OSError as e:
                result.record_failure(path, FailureKind.METADATA_UNREADABLE, str(e))
                continue

            try:
                self.file_service.move_to_trash(path)
            except (OSError, RuntimeError) as e:
                logger.warning(f"Failed to move {path} to trash: {e}")
                result.record_failure(path, FailureKind.TRASH_FAILED, str(e))
                continue

            logger.info(f"Moved to trash: {path}")
            result.record_success(path, size)
        return result

    def _archive(self, paths: List[str]) -> CleanupResult:
        result = CleanupResult()
        now = self.context.clock()
        snapshot_dir = self.context.archive_root / now.date().isoformat()
        snapshot = ArchiveSnapshot(date=now.date(), directory=str(snapshot_dir))

        for idx, path in enumerate(paths):
            try:
                if not self._passes_guards(path, result):
                    continue
            except UserCancelled:
                self._cancel_remaining(paths[idx:], result)
                break

            record = self._archive_one(path, snapshot_dir, result)
            if record is not None:
                snapshot.add(record)

        if snapshot.files:
            result.snapshot_dir = str(snapshot_dir)
            try:
                self._write_manifest(snapshot_dir, snapshot)
                self._schedule_reminder(snapshot_dir, now)
            except (OSError, ValueError) as e:
                logger.error(f"Archived {snapshot.total_files} files but could not record them: {e}")
                raise ManifestWriteError(snapshot_dir / MANIFEST_FILENAME, e, result=result) from e
        return result

    def _archive_one(self, path: str, snapshot_dir: Path, result: CleanupResult) -> Optional[ArchivedFileRecord]:
        try:
            stat_result = os.stat(path)
        except OSError as e:
            result.record_failure(path, FailureKind.METADATA_UNREADABLE, str(e))
            return None

        filename = os.path.basename(path)
        course = rules.detect_course(filename)
        course_dir = snapshot_dir / course

        destination = self.resolve_destination(course_dir, filename)
        if destination is None:
            message = f"No free name for {filename} after {MAX_NAME_ATTEMPTS} attempts"
            logger.warning(message)
            result.record_failure(path, FailureKind.NAME_CONFLICT_EXHAUSTED, message)
            return None

        try:
            course_dir.mkdir(parents=True, exist_ok=True)
            self.file_service.rename(path, str(destination))
        except OSError as e:
            logger.warning(f"Failed to archive {path}: {e}")
            result.record_failure(path, FailureKind.MOVE_FAILED, str(e))
            return None

        logger.info(f"Archived {path} -> {destination}")
        result.record_success(path, stat_result.st_size)
        extension = os.path.splitext(filename)[1].lower().lstrip(".")
        return ArchivedFileRecord(
            original_path=path,
            archived_path=str(destination),
            course_tag=course,
            file_type=extension or "unknown",
            size_bytes=stat_result.st_size,
            archived_at=self.context.clock(),
            original_modified_at=ConvertUtils.timestamp_to_datetime(stat_result.st_mtime),
        )

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    def _passes_guards(self, path: str, result: CleanupResult) -> bool:
        """
        Run the guard chain. Returns False (and records the skip) when the file
        must be left alone.

        Raises:
            UserCancelled: the user chose to cancel the rest of the batch
        """
        decisions = self.context.decisions

        if not os.path.lexists(path):
            result.record_skip(path, SkipReason.NOT_FOUND)
            return False

        protection = self.classifier.protection_for(path)
        if protection is not None and protection.level == ProtectionLevel.HARD:
            logger.info(f"Skipping protected file: {path}")
            result.record_skip(path, SkipReason.HARD_PROTECTED)
            return False

        if self.classifier.is_cloud_synced(path) and not decisions.confirm(path, Concern.CLOUD_SYNCED):
            result.record_skip(path, SkipReason.DECLINED)
            return False

        if self.classifier.is_locked(path) and not self._resolve_locked(path):
            result.record_skip(path, SkipReason.LOCKED)
            return False

        if protection is not None and not decisions.confirm(path, Concern.SOFT_PROTECTED):
            result.record_skip(path, SkipReason.DECLINED)
            return False

        return True

    def _resolve_locked(self, path: str) -> bool:
        """True when the file became available after a retry."""
        choice = self.context.decisions.resolve_locked(path)
        if choice == LockedFileChoice.CANCEL:
            raise UserCancelled(path)
        if choice == LockedFileChoice.SKIP:
            return False

        logger.debug(f"{path} is locked, retrying in {LOCKED_RETRY_WAIT_SECONDS}s")
        self.context.sleep(LOCKED_RETRY_WAIT_SECONDS)
        if self.classifier.is_locked(path):
            logger.info(f"Still locked, skipping: {path}")
            return False
        return True

    @staticmethod
    def _cancel_remaining(paths: List[str], result: CleanupResult) -> None:
        logger.info(f"Cleanup cancelled, {len(paths)} files left untouched")
        result.cancelled = True
        for path in paths:
            result.record_skip(path, SkipReason.CANCELLED)

    # ------------------------------------------------------------------
    # Naming, manifest, reminder
    # ------------------------------------------------------------------

    @staticmethod
    def resolve_destination(directory: Path, filename: str) -> Optional[Path]:
        """
        First free name among filename, stem_1.ext ... stem_99.ext.
        Returns None when all of them are taken.
        """
        candidate = Path(directory) / filename
        if not os.path.lexists(candidate):
            return candidate

        stem, suffix = os.path.splitext(filename)
        for counter in range(1, MAX_NAME_ATTEMPTS):
            candidate = Path(directory) / f"{stem}_{counter}{suffix}"
            if not os.path.lexists(candidate):
                return candidate
        return None

    def _write_manifest(self, snapshot_dir: Path, snapshot: ArchiveSnapshot) -> None:
        """Merge with an existing same-day manifest, then write atomically."""
        manifest_path = snapshot_dir / MANIFEST_FILENAME
        merged = snapshot

        if manifest_path.is_file():
            # A manifest that cannot be parsed is never overwritten
            existing = read_snapshot_manifest(manifest_path)
            merged = ArchiveSnapshot(
                date=existing.date,
                directory=existing.directory,
                files=existing.files + snapshot.files,
            )

        text = json.dumps(merged.to_dict(), indent=2, ensure_ascii=False)
        self.file_service.write_text_atomic(manifest_path, text)
        logger.debug(f"Manifest written: {manifest_path} ({merged.total_files} files)")

    def _schedule_reminder(self, snapshot_dir: Path, now) -> None:
        due = now + timedelta(days=REMINDER_INTERVAL_DAYS)
        self.file_service.write_text_atomic(
            snapshot_dir / REMINDER_FILENAME,
            ConvertUtils.datetime_to_rfc3339(due),
        )


def read_snapshot_manifest(manifest_path: Path) -> ArchiveSnapshot:
    """
    Parse a manifest file.

    Raises:
        OSError: the file could not be read
        ValueError: the content is not a valid manifest
    """
    with open(manifest_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    try:
        return ArchiveSnapshot.from_dict(data)
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed manifest: {e!r}") from e


def load_snapshot_manifest(snapshot_dir: Path) -> Optional[ArchiveSnapshot]:
    """Read archive_info.json from snapshot_dir; None if absent or unreadable."""
    manifest_path = Path(snapshot_dir) / MANIFEST_FILENAME
    if not manifest_path.is_file():
        return None
    try:
        return read_snapshot_manifest(manifest_path)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable manifest {manifest_path}: {e}")
        return None
