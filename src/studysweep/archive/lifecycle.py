"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

archive/lifecycle.py
Housekeeping for dated archive snapshots: reminders, age-based purge, stats.

Snapshot directory markers:
    .reminder_date  RFC3339 instant before which no reminder is shown
    .keep_forever   presence suppresses reminders permanently
"""

import os
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Tuple
import logging

from studysweep.archive.models import (
    KEEP_FOREVER_FILENAME,
    REMINDER_FILENAME,
    ArchiveSnapshot,
    ArchiveStats,
    CleanupResult,
    FailureKind,
    SnapshotInfo,
)
from studysweep.archive.store import REMINDER_INTERVAL_DAYS, load_snapshot_manifest
from studysweep.context import SweepContext
from studysweep.core.models import Concern, ReminderChoice
from studysweep.services.file_service import FileService
from studysweep.utils.convert_utils import ConvertUtils

logger = logging.getLogger(__name__)

SNOOZE_DAYS = 7
STALE_AFTER_DAYS = REMINDER_INTERVAL_DAYS
KEEP_FOREVER_NOTE = "Keep forever - user choice"


class ArchiveLifecycleManager:
    """Works on the snapshot directories directly under context.archive_root."""

    def __init__(self, context: Optional[SweepContext] = None, file_service=FileService):
        self.context = context or SweepContext()
        self.file_service = file_service

    @property
    def archive_root(self) -> Path:
        return self.context.archive_root

    def list_snapshots(self) -> List[Tuple[Path, date]]:
        """Directories named YYYY-MM-DD, oldest first. Anything else is ignored."""
        if not self.archive_root.is_dir():
            return []

        snapshots = []
        for entry in self.archive_root.iterdir():
            if not entry.is_dir():
                continue
            try:
                snapshot_date = date.fromisoformat(entry.name)
            except ValueError:
                logger.debug(f"Ignoring non-snapshot directory: {entry}")
                continue
            snapshots.append((entry, snapshot_date))

        snapshots.sort(key=lambda item: item[1])
        return snapshots

    def age_days(self, snapshot_date: date) -> int:
        return (self.context.clock() - self._midnight(snapshot_date)).days

    def check_reminders(self) -> List[str]:
        """
        Ask the DecisionProvider about every snapshot that is at least 30 days
        old, not marked keep-forever and not snoozed into the future.

        Returns:
            Paths of the snapshots that were surfaced
        """
        now = self.context.clock()
        surfaced = []

        for path, snapshot_date in self.list_snapshots():
            age = self.age_days(snapshot_date)
            if not self._reminder_due(path, age, now):
                continue

            surfaced.append(str(path))
            size = self.dir_size(path)
            choice = self.context.decisions.resolve_reminder(str(path), age, size)
            logger.debug(f"Reminder for {path}: {choice.value}")
            self._apply_reminder_choice(path, choice, now)

        return surfaced

    def _reminder_due(self, path: Path, age: int, now: datetime) -> bool:
        if age < REMINDER_INTERVAL_DAYS:
            return False
        if (path / KEEP_FOREVER_FILENAME).exists():
            return False

        reminder_file = path / REMINDER_FILENAME
        if not reminder_file.exists():
            return True
        try:
            due = ConvertUtils.rfc3339_to_datetime(reminder_file.read_text(encoding="utf-8"))
        except OSError as e:
            logger.debug(f"Could not read {reminder_file}: {e}")
            return True
        return due is None or due <= now

    def _apply_reminder_choice(self, path: Path, choice: ReminderChoice, now: datetime) -> None:
        if choice == ReminderChoice.CLEAN:
            try:
                self.file_service.remove_tree(path)
                logger.info(f"Deleted archive: {path}")
            except OSError as e:
                logger.error(f"Failed to delete archive {path}: {e}")
        elif choice == ReminderChoice.SNOOZE:
            snoozed = now + timedelta(days=SNOOZE_DAYS)
            self._write_marker(path / REMINDER_FILENAME, ConvertUtils.datetime_to_rfc3339(snoozed))
        elif choice == ReminderChoice.KEEP_FOREVER:
            self._write_marker(path / KEEP_FOREVER_FILENAME, KEEP_FOREVER_NOTE)

    def _write_marker(self, marker: Path, text: str) -> None:
        try:
            self.file_service.write_text_atomic(marker, text)
        except OSError as e:
            logger.error(f"Failed to write {marker}: {e}")

    def clean_older_than(self, days: int, skip_confirm: bool = False) -> CleanupResult:
        """
        Delete every snapshot whose date is more than `days` days in the past.
        Asks once for the whole batch unless skip_confirm is set.
        """
        if days < 0:
            raise ValueError("Days cannot be negative")

        cutoff = self.context.clock() - timedelta(days=days)
        result = CleanupResult()
        old = [(path, d) for path, d in self.list_snapshots() if self._midnight(d) < cutoff]
        if not old:
            logger.debug(f"No archives older than {days} days")
            return result

        sizes = {path: self.dir_size(path) for path, _ in old}
        if not skip_confirm:
            total = sum(sizes.values())
            subject = f"{len(old)} archives older than {days} days ({ConvertUtils.bytes_to_human(total)})"
            if not self.context.decisions.confirm(subject, Concern.PURGE_SNAPSHOTS):
                logger.info("Archive cleanup declined")
                return result

        for path, _ in old:
            try:
                self.file_service.remove_tree(path)
            except OSError as e:
                logger.warning(f"Failed to delete archive {path}: {e}")
                result.record_failure(str(path), FailureKind.DELETE_FAILED, str(e))
                continue
            logger.info(f"Deleted archive: {path}")
            result.record_success(str(path), sizes[path])

        return result

    @staticmethod
    def dir_size(path: Path) -> int:
        """Recursive byte count. Symlinks are not followed; unreadable entries count as 0."""
        total = 0
        try:
            with os.scandir(path) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            total += ArchiveLifecycleManager.dir_size(Path(entry.path))
                        elif entry.is_file(follow_symlinks=False):
                            total += entry.stat(follow_symlinks=False).st_size
                    except OSError:
                        continue
        except OSError as e:
            logger.debug(f"Could not list {path}: {e}")
        return total

    def stats(self) -> ArchiveStats:
        snapshots = self.list_snapshots()
        result = ArchiveStats(total_snapshots=len(snapshots))
        if not snapshots:
            return result

        result.oldest = snapshots[0][1]
        result.newest = snapshots[-1][1]
        for path, snapshot_date in snapshots:
            size = self.dir_size(path)
            result.total_bytes += size
            age = self.age_days(snapshot_date)
            if age > STALE_AFTER_DAYS:
                result.stale.append(SnapshotInfo(path=str(path), date=snapshot_date, age_days=age, size_bytes=size))
        return result

    @staticmethod
    def load_manifest(snapshot_dir: Path) -> Optional[ArchiveSnapshot]:
        return load_snapshot_manifest(snapshot_dir)

    @staticmethod
    def _midnight(snapshot_date: date) -> datetime:
        return datetime.combine(snapshot_date, time.min, tzinfo=timezone.utc)
