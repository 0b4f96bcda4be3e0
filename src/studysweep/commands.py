"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

commands.py
Unified command orchestrator. The CLI (and any other front end) goes through
SweepCommand only; it wires the scanner, archive store and lifecycle manager
to one SweepContext.
"""
from typing import Iterable, List, Optional

from studysweep.archive.lifecycle import ArchiveLifecycleManager
from studysweep.archive.models import ArchiveStats, CleanupMode, CleanupResult
from studysweep.archive.store import ArchiveStore, CleanupTarget
from studysweep.context import SweepContext
from studysweep.core.models import FileRecord, ScanParams, ScanResult
from studysweep.core.scanner import DirectoryScanner


class SweepCommand:
    """
    Usage:
        context = SweepContext(decisions=ConsoleDecisionProvider())
        command = SweepCommand(context)
        result = command.scan(ScanParams(root_dir="~/Documents/uni"))
        command.clean(result.files[:10], CleanupMode.ARCHIVE)
    """

    def __init__(self, context: Optional[SweepContext] = None):
        self.context = context or SweepContext()
        self._scanner = DirectoryScanner(self.context)
        self._store = ArchiveStore(self.context, classifier=self._scanner.classifier)
        self._lifecycle = ArchiveLifecycleManager(self.context)
        self._last_result: Optional[ScanResult] = None

    def scan(self, params: ScanParams) -> ScanResult:
        """
        Raises:
            PathNotFoundError: root_dir does not exist
            StudySweepError: root_dir is not a directory
        """
        self._last_result = self._scanner.scan(
            params.root_dir,
            age_threshold_days=params.age_threshold_days,
            size_threshold_mb=params.size_threshold_mb,
            mode=params.mode,
        )
        return self._last_result

    def clean(self, files: Iterable[CleanupTarget], mode: CleanupMode) -> CleanupResult:
        return self._store.clean(files, mode)

    def check_reminders(self) -> List[str]:
        return self._lifecycle.check_reminders()

    def clean_archives(self, days: int, skip_confirm: bool = False) -> CleanupResult:
        return self._lifecycle.clean_older_than(days, skip_confirm=skip_confirm)

    def list_archives(self):
        return self._lifecycle.list_snapshots()

    def archive_stats(self) -> ArchiveStats:
        return self._lifecycle.stats()

    def get_files(self) -> List[FileRecord]:
        """Suggestions of the last scan."""
        if self._last_result is None:
            return []
        return list(self._last_result.files)
