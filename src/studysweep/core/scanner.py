"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Bounded directory walk that turns a folder into ranked cleanup suggestions.
Features:
- Walks at most 3 levels deep, never follows symlinks
- Stops after 5000 candidates and flags the result as truncated
- Skips system paths, OS trash and Hard-protected folders
- Extension allowlist chosen by ScanMode
- Size-then-hash duplicate detection, then per-file category and confidence
"""

import os
import stat
import time
from pathlib import Path
from typing import List, Optional, Tuple
import logging

from studysweep.context import SweepContext
from studysweep.core import rules
from studysweep.core.classifier import PathClassifier
from studysweep.core.detector import DuplicateDetector, DuplicateIndex
from studysweep.core.interfaces import FileScanner
from studysweep.core.models import (
    CandidateFile,
    FileCategory,
    FileRecord,
    ProtectionLevel,
    ScanMode,
    ScanResult,
    Thresholds,
)
from studysweep.core.scorer import ConfidenceScorer, assign_category
from studysweep.errors import PathNotFoundError, StudySweepError
from studysweep.utils.convert_utils import ConvertUtils

logger = logging.getLogger(__name__)

MAX_DEPTH = 3
MAX_FILES_TO_SCAN = 5000
MIN_SUGGESTION_CONFIDENCE = 0.4


class DirectoryScanner(FileScanner):
    """
    Scans a directory tree and ranks study files by how safe they are to remove.

    Attributes:
        context: run context (protection oracle, clock)
        classifier: system/protection/cloud/lock checks
        detector: size-then-hash duplicate detector
    """

    def __init__(
        self,
        context: Optional[SweepContext] = None,
        classifier: Optional[PathClassifier] = None,
        detector: Optional[DuplicateDetector] = None,
        max_depth: int = MAX_DEPTH,
        max_files: int = MAX_FILES_TO_SCAN,
    ):
        self.context = context or SweepContext()
        self.classifier = classifier or PathClassifier(self.context.protection)
        self.detector = detector or DuplicateDetector()
        self.max_depth = max_depth
        self.max_files = max_files

    def scan(
        self,
        root: str,
        age_threshold_days: int = 60,
        size_threshold_mb: float = 100,
        mode: ScanMode = ScanMode.STUDY,
    ) -> ScanResult:
        """
        Returns a fresh ScanResult, sorted by confidence (highest first).

        Raises:
            PathNotFoundError: root does not exist
            StudySweepError: root is not a directory
        """
        start_time = time.time()
        root_path = Path(root)
        logger.debug(f"Scanning {root_path} (mode={mode.value}, age>{age_threshold_days}d, size>{size_threshold_mb}MB)")

        if not root_path.exists():
            logger.error(f"Scan root does not exist: {root_path}")
            raise PathNotFoundError(root_path)
        if not root_path.is_dir():
            error_msg = f"Not a directory: {root_path}"
            logger.error(error_msg)
            raise StudySweepError(error_msg)

        if self.classifier.is_system_path(str(root_path)):
            logger.warning(f"Skipping system path: {root_path}")
            return ScanResult()

        protection = self.classifier.protection_for(str(root_path))
        if protection is not None:
            if protection.level == ProtectionLevel.HARD:
                logger.info(f"Skipping protected folder: {root_path}")
                return ScanResult()
            logger.info(f"Scanning protected folder (will warn before actions): {root_path}")

        candidates, truncated = self._collect_candidates(root_path, mode)
        if not candidates:
            logger.debug("No study files found")
            return ScanResult(truncated=truncated, elapsed_seconds=time.time() - start_time)

        index = self.detector.detect(candidates)
        thresholds = Thresholds(age_days=age_threshold_days, size_mb=size_threshold_mb)
        result = self._analyze(index, thresholds, mode)

        result.total_files_scanned = len(candidates)
        result.truncated = truncated
        result.elapsed_seconds = time.time() - start_time
        logger.debug(
            f"Scan completed in {result.elapsed_seconds:.2f}s: "
            f"{result.total_suggestions} suggestions from {len(candidates)} candidates"
        )
        return result

    def _collect_candidates(self, root_path: Path, mode: ScanMode) -> Tuple[List[CandidateFile], bool]:
        """Walk root_path and return (candidates, truncated)."""
        extensions = rules.allowed_extensions(mode)
        candidates: List[CandidateFile] = []

        # os.walk does not follow directory symlinks by default
        for dirpath, dirs, files in os.walk(str(root_path)):
            depth = len(Path(dirpath).relative_to(root_path).parts)

            # Files inside a directory at depth d sit at depth d + 1
            if depth + 1 >= self.max_depth:
                dirs[:] = []
            else:
                dirs[:] = sorted(d for d in dirs if self._prefilter_dir(Path(dirpath) / d))

            for filename in sorted(files):
                candidate = self._process_file(Path(dirpath) / filename, extensions)
                if not candidate:
                    continue

                if len(candidates) >= self.max_files:
                    logger.warning(f"Scanned maximum {self.max_files} files. Stopping early.")
                    return candidates, True
                candidates.append(candidate)

        return candidates, False

    def _prefilter_dir(self, path: Path) -> bool:
        """Skip system locations and Hard-protected folders before descending."""
        if self.classifier.is_system_path(str(path)):
            logger.debug(f"Skipping system directory: {path}")
            return False
        if self.classifier.is_hard_protected(str(path)):
            logger.debug(f"Skipping protected directory: {path}")
            return False
        return True

    def _process_file(self, path: Path, extensions: frozenset) -> Optional[CandidateFile]:
        """
        Return a CandidateFile if path passes every filter, else None.
        Unreadable files are skipped silently.
        """
        try:
            if path.is_symlink():
                logger.debug(f"Skipping symbolic link: {path}")
                return None
        except OSError as e:
            logger.debug(f"Could not check symlink status for {path}: {e}")
            return None

        if self.classifier.is_system_path(str(path)):
            return None

        if self.classifier.is_hard_protected(str(path)):
            logger.debug(f"Skipping hard-protected file: {path}")
            return None

        extension = path.suffix.lower().lstrip(".")
        if extension not in extensions:
            return None

        try:
            stat_result = path.stat()
        except OSError as e:
            logger.debug(f"Could not read metadata of {path}: {e}")
            return None

        if not stat.S_ISREG(stat_result.st_mode):
            return None

        created = getattr(stat_result, 'st_birthtime', stat_result.st_ctime)
        return CandidateFile(
            path=str(path),
            size_bytes=stat_result.st_size,
            modified_time=ConvertUtils.timestamp_to_datetime(stat_result.st_mtime),
            created_time=ConvertUtils.timestamp_to_datetime(created),
            extension=extension,
        )

    def _analyze(self, index: DuplicateIndex, thresholds: Thresholds, mode: ScanMode) -> ScanResult:
        scorer = ConfidenceScorer(mode)
        now = self.context.clock()
        result = ScanResult(duplicate_groups=index.groups())
        records: List[FileRecord] = []

        for i, candidate in enumerate(index.candidates):
            if not os.path.exists(candidate.path):
                logger.debug(f"File disappeared during scan: {candidate.path}")
                continue

            days_old = (now - candidate.modified_time).days
            duplicate_count = index.group_size(i)
            category = assign_category(
                candidate.name,
                days_old,
                candidate.size_bytes,
                thresholds,
                is_duplicate=duplicate_count >= 2,
            )
            confidence, reason = scorer.score(candidate, thresholds, duplicate_count, category, days_old)

            if mode != ScanMode.EXAM and confidence < MIN_SUGGESTION_CONFIDENCE:
                continue

            record = FileRecord(
                path=candidate.path,
                size_bytes=candidate.size_bytes,
                modified=candidate.modified_time,
                created=candidate.created_time,
                days_old=days_old,
                course_tag=rules.detect_course(candidate.name),
                file_type=candidate.extension or "unknown",
                confidence=confidence,
                reason=reason,
                category=category,
                digest=index.digest_for(i),
                is_cloud_synced=self.classifier.is_cloud_synced(candidate.path),
                is_locked=self.classifier.is_locked(candidate.path),
            )
            records.append(record)

            if category == FileCategory.DUPLICATE:
                result.duplicates_found += 1
            elif category == FileCategory.OLD:
                result.old_files_found += 1
            elif category == FileCategory.LARGE:
                result.large_files_found += 1
            if record.is_cloud_synced:
                result.cloud_files_found += 1
            result.total_size_bytes += candidate.size_bytes

        # sorted() is stable: equal confidences keep walk order
        result.files = sorted(records, key=lambda r: -r.confidence)
        return result
