"""
Shared fixtures for StudySweep tests.
Creates isolated temporary study folders with controlled file ages and sizes,
a frozen clock and a decision provider that records every question.
"""
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Tuple
from unittest import mock

import pytest

from studysweep.context import SweepContext
from studysweep.core.classifier import ProtectionRegistry
from studysweep.core.models import Concern, LockedFileChoice, ReminderChoice


FIXED_NOW = datetime(2025, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


def write_file(path: Path, content: bytes = b"study", days_old: int = 0, now: datetime = FIXED_NOW) -> Path:
    """Create path (and parents) with content, mtime set days_old days before now."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    mtime = (now - timedelta(days=days_old)).timestamp()
    os.utime(path, (mtime, mtime))
    return path


class RecordingDecisionProvider:
    """
    Canned answers; every question is recorded in `calls` as (method, args).
    `locked` may be a list to answer successive resolve_locked calls differently.
    """

    def __init__(self, proceed=True, locked=LockedFileChoice.SKIP, reminder=ReminderChoice.SNOOZE):
        self.proceed = proceed
        self.locked = locked
        self.reminder = reminder
        self.calls: List[Tuple[str, tuple]] = []

    def confirm(self, subject: str, concern: Concern) -> bool:
        self.calls.append(("confirm", (subject, concern)))
        return self.proceed

    def resolve_locked(self, path: str) -> LockedFileChoice:
        self.calls.append(("resolve_locked", (path,)))
        if isinstance(self.locked, list):
            return self.locked.pop(0)
        return self.locked

    def resolve_reminder(self, snapshot: str, age_days: int, size_bytes: int) -> ReminderChoice:
        self.calls.append(("resolve_reminder", (snapshot, age_days, size_bytes)))
        return self.reminder

    def concerns(self) -> List[Concern]:
        return [args[1] for name, args in self.calls if name == "confirm"]


@pytest.fixture
def temp_dir(tmp_path) -> Path:
    """Isolated study folder, auto-cleanup after test."""
    root = tmp_path / "study"
    root.mkdir()
    return root


@pytest.fixture
def decisions() -> RecordingDecisionProvider:
    return RecordingDecisionProvider()


@pytest.fixture
def protection() -> ProtectionRegistry:
    return ProtectionRegistry()


@pytest.fixture
def context(tmp_path, decisions, protection) -> SweepContext:
    """Frozen clock, recording decisions, no-op sleep, archive under tmp_path."""
    return SweepContext(
        protection=protection,
        decisions=decisions,
        clock=lambda: FIXED_NOW,
        sleep=mock.Mock(),
        archive_root=tmp_path / "archive",
    )


@pytest.fixture
def study_tree(temp_dir) -> Dict[str, Path]:
    """
    A small study folder:
    - notes.pdf / notes_copy.pdf: identical content (exact duplicates)
    - lecture_03.pdf: fresh lecture slides
    - essay_draft.docx: 120 days old
    - dataset.csv: 2 MB (large with a 1 MB threshold)
    - holiday.png: image, only visible in exam mode
    - program.exe: extension outside every allowlist
    - level1/level2/deep.txt: depth 3 (found)
    - level1/level2/level3/too_deep.txt: depth 4 (never found)
    """
    files = {}
    shared = b"identical lecture notes " * 100
    files["notes"] = write_file(temp_dir / "notes.pdf", shared, days_old=5)
    files["notes_copy"] = write_file(temp_dir / "notes_copy.pdf", shared, days_old=5)
    files["lecture"] = write_file(temp_dir / "lecture_03.pdf", b"slides" * 50, days_old=2)
    files["essay"] = write_file(temp_dir / "essay_draft.docx", b"essay text" * 20, days_old=120)
    files["dataset"] = write_file(temp_dir / "dataset.csv", b"x" * (2 * 1024 * 1024), days_old=1)
    files["image"] = write_file(temp_dir / "holiday.png", b"\x89PNG" * 10, days_old=3)
    files["binary"] = write_file(temp_dir / "program.exe", b"MZ" * 10, days_old=3)
    files["deep"] = write_file(temp_dir / "level1" / "level2" / "deep.txt", b"deep", days_old=3)
    files["too_deep"] = write_file(
        temp_dir / "level1" / "level2" / "level3" / "too_deep.txt", b"too deep", days_old=3
    )
    return files
