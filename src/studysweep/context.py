"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

context.py
Explicit run context handed to every component instead of global state.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable
import time

from studysweep.core.classifier import ProtectionRegistry
from studysweep.core.interfaces import DecisionProvider, ProtectionOracle
from studysweep.decisions import FixedDecisionProvider

DEFAULT_ARCHIVE_DIRNAME = "StudySweep-Archive"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def default_archive_root() -> Path:
    return Path.home() / DEFAULT_ARCHIVE_DIRNAME


@dataclass
class SweepContext:
    """
    protection: read-only protection oracle
    decisions:  synchronous user decisions (defaults to "skip everything")
    clock:      returns an aware UTC datetime; injected for reminder tests
    sleep:      blocking wait used by the locked-file retry
    archive_root: parent of the dated snapshot directories
    """
    protection: ProtectionOracle = field(default_factory=ProtectionRegistry)
    decisions: DecisionProvider = field(default_factory=FixedDecisionProvider)
    clock: Callable[[], datetime] = utc_now
    sleep: Callable[[float], None] = time.sleep
    archive_root: Path = field(default_factory=default_archive_root)

    def __post_init__(self):
        self.archive_root = Path(self.archive_root)
