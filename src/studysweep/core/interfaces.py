"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Core interfaces (Protocols) used throughout studysweep.

Key Components:
---------------
- HashAlgorithm: streaming digest factory (xxHash, BLAKE2b, ...).
- Hasher: computes a content digest for a file path.
- ProtectionOracle: read-only longest-prefix protection lookup.
- DecisionProvider: synchronous user decisions (skip/proceed, skip/retry/cancel,
  clean/snooze/keep).
- FileScanner: produces a ranked ScanResult for a directory.
"""

from typing import Protocol, Optional

from studysweep.core.models import (
    Concern,
    LockedFileChoice,
    ProtectionEntry,
    ReminderChoice,
    ScanMode,
    ScanResult,
)


# ===== Interfaces =====

class HashAccumulator(Protocol):
    def update(self, data: bytes) -> None: ...
    def hexdigest(self) -> str: ...


class HashAlgorithm(Protocol):
    """
    Interface for streaming hash algorithms.

    Allows plugging in different hashing functions like xxHash or BLAKE2b
    without affecting the duplicate detection logic.
    """

    @staticmethod
    def new() -> HashAccumulator:
        """Returns a fresh accumulator."""
        ...


class Hasher(Protocol):
    """Interface for hashing whole files."""
    def compute_digest(self, path: str) -> str: ...


class ProtectionOracle(Protocol):
    """
    Read-only protection lookup.

    Methods:
        is_protected: returns the most specific entry covering path, or None.
    """
    def is_protected(self, path: str) -> Optional[ProtectionEntry]: ...


class DecisionProvider(Protocol):
    """
    Synchronous decisions taken on behalf of the user.
    Calls block until answered; there is no timeout.
    """

    def confirm(self, subject: str, concern: Concern) -> bool:
        """Binary skip/proceed. True means proceed."""
        ...

    def resolve_locked(self, path: str) -> LockedFileChoice:
        """Ternary skip/retry/cancel for a file that appears to be open elsewhere."""
        ...

    def resolve_reminder(self, snapshot: str, age_days: int, size_bytes: int) -> ReminderChoice:
        """Ternary clean/snooze/keep for an archive snapshot that is due."""
        ...


class FileScanner(Protocol):
    """
    Interface for scanning a directory and ranking cleanup suggestions.
    """
    def scan(
        self,
        root: str,
        age_threshold_days: int,
        size_threshold_mb: float,
        mode: ScanMode,
    ) -> ScanResult:
        """
        Scan files under root.

        Returns:
            ScanResult with records sorted by confidence, highest first.
        """
        ...
