from .models import (
    ArchiveSnapshot, ArchiveStats, ArchivedFileRecord, CleanupMode, CleanupResult,
    FailureKind, SkipReason)
from .store import ArchiveStore
from .lifecycle import ArchiveLifecycleManager

__all__ = [
    "ArchiveStore",
    "ArchiveLifecycleManager",
    "ArchiveSnapshot",
    "ArchiveStats",
    "ArchivedFileRecord",
    "CleanupMode",
    "CleanupResult",
    "FailureKind",
    "SkipReason",
]
