"""
StudySweep: cleanup suggestions for student folders.

Core features:
- Bounded scan (3 levels, 5000 files) of study documents, code and, in exam mode, screenshots
- Exact duplicate detection: size grouping first, xxh3-128 content digest second
- Per-file category (Lecture, Assignment, Reference, Old, Large, Duplicate, Other) and confidence
- Safe cleanup: preview, system trash (via send2trash) or dated per-course archive
- Archive reminders, snooze/keep-forever markers and age-based purge
"""

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("studysweep")
except Exception:
    try:
        import tomllib  # Python 3.11+
    except ImportError:
        import tomli as tomllib  # Python < 3.11: pip install tomli

    from pathlib import Path as _Path
    with open(_Path(__file__).resolve().parents[2] / "pyproject.toml", "rb") as f:
        __version__ = tomllib.load(f)["project"]["version"]

# Public API: only what users should import directly
from studysweep.commands import SweepCommand
from studysweep.context import SweepContext
from studysweep.core import FileCategory, FileRecord, ProtectionLevel, ScanMode, ScanParams, ScanResult
from studysweep.core.classifier import ProtectionRegistry
from studysweep.archive import ArchiveLifecycleManager, ArchiveStore, CleanupMode, CleanupResult
from studysweep.decisions import ConsoleDecisionProvider, FixedDecisionProvider
from studysweep.utils.convert_utils import ConvertUtils
from studysweep.services.file_service import FileService

__all__ = [
    "SweepCommand",
    "SweepContext",
    "ScanParams",
    "ScanMode",
    "ScanResult",
    "FileRecord",
    "FileCategory",
    "ProtectionLevel",
    "ProtectionRegistry",
    "ArchiveStore",
    "ArchiveLifecycleManager",
    "CleanupMode",
    "CleanupResult",
    "ConsoleDecisionProvider",
    "FixedDecisionProvider",
    "ConvertUtils",
    "FileService",
    "__version__",
]
