"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/classifier.py
Path checks shared by the scanner and the archive store:
- system locations and OS trash (never scanned)
- protection lookup (Hard / Soft) via a ProtectionOracle
- cloud-sync folders
- best-effort "open in another program" detection
"""

import os
import sys
from pathlib import PurePath
from typing import Iterable, List, Optional
import logging

from studysweep.core.interfaces import ProtectionOracle
from studysweep.core.models import ProtectionEntry, ProtectionLevel

logger = logging.getLogger(__name__)


SYSTEM_PATHS = (
    r"C:\Windows", r"C:\Program Files", r"C:\ProgramData",
    r"C:\System Volume Information", "/System", "/usr",
    "/bin", "/sbin", "/etc", "/var", "/lib",
)

CLOUD_FOLDERS = (
    "Google Drive", "Dropbox", "OneDrive", "iCloud Drive", "Box", "Sync",
)


def _parts(path: str) -> List[str]:
    """Lower-cased path components, separator-agnostic."""
    normalized = str(path).replace("\\", "/")
    return [p.lower() for p in PurePath(normalized).parts if p not in ("/", "")]


def _is_under(path_parts: List[str], prefix_parts: List[str]) -> bool:
    return bool(prefix_parts) and path_parts[:len(prefix_parts)] == prefix_parts


class ProtectionRegistry(ProtectionOracle):
    """
    In-memory ProtectionOracle.
    Lookup is longest-prefix on whole path components: with entries for
    /home/u (Soft) and /home/u/keep (Hard), /home/u/keep/a.pdf is Hard.
    """

    def __init__(self, entries: Optional[Iterable[ProtectionEntry]] = None):
        self._entries: List[ProtectionEntry] = list(entries or [])

    @property
    def entries(self) -> List[ProtectionEntry]:
        return list(self._entries)

    def add(self, path: str, level: ProtectionLevel) -> None:
        self._entries.append(ProtectionEntry(path=os.path.abspath(str(path)), level=level))

    def is_protected(self, path: str) -> Optional[ProtectionEntry]:
        path_parts = _parts(os.path.abspath(str(path)))
        best: Optional[ProtectionEntry] = None
        best_len = -1
        for entry in self._entries:
            entry_parts = _parts(os.path.abspath(entry.path))
            if _is_under(path_parts, entry_parts) and len(entry_parts) > best_len:
                best = entry
                best_len = len(entry_parts)
        return best


class PathClassifier:
    """
    Stateless path tests. Only the protection lookup is delegated.
    """

    def __init__(self, protection: Optional[ProtectionOracle] = None):
        self.protection = protection or ProtectionRegistry()

    @staticmethod
    def is_system_path(path: str) -> bool:
        """True for OS directories and trash locations."""
        path_parts = _parts(path)
        for system_path in SYSTEM_PATHS:
            if _is_under(path_parts, _parts(system_path)):
                return True
        return PathClassifier._is_system_trash(path)

    @staticmethod
    def _is_system_trash(path: str) -> bool:
        """
        Check if path belongs to OS trash/recycle bin (cross-platform).
        """
        path_str = str(path)
        if sys.platform == "win32":
            return "$Recycle.Bin" in path_str or "\\Recycler\\" in path_str
        if sys.platform == "darwin":
            return "/.Trash/" in path_str or path_str.endswith("/.Trash")
        return ".local/share/Trash" in path_str or "/.trash/" in path_str

    def protection_for(self, path: str) -> Optional[ProtectionEntry]:
        return self.protection.is_protected(str(path))

    def is_hard_protected(self, path: str) -> bool:
        entry = self.protection_for(path)
        return entry is not None and entry.level == ProtectionLevel.HARD

    @staticmethod
    def is_cloud_synced(path: str) -> bool:
        """
        A path component starting with a sync-client folder name
        ("Dropbox", "OneDrive - University", ...).
        """
        cloud = [c.lower() for c in CLOUD_FOLDERS]
        return any(
            part == name or part.startswith(name + " ")
            for part in _parts(path)
            for name in cloud
        )

    @staticmethod
    def is_locked(path: str) -> bool:
        """
        Heuristic: a file we cannot open read-write is treated as locked.
        Read-only files therefore also report True.
        """
        try:
            with open(path, "r+b"):
                return False
        except OSError as e:
            logger.debug(f"Read-write open failed for {path}: {e}")
            return True
