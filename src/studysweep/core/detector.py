"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/detector.py
Two-pass exact duplicate detection over an indexed candidate list:
    1. size  -> [indices]   (one pass, no I/O)
    2. digest -> [indices]  (only for size groups with 2+ members and size > 0)
A file is a duplicate iff its digest group holds at least two files.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
import logging

from studysweep.core.hasher import HasherImpl
from studysweep.core.interfaces import Hasher
from studysweep.core.models import CandidateFile, DuplicateGroup

logger = logging.getLogger(__name__)


@dataclass
class DuplicateIndex:
    """
    Result of DuplicateDetector.detect(). Indices refer to the candidate
    list passed to detect().
    """
    candidates: List[CandidateFile]
    size_groups: Dict[int, List[int]] = field(default_factory=dict)
    digest_groups: Dict[str, List[int]] = field(default_factory=dict)
    digest_by_index: Dict[int, str] = field(default_factory=dict)

    @property
    def hashed_count(self) -> int:
        return len(self.digest_by_index)

    def digest_for(self, index: int) -> Optional[str]:
        return self.digest_by_index.get(index)

    def group_size(self, index: int) -> int:
        """Number of files sharing this candidate's digest (0 if never hashed)."""
        digest = self.digest_by_index.get(index)
        if digest is None:
            return 0
        return len(self.digest_groups[digest])

    def is_duplicate(self, index: int) -> bool:
        return self.group_size(index) >= 2

    def path_to_digest(self) -> Dict[str, str]:
        return {self.candidates[i].path: d for i, d in self.digest_by_index.items()}

    def digest_to_paths(self) -> Dict[str, List[str]]:
        return {
            digest: [self.candidates[i].path for i in indices]
            for digest, indices in self.digest_groups.items()
        }

    def groups(self) -> List[DuplicateGroup]:
        """Duplicate groups only (2+ members), largest files first."""
        result = [
            DuplicateGroup(
                digest=digest,
                size=self.candidates[indices[0]].size_bytes,
                paths=[self.candidates[i].path for i in indices],
            )
            for digest, indices in self.digest_groups.items()
            if len(indices) >= 2
        ]
        result.sort(key=lambda g: -g.size)
        return result


class DuplicateDetector:
    """
    Uses an injected Hasher instance for flexibility and testability.
    """

    def __init__(self, hasher: Hasher = None):
        self.hasher = hasher or HasherImpl()

    def detect(self, candidates: List[CandidateFile]) -> DuplicateIndex:
        index = DuplicateIndex(candidates=candidates)
        index.size_groups = self._group_by(
            range(len(candidates)), lambda i: candidates[i].size_bytes
        )

        to_hash = [
            i
            for size, indices in index.size_groups.items()
            if size > 0 and len(indices) >= 2
            for i in indices
        ]
        logger.debug(
            f"{len(index.size_groups)} size groups, {len(to_hash)} of {len(candidates)} files need hashing"
        )

        index.digest_groups = self._group_by(to_hash, lambda i: self._digest(candidates[i]))
        for digest, indices in index.digest_groups.items():
            for i in indices:
                index.digest_by_index[i] = digest

        return index

    def _digest(self, candidate: CandidateFile) -> Optional[str]:
        try:
            return self.hasher.compute_digest(candidate.path)
        except OSError as e:
            # Vanished or unreadable since the walk: leave it out of every group
            logger.debug(f"Could not hash {candidate.path}: {e}")
            return None

    @staticmethod
    def _group_by(indices, key_func: Callable[[int], Any]) -> Dict[Any, List[int]]:
        """
        Helper method to group candidate indices by any computed key.
        A key of None drops the index.
        """
        groups = defaultdict(list)
        for i in indices:
            key = key_func(i)
            if key is not None:
                groups[key].append(i)
        return dict(groups)
