"""
Core analysis engine: path classification, hashing, duplicate detection and scoring.

- PathClassifier / ProtectionRegistry: system paths, protection, cloud and lock checks
- HasherImpl + XXHashAlgorithmImpl: streamed xxh3-128 content digests
- DuplicateDetector: size grouping first, hashing only same-size files
- ConfidenceScorer / assign_category: per-file category and removal confidence
- Models: CandidateFile, FileRecord, ScanResult and configuration objects

The directory walk itself lives in core.scanner, which also needs the run
context and is imported from there directly.
"""

from .classifier import PathClassifier, ProtectionRegistry
from .hasher import HasherImpl, XXHashAlgorithmImpl, Blake2bAlgorithmImpl
from .detector import DuplicateDetector, DuplicateIndex
from .scorer import ConfidenceScorer, assign_category
from .models import (
    CandidateFile, DuplicateGroup, FileCategory, FileRecord, ProtectionEntry,
    ProtectionLevel, ScanMode, ScanParams, ScanResult, Thresholds)

__all__ = [
    "PathClassifier",
    "ProtectionRegistry",
    "HasherImpl",
    "XXHashAlgorithmImpl",
    "Blake2bAlgorithmImpl",
    "DuplicateDetector",
    "DuplicateIndex",
    "ConfidenceScorer",
    "assign_category",
    "CandidateFile",
    "DuplicateGroup",
    "FileCategory",
    "FileRecord",
    "ProtectionEntry",
    "ProtectionLevel",
    "ScanMode",
    "ScanParams",
    "ScanResult",
    "Thresholds",
]
