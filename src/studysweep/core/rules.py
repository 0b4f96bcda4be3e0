"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/rules.py
Keyword and extension tables driving filtering, categorisation, course
routing and the confidence signals.

Every table is ordered: the first matching rule wins. Matching is a
case-insensitive substring test on the file name (not the full path).
"""
from typing import Iterable, List, Optional, Tuple

from studysweep.core.models import FileCategory, ScanMode


STUDY_EXTENSIONS = frozenset({
    "pdf", "docx", "pptx", "txt", "md", "ipynb",
    "py", "java", "c", "cpp", "rs", "js", "html",
    "csv", "xlsx",
})

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg"})

# Exam mode also tracks screenshots
EXAM_EXTENSIONS = STUDY_EXTENSIONS | IMAGE_EXTENSIONS

STUDY_KEYWORDS = (
    "lecture", "notes", "assignment", "homework", "lab",
    "exam", "quiz", "week", "chapter", "slide", "tutorial",
    "worksheet", "solution", "practice", "review",
)

DUPLICATE_KEYWORDS = (
    "copy", "(1)", "(2)", "_copy", "-copy",
    "final_final", "old", "backup", "version",
)

# Category precedence: Lecture > Assignment > Reference, then age/size
CATEGORY_KEYWORD_RULES: List[Tuple[FileCategory, Tuple[str, ...]]] = [
    (FileCategory.LECTURE, ("lecture", "slide", "presentation")),
    (FileCategory.ASSIGNMENT, ("assignment", "homework", "hw")),
    (FileCategory.REFERENCE, ("textbook", "book", "reference")),
]

# Course sub-folder routing. Substring match, so "physics" lands in "cs".
COURSE_RULES: List[Tuple[str, Tuple[str, ...]]] = [
    ("cs", ("cs", "computer", "programming", "algorithm", "software")),
    ("math", ("math", "calculus", "algebra", "statistics", "geometry")),
    ("science", ("physics", "chemistry", "biology", "science", "lab")),
    ("engineering", ("engineer", "mechanical", "electrical", "civil", "robotics")),
    ("business", ("business", "management", "finance", "economics", "marketing")),
    ("humanities", ("history", "literature", "philosophy", "art", "psychology")),
]

DEFAULT_COURSE = "general"


def allowed_extensions(mode: ScanMode) -> frozenset:
    return EXAM_EXTENSIONS if mode == ScanMode.EXAM else STUDY_EXTENSIONS


def contains_any(filename: str, keywords: Iterable[str]) -> bool:
    lowered = filename.lower()
    return any(keyword in lowered for keyword in keywords)


def match_category_keyword(filename: str) -> Optional[FileCategory]:
    """First keyword category matching filename, or None."""
    lowered = filename.lower()
    for category, keywords in CATEGORY_KEYWORD_RULES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return None


def detect_course(filename: str) -> str:
    """Course tag for filename; DEFAULT_COURSE when nothing matches."""
    lowered = filename.lower()
    for course, keywords in COURSE_RULES:
        if any(keyword in lowered for keyword in keywords):
            return course
    return DEFAULT_COURSE
