"""Deterministic folder paths for course/category uploads (no I/O)."""

from __future__ import annotations

import re
from typing import Sequence

from obedrive.errors import InvalidArgumentError
from obedrive.models import Category, CourseInfo, DestinationKind

FolderPath = tuple[str, ...]

_YEAR_RE = re.compile(r"^(19|20)\d{2}$")
_SEMESTER_SPLIT_RE = re.compile(r"[\s\-_/]+")


class PathResolver:
    """
    Turn a course description into the canonical folder path of a category.

    Personal layout:
        <org_root>/<department>/<semester>/batch-<batch>/<course_code>/<section>/<Theory|Lab>
    Shared layout (academic year and term first):
        <year>/<term>/<course_code>_<section>/<Theory|Lab>
    """

    def __init__(self, org_root: str = "smart-mark") -> None:
        if not org_root or not org_root.strip():
            raise InvalidArgumentError("org_root must be a non-empty string")
        self.org_root = org_root.strip()

    def resolve(
        self,
        course_info: CourseInfo,
        category: Category,
        kind: DestinationKind = DestinationKind.PERSONAL,
    ) -> FolderPath:
        code = _required(course_info.course_code, "course_code")
        section = _required(course_info.course_section, "course_section")

        if kind is DestinationKind.SHARED:
            year, term = split_semester(course_info.semester)
            return normalize_path([year, term, f"{code}_{section}", category.folder_name])

        batch = course_info.batch.strip()
        return normalize_path(
            [
                self.org_root,
                course_info.department.strip() or "department",
                course_info.semester.strip() or "semester",
                f"batch-{batch}" if batch else "batch",
                code,
                section,
                category.folder_name,
            ]
        )


def split_semester(semester: str) -> tuple[str, str]:
    """
    Split a semester label into (year, term).

    Accepts "Spring-2024", "Spring 2025" and "2025 Fall". Raises
    InvalidArgumentError when no four-digit year is present.
    """
    parts = [p for p in _SEMESTER_SPLIT_RE.split((semester or "").strip()) if p]
    years = [p for p in parts if _YEAR_RE.match(p)]
    if not years:
        raise InvalidArgumentError(
            "semester must contain a four-digit year",
            details={"semester": semester},
        )
    year = years[0]
    terms = [p for p in parts if p != year]
    term = " ".join(terms) if terms else "Unknown"
    return year, term


def normalize_path(segments: Sequence[str]) -> FolderPath:
    """Trim segments and reject empty ones."""
    out: list[str] = []
    for idx, segment in enumerate(segments):
        if not isinstance(segment, str) or not segment.strip():
            raise InvalidArgumentError(
                "folder path segments must be non-empty strings",
                details={"index": idx, "segments": list(segments)},
            )
        out.append(segment.strip())
    return tuple(out)


def _required(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"CourseInfo.{field_name} is required")
    return value.strip()
