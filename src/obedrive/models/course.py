"""Course description and category folder identifiers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class Category(str, Enum):
    THEORY = "theory"
    LAB = "lab"

    @property
    def folder_name(self) -> str:
        """Name of the category folder inside a course folder."""
        return "Theory" if self is Category.THEORY else "Lab"


@dataclass(slots=True, frozen=True)
class CourseInfo:
    """
    Course/section/semester a submission belongs to.

    `(course_code, course_section, semester)` is the submission key.
    """

    semester: str
    course_code: str
    course_section: str
    batch: str = ""
    department: str = ""
    course_title: str = ""
    credit_hours: str = ""
    class_count: str = ""

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.course_code.strip(), self.course_section.strip(), self.semester.strip())

    def to_dict(self) -> dict[str, str]:
        return {
            "semester": self.semester,
            "courseCode": self.course_code,
            "courseSection": self.course_section,
            "batch": self.batch,
            "department": self.department,
            "courseTitle": self.course_title,
            "creditHours": self.credit_hours,
            "classCount": self.class_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CourseInfo:
        def _s(key: str) -> str:
            value = data.get(key)
            return value if isinstance(value, str) else ""

        return cls(
            semester=_s("semester"),
            course_code=_s("courseCode"),
            course_section=_s("courseSection"),
            batch=_s("batch"),
            department=_s("department"),
            course_title=_s("courseTitle"),
            credit_hours=_s("creditHours"),
            class_count=_s("classCount"),
        )


@dataclass(slots=True)
class CategoryFolders:
    """Folder ids of the Theory and Lab folders (personal destination)."""

    theory_folder_id: Optional[str] = None
    lab_folder_id: Optional[str] = None

    def get(self, category: Category) -> Optional[str]:
        if category is Category.THEORY:
            return self.theory_folder_id
        return self.lab_folder_id

    def to_dict(self) -> dict[str, str]:
        out: dict[str, str] = {}
        if self.theory_folder_id:
            out["theoryFolderId"] = self.theory_folder_id
        if self.lab_folder_id:
            out["labFolderId"] = self.lab_folder_id
        return out

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> CategoryFolders:
        data = data or {}
        theory = data.get("theoryFolderId")
        lab = data.get("labFolderId")
        return cls(
            theory_folder_id=theory if isinstance(theory, str) and theory else None,
            lab_folder_id=lab if isinstance(lab, str) and lab else None,
        )
