"""The fixed OBE document checklist every submission record starts from."""

from __future__ import annotations

from obedrive.models import Category, ChecklistItem, ItemStatus

_SCRIPTS = ("marginal", "average", "excellent")

THEORY_CATALOG: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    ("course-outline", "Course Outline (.doc Format)", ("doc",)),
    (
        "class-test",
        "Class Test (Marginal, Average, Excellent Script) with Question",
        (*_SCRIPTS, "question"),
    ),
    (
        "attendance",
        "Attendance (Class, Midterm Exam, Final Exam) pdf File",
        ("class-attendance", "midterm-attendance", "final-attendance"),
    ),
    ("assignment", "Assignment (Marginal, Average, Excellent Script)", _SCRIPTS),
    (
        "assignment-marks",
        "Assignment & Presentation Marks Sheet on Rubrics (pdf)",
        ("assignment-marks", "presentation-marks"),
    ),
    ("midterm-script", "Midterm Exam Script (Marginal, Average, Excellent Script)", _SCRIPTS),
    ("final-script", "Final Exam (Marginal, Average, Excellent Script)", _SCRIPTS),
    ("final-tabulation", "Final Tabulation Sheet (pdf Format)", ("tabulation",)),
    ("section-wise-co", "Section Wise CO - PO Mapping File", ("co-po-mapping",)),
    (
        "course-end-report",
        "Course End Report duly signed by Section Teacher (pdf Format)",
        ("course-end-report",),
    ),
)

LAB_CATALOG: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    ("lab-report", "Lab Report", ("lab-report",)),
    (
        "lab-performance",
        "Lab Performance, Lab Final, Project (pdf)",
        ("lab-performance", "lab-final", "project"),
    ),
    ("lab-project", "Lab with Project (Marginal, Average, Excellent Report)", _SCRIPTS),
    (
        "projects-experiments",
        "List of Projects and Experiments & signature (pdf)",
        ("projects-list", "experiments-list"),
    ),
    ("class-attendance", "Class Attendance pdf File", ("attendance",)),
    ("section-wise-co-lab", "Section Wise CO - PO Mapping File", ("co-po-mapping",)),
    ("final-tabulation-lab", "Final Tabulation Sheet (pdf Format)", ("tabulation",)),
    (
        "course-end-report-lab",
        "Course End Report duly signed by Section Teacher (pdf Format)",
        ("course-end-report",),
    ),
)

ARTIFACT_DISPLAY_NAMES: dict[str, str] = {
    "marginal": "Marginal Script",
    "average": "Average Script",
    "excellent": "Excellent Script",
    "question": "Question Paper",
    "doc": "Document (.doc)",
    "class-attendance": "Class Attendance",
    "midterm-attendance": "Midterm Attendance",
    "final-attendance": "Final Attendance",
    "assignment-marks": "Assignment Marks",
    "presentation-marks": "Presentation Marks",
    "tabulation": "Tabulation Sheet",
    "co-po-mapping": "CO-PO Mapping",
    "course-end-report": "Course End Report",
    "lab-report": "Lab Report",
    "lab-performance": "Lab Performance",
    "lab-final": "Lab Final",
    "project": "Project",
    "projects-list": "Projects List",
    "experiments-list": "Experiments List",
    "attendance": "Attendance",
}


def artifact_display_name(key: str) -> str:
    """Human name of an artifact key, e.g. 'marginal' -> 'Marginal Script'."""
    if key in ARTIFACT_DISPLAY_NAMES:
        return ARTIFACT_DISPLAY_NAMES[key]
    return key[:1].upper() + key[1:]


def default_items(category: Category) -> list[ChecklistItem]:
    """Fresh pending checklist items of one category."""
    catalog = THEORY_CATALOG if category is Category.THEORY else LAB_CATALOG
    return [
        ChecklistItem(
            id=item_id,
            name=name,
            category=category,
            required_keys=list(keys),
            status=ItemStatus.PENDING,
        )
        for item_id, name, keys in catalog
    ]
