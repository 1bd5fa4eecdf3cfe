from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class GradeInfo:
    point: float
    grade: str


NOT_GRADED = "NG"

# (min percentage, grade point, letter), highest threshold first
GRADE_BANDS: List[Tuple[float, float, str]] = [
    (90, 4.0, "A+"),
    (80, 3.6, "A"),
    (70, 3.2, "B+"),
    (60, 2.8, "B"),
    (50, 2.4, "C+"),
    (40, 2.0, "C"),
    (35, 1.6, "D"),
    (0, 0.0, NOT_GRADED),
]

# (min WGPA, final letter), highest threshold first
WGPA_BANDS: List[Tuple[float, str]] = [
    (3.61, "A+"),
    (3.21, "A"),
    (2.81, "B+"),
    (2.41, "B"),
    (2.01, "C+"),
    (1.61, "C"),
    (1.21, "D"),
    (0, NOT_GRADED),
]


def grade_info_from_percentage(percentage: float) -> GradeInfo:
    for low, point, letter in GRADE_BANDS:
        if percentage >= low:
            return GradeInfo(point, letter)
    return GradeInfo(0.0, NOT_GRADED)


def final_grade_from_wgpa(wgpa: float) -> str:
    for low, letter in WGPA_BANDS:
        if wgpa >= low:
            return letter
    return NOT_GRADED


def overall_final_grade(gpa: float) -> str:
    """Overall grade for a student's GPA; uses the same scale as subject WGPA."""
    return final_grade_from_wgpa(gpa)
