from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from nebresult.core.scales import GradeInfo, final_grade_from_wgpa, grade_info_from_percentage
from nebresult.domain.models import GradeResult, MarkPair, Subject


@dataclass(frozen=True)
class SubjectGrade:
    theory_result: GradeInfo
    internal_result: GradeInfo
    wgpa: float
    final_grade: str

    def to_grade_result(self) -> GradeResult:
        return GradeResult(
            th=self.theory_result.grade,
            in_=self.internal_result.grade,
            th_gp=self.theory_result.point,
            in_gp=self.internal_result.point,
        )


def percentage_of(obtained_marks: float, full_marks: Optional[float]) -> float:
    if not full_marks or full_marks <= 0:
        return 0.0
    return (obtained_marks / full_marks) * 100


def compute_component_grade(obtained_marks: float, full_marks: Optional[float]) -> GradeInfo:
    """
    Grade one sub-component (theory or internal).
    A non-positive full_marks counts as 0% instead of dividing by zero.
    Marks above full_marks are not clamped.
    """
    return grade_info_from_percentage(percentage_of(obtained_marks, full_marks))


def weighted_grade_point(subject: Subject, th_gp: float, in_gp: float) -> float:
    return th_gp * subject.theory.credit + in_gp * subject.internal.credit


def subject_wgpa(subject: Subject, th_gp: float, in_gp: float) -> float:
    total_credit = subject.total_credit
    if total_credit <= 0:
        return 0.0
    return weighted_grade_point(subject, th_gp, in_gp) / total_credit


def compute_subject_grade(subject: Subject, mark: MarkPair) -> SubjectGrade:
    theory_result = compute_component_grade(mark.theory, subject.theory.full_marks)
    internal_result = compute_component_grade(mark.internal, subject.internal.full_marks)
    wgpa = subject_wgpa(subject, theory_result.point, internal_result.point)
    return SubjectGrade(
        theory_result=theory_result,
        internal_result=internal_result,
        wgpa=wgpa,
        final_grade=final_grade_from_wgpa(wgpa),
    )
