from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from nebresult.core.display import format_gpa, format_grade_point
from nebresult.core.gpa import SubjectCatalog, index_catalog
from nebresult.core.grades import compute_subject_grade, subject_wgpa
from nebresult.core.scales import NOT_GRADED, final_grade_from_wgpa, overall_final_grade
from nebresult.domain.models import (
    Assignment,
    Student,
    StudentGradeSummary,
    StudentMarks,
    Subject,
    SubjectComponent,
)


@dataclass(frozen=True)
class LegendRow:
    achievement: str
    grade: str
    description: str
    grade_point: str


GRADING_LEGEND: List[LegendRow] = [
    LegendRow("90 to 100", "A+", "Outstanding", "4.0"),
    LegendRow("80 to below 90", "A", "Excellent", "3.6"),
    LegendRow("70 to below 80", "B+", "Very Good", "3.2"),
    LegendRow("60 to below 70", "B", "Good", "2.8"),
    LegendRow("50 to below 60", "C+", "Satisfactory", "2.4"),
    LegendRow("40 to below 50", "C", "Acceptable", "2.0"),
    LegendRow("35 to below 40", "D", "Basic", "1.6"),
    LegendRow("0 to below 35", NOT_GRADED, "Not Graded", "-"),
]


@dataclass(frozen=True)
class ComponentLine:
    sub_code: str
    label: str
    credit: float
    grade_point: Optional[float]
    grade: str

    @property
    def grade_point_text(self) -> str:
        return format_grade_point(self.grade_point)


@dataclass(frozen=True)
class SubjectLine:
    subject: Subject
    theory: ComponentLine
    internal: ComponentLine
    wgpa: float
    final_grade: str
    remarks: str


@dataclass(frozen=True)
class Marksheet:
    student: Student
    subjects: List[SubjectLine]
    gpa: float
    overall_grade: str
    extra_credit: Optional[SubjectLine] = None

    @property
    def gpa_text(self) -> str:
        return format_gpa(self.gpa)


def subject_remarks(final_grade: str) -> str:
    return "Non-Graded" if final_grade == NOT_GRADED else ""


def _component_line(subject: Subject, component: SubjectComponent, tag: str,
                    grade_point: Optional[float], grade: str) -> ComponentLine:
    return ComponentLine(
        sub_code=component.sub_code,
        label=f"{subject.name.upper()} ({tag})",
        credit=component.credit,
        grade_point=grade_point,
        grade=grade,
    )


def _graded_line(subject: Subject, th_gp: Optional[float], th: str,
                 in_gp: Optional[float], in_: str) -> SubjectLine:
    if th_gp is None or in_gp is None:
        wgpa, final_grade = 0.0, NOT_GRADED
    else:
        wgpa = subject_wgpa(subject, th_gp, in_gp)
        final_grade = final_grade_from_wgpa(wgpa)
    return SubjectLine(
        subject=subject,
        theory=_component_line(subject, subject.theory, "TH", th_gp, th),
        internal=_component_line(subject, subject.internal, "IN", in_gp, in_),
        wgpa=wgpa,
        final_grade=final_grade,
        remarks=subject_remarks(final_grade),
    )


def _extra_credit_line(subject: Subject, student_marks: Optional[StudentMarks]) -> SubjectLine:
    mark = student_marks.mark_for(subject.id) if student_marks is not None else None
    if mark is None:
        return SubjectLine(
            subject=subject,
            theory=_component_line(subject, subject.theory, "TH", None, "N/A"),
            internal=_component_line(subject, subject.internal, "IN", None, "N/A"),
            wgpa=0.0,
            final_grade="N/A",
            remarks="",
        )
    result = compute_subject_grade(subject, mark)
    if subject.total_credit <= 0:
        return SubjectLine(
            subject=subject,
            theory=_component_line(subject, subject.theory, "TH",
                                   result.theory_result.point, result.theory_result.grade),
            internal=_component_line(subject, subject.internal, "IN",
                                     result.internal_result.point, result.internal_result.grade),
            wgpa=0.0,
            final_grade="N/A",
            remarks="",
        )
    return _graded_line(
        subject,
        result.theory_result.point,
        result.theory_result.grade,
        result.internal_result.point,
        result.internal_result.grade,
    )


def build_marksheet(
    student: Student,
    subject_catalog: SubjectCatalog,
    assignment: Optional[Assignment],
    student_marks: Optional[StudentMarks],
    summary: Optional[StudentGradeSummary],
) -> Marksheet:
    """
    Grade sheet for one student.

    Main subject lines are rebuilt from the summary's th_gp/in_gp so the
    sheet always agrees with the stored GPA. The extra credit subject is
    graded straight from marks and never touches the GPA.
    """
    catalog = index_catalog(subject_catalog)
    summary = summary or StudentGradeSummary()
    assigned = assignment.main_subject_ids if assignment is not None else frozenset()

    lines: List[SubjectLine] = []
    for subject in catalog.values():
        if subject.id not in assigned:
            continue
        info = summary.subjects.get(subject.id)
        if info is None:
            lines.append(_graded_line(subject, None, NOT_GRADED, None, NOT_GRADED))
        else:
            lines.append(_graded_line(subject, info.th_gp, info.th, info.in_gp, info.in_))

    extra_credit = None
    if assignment is not None and assignment.extra_credit_id is not None:
        extra_subject = catalog.get(assignment.extra_credit_id)
        if extra_subject is not None:
            extra_credit = _extra_credit_line(extra_subject, student_marks)

    return Marksheet(
        student=student,
        subjects=lines,
        gpa=summary.gpa,
        overall_grade=overall_final_grade(summary.gpa),
        extra_credit=extra_credit,
    )
