from __future__ import annotations

import logging
from collections import abc
from enum import Enum
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

from nebresult.core.grades import SubjectGrade, compute_subject_grade, weighted_grade_point
from nebresult.domain.models import (
    Assignment,
    GradeResult,
    GradesMap,
    Subject,
    StudentGradeSummary,
    StudentMarks,
)

logger = logging.getLogger(__name__)

SubjectCatalog = Union[Mapping[int, Subject], Iterable[Subject]]


class GpaStatus(str, Enum):
    ABSENT = "absent"
    NOT_GRADED = "not_graded"
    COMPUTED = "computed"


def index_catalog(subject_catalog: SubjectCatalog) -> Dict[int, Subject]:
    if isinstance(subject_catalog, abc.Mapping):
        return dict(subject_catalog)
    return {subject.id: subject for subject in subject_catalog}


def _graded_subjects(
    student_marks: StudentMarks,
    assigned_subject_ids: Iterable[int],
    catalog: Mapping[int, Subject],
) -> Iterator[Tuple[Subject, SubjectGrade]]:
    for subject_id in sorted(set(assigned_subject_ids)):
        subject = catalog.get(subject_id)
        mark = student_marks.mark_for(subject_id)
        if subject is None or mark is None:
            logger.debug("Skipping subject %s: no %s", subject_id, "subject" if subject is None else "mark")
            continue
        yield subject, compute_subject_grade(subject, mark)


def _gpa_from(graded: Iterable[Tuple[Subject, SubjectGrade]]) -> float:
    total_wgp = 0.0
    total_credit_hours = 0.0
    for subject, result in graded:
        total_wgp += weighted_grade_point(subject, result.theory_result.point, result.internal_result.point)
        total_credit_hours += subject.total_credit
    if total_credit_hours <= 0:
        return 0.0
    return total_wgp / total_credit_hours


def compute_student_gpa(
    student_marks: StudentMarks,
    assigned_subject_ids: Iterable[int],
    subject_catalog: SubjectCatalog,
) -> float:
    """
    GPA = Σ(th_gp * th_credit + in_gp * in_credit) / Σ(th_credit + in_credit)
    over the assigned main subjects that have both a catalog entry and a mark.
    Absent students always get 0.
    """
    if student_marks.is_absent:
        return 0.0
    catalog = index_catalog(subject_catalog)
    return _gpa_from(_graded_subjects(student_marks, assigned_subject_ids, catalog))


def compute_student_summary(
    student_marks: Optional[StudentMarks],
    assignment: Optional[Assignment],
    catalog: Mapping[int, Subject],
) -> StudentGradeSummary:
    if student_marks is None or student_marks.is_absent:
        return StudentGradeSummary(gpa=0.0, subjects={})

    subject_ids = assignment.main_subject_ids if assignment is not None else frozenset()
    graded = list(_graded_subjects(student_marks, subject_ids, catalog))
    subjects: Dict[int, GradeResult] = {
        subject.id: result.to_grade_result() for subject, result in graded
    }
    return StudentGradeSummary(gpa=_gpa_from(graded), subjects=subjects)


def compute_grades_for_students(
    student_ids: Iterable[str],
    all_marks: Mapping[str, StudentMarks],
    subject_catalog: SubjectCatalog,
    all_assignments: Mapping[str, Assignment],
) -> GradesMap:
    catalog = index_catalog(subject_catalog)
    grades: GradesMap = {}
    for student_id in student_ids:
        grades[student_id] = compute_student_summary(
            all_marks.get(student_id),
            all_assignments.get(student_id),
            catalog,
        )
    logger.debug("Computed grades for %d students", len(grades))
    return grades


def classify_gpa(student_marks: Optional[StudentMarks], summary: StudentGradeSummary) -> GpaStatus:
    """Tell apart the cases a GPA of 0 can stand for."""
    if student_marks is not None and student_marks.is_absent:
        return GpaStatus.ABSENT
    if student_marks is None or not summary.subjects:
        return GpaStatus.NOT_GRADED
    return GpaStatus.COMPUTED
