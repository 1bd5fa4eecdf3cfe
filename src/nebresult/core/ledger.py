from __future__ import annotations

import logging
from collections import abc
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from nebresult.config.settings import settings
from nebresult.core.display import format_gpa, format_marks
from nebresult.core.gpa import SubjectCatalog
from nebresult.core.scales import NOT_GRADED
from nebresult.domain.models import (
    Assignment,
    GradeResult,
    GradesMap,
    MarkPair,
    Student,
    StudentMarks,
    Subject,
)

logger = logging.getLogger(__name__)

NOT_ENTERED = "N/A"


@dataclass(frozen=True)
class MarkLedgerRow:
    student: Student
    assigned_subject_ids: FrozenSet[int]
    marks: Mapping[int, MarkPair]
    total_marks: float

    def cell(self, subject_id: int) -> Union[MarkPair, str, None]:
        """None when the subject is not assigned, NOT_ENTERED when assigned but not marked."""
        if subject_id not in self.assigned_subject_ids:
            return None
        return self.marks.get(subject_id, NOT_ENTERED)

    def cell_text(self, subject_id: int) -> Tuple[str, str]:
        mark = self.cell(subject_id)
        if mark is None:
            return settings.unassigned_placeholder, settings.unassigned_placeholder
        if isinstance(mark, str):
            return NOT_ENTERED, NOT_ENTERED
        return format_marks(mark.theory), format_marks(mark.internal)


@dataclass(frozen=True)
class GradeLedgerRow:
    student: Student
    assigned_subject_ids: FrozenSet[int]
    grades: Mapping[int, GradeResult]
    gpa: float

    def cell(self, subject_id: int) -> Optional[Tuple[str, str]]:
        """(internal, theory) letters, or None when the subject is not assigned."""
        if subject_id not in self.assigned_subject_ids:
            return None
        result = self.grades.get(subject_id)
        if result is None:
            return NOT_GRADED, NOT_GRADED
        return result.in_, result.th

    def cell_text(self, subject_id: int) -> Tuple[str, str]:
        letters = self.cell(subject_id)
        if letters is None:
            return settings.unassigned_placeholder, settings.unassigned_placeholder
        return letters

    @property
    def gpa_text(self) -> str:
        return format_gpa(self.gpa)


@dataclass(frozen=True)
class Ledger:
    subjects: List[Subject] = field(default_factory=list)
    students: List[Union[MarkLedgerRow, GradeLedgerRow]] = field(default_factory=list)


def students_in_view(
    students: Iterable[Student],
    school_id: int,
    year: int,
    grade: str,
) -> List[Student]:
    return [
        s for s in students
        if s.school_id == school_id and s.year == year and str(s.grade) == str(grade)
    ]


def _assigned_ids(assignments: Mapping[str, Assignment], student_id: str) -> FrozenSet[int]:
    assignment = assignments.get(student_id)
    if assignment is None:
        return frozenset()
    return assignment.main_subject_ids


def assigned_subjects_in_view(
    students: Sequence[Student],
    subject_catalog: SubjectCatalog,
    assignments: Mapping[str, Assignment],
) -> List[Subject]:
    """Catalog subjects assigned to at least one of the given students, in catalog order."""
    in_view: Set[int] = set()
    for student in students:
        in_view.update(_assigned_ids(assignments, student.id))

    catalog = subject_catalog.values() if isinstance(subject_catalog, abc.Mapping) else subject_catalog
    return [subject for subject in catalog if subject.id in in_view]


def build_mark_ledger(
    students: Sequence[Student],
    subject_catalog: SubjectCatalog,
    assignments: Mapping[str, Assignment],
    marks: Mapping[str, StudentMarks],
) -> Ledger:
    rows: List[Union[MarkLedgerRow, GradeLedgerRow]] = []
    for student in students:
        assigned = _assigned_ids(assignments, student.id)
        student_marks = marks.get(student.id) or StudentMarks()
        assigned_marks: Dict[int, MarkPair] = {
            subject_id: mark
            for subject_id, mark in student_marks.per_subject.items()
            if subject_id in assigned
        }
        rows.append(
            MarkLedgerRow(
                student=student,
                assigned_subject_ids=assigned,
                marks=assigned_marks,
                total_marks=sum(mark.total for mark in assigned_marks.values()),
            )
        )

    subjects = assigned_subjects_in_view(students, subject_catalog, assignments)
    logger.debug("Mark ledger: %d students, %d subjects", len(rows), len(subjects))
    return Ledger(subjects=subjects, students=rows)


def build_grade_ledger(
    students: Sequence[Student],
    subject_catalog: SubjectCatalog,
    assignments: Mapping[str, Assignment],
    grades: GradesMap,
) -> Ledger:
    rows: List[Union[MarkLedgerRow, GradeLedgerRow]] = []
    for student in students:
        assigned = _assigned_ids(assignments, student.id)
        summary = grades.get(student.id)
        if summary is None:
            student_grades: Dict[int, GradeResult] = {}
            gpa = 0.0
        else:
            student_grades = {k: v for k, v in summary.subjects.items() if k in assigned}
            gpa = summary.gpa
        rows.append(
            GradeLedgerRow(
                student=student,
                assigned_subject_ids=assigned,
                grades=student_grades,
                gpa=gpa,
            )
        )

    subjects = assigned_subjects_in_view(students, subject_catalog, assignments)
    logger.debug("Grade ledger: %d students, %d subjects", len(rows), len(subjects))
    return Ledger(subjects=subjects, students=rows)
