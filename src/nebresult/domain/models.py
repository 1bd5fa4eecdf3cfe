from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Mapping, Optional


@dataclass(frozen=True)
class SubjectComponent:
    sub_code: str
    credit: float
    full_marks: float
    pass_marks: float = 0


@dataclass(frozen=True)
class Subject:
    id: int
    name: str
    grade: int
    theory: SubjectComponent
    internal: SubjectComponent

    @property
    def total_credit(self) -> float:
        return self.theory.credit + self.internal.credit


@dataclass(frozen=True)
class MarkPair:
    theory: float = 0.0
    internal: float = 0.0

    @property
    def total(self) -> float:
        return self.theory + self.internal


@dataclass(frozen=True)
class StudentMarks:
    is_absent: bool = False
    per_subject: Mapping[int, MarkPair] = field(default_factory=dict)

    def mark_for(self, subject_id: int) -> Optional[MarkPair]:
        return self.per_subject.get(subject_id)


@dataclass(frozen=True)
class Assignment:
    """Subjects a student is registered for in one academic year.

    ``subject_ids`` are the main subjects counted in GPA. ``extra_credit_id``
    is graded for display only.
    """

    subject_ids: FrozenSet[int] = frozenset()
    extra_credit_id: Optional[int] = None

    @property
    def main_subject_ids(self) -> FrozenSet[int]:
        if self.extra_credit_id is None:
            return self.subject_ids
        return self.subject_ids - {self.extra_credit_id}

    def is_assigned(self, subject_id: int) -> bool:
        return subject_id in self.subject_ids


@dataclass(frozen=True)
class GradeResult:
    th: str
    in_: str
    th_gp: float
    in_gp: float


@dataclass(frozen=True)
class StudentGradeSummary:
    gpa: float = 0.0
    subjects: Mapping[int, GradeResult] = field(default_factory=dict)


@dataclass(frozen=True)
class Student:
    id: str
    name: str
    school_id: int
    year: int
    grade: str
    roll_no: str = ""
    symbol_no: str = ""
    registration_id: str = ""


@dataclass(frozen=True)
class School:
    id: int
    name: str
    status: str = "Active"


GradesMap = Dict[str, StudentGradeSummary]
