from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Tuple

from nebresult.core.gpa import SubjectCatalog, index_catalog
from nebresult.core.scales import overall_final_grade
from nebresult.domain.models import Assignment, GradesMap, School, Student


@dataclass(frozen=True)
class SchoolAverage:
    school_id: int
    name: str
    avg_gpa: float
    graded_count: int
    ng_count: int


def average_gpa(grades: GradesMap) -> float:
    """Mean GPA over graded students; GPA 0 (NG) is left out."""
    scores = [summary.gpa for summary in grades.values() if summary.gpa > 0]
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def school_averages(
    schools: Iterable[School],
    students: Iterable[Student],
    grades: GradesMap,
) -> List[SchoolAverage]:
    totals: Dict[int, List[float]] = {}
    ng_counts: Dict[int, int] = {}
    names: Dict[int, str] = {}
    for school in schools:
        totals[school.id] = []
        ng_counts[school.id] = 0
        names[school.id] = school.name

    for student in students:
        if student.school_id not in totals:
            continue
        summary = grades.get(student.id)
        if summary is None:
            continue
        if summary.gpa > 0:
            totals[student.school_id].append(summary.gpa)
        else:
            ng_counts[student.school_id] += 1

    return [
        SchoolAverage(
            school_id=school_id,
            name=names[school_id],
            avg_gpa=sum(gpas) / len(gpas) if gpas else 0.0,
            graded_count=len(gpas),
            ng_count=ng_counts[school_id],
        )
        for school_id, gpas in totals.items()
    ]


def top_schools(averages: Iterable[SchoolAverage], limit: int = 3) -> List[SchoolAverage]:
    return sorted(averages, key=lambda s: s.avg_gpa, reverse=True)[:limit]


def schools_with_most_ng(averages: Iterable[SchoolAverage], limit: int = 3) -> List[SchoolAverage]:
    return sorted(averages, key=lambda s: s.ng_count, reverse=True)[:limit]


def subject_popularity(
    subject_catalog: SubjectCatalog,
    assignments: Mapping[str, Assignment],
    limit: int = 5,
) -> List[Tuple[str, int]]:
    catalog = index_catalog(subject_catalog)
    counts: Counter = Counter()
    for assignment in assignments.values():
        counts.update(assignment.main_subject_ids)

    popular = []
    for subject_id, count in counts.most_common(limit):
        subject = catalog.get(subject_id)
        popular.append((subject.name if subject is not None else "Unknown", count))
    return popular


def grade_distribution(grades: GradesMap) -> Dict[str, int]:
    counts: Counter = Counter(overall_final_grade(summary.gpa) for summary in grades.values())
    return dict(counts)
