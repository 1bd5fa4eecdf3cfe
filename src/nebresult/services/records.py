"""Conversion between storage-shaped records and the grading models.

Storage keeps subject ids as string keys inside a student's marks record,
next to an ``isAbsent`` flag, and uses camelCase field names. Everything is
normalised here so the grading code only ever sees ``int`` subject ids.
"""
from __future__ import annotations

import logging
from collections import abc
from typing import Any, Dict, Iterable, List, Mapping, Optional

from nebresult.domain.models import (
    Assignment,
    GradeResult,
    GradesMap,
    MarkPair,
    School,
    Student,
    StudentGradeSummary,
    StudentMarks,
    Subject,
    SubjectComponent,
)

logger = logging.getLogger(__name__)

ABSENT_KEY = "isAbsent"


class RecordError(ValueError):
    pass


def _pick(record: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in record:
            return record[key]
    return default


def _to_float(value: Any, field_name: str) -> float:
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        raise RecordError(f"{field_name} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise RecordError(f"{field_name} must be a number") from exc


def _to_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise RecordError(f"{field_name} must be an integer")
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise RecordError(f"{field_name} must be an integer") from exc
    if not number.is_integer():
        raise RecordError(f"{field_name} must be an integer")
    return int(number)


def _to_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    text = str(value).strip().lower()
    if text in {"true", "1", "yes", "y", "on"}:
        return True
    if text in {"false", "0", "no", "n", "off"}:
        return False
    return default


def _component_from_record(record: Any, field_name: str) -> SubjectComponent:
    if not isinstance(record, abc.Mapping):
        raise RecordError(f"{field_name} must be an object")
    return SubjectComponent(
        sub_code=str(_pick(record, "subCode", "sub_code", default="")),
        credit=_to_float(record.get("credit"), f"{field_name}.credit"),
        full_marks=_to_float(_pick(record, "fullMarks", "full_marks"), f"{field_name}.fullMarks"),
        pass_marks=_to_float(_pick(record, "passMarks", "pass_marks"), f"{field_name}.passMarks"),
    )


def subject_from_record(record: Mapping[str, Any]) -> Subject:
    if "id" not in record:
        raise RecordError("subject id is required")
    subject_id = _to_int(record["id"], "subject id")
    return Subject(
        id=subject_id,
        name=str(record.get("name", "")),
        grade=_to_int(record.get("grade", 11), f"subject {subject_id} grade"),
        theory=_component_from_record(record.get("theory"), f"subject {subject_id} theory"),
        internal=_component_from_record(record.get("internal"), f"subject {subject_id} internal"),
    )


def subjects_from_records(records: Iterable[Mapping[str, Any]]) -> List[Subject]:
    return [subject_from_record(record) for record in records]


def mark_from_record(record: Mapping[str, Any], field_name: str = "mark") -> MarkPair:
    return MarkPair(
        theory=_to_float(record.get("theory"), f"{field_name}.theory"),
        internal=_to_float(record.get("internal"), f"{field_name}.internal"),
    )


def student_marks_from_record(record: Mapping[str, Any]) -> StudentMarks:
    per_subject: Dict[int, MarkPair] = {}
    for key, value in record.items():
        if key == ABSENT_KEY:
            continue
        if not isinstance(value, abc.Mapping):
            logger.warning("Ignoring non-mark entry %r in marks record", key)
            continue
        subject_id = _to_int(key, "subject id")
        per_subject[subject_id] = mark_from_record(value, f"marks[{key}]")
    return StudentMarks(is_absent=_to_bool(record.get(ABSENT_KEY)), per_subject=per_subject)


def marks_from_records(records: Mapping[str, Mapping[str, Any]]) -> Dict[str, StudentMarks]:
    return {str(student_id): student_marks_from_record(record) for student_id, record in records.items()}


def assignments_from_records(
    main: Mapping[str, Iterable[Any]],
    extra_credit: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Assignment]:
    extra_credit = extra_credit or {}
    assignments: Dict[str, Assignment] = {}
    for student_id in list(main) + [sid for sid in extra_credit if sid not in main]:
        subject_ids = frozenset(
            _to_int(value, f"assignments[{student_id}]") for value in (main.get(student_id) or [])
        )
        extra_value = extra_credit.get(student_id)
        extra_id = None if extra_value is None else _to_int(extra_value, f"extraCredit[{student_id}]")
        assignments[str(student_id)] = Assignment(subject_ids=subject_ids, extra_credit_id=extra_id)
    return assignments


def student_from_record(record: Mapping[str, Any]) -> Student:
    if "id" not in record:
        raise RecordError("student id is required")
    return Student(
        id=str(record["id"]),
        name=str(record.get("name", "")),
        school_id=_to_int(_pick(record, "school_id", "schoolId", default=0), "school_id"),
        year=_to_int(record.get("year", 0), "year"),
        grade=str(record.get("grade", "")),
        roll_no=str(_pick(record, "roll_no", "rollNo", default="")),
        symbol_no=str(_pick(record, "symbol_no", "symbolNo", default="")),
        registration_id=str(_pick(record, "registration_id", "registrationId", default="")),
    )


def school_from_record(record: Mapping[str, Any]) -> School:
    if "id" not in record:
        raise RecordError("school id is required")
    return School(
        id=_to_int(record["id"], "school id"),
        name=str(record.get("name", "")),
        status=str(record.get("status", "Active")),
    )


def grade_result_to_record(result: GradeResult) -> Dict[str, Any]:
    return {"th": result.th, "in": result.in_, "th_gp": result.th_gp, "in_gp": result.in_gp}


def grades_to_records(grades: GradesMap) -> Dict[str, Dict[str, Any]]:
    return {
        student_id: {
            "gpa": summary.gpa,
            "subjects": {
                str(subject_id): grade_result_to_record(result)
                for subject_id, result in summary.subjects.items()
            },
        }
        for student_id, summary in grades.items()
    }


def grades_from_records(records: Mapping[str, Mapping[str, Any]]) -> GradesMap:
    grades: GradesMap = {}
    for student_id, record in records.items():
        if not isinstance(record, abc.Mapping):
            raise RecordError(f"grades[{student_id}] must be an object")
        entries = record.get("subjects") or {}
        if not isinstance(entries, abc.Mapping):
            raise RecordError(f"grades[{student_id}].subjects must be an object")
        subjects: Dict[int, GradeResult] = {}
        for key, value in entries.items():
            if not isinstance(value, abc.Mapping):
                raise RecordError(f"grades[{student_id}].subjects[{key}] must be an object")
            subjects[_to_int(key, "subject id")] = GradeResult(
                th=str(value.get("th", "NG")),
                in_=str(value.get("in", "NG")),
                th_gp=_to_float(value.get("th_gp"), f"grades[{student_id}].th_gp"),
                in_gp=_to_float(value.get("in_gp"), f"grades[{student_id}].in_gp"),
            )
        grades[str(student_id)] = StudentGradeSummary(
            gpa=_to_float(record.get("gpa"), f"grades[{student_id}].gpa"),
            subjects=subjects,
        )
    return grades
