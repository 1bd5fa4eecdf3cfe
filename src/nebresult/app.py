import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from nebresult.config.settings import settings
from nebresult.core.gpa import compute_grades_for_students
from nebresult.core.ledger import Ledger, build_grade_ledger, build_mark_ledger, students_in_view
from nebresult.core.marksheet import GRADING_LEGEND, Marksheet, SubjectLine, build_marksheet
from nebresult.core.stats import (
    average_gpa,
    grade_distribution,
    school_averages,
    schools_with_most_ng,
    subject_popularity,
    top_schools,
)
from nebresult.domain.models import Assignment, GradesMap, Student, StudentMarks, Subject
from nebresult.services.records import (
    RecordError,
    assignments_from_records,
    grades_to_records,
    marks_from_records,
    school_from_record,
    student_from_record,
    subjects_from_records,
)


logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(level=settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    yield


app = FastAPI(title="NEB Result API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ResultDataPayload(BaseModel):
    subjects: List[Dict[str, Any]] = Field(default_factory=list)
    marks: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    assignments: Dict[str, List[Any]] = Field(default_factory=dict)
    extra_credit_assignments: Dict[str, Optional[Any]] = Field(default_factory=dict)


class GradesPayload(ResultDataPayload):
    student_ids: List[str]


class LedgerPayload(ResultDataPayload):
    students: List[Dict[str, Any]]
    school_id: Optional[int] = None
    year: Optional[int] = None
    grade: Optional[str] = None


class MarksheetPayload(ResultDataPayload):
    student: Dict[str, Any]


class StatsPayload(ResultDataPayload):
    schools: List[Dict[str, Any]] = Field(default_factory=list)
    students: List[Dict[str, Any]] = Field(default_factory=list)


def _bad_request(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _load(payload: ResultDataPayload) -> Tuple[List[Subject], Dict[str, StudentMarks], Dict[str, Assignment]]:
    try:
        return (
            subjects_from_records(payload.subjects),
            marks_from_records(payload.marks),
            assignments_from_records(payload.assignments, payload.extra_credit_assignments),
        )
    except RecordError as exc:
        raise _bad_request(exc) from exc


def _load_students(records: List[Dict[str, Any]]) -> List[Student]:
    try:
        return [student_from_record(record) for record in records]
    except RecordError as exc:
        raise _bad_request(exc) from exc


def _grades_for(students: List[Student], subjects, marks, assignments) -> GradesMap:
    return compute_grades_for_students([s.id for s in students], marks, subjects, assignments)


def _ledger_response(ledger: Ledger, **summary_fields) -> Dict:
    columns = [
        {
            "id": subject.id,
            "name": subject.name,
            "theory_code": subject.theory.sub_code,
            "internal_code": subject.internal.sub_code,
        }
        for subject in ledger.subjects
    ]
    rows = []
    for row in ledger.students:
        entry = {
            "id": row.student.id,
            "name": row.student.name,
            "roll_no": row.student.roll_no,
            "symbol_no": row.student.symbol_no,
            "cells": {str(subject.id): list(row.cell_text(subject.id)) for subject in ledger.subjects},
        }
        for key, attr in summary_fields.items():
            entry[key] = getattr(row, attr)
        rows.append(entry)
    return {"subjects": columns, "students": rows}


def _subject_line_response(line: SubjectLine) -> Dict:
    return {
        "subject_id": line.subject.id,
        "components": [
            {
                "sub_code": component.sub_code,
                "label": component.label,
                "credit": component.credit,
                "grade_point": component.grade_point_text,
                "grade": component.grade,
            }
            for component in (line.theory, line.internal)
        ],
        "final_grade": line.final_grade,
        "remarks": line.remarks,
    }


def _marksheet_response(sheet: Marksheet) -> Dict:
    return {
        "student_id": sheet.student.id,
        "name": sheet.student.name,
        "subjects": [_subject_line_response(line) for line in sheet.subjects],
        "gpa": sheet.gpa,
        "gpa_text": sheet.gpa_text,
        "overall_grade": sheet.overall_grade,
        "extra_credit": _subject_line_response(sheet.extra_credit) if sheet.extra_credit else None,
        "legend": [
            {
                "achievement": row.achievement,
                "grade": row.grade,
                "description": row.description,
                "grade_point": row.grade_point,
            }
            for row in GRADING_LEGEND
        ],
    }


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/grades")
def compute_grades(payload: GradesPayload) -> Dict:
    subjects, marks, assignments = _load(payload)
    grades = compute_grades_for_students(payload.student_ids, marks, subjects, assignments)
    logger.info("Graded %d students against %d subjects", len(grades), len(subjects))
    return grades_to_records(grades)


def _students_for_ledger(payload: LedgerPayload) -> List[Student]:
    students = _load_students(payload.students)
    if payload.school_id is not None and payload.year is not None and payload.grade is not None:
        students = students_in_view(students, payload.school_id, payload.year, payload.grade)
    return students


@app.post("/ledgers/marks")
def mark_ledger(payload: LedgerPayload) -> Dict:
    subjects, marks, assignments = _load(payload)
    students = _students_for_ledger(payload)
    ledger = build_mark_ledger(students, subjects, assignments, marks)
    return _ledger_response(ledger, total_marks="total_marks")


@app.post("/ledgers/grades")
def grade_ledger(payload: LedgerPayload) -> Dict:
    subjects, marks, assignments = _load(payload)
    students = _students_for_ledger(payload)
    grades = _grades_for(students, subjects, marks, assignments)
    ledger = build_grade_ledger(students, subjects, assignments, grades)
    return _ledger_response(ledger, gpa="gpa", gpa_text="gpa_text")


@app.post("/marksheets/{student_id}")
def marksheet(student_id: str, payload: MarksheetPayload) -> Dict:
    subjects, marks, assignments = _load(payload)
    student = _load_students([{**payload.student, "id": student_id}])[0]
    grades = _grades_for([student], subjects, marks, assignments)
    sheet = build_marksheet(
        student,
        subjects,
        assignments.get(student.id),
        marks.get(student.id),
        grades[student.id],
    )
    return _marksheet_response(sheet)


@app.post("/stats")
def result_stats(payload: StatsPayload) -> Dict:
    subjects, marks, assignments = _load(payload)
    students = _load_students(payload.students)
    try:
        schools = [school_from_record(record) for record in payload.schools]
    except RecordError as exc:
        raise _bad_request(exc) from exc

    grades = _grades_for(students, subjects, marks, assignments)
    averages = school_averages(schools, students, grades)
    return {
        "total_students": len(students),
        "average_gpa": round(average_gpa(grades), settings.gpa_decimals),
        "top_schools": [
            {"id": s.school_id, "name": s.name, "avg_gpa": s.avg_gpa} for s in top_schools(averages)
        ],
        "ng_schools": [
            {"id": s.school_id, "name": s.name, "ng_count": s.ng_count} for s in schools_with_most_ng(averages)
        ],
        "subject_popularity": [
            {"name": name, "value": count} for name, count in subject_popularity(subjects, assignments)
        ],
        "grade_distribution": grade_distribution(grades),
    }
