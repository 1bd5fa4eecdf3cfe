import importlib
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

import nebresult.app
from nebresult.app import app
from nebresult.config.settings import settings


def subject_record(subject_id, name):
    return {
        "id": subject_id,
        "name": name,
        "grade": 11,
        "theory": {"subCode": f"{subject_id}1", "credit": 2.25, "fullMarks": 75, "passMarks": 27},
        "internal": {"subCode": f"{subject_id}2", "credit": 0.75, "fullMarks": 25, "passMarks": 10},
    }


SUBJECTS = [subject_record(i, f"Subject {i}") for i in range(1, 6)]
STUDENTS = [
    {"id": "S1", "name": "Asha", "school_id": 1, "year": 2082, "grade": "11", "roll_no": "1"},
    {"id": "S2", "name": "Bikash", "school_id": 1, "year": 2082, "grade": "11", "roll_no": "2"},
    {"id": "S3", "name": "Other", "school_id": 2, "year": 2082, "grade": "11", "roll_no": "1"},
]
MARKS = {
    "S1": {"isAbsent": False, "1": {"theory": 65, "internal": 22}, "2": {"theory": 55, "internal": 13}},
    "S2": {"isAbsent": True, "1": {"theory": 70, "internal": 25}},
    "S3": {"4": {"theory": 70, "internal": 25}},
}
ASSIGNMENTS = {"S1": [1, 2], "S2": [1], "S3": [4]}


def base_payload(**extra):
    payload = {
        "subjects": SUBJECTS,
        "marks": MARKS,
        "assignments": ASSIGNMENTS,
        "extra_credit_assignments": {"S1": 5},
    }
    payload.update(extra)
    return payload


class ApiTests(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_grades(self):
        response = self.client.post("/grades", json=base_payload(student_ids=["S1", "S2"]))
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertAlmostEqual(body["S1"]["gpa"], 3.3, places=6)
        self.assertEqual(body["S1"]["subjects"]["2"], {"th": "B+", "in": "C+", "th_gp": 3.2, "in_gp": 2.4})
        self.assertEqual(body["S2"], {"gpa": 0.0, "subjects": {}})

    def test_bad_marks_are_rejected(self):
        payload = base_payload(student_ids=["S1"], marks={"S1": {"1": {"theory": "x", "internal": 1}}})
        response = self.client.post("/grades", json=payload)
        self.assertEqual(response.status_code, 400)
        self.assertIn("theory", response.json()["detail"])

    def test_mark_ledger_filters_view(self):
        payload = base_payload(students=STUDENTS, school_id=1, year=2082, grade="11")
        response = self.client.post("/ledgers/marks", json=payload)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual([s["id"] for s in body["subjects"]], [1, 2])
        rows = {row["id"]: row for row in body["students"]}
        self.assertEqual(set(rows), {"S1", "S2"})
        self.assertEqual(rows["S1"]["total_marks"], 65 + 22 + 55 + 13)
        self.assertEqual(rows["S2"]["cells"]["2"], ["-", "-"])

    def test_grade_ledger(self):
        payload = base_payload(students=STUDENTS[:2])
        body = self.client.post("/ledgers/grades", json=payload).json()
        rows = {row["id"]: row for row in body["students"]}
        self.assertEqual(rows["S1"]["cells"]["1"], ["A", "A"])
        self.assertEqual(rows["S1"]["gpa_text"], "3.30")
        self.assertEqual(rows["S2"]["gpa_text"], "NG")
        self.assertEqual(rows["S2"]["cells"]["1"], ["NG", "NG"])

    def test_marksheet(self):
        payload = base_payload(student=STUDENTS[0])
        response = self.client.post("/marksheets/S1", json=payload)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["overall_grade"], "A")
        self.assertEqual([line["subject_id"] for line in body["subjects"]], [1, 2])
        self.assertEqual(body["extra_credit"]["final_grade"], "N/A")
        self.assertEqual(len(body["legend"]), 8)

    def test_stats(self):
        payload = base_payload(
            students=STUDENTS,
            schools=[{"id": 1, "name": "Janata"}, {"id": 2, "name": "Saraswati"}],
        )
        body = self.client.post("/stats", json=payload).json()
        self.assertEqual(body["total_students"], 3)
        self.assertEqual(body["top_schools"][0]["name"], "Saraswati")
        self.assertEqual(body["grade_distribution"]["NG"], 1)


class LoggingSetupTests(unittest.TestCase):
    def test_import_leaves_logging_alone(self):
        with patch("logging.basicConfig") as basic_config:
            importlib.reload(nebresult.app)
        basic_config.assert_not_called()

    def test_startup_configures_logging(self):
        with patch("logging.basicConfig") as basic_config:
            TestClient(app)
            basic_config.assert_not_called()
            with TestClient(app) as client:
                self.assertEqual(client.get("/health").status_code, 200)
        basic_config.assert_called_once_with(level=settings.log_level)


if __name__ == "__main__":
    unittest.main()
