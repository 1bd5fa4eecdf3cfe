import unittest

from nebresult.core.stats import (
    average_gpa,
    grade_distribution,
    school_averages,
    schools_with_most_ng,
    subject_popularity,
    top_schools,
)
from nebresult.domain.models import (
    Assignment,
    School,
    Student,
    StudentGradeSummary,
    Subject,
    SubjectComponent,
)


def make_subject(subject_id, name):
    component = SubjectComponent("", 1.0, 100, 35)
    return Subject(id=subject_id, name=name, grade=11, theory=component, internal=component)


SCHOOLS = [School(id=1, name="Janata"), School(id=2, name="Saraswati"), School(id=3, name="Empty")]
STUDENTS = [
    Student(id="A", name="A", school_id=1, year=2082, grade="11"),
    Student(id="B", name="B", school_id=1, year=2082, grade="11"),
    Student(id="C", name="C", school_id=2, year=2082, grade="11"),
    Student(id="D", name="D", school_id=2, year=2082, grade="11"),
    Student(id="E", name="E", school_id=2, year=2082, grade="11"),
]
GRADES = {
    "A": StudentGradeSummary(gpa=3.0),
    "B": StudentGradeSummary(gpa=4.0),
    "C": StudentGradeSummary(gpa=2.0),
    "D": StudentGradeSummary(gpa=0.0),
    "E": StudentGradeSummary(gpa=0.0),
}


class StatsTests(unittest.TestCase):
    def test_average_gpa_ignores_not_graded(self):
        self.assertAlmostEqual(average_gpa(GRADES), 3.0)
        self.assertEqual(average_gpa({}), 0.0)

    def test_school_averages(self):
        averages = {s.school_id: s for s in school_averages(SCHOOLS, STUDENTS, GRADES)}
        self.assertAlmostEqual(averages[1].avg_gpa, 3.5)
        self.assertEqual(averages[1].ng_count, 0)
        self.assertAlmostEqual(averages[2].avg_gpa, 2.0)
        self.assertEqual(averages[2].ng_count, 2)
        self.assertEqual(averages[3].avg_gpa, 0.0)

    def test_rankings(self):
        averages = school_averages(SCHOOLS, STUDENTS, GRADES)
        self.assertEqual([s.name for s in top_schools(averages, limit=2)], ["Janata", "Saraswati"])
        self.assertEqual(schools_with_most_ng(averages, limit=1)[0].name, "Saraswati")

    def test_subject_popularity(self):
        catalog = [make_subject(1, "Physics"), make_subject(2, "Accounts")]
        assignments = {
            "A": Assignment(subject_ids=frozenset({1, 2})),
            "B": Assignment(subject_ids=frozenset({1})),
            "C": Assignment(subject_ids=frozenset({1, 9}), extra_credit_id=2),
        }
        popular = subject_popularity(catalog, assignments)
        self.assertEqual(popular[0], ("Physics", 3))
        self.assertIn(("Accounts", 1), popular)
        self.assertIn(("Unknown", 1), popular)

    def test_grade_distribution(self):
        self.assertEqual(grade_distribution(GRADES), {"B+": 1, "A+": 1, "C": 1, "NG": 2})


if __name__ == "__main__":
    unittest.main()
