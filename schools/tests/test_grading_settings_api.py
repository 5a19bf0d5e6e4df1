from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from bulletins.tests.base import SchoolFixturesMixin
from schools.models import EvaluationType, GradingPeriod, School


class EvaluationTypeApiTests(SchoolFixturesMixin, TestCase):
    URL = "/api/admin/grading/evaluation-types/"

    def setUp(self):
        self.create_school_fixtures()
        self.client = self.admin_client()

    def test_create(self):
        resp = self.client.post(
            self.URL, {"schoolId": self.school.id, "name": "TP", "category": "HOMEWORK", "weight": 1.5}, format="json"
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["weight"], 1.5)
        self.assertTrue(EvaluationType.objects.filter(school=self.school, name="TP").exists())

    def test_weight_must_be_positive(self):
        resp = self.client.post(
            self.URL, {"schoolId": self.school.id, "name": "TP", "category": "HOMEWORK", "weight": 0}, format="json"
        )
        self.assertEqual(resp.status_code, 400)

    def test_other_school_is_forbidden(self):
        resp = self.client.post(
            self.URL, {"schoolId": self.other_school.id, "name": "TP", "category": "EXAM", "weight": 1}, format="json"
        )
        self.assertEqual(resp.status_code, 403)

    def test_update_and_soft_delete(self):
        devoir = EvaluationType.objects.get(school=self.school, name="Devoir")
        resp = self.client.put(f"{self.URL}{devoir.id}/", {"weight": 2.0}, format="json")
        self.assertEqual(resp.status_code, 200)
        devoir.refresh_from_db()
        self.assertEqual(devoir.weight, 2.0)

        resp = self.client.delete(f"{self.URL}{devoir.id}/")
        self.assertEqual(resp.data, {"detail": "Type supprimé"})
        devoir.refresh_from_db()
        self.assertFalse(devoir.is_active)
        self.assertEqual([t["name"] for t in self.client.get(self.URL).data], ["Examen"])

    def test_type_of_another_school_is_not_found(self):
        foreign = EvaluationType.objects.create(school=self.other_school, name="Devoir", category="HOMEWORK")
        self.assertEqual(self.client.delete(f"{self.URL}{foreign.id}/").status_code, 404)


class GradingPeriodApiTests(SchoolFixturesMixin, TestCase):
    URL = "/api/admin/grading/periods/"

    def setUp(self):
        self.create_school_fixtures()
        self.client = self.admin_client()

    def test_create_defaults_academic_year(self):
        resp = self.client.post(
            self.URL,
            {"schoolId": self.school.id, "name": "Semestre 2", "startDate": "2026-02-01", "endDate": "2026-06-30"},
            format="json",
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.data["academicYear"], "2025-2026")

    def test_end_before_start(self):
        resp = self.client.post(
            self.URL,
            {"schoolId": self.school.id, "name": "X", "startDate": "2026-06-30", "endDate": "2026-02-01"},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        resp = self.client.put(f"{self.URL}{self.period.id}/", {"endDate": "2025-01-01"}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_update(self):
        resp = self.client.put(f"{self.URL}{self.period.id}/", {"name": "S1"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.period.refresh_from_db()
        self.assertEqual(self.period.name, "S1")


class GradingSystemApiTests(SchoolFixturesMixin, TestCase):
    URL = "/api/admin/grading/system/"

    def setUp(self):
        self.create_school_fixtures()
        self.client = self.admin_client()

    def test_valid_formula_is_saved(self):
        resp = self.client.put(
            self.URL,
            {"schoolId": self.school.id, "gradingSystem": "SEMESTER", "gradingFormula": "(examens * 2 + devoirs) / 3"},
            format="json",
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["detail"], "Configuration mise à jour")
        self.school.refresh_from_db()
        self.assertEqual(self.school.grading_formula, "(examens * 2 + devoirs) / 3")

    def test_invalid_formula_is_rejected(self):
        resp = self.client.put(
            self.URL,
            {"schoolId": self.school.id, "gradingSystem": "SEMESTER", "gradingFormula": "moyenne / 2"},
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertIn("gradingFormula", resp.data)
        self.school.refresh_from_db()
        self.assertEqual(self.school.grading_formula, "")

    def test_formula_undefined_at_one_point_is_accepted(self):
        resp = self.client.put(
            self.URL,
            {"schoolId": self.school.id, "gradingSystem": "SEMESTER", "gradingFormula": "devoirs / (examens - 12)"},
            format="json",
        )
        self.assertEqual(resp.status_code, 200)
        self.school.refresh_from_db()
        self.assertEqual(self.school.grading_formula, "devoirs / (examens - 12)")


class SeedGradingSystemCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        lycee = School.objects.create(name="Lycée", school_type="HIGH_SCHOOL")
        univ = School.objects.create(name="Université", school_type="UNIVERSITY", academic_year="2025-2026")
        call_command("seed_grading_system", "--year", "2025", stdout=StringIO())
        call_command("seed_grading_system", "--year", "2025", stdout=StringIO())

        lycee.refresh_from_db()
        self.assertEqual(lycee.grading_system, "TRIMESTER")
        self.assertEqual(lycee.grading_formula, "(examens + devoirs * 2) / 3")
        self.assertEqual(EvaluationType.objects.filter(school=lycee).count(), 2)
        self.assertEqual(EvaluationType.objects.get(school=lycee, name="Devoir").weight, 2.0)
        periods = list(GradingPeriod.objects.filter(school=lycee).values_list("name", flat=True))
        self.assertEqual(periods, ["Trimestre 1", "Trimestre 2", "Trimestre 3"])
        self.assertEqual(GradingPeriod.objects.filter(school=lycee).first().academic_year, "2025-2026")

        univ.refresh_from_db()
        self.assertEqual(univ.grading_formula, "(examens + devoirs + projets) / 3")
        self.assertEqual(EvaluationType.objects.filter(school=univ).count(), 4)
        self.assertEqual(GradingPeriod.objects.filter(school=univ).count(), 2)

    def test_demo_data(self):
        call_command("create_demo_data", "--students", "3", "--seed", "1", stdout=StringIO())
        school = School.objects.get(name="Université Démo")
        self.assertEqual(school.students.count(), 3)
        self.assertEqual(school.members.get().role, "SCHOOL_ADMIN")
        self.assertTrue(school.modules.filter(filiere__isnull=True).exists())
