from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase
from rest_framework.test import APIClient

from bulletins.models import Bulletin, PDFTemplate
from bulletins.tests.base import SchoolFixturesMixin
from schools.models import Student

URL = "/api/admin/bulletins/generate/"


class GenerateBulletinsApiTests(SchoolFixturesMixin, TestCase):
    def setUp(self):
        self.create_school_fixtures()
        self.client = self.admin_client()

    def payload(self, **extra):
        data = {"schoolId": self.school.id, "periodId": self.period.id}
        data.update(extra)
        return data

    def test_anonymous_is_rejected(self):
        resp = APIClient().post(URL, self.payload(), format="json")
        self.assertEqual(resp.status_code, 401)

    def test_wrong_role_is_rejected(self):
        client = self.admin_client(role="TEACHER", username="prof")
        resp = client.post(URL, self.payload(), format="json")
        self.assertEqual(resp.status_code, 401)

    def test_user_without_profile_is_rejected(self):
        client = APIClient()
        client.force_authenticate(user=get_user_model().objects.create_user(username="nobody", password="p"))
        self.assertEqual(client.post(URL, self.payload(), format="json").status_code, 401)

    def test_missing_fields(self):
        resp = self.client.post(URL, {"schoolId": self.school.id}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("periodId", resp.data)

    def test_other_school_is_forbidden(self):
        resp = self.client.post(URL, self.payload(schoolId=self.other_school.id), format="json")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(Bulletin.objects.count(), 0)

    def test_period_of_another_school_is_not_found(self):
        resp = self.client.post(URL, self.payload(periodId=self.other_period.id), format="json")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data["detail"], "École ou période non trouvée")

    def test_no_students(self):
        resp = self.client.post(URL, self.payload(studentId=999999), format="json")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data["detail"], "Aucun étudiant trouvé")

    def test_unenrolled_student_is_skipped(self):
        Student.objects.filter(pk=self.bob.pk).update(is_enrolled=False)
        resp = self.client.post(URL, self.payload(studentId=self.bob.id), format="json")
        self.assertEqual(resp.status_code, 404)

    def test_single_student_returns_html(self):
        resp = self.client.post(URL, self.payload(studentId=self.alice.id), format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "text/html; charset=utf-8")
        html = resp.content.decode()
        self.assertIn("Alice Adjo", html)
        self.assertIn("9.75/20", html)

        bulletin = Bulletin.objects.get()
        self.assertEqual(bulletin.student, self.alice)
        self.assertEqual(bulletin.grading_period, self.period)
        self.assertEqual(str(bulletin.general_average), "9.75")
        self.assertEqual(bulletin.html, html)
        self.assertEqual(bulletin.modules[0]["finalGrade"], "11.50")

    def test_many_students_return_json(self):
        resp = self.client.post(URL, self.payload(), format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["count"], 2)
        self.assertEqual(resp.data["message"], "2 bulletin(s) généré(s)")
        names = [b["student"]["name"] for b in resp.data["bulletins"]]
        self.assertEqual(names, ["Alice Adjo", "Bob Bamba"])
        bob = resp.data["bulletins"][1]
        self.assertEqual(bob["modules"], [{"module": "Math", "avgDevoirs": "0.00", "avgExamens": "8.00", "finalGrade": "4.00"}])
        self.assertEqual(bob["generalAverage"], "4.00")
        self.assertEqual(bob["period"], "Semestre 1")
        self.assertEqual(Bulletin.objects.count(), 2)

    def test_filiere_filter(self):
        Student.objects.filter(pk=self.bob.pk).update(filiere=None)
        resp = self.client.post(URL, self.payload(filiereId=self.filiere.id), format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "text/html; charset=utf-8")

    def test_evaluations_outside_period_are_ignored(self):
        from datetime import date

        self.add_evaluation(self.bob, self.math, "Examen", "20", when=date(2026, 3, 1))
        resp = self.client.post(URL, self.payload(studentId=self.bob.id), format="json")
        self.assertIn("4.00/20", resp.content.decode())

    def test_school_formula_is_applied(self):
        self.school.grading_formula = "examens"
        self.school.save()
        resp = self.client.post(URL, self.payload(studentId=self.bob.id), format="json")
        self.assertIn("8.00/20", resp.content.decode())

    def test_template_is_created_once(self):
        self.client.post(URL, self.payload(), format="json")
        self.client.post(URL, self.payload(), format="json")
        self.assertEqual(PDFTemplate.objects.filter(school=self.school).count(), 1)
        self.assertEqual(Bulletin.objects.count(), 4)

    @patch("bulletins.api.generate_bulletins", side_effect=RuntimeError("boom"))
    def test_unexpected_error(self, _mock):
        with self.assertLogs("bulletins.api", level="ERROR"):
            resp = self.client.post(URL, self.payload(), format="json")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.data["detail"], "Erreur lors de la génération")

    @patch("bulletins.api.select_students", side_effect=DatabaseError("connection lost"))
    def test_database_error_during_lookup(self, _mock):
        with self.assertLogs("bulletins.api", level="ERROR"):
            resp = self.client.post(URL, self.payload(), format="json")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.data["detail"], "Erreur lors de la génération")
