from datetime import date

from django.test import TestCase
from rest_framework.test import APIClient

from bulletins.models import Bulletin
from bulletins.services.builder import generate_bulletins, select_students
from bulletins.tests.base import SchoolFixturesMixin
from schools.models import GradingPeriod

URL = "/api/admin/bulletins/"


class BulletinHistoryApiTests(SchoolFixturesMixin, TestCase):
    def setUp(self):
        self.create_school_fixtures()
        self.client = self.admin_client()
        generate_bulletins(self.school, self.period, select_students(self.school, self.period))
        self.period2 = GradingPeriod.objects.create(
            school=self.school,
            name="Semestre 2",
            academic_year="2025-2026",
            start_date=date(2026, 2, 1),
            end_date=date(2026, 6, 30),
        )
        generate_bulletins(self.school, self.period2, select_students(self.school, self.period2, student_id=self.alice.id))

    def test_requires_school_admin(self):
        self.assertEqual(APIClient().get(URL).status_code, 401)

    def test_all_bulletins_newest_first(self):
        resp = self.client.get(URL)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["count"], 3)
        first = resp.data["bulletins"][0]
        self.assertEqual(first["gradingPeriodName"], "Semestre 2")
        self.assertEqual(first["studentName"], "Alice Adjo")
        self.assertEqual(first["filiereName"], "Informatique")
        self.assertEqual(first["generalAverage"], "0.00")

    def test_filters_combine(self):
        resp = self.client.get(URL, {"periodId": self.period.id, "studentId": self.alice.id})
        self.assertEqual(resp.data["count"], 1)
        self.assertEqual(resp.data["bulletins"][0]["generalAverage"], "9.75")

        resp = self.client.get(URL, {"periodId": "all", "studentId": self.alice.id, "academicYear": "2025-2026"})
        self.assertEqual(resp.data["count"], 2)

        resp = self.client.get(URL, {"academicYear": "2024-2025"})
        self.assertEqual(resp.data["count"], 0)

    def test_invalid_identifier(self):
        resp = self.client.get(URL, {"periodId": "abc"})
        self.assertEqual(resp.status_code, 400)

    def test_other_school_bulletins_are_hidden(self):
        client = self.admin_client(school=self.other_school, username="other")
        resp = client.get(URL)
        self.assertEqual(resp.data["count"], 0)

        bulletin = Bulletin.objects.first()
        self.assertEqual(client.get(f"/api/admin/bulletins/{bulletin.id}/html/").status_code, 404)

    def test_snapshot_html(self):
        bulletin = Bulletin.objects.filter(student=self.alice, grading_period=self.period).get()
        resp = self.client.get(f"/api/admin/bulletins/{bulletin.id}/html/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Type"], "text/html; charset=utf-8")
        self.assertEqual(resp.content.decode(), bulletin.html)
