from datetime import date

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from schools.models import EvaluationType, GradingPeriod, School

HIGH_SCHOOL_FORMULA = "(examens + devoirs * 2) / 3"
UNIVERSITY_FORMULA = "(examens + devoirs + projets) / 3"

HIGH_SCHOOL_TYPES = [("Devoir", "HOMEWORK", 2.0), ("Examen", "EXAM", 1.0)]
UNIVERSITY_TYPES = [
    ("Devoir", "HOMEWORK", 1.0),
    ("Examen", "EXAM", 1.0),
    ("Projet", "HOMEWORK", 1.0),
    ("TP", "HOMEWORK", 1.0),
]


def default_periods(is_high_school: bool, year: int):
    nxt = year + 1
    if is_high_school:
        return [
            ("Trimestre 1", date(year, 9, 1), date(year, 12, 15)),
            ("Trimestre 2", date(nxt, 1, 5), date(nxt, 3, 31)),
            ("Trimestre 3", date(nxt, 4, 1), date(nxt, 6, 30)),
        ]
    return [
        ("Semestre 1", date(year, 9, 1), date(nxt, 1, 31)),
        ("Semestre 2", date(nxt, 2, 1), date(nxt, 6, 30)),
    ]


def seed_school(school: School, year: int) -> dict:
    """
    Système, formule, types et périodes par défaut selon le type d'école.
    Les types et périodes ne sont créés que si l'école n'en a aucun.
    """
    high_school = school.is_high_school
    school.grading_system = "TRIMESTER" if high_school else "SEMESTER"
    school.grading_formula = HIGH_SCHOOL_FORMULA if high_school else UNIVERSITY_FORMULA
    school.save(update_fields=["grading_system", "grading_formula"])

    created_types = 0
    if not EvaluationType.objects.filter(school=school).exists():
        types = HIGH_SCHOOL_TYPES if high_school else UNIVERSITY_TYPES
        EvaluationType.objects.bulk_create(
            [EvaluationType(school=school, name=n, category=c, weight=w) for n, c, w in types]
        )
        created_types = len(types)

    created_periods = 0
    if not GradingPeriod.objects.filter(school=school).exists():
        academic_year = school.academic_year or f"{year}-{year + 1}"
        periods = default_periods(high_school, year)
        GradingPeriod.objects.bulk_create(
            [
                GradingPeriod(school=school, name=n, academic_year=academic_year, start_date=s, end_date=e)
                for n, s, e in periods
            ]
        )
        created_periods = len(periods)

    return {"types": created_types, "periods": created_periods}


class Command(BaseCommand):
    help = "Initialise le système de notation par défaut (formule, types d'évaluation, périodes) de chaque école."

    def add_arguments(self, parser):
        parser.add_argument("--school", dest="school_id", type=int, default=None, help="ID d'une école (défaut: toutes).")
        parser.add_argument(
            "--year",
            type=int,
            default=None,
            help="Année de début des périodes créées (défaut: année courante).",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        schools = School.objects.all().order_by("id")
        if options.get("school_id"):
            schools = schools.filter(pk=options["school_id"])
        if not schools.exists():
            self.stdout.write(self.style.WARNING("Aucune école trouvée."))
            return

        year = options.get("year") or timezone.localdate().year
        for school in schools:
            created = seed_school(school, year)
            self.stdout.write(
                f"{school.name}: {school.grading_system}, formule '{school.grading_formula}', "
                f"{created['types']} type(s) et {created['periods']} période(s) créés"
            )
        self.stdout.write(self.style.SUCCESS("Système de notation initialisé."))
