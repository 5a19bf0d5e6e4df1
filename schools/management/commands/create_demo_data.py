import random
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import BaseCommand
from django.db import transaction

from schools.models import Evaluation, EvaluationType, Filiere, GradingPeriod, Module, School, Student, UserProfile


MODULES = [
    ("Algorithmique", "ALG", 60),
    ("Bases de données", "BDD", 45),
    ("Réseaux", "RES", 45),
    ("Anglais", "ANG", 30),
]


class Command(BaseCommand):
    help = "Crée des données de démonstration (école, filière, modules, étudiants, évaluations, admin) pour tester la génération."

    def add_arguments(self, parser):
        parser.add_argument("--students", type=int, default=10, help="Nombre d'étudiants à créer (défaut: 10)")
        parser.add_argument("--admin-password", type=str, default="demo1234", help="Mot de passe de l'admin démo")
        parser.add_argument("--seed", type=int, default=None, help="Graine aléatoire pour des notes reproductibles")

    @transaction.atomic
    def handle(self, *args, **options):
        rng = random.Random(options["seed"])
        target_students = options["students"]

        school, _ = School.objects.get_or_create(
            name="Université Démo",
            defaults={
                "school_type": "UNIVERSITY",
                "address": "Boulevard de la Démo",
                "phone": "+225 01 02 03 04",
                "email": "contact@demo.edu",
                "academic_year": "2025-2026",
                "primary_color": "#4F46E5",
            },
        )
        call_command("seed_grading_system", school_id=school.id, year=2025, stdout=self.stdout)

        filiere, _ = Filiere.objects.get_or_create(school=school, code="INFO", defaults={"name": "Informatique"})
        modules = []
        for index, (name, code, volume) in enumerate(MODULES):
            # le dernier module est une UE commune (sans filière)
            module, _ = Module.objects.get_or_create(
                school=school,
                code=code,
                defaults={
                    "name": name,
                    "volume_horaire": volume,
                    "filiere": None if index == len(MODULES) - 1 else filiere,
                },
            )
            modules.append(module)

        User = get_user_model()
        admin_user, created = User.objects.get_or_create(username="admin.demo", defaults={"email": "admin@demo.edu"})
        if created:
            admin_user.set_password(options["admin_password"])
            admin_user.save()
        UserProfile.objects.update_or_create(user=admin_user, defaults={"school": school, "role": "SCHOOL_ADMIN"})

        type_names = list(EvaluationType.objects.filter(school=school, is_active=True).values_list("name", flat=True))
        period = GradingPeriod.objects.filter(school=school).order_by("start_date").first()

        first_names = ["Awa", "Ibrahim", "Mariam", "Youssef", "Fatou", "Issa", "Aminata", "Paul", "Claire", "Jean"]
        last_names = ["Traoré", "Koné", "Kouassi", "Bamba", "Yao", "Diallo", "Coulibaly", "Touré", "N'Guessan", "Ouattara"]

        created_students = 0
        created_evaluations = 0
        for i in range(target_students):
            student, was_created = Student.objects.get_or_create(
                school=school,
                student_number=f"DEMO{i + 1:04d}",
                defaults={
                    "first_name": first_names[i % len(first_names)],
                    "last_name": last_names[(i // len(first_names)) % len(last_names)],
                    "filiere": filiere,
                    "niveau": "L2",
                },
            )
            if not was_created:
                continue
            created_students += 1
            for module in modules:
                for offset, type_name in enumerate(type_names):
                    Evaluation.objects.create(
                        student=student,
                        module=module,
                        type=type_name,
                        note=Decimal(f"{rng.uniform(6, 19):.2f}"),
                        date=period.start_date + timedelta(days=14 * (offset + 1)),
                    )
                    created_evaluations += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"École: {school.name} (id={school.id}), période: {period.name} (id={period.id}), "
                f"étudiants créés: {created_students}/{target_students}, évaluations: {created_evaluations}"
            )
        )
