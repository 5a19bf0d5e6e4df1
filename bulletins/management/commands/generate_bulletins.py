from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from bulletins.models import BulletinExport
from bulletins.services.builder import generate_bulletins, select_students
from bulletins.services.metrics import mark_pending
from bulletins.tasks import generate_bulletin_pdf
from schools.models import GradingPeriod, School


class Command(BaseCommand):
    help = "Génère en masse les bulletins d'une période (snapshots), avec export PDF optionnel via Celery."

    def add_arguments(self, parser):
        parser.add_argument("--school", dest="school_id", type=int, required=True, help="ID de l'école.")
        parser.add_argument("--period", dest="period_id", type=int, required=True, help="ID de la période de notation.")
        parser.add_argument("--filiere", dest="filiere_id", type=int, default=None, help="Restreindre à une filière.")
        parser.add_argument(
            "--student-ids",
            nargs="+",
            type=int,
            dest="student_ids",
            help="Liste d'IDs d'étudiants à traiter (sinon tous les inscrits).",
        )
        parser.add_argument(
            "--batch-size",
            dest="batch_size",
            type=int,
            default=200,
            help="Taille des lots de génération (défaut: 200).",
        )
        parser.add_argument("--pdf", action="store_true", help="Enqueue aussi un export PDF par bulletin.")
        parser.add_argument(
            "--queue",
            dest="queue",
            default="bulletins",
            help="Nom de la file Celery à utiliser (défaut: bulletins).",
        )

    def handle(self, *args, **options):
        school = School.objects.filter(pk=options["school_id"]).first()
        if not school:
            raise CommandError(f"École introuvable: {options['school_id']}")
        period = GradingPeriod.objects.filter(pk=options["period_id"], school=school).first()
        if not period:
            raise CommandError(f"Période introuvable pour cette école: {options['period_id']}")
        batch_size = options["batch_size"]
        if batch_size <= 0:
            raise CommandError("--batch-size doit être positif.")

        students_qs = select_students(school, period, filiere_id=options.get("filiere_id"))
        if options.get("student_ids"):
            students_qs = students_qs.filter(id__in=options["student_ids"])

        total = students_qs.count()
        if total == 0:
            self.stdout.write(self.style.WARNING("Aucun étudiant trouvé."))
            return

        self.stdout.write(f"Génération de {total} bulletins ({period.name}) par lots de {batch_size}")

        generated = 0
        enqueued = 0
        for offset in range(0, total, batch_size):
            batch = list(students_qs[offset : offset + batch_size])
            results = generate_bulletins(school, period, batch)
            generated += len(results)
            if options["pdf"]:
                to_enqueue = []
                with transaction.atomic():
                    for item in results:
                        export = BulletinExport.objects.create(bulletin=item.bulletin, status="PENDING")
                        mark_pending(export.id)
                        to_enqueue.append(export.id)
                for export_id in to_enqueue:
                    generate_bulletin_pdf.apply_async(args=[export_id], queue=options["queue"])
                    enqueued += 1
            self.stdout.write(f"Lot {offset // batch_size + 1}: {len(results)} bulletins générés, {enqueued} exports en file.")

        self.stdout.write(self.style.SUCCESS(f"Terminé. Bulletins générés: {generated}. Exports PDF en file: {enqueued}."))
