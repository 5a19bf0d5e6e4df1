from django.core.management.base import BaseCommand

from bulletins.tasks import purge_expired_exports


class Command(BaseCommand):
    help = "Purge les PDFs de bulletins dont le completed_at/first_download_at dépasse un âge (par défaut 1h)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--hours",
            type=int,
            default=1,
            help="Supprimer les PDFs complétés/téléchargés il y a plus de N heures (défaut: 1h).",
        )

    def handle(self, *args, **options):
        hours = options["hours"]
        deleted = purge_expired_exports(hours)
        self.stdout.write(self.style.SUCCESS(f"Purge terminée (> {hours}h), PDFs supprimés: {deleted}"))
