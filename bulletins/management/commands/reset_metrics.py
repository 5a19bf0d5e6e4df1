from django.core.management.base import BaseCommand

from bulletins.services.metrics import reset_metrics


class Command(BaseCommand):
    help = "Réinitialise les métriques Redis des exports PDF de bulletins."

    def handle(self, *args, **options):
        reset_metrics()
        self.stdout.write(self.style.SUCCESS("Métriques réinitialisées."))
