from django.core.management.base import BaseCommand, CommandError
from villas.models import Villa


class Command(BaseCommand):
    help = "Lee el calendario iCal de cada villa y muestra sus bloqueos combinados"

    def add_arguments(self, parser):
        parser.add_argument("--slug", type=str, help="Procesa solo esta villa")

    def handle(self, *args, **options):
        villas = Villa.objects.all()
        if options.get("slug"):
            villas = villas.filter(slug=options["slug"])
            if not villas.exists():
                raise CommandError(f"No existe la villa '{options['slug']}'")

        if not villas.exists():
            self.stdout.write(self.style.WARNING("No hay villas configuradas."))
            return

        for villa in villas:
            self.stdout.write(self.style.NOTICE(f"\nProcesando villa: {villa.name}"))
            if not villa.availability_ical_url:
                self.stdout.write(self.style.WARNING("Sin calendario iCal, solo bloqueos manuales."))

            intervals = villa.get_blocked_intervals()
            if intervals:
                self.stdout.write(self.style.SUCCESS(f"Intervalos bloqueados: {len(intervals)}"))
                for i in intervals:
                    self.stdout.write(f" - [{i.source}] {i.start.isoformat()} → {i.end.isoformat()} {i.label}")
            else:
                self.stdout.write(self.style.WARNING("No se encontraron fechas bloqueadas."))
