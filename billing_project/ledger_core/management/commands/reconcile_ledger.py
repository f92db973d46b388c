from django.core.management.base import BaseCommand

from ledger_core.services.reconcile import refresh_everything, repair_flagged


class Command(BaseCommand):
    help = (
        "Rebuild derived ledger totals. By default only aggregates flagged by a "
        "failed refresh are repaired; --all recomputes every invoice and client."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--all",
            action="store_true",
            dest="everything",
            help="Recompute every invoice and client, not just flagged ones.",
        )

    def handle(self, *args, **options):
        result = refresh_everything() if options["everything"] else repair_flagged()

        for aggregate, error in result.failed:
            self.stderr.write(
                self.style.ERROR(f"{aggregate.kind} {aggregate.pk}: {error}"))

        style = self.style.SUCCESS if result.ok else self.style.WARNING
        self.stdout.write(style(
            f"Refreshed {len(result.refreshed)} aggregate(s), "
            f"{len(result.failed)} still flagged."
        ))
