"""Management command to check balances against the transaction ledger."""

from django.core.management.base import BaseCommand

from pointsman.services import ledger


class Command(BaseCommand):
    help = "Report customers whose total_points differs from the sum of their transactions"

    def add_arguments(self, parser):
        parser.add_argument(
            "--fix",
            action="store_true",
            help="Reset drifted balances to the ledger sum",
        )

    def handle(self, *args, **options):
        discrepancies = ledger.audit()
        if not discrepancies:
            self.stdout.write(self.style.SUCCESS("Ledger consistent."))
            return

        for item in discrepancies:
            self.stdout.write(
                f"{item.phone_number} ({item.customer_id}): "
                f"balance {item.total_points}, ledger {item.ledger_points} "
                f"(drift {item.drift:+d})"
            )
            if options["fix"]:
                ledger.reconcile(item.customer_id)

        if options["fix"]:
            self.stdout.write(
                self.style.SUCCESS(f"Reconciled {len(discrepancies)} customer(s).")
            )
        else:
            self.stdout.write(
                self.style.WARNING(f"Found {len(discrepancies)} inconsistent customer(s).")
            )
