from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from ledger_core.models import Client, Rate
from ledger_core.services import (create_client, create_invoice, create_rate,
                                  get_station, record_payment)


class Command(BaseCommand):
    help = "Seeds the database with a demo client, invoice and part payment."

    # Define command-line argument
    def add_arguments(self, parser):
        parser.add_argument(
            "--client",  # Define flag
            type=str,
            default="Demo Ventures Ltd",
            help="Company name of the demo client (default: Demo Ventures Ltd)",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        name = options["client"]  # Read argument from add_arguments()
        station = get_station()
        self.stdout.write(self.style.NOTICE(
            f"Seeding demo data for {station.name}..."))

        client = Client.objects.filter(company_name__iexact=name).first()
        if client is None:
            client = create_client(
                company_name=name,
                address="12 Unity Road, Ilorin",
                phone="08030000000",
                email="accounts@demo.example",
            )

        jingle_rate = Rate.objects.by_category("Jingles").filter(duration="30s").first()
        if jingle_rate is None:
            jingle_rate = create_rate(
                "Jingles", 1000, duration="30s", time_slot="Prime time", platform="FM")

        invoice = create_invoice(
            client.pk,
            invoice_type="advance_bill",
            lines=[
                {
                    "description": "Prime time jingle",
                    "rate": jingle_rate.pk,
                    "daily_slots": 2,
                    "campaign_days": 10,
                },
                {
                    "description": "Sponsored news mention",
                    "duration": "60s",
                    "daily_slots": 1,
                    "campaign_days": 5,
                    "rate_per_slot": 2500,
                },
            ],
        ).invoice
        half = (invoice.total_amount / 2).quantize(Decimal("0.01"))
        payment = record_payment(
            invoice.pk, half, "Bank Transfer", "Accounts Officer",
            transaction_ref="DEMO-TRF-001",
        ).payment

        self.stdout.write(self.style.SUCCESS(
            f"Created {invoice.invoice_number} ({invoice.total_amount}) "
            f"and receipt {payment.receipt_number}."
        ))
