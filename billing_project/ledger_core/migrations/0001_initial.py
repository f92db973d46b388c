from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.db.models.functions.text
import django.utils.timezone
from django.db import migrations, models

import ledger_core.models.invoice


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Station",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("address", models.TextField()),
                ("phone", models.CharField(blank=True, default="", max_length=50)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("bank_name", models.CharField(blank=True, default="", max_length=200)),
                ("account_name", models.CharField(blank=True, default="", max_length=200)),
                ("account_number", models.CharField(blank=True, default="", max_length=50)),
                ("logo_url", models.URLField(blank=True, default="")),
                ("invoice_prefix", models.CharField(default="EFM/ADV/", max_length=30)),
                ("invoice_counter", models.PositiveIntegerField(default=0)),
                ("receipt_prefix", models.CharField(default="REC/", max_length=30)),
                ("receipt_counter", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "station",
                "verbose_name_plural": "station",
            },
        ),
        migrations.CreateModel(
            name="Client",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("company_name", models.CharField(max_length=200)),
                ("address", models.TextField()),
                ("phone", models.CharField(blank=True, default="", max_length=50)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("total_invoiced", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("total_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("outstanding_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("is_active", models.BooleanField(default=True)),
                ("needs_refresh", models.BooleanField(default=False)),
                ("last_refresh_error", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["company_name"],
                "indexes": [models.Index(fields=["is_active", "company_name"], name="ledger_core_is_acti_5c3f0e_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        django.db.models.functions.text.Lower("company_name"),
                        name="uq_client_company_name_ci",
                        violation_error_message="Client with this company name already exists",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("invoice_number", models.CharField(max_length=64, unique=True)),
                ("invoice_type", models.CharField(choices=[("proforma", "Proforma invoice"), ("advance_bill", "Advance bill")], default="proforma", max_length=20)),
                ("invoice_date", models.DateField(default=django.utils.timezone.localdate)),
                ("total_slots", models.PositiveIntegerField(default=0)),
                ("subtotal", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("vat_rate", models.DecimalField(
                    decimal_places=2,
                    default=ledger_core.models.invoice.default_vat_rate,
                    max_digits=5,
                    validators=[
                        django.core.validators.MinValueValidator(0),
                        django.core.validators.MaxValueValidator(100),
                    ],
                )),
                ("vat_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("total_amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("amount_in_words", models.CharField(blank=True, default="", max_length=500)),
                ("advance_required", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("advance_overridden", models.BooleanField(default=False)),
                ("amount_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("outstanding_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("status", models.CharField(choices=[("draft", "Draft"), ("pending", "Pending"), ("partial", "Partially paid"), ("paid", "Paid"), ("cancelled", "Cancelled")], default="pending", max_length=10)),
                ("payment_terms", models.TextField(blank=True, default=ledger_core.models.invoice.default_payment_terms)),
                ("notes", models.TextField(blank=True, default="")),
                ("version", models.PositiveIntegerField(default=1)),
                ("needs_refresh", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("client", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="invoices", to="ledger_core.client")),
            ],
            options={
                "ordering": ["-invoice_date", "-pk"],
                "indexes": [
                    models.Index(fields=["client", "invoice_date"], name="ledger_core_client__8a1d2b_idx"),
                    models.Index(fields=["status"], name="ledger_core_status_4e7c91_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount_paid__gte", 0)), name="inv_amount_paid_non_negative"),
                    models.CheckConstraint(condition=models.Q(("outstanding_balance__gte", 0)), name="inv_outstanding_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ServiceLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("position", models.PositiveIntegerField(default=0)),
                ("description", models.CharField(max_length=255)),
                ("duration", models.CharField(blank=True, default="", max_length=50)),
                ("daily_slots", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("campaign_days", models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("rate_per_slot", models.DecimalField(decimal_places=2, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("total_slots", models.PositiveIntegerField(default=0)),
                ("line_total", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=18)),
                ("invoice", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="lines", to="ledger_core.invoice")),
            ],
            options={
                "ordering": ["position", "pk"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("daily_slots__gte", 1), ("campaign_days__gte", 1), ("rate_per_slot__gte", 0)),
                        name="svl_positive_quantities",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("receipt_number", models.CharField(max_length=64, unique=True)),
                ("amount_paid", models.DecimalField(decimal_places=2, max_digits=18, validators=[django.core.validators.MinValueValidator(0)])),
                ("payment_method", models.CharField(choices=[("cash", "Cash"), ("bank_transfer", "Bank Transfer"), ("pos", "POS"), ("cheque", "Cheque")], default="cash", max_length=20)),
                ("transaction_ref", models.CharField(blank=True, default="", max_length=200)),
                ("date_received", models.DateTimeField(default=django.utils.timezone.now)),
                ("received_by", models.CharField(max_length=200)),
                ("position", models.CharField(blank=True, default="", max_length=100)),
                ("notes", models.TextField(blank=True, default="")),
                ("invoice_balance_before", models.DecimalField(decimal_places=2, max_digits=18)),
                ("invoice_balance_after", models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("invoice", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="ledger_core.invoice")),
            ],
            options={
                "ordering": ["-date_received", "-pk"],
                "indexes": [
                    models.Index(fields=["invoice", "date_received"], name="ledger_core_invoice_3b9e5f_idx"),
                    models.Index(fields=["date_received"], name="ledger_core_date_re_71c2ad_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount_paid__gt", 0)), name="pay_amount_positive"),
                ],
            },
        ),
    ]
