from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models.functions import Lower

from ..managers import ClientManager


# ---------- Client ----------
# Company that receives invoices.
# total_invoiced / total_paid / outstanding_balance are a cached rollup,
# always rebuilt from invoices and payments (services.rollup), never patched.
class Client(models.Model):
    company_name = models.CharField(max_length=200)
    address = models.TextField()
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")

    # Cached rollup
    total_invoiced = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    total_paid = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    outstanding_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))

    # Clients with invoices are deactivated instead of deleted
    is_active = models.BooleanField(default=True)

    # Set when a rollup failed; the repair job clears it
    needs_refresh = models.BooleanField(default=False)
    last_refresh_error = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ClientManager()

    class Meta:
        ordering = ["company_name"]
        indexes = [
            models.Index(fields=["is_active", "company_name"], name="ledger_core_is_acti_5c3f0e_idx"),
        ]
        constraints = [
            # "Acme Ltd" and "ACME LTD" are the same client
            models.UniqueConstraint(
                Lower("company_name"),
                name="uq_client_company_name_ci",
                violation_error_message="Client with this company name already exists",
            ),
        ]

    def __str__(self):
        return self.company_name

    def clean(self):
        self.company_name = (self.company_name or "").strip()
        self.address = (self.address or "").strip()
        self.email = (self.email or "").strip().lower()
        if not self.company_name or not self.address:
            raise ValidationError("Company name and address are required")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
