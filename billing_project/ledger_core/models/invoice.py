from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from ..exceptions import InvalidStateError
from ..managers import InvoiceManager
from ..utils.words import amount_in_words
from .client import Client

DRAFT = "draft"
PENDING = "pending"
PARTIAL = "partial"
PAID = "paid"
CANCELLED = "cancelled"

INV_STATUS_CHOICES = [
    (DRAFT, "Draft"),
    (PENDING, "Pending"),
    (PARTIAL, "Partially paid"),
    (PAID, "Paid"),
    (CANCELLED, "Cancelled"),
]
""" Workflow:
    draft = held back by the user, no automatic status changes.
    pending = issued, nothing paid yet.
    partial = some money received.
    paid = fully settled.
    cancelled = voided by the user. """

# Statuses only a user can set; the automatic rule never overwrites them
MANUAL_STATUSES = (DRAFT, CANCELLED)

PROFORMA = "proforma"
ADVANCE_BILL = "advance_bill"

INV_TYPE_CHOICES = [
    (PROFORMA, "Proforma invoice"),
    (ADVANCE_BILL, "Advance bill"),
]


def default_payment_terms():
    return settings.BILLING_DEFAULT_PAYMENT_TERMS


def default_vat_rate():
    return settings.BILLING_DEFAULT_VAT_RATE


class Invoice(models.Model):  # Proforma invoice or advance bill

    # Human-readable number, e.g. "EFM/ADV/2026/007"; never changes once issued
    invoice_number = models.CharField(max_length=64, unique=True)

    # prevent deleting a client who has been invoiced
    client = models.ForeignKey(
        Client, on_delete=models.PROTECT, related_name="invoices")

    invoice_type = models.CharField(
        max_length=20, choices=INV_TYPE_CHOICES, default=PROFORMA)
    invoice_date = models.DateField(default=timezone.localdate)

    # Derived from the service lines (services.calculator)
    total_slots = models.PositiveIntegerField(default=0)
    subtotal = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    vat_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=default_vat_rate,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
    )
    vat_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    amount_in_words = models.CharField(max_length=500, blank=True, default="")

    # Follows total_amount until the user sets it explicitly
    advance_required = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    advance_overridden = models.BooleanField(default=False)

    # Derived from payments (services.payment)
    amount_paid = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    outstanding_balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(
        max_length=10, choices=INV_STATUS_CHOICES, default=PENDING)

    payment_terms = models.TextField(blank=True, default=default_payment_terms)
    notes = models.TextField(blank=True, default="")

    # Bumped on every save; used to reject stale edits
    version = models.PositiveIntegerField(default=1)

    # Set when refreshing amount_paid failed; the repair job clears it
    needs_refresh = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = InvoiceManager()

    class Meta:
        ordering = ["-invoice_date", "-pk"]
        indexes = [
            models.Index(fields=["client", "invoice_date"], name="ledger_core_client__8a1d2b_idx"),
            models.Index(fields=["status"], name="ledger_core_status_4e7c91_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount_paid__gte=0),
                name="inv_amount_paid_non_negative",
            ),
            # over-payment is rejected, so the balance can never go below zero
            models.CheckConstraint(
                condition=models.Q(outstanding_balance__gte=0),
                name="inv_outstanding_non_negative",
            ),
        ]

    def __str__(self):
        return f"Inv {self.invoice_number or self.pk}"

    # ---------- lifecycle ----------

    def can_edit(self):
        from ..services.lifecycle import can_edit

        return can_edit(self.status)

    def can_delete(self):
        from ..services.lifecycle import can_delete

        # any recorded money blocks deletion whatever the status label says
        has_payments = bool(self.pk) and self.payments.exists()
        return can_delete(self.status, self.amount_paid, has_payments=has_payments)

    def apply_status(self):
        """Re-run the automatic status rule (draft/cancelled are left alone)."""
        from ..services.lifecycle import derive_status

        self.status = derive_status(
            self.amount_paid, self.total_amount, current=self.status)
        return self.status

    # ---------- derived totals ----------

    def apply_totals(self, totals):
        """Copy calculator output onto the invoice and refresh dependent fields."""
        self.total_slots = totals.total_slots
        self.subtotal = totals.subtotal
        self.vat_rate = totals.vat_rate
        self.vat_amount = totals.vat_amount
        self.total_amount = totals.total_amount
        self.amount_in_words = amount_in_words(totals.total_amount)
        if not self.advance_overridden or not self.advance_required:
            self.advance_required = totals.total_amount
            self.advance_overridden = False
        self.refresh_outstanding()

    def refresh_outstanding(self):
        self.outstanding_balance = self.total_amount - self.amount_paid
        return self.outstanding_balance

    def clean(self):
        """Issued numbers are immutable, settled/voided invoices are frozen"""
        if self.outstanding_balance < 0:
            raise ValidationError("Outstanding amount cannot be negative")
        if not self.pk:
            return
        try:
            orig = Invoice.objects.get(pk=self.pk)
        except Invoice.DoesNotExist:
            return
        if orig.invoice_number != self.invoice_number:
            raise ValidationError("Invoice number cannot be changed once issued.")
        if orig.status in (PAID, CANCELLED):
            changed_fields = [
                field
                for field in ("client_id", "subtotal", "vat_rate", "total_amount")
                if getattr(orig, field) != getattr(self, field)
            ]
            if changed_fields:
                raise ValidationError(
                    f"Cannot modify {changed_fields} on a {orig.status} invoice."
                )

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            self.version += 1
            update_fields = kwargs.get("update_fields")
            if update_fields is not None:
                kwargs["update_fields"] = {*update_fields, "version", "updated_at"}
        self.full_clean()  # will trigger clean()
        return super().save(*args, **kwargs)

    """ Deleting is only allowed for drafts and untouched pending invoices """

    def delete(self, *args, **kwargs):
        if not self.can_delete():
            raise InvalidStateError(
                "Cannot delete invoice with payments or non-draft status")
        return super().delete(*args, **kwargs)


class ServiceLine(models.Model):  # One billable broadcast service on an invoice

    invoice = models.ForeignKey(
        Invoice, on_delete=models.CASCADE, related_name="lines")
    # keeps the order the lines were entered in
    position = models.PositiveIntegerField(default=0)

    description = models.CharField(max_length=255)
    duration = models.CharField(max_length=50, blank=True, default="")  # e.g. "30s"
    # the price list entry the line was priced from, if any
    rate = models.ForeignKey(
        "Rate", on_delete=models.SET_NULL, null=True, blank=True, related_name="lines")

    # Core pricing: daily_slots × campaign_days × rate_per_slot = line_total
    daily_slots = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    campaign_days = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    rate_per_slot = models.DecimalField(
        max_digits=18, decimal_places=2, validators=[MinValueValidator(0)])

    total_slots = models.PositiveIntegerField(default=0)
    line_total = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["position", "pk"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(daily_slots__gte=1) &
                models.Q(campaign_days__gte=1) &
                models.Q(rate_per_slot__gte=0),
                name="svl_positive_quantities",
            ),
        ]

    def __str__(self):
        return f"{self.description} ({self.daily_slots} x {self.campaign_days})"

    """ Ensure no inconsistent line can ever be persisted """

    def save(self, *args, **kwargs):
        from ..services.calculator import compute_line

        # compute totals always (raises ValidationError on bad quantities)
        totals = compute_line(
            self.daily_slots, self.campaign_days, self.rate_per_slot)
        self.total_slots = totals.total_slots
        self.line_total = totals.line_total
        self.full_clean()
        return super().save(*args, **kwargs)
