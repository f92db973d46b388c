from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from ..managers import PaymentManager
from .invoice import Invoice

PAYMENT_METHODS = [
    # Keeps payment method standardized across receipts
    ("cash", "Cash"),
    ("bank_transfer", "Bank Transfer"),
    ("pos", "POS"),
    ("cheque", "Cheque"),
]

# Fields the reconciler may write after the row exists
BACKFILL_FIELDS = {"invoice_balance_after"}


# ---------- Payment / Receipt ----------
# One accepted payment against one invoice. Append-only.
class Payment(models.Model):
    # prevent deleting an invoice that has received money
    invoice = models.ForeignKey(
        Invoice, on_delete=models.PROTECT, related_name="payments")
    # e.g. "REC/2026/014"
    receipt_number = models.CharField(max_length=64, unique=True)

    amount_paid = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    payment_method = models.CharField(
        max_length=20, choices=PAYMENT_METHODS, default="cash")
    # bank transfer / POS / cheque reference
    transaction_ref = models.CharField(max_length=200, blank=True, default="")
    date_received = models.DateTimeField(default=timezone.now)
    received_by = models.CharField(max_length=200)
    position = models.CharField(max_length=100, blank=True, default="")  # e.g. "Accounts Officer"
    notes = models.TextField(blank=True, default="")

    # Invoice balance snapshot around this payment
    invoice_balance_before = models.DecimalField(max_digits=18, decimal_places=2)
    invoice_balance_after = models.DecimalField(
        max_digits=18, decimal_places=2, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    objects = PaymentManager()

    class Meta:
        ordering = ["-date_received", "-pk"]
        indexes = [
            models.Index(fields=["invoice", "date_received"], name="ledger_core_invoice_3b9e5f_idx"),
            models.Index(fields=["date_received"], name="ledger_core_date_re_71c2ad_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount_paid__gt=0),
                name="pay_amount_positive",
            ),
        ]

    def __str__(self):
        return f"Receipt {self.receipt_number} ({self.amount_paid})"

    def clean(self):
        if not (self.received_by or "").strip():
            raise ValidationError("Receiver name is required")
        if self.amount_paid is not None and self.amount_paid <= 0:
            raise ValidationError("Payment amount must be greater than 0")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            # Receipts are facts; only the balance snapshot may be backfilled
            update_fields = kwargs.get("update_fields")
            if update_fields is None or set(update_fields) - BACKFILL_FIELDS:
                raise ValidationError(
                    "Payments are append-only; only invoice_balance_after "
                    "can be written after creation."
                )
            return super().save(*args, **kwargs)
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Payments cannot be deleted.")
