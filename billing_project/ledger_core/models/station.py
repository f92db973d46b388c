from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


# ---------- Station ----------
# The billing entity issuing every invoice and receipt.
# Exactly one row exists; it also owns the document counters.
class Station(models.Model):
    SINGLETON_PK = 1
    COUNTER_FIELDS = ("invoice_counter", "receipt_counter")

    name = models.CharField(max_length=200)
    address = models.TextField()
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")

    # Printed on invoices so clients know where to pay
    bank_name = models.CharField(max_length=200, blank=True, default="")
    account_name = models.CharField(max_length=200, blank=True, default="")
    account_number = models.CharField(max_length=50, blank=True, default="")
    logo_url = models.URLField(blank=True, default="")

    # Numbering configuration
    # counters are only ever changed by the sequencer (F() increments)
    invoice_prefix = models.CharField(max_length=30, default="EFM/ADV/")
    invoice_counter = models.PositiveIntegerField(default=0)
    receipt_prefix = models.CharField(max_length=30, default="REC/")
    receipt_counter = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "station"
        verbose_name_plural = "station"

    def __str__(self):
        return self.name

    @classmethod
    def load(cls):
        """
        Return the singleton, creating it with the configured defaults on first access.
        get_or_create on a fixed pk keeps concurrent first calls from creating two rows.
        """
        station, _ = cls.objects.get_or_create(
            pk=cls.SINGLETON_PK,
            defaults=dict(settings.BILLING_STATION_DEFAULTS),
        )
        return station

    def save(self, *args, **kwargs):
        # Always the same row, a second "instance" would just overwrite it
        self.pk = self.SINGLETON_PK
        if not self._state.adding and kwargs.get("update_fields") is None:
            # counters only move through the sequencer; a stale copy must not rewind them
            kwargs["update_fields"] = [
                f.name for f in self._meta.concrete_fields
                if not f.primary_key and f.name not in self.COUNTER_FIELDS
            ]
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("The station configuration cannot be deleted.")
