from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from ..managers import RateManager


# ---------- Rate ----------
# Price list entry an invoice line can be priced from,
# e.g. "Jingles - 30s - Prime time - FM" at 1000 per slot.
class Rate(models.Model):
    category = models.CharField(max_length=100)
    duration = models.CharField(max_length=50, blank=True, default="")
    time_slot = models.CharField(max_length=100, blank=True, default="")
    platform = models.CharField(max_length=100, blank=True, default="")
    price = models.DecimalField(
        max_digits=18, decimal_places=2, validators=[MinValueValidator(Decimal("0"))])
    description = models.TextField(blank=True, default="")

    # retired rates stay for the lines that were priced from them
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RateManager()

    class Meta:
        ordering = ["category", "price"]
        indexes = [
            models.Index(fields=["category", "duration", "time_slot"], name="ledger_core_categor_9d4a17_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(price__gte=0), name="rate_price_non_negative"),
        ]

    def __str__(self):
        return self.display_name()

    def display_name(self):
        parts = (self.category, self.duration, self.time_slot, self.platform)
        return " - ".join(part for part in parts if part)

    def clean(self):
        for name in ("category", "duration", "time_slot", "platform"):
            setattr(self, name, (getattr(self, name) or "").strip())
        if not self.category:
            raise ValidationError({"category": "Rate category is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
