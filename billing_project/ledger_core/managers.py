from decimal import Decimal

from django.db import models
from django.db.models.functions import Coalesce


# -----------------------------------------
# Query helpers shared by the ledger models
# -----------------------------------------
class ClientQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def search(self, term):
        # case-insensitive match on company name, like the client list filter
        if not term:
            return self
        return self.filter(company_name__icontains=term.strip())

    def needs_refresh(self):
        return self.filter(needs_refresh=True)


class ClientManager(models.Manager):
    def get_queryset(self):
        return ClientQuerySet(self.model, using=self._db)

    def active(self):
        return self.get_queryset().active()

    def search(self, term):
        return self.get_queryset().active().search(term)

    def needs_refresh(self):
        return self.get_queryset().needs_refresh()


class InvoiceQuerySet(models.QuerySet):
    def for_client(self, client):
        return self.filter(client=client)

    def with_status(self, *statuses):
        return self.filter(status__in=statuses)

    # Invoices that can still receive money
    def open(self):
        return self.filter(status__in=("pending", "partial"))

    def needs_refresh(self):
        return self.filter(needs_refresh=True)


class InvoiceManager(models.Manager):
    def get_queryset(self):
        return InvoiceQuerySet(self.model, using=self._db)

    def for_client(self, client):
        return self.get_queryset().for_client(client)

    def open(self):
        return self.get_queryset().open()

    def needs_refresh(self):
        return self.get_queryset().needs_refresh()


class PaymentQuerySet(models.QuerySet):
    def for_invoice(self, invoice):
        return self.filter(invoice=invoice)

    def for_client(self, client):
        return self.filter(invoice__client=client)

    # Sum of amount_paid, zero when nothing matched
    def total(self):
        return self.aggregate(
            total=Coalesce(
                models.Sum("amount_paid"),
                models.Value(Decimal("0.00")),
                output_field=models.DecimalField(max_digits=18, decimal_places=2),
            )
        )["total"]


# Payment rows are append-only, the manager only adds read helpers
PaymentManager = models.Manager.from_queryset(PaymentQuerySet)


class RateQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def in_category(self, category):
        # partial, case-insensitive match for the rate list filter
        if not category:
            return self
        return self.filter(category__icontains=category.strip())

    def by_category(self, category):
        return self.filter(category=category).order_by("price")


class RateManager(models.Manager):
    def get_queryset(self):
        return RateQuerySet(self.model, using=self._db)

    def active(self):
        return self.get_queryset().active()

    def by_category(self, category):
        return self.get_queryset().active().by_category(category)
