import logging
from dataclasses import dataclass
from decimal import Decimal

from django.db import models
from django.db.models.functions import Coalesce

from ..models import Client, Invoice, Payment

logger = logging.getLogger(__name__)

_MONEY = models.DecimalField(max_digits=18, decimal_places=2)


@dataclass(frozen=True)
class ClientTotals:
    total_invoiced: Decimal
    total_paid: Decimal
    outstanding_balance: Decimal


def compute_client_totals(client):
    """Sum the client's invoices and payments straight from the source rows."""
    total_invoiced = Invoice.objects.for_client(client).aggregate(
        total=Coalesce(models.Sum("total_amount"), models.Value(Decimal("0.00")),
                       output_field=_MONEY)
    )["total"]
    total_paid = Payment.objects.for_client(client).total()
    return ClientTotals(
        total_invoiced=total_invoiced,
        total_paid=total_paid,
        outstanding_balance=total_invoiced - total_paid,
    )


def refresh_client(client):
    """
    Rebuild the cached rollup on a client. Always a full recompute, never a
    delta, so running it repairs whatever drift came before. Idempotent.
    """
    client_id = getattr(client, "pk", client)
    client = Client.objects.get(pk=client_id)
    totals = compute_client_totals(client)

    # queryset update: the rollup is not a user edit, skip full_clean()
    Client.objects.filter(pk=client.pk).update(
        total_invoiced=totals.total_invoiced,
        total_paid=totals.total_paid,
        outstanding_balance=totals.outstanding_balance,
        needs_refresh=False,
        last_refresh_error="",
    )
    logger.debug("Client %s rollup: %s", client.pk, totals)
    return totals
