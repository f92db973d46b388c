from decimal import Decimal

from django.db import models
from django.db.models.functions import Coalesce

from ..models import Client, Invoice, Payment

_MONEY = models.DecimalField(max_digits=18, decimal_places=2)
_ZERO = models.Value(Decimal("0.00"))


def dashboard_summary(recent=5):
    """Totals across all invoices plus the latest activity."""
    totals = Invoice.objects.aggregate(
        total_invoiced=Coalesce(models.Sum("total_amount"), _ZERO, output_field=_MONEY),
        total_paid=Coalesce(models.Sum("amount_paid"), _ZERO, output_field=_MONEY),
    )

    recent_invoices = list(
        Invoice.objects.select_related("client")
        .order_by("-invoice_date", "-pk")
        .values("pk", "invoice_number", "invoice_date", "total_amount",
                "status", "client__company_name")[:recent]
    )
    recent_payments = list(
        Payment.objects.select_related("invoice__client")
        .order_by("-date_received", "-pk")
        .values("pk", "receipt_number", "amount_paid", "payment_method",
                "date_received", "invoice__invoice_number",
                "invoice__client__company_name")[:recent]
    )
    status_breakdown = list(
        Invoice.objects.order_by()
        .values("status")
        .annotate(
            count=models.Count("pk"),
            total=Coalesce(models.Sum("total_amount"), _ZERO, output_field=_MONEY),
        )
        .order_by("status")
    )

    return {
        "total_invoiced": totals["total_invoiced"],
        "total_paid": totals["total_paid"],
        "outstanding_balance": totals["total_invoiced"] - totals["total_paid"],
        "total_clients": Client.objects.active().count(),
        "recent_invoices": recent_invoices,
        "recent_payments": recent_payments,
        "status_breakdown": status_breakdown,
    }
