from django.contrib import admin

from ..models import Payment, ServiceLine

# ---------- Helpful inline admin classes ----------


class ServiceLineInline(admin.TabularInline):
    """Show ServiceLine rows on the Invoice page.
    Lines change only through update_invoice(), which re-prices the invoice."""

    model = ServiceLine
    extra = 0  # don’t show “empty” rows by default (prevents clutter)
    can_delete = False
    fields = (
        "position",
        "description",
        "duration",
        "rate",
        "daily_slots",
        "campaign_days",
        "rate_per_slot",
        "total_slots",
        "line_total",
    )
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class PaymentInline(admin.TabularInline):
    """Receipts issued against the invoice (read-only)."""

    model = Payment
    extra = 0
    can_delete = False
    fields = (
        "receipt_number",
        "amount_paid",
        "payment_method",
        "date_received",
        "received_by",
        "invoice_balance_after",
    )
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False
