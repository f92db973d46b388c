from django.contrib import admin

from ..models import Payment
from .ReadOnly import ReadOnlyAdmin


# Register `Payment` model
@admin.register(Payment)
class PaymentAdmin(ReadOnlyAdmin):
    list_display = (
        "receipt_number",
        "invoice",
        "amount_paid",
        "payment_method",
        "date_received",
        "received_by",
        "invoice_balance_before",
        "invoice_balance_after",
    )
    list_filter = ("payment_method", "date_received")
    search_fields = ("receipt_number", "invoice__invoice_number",
                     "invoice__client__company_name", "transaction_ref")

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("invoice", "invoice__client")
