from django.contrib import admin, messages
from django.core.exceptions import ValidationError

from ..models import Invoice
from ..services.invoicing import delete_invoice, update_invoice
from .actions import cancel_invoices, recompute_invoices
from .inlines import PaymentInline, ServiceLineInline

# Fields an admin may touch on an open invoice; everything else is derived
EDITABLE_IN_ADMIN = ("invoice_type", "invoice_date", "payment_terms", "notes")


# Register `Invoice` model
@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_number",
        "client",
        "invoice_type",
        "invoice_date",
        "status",
        "total_amount",
        "amount_paid",
        "outstanding_balance",
        "needs_refresh",
    )
    list_filter = ("status", "invoice_type", "needs_refresh", "invoice_date")
    search_fields = ("invoice_number", "client__company_name")
    date_hierarchy = "invoice_date"
    actions = [cancel_invoices, recompute_invoices]
    inlines = [ServiceLineInline, PaymentInline]

    # Fetch the client in the same query
    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("client")

    # Invoices are issued by create_invoice(), which allocates the number
    def has_add_permission(self, request):
        return False

    """ Enforce immutability at admin level """

    def get_readonly_fields(self, request, obj=None):
        all_fields = [f.name for f in self.model._meta.fields]
        # paid or cancelled: every field becomes read-only
        if obj is not None and not obj.can_edit():
            return all_fields
        return [name for name in all_fields if name not in EDITABLE_IN_ADMIN]

    # bulk delete skips the per-invoice delete rules
    def get_actions(self, request):
        actions = super().get_actions(request)
        actions.pop("delete_selected", None)
        return actions

    def has_delete_permission(self, request, obj=None):
        if obj is not None and not obj.can_delete():
            return False  # removes “Delete” option from admin for that invoice
        return super().has_delete_permission(request, obj)

    # Route edits through the service so version and rollups stay right
    def save_model(self, request, obj, form, change):
        patch = {name: form.cleaned_data[name]
                 for name in form.changed_data if name in EDITABLE_IN_ADMIN}
        if not patch:
            return
        try:
            result = update_invoice(obj.pk, patch)
        except ValidationError as exc:
            self.message_user(request, f"{obj}: {exc}", level=messages.ERROR)
            return
        obj.refresh_from_db()
        if not result.refresh.ok:
            self.message_user(
                request,
                f"{obj} saved, but the client totals were flagged for repair.",
                level=messages.WARNING,
            )

    # The service recomputes the client's totals once the row is gone
    def delete_model(self, request, obj):
        try:
            result = delete_invoice(obj.pk)
        except ValidationError as exc:
            self.message_user(request, f"{obj}: {exc}", level=messages.ERROR)
            return
        if not result.ok:
            self.message_user(
                request,
                f"{obj} deleted, but the client totals were flagged for repair.",
                level=messages.WARNING,
            )
