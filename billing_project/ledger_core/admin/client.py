from django.contrib import admin

from ..models import Client
from .actions import refresh_client_totals


# Register `Client` model
@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = (
        "company_name",
        "phone",
        "email",
        "total_invoiced",
        "total_paid",
        "outstanding_balance",
        "is_active",
        "needs_refresh",
    )
    list_filter = ("is_active", "needs_refresh")
    search_fields = ("company_name", "email", "phone")
    actions = [refresh_client_totals]
    # the rollup is rebuilt from invoices and payments, never typed in
    readonly_fields = (
        "total_invoiced",
        "total_paid",
        "outstanding_balance",
        "needs_refresh",
        "last_refresh_error",
        "created_at",
        "updated_at",
    )

    def has_delete_permission(self, request, obj=None):
        # invoiced clients are deactivated instead
        if obj is not None and obj.invoices.exists():
            return False
        return super().has_delete_permission(request, obj)
