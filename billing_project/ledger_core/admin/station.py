from django.contrib import admin

from ..models import Station


# Register `Station` model
@admin.register(Station)
class StationAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "email", "invoice_counter", "receipt_counter")
    fieldsets = (
        (None, {"fields": ("name", "address", "phone", "email", "logo_url")}),
        ("Bank details", {"fields": ("bank_name", "account_name", "account_number")}),
        ("Numbering", {"fields": (
            "invoice_prefix", "invoice_counter", "receipt_prefix", "receipt_counter")}),
    )
    # counters only move through the sequencer
    readonly_fields = ("invoice_counter", "receipt_counter")

    # single row, created on first use by Station.load()
    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
