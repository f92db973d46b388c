from django.contrib import admin

from ..models import Rate
from .actions import deactivate_rates


# Register `Rate` model
@admin.register(Rate)
class RateAdmin(admin.ModelAdmin):
    list_display = ("category", "duration", "time_slot", "platform", "price", "is_active")
    list_filter = ("is_active", "category", "platform")
    search_fields = ("category", "time_slot", "description")
    ordering = ("category", "price")
    actions = [deactivate_rates]
    readonly_fields = ("created_at", "updated_at")

    # retired through the action so priced lines keep their link
    def has_delete_permission(self, request, obj=None):
        return False
