from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from ..services.invoicing import cancel_invoice
from ..services.rates import deactivate_rate
from ..services.reconcile import AffectedAggregate, refresh_affected

# ---------- Admin actions ----------
# Each action goes through the service layer so admins cannot bypass
# the lifecycle rules or the numbering.


def _report_refresh(modeladmin, request, result, noun):
    for aggregate, error in result.failed:
        modeladmin.message_user(
            request,
            _("%(kind)s %(pk)s could not be refreshed and is flagged for repair: %(err)s")
            % {"kind": aggregate.kind, "pk": aggregate.pk, "err": error},
            level=messages.ERROR,
        )
    modeladmin.message_user(
        request,
        _("Refreshed %(count)d %(noun)s.") % {"count": len(result.refreshed), "noun": noun},
        level=messages.SUCCESS if result.ok else messages.WARNING,
    )


@admin.action(description="Cancel selected invoices")
def cancel_invoices(modeladmin, request, queryset):
    success = 0
    # one transaction per invoice so one refusal doesn't undo the rest
    for inv in queryset:
        try:
            cancel_invoice(inv.pk)
            success += 1
        except ValidationError as exc:
            modeladmin.message_user(
                request,
                _("Could not cancel %(inv)s: %(err)s") % {"inv": inv, "err": exc},
                level=messages.ERROR,
            )
    modeladmin.message_user(
        request,
        _("Cancelled %(success)d of %(total)d invoices.")
        % {"success": success, "total": len(queryset)},
    )


@admin.action(description="Recompute payments and client totals")
def recompute_invoices(modeladmin, request, queryset):
    affected = []
    for inv in queryset:
        affected.append(AffectedAggregate.invoice(inv))
        affected.append(AffectedAggregate.client(inv.client_id))
    result = refresh_affected(affected)
    _report_refresh(modeladmin, request, result, "aggregates")


@admin.action(description="Refresh totals")
def refresh_client_totals(modeladmin, request, queryset):
    result = refresh_affected([AffectedAggregate.client(c) for c in queryset])
    _report_refresh(modeladmin, request, result, "clients")


@admin.action(description="Deactivate selected rates")
def deactivate_rates(modeladmin, request, queryset):
    count = 0
    for rate in queryset.filter(is_active=True):
        deactivate_rate(rate.pk)
        count += 1
    modeladmin.message_user(
        request, _("Deactivated %(count)d rates.") % {"count": count})
