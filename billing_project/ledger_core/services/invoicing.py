import logging
from collections.abc import Mapping
from dataclasses import dataclass

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ..exceptions import InvalidStateError, NotFoundError
from ..models import Client, Invoice, ServiceLine
from ..models.invoice import (CANCELLED, DRAFT, INV_TYPE_CHOICES, PENDING,
                              PROFORMA)
from ..utils.money import to_money
from .calculator import compute_totals
from .lifecycle import can_transition
from .rates import price_lines
from .reconcile import AffectedAggregate, RefreshResult, refresh_affected
from .sequencer import next_invoice_number

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "invoice_type",
    "invoice_date",
    "lines",
    "vat_rate",
    "advance_required",
    "payment_terms",
    "notes",
    "status",
)


@dataclass
class InvoiceResult:
    invoice: Invoice
    refresh: RefreshResult


# ----------------------------
# helpers
# ----------------------------
def _get_client(client_id):
    try:
        return Client.objects.get(pk=client_id)
    except Client.DoesNotExist:
        raise NotFoundError("Client", client_id)


def _lock_invoice(invoice_id):
    try:
        return Invoice.objects.select_for_update().get(pk=invoice_id)
    except Invoice.DoesNotExist:
        raise NotFoundError("Invoice", invoice_id)


def _invoice_type(value):
    value = value or PROFORMA
    if value not in dict(INV_TYPE_CHOICES):
        raise ValidationError({"invoice_type": f"Unknown invoice type {value!r}"})
    return value


def _line_kwargs(line):
    get = line.get if isinstance(line, Mapping) else (lambda f: getattr(line, f, None))
    return {
        "description": (get("description") or "").strip(),
        "duration": (get("duration") or "").strip(),
        "daily_slots": get("daily_slots"),
        "campaign_days": get("campaign_days"),
        "rate_per_slot": get("rate_per_slot"),
        "rate": get("rate"),
    }


def _validate_descriptions(lines):
    for position, line in enumerate(lines, start=1):
        if not _line_kwargs(line)["description"]:
            raise ValidationError(
                f"Service line {position}: Service description is required")


def _write_lines(invoice, lines):
    """Replace the invoice's service lines, keeping the submitted order."""
    invoice.lines.all().delete()
    for position, line in enumerate(lines):
        ServiceLine.objects.create(
            invoice=invoice, position=position, **_line_kwargs(line))


def _apply_advance(invoice, value):
    # 0 / empty means "follow the total"
    if value in (None, ""):
        invoice.advance_overridden = False
        return
    amount = to_money(value, "advance_required")
    if amount < 0:
        raise ValidationError({"advance_required": "Advance cannot be negative"})
    invoice.advance_required = amount
    invoice.advance_overridden = amount != 0


def _transition(invoice, target):
    has_payments = invoice.payments.exists()
    if not can_transition(invoice.status, target, has_payments=has_payments):
        raise InvalidStateError(f"Cannot go from {invoice.status} to {target}")
    invoice.status = target


# ----------------------------
# Invoice workflows
# ----------------------------
def create_invoice(
    client_id,
    invoice_type=None,
    lines=None,
    vat_rate=None,
    advance_required=None,
    payment_terms=None,
    notes=None,
    invoice_date=None,
    status=None,
):
    """
    Issue a new invoice: totals from the lines, a fresh number, status from
    amount_paid (pending), then refresh the client's rollup.
    Pass status="draft" to hold the invoice back.
    """
    lines = price_lines(list(lines or ()))
    if vat_rate is None:
        vat_rate = settings.BILLING_DEFAULT_VAT_RATE
    totals = compute_totals(lines, vat_rate)
    _validate_descriptions(lines)
    invoice_type = _invoice_type(invoice_type)
    if status not in (None, PENDING, DRAFT):
        raise ValidationError({"status": "New invoices start as pending or draft"})

    client = _get_client(client_id)
    if not client.is_active:
        raise InvalidStateError(f"Client {client} is deactivated")

    # Number, invoice and lines commit together; a failure gives the number back
    with transaction.atomic():
        invoice = Invoice(
            invoice_number=next_invoice_number(),
            client=client,
            invoice_type=invoice_type,
            invoice_date=invoice_date or timezone.localdate(),
            notes=notes or "",
            status=status or PENDING,
        )
        if payment_terms:
            invoice.payment_terms = payment_terms
        _apply_advance(invoice, advance_required)
        invoice.apply_totals(totals)
        invoice.apply_status()
        invoice.save()
        _write_lines(invoice, lines)

    logger.info(
        "Invoice %s created for client %s, total %s",
        invoice.invoice_number, client.pk, invoice.total_amount,
    )
    refresh = refresh_affected([AffectedAggregate.client(client)])
    return InvoiceResult(invoice=invoice, refresh=refresh)


def update_invoice(invoice_id, patch, expected_version=None):
    """
    Edit an invoice that is neither paid nor cancelled.

    Totals are recomputed from the (new) lines; amount_paid is kept, and the
    new total may not drop below it. `expected_version` rejects edits made
    against a stale copy.
    """
    patch = dict(patch or {})
    unknown = set(patch) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    with transaction.atomic():
        invoice = _lock_invoice(invoice_id)

        if expected_version is not None and invoice.version != int(expected_version):
            raise InvalidStateError(
                "Invoice was changed by someone else; reload and try again")
        if not invoice.can_edit():
            raise InvalidStateError("Cannot edit a paid or cancelled invoice")

        if "invoice_type" in patch:
            invoice.invoice_type = _invoice_type(patch["invoice_type"])
        if "invoice_date" in patch:
            invoice.invoice_date = patch["invoice_date"] or invoice.invoice_date
        if "payment_terms" in patch:
            invoice.payment_terms = patch["payment_terms"] or ""
        if "notes" in patch:
            invoice.notes = patch["notes"] or ""
        if "advance_required" in patch:
            _apply_advance(invoice, patch["advance_required"])

        if "lines" in patch or "vat_rate" in patch:
            lines = (price_lines(list(patch["lines"] or ())) if "lines" in patch
                     else list(invoice.lines.all()))
            vat_rate = patch.get("vat_rate")
            totals = compute_totals(
                lines, invoice.vat_rate if vat_rate is None else vat_rate)
            if "lines" in patch:
                _validate_descriptions(lines)
            if totals.total_amount < invoice.amount_paid:
                raise ValidationError(
                    f"New total ({totals.total_amount}) is below the amount "
                    f"already paid ({invoice.amount_paid})"
                )
            invoice.apply_totals(totals)
            if "lines" in patch:
                _write_lines(invoice, lines)
        elif not invoice.advance_overridden:
            invoice.advance_required = invoice.total_amount

        target = patch.get("status")
        if target and target != invoice.status:
            _transition(invoice, target)

        invoice.refresh_outstanding()
        invoice.apply_status()
        invoice.save()

    logger.info("Invoice %s updated (version %s)", invoice.invoice_number, invoice.version)
    refresh = refresh_affected([AffectedAggregate.client(invoice.client_id)])
    return InvoiceResult(invoice=invoice, refresh=refresh)


def delete_invoice(invoice_id):
    """Delete a draft, or a pending invoice that never received money."""
    with transaction.atomic():
        invoice = _lock_invoice(invoice_id)
        if not invoice.can_delete():
            raise InvalidStateError(
                "Cannot delete invoice with payments or non-draft status")
        client_id = invoice.client_id
        number = invoice.invoice_number
        invoice.delete()

    logger.info("Invoice %s deleted", number)
    return refresh_affected([AffectedAggregate.client(client_id)])


def _change_status(invoice_id, target):
    with transaction.atomic():
        invoice = _lock_invoice(invoice_id)
        _transition(invoice, target)
        invoice.apply_status()
        invoice.save(update_fields=["status"])

    logger.info("Invoice %s is now %s", invoice.invoice_number, invoice.status)
    refresh = refresh_affected([AffectedAggregate.client(invoice.client_id)])
    return InvoiceResult(invoice=invoice, refresh=refresh)


def cancel_invoice(invoice_id):
    return _change_status(invoice_id, CANCELLED)


def mark_draft(invoice_id):
    return _change_status(invoice_id, DRAFT)


""" Move a draft back under the automatic rule (draft -> pending) """
def issue_invoice(invoice_id):
    return _change_status(invoice_id, PENDING)
