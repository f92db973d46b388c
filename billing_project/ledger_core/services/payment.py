import logging
from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ..exceptions import (ConsistencyError, InvalidStateError, NotFoundError,
                          OverpaymentError)
from ..models import Invoice, Payment
from ..models.invoice import MANUAL_STATUSES
from ..models.payment import PAYMENT_METHODS
from ..utils.money import to_money
from .reconcile import AffectedAggregate, RefreshResult, refresh_affected
from .sequencer import next_receipt_number

logger = logging.getLogger(__name__)

# "Bank Transfer", "bank_transfer" and "BANK TRANSFER" are the same method
_METHOD_LOOKUP = {
    **{key: key for key, _ in PAYMENT_METHODS},
    **{label.lower(): key for key, label in PAYMENT_METHODS},
}


@dataclass
class PaymentResult:
    payment: Payment
    invoice: Invoice
    refresh: RefreshResult


def normalize_method(method):
    key = (method or "").strip().lower()
    key = _METHOD_LOOKUP.get(key) or _METHOD_LOOKUP.get(key.replace(" ", "_"))
    if key is None:
        allowed = ", ".join(label for _, label in PAYMENT_METHODS)
        raise ValidationError(f"Invalid payment method. Use {allowed}")
    return key


def recompute_invoice_payments(invoice):
    """
    Set amount_paid to the sum of every payment ever recorded on the invoice
    (not an increment), then the balance and the automatic status.
    Caller holds the invoice row lock.
    """
    invoice.amount_paid = Payment.objects.for_invoice(invoice).total()
    if invoice.refresh_outstanding() < 0:
        raise ConsistencyError(
            f"Payments on {invoice} exceed its total "
            f"({invoice.amount_paid} > {invoice.total_amount})"
        )
    invoice.apply_status()
    invoice.needs_refresh = False
    invoice.save(update_fields=[
        "amount_paid", "outstanding_balance", "status", "needs_refresh"])
    return invoice


def record_payment(
    invoice_id,
    amount,
    method="cash",
    received_by=None,
    *,
    transaction_ref="",
    date_received=None,
    position="",
    notes="",
):
    """
    Accept one payment against an invoice and issue its receipt.

    Rejections, in order: amount <= 0 (ValidationError), unknown invoice
    (NotFoundError), draft/cancelled invoice (InvalidStateError), amount above
    the outstanding balance (OverpaymentError). Nothing is partially accepted.

    Payment row, invoice totals and the balance snapshot commit together. The
    client rollup runs afterwards; if it fails the client is flagged for
    repair and the payment still stands.
    """
    amount = to_money(amount, "amount_paid")
    if amount <= 0:
        raise ValidationError("Payment amount must be greater than 0")
    method = normalize_method(method)
    received_by = (received_by or "").strip()
    if not received_by:
        raise ValidationError("Receiver name is required")

    with transaction.atomic():
        # Lock the invoice row: concurrent payments queue here, so each one
        # sees the balance left by the previous one
        try:
            invoice = Invoice.objects.select_for_update().get(pk=invoice_id)
        except Invoice.DoesNotExist:
            raise NotFoundError("Invoice", invoice_id)

        if invoice.status in MANUAL_STATUSES:
            raise InvalidStateError(
                f"Cannot record a payment on a {invoice.status} invoice")

        if amount > invoice.outstanding_balance:
            raise OverpaymentError(amount, invoice.outstanding_balance)

        payment = Payment.objects.create(
            invoice=invoice,
            receipt_number=next_receipt_number(),
            amount_paid=amount,
            payment_method=method,
            transaction_ref=(transaction_ref or "").strip(),
            date_received=date_received or timezone.now(),
            received_by=received_by,
            position=(position or "").strip(),
            notes=notes or "",
            invoice_balance_before=invoice.outstanding_balance,
        )

        recompute_invoice_payments(invoice)

        payment.invoice_balance_after = invoice.outstanding_balance
        payment.save(update_fields=["invoice_balance_after"])

    logger.info(
        "Payment %s of %s on %s accepted, balance %s -> %s",
        payment.receipt_number, amount, invoice.invoice_number,
        payment.invoice_balance_before, payment.invoice_balance_after,
    )

    refresh = refresh_affected([AffectedAggregate.client(invoice.client_id)])
    return PaymentResult(payment=payment, invoice=invoice, refresh=refresh)
