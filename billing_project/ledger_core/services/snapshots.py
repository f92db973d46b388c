"""
Plain data handed to the PDF/print renderer. Nothing here formats or lays
anything out; it only gathers already-computed ledger values.
"""
from ..exceptions import NotFoundError
from ..models import Invoice, Payment, Station


def _station_data(station):
    return {
        "name": station.name,
        "address": station.address,
        "phone": station.phone,
        "email": station.email,
        "bank_name": station.bank_name,
        "account_name": station.account_name,
        "account_number": station.account_number,
        "logo_url": station.logo_url,
    }


def _client_data(client):
    return {
        "id": client.pk,
        "company_name": client.company_name,
        "address": client.address,
        "phone": client.phone,
        "email": client.email,
    }


def _payment_data(payment):
    return {
        "receipt_number": payment.receipt_number,
        "date_received": payment.date_received,
        "amount_paid": payment.amount_paid,
        "payment_method": payment.get_payment_method_display(),
        "transaction_ref": payment.transaction_ref,
        "received_by": payment.received_by,
        "position": payment.position,
        "invoice_balance_before": payment.invoice_balance_before,
        "invoice_balance_after": payment.invoice_balance_after,
    }


def invoice_snapshot(invoice_id):
    try:
        invoice = (
            Invoice.objects.select_related("client")
            .prefetch_related("lines", "payments")
            .get(pk=invoice_id)
        )
    except Invoice.DoesNotExist:
        raise NotFoundError("Invoice", invoice_id)

    return {
        "station": _station_data(Station.load()),
        "client": _client_data(invoice.client),
        "invoice": {
            "invoice_number": invoice.invoice_number,
            "invoice_type": invoice.invoice_type,
            "invoice_type_label": invoice.get_invoice_type_display(),
            "invoice_date": invoice.invoice_date,
            "status": invoice.status,
            "total_slots": invoice.total_slots,
            "subtotal": invoice.subtotal,
            "vat_rate": invoice.vat_rate,
            "vat_amount": invoice.vat_amount,
            "total_amount": invoice.total_amount,
            "amount_in_words": invoice.amount_in_words,
            "advance_required": invoice.advance_required,
            "amount_paid": invoice.amount_paid,
            "outstanding_balance": invoice.outstanding_balance,
            "payment_terms": invoice.payment_terms,
            "notes": invoice.notes,
        },
        "lines": [
            {
                "description": line.description,
                "duration": line.duration,
                "daily_slots": line.daily_slots,
                "campaign_days": line.campaign_days,
                "total_slots": line.total_slots,
                "rate_per_slot": line.rate_per_slot,
                "line_total": line.line_total,
            }
            for line in invoice.lines.all()
        ],
        # oldest first, the order money came in
        "payments": [
            _payment_data(p)
            for p in sorted(invoice.payments.all(), key=lambda p: (p.date_received, p.pk))
        ],
    }


def receipt_snapshot(payment_id):
    try:
        payment = Payment.objects.select_related("invoice__client").get(pk=payment_id)
    except Payment.DoesNotExist:
        raise NotFoundError("Payment", payment_id)

    invoice = payment.invoice
    data = _payment_data(payment)
    data.update({
        "station": _station_data(Station.load()),
        "client": _client_data(invoice.client),
        "invoice": {
            "invoice_number": invoice.invoice_number,
            "invoice_date": invoice.invoice_date,
            "total_amount": invoice.total_amount,
            "outstanding_balance": invoice.outstanding_balance,
        },
    })
    return data
