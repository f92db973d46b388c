from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.test import TestCase
from django.utils import timezone

from ..exceptions import InvalidStateError, NotFoundError
from ..models import Client, Invoice, ServiceLine, Station
from ..services import (cancel_invoice, create_invoice, deactivate_client,
                        delete_invoice, issue_invoice, mark_draft,
                        record_payment, update_invoice)
from .helpers import JINGLE, LedgerTestMixin

NEWS = {
    "description": "Sponsored news mention",
    "duration": "60s",
    "daily_slots": 1,
    "campaign_days": 5,
    "rate_per_slot": "2500",
}


class CreateInvoiceTests(LedgerTestMixin, TestCase):
    def setUp(self):
        self.year = timezone.localdate().year
        self.client_obj = self.make_client()

    def test_create_prices_numbers_and_rolls_up(self):
        result = create_invoice(
            self.client_obj.pk, invoice_type="advance_bill", lines=[JINGLE], vat_rate="7.5")
        invoice = result.invoice

        self.assertEqual(invoice.invoice_number, f"EFM/ADV/{self.year}/001")
        self.assertEqual(invoice.status, "pending")
        self.assertEqual(invoice.total_slots, 20)
        self.assertEqual(invoice.subtotal, Decimal("20000.00"))
        self.assertEqual(invoice.vat_amount, Decimal("1500.00"))
        self.assertEqual(invoice.total_amount, Decimal("21500.00"))
        self.assertEqual(invoice.outstanding_balance, Decimal("21500.00"))
        self.assertEqual(invoice.advance_required, Decimal("21500.00"))
        self.assertEqual(
            invoice.amount_in_words, "Twenty One Thousand Five Hundred Naira Only")
        self.assertEqual(invoice.lines.count(), 1)
        self.assertEqual(invoice.lines.get().line_total, Decimal("20000.00"))
        self.assertTrue(result.refresh.ok)

        client = Client.objects.get(pk=self.client_obj.pk)
        self.assertEqual(client.total_invoiced, Decimal("21500.00"))
        self.assertEqual(client.outstanding_balance, Decimal("21500.00"))

    def test_default_vat_rate_comes_from_settings(self):
        invoice = create_invoice(self.client_obj.pk, lines=[JINGLE]).invoice
        self.assertEqual(invoice.vat_rate, Decimal("7.50"))
        self.assertEqual(invoice.invoice_type, "proforma")

    def test_lines_keep_their_order(self):
        invoice = self.make_invoice(client=self.client_obj, lines=[NEWS, JINGLE])
        self.assertEqual(
            [line.description for line in invoice.lines.all()],
            ["Sponsored news mention", "Prime time jingle"],
        )
        self.assertEqual(invoice.subtotal, Decimal("32500.00"))

    def test_rejected_invoice_consumes_no_number(self):
        with self.assertRaises(ValidationError):
            create_invoice(self.client_obj.pk, lines=[])
        with self.assertRaises(ValidationError):
            create_invoice(self.client_obj.pk, lines=[{**JINGLE, "description": " "}])
        with self.assertRaises(ValidationError):
            create_invoice(self.client_obj.pk, lines=[JINGLE], invoice_type="receipt")

        self.assertFalse(Invoice.objects.exists())
        self.assertEqual(Station.load().invoice_counter, 0)

    def test_unknown_or_inactive_client(self):
        with self.assertRaises(NotFoundError):
            create_invoice(999999, lines=[JINGLE])

        deactivate_client(self.client_obj.pk)
        with self.assertRaises(InvalidStateError):
            create_invoice(self.client_obj.pk, lines=[JINGLE])

    def test_explicit_advance_is_kept(self):
        invoice = self.make_invoice(client=self.client_obj, advance_required="10000")
        self.assertEqual(invoice.advance_required, Decimal("10000.00"))
        self.assertTrue(invoice.advance_overridden)

    def test_invoice_number_is_immutable(self):
        invoice = self.make_invoice(client=self.client_obj)
        invoice.invoice_number = "EFM/ADV/1999/999"
        with self.assertRaises(ValidationError):
            invoice.save()


class UpdateInvoiceTests(LedgerTestMixin, TestCase):
    def setUp(self):
        self.client_obj = self.make_client()
        self.invoice = self.make_invoice(client=self.client_obj)

    def test_new_lines_reprice_the_invoice(self):
        result = update_invoice(self.invoice.pk, {"lines": [JINGLE, NEWS]})
        invoice = result.invoice

        self.assertEqual(invoice.subtotal, Decimal("32500.00"))
        # 7.5% of 32500 = 2437.50 -> 2438
        self.assertEqual(invoice.vat_amount, Decimal("2438.00"))
        self.assertEqual(invoice.total_amount, Decimal("34938.00"))
        self.assertEqual(invoice.advance_required, Decimal("34938.00"))
        self.assertEqual(ServiceLine.objects.filter(invoice=invoice).count(), 2)
        self.assertEqual(invoice.version, self.invoice.version + 1)
        self.assertEqual(
            Client.objects.get(pk=self.client_obj.pk).total_invoiced, Decimal("34938.00"))

    def test_vat_rate_change_keeps_existing_lines(self):
        invoice = update_invoice(self.invoice.pk, {"vat_rate": "0"}).invoice
        self.assertEqual(invoice.total_amount, Decimal("20000.00"))
        self.assertEqual(invoice.lines.count(), 1)

    def test_stale_version_is_rejected(self):
        stale_version = self.invoice.version
        update_invoice(self.invoice.pk, {"notes": "first edit"}, expected_version=stale_version)

        with self.assertRaises(InvalidStateError):
            update_invoice(self.invoice.pk, {"notes": "second edit"}, expected_version=stale_version)
        self.assertEqual(Invoice.objects.get(pk=self.invoice.pk).notes, "first edit")

    def test_unknown_fields_are_rejected(self):
        with self.assertRaises(ValidationError):
            update_invoice(self.invoice.pk, {"amount_paid": "0"})

    def test_total_cannot_drop_below_amount_paid(self):
        record_payment(self.invoice.pk, "15000", "Cash", "Bola Ade")
        cheap = {**JINGLE, "rate_per_slot": "100"}

        with self.assertRaises(ValidationError):
            update_invoice(self.invoice.pk, {"lines": [cheap]})
        self.assertEqual(
            Invoice.objects.get(pk=self.invoice.pk).total_amount, Decimal("21500.00"))

    def test_partial_invoice_can_be_extended(self):
        record_payment(self.invoice.pk, "15000", "Cash", "Bola Ade")
        invoice = update_invoice(self.invoice.pk, {"lines": [JINGLE, NEWS]}).invoice

        self.assertEqual(invoice.status, "partial")
        self.assertEqual(invoice.amount_paid, Decimal("15000.00"))
        self.assertEqual(invoice.outstanding_balance, Decimal("19938.00"))

    def test_paid_and_cancelled_invoices_are_frozen(self):
        record_payment(self.invoice.pk, "21500", "Cash", "Bola Ade")
        with self.assertRaises(InvalidStateError):
            update_invoice(self.invoice.pk, {"notes": "too late"})

        other = self.make_invoice(client=self.client_obj)
        cancel_invoice(other.pk)
        with self.assertRaises(InvalidStateError):
            update_invoice(other.pk, {"lines": [NEWS]})

    def test_paid_invoice_model_guard(self):
        record_payment(self.invoice.pk, "21500", "Cash", "Bola Ade")
        invoice = Invoice.objects.get(pk=self.invoice.pk)
        invoice.vat_rate = Decimal("0")
        with self.assertRaises(ValidationError):
            invoice.save()


class InvoiceStatusAndDeleteTests(LedgerTestMixin, TestCase):
    def setUp(self):
        self.client_obj = self.make_client()
        self.invoice = self.make_invoice(client=self.client_obj)

    def test_fresh_pending_invoice_can_be_deleted(self):
        result = delete_invoice(self.invoice.pk)

        self.assertTrue(result.ok)
        self.assertFalse(Invoice.objects.filter(pk=self.invoice.pk).exists())
        self.assertFalse(ServiceLine.objects.exists())
        self.assertEqual(
            Client.objects.get(pk=self.client_obj.pk).total_invoiced, Decimal("0.00"))

    def test_partially_paid_invoice_cannot_be_deleted(self):
        record_payment(self.invoice.pk, "5000", "Cash", "Bola Ade")

        with self.assertRaises(InvalidStateError):
            delete_invoice(self.invoice.pk)
        self.assertTrue(Invoice.objects.filter(pk=self.invoice.pk).exists())

    def test_cancelled_invoice_cannot_be_deleted_in_bulk(self):
        cancel_invoice(self.invoice.pk)
        with self.assertRaises(InvalidStateError):
            with transaction.atomic():
                Invoice.objects.filter(pk=self.invoice.pk).delete()
        self.assertTrue(Invoice.objects.filter(pk=self.invoice.pk).exists())

    def test_unknown_invoice(self):
        with self.assertRaises(NotFoundError):
            delete_invoice(999999)

    def test_draft_round_trip(self):
        self.assertEqual(mark_draft(self.invoice.pk).invoice.status, "draft")
        self.assertEqual(issue_invoice(self.invoice.pk).invoice.status, "pending")

    def test_invoice_with_money_cannot_be_cancelled(self):
        record_payment(self.invoice.pk, "5000", "Cash", "Bola Ade")
        with self.assertRaises(InvalidStateError):
            cancel_invoice(self.invoice.pk)
        self.assertEqual(Invoice.objects.get(pk=self.invoice.pk).status, "partial")

    def test_status_patch_uses_manual_transitions(self):
        invoice = update_invoice(self.invoice.pk, {"status": "cancelled"}).invoice
        self.assertEqual(invoice.status, "cancelled")

        other = self.make_invoice(client=self.client_obj)
        with self.assertRaises(InvalidStateError):
            update_invoice(other.pk, {"status": "paid"})
