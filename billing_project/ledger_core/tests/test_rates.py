from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from ..exceptions import InvalidStateError, NotFoundError
from ..models import Rate
from ..services import (create_invoice, create_rate, deactivate_rate,
                        get_rate, list_rates, rates_by_category, update_invoice,
                        update_rate)
from .helpers import JINGLE, LedgerTestMixin


class RateServiceTests(TestCase):
    def test_create_strips_and_names_the_rate(self):
        rate = create_rate("  Jingles ", "1000", duration=" 30s", time_slot="Prime time", platform="FM")
        self.assertEqual(rate.category, "Jingles")
        self.assertEqual(rate.duration, "30s")
        self.assertEqual(rate.price, Decimal("1000.00"))
        self.assertTrue(rate.is_active)
        self.assertEqual(rate.display_name(), "Jingles - 30s - Prime time - FM")

    def test_display_name_skips_empty_parts(self):
        rate = create_rate("News mention", 2500, platform="AM")
        self.assertEqual(str(rate), "News mention - AM")

    def test_category_and_price_are_required(self):
        for category, price in (("", 1000), ("   ", 1000), ("Jingles", None), ("Jingles", "")):
            with self.subTest(category=category, price=price):
                with self.assertRaises(ValidationError):
                    create_rate(category, price)
        self.assertFalse(Rate.objects.exists())

    def test_price_must_be_whole_cents_and_not_negative(self):
        with self.assertRaises(ValidationError):
            create_rate("Jingles", "-1")
        with self.assertRaises(ValidationError):
            create_rate("Jingles", "10.005")
        self.assertEqual(create_rate("Jingles", 0).price, Decimal("0.00"))

    def test_list_is_active_only_and_sorted(self):
        create_rate("Jingles", 1500, duration="45s")
        create_rate("Jingles", 1000, duration="30s")
        create_rate("Announcements", 800)
        retired = create_rate("Jingle packages", 90000)
        deactivate_rate(retired.pk)

        listed = [(r.category, r.price) for r in list_rates()]
        self.assertEqual(listed, [
            ("Announcements", Decimal("800.00")),
            ("Jingles", Decimal("1000.00")),
            ("Jingles", Decimal("1500.00")),
        ])
        # partial and case-insensitive
        self.assertEqual(list_rates("JING").count(), 2)

    def test_by_category_is_an_exact_match(self):
        create_rate("Jingles", 1500)
        create_rate("Jingles", 1000)
        create_rate("Jingle packages", 500)

        prices = [r.price for r in rates_by_category("Jingles")]
        self.assertEqual(prices, [Decimal("1000.00"), Decimal("1500.00")])

    def test_get_unknown_rate(self):
        with self.assertRaises(NotFoundError):
            get_rate(999999)
        with self.assertRaises(NotFoundError):
            update_rate(999999, price=10)

    def test_update(self):
        rate = create_rate("Jingles", 1000)
        updated = update_rate(rate.pk, price="1200", time_slot="Drive time")
        self.assertEqual(updated.price, Decimal("1200.00"))
        self.assertEqual(updated.time_slot, "Drive time")

        with self.assertRaises(ValidationError):
            update_rate(rate.pk, invoice_counter=1)
        with self.assertRaises(ValidationError):
            update_rate(rate.pk, price="-5")
        with self.assertRaises(ValidationError):
            update_rate(rate.pk, category="  ")
        self.assertEqual(get_rate(rate.pk).category, "Jingles")

    def test_deactivate_keeps_the_row(self):
        rate = create_rate("Jingles", 1000)
        deactivate_rate(rate.pk)
        self.assertFalse(get_rate(rate.pk).is_active)
        self.assertFalse(list_rates().exists())


class RatePricedLineTests(LedgerTestMixin, TestCase):
    def setUp(self):
        self.client_obj = self.make_client()
        self.rate = create_rate("Jingles", 1000, duration="30s", time_slot="Prime time")

    def test_line_takes_price_and_duration_from_the_rate(self):
        line = {"rate": self.rate.pk, "daily_slots": 2, "campaign_days": 10}
        invoice = create_invoice(self.client_obj.pk, lines=[line]).invoice

        # same figures as the hand-priced jingle
        self.assertEqual(invoice.total_amount, Decimal("21500.00"))
        stored = invoice.lines.get()
        self.assertEqual(stored.rate, self.rate)
        self.assertEqual(stored.rate_per_slot, Decimal("1000.00"))
        self.assertEqual(stored.duration, "30s")
        self.assertEqual(stored.description, "Jingles - 30s - Prime time")

    def test_explicit_line_values_win_over_the_rate(self):
        line = dict(JINGLE, rate=self.rate.pk, rate_per_slot="900")
        invoice = create_invoice(self.client_obj.pk, lines=[line]).invoice

        stored = invoice.lines.get()
        self.assertEqual(stored.rate_per_slot, Decimal("900.00"))
        self.assertEqual(stored.description, "Prime time jingle")
        self.assertEqual(stored.rate, self.rate)

    def test_rate_changes_do_not_reprice_issued_invoices(self):
        invoice = create_invoice(
            self.client_obj.pk,
            lines=[{"rate": self.rate.pk, "daily_slots": 2, "campaign_days": 10}],
        ).invoice
        update_rate(self.rate.pk, price=2000)

        invoice.refresh_from_db()
        self.assertEqual(invoice.total_amount, Decimal("21500.00"))
        self.assertEqual(invoice.lines.get().rate_per_slot, Decimal("1000.00"))

    def test_retired_or_unknown_rates_are_refused(self):
        deactivate_rate(self.rate.pk)
        with self.assertRaises(InvalidStateError):
            create_invoice(
                self.client_obj.pk,
                lines=[{"rate": self.rate.pk, "daily_slots": 1, "campaign_days": 1}],
            )
        with self.assertRaises(NotFoundError):
            create_invoice(
                self.client_obj.pk,
                lines=[{"rate": 999999, "daily_slots": 1, "campaign_days": 1}],
            )
        self.assertFalse(self.client_obj.invoices.exists())

    def test_update_can_reprice_lines_from_a_rate(self):
        invoice = self.make_invoice(client=self.client_obj)
        cheaper = create_rate("Jingles", 500, duration="30s")

        result = update_invoice(invoice.pk, {
            "lines": [{"rate": cheaper.pk, "daily_slots": 2, "campaign_days": 10}],
        })
        self.assertEqual(result.invoice.subtotal, Decimal("10000.00"))
        self.assertEqual(result.invoice.lines.get().rate, cheaper)


class RateAdminTests(TestCase):
    def setUp(self):
        user = get_user_model().objects.create_superuser(
            username="admin", email="admin@example.com", password="secret-pass")
        self.client.force_login(user)
        self.rate = create_rate("Jingles", 1000)

    def test_changelist_renders(self):
        response = self.client.get(reverse("admin:ledger_core_rate_changelist"))
        self.assertContains(response, "Jingles")

    def test_rates_are_deactivated_not_deleted(self):
        response = self.client.get(
            reverse("admin:ledger_core_rate_delete", args=[self.rate.pk]))
        self.assertEqual(response.status_code, 403)

        self.client.post(
            reverse("admin:ledger_core_rate_changelist"),
            {"action": "deactivate_rates", "_selected_action": [self.rate.pk]},
            follow=True,
        )
        self.assertFalse(Rate.objects.get(pk=self.rate.pk).is_active)
