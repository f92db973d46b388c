from decimal import Decimal

from django.test import SimpleTestCase

from ..models.invoice import CANCELLED, DRAFT, PAID, PARTIAL, PENDING
from ..services.lifecycle import can_delete, can_edit, can_transition, derive_status


class StatusRuleTests(SimpleTestCase):
    def test_rule_table(self):
        total = Decimal("21500.00")
        table = [
            (Decimal("0"), PENDING),
            (Decimal("0.01"), PARTIAL),
            (Decimal("21499.99"), PARTIAL),
            (total, PAID),
        ]
        for amount_paid, expected in table:
            with self.subTest(amount_paid=amount_paid):
                self.assertEqual(derive_status(amount_paid, total), expected)

    def test_manual_statuses_are_left_alone(self):
        for current in (DRAFT, CANCELLED):
            for amount_paid in (Decimal("0"), Decimal("10"), Decimal("100")):
                with self.subTest(current=current, amount_paid=amount_paid):
                    self.assertEqual(
                        derive_status(amount_paid, Decimal("100"), current=current), current)

    def test_automatic_statuses_are_recomputed(self):
        # a partial invoice whose total was raised goes back to partial, not paid
        self.assertEqual(derive_status(Decimal("50"), Decimal("80"), current=PAID), PARTIAL)
        self.assertEqual(derive_status(Decimal("0"), Decimal("80"), current=PARTIAL), PENDING)

    def test_same_inputs_same_status(self):
        first = derive_status(Decimal("30"), Decimal("90"), current=PENDING)
        self.assertEqual(first, derive_status(Decimal("30"), Decimal("90"), current=PENDING))


class EditDeleteRuleTests(SimpleTestCase):
    def test_can_edit(self):
        self.assertTrue(can_edit(DRAFT))
        self.assertTrue(can_edit(PENDING))
        self.assertTrue(can_edit(PARTIAL))
        self.assertFalse(can_edit(PAID))
        self.assertFalse(can_edit(CANCELLED))

    def test_can_delete(self):
        self.assertTrue(can_delete(DRAFT, Decimal("0")))
        self.assertTrue(can_delete(PENDING, Decimal("0")))
        self.assertFalse(can_delete(PARTIAL, Decimal("10")))
        self.assertFalse(can_delete(PAID, Decimal("100")))
        self.assertFalse(can_delete(CANCELLED, Decimal("0")))
        # money recorded blocks deletion whatever the label says
        self.assertFalse(can_delete(PENDING, Decimal("5")))
        self.assertFalse(can_delete(DRAFT, Decimal("0"), has_payments=True))

    def test_manual_transitions(self):
        self.assertTrue(can_transition(PENDING, CANCELLED))
        self.assertTrue(can_transition(PENDING, DRAFT))
        self.assertTrue(can_transition(DRAFT, PENDING))
        self.assertFalse(can_transition(PENDING, PAID))
        self.assertFalse(can_transition(CANCELLED, PENDING))
        self.assertFalse(can_transition(PAID, CANCELLED))
        self.assertFalse(can_transition(PENDING, CANCELLED, has_payments=True))
