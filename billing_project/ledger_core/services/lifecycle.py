from decimal import Decimal

from ..models.invoice import (CANCELLED, DRAFT, MANUAL_STATUSES, PAID,
                              PARTIAL, PENDING)


def derive_status(amount_paid, total_amount, current=None):
    """
    Automatic status rule, applied whenever amount_paid or total_amount changes:
        amount_paid == 0              -> pending
        0 < amount_paid < total       -> partial
        amount_paid >= total          -> paid
    draft and cancelled are user decisions and are returned unchanged.
    """
    if current in MANUAL_STATUSES:
        return current

    amount_paid = Decimal(amount_paid or 0)
    total_amount = Decimal(total_amount or 0)

    if amount_paid == 0:
        return PENDING
    if amount_paid < total_amount:
        return PARTIAL
    return PAID


def can_edit(status):
    return status not in (PAID, CANCELLED)


def can_delete(status, amount_paid, has_payments=False):
    if has_payments or Decimal(amount_paid or 0) != 0:
        return False
    return status == DRAFT or status == PENDING


# Explicit, user-driven transitions (the automatic rule covers the rest)
MANUAL_TRANSITIONS = {
    PENDING: {DRAFT, CANCELLED},
    PARTIAL: set(),
    DRAFT: {PENDING, CANCELLED},
    PAID: set(),
    CANCELLED: set(),
}


def can_transition(current, target, has_payments=False):
    """Whether a user may move an invoice from `current` to `target`."""
    if target not in MANUAL_TRANSITIONS.get(current, set()):
        return False
    # money received: the invoice can no longer be held back or voided
    if has_payments and target in MANUAL_STATUSES:
        return False
    return True
