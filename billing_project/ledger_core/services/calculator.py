from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from django.core.exceptions import ValidationError

from ..utils.money import ZERO, round_whole, to_decimal, to_money

LINE_FIELDS = ("daily_slots", "campaign_days", "rate_per_slot")


@dataclass(frozen=True)
class LineTotals:
    total_slots: int
    line_total: Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    total_slots: int
    subtotal: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    total_amount: Decimal
    lines: tuple = ()


def _as_count(value, field):
    number = to_decimal(value, field)
    if number != number.to_integral_value():
        raise ValidationError({field: f"{field} must be a whole number"})
    return int(number)


def compute_line(daily_slots, campaign_days, rate_per_slot):
    """Totals for one service line: slots = daily × days, total = slots × rate."""
    daily_slots = _as_count(daily_slots, "daily_slots")
    campaign_days = _as_count(campaign_days, "campaign_days")
    rate_per_slot = to_money(rate_per_slot, "rate_per_slot")

    if daily_slots < 1:
        raise ValidationError({"daily_slots": "Daily slots must be at least 1"})
    if campaign_days < 1:
        raise ValidationError({"campaign_days": "Campaign days must be at least 1"})
    if rate_per_slot < 0:
        raise ValidationError({"rate_per_slot": "Rate cannot be negative"})

    total_slots = daily_slots * campaign_days
    return LineTotals(total_slots=total_slots, line_total=total_slots * rate_per_slot)


def _line_value(line, field):
    # Lines arrive either as request dicts or as ServiceLine rows
    if isinstance(line, Mapping):
        return line.get(field)
    return getattr(line, field, None)


def validate_vat_rate(vat_rate):
    vat_rate = to_decimal(vat_rate, "vat_rate")
    if vat_rate < 0 or vat_rate > 100:
        raise ValidationError({"vat_rate": "VAT rate must be between 0 and 100"})
    return vat_rate


def compute_totals(lines, vat_rate):
    """
    Aggregate invoice totals from its service lines.

    VAT is rounded once, on the subtotal, half-up to whole currency units;
    rounding per line would drift on long invoices.
    An empty line list is an input error, not a zero invoice.
    """
    lines = list(lines or ())
    if not lines:
        raise ValidationError("At least one service is required")

    vat_rate = validate_vat_rate(vat_rate)

    line_totals = []
    for index, line in enumerate(lines, start=1):
        try:
            line_totals.append(
                compute_line(*(_line_value(line, field) for field in LINE_FIELDS))
            )
        except ValidationError as exc:
            raise ValidationError(f"Service line {index}: {'; '.join(exc.messages)}")

    total_slots = sum(t.total_slots for t in line_totals)
    subtotal = sum((t.line_total for t in line_totals), ZERO)
    vat_amount = round_whole(subtotal * vat_rate / Decimal("100"))

    return InvoiceTotals(
        total_slots=total_slots,
        subtotal=subtotal,
        vat_rate=vat_rate,
        vat_amount=vat_amount,
        total_amount=subtotal + vat_amount,
        lines=tuple(line_totals),
    )
