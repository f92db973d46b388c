from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError

CENT = Decimal("0.01")
UNIT = Decimal("1")
ZERO = Decimal("0.00")


def to_decimal(value, field="amount"):
    """Coerce request input (int, float, str, Decimal) to Decimal or raise ValidationError."""
    if value is None or value == "":
        raise ValidationError({field: f"{field} is required"})
    if isinstance(value, bool):
        raise ValidationError({field: f"{field} must be a number"})
    try:
        # str() first so floats like 7.5 don't drag binary noise along
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError({field: f"{field} must be a number"})
    if not result.is_finite():
        raise ValidationError({field: f"{field} must be a number"})
    return result


def to_money(value, field="amount"):
    """Like to_decimal, but only whole cents; 5000.004 is an input error, not 5000.00."""
    result = to_decimal(value, field)
    if result != result.quantize(CENT, rounding=ROUND_HALF_UP):
        raise ValidationError({field: f"{field} cannot have more than 2 decimal places"})
    return result.quantize(CENT)


# Half-up to whole currency units (the VAT rule)
def round_whole(value):
    return Decimal(value).quantize(UNIT, rounding=ROUND_HALF_UP)
