import logging
from collections.abc import Mapping

from django.core.exceptions import ValidationError
from django.db import transaction

from ..exceptions import InvalidStateError, NotFoundError
from ..models import Rate
from ..utils.money import to_money

logger = logging.getLogger(__name__)

RATE_FIELDS = ("category", "duration", "time_slot", "platform", "price", "description", "is_active")


def _price(value):
    price = to_money(value, "price")
    if price < 0:
        raise ValidationError({"price": "Price cannot be negative"})
    return price


def list_rates(category=None):
    """Active rates, optionally filtered by a partial category name."""
    return Rate.objects.active().in_category(category).order_by("category", "price")


def rates_by_category(category):
    """Active rates of exactly one category, cheapest first."""
    return Rate.objects.by_category(category)


def get_rate(rate_id):
    try:
        return Rate.objects.get(pk=rate_id)
    except Rate.DoesNotExist:
        raise NotFoundError("Rate", rate_id)


def create_rate(category, price, duration="", time_slot="", platform="", description=""):
    if price in (None, ""):
        raise ValidationError({"price": "Category and price are required"})
    rate = Rate(
        category=category or "",
        duration=duration or "",
        time_slot=time_slot or "",
        platform=platform or "",
        price=_price(price),
        description=description or "",
    )
    rate.save()  # full_clean() inside
    logger.info("Rate %s created (%s at %s)", rate.pk, rate.display_name(), rate.price)
    return rate


def update_rate(rate_id, **fields):
    unknown = set(fields) - set(RATE_FIELDS)
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    with transaction.atomic():
        rate = Rate.objects.select_for_update().filter(pk=rate_id).first()
        if rate is None:
            raise NotFoundError("Rate", rate_id)
        for name, value in fields.items():
            if name == "price":
                value = _price(value)
            elif name == "is_active":
                value = bool(value)
            elif value is None:
                value = ""
            setattr(rate, name, value)
        rate.save()
    # existing invoice lines keep the price they were issued with
    logger.info("Rate %s updated", rate.pk)
    return rate


def deactivate_rate(rate_id):
    """Retire a rate; lines already priced from it keep their link."""
    rate = get_rate(rate_id)
    rate.is_active = False
    rate.save(update_fields=["is_active", "updated_at"])
    logger.info("Rate %s deactivated", rate.pk)
    return rate


def _active_rate(value, position):
    if isinstance(value, Rate):
        rate = value
    else:
        try:
            rate = Rate.objects.filter(pk=value).first()
        except (TypeError, ValueError):
            raise ValidationError(f"Service line {position}: unknown rate {value!r}")
        if rate is None:
            raise NotFoundError("Rate", value)
    if not rate.is_active:
        raise InvalidStateError(
            f"Service line {position}: rate {rate} is no longer offered")
    return rate


def price_lines(lines):
    """
    Fill in lines that name a rate: rate_per_slot, duration and description
    come from the rate unless the line gives its own.
    Lines without a rate are returned unchanged.
    """
    priced = []
    for position, line in enumerate(lines, start=1):
        if not isinstance(line, Mapping) or line.get("rate") in (None, ""):
            priced.append(line)
            continue
        rate = _active_rate(line["rate"], position)
        line = dict(line, rate=rate)
        if line.get("rate_per_slot") in (None, ""):
            line["rate_per_slot"] = rate.price
        if not (line.get("duration") or "").strip():
            line["duration"] = rate.duration
        if not (line.get("description") or "").strip():
            line["description"] = rate.display_name()
        priced.append(line)
    return priced
