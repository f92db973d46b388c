from django.core.exceptions import ValidationError
from django.db import transaction

from ..models import Station

# Configuration a user may change; the counters belong to the sequencer
STATION_FIELDS = (
    "name",
    "address",
    "phone",
    "email",
    "bank_name",
    "account_name",
    "account_number",
    "logo_url",
    "invoice_prefix",
    "receipt_prefix",
)


def get_station():
    return Station.load()


def update_station(**fields):
    unknown = set(fields) - set(STATION_FIELDS)
    if unknown:
        raise ValidationError(
            f"Station fields cannot be updated: {', '.join(sorted(unknown))}")

    with transaction.atomic():
        station = Station.load()
        station = Station.objects.select_for_update().get(pk=station.pk)
        for name, value in fields.items():
            setattr(station, name, (value or "").strip())
        station.full_clean()
        # never write the counters from this (possibly stale) copy
        station.save(update_fields=[*fields, "updated_at"])
    return station
