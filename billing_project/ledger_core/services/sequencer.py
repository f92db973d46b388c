import logging

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import F
from django.utils import timezone

from ..exceptions import SequencingError
from ..models import Station

logger = logging.getLogger(__name__)

INVOICE = ("invoice", "invoice_prefix", "invoice_counter")
RECEIPT = ("receipt", "receipt_prefix", "receipt_counter")


def format_document_number(prefix, year, counter):
    # "EFM/ADV/" + 2026 + "/" + 007
    return f"{prefix}{year}/{counter:03d}"


def _allocate(prefix_field, counter_field):
    """
    Increment one Station counter in the database and return the new value.

    The increment is a single UPDATE ... SET counter = counter + 1, so two
    requests can never observe the same value. The row stays locked until the
    caller's transaction ends; if that transaction rolls back (the document
    was never saved) the number is handed out again.
    """
    with transaction.atomic():
        station = Station.load()
        updated = Station.objects.filter(pk=station.pk).update(
            **{counter_field: F(counter_field) + 1}
        )
        if updated != 1:
            raise SequencingError("Station configuration row is missing")
        # read back our own write under the same lock
        row = (
            Station.objects.select_for_update()
            .values(prefix_field, counter_field)
            .get(pk=station.pk)
        )
    return row[prefix_field], row[counter_field]


def _next_number(kind):
    noun, prefix_field, counter_field = kind
    attempts = max(1, settings.BILLING_SEQUENCE_MAX_ATTEMPTS)
    last_error = None

    for attempt in range(1, attempts + 1):
        try:
            prefix, counter = _allocate(prefix_field, counter_field)
        except DatabaseError as exc:
            last_error = exc
            logger.warning(
                "Allocating %s failed (attempt %d/%d): %s",
                counter_field, attempt, attempts, exc,
            )
            continue
        # the year is only a label, the counter never resets
        number = format_document_number(prefix, timezone.localdate().year, counter)
        logger.info("Issued %s %s", noun, number)
        return number

    raise SequencingError(
        f"Could not allocate {'an' if noun[0] in 'aeiou' else 'a'} {noun} number "
        f"after {attempts} attempts"
    ) from last_error


def next_invoice_number():
    return _next_number(INVOICE)


def next_receipt_number():
    return _next_number(RECEIPT)
