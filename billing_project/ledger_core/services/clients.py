import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from ..exceptions import InvalidStateError, NotFoundError
from ..models import Client, Invoice

logger = logging.getLogger(__name__)

# Identity/contact fields; the rollup columns are never user-editable
CLIENT_FIELDS = ("company_name", "address", "phone", "email", "is_active")


def get_client(client_id):
    try:
        return Client.objects.get(pk=client_id)
    except Client.DoesNotExist:
        raise NotFoundError("Client", client_id)


def _ensure_unique_name(company_name, exclude_pk=None):
    qs = Client.objects.filter(company_name__iexact=(company_name or "").strip())
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise ValidationError("Client with this company name already exists")


def create_client(company_name, address, phone="", email=""):
    _ensure_unique_name(company_name)
    client = Client(
        company_name=company_name,
        address=address,
        phone=phone or "",
        email=email or "",
    )
    client.save()  # full_clean() inside
    logger.info("Client %s created (%s)", client.pk, client.company_name)
    return client


def update_client(client_id, **fields):
    unknown = set(fields) - set(CLIENT_FIELDS)
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    with transaction.atomic():
        client = Client.objects.select_for_update().filter(pk=client_id).first()
        if client is None:
            raise NotFoundError("Client", client_id)
        if "company_name" in fields:
            _ensure_unique_name(fields["company_name"], exclude_pk=client.pk)
        for name, value in fields.items():
            setattr(client, name, value if value is not None else "")
        client.save()
    return client


def deactivate_client(client_id):
    """Hide a client from new billing while keeping its invoices intact."""
    client = get_client(client_id)
    client.is_active = False
    client.save(update_fields=["is_active", "updated_at"])
    logger.info("Client %s deactivated", client.pk)
    return client


def delete_client(client_id):
    """Physically remove a client that was never invoiced."""
    with transaction.atomic():
        client = get_client(client_id)
        invoice_count = Invoice.objects.for_client(client).count()
        if invoice_count:
            raise InvalidStateError(
                f"Cannot delete client with {invoice_count} existing invoice(s); "
                "deactivate it instead"
            )
        client.delete()
    logger.info("Client %s deleted", client_id)
