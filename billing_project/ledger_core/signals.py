from django.core.exceptions import ValidationError
from django.db.models.signals import pre_delete
from django.dispatch import receiver

from .exceptions import InvalidStateError
from .models import Invoice, Payment, Station

""" Model.delete() already guards these; the receivers also cover
    QuerySet.delete() and cascades, which never call Model.delete(). """


# Only drafts and untouched pending invoices may disappear
@receiver(pre_delete, sender=Invoice)
def prevent_delete_invoice_with_payments(sender, instance, **kwargs):
    if not instance.can_delete():
        raise InvalidStateError(
            "Cannot delete invoice with payments or non-draft status")


# Receipts are an append-only record of money received
@receiver(pre_delete, sender=Payment)
def prevent_delete_payment(sender, instance, **kwargs):
    raise ValidationError("Payments cannot be deleted.")


@receiver(pre_delete, sender=Station)
def prevent_delete_station(sender, instance, **kwargs):
    raise ValidationError("The station configuration cannot be deleted.")
