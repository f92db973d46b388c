import logging
from dataclasses import dataclass, field

from django.db import DatabaseError, transaction

from ..exceptions import ConsistencyError
from ..models import Client, Invoice

logger = logging.getLogger(__name__)

CLIENT = "client"
INVOICE = "invoice"


@dataclass(frozen=True)
class AffectedAggregate:
    """A derived record that must be rebuilt after a write."""
    kind: str
    pk: int

    @classmethod
    def client(cls, client):
        return cls(CLIENT, getattr(client, "pk", client))

    @classmethod
    def invoice(cls, invoice):
        return cls(INVOICE, getattr(invoice, "pk", invoice))


@dataclass
class RefreshResult:
    refreshed: list = field(default_factory=list)
    failed: list = field(default_factory=list)  # (AffectedAggregate, error text)

    @property
    def ok(self):
        return not self.failed

    def raise_for_failures(self):
        if self.failed:
            raise ConsistencyError(
                "Derived totals could not be refreshed; flagged for repair: "
                + ", ".join(f"{a.kind} {a.pk}" for a, _ in self.failed),
                failures=self.failed,
            )
        return self


def _refresh_one(aggregate):
    # imported here: payment imports this module for its own pipeline step
    from .payment import recompute_invoice_payments
    from .rollup import refresh_client

    if aggregate.kind == CLIENT:
        refresh_client(aggregate.pk)
    elif aggregate.kind == INVOICE:
        invoice = Invoice.objects.select_for_update().get(pk=aggregate.pk)
        recompute_invoice_payments(invoice)
    else:
        raise ValueError(f"Unknown aggregate kind {aggregate.kind!r}")


def _flag(aggregate, error):
    model = Client if aggregate.kind == CLIENT else Invoice
    values = {"needs_refresh": True}
    if model is Client:
        values["last_refresh_error"] = error[:2000]
    model.objects.filter(pk=aggregate.pk).update(**values)


def refresh_affected(affected):
    """
    Rebuild every aggregate a write touched.

    Each refresh runs in its own savepoint. A failure does not undo the write
    that triggered it (money received stays received): the aggregate is
    flagged needs_refresh for repair_flagged_aggregates and reported in the
    returned result.
    """
    result = RefreshResult()
    seen = set()
    for aggregate in affected:
        if aggregate in seen:
            continue
        seen.add(aggregate)
        try:
            with transaction.atomic():
                _refresh_one(aggregate)
        except (DatabaseError, ConsistencyError) as exc:
            logger.warning(
                "Refreshing %s %s failed, flagged for repair: %s",
                aggregate.kind, aggregate.pk, exc,
            )
            _flag(aggregate, str(exc))
            result.failed.append((aggregate, str(exc)))
        else:
            result.refreshed.append(aggregate)
    return result


def flagged_aggregates():
    """Everything a previous refresh failed on, invoices first."""
    affected = [
        AffectedAggregate.invoice(pk)
        for pk in Invoice.objects.needs_refresh().values_list("pk", flat=True)
    ]
    affected += [
        AffectedAggregate.client(pk)
        for pk in Client.objects.needs_refresh().values_list("pk", flat=True)
    ]
    return affected


def repair_flagged():
    result = refresh_affected(flagged_aggregates())
    if result.refreshed or result.failed:
        logger.info(
            "Ledger repair: %d refreshed, %d still failing",
            len(result.refreshed), len(result.failed),
        )
    return result


def refresh_everything():
    """Full rebuild of every invoice and client total (management command --all)."""
    affected = [
        AffectedAggregate.invoice(pk)
        for pk in Invoice.objects.values_list("pk", flat=True)
    ]
    affected += [
        AffectedAggregate.client(pk)
        for pk in Client.objects.values_list("pk", flat=True)
    ]
    return refresh_affected(affected)
