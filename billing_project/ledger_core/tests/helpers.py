from decimal import Decimal

from ..services import create_client, create_invoice

# 2 slots a day for 10 days at 1000 -> 20 slots, 20000 + 1500 VAT = 21500
JINGLE = {
    "description": "Prime time jingle",
    "duration": "30s",
    "daily_slots": 2,
    "campaign_days": 10,
    "rate_per_slot": "1000",
}


class LedgerTestMixin:
    """Shared builders for the ledger tests."""

    def make_client(self, name="Kwara Foods Ltd", address="5 Taiwo Road, Ilorin"):
        return create_client(company_name=name, address=address)

    def make_invoice(self, client=None, lines=None, vat_rate=Decimal("7.5"), **kwargs):
        """Create an invoice through the service. `lines` defaults to one jingle line."""
        client = client or self.make_client()
        return create_invoice(
            client.pk,
            lines=lines if lines is not None else [dict(JINGLE)],
            vat_rate=vat_rate,
            **kwargs,
        ).invoice
