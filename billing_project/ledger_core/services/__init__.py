from .calculator import InvoiceTotals, LineTotals, compute_line, compute_totals
from .clients import (create_client, deactivate_client, delete_client,
                      get_client, update_client)
from .dashboard import dashboard_summary
from .invoicing import (InvoiceResult, cancel_invoice, create_invoice,
                        delete_invoice, issue_invoice, mark_draft,
                        update_invoice)
from .lifecycle import can_delete, can_edit, derive_status
from .payment import PaymentResult, record_payment, recompute_invoice_payments
from .reconcile import (AffectedAggregate, RefreshResult, refresh_affected,
                        refresh_everything, repair_flagged)
from .rates import (create_rate, deactivate_rate, get_rate, list_rates,
                    price_lines, rates_by_category, update_rate)
from .rollup import ClientTotals, refresh_client
from .sequencer import (format_document_number, next_invoice_number,
                        next_receipt_number)
from .snapshots import invoice_snapshot, receipt_snapshot
from .station import get_station, update_station
