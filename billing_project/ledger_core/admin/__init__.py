from .actions import (cancel_invoices, deactivate_rates, recompute_invoices,
                      refresh_client_totals)
from .client import ClientAdmin
from .inlines import PaymentInline, ServiceLineInline
from .invoice import InvoiceAdmin
from .payment import PaymentAdmin
from .rate import RateAdmin
from .ReadOnly import ReadOnlyAdmin
from .station import StationAdmin
