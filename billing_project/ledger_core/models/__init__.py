from .client import Client
from .invoice import Invoice, ServiceLine
from .payment import Payment
from .rate import Rate
from .station import Station
