from django.core.exceptions import ObjectDoesNotExist, ValidationError


class NotFoundError(ObjectDoesNotExist):
    """Raised when a referenced Client, Invoice, Payment or Station is absent."""

    def __init__(self, model_name, pk):
        self.model_name = model_name
        self.pk = pk
        super().__init__(f"{model_name} {pk} not found")


class InvalidStateError(ValidationError):
    """Raised when an edit/delete/pay is attempted outside the allowed lifecycle states."""
    pass


class OverpaymentError(ValidationError):
    """Raised when a payment exceeds the invoice's current outstanding balance."""

    def __init__(self, amount, outstanding):
        self.amount = amount
        self.outstanding = outstanding
        super().__init__(
            f"Payment amount ({amount}) exceeds outstanding balance ({outstanding})",
            code="overpayment",
        )


class SequencingError(Exception):
    """Raised when a document number could not be allocated atomically."""
    pass


class ConsistencyError(Exception):
    """Raised when refreshing derived totals failed after the source write committed.

    The affected aggregates are flagged for repair; ``failures`` lists them.
    """

    def __init__(self, message, failures=()):
        self.failures = list(failures)
        super().__init__(message)
