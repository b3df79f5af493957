"""Ledger error taxonomy.

Every error is a local, recoverable condition reported to the caller.
A raised error means nothing was written.
"""


class LedgerError(Exception):
    """Base ledger error."""

    def __init__(self, message: str, code: str):
        """Initialize error."""
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(LedgerError):
    """Unknown tenant, bill, payment or unit identifier."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, "not_found")


class InvalidStateError(LedgerError):
    """Operation does not apply to the record's current state."""

    def __init__(self, message: str = "Invalid state"):
        super().__init__(message, "invalid_state")


class DuplicatePaymentError(LedgerError):
    """Payment refused by the one-payment-per-period rule."""

    def __init__(self, message: str = "Payment already made for this period"):
        super().__init__(message, "duplicate_payment")


class ValidationError(LedgerError):
    """Malformed amount, month, or missing required field."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, "validation_error")


def error_response(error: LedgerError) -> dict:
    """Create a standardized error payload for presentation layers."""
    return {
        "error": {
            "code": error.code,
            "message": error.message,
        }
    }


__all__ = [
    "LedgerError",
    "NotFoundError",
    "InvalidStateError",
    "DuplicatePaymentError",
    "ValidationError",
    "error_response",
]
