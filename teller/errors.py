"""Exception hierarchy for the teller ledger."""


class TellerError(Exception):
    """Base exception for all teller errors."""


class LedgerError(TellerError, ValueError):
    """Base for expected domain failures; mapped to a 4xx response."""

    http_status = 400


class NotFoundError(LedgerError):
    """Raised when a referenced customer, account or transaction does not exist."""

    http_status = 404


class InvalidArgumentError(LedgerError):
    """Raised when required input is missing or malformed."""


class ConflictError(LedgerError):
    """Raised when an operation would break a deletion or uniqueness rule."""


class InsufficientFundsError(LedgerError):
    """Raised when a debit exceeds the account balance."""


class StorageError(TellerError):
    """Raised when a document cannot be read or written."""
