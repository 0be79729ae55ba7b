"""Exceptions raised by the invoice ledger."""


class LedgerError(Exception):
    """Base exception for the practice ledger."""

    pass


class ValidationError(LedgerError, ValueError):
    """Raised when input is malformed or out of range."""

    pass


class NotFoundError(LedgerError):
    """Raised when a referenced invoice or line item does not exist."""

    pass


class InvalidStateError(LedgerError):
    """Raised when an operation is not allowed in the invoice's current status."""

    pass


class ParseError(LedgerError):
    """Raised when a stored invoice number cannot be parsed."""

    pass


class ConcurrencyError(LedgerError):
    """Raised when saving an invoice whose stored version has moved on."""

    pass


class ConfigurationError(LedgerError):
    """Raised when billing settings are invalid."""

    pass
