"""Practice Ledger - Core Package"""

from practice_ledger.core.errors import (
    LedgerError,
    ValidationError,
    NotFoundError,
    InvalidStateError,
    ParseError,
    ConcurrencyError,
    ConfigurationError,
)
from practice_ledger.core.status import InvoiceStatus, PaymentMethod
from practice_ledger.core.models import Invoice, LineItem, PaymentRecord
from practice_ledger.core.numbering import InvoiceNumberGenerator, next_invoice_number, parse_invoice_number
from practice_ledger.core.store import InvoiceStore, InMemoryInvoiceStore, JSONDirectoryStore
from practice_ledger.core.payments import PaymentRecorder

__all__ = [
    'LedgerError',
    'ValidationError',
    'NotFoundError',
    'InvalidStateError',
    'ParseError',
    'ConcurrencyError',
    'ConfigurationError',
    'InvoiceStatus',
    'PaymentMethod',
    'Invoice',
    'LineItem',
    'PaymentRecord',
    'InvoiceNumberGenerator',
    'next_invoice_number',
    'parse_invoice_number',
    'InvoiceStore',
    'InMemoryInvoiceStore',
    'JSONDirectoryStore',
    'PaymentRecorder',
]
