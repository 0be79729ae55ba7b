"""
Practice Ledger

Invoice lifecycle and ledger engine for a small professional-services practice.
"""

__version__ = '1.0.0'
__author__ = 'Your Name'
__license__ = 'MIT'

from practice_ledger.core import (
    Invoice,
    LineItem,
    InvoiceStatus,
    PaymentMethod,
    InMemoryInvoiceStore,
    JSONDirectoryStore,
    PaymentRecorder,
)

from practice_ledger.config import BillingSettings

from practice_ledger.processing import (
    BillableItem,
    InvoiceService,
    OverdueSweeper,
)

__all__ = [
    'Invoice',
    'LineItem',
    'InvoiceStatus',
    'PaymentMethod',
    'InMemoryInvoiceStore',
    'JSONDirectoryStore',
    'PaymentRecorder',
    'BillingSettings',
    'BillableItem',
    'InvoiceService',
    'OverdueSweeper',
]
