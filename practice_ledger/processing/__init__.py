"""Practice Ledger - Processing Package"""

from practice_ledger.processing.sweep import OverdueSweeper, SweepResult
from practice_ledger.processing.invoicing import BillableItem, InvoiceService

__all__ = [
    'OverdueSweeper',
    'SweepResult',
    'BillableItem',
    'InvoiceService',
]
