"""
Overdue sweep.
Batch job that moves unpaid invoices past their due date to OVERDUE.
"""
import logging
import time
from datetime import date
from typing import Callable, List, Optional

from pydantic import BaseModel

from practice_ledger.core.errors import LedgerError
from practice_ledger.core.models import Invoice
from practice_ledger.core.status import InvoiceStatus
from practice_ledger.core.store import InvoiceStore
from practice_ledger.utils.decorators import audit_log, measure_performance


logger = logging.getLogger(__name__)


class SweepResult(BaseModel):
    """Outcome of one sweep run"""
    run_date: date
    examined: int = 0
    marked_overdue: List[str] = []
    already_overdue: int = 0
    skipped: int = 0
    failed: int = 0
    processing_time_ms: Optional[float] = None

    @property
    def marked_count(self) -> int:
        return len(self.marked_overdue)


class OverdueSweeper:
    """
    Marks eligible invoices OVERDUE.

    Running the sweep twice with the same date leaves the second run with
    nothing to do. Invoices are never moved back out of OVERDUE, and DRAFT
    invoices are left alone because they were never issued.
    """

    def __init__(self, store: InvoiceStore):
        self.store = store

    @measure_performance
    @audit_log
    def sweep(self, today: date,
              callback: Optional[Callable[[Invoice], None]] = None) -> SweepResult:
        """
        Args:
            today: Reference date; invoices due strictly before it are eligible
            callback: Optional function called with each invoice marked overdue

        Returns:
            SweepResult with counts and the numbers of newly overdue invoices
        """
        start_time = time.perf_counter()
        result = SweepResult(run_date=today)

        for invoice in self.store.find_overdue(today):
            result.examined += 1

            if invoice.status == InvoiceStatus.OVERDUE:
                result.already_overdue += 1
                continue

            if not invoice.mark_overdue(today):
                result.skipped += 1
                continue

            try:
                saved = self.store.save(invoice)
            except LedgerError as e:
                result.failed += 1
                logger.error(f"Error marking invoice {invoice.number} overdue: {e}")
                continue

            result.marked_overdue.append(saved.number)
            logger.info(f"Marked invoice {saved.number} as OVERDUE (due {saved.due_date})")

            if callback:
                callback(saved)

        elapsed = time.perf_counter() - start_time
        logger.info(
            f"Overdue sweep for {today}: {result.examined} examined, "
            f"{result.marked_count} marked, {result.failed} failed in {elapsed:.3f}s"
        )
        return result
