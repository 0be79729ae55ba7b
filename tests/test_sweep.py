"""
Unit tests for the overdue sweep.
"""
import pytest
from datetime import timedelta
from decimal import Decimal

from practice_ledger.core.errors import ConcurrencyError
from practice_ledger.core.models import Invoice, LineItem
from practice_ledger.core.payments import PaymentRecorder
from practice_ledger.core.status import InvoiceStatus, PaymentMethod
from practice_ledger.core.store import InMemoryInvoiceStore
from practice_ledger.processing.sweep import OverdueSweeper


class ConflictingStore(InMemoryInvoiceStore):
    """Store whose save loses a race for one invoice number"""

    def __init__(self, conflicting_number):
        super().__init__()
        self.conflicting_number = conflicting_number

    def save(self, invoice):
        if invoice.number == self.conflicting_number and invoice.status == InvoiceStatus.OVERDUE:
            raise ConcurrencyError(f"Invoice {invoice.number} was modified concurrently")
        return super().save(invoice)


@pytest.fixture
def sweeper(store):
    return OverdueSweeper(store)


class TestOverdueSweep:

    def test_past_due_sent_invoice_becomes_overdue(self, sweeper, store, invoice_factory, today):
        invoice = invoice_factory("INV-2025-0001", InvoiceStatus.SENT)

        result = sweeper.sweep(today)

        assert result.marked_overdue == ["INV-2025-0001"]
        assert result.marked_count == 1
        assert store.get(invoice.id).status == InvoiceStatus.OVERDUE

    def test_partially_paid_becomes_overdue(self, sweeper, store, invoice_factory, today):
        invoice = invoice_factory("INV-2025-0001", InvoiceStatus.PARTIALLY_PAID)

        sweeper.sweep(today)

        stored = store.get(invoice.id)
        assert stored.status == InvoiceStatus.OVERDUE
        assert stored.paid_amount == Decimal("100.00")

    def test_due_today_is_not_overdue(self, sweeper, store, invoice_factory, today):
        invoice = invoice_factory("INV-2025-0001", InvoiceStatus.SENT, due_date=today)

        result = sweeper.sweep(today)

        assert result.examined == 0
        assert store.get(invoice.id).status == InvoiceStatus.SENT

    def test_draft_is_skipped(self, sweeper, store, invoice_factory, today):
        invoice = invoice_factory("INV-2025-0001", InvoiceStatus.DRAFT)

        result = sweeper.sweep(today)

        assert result.examined == 1
        assert result.skipped == 1
        assert result.marked_overdue == []
        assert store.get(invoice.id).status == InvoiceStatus.DRAFT

    @pytest.mark.parametrize("status", [InvoiceStatus.PAID, InvoiceStatus.CANCELLED])
    def test_settled_invoices_untouched(self, sweeper, store, invoice_factory, today, status):
        invoice = invoice_factory("INV-2025-0001", status, due_date=today - timedelta(days=60))

        result = sweeper.sweep(today)

        assert result.examined == 0
        assert store.get(invoice.id).status == status

    def test_second_run_is_a_no_op(self, sweeper, store, invoice_factory, today):
        invoice_factory("INV-2025-0001", InvoiceStatus.SENT)
        invoice_factory("INV-2025-0002", InvoiceStatus.PARTIALLY_PAID)
        sweeper.sweep(today)
        versions = [inv.version for inv in store.all()]

        result = sweeper.sweep(today)

        assert result.marked_overdue == []
        assert result.already_overdue == 2
        assert [inv.version for inv in store.all()] == versions

    def test_overdue_is_never_reverted(self, sweeper, store, invoice_factory, today):
        invoice = invoice_factory("INV-2025-0001", InvoiceStatus.OVERDUE)

        # Sweeping with an earlier date does not bring it back to SENT
        sweeper.sweep(invoice.due_date - timedelta(days=5))

        assert store.get(invoice.id).status == InvoiceStatus.OVERDUE

    def test_partial_payment_on_overdue_then_overdue_again(self, sweeper, store, invoice_factory, today):
        invoice = invoice_factory("INV-2025-0001", InvoiceStatus.OVERDUE)

        paid = PaymentRecorder(store).record_payment(invoice, "180.00", PaymentMethod.CASH, today=today)
        assert paid.status == InvoiceStatus.PARTIALLY_PAID

        result = sweeper.sweep(today)

        assert result.marked_overdue == ["INV-2025-0001"]
        assert store.get(invoice.id).status == InvoiceStatus.OVERDUE

    def test_callback_and_timing(self, sweeper, invoice_factory, today):
        invoice_factory("INV-2025-0001", InvoiceStatus.SENT)
        invoice_factory("INV-2025-0002", InvoiceStatus.SENT, due_date=today + timedelta(days=3))
        seen = []

        result = sweeper.sweep(today, callback=lambda inv: seen.append(inv.number))

        assert seen == ["INV-2025-0001"]
        assert result.run_date == today
        assert result.processing_time_ms is not None

    def test_failed_save_does_not_stop_the_sweep(self, today):
        store = ConflictingStore("INV-2025-0002")
        sweeper = OverdueSweeper(store)
        for number in ("INV-2025-0001", "INV-2025-0002", "INV-2025-0003"):
            invoice = Invoice(number=number, client_ref="C1",
                              invoice_date=today - timedelta(days=20),
                              due_date=today - timedelta(days=5))
            invoice.add_item(LineItem(description="Retainer", unit_price="500"))
            invoice.send()
            store.save(invoice)

        result = sweeper.sweep(today)

        assert result.examined == 3
        assert result.failed == 1
        assert result.marked_overdue == ["INV-2025-0001", "INV-2025-0003"]
        assert [inv.status for inv in store.all()] == [
            InvoiceStatus.OVERDUE, InvoiceStatus.SENT, InvoiceStatus.OVERDUE,
        ]
