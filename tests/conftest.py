"""
Shared fixtures for the practice ledger tests.
"""
import pytest
from datetime import date, timedelta
from decimal import Decimal

from practice_ledger.core.models import Invoice, LineItem
from practice_ledger.core.status import InvoiceStatus, PaymentMethod
from practice_ledger.core.store import InMemoryInvoiceStore
from practice_ledger.processing.invoicing import InvoiceService


TODAY = date(2025, 3, 20)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def store():
    return InMemoryInvoiceStore()


@pytest.fixture
def draft_invoice():
    """Two services at 2500 and 1500 with 18% tax: total 4720.00"""
    invoice = Invoice(
        number="INV-2025-0001",
        client_ref="CLIENT-001",
        invoice_date=date(2025, 3, 1),
        due_date=date(2025, 3, 16),
        tax_percentage=Decimal("18"),
    )
    invoice.add_item(LineItem(description="GST Return Filing", unit_price=Decimal("2500.00")))
    invoice.add_item(LineItem(description="TDS Return Filing", unit_price=Decimal("1500.00")))
    return invoice


@pytest.fixture
def sent_invoice(store, draft_invoice):
    """Scenario invoice, sent and saved in the store"""
    draft_invoice.send()
    return store.save(draft_invoice)


@pytest.fixture
def service(store):
    return InvoiceService(store)


@pytest.fixture
def invoice_factory(store):
    """
    Build and save an invoice in a given lifecycle state.

    Usage:
        invoice_factory("INV-2025-0002", InvoiceStatus.SENT, due_date=...)
    """
    def make(number, status=InvoiceStatus.DRAFT, due_date=TODAY - timedelta(days=1),
             client_ref="CLIENT-001", unit_price="1000.00", paid=None):
        invoice = Invoice(
            number=number,
            client_ref=client_ref,
            invoice_date=due_date - timedelta(days=15),
            due_date=due_date,
            tax_percentage=Decimal("18"),
        )
        invoice.add_item(LineItem(description="Bookkeeping", unit_price=Decimal(unit_price)))

        if status == InvoiceStatus.CANCELLED:
            invoice.cancel("Raised in error")
        elif status != InvoiceStatus.DRAFT:
            invoice.send()

        if status == InvoiceStatus.PARTIALLY_PAID:
            invoice.apply_payment(paid or Decimal("100.00"), PaymentMethod.CASH, None, invoice.invoice_date)
        elif status == InvoiceStatus.PAID:
            invoice.apply_payment(invoice.total_amount, PaymentMethod.CASH, None, invoice.invoice_date)
        elif status == InvoiceStatus.OVERDUE:
            invoice.mark_overdue(due_date + timedelta(days=1))

        assert invoice.status == status
        return store.save(invoice)

    return make
