"""
Invoice service.
Entry point used by the CLI and library callers: creates invoices, edits drafts and
drives status changes, persisting through an InvoiceStore.
"""
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Iterable, List, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator

from practice_ledger.config import BillingSettings
from practice_ledger.core import money
from practice_ledger.core.errors import ValidationError
from practice_ledger.core.models import Invoice, LineItem
from practice_ledger.core.numbering import InvoiceNumberGenerator
from practice_ledger.core.payments import PaymentRecorder
from practice_ledger.core.status import OPEN_STATES, InvoiceStatus, PaymentMethod
from practice_ledger.core.store import InvoiceStore
from practice_ledger.processing.sweep import OverdueSweeper, SweepResult
from practice_ledger.reports.generator import InvoiceStatistics, compute_statistics
from practice_ledger.utils.decorators import audit_log, measure_performance


logger = logging.getLogger(__name__)

T = TypeVar('T')


class BillableItem(BaseModel):
    """
    Something to put on an invoice.

    A completed client service becomes quantity 1 at its quoted price;
    manual entries may carry any quantity.
    """
    description: str = Field(..., min_length=1, max_length=500)
    quantity: Decimal = Field(default=Decimal('1'), ge=0)
    unit_price: Decimal = Field(..., ge=0)

    @field_validator('quantity', 'unit_price', mode='before')
    def coerce_decimal(cls, v):
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    def to_line_item(self) -> LineItem:
        return LineItem(
            description=self.description,
            quantity=self.quantity,
            unit_price=self.unit_price,
        )


class InvoiceService:
    """
    Invoice use cases on top of a store.

    Each mutating method loads the invoice, applies the change to that
    copy and saves it; a failure anywhere leaves the stored invoice as it
    was. Dates are always supplied by the caller.
    """

    def __init__(self, store: InvoiceStore, settings: Optional[BillingSettings] = None):
        self.store = store
        self.settings = settings or BillingSettings()
        self.numbers = InvoiceNumberGenerator(store, prefix=self.settings.number_prefix)
        self.payments = PaymentRecorder(store)
        self.sweeper = OverdueSweeper(store)

    # ------------------------------------------------------------------
    # Creation

    @measure_performance
    @audit_log
    def create_invoice(self,
                       client_ref: str,
                       items: Iterable[BillableItem],
                       today: date,
                       tax_percentage=None,
                       discount_percentage=None,
                       payment_term_days: Optional[int] = None,
                       notes: Optional[str] = None,
                       terms_and_conditions: Optional[str] = None) -> Invoice:
        """
        Create and save a DRAFT invoice for a client.

        Args:
            client_ref: Client the invoice is addressed to
            items: Billable items, added in the given order
            today: Invoice date; also picks the numbering year
            tax_percentage: Defaults to the configured tax rate
            discount_percentage: Defaults to the configured discount
            payment_term_days: Days until due; defaults to the configured term
            notes: Free-form notes printed on the invoice
            terms_and_conditions: Terms printed on the invoice

        Returns:
            The saved invoice

        Raises:
            ValidationError: no items, or an out-of-range rate or term
        """
        items = list(items)
        if not items:
            raise ValidationError('Please select at least one item to invoice')

        term = (payment_term_days if payment_term_days is not None
                else self.settings.default_payment_term_days)
        if term < 0:
            raise ValidationError(f'Payment term cannot be negative: {term}')

        tax = (money.percentage(tax_percentage) if tax_percentage is not None
               else self.settings.default_tax_percentage)
        discount = (money.percentage(discount_percentage) if discount_percentage is not None
                    else self.settings.default_discount_percentage)

        invoice = Invoice(
            number=self.numbers.next(today.year),
            client_ref=client_ref,
            invoice_date=today,
            due_date=today + timedelta(days=term),
            tax_percentage=tax,
            discount_percentage=discount,
            notes=notes,
            terms_and_conditions=terms_and_conditions,
        )
        for item in items:
            invoice.add_item(item.to_line_item())

        saved = self.store.save(invoice)
        logger.info(
            f"Created invoice {saved.number} for {client_ref}: "
            f"{len(saved.items)} items, subtotal {saved.subtotal}, "
            f"tax {saved.tax_amount}, total {saved.total_amount}"
        )
        return saved

    # ------------------------------------------------------------------
    # Queries

    def get_invoice(self, invoice_id: int) -> Invoice:
        return self.store.get(invoice_id)

    def list_invoices(self, status: Optional[InvoiceStatus] = None,
                      client_ref: Optional[str] = None) -> List[Invoice]:
        """Matching invoices, newest invoice date first"""
        invoices = self.store.find(status=status, client_ref=client_ref)
        return sorted(invoices, key=lambda inv: (inv.invoice_date, inv.id), reverse=True)

    def outstanding_for_client(self, client_ref: str) -> Decimal:
        invoices = self.store.find(statuses=OPEN_STATES, client_ref=client_ref)
        return money.total(inv.outstanding_amount for inv in invoices)

    # ------------------------------------------------------------------
    # Draft edits

    def _change(self, invoice_id: int, change: Callable[[Invoice], T]) -> Invoice:
        invoice = self.store.get(invoice_id)
        change(invoice)
        return self.store.save(invoice)

    def add_item(self, invoice_id: int, item: BillableItem) -> Invoice:
        return self._change(invoice_id, lambda inv: inv.add_item(item.to_line_item()))

    def remove_item(self, invoice_id: int, order: int) -> Invoice:
        return self._change(invoice_id, lambda inv: inv.remove_item(inv.find_item(order)))

    def update_item(self, invoice_id: int, order: int, quantity=None,
                    unit_price=None, description: Optional[str] = None) -> Invoice:
        return self._change(
            invoice_id,
            lambda inv: inv.update_item(inv.find_item(order), quantity=quantity,
                                        unit_price=unit_price, description=description),
        )

    def set_rates(self, invoice_id: int, tax_percentage=None,
                  discount_percentage=None) -> Invoice:
        def change(inv: Invoice):
            if tax_percentage is not None:
                inv.set_tax_percentage(tax_percentage)
            if discount_percentage is not None:
                inv.set_discount_percentage(discount_percentage)

        return self._change(invoice_id, change)

    # ------------------------------------------------------------------
    # Lifecycle

    @audit_log
    def send_invoice(self, invoice_id: int) -> Invoice:
        saved = self._change(invoice_id, lambda inv: inv.send())
        logger.info(f"Invoice {saved.number} marked as SENT")
        return saved

    @audit_log
    def cancel_invoice(self, invoice_id: int, reason: Optional[str] = None) -> Invoice:
        saved = self._change(invoice_id, lambda inv: inv.cancel(reason))
        logger.info(f"Invoice {saved.number} cancelled")
        return saved

    def record_payment(self, invoice_id: int, amount, method: PaymentMethod,
                       reference: Optional[str] = None, *, today: date) -> Invoice:
        return self.payments.record_payment(invoice_id, amount, method, reference, today=today)

    def mark_overdue(self, today: date) -> SweepResult:
        return self.sweeper.sweep(today)

    def statistics(self, today: date) -> InvoiceStatistics:
        """Dashboard figures as of ``today``"""
        return compute_statistics(self.store.all(), today)
