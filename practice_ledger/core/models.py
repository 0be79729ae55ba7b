"""
Data models for invoices and their line items.
Using Pydantic for validation; the Invoice model is the aggregate that
keeps totals, payments and status consistent.
"""
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from practice_ledger.core import money
from practice_ledger.core.errors import InvalidStateError, NotFoundError, ValidationError
from practice_ledger.core.status import InvoiceStatus, PaymentMethod, assert_transition, can_transition


class LineItem(BaseModel):
    """
    One billable entry: description x quantity x unit price.

    Items are immutable; the owning Invoice swaps in a new item on every
    edit so its totals cannot fall behind.
    """
    model_config = ConfigDict(frozen=True)

    description: str = Field(..., min_length=1, max_length=500)
    quantity: Decimal = Field(default=Decimal('1'), ge=0)
    unit_price: Decimal = Field(..., ge=0)
    order: Optional[int] = Field(default=None, ge=1)

    @field_validator('quantity', 'unit_price', mode='before')
    @classmethod
    def coerce_decimal(cls, v):
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @computed_field
    @property
    def amount(self) -> Decimal:
        return money.multiply_quantity(self.unit_price, self.quantity)


class PaymentRecord(BaseModel):
    """A single installment received against an invoice"""
    model_config = ConfigDict(frozen=True)

    amount: Decimal
    method: PaymentMethod
    reference: Optional[str] = None
    payment_date: date


class Invoice(BaseModel):
    """
    Invoice aggregate.

    Owns its line items, rates, derived totals, payment ledger and status.
    The derived fields (subtotal, discount_amount, tax_amount, total_amount)
    are rewritten by recompute() at the end of every mutating method and on
    construction, so values passed in for them are ignored.
    """
    id: Optional[int] = None
    number: str = Field(..., min_length=1, max_length=50)
    client_ref: str = Field(..., min_length=1)
    invoice_date: date
    due_date: Optional[date] = None

    tax_percentage: Decimal = Decimal('0')
    discount_percentage: Decimal = Decimal('0')

    status: InvoiceStatus = InvoiceStatus.DRAFT
    payment_method: Optional[PaymentMethod] = None
    payment_reference: Optional[str] = None
    payment_date: Optional[date] = None
    paid_amount: Decimal = money.ZERO
    payments: List[PaymentRecord] = Field(default_factory=list)

    items: List[LineItem] = Field(default_factory=list)

    notes: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    version: int = 0

    # Derived
    subtotal: Decimal = money.ZERO
    discount_amount: Decimal = money.ZERO
    tax_amount: Decimal = money.ZERO
    total_amount: Decimal = money.ZERO

    @field_validator('paid_amount', 'tax_percentage', 'discount_percentage', mode='before')
    @classmethod
    def coerce_decimal(cls, v):
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @field_validator('tax_percentage', 'discount_percentage')
    @classmethod
    def validate_rate(cls, v):
        return money.percentage(v)

    @field_validator('paid_amount')
    @classmethod
    def validate_paid(cls, v):
        if v < 0:
            raise ValueError('Paid amount cannot be negative')
        return v

    @model_validator(mode='after')
    def restore_invariants(self):
        # Own copies of the items, never the caller's objects
        next_order = max((item.order or 0 for item in self.items), default=0)
        owned = []
        for item in self.items:
            if item.order is None:
                next_order += 1
                owned.append(item.model_copy(update={'order': next_order}))
            else:
                owned.append(item.model_copy())
        self.items = owned

        self.recompute()
        if self.paid_amount > self.total_amount:
            raise ValueError(
                f'Paid amount {self.paid_amount} exceeds total {self.total_amount}'
            )
        self._check_status_matches_payments()
        return self

    def _check_status_matches_payments(self):
        paid, total = self.paid_amount, self.total_amount
        status = self.status

        if status == InvoiceStatus.PAID and paid < total:
            raise ValueError(f'PAID invoice has only {paid} of {total} paid')
        if status == InvoiceStatus.PARTIALLY_PAID and not (0 < paid < total):
            raise ValueError(
                f'PARTIALLY_PAID invoice must have 0 < paid < total, got {paid} of {total}'
            )
        if status in (InvoiceStatus.DRAFT, InvoiceStatus.SENT) and paid != 0:
            raise ValueError(f'{status.value} invoice cannot carry payments ({paid})')

    # ------------------------------------------------------------------
    # Derived values

    def recompute(self) -> 'Invoice':
        """Rewrite every derived total from the line items and rates."""
        self.subtotal = money.total(item.amount for item in self.items)
        self.discount_amount = money.apply_percentage(self.subtotal, self.discount_percentage)
        taxable = money.subtract(self.subtotal, self.discount_amount)
        self.tax_amount = money.apply_percentage(taxable, self.tax_percentage)
        self.total_amount = money.add(taxable, self.tax_amount)
        return self

    @property
    def outstanding_amount(self) -> Decimal:
        return money.subtract(self.total_amount, self.paid_amount)

    @property
    def is_partially_paid(self) -> bool:
        return money.is_positive(self.paid_amount) and self.paid_amount < self.total_amount

    def is_overdue(self, today: date) -> bool:
        if self.status.is_terminal or self.due_date is None:
            return False
        return self.due_date < today

    # ------------------------------------------------------------------
    # Line items

    def _ensure_editable(self):
        if self.status != InvoiceStatus.DRAFT:
            raise InvalidStateError(
                f'Invoice {self.number} is {self.status.value}; '
                f'only DRAFT invoices can be edited'
            )

    def _index_of(self, item: LineItem) -> int:
        for idx, existing in enumerate(self.items):
            if existing is item:
                return idx
        raise NotFoundError(f'Line item not found on invoice {self.number}: {item.description}')

    def find_item(self, order: int) -> LineItem:
        for item in self.items:
            if item.order == order:
                return item
        raise NotFoundError(f'Invoice {self.number} has no line item #{order}')

    def add_item(self, item: LineItem) -> LineItem:
        """
        Append a copy of a line item and recompute totals.

        An item without an order gets the next free position; an explicit
        order must not clash with an existing item. Returns the copy held
        by this invoice.
        """
        self._ensure_editable()

        taken = {existing.order for existing in self.items if existing.order is not None}
        if item.order is None:
            owned = item.model_copy(update={'order': max(taken, default=0) + 1})
        elif item.order in taken:
            raise ValidationError(f'Line item order {item.order} is already used')
        else:
            owned = item.model_copy()

        self.items.append(owned)
        self.recompute()
        return owned

    def remove_item(self, item: LineItem) -> LineItem:
        self._ensure_editable()
        idx = self._index_of(item)
        removed = self.items.pop(idx)
        self.recompute()
        return removed

    def update_item(self, item: LineItem, quantity=None, unit_price=None,
                    description: Optional[str] = None) -> LineItem:
        """
        Change an item's quantity, price or description in one step.

        The item is replaced in place; use the returned item afterwards.
        """
        self._ensure_editable()
        idx = self._index_of(item)

        changes = {}
        if quantity is not None:
            changes['quantity'] = quantity
        if unit_price is not None:
            changes['unit_price'] = unit_price
        if description is not None:
            changes['description'] = description

        try:
            replacement = LineItem.model_validate(
                {**item.model_dump(exclude={'amount'}), **changes}
            )
        except PydanticValidationError as e:
            raise ValidationError(f'Invalid line item update: {e}') from e

        self.items[idx] = replacement
        self.recompute()
        return replacement

    def set_quantity(self, item: LineItem, quantity) -> LineItem:
        return self.update_item(item, quantity=quantity)

    def set_unit_price(self, item: LineItem, unit_price) -> LineItem:
        return self.update_item(item, unit_price=unit_price)

    def set_tax_percentage(self, rate) -> 'Invoice':
        self._ensure_editable()
        self.tax_percentage = money.percentage(rate)
        return self.recompute()

    def set_discount_percentage(self, rate) -> 'Invoice':
        self._ensure_editable()
        self.discount_percentage = money.percentage(rate)
        return self.recompute()

    # ------------------------------------------------------------------
    # Status transitions

    def _transition(self, target: InvoiceStatus):
        assert_transition(self.status, target)
        self.status = target

    def send(self) -> 'Invoice':
        if self.status != InvoiceStatus.DRAFT:
            raise InvalidStateError(
                f'Only DRAFT invoices can be sent; {self.number} is {self.status.value}'
            )
        self._transition(InvoiceStatus.SENT)
        return self

    def apply_payment(self, amount, method: PaymentMethod,
                      reference: Optional[str], payment_date: date) -> PaymentRecord:
        """
        Add a payment to the ledger and move to PAID or PARTIALLY_PAID.

        Raises:
            InvalidStateError: invoice is PAID or CANCELLED
            ValidationError: amount is not positive or exceeds the outstanding amount
        """
        if self.status.is_terminal:
            raise InvalidStateError(
                f'Cannot record payment for {self.status.value} invoice {self.number}'
            )

        amount = money.money(amount)
        if not money.is_positive(amount):
            raise ValidationError('Payment amount must be greater than zero')

        outstanding = self.outstanding_amount
        if amount > outstanding:
            raise ValidationError(
                f'Payment amount ({amount}) exceeds outstanding amount ({outstanding})'
            )

        new_paid = money.add(self.paid_amount, amount)
        target = (InvoiceStatus.PAID if new_paid >= self.total_amount
                  else InvoiceStatus.PARTIALLY_PAID)
        self._transition(target)

        record = PaymentRecord(
            amount=amount,
            method=method,
            reference=reference,
            payment_date=payment_date,
        )
        self.paid_amount = new_paid
        self.payment_method = method
        self.payment_reference = reference
        self.payment_date = payment_date
        self.payments.append(record)
        return record

    def mark_overdue(self, today: date) -> bool:
        """
        Move a sent or partially paid invoice past its due date to OVERDUE.

        Returns True only when the status actually changed.
        """
        if not self.is_overdue(today):
            return False
        if not can_transition(self.status, InvoiceStatus.OVERDUE):
            return False
        self._transition(InvoiceStatus.OVERDUE)
        return True

    def cancel(self, reason: Optional[str] = None) -> 'Invoice':
        if self.status == InvoiceStatus.PAID:
            raise InvalidStateError(f'Cannot cancel a paid invoice: {self.number}')
        self._transition(InvoiceStatus.CANCELLED)

        if reason:
            line = f'Cancellation reason: {reason}'
            self.notes = f'{self.notes}\n{line}' if self.notes else line
        return self
