"""
Invoice status lifecycle.
Every status change goes through the transition table below.
"""
from enum import Enum
from typing import Dict, FrozenSet

from practice_ledger.core.errors import InvalidStateError


class InvoiceStatus(str, Enum):
    """Lifecycle states of an invoice"""
    DRAFT = 'DRAFT'
    SENT = 'SENT'
    PARTIALLY_PAID = 'PARTIALLY_PAID'
    PAID = 'PAID'
    OVERDUE = 'OVERDUE'
    CANCELLED = 'CANCELLED'

    @property
    def display_name(self) -> str:
        return _STATUS_NAMES[self]

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


class PaymentMethod(str, Enum):
    """Accepted ways of settling an invoice"""
    CASH = 'CASH'
    CHEQUE = 'CHEQUE'
    BANK_TRANSFER = 'BANK_TRANSFER'
    UPI = 'UPI'
    CREDIT_CARD = 'CREDIT_CARD'
    DEBIT_CARD = 'DEBIT_CARD'
    ONLINE = 'ONLINE'

    @property
    def display_name(self) -> str:
        return _METHOD_NAMES[self]


_STATUS_NAMES = {
    InvoiceStatus.DRAFT: 'Draft',
    InvoiceStatus.SENT: 'Sent',
    InvoiceStatus.PARTIALLY_PAID: 'Partially Paid',
    InvoiceStatus.PAID: 'Paid',
    InvoiceStatus.OVERDUE: 'Overdue',
    InvoiceStatus.CANCELLED: 'Cancelled',
}

_METHOD_NAMES = {
    PaymentMethod.CASH: 'Cash',
    PaymentMethod.CHEQUE: 'Cheque',
    PaymentMethod.BANK_TRANSFER: 'Bank Transfer',
    PaymentMethod.UPI: 'UPI',
    PaymentMethod.CREDIT_CARD: 'Credit Card',
    PaymentMethod.DEBIT_CARD: 'Debit Card',
    PaymentMethod.ONLINE: 'Online Payment',
}

TERMINAL_STATES = frozenset({InvoiceStatus.PAID, InvoiceStatus.CANCELLED})

# Statuses counted as money still owed to the firm
OPEN_STATES = frozenset({
    InvoiceStatus.SENT,
    InvoiceStatus.PARTIALLY_PAID,
    InvoiceStatus.OVERDUE,
})

TRANSITIONS: Dict[InvoiceStatus, FrozenSet[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({
        InvoiceStatus.SENT,
        InvoiceStatus.PARTIALLY_PAID,
        InvoiceStatus.PAID,
        InvoiceStatus.CANCELLED,
    }),
    InvoiceStatus.SENT: frozenset({
        InvoiceStatus.PARTIALLY_PAID,
        InvoiceStatus.PAID,
        InvoiceStatus.OVERDUE,
        InvoiceStatus.CANCELLED,
    }),
    InvoiceStatus.PARTIALLY_PAID: frozenset({
        InvoiceStatus.PARTIALLY_PAID,
        InvoiceStatus.PAID,
        InvoiceStatus.OVERDUE,
        InvoiceStatus.CANCELLED,
    }),
    InvoiceStatus.OVERDUE: frozenset({
        InvoiceStatus.PARTIALLY_PAID,
        InvoiceStatus.PAID,
        InvoiceStatus.CANCELLED,
    }),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.CANCELLED: frozenset(),
}


def can_transition(current: InvoiceStatus, target: InvoiceStatus) -> bool:
    return target in TRANSITIONS[current]


def assert_transition(current: InvoiceStatus, target: InvoiceStatus) -> None:
    """
    Check that moving from ``current`` to ``target`` is allowed.

    Raises:
        InvalidStateError: if the transition table does not permit it
    """
    if not can_transition(current, target):
        raise InvalidStateError(
            f'Transition not allowed: {current.value} -> {target.value}'
        )
