"""
Payment recording.
Validates a payment, applies it to the invoice and persists the result.
"""
import logging
from datetime import date
from typing import Optional, Union

from practice_ledger.core.errors import ValidationError
from practice_ledger.core.models import Invoice
from practice_ledger.core.status import PaymentMethod
from practice_ledger.core.store import InvoiceStore
from practice_ledger.utils.decorators import audit_log, measure_performance


logger = logging.getLogger(__name__)


def to_payment_method(method: Union[PaymentMethod, str]) -> PaymentMethod:
    if isinstance(method, PaymentMethod):
        return method
    try:
        return PaymentMethod(str(method).upper())
    except ValueError as e:
        allowed = ', '.join(m.value for m in PaymentMethod)
        raise ValidationError(f'Unknown payment method {method!r}; expected one of {allowed}') from e


class PaymentRecorder:
    """
    Applies payments against invoices held in a store.

    The payment is applied to a working copy; only a successful save makes
    it visible, so a rejected payment leaves both the store and the
    caller's invoice unchanged.
    """

    def __init__(self, store: InvoiceStore):
        self.store = store

    @measure_performance
    @audit_log
    def record_payment(self,
                       invoice: Union[Invoice, int],
                       amount,
                       method: Union[PaymentMethod, str],
                       reference: Optional[str] = None,
                       *,
                       today: date) -> Invoice:
        """
        Record a payment received on ``today``.

        Args:
            invoice: Invoice (or its id) to pay
            amount: Amount received, must be positive and at most the outstanding amount
            method: Payment method
            reference: Transaction id, cheque number, etc.
            today: Payment date, supplied by the caller

        Returns:
            The saved invoice with updated paid amount and status

        Raises:
            NotFoundError: unknown invoice id
            ValidationError: non-positive amount or overpayment
            InvalidStateError: invoice is PAID or CANCELLED
        """
        working = (self.store.get(invoice) if isinstance(invoice, int)
                   else invoice.model_copy(deep=True))
        payment_method = to_payment_method(method)

        record = working.apply_payment(amount, payment_method, reference, today)
        saved = self.store.save(working)

        logger.info(
            f"Payment of {record.amount} ({payment_method.value}) recorded on "
            f"{saved.number}: status {saved.status.value}, "
            f"outstanding {saved.outstanding_amount}"
        )
        return saved
