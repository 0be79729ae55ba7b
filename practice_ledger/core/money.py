"""
Exact decimal helpers for currency amounts and percentage rates.
Rounding happens only when a percentage is applied (half-up, 2 places).
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Union

from practice_ledger.core.errors import ValidationError


CENT = Decimal('0.01')
HUNDRED = Decimal('100')
ZERO = Decimal('0.00')

Number = Union[Decimal, int, str, float]


def _to_decimal(value: Number, label: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f'{label} must be a number, got {value!r}')
    if isinstance(value, float):
        # go through repr so 0.1 stays 0.1
        value = str(value)
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(f'{label} is not a valid decimal: {value!r}') from e
    if not result.is_finite():
        raise ValidationError(f'{label} must be finite: {value!r}')
    return result


def money(value: Number) -> Decimal:
    """Coerce a value to a monetary Decimal without rounding it."""
    return _to_decimal(value, 'Amount')


def percentage(value: Number) -> Decimal:
    """
    Coerce a value to a percentage rate.

    Raises:
        ValidationError: if the rate falls outside [0, 100]
    """
    rate = _to_decimal(value, 'Percentage')
    if rate < 0 or rate > HUNDRED:
        raise ValidationError(f'Percentage must be between 0 and 100, got {rate}')
    return rate


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def add(a: Decimal, b: Decimal) -> Decimal:
    return a + b


def subtract(a: Decimal, b: Decimal) -> Decimal:
    """Plain difference; the result may be negative and callers check the sign."""
    return a - b


def total(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, Decimal('0'))


def multiply_quantity(unit_price: Decimal, quantity: Decimal) -> Decimal:
    return unit_price * quantity


def apply_percentage(amount: Decimal, rate: Decimal) -> Decimal:
    """
    Compute ``amount * rate / 100`` rounded half-up to cents.

    A zero rate yields exactly ``0.00``.
    """
    if rate == 0:
        return ZERO
    return quantize(amount * rate / HUNDRED)


def compare(a: Decimal, b: Decimal) -> int:
    """Return -1, 0 or 1 like the classic cmp()."""
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def is_zero(amount: Decimal) -> bool:
    return amount == 0


def is_positive(amount: Decimal) -> bool:
    return amount > 0


def format_money(amount: Decimal) -> str:
    """Render an amount with two decimals and thousands separators"""
    return f'{quantize(amount):,.2f}'


def with_cents(amount: Decimal) -> Decimal:
    """Pad an amount to at least two decimal places without rounding away digits"""
    if amount.as_tuple().exponent > CENT.as_tuple().exponent:
        return amount.quantize(CENT)
    return amount
