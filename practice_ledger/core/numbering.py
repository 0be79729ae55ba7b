"""
Sequential, year-scoped invoice numbers: PREFIX-YEAR-NNNN.
The next number is derived from the latest stored invoice; no counter
is kept in memory.
"""
import logging
from typing import NamedTuple, Optional, TYPE_CHECKING

from practice_ledger.core.errors import ParseError

if TYPE_CHECKING:
    from practice_ledger.core.store import InvoiceStore


logger = logging.getLogger(__name__)

DEFAULT_PREFIX = 'INV'


class InvoiceNumber(NamedTuple):
    prefix: str
    year: int
    sequence: int

    def __str__(self) -> str:
        return format_invoice_number(self.prefix, self.year, self.sequence)


def format_invoice_number(prefix: str, year: int, sequence: int) -> str:
    """Zero-pad to four digits; longer sequences are kept whole."""
    return f'{prefix}-{year}-{sequence:04d}'


def parse_invoice_number(number: str) -> InvoiceNumber:
    """
    Split a stored invoice number into its parts.

    Raises:
        ParseError: if the number is not PREFIX-YEAR-SEQ with numeric
            year and sequence
    """
    if not number:
        raise ParseError('Invoice number is empty')

    parts = number.split('-')
    if len(parts) != 3:
        raise ParseError(f'Invoice number must have 3 parts: {number}')

    prefix, year, sequence = parts
    if not prefix or not year.isdecimal() or not sequence.isdecimal():
        raise ParseError(f'Malformed invoice number: {number}')

    return InvoiceNumber(prefix=prefix, year=int(year), sequence=int(sequence))


def next_invoice_number(latest: Optional[str], current_year: int,
                        prefix: str = DEFAULT_PREFIX) -> str:
    """
    Compute the number following ``latest`` for ``current_year``.

    The sequence restarts at 1 when there is no previous invoice, when the
    previous one belongs to another year, or when it cannot be parsed.

    Examples:
        >>> next_invoice_number('INV-2025-0041', 2025)
        'INV-2025-0042'
        >>> next_invoice_number('INV-2024-0007', 2025)
        'INV-2025-0001'
    """
    sequence = 1

    if latest is not None:
        try:
            parsed = parse_invoice_number(latest)
        except ParseError as e:
            logger.warning(f'Error parsing invoice number {latest!r}: {e}')
        else:
            if parsed.year == current_year:
                sequence = parsed.sequence + 1

    return format_invoice_number(prefix, current_year, sequence)


class InvoiceNumberGenerator:
    """
    Produces invoice numbers from the most recently created invoice in a store.
    """

    def __init__(self, store: 'InvoiceStore', prefix: str = DEFAULT_PREFIX):
        self.store = store
        self.prefix = prefix

    def next(self, current_year: int) -> str:
        latest = self.store.latest()
        latest_number = latest.number if latest is not None else None

        number = next_invoice_number(latest_number, current_year, self.prefix)
        logger.debug(f'Next invoice number after {latest_number}: {number}')
        return number
