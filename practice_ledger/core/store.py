"""
Invoice persistence collaborators.
The ledger only talks to the abstract InvoiceStore; an in-memory store
and a JSON-file-per-invoice store are provided.
"""
import logging
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Dict, Generator, Iterable, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from practice_ledger.core.errors import ConcurrencyError, LedgerError, NotFoundError, ValidationError
from practice_ledger.core.models import Invoice
from practice_ledger.core.status import InvoiceStatus


logger = logging.getLogger(__name__)


class InvoiceStore(ABC):
    """
    Storage interface consumed by the ledger.

    Implementations hand out copies: changes to a loaded invoice are only
    visible to other readers after save(). Every save bumps the invoice's
    version and rejects writes based on an older version.
    """

    @abstractmethod
    def _load(self, invoice_id: int) -> Optional[Invoice]:
        """Return the stored invoice or None"""

    @abstractmethod
    def _iter_all(self) -> Iterable[Invoice]:
        """Yield every stored invoice"""

    @abstractmethod
    def _write(self, invoice: Invoice) -> None:
        """Persist an invoice that already has an id"""

    @abstractmethod
    def _next_id(self) -> int:
        """Allocate the next internal sequence id"""

    def get(self, invoice_id: int) -> Invoice:
        """
        Load an invoice by id.

        Raises:
            NotFoundError: if no invoice has that id
        """
        invoice = self._load(invoice_id)
        if invoice is None:
            raise NotFoundError(f'Invoice not found with ID: {invoice_id}')
        return invoice.model_copy(deep=True)

    def all(self) -> List[Invoice]:
        return sorted(
            (inv.model_copy(deep=True) for inv in self._iter_all()),
            key=lambda inv: inv.id,
        )

    def find(self,
             status: Optional[InvoiceStatus] = None,
             statuses: Optional[Iterable[InvoiceStatus]] = None,
             client_ref: Optional[str] = None,
             due_before: Optional[date] = None,
             due_after: Optional[date] = None) -> List[Invoice]:
        """
        Return invoices matching every given predicate, ordered by id.

        Args:
            status: exact status
            statuses: any of these statuses
            client_ref: owning client
            due_before: due date strictly before this date
            due_after: due date strictly after this date
        """
        wanted = set(statuses) if statuses is not None else None
        matches = []

        for invoice in self.all():
            if status is not None and invoice.status != status:
                continue
            if wanted is not None and invoice.status not in wanted:
                continue
            if client_ref is not None and invoice.client_ref != client_ref:
                continue
            if due_before is not None and (invoice.due_date is None
                                           or not invoice.due_date < due_before):
                continue
            if due_after is not None and (invoice.due_date is None
                                          or not invoice.due_date > due_after):
                continue
            matches.append(invoice)

        return matches

    def find_overdue(self, today: date) -> List[Invoice]:
        """Invoices due before ``today`` that are neither PAID nor CANCELLED"""
        open_statuses = [s for s in InvoiceStatus if not s.is_terminal]
        return self.find(statuses=open_statuses, due_before=today)

    def latest(self) -> Optional[Invoice]:
        """Most recently created invoice (highest id), if any"""
        invoices = self.all()
        return invoices[-1] if invoices else None

    def exists_number(self, number: str) -> bool:
        return any(inv.number == number for inv in self._iter_all())

    def save(self, invoice: Invoice) -> Invoice:
        """
        Insert or update an invoice.

        Assigns an id on first save and increments ``version`` on every save.
        The passed object is updated in place and a copy is returned.

        Raises:
            ConcurrencyError: stored version differs from the invoice's version
            ValidationError: another invoice already uses the same number
            NotFoundError: the invoice has an id the store does not know
        """
        for other in self._iter_all():
            if other.number == invoice.number and other.id != invoice.id:
                raise ValidationError(f'Invoice number already exists: {invoice.number}')

        if invoice.id is None:
            invoice.id = self._next_id()
        else:
            stored = self._load(invoice.id)
            if stored is None:
                raise NotFoundError(f'Invoice not found with ID: {invoice.id}')
            if stored.version != invoice.version:
                raise ConcurrencyError(
                    f'Invoice {invoice.number} was modified concurrently '
                    f'(stored version {stored.version}, saving {invoice.version})'
                )

        invoice.version += 1
        self._write(invoice.model_copy(deep=True))
        logger.debug(f'Saved invoice {invoice.number} (id={invoice.id}, version={invoice.version})')
        return invoice.model_copy(deep=True)


class InMemoryInvoiceStore(InvoiceStore):
    """Dictionary-backed store, mainly for tests and scripting"""

    def __init__(self, invoices: Optional[Iterable[Invoice]] = None):
        self._invoices: Dict[int, Invoice] = {}
        self._sequence = 0
        for invoice in invoices or []:
            if invoice.id is None:
                self.save(invoice)
            else:
                self._invoices[invoice.id] = invoice.model_copy(deep=True)
                self._sequence = max(self._sequence, invoice.id)

    def _load(self, invoice_id: int) -> Optional[Invoice]:
        return self._invoices.get(invoice_id)

    def _iter_all(self) -> Iterable[Invoice]:
        return list(self._invoices.values())

    def _write(self, invoice: Invoice) -> None:
        self._invoices[invoice.id] = invoice

    def _next_id(self) -> int:
        self._sequence += 1
        return self._sequence

    def __len__(self) -> int:
        return len(self._invoices)


class StoreError(LedgerError):
    """Raised when a stored invoice file cannot be read"""
    pass


class JSONDirectoryStore(InvoiceStore):
    """
    Stores each invoice as ``<id>.json`` inside a directory.

    Files are read lazily through a generator, so scanning a large
    directory never holds more than one parsed invoice at a time.
    """

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, invoice_id: int) -> Path:
        return self.directory / f'{invoice_id}.json'

    def _read(self, file_path: Path) -> Invoice:
        try:
            return Invoice.model_validate_json(file_path.read_text(encoding='utf-8'))
        except (OSError, PydanticValidationError) as e:
            raise StoreError(f'Failed to read invoice file {file_path}: {e}') from e

    def _load(self, invoice_id: int) -> Optional[Invoice]:
        path = self._path(invoice_id)
        if not path.exists():
            return None
        return self._read(path)

    def _stored_ids(self) -> List[int]:
        ids = []
        for file_path in self.directory.glob('*.json'):
            if file_path.stem.isdecimal():
                ids.append(int(file_path.stem))
        return sorted(ids)

    def _iter_all(self) -> Generator[Invoice, None, None]:
        for invoice_id in self._stored_ids():
            yield self._read(self._path(invoice_id))

    def _write(self, invoice: Invoice) -> None:
        path = self._path(invoice.id)
        tmp_path = path.with_suffix('.json.tmp')
        tmp_path.write_text(invoice.model_dump_json(indent=2), encoding='utf-8')
        tmp_path.replace(path)

    def _next_id(self) -> int:
        ids = self._stored_ids()
        return (ids[-1] + 1) if ids else 1
