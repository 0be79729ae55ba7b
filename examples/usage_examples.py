"""
Example usage of Practice Ledger.
Demonstrates the invoice lifecycle from creation to payment.
"""
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

from practice_ledger import (
    BillableItem,
    BillingSettings,
    InMemoryInvoiceStore,
    InvoiceService,
    JSONDirectoryStore,
    PaymentMethod,
)
from practice_ledger.core.errors import InvalidStateError, ValidationError
from practice_ledger.reports import export_invoice_xml, generate_summary_report


def example_create_invoice():
    """Example: Create a draft invoice with default settings"""
    print("Example 1: Create an Invoice")
    print("-" * 50)

    service = InvoiceService(InMemoryInvoiceStore())

    invoice = service.create_invoice(
        client_ref='CLIENT-001',
        items=[
            BillableItem(description='GST Return Filing', unit_price=Decimal('2500.00')),
            BillableItem(description='TDS Return Filing', unit_price=Decimal('1500.00')),
        ],
        today=date(2025, 3, 1),
    )

    print(f"Created {invoice.number} due {invoice.due_date}")
    print(f"Subtotal: {invoice.subtotal}  Tax: {invoice.tax_amount}  Total: {invoice.total_amount}")
    print()


def example_partial_payments():
    """Example: Send an invoice and settle it in two payments"""
    print("Example 2: Partial Payments")
    print("-" * 50)

    service = InvoiceService(InMemoryInvoiceStore())
    invoice = service.create_invoice(
        'CLIENT-002',
        [BillableItem(description='Annual Audit', unit_price=Decimal('10000.00'))],
        today=date(2025, 3, 1),
    )
    service.send_invoice(invoice.id)

    invoice = service.record_payment(invoice.id, Decimal('5000.00'), PaymentMethod.CHEQUE,
                                     'CHQ-000118', today=date(2025, 3, 5))
    print(f"{invoice.number}: {invoice.status.display_name}, outstanding {invoice.outstanding_amount}")

    # Overpaying is rejected and leaves the invoice untouched
    try:
        service.record_payment(invoice.id, Decimal('99999.00'), PaymentMethod.CASH, today=date(2025, 3, 6))
    except ValidationError as e:
        print(f"Rejected: {e}")

    invoice = service.record_payment(invoice.id, invoice.outstanding_amount, PaymentMethod.UPI,
                                     'UTR-55120', today=date(2025, 3, 9))
    print(f"{invoice.number}: {invoice.status.display_name}, {len(invoice.payments)} payments")
    print()


def example_edit_draft():
    """Example: Edit a draft, then see edits blocked once it is sent"""
    print("Example 3: Editing Drafts")
    print("-" * 50)

    service = InvoiceService(InMemoryInvoiceStore())
    invoice = service.create_invoice(
        'CLIENT-003',
        [BillableItem(description='Bookkeeping', quantity=Decimal('3'), unit_price=Decimal('800.00'))],
        today=date(2025, 3, 1),
    )

    invoice = service.set_rates(invoice.id, discount_percentage=Decimal('5'))
    invoice = service.add_item(invoice.id, BillableItem(description='Payroll', unit_price=Decimal('600')))
    print(f"Draft total after edits: {invoice.total_amount}")

    service.send_invoice(invoice.id)
    try:
        service.remove_item(invoice.id, 1)
    except InvalidStateError as e:
        print(f"Blocked: {e}")
    print()


def example_overdue_sweep():
    """Example: Nightly overdue sweep with a callback"""
    print("Example 4: Overdue Sweep")
    print("-" * 50)

    service = InvoiceService(InMemoryInvoiceStore())
    issued = date(2025, 1, 10)
    for client in ('CLIENT-004', 'CLIENT-005'):
        invoice = service.create_invoice(
            client, [BillableItem(description='Retainer', unit_price=Decimal('1500'))], today=issued
        )
        service.send_invoice(invoice.id)

    def my_callback(invoice):
        """Called for each invoice that just became overdue"""
        print(f"Reminder due: {invoice.number} ({invoice.client_ref})")

    result = service.sweeper.sweep(issued + timedelta(days=30), callback=my_callback)
    print(f"Marked {result.marked_count} of {result.examined} invoices overdue")
    print()


def example_file_store_and_reports():
    """Example: Persist invoices as JSON files and print reports"""
    print("Example 5: File Store and Reports")
    print("-" * 50)

    settings = BillingSettings(number_prefix='CA', default_payment_term_days=30)
    service = InvoiceService(JSONDirectoryStore(Path('ledger_data/')), settings)

    today = date.today()
    invoice = service.create_invoice(
        'CLIENT-006', [BillableItem(description='ITR Filing', unit_price=Decimal('3000'))], today=today
    )

    print(export_invoice_xml(invoice))
    print(generate_summary_report(service.statistics(today), service.list_invoices()))
    print()


if __name__ == '__main__':
    print("Practice Ledger - Usage Examples")
    print("=" * 50)
    print()

    example_create_invoice()
    example_partial_payments()
    example_edit_draft()
    example_overdue_sweep()
    # Writes to ./ledger_data/
    # example_file_store_and_reports()
