"""
Report generation utilities.
Dashboard statistics plus text, CSV, JSON and XML renderings of invoices.
"""
import csv
import json
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, List

import xmltodict
from pydantic import BaseModel

from practice_ledger.core import money
from practice_ledger.core.models import Invoice
from practice_ledger.core.status import OPEN_STATES, InvoiceStatus


class InvoiceStatistics(BaseModel):
    """Aggregate invoice figures shown on the dashboard"""
    as_of: date
    total_invoices: int = 0
    paid_invoices: int = 0
    unpaid_invoices: int = 0
    overdue_invoices: int = 0
    total_revenue: Decimal = money.ZERO
    total_outstanding: Decimal = money.ZERO
    revenue_this_month: Decimal = money.ZERO
    invoices_this_month: int = 0


def compute_statistics(invoices: Iterable[Invoice], today: date) -> InvoiceStatistics:
    """
    Compute dashboard statistics as of ``today``.

    Unpaid counts SENT and PARTIALLY_PAID invoices; overdue counts every
    unsettled invoice whose due date has passed, whatever its status says.
    Revenue is the total of PAID invoices; this month's revenue only takes
    PAID invoices dated from the 1st of the month up to ``today``.
    """
    stats = InvoiceStatistics(as_of=today)
    start_of_month = today.replace(day=1)

    for invoice in invoices:
        stats.total_invoices += 1

        if invoice.status == InvoiceStatus.PAID:
            stats.paid_invoices += 1
            stats.total_revenue += invoice.total_amount
            if start_of_month <= invoice.invoice_date <= today:
                stats.revenue_this_month += invoice.total_amount
        elif invoice.status in (InvoiceStatus.SENT, InvoiceStatus.PARTIALLY_PAID):
            stats.unpaid_invoices += 1

        if invoice.status in OPEN_STATES:
            stats.total_outstanding += invoice.outstanding_amount

        if invoice.is_overdue(today):
            stats.overdue_invoices += 1

        if (invoice.invoice_date.year, invoice.invoice_date.month) == (today.year, today.month):
            stats.invoices_this_month += 1

    return stats


def generate_summary_report(stats: InvoiceStatistics, invoices: List[Invoice]) -> str:
    """
    Generate text summary report.

    Args:
        stats: Statistics computed for the same invoices
        invoices: Invoices to list under the open-invoices section

    Returns:
        Formatted text report
    """
    lines = []

    # Header
    lines.append("=" * 70)
    lines.append("INVOICE LEDGER REPORT")
    lines.append("=" * 70)
    lines.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append(f"As of:     {stats.as_of.isoformat()}")
    lines.append("")

    lines.append("SUMMARY STATISTICS")
    lines.append("-" * 70)
    lines.append(f"Total Invoices:            {stats.total_invoices}")
    lines.append(f"Paid:                      {stats.paid_invoices}")
    lines.append(f"Unpaid:                    {stats.unpaid_invoices}")
    lines.append(f"Overdue:                   {stats.overdue_invoices}")
    lines.append(f"Total Revenue:             {money.format_money(stats.total_revenue)}")
    lines.append(f"Total Outstanding:         {money.format_money(stats.total_outstanding)}")
    lines.append(f"Revenue This Month:        {money.format_money(stats.revenue_this_month)}")
    lines.append(f"Invoices This Month:       {stats.invoices_this_month}")
    lines.append("")

    open_invoices = [inv for inv in invoices if inv.status in OPEN_STATES]
    if open_invoices:
        lines.append("OPEN INVOICES")
        lines.append("-" * 70)

        # Oldest due date first
        open_invoices.sort(key=lambda inv: (inv.due_date or date.max, inv.number))
        for invoice in open_invoices[:20]:
            due = invoice.due_date.isoformat() if invoice.due_date else '-'
            lines.append(
                f"{invoice.number:<16} {invoice.client_ref:<20} "
                f"{invoice.status.display_name:<15} due {due}  "
                f"outstanding {money.format_money(invoice.outstanding_amount)}"
            )

        if len(open_invoices) > 20:
            lines.append(f"... and {len(open_invoices) - 20} more open invoices")
        lines.append("")

    # Footer
    lines.append("=" * 70)
    lines.append("END OF REPORT")
    lines.append("=" * 70)

    return "\n".join(lines)


def generate_csv_report(invoices: Iterable[Invoice], output_path: str):
    """
    Generate CSV listing of invoices.

    Args:
        invoices: Invoices to export
        output_path: Path to output CSV file
    """
    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)

        writer.writerow([
            'Invoice Number',
            'Client',
            'Invoice Date',
            'Due Date',
            'Status',
            'Subtotal',
            'Discount',
            'Tax',
            'Total',
            'Paid',
            'Outstanding',
        ])

        for invoice in invoices:
            writer.writerow([
                invoice.number,
                invoice.client_ref,
                invoice.invoice_date.isoformat(),
                invoice.due_date.isoformat() if invoice.due_date else '',
                invoice.status.value,
                money.with_cents(invoice.subtotal),
                money.with_cents(invoice.discount_amount),
                money.with_cents(invoice.tax_amount),
                money.with_cents(invoice.total_amount),
                money.with_cents(invoice.paid_amount),
                money.with_cents(invoice.outstanding_amount),
            ])


def generate_json_report(stats: InvoiceStatistics, output_path: str):
    """Write the statistics as JSON"""
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(stats.model_dump(mode='json'), f, indent=2)


def export_invoice_xml(invoice: Invoice) -> str:
    """
    Render one invoice as an XML document.

    Amounts are written as plain decimal strings with at least two places;
    extra places are kept so the document reconciles exactly with the ledger.
    """
    document = {
        'Invoice': {
            '@number': invoice.number,
            '@status': invoice.status.value,
            'ClientRef': invoice.client_ref,
            'InvoiceDate': invoice.invoice_date.isoformat(),
            'DueDate': invoice.due_date.isoformat() if invoice.due_date else None,
            'Lines': {
                'Line': [
                    {
                        '@order': str(item.order),
                        'Description': item.description,
                        'Quantity': str(item.quantity),
                        'UnitPrice': str(money.with_cents(item.unit_price)),
                        'Amount': str(money.with_cents(item.amount)),
                    }
                    for item in invoice.items
                ]
            },
            'Totals': {
                'Subtotal': str(money.with_cents(invoice.subtotal)),
                'DiscountPercentage': str(invoice.discount_percentage),
                'DiscountAmount': str(money.with_cents(invoice.discount_amount)),
                'TaxPercentage': str(invoice.tax_percentage),
                'TaxAmount': str(money.with_cents(invoice.tax_amount)),
                'TotalAmount': str(money.with_cents(invoice.total_amount)),
                'PaidAmount': str(money.with_cents(invoice.paid_amount)),
                'OutstandingAmount': str(money.with_cents(invoice.outstanding_amount)),
            },
            'Payments': {
                'Payment': [
                    {
                        '@date': payment.payment_date.isoformat(),
                        '@method': payment.method.value,
                        'Amount': str(money.with_cents(payment.amount)),
                        'Reference': payment.reference,
                    }
                    for payment in invoice.payments
                ]
            },
        }
    }
    return xmltodict.unparse(document, pretty=True)
