"""
Practice Ledger - Main Entry Point
Command-line interface over a directory of JSON invoices.
"""
import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from dateutil.parser import ParserError as DateParserError
from dateutil.parser import parse as parse_date

from practice_ledger.config import BillingSettings
from practice_ledger.core import money
from practice_ledger.core.errors import LedgerError, ValidationError
from practice_ledger.core.store import JSONDirectoryStore
from practice_ledger.processing.invoicing import BillableItem, InvoiceService
from practice_ledger.reports.generator import (
    export_invoice_xml,
    generate_csv_report,
    generate_json_report,
    generate_summary_report,
)


def setup_logging(verbose: bool = False, log_file: Optional[str] = None):
    """Configure application logging"""
    level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True,
    )


def _parse_day(value: str) -> date:
    try:
        return parse_date(value).date()
    except (DateParserError, ValueError, OverflowError) as e:
        raise argparse.ArgumentTypeError(f'Invalid date: {value}') from e


def _parse_item(value: str) -> BillableItem:
    """DESCRIPTION:PRICE or DESCRIPTION:QUANTITY:PRICE"""
    parts = value.rsplit(':', 2)
    try:
        if len(parts) == 2:
            return BillableItem(description=parts[0], unit_price=parts[1])
        if len(parts) == 3:
            return BillableItem(description=parts[0], quantity=parts[1], unit_price=parts[2])
    except ValueError as e:
        raise argparse.ArgumentTypeError(f'Invalid item {value!r}: {e}') from e
    raise argparse.ArgumentTypeError(
        f'Invalid item {value!r}; expected DESCRIPTION:PRICE or DESCRIPTION:QTY:PRICE'
    )


def build_service(args) -> InvoiceService:
    settings = BillingSettings.from_file(args.config) if args.config else BillingSettings()
    return InvoiceService(JSONDirectoryStore(Path(args.store)), settings)


def print_invoice(invoice):
    print("\n" + "=" * 60)
    print(f"Invoice: {invoice.number}  [{invoice.status.display_name}]")
    print("=" * 60)
    print(f"Client:        {invoice.client_ref}")
    print(f"Invoice date:  {invoice.invoice_date.isoformat()}")
    print(f"Due date:      {invoice.due_date.isoformat() if invoice.due_date else '-'}")
    print("-" * 60)
    for item in invoice.items:
        print(f"{item.order:>3}. {item.description:<30} "
              f"{item.quantity} x {money.format_money(item.unit_price)} = "
              f"{money.format_money(item.amount)}")
    print("-" * 60)
    print(f"Subtotal:      {money.format_money(invoice.subtotal)}")
    print(f"Discount:      {money.format_money(invoice.discount_amount)} ({invoice.discount_percentage}%)")
    print(f"Tax:           {money.format_money(invoice.tax_amount)} ({invoice.tax_percentage}%)")
    print(f"Total:         {money.format_money(invoice.total_amount)}")
    print(f"Paid:          {money.format_money(invoice.paid_amount)}")
    print(f"Outstanding:   {money.format_money(invoice.outstanding_amount)}")
    print("=" * 60)


def create_invoice(args, service: InvoiceService):
    invoice = service.create_invoice(
        client_ref=args.client,
        items=args.item,
        today=args.today,
        tax_percentage=args.tax,
        discount_percentage=args.discount,
        payment_term_days=args.terms,
        notes=args.notes,
    )
    print_invoice(invoice)
    return 0


def send_invoice(args, service: InvoiceService):
    invoice = service.send_invoice(args.invoice_id)
    print(f"Invoice {invoice.number} marked as {invoice.status.display_name}")
    return 0


def cancel_invoice(args, service: InvoiceService):
    invoice = service.cancel_invoice(args.invoice_id, args.reason)
    print(f"Invoice {invoice.number} cancelled")
    return 0


def record_payment(args, service: InvoiceService):
    invoice = service.record_payment(
        args.invoice_id,
        money.money(args.amount),
        args.method,
        args.reference,
        today=args.today,
    )
    print(f"Payment recorded on {invoice.number}: status {invoice.status.display_name}, "
          f"outstanding {money.format_money(invoice.outstanding_amount)}")
    return 0


def sweep_overdue(args, service: InvoiceService):
    result = service.mark_overdue(args.today)
    print(f"Examined {result.examined} past-due invoices, "
          f"marked {result.marked_count} as overdue")
    for number in result.marked_overdue:
        print(f"  - {number}")
    if result.failed:
        print(f"Failed to update {result.failed} invoices; see the log for details")
    return 0


def show_invoice(args, service: InvoiceService):
    invoice = service.get_invoice(args.invoice_id)
    if args.xml:
        print(export_invoice_xml(invoice))
    else:
        print_invoice(invoice)
    return 0


def report(args, service: InvoiceService):
    invoices = service.list_invoices()
    stats = service.statistics(args.today)

    print(generate_summary_report(stats, invoices))

    if args.csv:
        generate_csv_report(invoices, args.csv)
        logging.info(f"CSV report saved: {args.csv}")
    if args.json:
        generate_json_report(stats, args.json)
        logging.info(f"JSON report saved: {args.json}")
    return 0


COMMANDS = {
    'create': create_invoice,
    'send': send_invoice,
    'cancel': cancel_invoice,
    'pay': record_payment,
    'sweep': sweep_overdue,
    'show': show_invoice,
    'report': report,
}


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--store', '-s', required=True, help='Directory holding invoice JSON files')
    common.add_argument('--config', help='Billing settings JSON file')
    common.add_argument('--today', type=_parse_day, default=None,
                        help='Business date (default: current date)')
    common.add_argument('--verbose', '-v', action='store_true', help='Verbose logging')
    common.add_argument('--log-file', help='Also write logs to this file')

    parser = argparse.ArgumentParser(
        description='Practice Ledger - Invoice lifecycle and payment tracking'
    )
    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    create_parser = subparsers.add_parser('create', parents=[common], help='Create a draft invoice')
    create_parser.add_argument('--client', '-c', required=True, help='Client reference')
    create_parser.add_argument('--item', '-i', type=_parse_item, action='append', required=True,
                               help='Line item as DESCRIPTION:PRICE or DESCRIPTION:QTY:PRICE (repeatable)')
    create_parser.add_argument('--tax', help='Tax percentage (default from settings)')
    create_parser.add_argument('--discount', help='Discount percentage (default from settings)')
    create_parser.add_argument('--terms', type=int, help='Payment term in days')
    create_parser.add_argument('--notes', help='Notes printed on the invoice')

    send_parser = subparsers.add_parser('send', parents=[common], help='Mark a draft invoice as sent')
    send_parser.add_argument('invoice_id', type=int, help='Invoice id')

    cancel_parser = subparsers.add_parser('cancel', parents=[common], help='Cancel an invoice')
    cancel_parser.add_argument('invoice_id', type=int, help='Invoice id')
    cancel_parser.add_argument('--reason', help='Cancellation reason, appended to the notes')

    pay_parser = subparsers.add_parser('pay', parents=[common], help='Record a payment')
    pay_parser.add_argument('invoice_id', type=int, help='Invoice id')
    pay_parser.add_argument('--amount', '-a', required=True, help='Amount received')
    pay_parser.add_argument('--method', '-m', required=True, help='Payment method, e.g. BANK_TRANSFER')
    pay_parser.add_argument('--reference', '-r', help='Transaction id, cheque number, ...')

    subparsers.add_parser('sweep', parents=[common], help='Mark past-due invoices as overdue')

    show_parser = subparsers.add_parser('show', parents=[common], help='Display one invoice')
    show_parser.add_argument('invoice_id', type=int, help='Invoice id')
    show_parser.add_argument('--xml', action='store_true', help='Print as XML')

    report_parser = subparsers.add_parser('report', parents=[common], help='Print ledger statistics')
    report_parser.add_argument('--csv', help='Also write an invoice listing to this CSV file')
    report_parser.add_argument('--json', help='Also write the statistics to this JSON file')

    return parser


def main(argv=None):
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose, args.log_file)

    # The CLI is the only place that reads the system clock
    if args.today is None:
        args.today = date.today()

    try:
        service = build_service(args)
        return COMMANDS[args.command](args, service)
    except ValidationError as e:
        logging.error(f"Invalid input: {e}")
        return 1
    except LedgerError as e:
        logging.error(f"{type(e).__name__}: {e}")
        return 1
    except KeyboardInterrupt:
        logging.info("Operation cancelled by user")
        return 130
    except Exception as e:
        logging.exception(f"Unexpected error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
