"""Practice Ledger - Reports Package"""

from practice_ledger.reports.generator import (
    InvoiceStatistics,
    compute_statistics,
    generate_summary_report,
    generate_csv_report,
    generate_json_report,
    export_invoice_xml,
)

__all__ = [
    'InvoiceStatistics',
    'compute_statistics',
    'generate_summary_report',
    'generate_csv_report',
    'generate_json_report',
    'export_invoice_xml',
]
