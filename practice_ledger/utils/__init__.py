"""Practice Ledger - Utilities Package"""

from practice_ledger.utils.decorators import (
    audit_log,
    measure_performance,
)

__all__ = [
    'audit_log',
    'measure_performance',
]
