"""
Decorators for audit logging and performance monitoring.
Every state-changing ledger operation is wrapped with @audit_log.
"""
import functools
import logging
import time
from datetime import datetime
from typing import Callable

# Audit trail is kept separate from the application loggers
audit_logger = logging.getLogger('practice_ledger.audit')
perf_logger = logging.getLogger('practice_ledger.performance')


def _describe_invoice(args, kwargs) -> str:
    """Best-effort identification of the invoice an operation works on"""
    candidates = list(args) + [kwargs.get('invoice')]
    for candidate in candidates:
        if candidate is not None and hasattr(candidate, 'number') and hasattr(candidate, 'status'):
            return candidate.number

    if 'invoice_id' in kwargs:
        return f"id={kwargs['invoice_id']}"

    # Service methods take the id as first argument after self
    if len(args) > 1 and isinstance(args[1], int) and not isinstance(args[1], bool):
        return f'id={args[1]}'

    return 'N/A'


def _describe_result(result) -> str:
    status = getattr(result, 'status', None)
    if status is not None:
        return getattr(status, 'value', str(status))
    return 'PROCESSED'


def audit_log(func: Callable) -> Callable:
    """
    Decorator that logs every call with the invoice it touched and the outcome.

    Usage:
        @audit_log
        def record_payment(self, invoice_id, amount, ...):
            ...
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        func_name = func.__qualname__
        invoice_id = _describe_invoice(args, kwargs)

        audit_logger.info(
            f"CALL | {func_name} | Invoice: {invoice_id} | "
            f"Timestamp: {datetime.now().isoformat()}"
        )

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            audit_logger.error(
                f"FAILURE | {func_name} | Invoice: {invoice_id} | "
                f"Error: {type(e).__name__}: {e}"
            )
            raise

        audit_logger.info(
            f"SUCCESS | {func_name} | Invoice: {invoice_id} | "
            f"Status: {_describe_result(result)}"
        )
        return result

    return wrapper


def measure_performance(func: Callable) -> Callable:
    """
    Decorator to measure and log function execution time.
    Attaches the timing to results that have a ``processing_time_ms`` field.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            perf_logger.warning(
                f"{func.__qualname__} failed after {elapsed_ms:.2f}ms: {e}"
            )
            raise

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        if hasattr(result, 'processing_time_ms'):
            result.processing_time_ms = elapsed_ms

        perf_logger.debug(f"{func.__qualname__} completed in {elapsed_ms:.2f}ms")
        return result

    return wrapper
