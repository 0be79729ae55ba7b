"""
Unit tests for invoice numbering.
"""
import logging
import pytest
from datetime import date

from practice_ledger.core.errors import ParseError
from practice_ledger.core.models import Invoice
from practice_ledger.core.numbering import (
    InvoiceNumberGenerator,
    format_invoice_number,
    next_invoice_number,
    parse_invoice_number,
)


class TestNextInvoiceNumber:

    def test_first_invoice_ever(self):
        assert next_invoice_number(None, 2025) == "INV-2025-0001"

    def test_increments_within_year(self):
        assert next_invoice_number("INV-2025-0041", 2025) == "INV-2025-0042"

    def test_new_year_restarts_sequence(self):
        # Last invoice of the previous year was INV-2024-0007
        assert next_invoice_number("INV-2024-0007", 2025) == "INV-2025-0001"

    def test_grows_past_four_digits(self):
        assert next_invoice_number("INV-2025-9999", 2025) == "INV-2025-10000"
        assert next_invoice_number("INV-2025-10000", 2025) == "INV-2025-10001"

    def test_custom_prefix(self):
        assert next_invoice_number("INV-2025-0003", 2025, prefix="CA") == "CA-2025-0004"

    @pytest.mark.parametrize("latest", [
        "GARBAGE",
        "INV-2025",
        "INV-2025-ABC",
        "INV-XXXX-0003",
        "INV-2025-0003-A",
        "-2025-0003",
        "",
    ])
    def test_malformed_latest_restarts_at_one(self, latest, caplog):
        with caplog.at_level(logging.WARNING, logger="practice_ledger.core.numbering"):
            assert next_invoice_number(latest, 2025) == "INV-2025-0001"
        assert "Error parsing invoice number" in caplog.text


class TestParseInvoiceNumber:

    def test_parse_parts(self):
        parsed = parse_invoice_number("INV-2024-0007")

        assert parsed.prefix == "INV"
        assert parsed.year == 2024
        assert parsed.sequence == 7
        assert str(parsed) == "INV-2024-0007"

    def test_parse_rejects_malformed(self):
        with pytest.raises(ParseError):
            parse_invoice_number("INV-24-x")

    @pytest.mark.parametrize("sequence", [1, 42, 9999, 10000, 123456])
    def test_format_parse_next_never_repeats(self, sequence):
        number = format_invoice_number("INV", 2025, sequence)
        parsed = parse_invoice_number(number)
        assert (parsed.year, parsed.sequence) == (2025, sequence)

        following = parse_invoice_number(next_invoice_number(number, 2025))
        assert following.sequence == sequence + 1


class TestInvoiceNumberGenerator:

    def _invoice(self, number):
        return Invoice(number=number, client_ref="C1", invoice_date=date(2025, 1, 10))

    def test_empty_store(self, store):
        assert InvoiceNumberGenerator(store).next(2025) == "INV-2025-0001"

    def test_uses_most_recently_created_invoice(self, store):
        store.save(self._invoice("INV-2025-0001"))
        store.save(self._invoice("INV-2025-0002"))

        generator = InvoiceNumberGenerator(store)
        assert generator.next(2025) == "INV-2025-0003"
        assert generator.next(2026) == "INV-2026-0001"

    def test_sequence_of_generated_numbers_is_increasing(self, store):
        generator = InvoiceNumberGenerator(store)
        seen = []
        for _ in range(5):
            number = generator.next(2025)
            store.save(self._invoice(number))
            seen.append(parse_invoice_number(number).sequence)

        assert seen == [1, 2, 3, 4, 5]

    def test_malformed_stored_number_does_not_fail(self, store):
        store.save(self._invoice("LEGACY/0099"))
        assert InvoiceNumberGenerator(store).next(2025) == "INV-2025-0001"
