"""
Tests for the command-line interface.
"""
import json
import logging
import pytest
import xmltodict

from practice_ledger.core.status import InvoiceStatus
from practice_ledger.core.store import JSONDirectoryStore
from practice_ledger.main import main


@pytest.fixture(autouse=True)
def restore_logging():
    # main() reconfigures the root logger for every run
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def store_dir(tmp_path):
    return tmp_path / "ledger"


@pytest.fixture
def run(store_dir):
    def invoke(*args, today="2025-03-01"):
        command, rest = args[0], list(args[1:])
        return main([command, "--store", str(store_dir), "--today", today] + rest)
    return invoke


@pytest.fixture
def created(run):
    assert run("create", "--client", "CLIENT-001",
               "--item", "GST Return Filing:2500.00",
               "--item", "TDS Return Filing:1500.00") == 0


class TestCli:

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_create(self, capsys, created, store_dir):
        invoice = JSONDirectoryStore(store_dir).get(1)

        assert invoice.number == "INV-2025-0001"
        assert str(invoice.total_amount) == "4720.00"
        assert str(invoice.due_date) == "2025-03-16"
        assert "Invoice: INV-2025-0001  [Draft]" in capsys.readouterr().out

    def test_create_with_quantity_and_rates(self, run, store_dir):
        assert run("create", "--client", "C2", "--item", "Consulting: hourly:3:1000",
                   "--tax", "0", "--discount", "10", "--terms", "30") == 0

        invoice = JSONDirectoryStore(store_dir).get(1)
        assert invoice.items[0].description == "Consulting: hourly"
        assert str(invoice.total_amount) == "2700.00"
        assert str(invoice.due_date) == "2025-03-31"

    def test_send_pay_and_cancel_paid(self, created, run, store_dir, capsys):
        assert run("send", "1") == 0
        assert run("pay", "1", "--amount", "4720.00", "--method", "bank_transfer",
                   "--reference", "NEFT-88", today="2025-03-10") == 0
        assert "status Paid, outstanding 0.00" in capsys.readouterr().out

        assert run("cancel", "1", "--reason", "Duplicate") == 1
        assert JSONDirectoryStore(store_dir).get(1).status == InvoiceStatus.PAID

    def test_overpayment_is_rejected(self, created, run, store_dir):
        assert run("pay", "1", "--amount", "5000", "--method", "CASH") == 1
        assert JSONDirectoryStore(store_dir).get(1).paid_amount == 0

    def test_invalid_amount(self, created, run):
        assert run("pay", "1", "--amount", "lots", "--method", "CASH") == 1

    def test_unknown_invoice(self, run):
        assert run("send", "42") == 1

    def test_cancel_with_reason(self, created, run, store_dir):
        assert run("cancel", "1", "--reason", "Raised in error") == 0

        invoice = JSONDirectoryStore(store_dir).get(1)
        assert invoice.status == InvoiceStatus.CANCELLED
        assert invoice.notes == "Cancellation reason: Raised in error"

    def test_sweep(self, created, run, store_dir, capsys):
        run("send", "1")
        assert run("sweep", today="2025-03-17") == 0

        assert "marked 1 as overdue" in capsys.readouterr().out
        assert JSONDirectoryStore(store_dir).get(1).status == InvoiceStatus.OVERDUE

    def test_show_xml(self, created, run, capsys):
        capsys.readouterr()
        assert run("show", "1", "--xml") == 0

        out = capsys.readouterr().out
        document = xmltodict.parse(out[out.index("<?xml"):])
        assert document["Invoice"]["@number"] == "INV-2025-0001"

    def test_report_files(self, created, run, tmp_path, capsys):
        csv_path = tmp_path / "invoices.csv"
        json_path = tmp_path / "stats.json"

        assert run("report", "--csv", str(csv_path), "--json", str(json_path)) == 0

        assert "INVOICE LEDGER REPORT" in capsys.readouterr().out
        assert csv_path.read_text(encoding="utf-8").startswith("Invoice Number,Client")
        assert json.loads(json_path.read_text(encoding="utf-8"))["total_invoices"] == 1

    def test_config_file(self, run, store_dir, tmp_path):
        config = tmp_path / "billing.json"
        config.write_text(json.dumps({"number_prefix": "CA", "default_tax_percentage": "12"}))

        assert run("create", "--config", str(config), "--client", "C1", "--item", "Audit:1000") == 0
        assert JSONDirectoryStore(store_dir).get(1).number == "CA-2025-0001"

    def test_bad_config_file(self, run, tmp_path):
        config = tmp_path / "billing.json"
        config.write_text("{broken")

        assert run("create", "--config", str(config), "--client", "C1", "--item", "Audit:1000") == 1

    def test_invalid_date(self, store_dir):
        with pytest.raises(SystemExit):
            main(["sweep", "--store", str(store_dir), "--today", "not a date"])

    def test_invalid_item(self, store_dir):
        with pytest.raises(SystemExit):
            main(["create", "--store", str(store_dir), "--client", "C1", "--item", "no price"])
