"""Tests for the admin CLI command dispatch."""

import json

import pytest

from rentarium.cli.ledger import build_parser, run
from rentarium.models.payment import Payment, PaymentStatus


def invoke(db_session, *argv) -> int:
    return run(build_parser().parse_args(list(argv)), db_session)


@pytest.mark.unit
class TestLedgerCli:
    def test_rates_show(self, db_session, capsys):
        assert invoke(db_session, "rates", "show") == 0
        out = capsys.readouterr().out
        assert "11.50" in out and "25.00" in out

    def test_rates_set(self, db_session, capsys):
        assert invoke(db_session, "rates", "set", "--electricity", "12.00") == 0
        assert "12.00" in capsys.readouterr().out

    def test_bill_generate(self, db_session, tenant, capsys):
        assert invoke(db_session, "bill", "generate", str(tenant.id), "2024-03", "120", "10") == 0
        bill = json.loads(capsys.readouterr().out)
        assert bill["id"] == "BILL-0001"
        assert bill["total_amount"] == "1630.00"

    def test_pay_rent_with_grouped_amount(self, db_session, tenant, capsys):
        code = invoke(
            db_session, "pay", "rent", str(tenant.id), "15,000", "--method", "gcash",
            "--month", "2024-03", "--status", "verified",
        )

        assert code == 0
        payment = json.loads(capsys.readouterr().out)
        assert payment["amount"] == "15000.00"
        assert payment["status"] == "verified"

    def test_payment_status_and_list(self, db_session, tenant, capsys):
        invoke(db_session, "pay", "rent", str(tenant.id), "5000", "--method", "cash", "--month", "2024-03")
        capsys.readouterr()

        assert invoke(db_session, "payment", "status", "1", "verified", "--notes", "ok") == 0
        assert db_session.get(Payment, 1).status == PaymentStatus.VERIFIED

        assert invoke(db_session, "payment", "list", "--status", "verified") == 0
        assert "PAY-0001" in capsys.readouterr().out

    def test_payment_list_unknown_status(self, db_session, capsys):
        assert invoke(db_session, "payment", "list", "--status", "bogus") == 1
        assert "validation_error" in capsys.readouterr().err

    def test_rates_set_keeps_sub_cent_precision(self, db_session, capsys):
        assert invoke(db_session, "rates", "set", "--electricity", "0.125") == 0
        assert "0.125 / kWh" in capsys.readouterr().out

    def test_tenant_summary(self, db_session, tenant, capsys):
        assert invoke(db_session, "tenant", "summary", str(tenant.id), "--month", "2024-03") == 0
        out = capsys.readouterr().out
        assert "Rent Unpaid" in out

    def test_tenant_terminate(self, db_session, tenant, capsys):
        assert invoke(db_session, "tenant", "terminate", str(tenant.id), "--by", "admin") == 0
        assert "terminated" in capsys.readouterr().out

    def test_stats(self, db_session, capsys):
        assert invoke(db_session, "stats") == 0
        assert "0 total" in capsys.readouterr().out

    def test_ledger_error_exit_code(self, db_session, capsys):
        assert invoke(db_session, "pay", "rent", "999", "100", "--method", "gcash") == 1
        assert "not_found" in capsys.readouterr().err

    def test_bad_amount_exit_code(self, db_session, tenant, capsys):
        assert invoke(db_session, "pay", "rent", str(tenant.id), "lots", "--method", "gcash") == 1
        assert "validation_error" in capsys.readouterr().err
