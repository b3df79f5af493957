"""Unit tests for tenant notifications, localization and money helpers."""

from datetime import date
from decimal import Decimal

import pytest

from rentarium.services.bills_service import BillsService
from rentarium.services.errors import DuplicatePaymentError, ValidationError, error_response
from rentarium.services.ledger_service import LedgerService
from rentarium.services.locale_service import (
    format_amount,
    format_day,
    get_currency_code,
    get_locale_info,
    parse_decimal,
)
from rentarium.services.localizer import t
from rentarium.services.money import round2, to_decimal
from rentarium.services.payment_service import PaymentService


@pytest.mark.unit
class TestLocalizer:
    def test_plain_key(self):
        assert t("notifications.rent_paid.title") == "Rent Fully Paid"

    def test_placeholders(self):
        assert t("payments.bill_default_note", month="2024-03") == "Payment for 2024-03 utility bills"

    def test_missing_key_returns_key(self):
        assert t("notifications.nope") == "notifications.nope"

    def test_without_kwargs_returns_template(self):
        assert "{month}" in t("notifications.rent_paid.message")


@pytest.mark.unit
class TestLocale:
    def test_currency_is_peso(self):
        assert get_currency_code() == "PHP"
        assert get_locale_info()["locale"] == "en_PH"

    def test_format_amount(self):
        assert "15,000.00" in format_amount(Decimal("15000"))
        assert format_amount(Decimal("1630"), include_symbol=False) == "1,630.00"

    def test_parse_decimal(self):
        assert parse_decimal("15,000.50") == Decimal("15000.50")

    def test_format_day(self):
        assert "2024" in format_day(date(2024, 3, 15))


@pytest.mark.unit
class TestMoney:
    def test_round_half_up(self):
        assert round2(Decimal("1.005")) == Decimal("1.01")
        assert round2(Decimal("2.675")) == Decimal("2.68")

    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("value", [None, True, "abc", "NaN", "Infinity"])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(ValidationError):
            to_decimal(value)

    def test_error_response(self):
        assert error_response(DuplicatePaymentError("paid")) == {
            "error": {"code": "duplicate_payment", "message": "paid"}
        }


@pytest.mark.unit
class TestNotifications:
    def test_unpaid_rent_without_bill(self, db_session, tenant, today):
        notifications = LedgerService(db_session).notifications(tenant.id, today=today)

        assert len(notifications) == 1
        assert notifications[0].type == "error"
        assert notifications[0].title == "Rent Unpaid"
        assert "2024-03" in notifications[0].message

    def test_partial_rent_and_unpaid_bill(self, db_session, tenant, today):
        BillsService(db_session).generate_bill(tenant.id, "2024-03", 120, 10)
        PaymentService(db_session).create_rent_payment(
            tenant.id, 10000, "gcash", status="verified", today=today
        )

        rent, bill = LedgerService(db_session).notifications(tenant.id, today=today)

        assert rent.type == "warning"
        assert rent.title == "Partial Rent Payment"
        assert "5,000.00" in rent.message
        assert bill.type == "error"
        assert "1,630.00" in bill.message

    def test_everything_paid(self, db_session, tenant, today):
        bill = BillsService(db_session).generate_bill(tenant.id, "2024-03", 120, 10)
        payments = PaymentService(db_session)
        payments.create_rent_payment(tenant.id, 15000, "gcash", status="verified", today=today)
        payments.create_bill_payment(tenant.id, bill.id, 1630, "cash", status="verified")

        notifications = LedgerService(db_session).notifications(tenant.id, today=today)

        assert [n.type for n in notifications] == ["success", "success"]
        assert notifications[1].title == "Bills Fully Paid"

    def test_partial_bill(self, db_session, tenant, today):
        bill = BillsService(db_session).generate_bill(tenant.id, "2024-03", 120, 10)
        PaymentService(db_session).create_bill_payment(tenant.id, bill.id, 630, "cash", status="verified")

        notifications = LedgerService(db_session).notifications(tenant.id, month="2024-03")

        assert notifications[1].type == "warning"
        assert "1,000.00" in notifications[1].message
