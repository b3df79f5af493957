"""Unit tests for rent status, bill settlement and the duplicate payment rule."""

from datetime import date
from decimal import Decimal

import pytest

from rentarium.models.bill import SettlementStatus
from rentarium.models.ledger_entry import EntryKind
from rentarium.models.payment import PaymentType
from rentarium.models.rent_status import RentStatus
from rentarium.models.tenant import Tenant
from rentarium.services.bills_service import BillsService
from rentarium.services.errors import DuplicatePaymentError, NotFoundError, ValidationError
from rentarium.services.ledger_service import LedgerService, coerce_payment_type
from rentarium.services.payment_service import PaymentService


@pytest.mark.unit
class TestRentStatus:
    def test_created_lazily_with_tenant_rent(self, db_session, tenant):
        ledger = LedgerService(db_session)
        assert ledger.get_rent_status(tenant.id, "2024-03") is None

        status = ledger.rent_status(tenant.id, "2024-03")

        assert status.code == "RENT-0001"
        assert status.required_amount == Decimal("15000.00")
        assert status.paid_amount == Decimal("0.00")
        assert status.remaining_amount == Decimal("15000.00")
        assert status.status == SettlementStatus.UNPAID
        assert status.due_date == date(2024, 3, 1)

    def test_get_or_create_returns_same_record(self, db_session, tenant):
        ledger = LedgerService(db_session)
        first = ledger.rent_status(tenant.id, "2024-03")
        second = ledger.rent_status(tenant.id, "2024-03")

        assert first.id == second.id
        assert db_session.query(RentStatus).count() == 1

    def test_required_amount_is_snapshot(self, db_session, tenant):
        ledger = LedgerService(db_session)
        ledger.rent_status(tenant.id, "2024-03")

        tenant.monthly_rent = Decimal("18000.00")
        db_session.commit()

        assert ledger.rent_status(tenant.id, "2024-03").required_amount == Decimal("15000.00")
        assert ledger.rent_status(tenant.id, "2024-04").required_amount == Decimal("18000.00")

    def test_unknown_tenant(self, db_session):
        with pytest.raises(NotFoundError):
            LedgerService(db_session).rent_status(999, "2024-03")

    def test_invalid_month(self, db_session, tenant):
        with pytest.raises(ValidationError):
            LedgerService(db_session).rent_status(tenant.id, "03-2024")

    def test_rent_history_newest_first(self, db_session, tenant):
        ledger = LedgerService(db_session)
        for month in ("2024-01", "2024-03", "2024-02"):
            ledger.rent_status(tenant.id, month)

        assert [s.month for s in ledger.rent_history(tenant.id)] == ["2024-03", "2024-02", "2024-01"]


@pytest.mark.unit
class TestApplyRentPayment:
    def test_partial_then_full(self, db_session, tenant):
        ledger = LedgerService(db_session)

        status = ledger.apply_rent_payment(tenant.id, "2024-03", Decimal("10000"), payment_id=1)
        assert status.paid_amount == Decimal("10000.00")
        assert status.remaining_amount == Decimal("5000.00")
        assert status.status == SettlementStatus.PARTIAL

        status = ledger.apply_rent_payment(tenant.id, "2024-03", Decimal("5000"), payment_id=2)
        assert status.remaining_amount == Decimal("0.00")
        assert status.status == SettlementStatus.PAID
        assert status.payments == [1, 2]

    def test_overpayment_floors_remaining(self, db_session, tenant):
        status = LedgerService(db_session).apply_rent_payment(
            tenant.id, "2024-03", Decimal("16000"), payment_id=1
        )
        assert status.paid_amount == Decimal("16000.00")
        assert status.remaining_amount == Decimal("0.00")
        assert status.status == SettlementStatus.PAID

    def test_reversal_never_below_zero(self, db_session, tenant):
        ledger = LedgerService(db_session)
        ledger.apply_rent_payment(tenant.id, "2024-03", Decimal("3000"), payment_id=1)

        status = ledger.apply_rent_payment(tenant.id, "2024-03", Decimal("-5000"), payment_id=1)

        assert status.paid_amount == Decimal("0.00")
        assert status.remaining_amount == Decimal("15000.00")
        assert status.status == SettlementStatus.UNPAID
        assert [e.amount for e in status.entries] == [Decimal("3000.00"), Decimal("-3000.00")]
        assert [e.kind for e in status.entries] == [EntryKind.APPLY, EntryKind.REVERSAL]

    def test_applied_amount_nets_entries(self, db_session, tenant):
        ledger = LedgerService(db_session)
        ledger.apply_rent_payment(tenant.id, "2024-03", Decimal("3000"), payment_id=7)
        ledger.apply_rent_payment(tenant.id, "2024-03", Decimal("-3000"), payment_id=7)
        ledger.apply_rent_payment(tenant.id, "2024-03", Decimal("3000"), payment_id=7)

        assert ledger.applied_amount(7) == Decimal("3000.00")
        assert ledger.applied_amount(8) == Decimal("0.00")


@pytest.mark.unit
class TestApplyBillPayment:
    def test_capped_at_total(self, db_session, tenant):
        bill = BillsService(db_session).generate_bill(tenant.id, "2024-03", 120, 10)
        ledger = LedgerService(db_session)

        bill = ledger.apply_bill_payment(bill.id, Decimal("2000"), payment_id=1)

        assert bill.paid_amount == Decimal("1630.00")
        assert bill.status == SettlementStatus.PAID
        assert ledger.applied_amount(1) == Decimal("1630.00")

    def test_partial(self, db_session, tenant):
        bill = BillsService(db_session).generate_bill(tenant.id, "2024-03", 120, 10)

        bill = LedgerService(db_session).apply_bill_payment(bill.id, Decimal("630"), payment_id=1)

        assert bill.paid_amount == Decimal("630.00")
        assert bill.balance == Decimal("1000.00")
        assert bill.status == SettlementStatus.PARTIAL
        assert bill.payments == [1]

    def test_unknown_bill(self, db_session):
        with pytest.raises(NotFoundError):
            LedgerService(db_session).apply_bill_payment(42, Decimal("100"), payment_id=1)


@pytest.mark.unit
class TestDuplicateRule:
    def test_coerce_payment_type_accepts_labels(self):
        assert coerce_payment_type("Monthly Rent") == PaymentType.RENT
        assert coerce_payment_type("bill") == PaymentType.BILL
        with pytest.raises(ValidationError):
            coerce_payment_type("deposit")

    def test_unknown_tenant_refused(self, db_session):
        check = LedgerService(db_session).duplicate_check(999, PaymentType.RENT)
        assert not check.allowed
        assert check.reason == "Tenant not found"

    def test_no_lease_start_refused(self, db_session):
        tenant = Tenant(username="nolease", name="No Lease", monthly_rent=Decimal("1000"))
        db_session.add(tenant)
        db_session.commit()

        check = LedgerService(db_session).duplicate_check(tenant.id, PaymentType.RENT)

        assert not check.allowed
        assert check.reason == "Payment period cannot be determined"

    def test_allowed_when_nothing_paid(self, db_session, tenant, today):
        check = LedgerService(db_session).duplicate_check(tenant.id, "Monthly Rent", today=today)
        assert check.allowed
        assert check.period == "2024-03"

    def test_pending_payment_does_not_settle(self, db_session, tenant, today):
        PaymentService(db_session).create_rent_payment(tenant.id, 15000, "gcash", today=today)

        assert LedgerService(db_session).duplicate_check(tenant.id, PaymentType.RENT, today=today).allowed

    def test_partial_rent_stays_open(self, db_session, tenant, today):
        PaymentService(db_session).create_rent_payment(
            tenant.id, 10000, "gcash", status="verified", today=today
        )

        assert LedgerService(db_session).duplicate_check(tenant.id, PaymentType.RENT, today=today).allowed

    def test_settled_rent_refused(self, db_session, tenant, today):
        PaymentService(db_session).create_rent_payment(
            tenant.id, 15000, "gcash", status="verified", today=today
        )
        ledger = LedgerService(db_session)

        check = ledger.duplicate_check(tenant.id, PaymentType.RENT, today=today)
        assert not check.allowed
        assert "already been paid" in check.reason
        # The other type is unaffected
        assert ledger.duplicate_check(tenant.id, PaymentType.BILL, today=today).allowed

        with pytest.raises(DuplicatePaymentError):
            ledger.ensure_payment_allowed(tenant.id, PaymentType.RENT, today=today)

    def test_settled_rent_other_period_allowed(self, db_session, tenant, today):
        PaymentService(db_session).create_rent_payment(
            tenant.id, 15000, "gcash", month="2024-02", status="verified", today=today
        )

        assert LedgerService(db_session).duplicate_check(tenant.id, PaymentType.RENT, today=today).allowed

    def test_period_summary(self, db_session, tenant, today):
        bill = BillsService(db_session).generate_bill(tenant.id, "2024-03", 120, 10)
        PaymentService(db_session).create_bill_payment(
            tenant.id, bill.id, Decimal("1630"), "cash", status="verified"
        )

        summary = LedgerService(db_session).period_summary(tenant.id, today)

        assert summary.period == "2024-03"
        assert summary.bills_paid is True
        assert summary.rent_paid is False
        assert summary.all_paid is False

    def test_period_summary_unknown_tenant(self, db_session, today):
        assert LedgerService(db_session).period_summary(999, today) is None


@pytest.mark.unit
class TestTenantSummary:
    def test_total_due_combines_rent_and_bill(self, db_session, tenant, today):
        BillsService(db_session).generate_bill(tenant.id, "2024-03", 120, 10)
        PaymentService(db_session).create_rent_payment(
            tenant.id, 10000, "gcash", status="verified", today=today
        )

        summary = LedgerService(db_session).tenant_summary(tenant.id, today=today)

        assert summary.rent.remaining_amount == Decimal("5000.00")
        assert summary.bill.total_amount == Decimal("1630.00")
        assert summary.total_due == Decimal("6630.00")

    def test_without_bill(self, db_session, tenant):
        summary = LedgerService(db_session).tenant_summary(tenant.id, month="2024-05")
        assert summary.bill is None
        assert summary.total_due == Decimal("15000.00")

    def test_overpaid_bill_adds_nothing_to_total_due(self, db_session, tenant, today):
        bill = BillsService(db_session).generate_bill(tenant.id, "2024-03", 120, 10)
        PaymentService(db_session).create_bill_payment(
            tenant.id, bill.id, Decimal("2000"), "cash", status="verified"
        )

        summary = LedgerService(db_session).tenant_summary(tenant.id, today=today)

        assert summary.bill.balance == Decimal("0.00")
        assert summary.total_due == Decimal("15000.00")
