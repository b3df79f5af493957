"""Rent and bill ledger: settlement state, payment application, duplicate rule.

RentStatus and Bill are derived aggregates. Every change to their paid
amount goes through apply_rent_payment / apply_bill_payment, which also
append a LedgerEntry so the per-payment history survives reversals.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import NamedTuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from rentarium.models.bill import Bill, SettlementStatus
from rentarium.models.ledger_entry import EntryKind, LedgerEntry
from rentarium.models.payment import Payment, PaymentStatus, PaymentType
from rentarium.models.rent_status import RentStatus
from rentarium.models.tenant import Tenant
from rentarium.services.bills_service import settlement_status
from rentarium.services.db import write_transaction
from rentarium.services.errors import DuplicatePaymentError, NotFoundError, ValidationError
from rentarium.services.locale_service import format_amount, format_day
from rentarium.services.localizer import t
from rentarium.services.money import ZERO, round2, to_decimal
from rentarium.services.period_service import current_month, current_period, parse_month, rent_due_date

logger = logging.getLogger(__name__)

APPLIED_STATUSES = (PaymentStatus.VERIFIED, PaymentStatus.COMPLETED)


class DuplicateCheck(NamedTuple):
    """Outcome of the one-payment-per-period rule."""

    allowed: bool
    reason: str | None
    period: str | None


class PeriodSummary(NamedTuple):
    """Which payment types are settled for the tenant's current period."""

    period: str
    rent_paid: bool
    bills_paid: bool
    all_paid: bool


class TenantSummary(NamedTuple):
    """Rent and bill standing of a tenant for one month."""

    rent: RentStatus
    bill: Bill | None
    total_due: Decimal


@dataclass
class Notification:
    """Tenant-facing message about rent or bill standing."""

    type: str
    """One of success, warning, error."""
    title: str
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def coerce_payment_type(value: PaymentType | str) -> PaymentType:
    """Accept a PaymentType, its value ("rent") or its label ("Monthly Rent")."""
    if isinstance(value, PaymentType):
        return value
    for payment_type in PaymentType:
        if value in (payment_type.value, payment_type.label):
            return payment_type
    raise ValidationError(f"Unknown payment type '{value}'")


class LedgerService:
    """Service for rent status and bill settlement.

    Used by PaymentService to apply and reverse payments, and by
    presentation layers to show what a tenant owes.
    """

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session

    # ========== RENT STATUS ==========

    def get_rent_status(self, tenant_id: int, month: str) -> RentStatus | None:
        """Get the rent status for (tenant, month) without creating it."""
        return self.db.execute(
            select(RentStatus).where(RentStatus.tenant_id == tenant_id, RentStatus.month == month)
        ).scalar_one_or_none()

    def rent_status(self, tenant_id: int, month: str) -> RentStatus:
        """Get or create the rent status for (tenant, month).

        Creation defaults:
            required_amount = tenant's current monthly rent
            paid_amount = 0, remaining_amount = required_amount
            status = unpaid, due_date = 1st of the month

        Raises:
            NotFoundError: If the tenant does not exist
            ValidationError: If month is not YYYY-MM
        """
        parse_month(month)
        status = self.get_rent_status(tenant_id, month)
        if status is not None:
            return status

        tenant = self._get_tenant(tenant_id)
        required = round2(tenant.monthly_rent or ZERO)
        with write_transaction(self.db):
            status = RentStatus(
                tenant_id=tenant_id,
                month=month,
                required_amount=required,
                paid_amount=ZERO,
                remaining_amount=required,
                status=SettlementStatus.UNPAID,
                due_date=rent_due_date(month),
            )
            self.db.add(status)
            self.db.flush()

        logger.info("Opened rent status %s for tenant %d month %s", status.code, tenant_id, month)
        return status

    def rent_history(self, tenant_id: int) -> list[RentStatus]:
        """All rent statuses of a tenant, newest month first."""
        return list(
            self.db.execute(
                select(RentStatus)
                .where(RentStatus.tenant_id == tenant_id)
                .order_by(RentStatus.month.desc())
            ).scalars()
        )

    def apply_rent_payment(
        self,
        tenant_id: int,
        month: str,
        delta: Decimal,
        payment_id: int,
    ) -> RentStatus:
        """Add a signed amount to the month's rent and re-derive its status.

        Positive delta applies a verified payment, negative delta reverses one.
        Paid amount never drops below zero; remaining is floored at zero.

        Returns:
            Updated RentStatus
        """
        delta = round2(to_decimal(delta, "delta"))
        with write_transaction(self.db):
            status = self.rent_status(tenant_id, month)
            new_paid = max(ZERO, status.paid_amount + delta)
            applied = new_paid - status.paid_amount

            status.paid_amount = new_paid
            status.remaining_amount = max(ZERO, status.required_amount - new_paid)
            status.status = settlement_status(new_paid, status.required_amount)
            self._record(payment_id, tenant_id, applied, delta, rent_status=status)

        logger.info(
            "Rent %s tenant %d %s: %+.2f by payment %d -> paid=%s remaining=%s (%s)",
            status.code,
            tenant_id,
            month,
            applied,
            payment_id,
            status.paid_amount,
            status.remaining_amount,
            status.status.value,
        )
        return status

    # ========== BILLS ==========

    def bill_for_month(self, tenant_id: int, month: str) -> Bill | None:
        return self.db.execute(
            select(Bill).where(Bill.tenant_id == tenant_id, Bill.month == month)
        ).scalar_one_or_none()

    def apply_bill_payment(self, bill_id: int, delta: Decimal, payment_id: int) -> Bill:
        """Add a signed amount to a bill's paid amount and re-derive its status.

        Increases are capped at the bill total; decreases stop at zero. The
        ledger entry records what was actually applied, so a later reversal
        restores the bill exactly.

        Raises:
            NotFoundError: If the bill does not exist
        """
        delta = round2(to_decimal(delta, "delta"))
        bill = self.db.get(Bill, bill_id)
        if bill is None:
            raise NotFoundError(f"Bill {bill_id} not found")

        with write_transaction(self.db):
            if delta >= ZERO:
                applied = min(delta, max(ZERO, bill.total_amount - bill.paid_amount))
            else:
                applied = max(delta, -bill.paid_amount)

            bill.paid_amount = bill.paid_amount + applied
            bill.status = settlement_status(bill.paid_amount, bill.total_amount)
            self._record(payment_id, bill.tenant_id, applied, delta, bill=bill)

        if applied != delta:
            logger.warning(
                "Bill %s: payment %d requested %+.2f, applied %+.2f (capped)",
                bill.code,
                payment_id,
                delta,
                applied,
            )
        logger.info(
            "Bill %s: %+.2f by payment %d -> paid=%s of %s (%s)",
            bill.code,
            applied,
            payment_id,
            bill.paid_amount,
            bill.total_amount,
            bill.status.value,
        )
        return bill

    # ========== PAYMENT HISTORY ==========

    def entries_for_payment(self, payment_id: int) -> list[LedgerEntry]:
        return list(
            self.db.execute(
                select(LedgerEntry)
                .where(LedgerEntry.payment_id == payment_id)
                .order_by(LedgerEntry.id.asc())
            ).scalars()
        )

    def applied_amount(self, payment_id: int) -> Decimal:
        """Net amount a payment currently has applied to the ledger."""
        return sum((entry.amount for entry in self.entries_for_payment(payment_id)), ZERO)

    def _record(
        self,
        payment_id: int,
        tenant_id: int,
        applied: Decimal,
        delta: Decimal,
        rent_status: RentStatus | None = None,
        bill: Bill | None = None,
    ) -> LedgerEntry:
        entry = LedgerEntry(
            payment_id=payment_id,
            tenant_id=tenant_id,
            amount=applied,
            kind=EntryKind.REVERSAL if delta < ZERO else EntryKind.APPLY,
            rent_status=rent_status,
            bill=bill,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    # ========== DUPLICATE PAYMENT RULE ==========

    def duplicate_check(
        self,
        tenant_id: int,
        payment_type: PaymentType | str,
        period: str | None = None,
        today: date | None = None,
    ) -> DuplicateCheck:
        """Decide whether a new payment of this type may be created.

        A type is settled for a period once it has a verified/completed
        payment and its ledger item (rent status or bill) is fully paid.
        Partial payments leave the type open so the balance can be paid.

        Args:
            tenant_id: Paying tenant
            payment_type: PaymentType, "rent"/"bill" or "Monthly Rent"/"Utility Bills"
            period: YYYY-MM to check (default: tenant's current period)
            today: Reference date for the current period

        Returns:
            DuplicateCheck with allowed flag, refusal reason and the checked period
        """
        payment_type = coerce_payment_type(payment_type)
        tenant = self.db.get(Tenant, tenant_id)
        if tenant is None:
            return DuplicateCheck(False, t("duplicates.tenant_not_found"), None)

        period = period or current_period(tenant, today)
        if not period:
            return DuplicateCheck(False, t("duplicates.no_period"), None)

        rent_paid = self._type_settled(tenant_id, PaymentType.RENT, period)
        bills_paid = self._type_settled(tenant_id, PaymentType.BILL, period)

        if payment_type == PaymentType.RENT and rent_paid:
            return DuplicateCheck(False, t("duplicates.rent_paid"), period)
        if payment_type == PaymentType.BILL and bills_paid:
            return DuplicateCheck(False, t("duplicates.bills_paid"), period)
        if rent_paid and bills_paid:
            return DuplicateCheck(False, t("duplicates.all_paid"), period)

        return DuplicateCheck(True, None, period)

    def ensure_payment_allowed(
        self,
        tenant_id: int,
        payment_type: PaymentType | str,
        period: str | None = None,
        today: date | None = None,
    ) -> str:
        """Enforce the duplicate rule.

        Returns:
            The period that was checked

        Raises:
            DuplicatePaymentError: If the rule refuses the payment
        """
        check = self.duplicate_check(tenant_id, payment_type, period=period, today=today)
        if not check.allowed:
            logger.warning(
                "Refused %s payment for tenant %d period %s: %s",
                coerce_payment_type(payment_type).value,
                tenant_id,
                check.period,
                check.reason,
            )
            raise DuplicatePaymentError(check.reason)
        return check.period

    def _type_settled(self, tenant_id: int, payment_type: PaymentType, period: str) -> bool:
        applied_payment = self.db.execute(
            select(Payment.id)
            .where(
                Payment.tenant_id == tenant_id,
                Payment.payment_type == payment_type,
                Payment.month == period,
                Payment.status.in_(APPLIED_STATUSES),
            )
            .limit(1)
        ).first()
        if applied_payment is None:
            return False

        if payment_type == PaymentType.RENT:
            item = self.get_rent_status(tenant_id, period)
        else:
            item = self.bill_for_month(tenant_id, period)
        return item is not None and item.status == SettlementStatus.PAID

    # ========== SUMMARIES ==========

    def period_summary(self, tenant_id: int, today: date | None = None) -> PeriodSummary | None:
        """Settlement of both payment types for the tenant's current period.

        Returns:
            PeriodSummary, or None if the tenant or its period is unknown
        """
        tenant = self.db.get(Tenant, tenant_id)
        period = current_period(tenant, today) if tenant else None
        if period is None:
            return None

        rent_paid = self._type_settled(tenant_id, PaymentType.RENT, period)
        bills_paid = self._type_settled(tenant_id, PaymentType.BILL, period)
        return PeriodSummary(
            period=period,
            rent_paid=rent_paid,
            bills_paid=bills_paid,
            all_paid=rent_paid and bills_paid,
        )

    def tenant_summary(
        self,
        tenant_id: int,
        month: str | None = None,
        today: date | None = None,
    ) -> TenantSummary:
        """Rent status, bill and total amount due for a month (default: calendar month)."""
        month = month or current_month(today)
        rent = self.rent_status(tenant_id, month)
        bill = self.bill_for_month(tenant_id, month)
        bill_due = bill.balance if bill else ZERO
        return TenantSummary(rent=rent, bill=bill, total_due=round2(rent.remaining_amount + bill_due))

    def notifications(
        self,
        tenant_id: int,
        month: str | None = None,
        today: date | None = None,
    ) -> list[Notification]:
        """Build rent and bill standing messages for a tenant."""
        month = month or current_month(today)
        rent = self.rent_status(tenant_id, month)
        notifications: list[Notification] = []

        if rent.status == SettlementStatus.PAID:
            notifications.append(
                Notification(
                    "success",
                    t("notifications.rent_paid.title"),
                    t("notifications.rent_paid.message", month=month),
                )
            )
        elif rent.status == SettlementStatus.PARTIAL:
            notifications.append(
                Notification(
                    "warning",
                    t("notifications.rent_partial.title"),
                    t(
                        "notifications.rent_partial.message",
                        paid=format_amount(rent.paid_amount),
                        required=format_amount(rent.required_amount),
                        remaining=format_amount(rent.remaining_amount),
                    ),
                )
            )
        else:
            notifications.append(
                Notification(
                    "error",
                    t("notifications.rent_unpaid.title"),
                    t(
                        "notifications.rent_unpaid.message",
                        month=month,
                        required=format_amount(rent.required_amount),
                        due_date=format_day(rent.due_date),
                    ),
                )
            )

        bill = self.bill_for_month(tenant_id, month)
        if bill is not None:
            if bill.status == SettlementStatus.PAID:
                notifications.append(
                    Notification(
                        "success",
                        t("notifications.bill_paid.title"),
                        t("notifications.bill_paid.message", month=bill.month),
                    )
                )
            elif bill.status == SettlementStatus.PARTIAL:
                notifications.append(
                    Notification(
                        "warning",
                        t("notifications.bill_partial.title"),
                        t(
                            "notifications.bill_partial.message",
                            remaining=format_amount(bill.total_amount - bill.paid_amount),
                            total=format_amount(bill.total_amount),
                        ),
                    )
                )
            else:
                notifications.append(
                    Notification(
                        "error",
                        t("notifications.bill_unpaid.title"),
                        t(
                            "notifications.bill_unpaid.message",
                            month=bill.month,
                            total=format_amount(bill.total_amount),
                            due_date=format_day(bill.due_date),
                        ),
                    )
                )

        return notifications

    def _get_tenant(self, tenant_id: int) -> Tenant:
        tenant = self.db.get(Tenant, tenant_id)
        if tenant is None:
            raise NotFoundError(f"Tenant {tenant_id} not found")
        return tenant


__all__ = [
    "LedgerService",
    "DuplicateCheck",
    "PeriodSummary",
    "TenantSummary",
    "Notification",
    "coerce_payment_type",
    "APPLIED_STATUSES",
]
