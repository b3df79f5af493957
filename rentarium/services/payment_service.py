"""Payment processor: payment creation, verification state machine, queries.

Payments are the source of truth for money movement. A payment counts
toward the ledger while it is verified or completed; moving it into one of
those states applies its amount, moving it out reverses exactly what was
applied.
"""

import logging
import random
import re
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import NamedTuple

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from rentarium.models.bill import Bill
from rentarium.models.payment import Payment, PaymentStatus, PaymentType
from rentarium.models.tenant import Tenant
from rentarium.schemas.payments import BillPaymentIntent, RentPaymentIntent, parse_intent
from rentarium.services.audit_service import AuditService
from rentarium.services.db import write_transaction
from rentarium.services.errors import InvalidStateError, NotFoundError, ValidationError
from rentarium.services.ledger_service import LedgerService, coerce_payment_type
from rentarium.services.localizer import t
from rentarium.services.money import ZERO, round2
from rentarium.services.period_service import current_month, current_period

logger = logging.getLogger(__name__)

METHOD_PREFIXES = {
    "gcash": "GC",
    "bpi": "BPI",
    "cash": "CSH",
}

_CODE_RE = re.compile(r"^pay-(\d+)$", re.IGNORECASE)


def generate_reference(method: str, now: datetime | None = None) -> str:
    """Build a payment reference like ``GC-1710921600000-4821``.

    Prefix comes from the payment method (REF for unknown methods), followed
    by a millisecond timestamp and a random suffix.
    """
    now = now or datetime.now(timezone.utc)
    prefix = METHOD_PREFIXES.get((method or "").lower(), "REF")
    return f"{prefix}-{int(now.timestamp() * 1000)}-{random.randint(0, 9999)}"


class PaymentStats(NamedTuple):
    """Dashboard counters over all payments."""

    total: int
    pending: int
    verified: int
    rejected: int
    total_amount: Decimal
    paid_amount: Decimal
    pending_amount: Decimal


class PaymentService:
    """Core payment operations service."""

    def __init__(self, db_session: Session, ledger: LedgerService | None = None):
        """Initialize payment service.

        Args:
            db_session: SQLAlchemy database session
            ledger: Ledger to apply payments to (default: one on the same session)
        """
        self.db = db_session
        self.ledger = ledger or LedgerService(db_session)

    # ========== CREATION ==========

    def create_rent_payment(
        self,
        tenant_id: int,
        amount: Decimal | float | str,
        method: str,
        month: str | None = None,
        notes: str | None = "",
        status: PaymentStatus | str = PaymentStatus.PENDING,
        reference: str | None = None,
        actor: str | None = None,
        today: date | None = None,
    ) -> Payment:
        """Submit a rent payment.

        The month defaults to the tenant's current period (calendar month when
        the tenant has no lease start). Payments created directly as verified
        or completed are applied to the ledger at once.

        Returns:
            Created Payment

        Raises:
            ValidationError: Malformed amount, method, month or status
            NotFoundError: Unknown tenant
            DuplicatePaymentError: Rent for the period is already settled
        """
        intent = parse_intent(
            RentPaymentIntent,
            tenant_id=tenant_id,
            amount=amount,
            method=method,
            month=month,
            notes=notes or "",
            status=status,
            reference=reference,
        )
        tenant = self._get_tenant(intent.tenant_id)
        period = intent.month or current_period(tenant, today) or current_month(today)
        self.ledger.ensure_payment_allowed(tenant.id, PaymentType.RENT, period=period, today=today)

        return self._create(tenant, PaymentType.RENT, intent, period, None, intent.notes, actor)

    def create_bill_payment(
        self,
        tenant_id: int,
        bill_id: int,
        amount: Decimal | float | str,
        method: str,
        notes: str | None = "",
        status: PaymentStatus | str = PaymentStatus.PENDING,
        reference: str | None = None,
        actor: str | None = None,
        today: date | None = None,
    ) -> Payment:
        """Submit a payment toward a specific utility bill.

        Returns:
            Created Payment

        Raises:
            ValidationError: Malformed input, or the bill belongs to another tenant
            NotFoundError: Unknown tenant or bill
            DuplicatePaymentError: Bills for the period are already settled
        """
        intent = parse_intent(
            BillPaymentIntent,
            tenant_id=tenant_id,
            bill_id=bill_id,
            amount=amount,
            method=method,
            notes=notes or "",
            status=status,
            reference=reference,
        )
        tenant = self._get_tenant(intent.tenant_id)
        bill = self.db.get(Bill, intent.bill_id)
        if bill is None:
            raise NotFoundError(f"Bill {intent.bill_id} not found")
        if bill.tenant_id != tenant.id:
            raise ValidationError(f"Bill {bill.code} does not belong to tenant {tenant.id}")
        self.ledger.ensure_payment_allowed(tenant.id, PaymentType.BILL, period=bill.month, today=today)

        notes = intent.notes or t("payments.bill_default_note", month=bill.month)
        return self._create(tenant, PaymentType.BILL, intent, bill.month, bill.id, notes, actor)

    def _create(
        self,
        tenant: Tenant,
        payment_type: PaymentType,
        intent: RentPaymentIntent | BillPaymentIntent,
        month: str,
        bill_id: int | None,
        notes: str,
        actor: str | None,
    ) -> Payment:
        with write_transaction(self.db):
            payment = Payment(
                payment_type=payment_type,
                tenant_id=tenant.id,
                bill_id=bill_id,
                tenant_name=tenant.name,
                unit_number=tenant.unit_number,
                amount=round2(intent.amount),
                month=month,
                method=intent.method,
                status=intent.status,
                reference=intent.reference or generate_reference(intent.method),
                submitted_at=datetime.now(timezone.utc),
                notes=notes,
                admin_notes="",
            )
            self.db.add(payment)
            self.db.flush()

            if payment.status.is_applied:
                payment.paid_at = datetime.now(timezone.utc)
                self._apply(payment, payment.amount)

            AuditService.log(
                self.db,
                "payment",
                payment.id,
                "create",
                actor=actor,
                changes={
                    "type": payment_type.value,
                    "amount": str(payment.amount),
                    "month": month,
                    "status": payment.status.value,
                },
            )

        logger.info(
            "Created %s payment %s for tenant %d: %s via %s for %s (%s)",
            payment_type.value,
            payment.code,
            tenant.id,
            payment.amount,
            payment.method,
            month,
            payment.status.value,
        )
        return payment

    # ========== STATUS STATE MACHINE ==========

    def set_status(
        self,
        payment_id: int,
        new_status: PaymentStatus | str,
        admin_notes: str | None = "",
        actor: str | None = None,
        today: date | None = None,
    ) -> Payment:
        """Move a payment to a new status, applying or reversing its amount.

        - non-applied -> verified/completed: apply amount, stamp paid_at
          (a rejected payment being re-verified is applied afresh)
        - verified/completed -> pending/rejected: reverse the applied amount
        - verified <-> completed: no money moves

        Raises:
            NotFoundError: Unknown payment
            ValidationError: Unknown status value
            InvalidStateError: Same status, or the target bill no longer exists
            DuplicatePaymentError: Applying would pay an already settled period
        """
        try:
            new_status = PaymentStatus(new_status)
        except ValueError as e:
            raise ValidationError(f"Unknown payment status '{new_status}'") from e

        payment = self.get_payment(payment_id)
        old_status = payment.status
        if old_status == new_status:
            raise InvalidStateError(f"Payment {payment.code} is already {new_status.value}")

        entering = new_status.is_applied and not old_status.is_applied
        leaving = old_status.is_applied and not new_status.is_applied

        if (entering or leaving) and payment.payment_type == PaymentType.BILL:
            if payment.bill_id is None or self.db.get(Bill, payment.bill_id) is None:
                raise InvalidStateError(f"Payment {payment.code} has no bill to apply to")
        if entering:
            self.ledger.ensure_payment_allowed(
                payment.tenant_id, payment.payment_type, period=payment.month, today=today
            )

        with write_transaction(self.db):
            payment.status = new_status
            payment.admin_notes = admin_notes or ""

            if entering:
                payment.paid_at = datetime.now(timezone.utc)
                self._apply(payment, payment.amount)
            elif leaving:
                applied = self.ledger.applied_amount(payment.id)
                if applied != ZERO:
                    self._apply(payment, -applied)
                payment.paid_at = None

            AuditService.log(
                self.db,
                "payment",
                payment.id,
                "status_change",
                actor=actor,
                changes={"old": old_status.value, "new": new_status.value},
            )

        logger.info(
            "Payment %s: %s -> %s%s",
            payment.code,
            old_status.value,
            new_status.value,
            " (applied)" if entering else " (reversed)" if leaving else "",
        )
        return payment

    def _apply(self, payment: Payment, delta: Decimal) -> None:
        if payment.payment_type == PaymentType.RENT:
            self.ledger.apply_rent_payment(payment.tenant_id, payment.month, delta, payment.id)
        else:
            self.ledger.apply_bill_payment(payment.bill_id, delta, payment.id)

    # ========== QUERIES ==========

    def get_payment(self, payment_id: int) -> Payment:
        """Get payment by ID.

        Raises:
            NotFoundError: If no such payment exists
        """
        payment = self.db.get(Payment, payment_id)
        if payment is None:
            raise NotFoundError(f"Payment {payment_id} not found")
        return payment

    def tenant_payments(self, tenant_id: int) -> list[Payment]:
        """All payments of a tenant, newest first."""
        return list(
            self.db.execute(
                select(Payment)
                .where(Payment.tenant_id == tenant_id)
                .order_by(Payment.submitted_at.desc(), Payment.id.desc())
            ).scalars()
        )

    def filter_payments(
        self,
        status: PaymentStatus | str | None = None,
        method: str | None = None,
        payment_type: PaymentType | str | None = None,
        search: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[Payment]:
        """Filter payments for the admin list.

        "all" (or None) disables a filter. search matches tenant name, unit,
        reference or payment code (PAY-0001), case-insensitively.

        Raises:
            ValidationError: If status or payment_type is not a known value
        """
        stmt = select(Payment)

        if status and status != "all":
            try:
                status = PaymentStatus(status)
            except ValueError as e:
                raise ValidationError(f"Unknown payment status '{status}'") from e
            stmt = stmt.where(Payment.status == status)
        if method and method != "all":
            stmt = stmt.where(Payment.method == method)
        if payment_type and payment_type != "all":
            stmt = stmt.where(Payment.payment_type == coerce_payment_type(payment_type))
        if search:
            pattern = f"%{search.strip()}%"
            conditions = [
                Payment.tenant_name.ilike(pattern),
                Payment.unit_number.ilike(pattern),
                Payment.reference.ilike(pattern),
            ]
            code_match = _CODE_RE.match(search.strip())
            if code_match:
                conditions.append(Payment.id == int(code_match.group(1)))
            stmt = stmt.where(or_(*conditions))
        if start:
            stmt = stmt.where(Payment.submitted_at >= start)
        if end:
            stmt = stmt.where(Payment.submitted_at <= end)

        return list(self.db.execute(stmt.order_by(Payment.id.asc())).scalars())

    def payment_stats(self) -> PaymentStats:
        """Counts and sums across all payments (verified includes completed)."""
        payments = list(self.db.execute(select(Payment)).scalars())
        applied = [p for p in payments if p.status.is_applied]
        pending = [p for p in payments if p.status == PaymentStatus.PENDING]
        return PaymentStats(
            total=len(payments),
            pending=len(pending),
            verified=len(applied),
            rejected=sum(1 for p in payments if p.status == PaymentStatus.REJECTED),
            total_amount=sum((p.amount for p in payments), ZERO),
            paid_amount=sum((p.amount for p in applied), ZERO),
            pending_amount=sum((p.amount for p in pending), ZERO),
        )

    def delete_payment(self, payment_id: int, actor: str | None = None) -> None:
        """Delete a payment that never touched the ledger.

        Raises:
            NotFoundError: Unknown payment
            InvalidStateError: Payment is applied, or has ledger history
        """
        payment = self.get_payment(payment_id)
        if payment.status.is_applied:
            raise InvalidStateError(f"Payment {payment.code} is {payment.status.value}; reject it first")
        if self.ledger.entries_for_payment(payment.id):
            raise InvalidStateError(f"Payment {payment.code} has ledger history and cannot be deleted")

        code = payment.code
        with write_transaction(self.db):
            AuditService.log(
                self.db,
                "payment",
                payment.id,
                "delete",
                actor=actor,
                changes={"amount": str(payment.amount), "status": payment.status.value},
            )
            self.db.delete(payment)

        logger.info("Deleted payment %s", code)

    def _get_tenant(self, tenant_id: int) -> Tenant:
        tenant = self.db.get(Tenant, tenant_id)
        if tenant is None:
            raise NotFoundError(f"Tenant {tenant_id} not found")
        return tenant


__all__ = ["PaymentService", "PaymentStats", "generate_reference", "METHOD_PREFIXES"]
