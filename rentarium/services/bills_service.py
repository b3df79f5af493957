"""Utility bill generation and lookup."""

import logging
from datetime import date
from decimal import Decimal
from typing import NamedTuple

from sqlalchemy import select
from sqlalchemy.orm import Session

from rentarium.models.bill import Bill, SettlementStatus
from rentarium.models.tenant import Tenant
from rentarium.services.audit_service import AuditService
from rentarium.services.db import write_transaction
from rentarium.services.errors import InvalidStateError, NotFoundError, ValidationError
from rentarium.services.money import ZERO, round2, to_quantity
from rentarium.services.period_service import bill_due_date, current_month, parse_month
from rentarium.services.rates_service import RatesService

logger = logging.getLogger(__name__)


class UtilityCharges(NamedTuple):
    """Priced consumption for one bill."""

    electricity_rate: Decimal
    electricity_amount: Decimal
    water_rate: Decimal
    water_amount: Decimal
    total_amount: Decimal


def calculate_charges(
    electricity_kwh: Decimal,
    water_cubic: Decimal,
    electricity_rate: Decimal,
    water_rate: Decimal,
) -> UtilityCharges:
    """Price consumption at the given rates.

    Formula:
        electricity_amount = round2(kwh × electricity_rate)
        water_amount = round2(cubic × water_rate)
        total_amount = round2(electricity_amount + water_amount)

    Example:
        >>> calculate_charges(Decimal("120"), Decimal("10"), Decimal("11.50"), Decimal("25.00"))
        UtilityCharges(..., electricity_amount=Decimal('1380.00'), ..., total_amount=Decimal('1630.00'))
    """
    electricity_amount = round2(electricity_kwh * electricity_rate)
    water_amount = round2(water_cubic * water_rate)
    return UtilityCharges(
        electricity_rate=electricity_rate,
        electricity_amount=electricity_amount,
        water_rate=water_rate,
        water_amount=water_amount,
        total_amount=round2(electricity_amount + water_amount),
    )


def settlement_status(paid: Decimal, due: Decimal) -> SettlementStatus:
    """Status rule shared by rent and bills: nothing paid is unpaid, full is paid."""
    if paid <= ZERO:
        return SettlementStatus.UNPAID
    if paid >= due:
        return SettlementStatus.PAID
    return SettlementStatus.PARTIAL


class BillsService:
    """Service for utility bill database operations.

    Encapsulates Bill generation (pricing consumption at the current rates)
    and Bill lookups. Payment application lives in LedgerService.
    """

    def __init__(self, db_session: Session, rates: RatesService | None = None):
        """Initialize with database session."""
        self.db = db_session
        self.rates = rates or RatesService(db_session)

    def generate_bill(
        self,
        tenant_id: int,
        month: str,
        electricity_kwh: Decimal | float | str,
        water_cubic: Decimal | float | str,
        actor: str | None = None,
    ) -> Bill:
        """Generate (or regenerate) the utility bill for a tenant and month.

        Regenerating an existing month updates consumption, the rate snapshot
        and totals in place. The bill id, paid amount and payment history are
        kept; status is re-derived from the kept paid amount. Consumption and
        rates are stored unrounded and only the priced amounts are rounded to
        cents. A regeneration that would price the bill below what is already
        paid is refused; the overpaying payments have to be rejected first.

        Args:
            tenant_id: Tenant being billed
            month: Billing month, YYYY-MM
            electricity_kwh: Electricity consumption in kWh
            water_cubic: Water consumption in cubic meters
            actor: Username of the administrator generating the bill

        Returns:
            The created or updated Bill

        Raises:
            NotFoundError: If the tenant does not exist
            ValidationError: If month or consumption is malformed
            InvalidStateError: If the new total is below the bill's paid amount
        """
        parse_month(month)
        kwh = to_quantity(electricity_kwh, "electricity_kwh")
        cubic = to_quantity(water_cubic, "water_cubic")
        if kwh < 0 or cubic < 0:
            raise ValidationError("Consumption cannot be negative")
        if self.db.get(Tenant, tenant_id) is None:
            raise NotFoundError(f"Tenant {tenant_id} not found")

        rates = self.rates.get()
        charges = calculate_charges(kwh, cubic, rates.electricity_rate, rates.water_rate)

        with write_transaction(self.db):
            bill = self.get_bill_for_month(tenant_id, month)
            created = bill is None
            if created:
                bill = Bill(
                    tenant_id=tenant_id,
                    month=month,
                    paid_amount=ZERO,
                    due_date=bill_due_date(month),
                )
                self.db.add(bill)
            elif bill.paid_amount > charges.total_amount:
                raise InvalidStateError(
                    f"Bill {bill.code} has {bill.paid_amount} paid, more than the new total "
                    f"{charges.total_amount}; reject payments before regenerating"
                )

            bill.electricity_kwh = kwh
            bill.electricity_rate = charges.electricity_rate
            bill.electricity_amount = charges.electricity_amount
            bill.water_cubic = cubic
            bill.water_rate = charges.water_rate
            bill.water_amount = charges.water_amount
            bill.total_amount = charges.total_amount
            bill.status = settlement_status(bill.paid_amount, bill.total_amount)
            self.db.flush()

            AuditService.log(
                self.db,
                "bill",
                bill.id,
                "create" if created else "regenerate",
                actor=actor,
                changes={"month": month, "total_amount": str(charges.total_amount)},
            )

        logger.info(
            "%s bill %s for tenant %d month %s: total=%s",
            "Created" if created else "Regenerated",
            bill.code,
            tenant_id,
            month,
            bill.total_amount,
        )
        return bill

    def get_bill(self, bill_id: int) -> Bill:
        """Get bill by ID.

        Raises:
            NotFoundError: If no such bill exists
        """
        bill = self.db.get(Bill, bill_id)
        if bill is None:
            raise NotFoundError(f"Bill {bill_id} not found")
        return bill

    def get_bill_for_month(self, tenant_id: int, month: str) -> Bill | None:
        return self.db.execute(
            select(Bill).where(Bill.tenant_id == tenant_id, Bill.month == month)
        ).scalar_one_or_none()

    def tenant_bills(self, tenant_id: int) -> list[Bill]:
        """All bills of a tenant, newest month first."""
        return list(
            self.db.execute(
                select(Bill).where(Bill.tenant_id == tenant_id).order_by(Bill.month.desc())
            ).scalars()
        )

    def current_month_bill(self, tenant_id: int, today: date | None = None) -> Bill | None:
        """Bill for the calendar month containing today, if generated."""
        return self.get_bill_for_month(tenant_id, current_month(today))


__all__ = ["BillsService", "UtilityCharges", "calculate_charges", "settlement_status"]
