"""Bill ORM model for monthly utility (electricity and water) bills."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentarium.models import Base, BaseModel, display_code, money_str, quantity_str


class SettlementStatus(str, Enum):
    """How much of a ledger item (rent or bill) has been paid."""

    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"


class Bill(Base, BaseModel):
    """
    Utility bill for one tenant and one month.

    Consumption and the rates in effect at generation time are stored on the
    bill itself. At most one bill exists per (tenant_id, month).
    """

    __tablename__ = "bills"

    tenant_id: Mapped[int] = mapped_column(
        ForeignKey("tenants.id"),
        nullable=False,
        index=True,
    )
    month: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        index=True,
        comment="Billing month, YYYY-MM",
    )

    # Electricity
    electricity_kwh: Mapped[Decimal] = mapped_column(Numeric(14, 6), nullable=False)
    electricity_rate: Mapped[Decimal] = mapped_column(Numeric(14, 6), nullable=False)
    electricity_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Water
    water_cubic: Mapped[Decimal] = mapped_column(Numeric(14, 6), nullable=False)
    water_rate: Mapped[Decimal] = mapped_column(Numeric(14, 6), nullable=False)
    water_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    status: Mapped[SettlementStatus] = mapped_column(
        SQLEnum(SettlementStatus),
        nullable=False,
        default=SettlementStatus.UNPAID,
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False)

    tenant: Mapped["Tenant"] = relationship(  # noqa: F821
        "Tenant",
        foreign_keys=[tenant_id],
    )
    entries: Mapped[list["LedgerEntry"]] = relationship(  # noqa: F821
        "LedgerEntry",
        back_populates="bill",
        order_by="LedgerEntry.id",
    )

    __table_args__ = (UniqueConstraint("tenant_id", "month", name="uq_bill_tenant_month"),)

    @property
    def code(self) -> str | None:
        return display_code("BILL", self.id)

    @property
    def payments(self) -> list[int]:
        """Payment ids applied to this bill, in application order (reversals included)."""
        return [entry.payment_id for entry in self.entries]

    @property
    def balance(self) -> Decimal:
        return max(Decimal("0.00"), self.total_amount - self.paid_amount)

    def to_dict(self) -> dict:
        return {
            "id": self.code,
            "tenantId": self.tenant_id,
            "month": self.month,
            "electricity_kwh": quantity_str(self.electricity_kwh),
            "electricity_rate": quantity_str(self.electricity_rate),
            "electricity_amount": money_str(self.electricity_amount),
            "water_cubic": quantity_str(self.water_cubic),
            "water_rate": quantity_str(self.water_rate),
            "water_amount": money_str(self.water_amount),
            "total_amount": money_str(self.total_amount),
            "paid_amount": money_str(self.paid_amount),
            "status": self.status.value,
            "createdDate": self.created_at.isoformat() if self.created_at else None,
            "dueDate": self.due_date.isoformat(),
            "payments": self.payments,
        }

    def __repr__(self) -> str:
        return (
            f"<Bill(id={self.id}, tenant_id={self.tenant_id}, month={self.month}, "
            f"total_amount={self.total_amount}, paid_amount={self.paid_amount}, "
            f"status={self.status})>"
        )


__all__ = ["Bill", "SettlementStatus"]
