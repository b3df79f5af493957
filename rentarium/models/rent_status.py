"""RentStatus ORM model: rent owed and paid by a tenant for one month."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentarium.models import Base, BaseModel, display_code, money_str
from rentarium.models.bill import SettlementStatus


class RentStatus(Base, BaseModel):
    """Rent settlement record for one (tenant, month).

    Created lazily the first time the month is referenced. required_amount is
    a snapshot of the tenant's monthly rent at that moment.
    """

    __tablename__ = "rent_statuses"

    tenant_id: Mapped[int] = mapped_column(
        ForeignKey("tenants.id"),
        nullable=False,
        index=True,
    )
    month: Mapped[str] = mapped_column(String(7), nullable=False, index=True)
    required_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    remaining_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[SettlementStatus] = mapped_column(
        SQLEnum(SettlementStatus),
        nullable=False,
        default=SettlementStatus.UNPAID,
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False)

    entries: Mapped[list["LedgerEntry"]] = relationship(  # noqa: F821
        "LedgerEntry",
        back_populates="rent_status",
        order_by="LedgerEntry.id",
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "month", name="uq_rent_status_tenant_month"),
    )

    @property
    def code(self) -> str | None:
        return display_code("RENT", self.id)

    @property
    def payments(self) -> list[int]:
        """Payment ids applied to this month's rent (reversals included)."""
        return [entry.payment_id for entry in self.entries]

    def to_dict(self) -> dict:
        return {
            "id": self.code,
            "tenantId": self.tenant_id,
            "month": self.month,
            "required_amount": money_str(self.required_amount),
            "paid_amount": money_str(self.paid_amount),
            "remaining_amount": money_str(self.remaining_amount),
            "status": self.status.value,
            "payments": self.payments,
            "dueDate": self.due_date.isoformat(),
        }

    def __repr__(self) -> str:
        return (
            f"<RentStatus(id={self.id}, tenant_id={self.tenant_id}, month={self.month}, "
            f"paid_amount={self.paid_amount}, remaining_amount={self.remaining_amount}, "
            f"status={self.status})>"
        )


__all__ = ["RentStatus"]
