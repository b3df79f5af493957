"""Payment ORM model: the source of truth for money movement."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentarium.models import Base, BaseModel, display_code, money_str


class PaymentType(str, Enum):
    """What a payment settles."""

    RENT = "rent"
    """Monthly rent for a period"""

    BILL = "bill"
    """A specific utility bill"""

    @property
    def label(self) -> str:
        """Name shown to tenants and used by the one-payment-per-period rule."""
        return _TYPE_LABELS[self]


_TYPE_LABELS = {
    PaymentType.RENT: "Monthly Rent",
    PaymentType.BILL: "Utility Bills",
}


class PaymentStatus(str, Enum):
    """Verification status of a payment."""

    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    COMPLETED = "completed"

    @property
    def is_applied(self) -> bool:
        """Whether a payment in this status counts toward the ledger."""
        return self in (PaymentStatus.VERIFIED, PaymentStatus.COMPLETED)


class Payment(Base, BaseModel):
    """Model representing a tenant payment toward rent or a utility bill.

    Lifecycle: created pending, then verified/completed (amount applied to the
    ledger) or rejected (amount reversed if it had been applied).
    """

    __tablename__ = "payments"

    payment_type: Mapped[PaymentType] = mapped_column(
        SQLEnum(PaymentType),
        nullable=False,
        index=True,
    )
    tenant_id: Mapped[int] = mapped_column(
        ForeignKey("tenants.id"),
        nullable=False,
        index=True,
    )
    bill_id: Mapped[int | None] = mapped_column(
        ForeignKey("bills.id", ondelete="SET NULL"),
        nullable=True,
        comment="Target bill, bill payments only",
    )

    # Snapshots taken at submission, kept for receipts and search
    tenant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    month: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        comment="Target period, YYYY-MM",
    )
    method: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[PaymentStatus] = mapped_column(
        SQLEnum(PaymentStatus),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )
    reference: Mapped[str] = mapped_column(String(100), nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str] = mapped_column(String(1000), nullable=False, default="")
    admin_notes: Mapped[str] = mapped_column(String(1000), nullable=False, default="")

    tenant: Mapped["Tenant"] = relationship(  # noqa: F821
        "Tenant",
        foreign_keys=[tenant_id],
    )
    bill: Mapped["Bill | None"] = relationship(  # noqa: F821
        "Bill",
        foreign_keys=[bill_id],
    )

    __table_args__ = (
        Index("idx_payment_tenant_month", "tenant_id", "month"),
        Index("idx_payment_tenant_type", "tenant_id", "payment_type"),
    )

    @property
    def code(self) -> str | None:
        return display_code("PAY", self.id)

    def to_dict(self) -> dict:
        return {
            "id": self.code,
            "payment_type": self.payment_type.value,
            "billId": display_code("BILL", self.bill_id),
            "tenantId": self.tenant_id,
            "tenantName": self.tenant_name,
            "unitNumber": self.unit_number,
            "amount": money_str(self.amount),
            "month": self.month,
            "method": self.method,
            "status": self.status.value,
            "reference": self.reference,
            "submittedDate": self.submitted_at.isoformat() if self.submitted_at else None,
            "paidDate": self.paid_at.isoformat() if self.paid_at else None,
            "notes": self.notes,
            "adminNotes": self.admin_notes,
        }

    def __repr__(self) -> str:
        return (
            f"<Payment(id={self.id}, type={self.payment_type}, tenant_id={self.tenant_id}, "
            f"amount={self.amount}, month={self.month}, status={self.status})>"
        )


__all__ = ["Payment", "PaymentType", "PaymentStatus"]
