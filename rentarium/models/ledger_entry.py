"""Ledger entry ORM model: one application of a payment to rent or a bill."""

from decimal import Decimal
from enum import Enum

from sqlalchemy import ForeignKey, Index, Numeric
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentarium.models import Base, BaseModel


class EntryKind(str, Enum):
    """Direction of a ledger entry."""

    APPLY = "apply"
    REVERSAL = "reversal"


class LedgerEntry(Base, BaseModel):
    """Signed amount a payment moved on a RentStatus or a Bill.

    Exactly one of rent_status_id / bill_id is set. Entries are append-only:
    a rejected payment gets a REVERSAL entry, the original APPLY stays.
    The amount is what was actually applied (bill overpayments are capped).
    """

    __tablename__ = "ledger_entries"

    payment_id: Mapped[int] = mapped_column(
        ForeignKey("payments.id"),
        nullable=False,
        index=True,
    )
    tenant_id: Mapped[int] = mapped_column(ForeignKey("tenants.id"), nullable=False)
    rent_status_id: Mapped[int | None] = mapped_column(
        ForeignKey("rent_statuses.id"),
        nullable=True,
    )
    bill_id: Mapped[int | None] = mapped_column(
        ForeignKey("bills.id", ondelete="SET NULL"),
        nullable=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    kind: Mapped[EntryKind] = mapped_column(SQLEnum(EntryKind), nullable=False)

    rent_status: Mapped["RentStatus | None"] = relationship(  # noqa: F821
        "RentStatus",
        back_populates="entries",
    )
    bill: Mapped["Bill | None"] = relationship(  # noqa: F821
        "Bill",
        back_populates="entries",
    )

    __table_args__ = (
        Index("idx_ledger_entry_rent_status", "rent_status_id"),
        Index("idx_ledger_entry_bill", "bill_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<LedgerEntry(id={self.id}, payment_id={self.payment_id}, kind={self.kind}, "
            f"amount={self.amount}, rent_status_id={self.rent_status_id}, bill_id={self.bill_id})>"
        )


__all__ = ["LedgerEntry", "EntryKind"]
