"""Tenant ORM model: the lease and rent facts the ledger reads."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, Numeric, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from rentarium.models import Base, BaseModel, money_str


class TenantStatus(str, Enum):
    """Lifecycle status of a tenant record."""

    ACTIVE = "active"
    PENDING = "pending"
    TERMINATED = "terminated"
    EXPIRED = "expired"
    INACTIVE = "inactive"


class Tenant(Base, BaseModel):
    """Model representing a tenant with an optional lease.

    Owned by tenant management. The ledger only reads monthly_rent and the
    lease dates; unit occupancy reacts to termination.
    """

    __tablename__ = "tenants"

    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        index=True,
        comment="Login name, also the session identity of the tenant",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_number: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Unit currently assigned to the tenant",
    )
    monthly_rent: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0.00"),
    )
    lease_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    lease_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    status: Mapped[TenantStatus] = mapped_column(
        SQLEnum(TenantStatus),
        nullable=False,
        default=TenantStatus.ACTIVE,
        index=True,
    )
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    contact_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Termination details, set by TenantService.terminate
    terminated_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    termination_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    termination_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "unit": self.unit_number,
            "monthlyRent": money_str(self.monthly_rent),
            "leaseStart": self.lease_start.isoformat() if self.lease_start else None,
            "leaseEnd": self.lease_end.isoformat() if self.lease_end else None,
            "status": self.status.value if self.status else None,
        }

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, username={self.username}, status={self.status})>"


__all__ = ["Tenant", "TenantStatus"]
