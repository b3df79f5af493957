"""Unit ORM model for rentable units and their occupancy."""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentarium.models import Base, BaseModel


class UnitStatus(str, Enum):
    """Occupancy status of a unit."""

    VACANT = "vacant"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class Unit(Base, BaseModel):
    """Model representing a rentable unit."""

    __tablename__ = "units"

    unit_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    status: Mapped[UnitStatus] = mapped_column(
        SQLEnum(UnitStatus),
        nullable=False,
        default=UnitStatus.VACANT,
        index=True,
    )
    tenant_id: Mapped[int | None] = mapped_column(
        ForeignKey("tenants.id"),
        nullable=True,
        index=True,
        comment="Current occupant, null when vacant",
    )
    vacated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    vacate_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    tenant: Mapped["Tenant | None"] = relationship(  # noqa: F821
        "Tenant",
        foreign_keys=[tenant_id],
    )

    def __repr__(self) -> str:
        return f"<Unit(id={self.id}, unit_number={self.unit_number}, status={self.status})>"


__all__ = ["Unit", "UnitStatus"]
