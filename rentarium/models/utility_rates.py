"""Utility rate table: a single row of per-unit prices."""

from decimal import Decimal

from sqlalchemy import Numeric
from sqlalchemy.orm import Mapped, mapped_column

from rentarium.models import Base, BaseModel, quantity_str

SINGLETON_ID = 1


class UtilityRates(Base, BaseModel):
    """Per-unit utility prices used when a bill is generated.

    Exactly one row (id=1). Bills copy the rates they were priced with, so
    later updates never touch existing bills.
    """

    __tablename__ = "utility_rates"

    electricity_rate: Mapped[Decimal] = mapped_column(
        Numeric(14, 6),
        nullable=False,
        comment="Price per kWh",
    )
    water_rate: Mapped[Decimal] = mapped_column(
        Numeric(14, 6),
        nullable=False,
        comment="Price per cubic meter",
    )

    def to_dict(self) -> dict:
        return {
            "electricity_rate": quantity_str(self.electricity_rate),
            "water_rate": quantity_str(self.water_rate),
        }

    def __repr__(self) -> str:
        return (
            f"<UtilityRates(electricity_rate={self.electricity_rate}, "
            f"water_rate={self.water_rate})>"
        )


__all__ = ["UtilityRates", "SINGLETON_ID"]
