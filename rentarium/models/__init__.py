"""SQLAlchemy base model with common fields and model exports."""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Base class for all models
Base = declarative_base()


class BaseModel:
    """Base model with common timestamp fields."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


def display_code(prefix: str, record_id: int | None) -> str | None:
    """Human-facing record code, e.g. ``PAY-0007`` for payment 7."""
    if record_id is None:
        return None
    return f"{prefix}-{record_id:04d}"


def money_str(value) -> str | None:
    return None if value is None else f"{value:.2f}"


def quantity_str(value) -> str | None:
    """Rate or reading without padding zeros, at least 2 places (11.50, 0.125)."""
    if value is None:
        return None
    value = value.normalize()
    if value.as_tuple().exponent > -2:
        value = value.quantize(Decimal("0.01"))
    return format(value, "f")


# Import models to register them with Base (after Base is defined)
# This must be after Base declaration to avoid circular imports
from rentarium.models.audit_log import AuditLog  # noqa: E402
from rentarium.models.bill import Bill, SettlementStatus  # noqa: E402
from rentarium.models.ledger_entry import EntryKind, LedgerEntry  # noqa: E402
from rentarium.models.payment import Payment, PaymentStatus, PaymentType  # noqa: E402
from rentarium.models.rent_status import RentStatus  # noqa: E402
from rentarium.models.tenant import Tenant, TenantStatus  # noqa: E402
from rentarium.models.unit import Unit, UnitStatus  # noqa: E402
from rentarium.models.utility_rates import UtilityRates  # noqa: E402

__all__ = [
    "Base",
    "BaseModel",
    "AuditLog",
    "Bill",
    "EntryKind",
    "LedgerEntry",
    "Payment",
    "PaymentStatus",
    "PaymentType",
    "RentStatus",
    "SettlementStatus",
    "Tenant",
    "TenantStatus",
    "Unit",
    "UnitStatus",
    "UtilityRates",
    "display_code",
    "money_str",
    "quantity_str",
]
