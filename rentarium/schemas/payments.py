"""Pydantic schemas for payment creation intents."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from rentarium.models.payment import PaymentStatus
from rentarium.services.errors import ValidationError

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class PaymentIntent(BaseModel):
    """Fields shared by rent and bill payment submissions."""

    tenant_id: int = Field(..., description="Paying tenant")
    amount: Decimal = Field(..., gt=0, description="Amount paid")
    method: str = Field(..., min_length=1, max_length=50, description="gcash, bpi, cash, ...")
    notes: str = Field("", max_length=1000)
    reference: str | None = Field(None, max_length=100)
    status: PaymentStatus = Field(PaymentStatus.PENDING, description="Initial status")

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("status")
    @classmethod
    def status_not_rejected(cls, value: PaymentStatus) -> PaymentStatus:
        if value == PaymentStatus.REJECTED:
            raise ValueError("a payment cannot be created as rejected")
        return value


class RentPaymentIntent(PaymentIntent):
    """Request payload for a rent payment."""

    month: str | None = Field(None, pattern=MONTH_PATTERN, description="Target period, YYYY-MM")


class BillPaymentIntent(PaymentIntent):
    """Request payload for a utility bill payment."""

    bill_id: int = Field(..., description="Bill being paid")


def parse_intent(schema: type[PaymentIntent], **data) -> PaymentIntent:
    """Validate raw input into an intent, raising the ledger's ValidationError."""
    try:
        return schema(**data)
    except PydanticValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(details) from e


__all__ = ["PaymentIntent", "RentPaymentIntent", "BillPaymentIntent", "parse_intent"]
