"""Money helpers: Decimal coercion and ROUND_HALF_UP to cents."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from rentarium.services.errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# Rates and meter readings are stored as Numeric(14, 6)
QUANTITY_PLACES = 6


def round2(value: Decimal) -> Decimal:
    """Round to 2 decimal places, half up (1.005 -> 1.01)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value, field: str = "amount") -> Decimal:
    """Coerce user input (str, int, float, Decimal) to Decimal.

    Floats go through str() so 0.1 stays 0.1.

    Raises:
        ValidationError: If the value is not a finite number
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"{field} must be a number, got {value!r}") from e
    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return result


def to_quantity(value, field: str) -> Decimal:
    """Coerce a rate or meter reading without rounding it.

    Raises:
        ValidationError: If the value is not numeric or has more than 6 decimal places
    """
    result = to_decimal(value, field)
    if result.normalize().as_tuple().exponent < -QUANTITY_PLACES:
        raise ValidationError(f"{field} allows at most {QUANTITY_PLACES} decimal places, got {value!r}")
    return result


__all__ = ["CENT", "ZERO", "QUANTITY_PLACES", "round2", "to_decimal", "to_quantity"]
