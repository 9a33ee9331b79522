"""Money arithmetic helpers

Money is a Decimal with exactly two fractional digits. Every operation
that produces Money rounds half-up to the cent; binary floats are only
accepted through their shortest string form, never their binary value.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Union
from src.domain.errors import ValidationError

MoneyInput = Union[Decimal, int, str, float]

TWO_PLACES = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

# Balances within half a cent of zero count as settled
SETTLEMENT_EPSILON = Decimal("0.005")


def to_decimal(value: MoneyInput, field: str = "amount") -> Decimal:
    """Convert input to an exact, finite Decimal

    Raises:
        ValidationError: value is not numeric, NaN or infinite
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be numeric", reason=f"{field}={value!r}")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f"{field} must be numeric", reason=f"{field}={value!r}")
    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number", reason=f"{field}={value!r}")
    return result


def ensure_places(value: Decimal, places: int, field: str = "amount") -> Decimal:
    """Reject values with more fractional digits than their column stores

    Trailing zeros do not count: 10.0000 fits two places.
    """
    if value.normalize().as_tuple().exponent < -places:
        raise ValidationError(
            f"{field} cannot have more than {places} decimal places",
            reason=f"{field}={value}",
        )
    return value


def round_money(value: MoneyInput, field: str = "amount") -> Decimal:
    """Round to two decimal places, half-up (0.125 -> 0.13)"""
    return to_decimal(value, field).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[MoneyInput]) -> Decimal:
    """Sum values after rounding each one to the cent"""
    total = ZERO
    for value in values:
        total += round_money(value)
    return round_money(total)


def is_settled(balance_due: Decimal) -> bool:
    return balance_due <= SETTLEMENT_EPSILON
