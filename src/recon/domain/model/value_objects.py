"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
They encapsulate validation so invalid values can never exist.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from recon.domain.exceptions import InvalidAdjustmentError, ValidationError

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: str | float | int | Decimal, field: str = "amount") -> Decimal:
    """Coerce *value* to Decimal via ``str()`` so floats keep their display value."""
    if isinstance(value, bool):
        raise InvalidAdjustmentError(f"Invalid {field}: {value!r}", field=field)
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError) as exc:
            raise InvalidAdjustmentError(
                f"Invalid {field}: {value!r}", field=field
            ) from exc
    if not result.is_finite():
        raise InvalidAdjustmentError(f"Invalid {field}: {value!r}", field=field)
    return result


def round_money(amount: Decimal) -> Decimal:
    """Round half-up to whole cents (2.675 -> 2.68, 5.499 -> 5.50)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money:
    """Non-negative monetary amount with currency.

    Uses Decimal to avoid floating-point rounding errors that would be
    unacceptable in financial calculations.
    """

    amount: Decimal
    currency: str = "USD"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise InvalidAdjustmentError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < ZERO:
            raise InvalidAdjustmentError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        return f"${round_money(self.amount):.2f}"

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = "USD") -> Money:
        """Convenient factory that coerces to Decimal safely."""
        return Money(to_decimal(amount), currency)


@dataclass(frozen=True)
class Quantity:
    """A positive integer quantity.

    Enforces the invariant that you cannot order zero or negative items.
    """

    value: int

    def __post_init__(self) -> None:
        if not isinstance(self.value, int) or isinstance(self.value, bool):
            raise ValidationError(
                f"Quantity must be an integer, got {type(self.value).__name__}"
            )
        if self.value <= 0:
            raise ValidationError("Quantity must be positive")

    def __str__(self) -> str:
        return str(self.value)
