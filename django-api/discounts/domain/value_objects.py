"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Self
from uuid import UUID

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value: int | float | str | Decimal) -> Decimal:
    """Convert a numeric input to Decimal without binary float artifacts."""
    if isinstance(value, bool):
        raise ValueError("Boolean is not a numeric amount")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Not a numeric value: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Not a finite value: {value!r}")
    return result


def round_money(value: Decimal) -> Decimal:
    rounded = value.quantize(CENTS, rounding=ROUND_HALF_UP)
    # -0.004 rounds to -0.00
    return rounded.copy_abs() if rounded.is_zero() else rounded


@dataclass(frozen=True)
class DiscountRuleId:
    """Unique identifier for a DiscountRule."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Money:
    """Non-negative monetary amount kept at two decimal places."""

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValueError("Money amount must be a Decimal, use Money.of()")
        if not self.amount.is_finite():
            raise ValueError("Money amount must be a finite number")
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    @classmethod
    def of(cls, value: int | float | str | Decimal) -> Self:
        return cls(amount=round_money(to_decimal(value)))

    @classmethod
    def zero(cls) -> Self:
        return cls(amount=Decimal("0.00"))

    def add(self, other: "Money") -> "Money":
        return Money(amount=round_money(self.amount + other.amount))

    def subtract_floor(self, other: "Money") -> "Money":
        """Subtract, flooring the result at zero."""
        return Money(amount=round_money(max(Decimal("0"), self.amount - other.amount)))

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Percentage:
    """A rate between 0 and 100 inclusive."""

    value: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            raise ValueError("Percentage value must be a Decimal, use Percentage.of()")
        if not self.value.is_finite():
            raise ValueError("Percentage must be a finite number")
        if self.value < 0 or self.value > HUNDRED:
            raise ValueError("Percentage must be between 0 and 100")

    @classmethod
    def of(cls, value: int | float | str | Decimal) -> Self:
        return cls(value=to_decimal(value))

    def as_decimal(self) -> Decimal:
        return self.value / HUNDRED

    def apply(self, amount: Money) -> Money:
        """Return this share of amount, rounded to cents."""
        return Money(amount=round_money(amount.amount * self.value / HUNDRED))

    def __str__(self) -> str:
        return f"{self.value.normalize():f}%"
