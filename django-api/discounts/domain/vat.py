"""VAT computation over an amount and the discounts applied to it."""

import dataclasses
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Self
from uuid import UUID

from discounts.domain.rules import AppliedDiscount, utcnow
from discounts.domain.value_objects import Money, Percentage

DEFAULT_VAT_RATE = Percentage.of(12)
NO_VAT = Percentage.of(0)


def sum_discounts(applied_discounts: Iterable[AppliedDiscount]) -> Money:
    total = Money.zero()
    for discount in applied_discounts:
        total = total.add(discount.amount)
    return total


@dataclass(frozen=True)
class VATCalculation:
    """Result of applying VAT to a transaction."""

    net_amount: Money
    vat_amount: Money
    total_amount: Money
    vat_rate: Percentage
    is_exempt: bool
    exemption_reasons: tuple[AppliedDiscount, ...] = ()

    def breakdown(self) -> dict[str, Any]:
        return {
            "net_amount": self.net_amount,
            "vat_rate": self.vat_rate.value,
            "vat_amount": self.vat_amount,
            "total_amount": self.total_amount,
            "is_exempt": self.is_exempt,
            "exemption_reasons": [
                {"type": reason.type, "name": reason.name}
                for reason in self.exemption_reasons
            ],
        }


class VATCalculator:
    """Computes VAT, honouring VAT-exempt discounts.

    A single VAT-exempt discount makes the whole transaction exempt. In that
    case the payable total is the original amount: discount amounts are
    recorded on the transaction but not subtracted.
    """

    def __init__(self, default_rate: Percentage = DEFAULT_VAT_RATE) -> None:
        self.default_rate = default_rate

    def calculate(
        self,
        amount: Money,
        applied_discounts: Iterable[AppliedDiscount] = (),
    ) -> VATCalculation:
        return self.calculate_with_custom_rate(amount, self.default_rate, applied_discounts)

    def calculate_with_custom_rate(
        self,
        amount: Money,
        vat_rate: Percentage,
        applied_discounts: Iterable[AppliedDiscount] = (),
    ) -> VATCalculation:
        discounts = tuple(applied_discounts)

        exempt = tuple(d for d in discounts if d.is_vat_exempt)
        if exempt:
            return VATCalculation(
                net_amount=amount,
                vat_amount=Money.zero(),
                total_amount=amount,
                vat_rate=NO_VAT,
                is_exempt=True,
                exemption_reasons=exempt,
            )

        net_amount = amount.subtract_floor(sum_discounts(discounts))
        vat_amount = vat_rate.apply(net_amount)
        return VATCalculation(
            net_amount=net_amount,
            vat_amount=vat_amount,
            total_amount=net_amount.add(vat_amount),
            vat_rate=vat_rate,
            is_exempt=False,
        )


@dataclass(frozen=True)
class VATConfig:
    """A named VAT rate, owned by an operator or platform-wide.

    At most one active default exists per scope; the store enforces it.
    """

    id: str
    name: str
    rate: Percentage
    is_default: bool = False
    is_active: bool = True
    operator_id: UUID | None = None
    created_at: datetime = dataclasses.field(default_factory=utcnow)
    updated_at: datetime = dataclasses.field(default_factory=utcnow)

    @classmethod
    def create(
        cls,
        name: str,
        rate: Percentage,
        is_default: bool = False,
        operator_id: UUID | None = None,
    ) -> Self:
        now = utcnow()
        return cls(
            id=str(uuid.uuid4()),
            name=name,
            rate=rate,
            is_default=is_default,
            operator_id=operator_id,
            created_at=now,
            updated_at=now,
        )

    def update(self, **changes: Any) -> "VATConfig":
        """Return a copy with the given fields changed and updated_at bumped."""
        return dataclasses.replace(self, updated_at=utcnow(), **changes)
