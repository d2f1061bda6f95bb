"""The terminal artifact of a discount + VAT computation."""

from dataclasses import dataclass
from typing import Any

from discounts.domain.rules import AppliedDiscount
from discounts.domain.value_objects import Money
from discounts.domain.vat import VATCalculation, sum_discounts


@dataclass(frozen=True)
class TransactionCalculation:
    """Auditable breakdown of one transaction.

    Derived figures are computed on demand rather than stored.
    """

    original_amount: Money
    applied_discounts: tuple[AppliedDiscount, ...]
    vat_calculation: VATCalculation
    final_amount: Money

    @property
    def total_discount_amount(self) -> Money:
        """Sum of applied discount amounts, whether or not VAT was exempted."""
        return sum_discounts(self.applied_discounts)

    @property
    def savings_amount(self) -> Money:
        return self.original_amount.subtract_floor(self.final_amount)

    def breakdown(self) -> dict[str, Any]:
        return {
            "original_amount": self.original_amount,
            "discounts": list(self.applied_discounts),
            "total_discount_amount": self.total_discount_amount,
            "net_amount": self.vat_calculation.net_amount,
            "vat_amount": self.vat_calculation.vat_amount,
            "final_amount": self.final_amount,
            "total_savings": self.savings_amount,
        }
