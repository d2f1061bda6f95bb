"""Rule selection and transaction composition.

The engine holds a caller-owned rule collection. Evaluation only reads it;
``add_rule``, ``remove_rule`` and ``replace_rule`` are not synchronised, so
callers sharing one engine across threads must serialise writers against
readers themselves.
"""

import logging

from discounts.domain.conditions import UserContext
from discounts.domain.rules import AppliedDiscount, DiscountRule
from discounts.domain.transactions import TransactionCalculation
from discounts.domain.value_objects import Money
from discounts.domain.vat import VATCalculator

logger = logging.getLogger(__name__)


class DiscountEngine:
    """Selects applicable discount rules for a user context."""

    def __init__(self, rules: list[DiscountRule] | tuple[DiscountRule, ...] = ()) -> None:
        self._rules: list[DiscountRule] = list(rules)

    @property
    def rules(self) -> tuple[DiscountRule, ...]:
        return tuple(self._rules)

    def add_rule(self, rule: DiscountRule) -> None:
        self._rules.append(rule)

    def remove_rule(self, rule_id: str) -> None:
        self._rules = [rule for rule in self._rules if rule.id != rule_id]

    def replace_rule(self, rule: DiscountRule) -> None:
        """Swap in a new version of a held rule, keeping its position."""
        self._rules = [rule if held.id == rule.id else held for held in self._rules]

    def get_rule(self, rule_id: str) -> DiscountRule | None:
        return next((rule for rule in self._rules if rule.id == rule_id), None)

    def get_applicable_discounts(self, context: UserContext) -> list[DiscountRule]:
        return [rule for rule in self._rules if rule.can_apply_to_user(context)]

    def apply_best_discount(
        self, amount: Money, context: UserContext
    ) -> AppliedDiscount | None:
        """Apply the eligible rule giving the largest discount amount.

        Ties go to the first rule, in insertion order, that reaches the
        maximum. Returns None when no rule is eligible.
        """
        best: AppliedDiscount | None = None
        for rule in self.get_applicable_discounts(context):
            candidate = rule.calculate_discount(amount)
            if best is None or candidate.amount.amount > best.amount.amount:
                best = candidate
        if best is not None:
            logger.debug("Best discount %r yields %s", best.name, best.amount)
        return best

    def apply_all_applicable_discounts(
        self, amount: Money, context: UserContext
    ) -> list[AppliedDiscount]:
        """One discount per eligible rule, each against the original amount."""
        return [rule.calculate_discount(amount) for rule in self.get_applicable_discounts(context)]

    def calculate_total_with_discounts_and_vat(
        self,
        original_amount: Money,
        context: UserContext,
        vat_calculator: VATCalculator | None = None,
    ) -> TransactionCalculation:
        return TransactionCalculator(self, vat_calculator).calculate(original_amount, context)


class TransactionCalculator:
    """Composes a discount engine and a VAT calculator into one breakdown."""

    def __init__(
        self, engine: DiscountEngine, vat_calculator: VATCalculator | None = None
    ) -> None:
        self.engine = engine
        self.vat_calculator = vat_calculator or VATCalculator()

    def calculate(self, original_amount: Money, context: UserContext) -> TransactionCalculation:
        applied = tuple(self.engine.apply_all_applicable_discounts(original_amount, context))
        vat_calculation = self.vat_calculator.calculate(original_amount, applied)
        return TransactionCalculation(
            original_amount=original_amount,
            applied_discounts=applied,
            vat_calculation=vat_calculation,
            final_amount=vat_calculation.total_amount,
        )
