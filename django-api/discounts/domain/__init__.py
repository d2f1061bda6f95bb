from discounts.domain.conditions import ConditionOperator, DiscountCondition, UserContext
from discounts.domain.engine import DiscountEngine, TransactionCalculator
from discounts.domain.rules import AppliedDiscount, DiscountRule, DiscountType
from discounts.domain.transactions import TransactionCalculation
from discounts.domain.value_objects import DiscountRuleId, Money, Percentage
from discounts.domain.vat import DEFAULT_VAT_RATE, VATCalculation, VATCalculator, VATConfig

__all__ = [
    "ConditionOperator",
    "DiscountCondition",
    "UserContext",
    "DiscountRule",
    "DiscountType",
    "AppliedDiscount",
    "DiscountEngine",
    "TransactionCalculator",
    "TransactionCalculation",
    "VATCalculator",
    "VATCalculation",
    "VATConfig",
    "DEFAULT_VAT_RATE",
    "DiscountRuleId",
    "Money",
    "Percentage",
]
