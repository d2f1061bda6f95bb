"""Tests for the JSON projection of the discount domain.

Run with: pytest tests/test_serialization.py -v
"""

import json

from discounts.domain import (
    DiscountCondition,
    DiscountEngine,
    DiscountRule,
    Money,
    Percentage,
    VATCalculator,
)
from discounts.domain.serialization import (
    condition_from_json,
    condition_to_json,
    money_from_json,
    money_to_json,
    rule_from_json,
    rule_to_json,
    transaction_from_json,
    transaction_to_json,
    vat_calculation_from_json,
    vat_calculation_to_json,
)


class TestMoneyShape:
    """Money is an object with a numeric value."""

    def test_whole_amount_is_integer(self):
        assert money_to_json(Money.of(100)) == {"value": 100}

    def test_fractional_amount_is_float(self):
        assert money_to_json(Money.of("95.20")) == {"value": 95.2}

    def test_reads_back_at_two_decimals(self):
        assert money_from_json({"value": 10.2}) == Money.of("10.20")


class TestRuleShape:
    """Rules use camelCase keys and bare percentages."""

    def test_rule_keys(self, senior_rule):
        data = rule_to_json(senior_rule)
        assert data["type"] == "senior"
        assert data["percentage"] == 20
        assert data["isVATExempt"] is True
        assert data["isActive"] is True
        assert data["conditions"][0]["operator"] == "greater_than_or_equal"
        assert data["conditions"][0]["value"] == 60

    def test_rule_round_trip(self, senior_rule):
        """A rule read back from JSON evaluates the same way."""
        restored = rule_from_json(json.loads(json.dumps(rule_to_json(senior_rule))))
        assert restored == senior_rule
        assert restored.can_apply_to_user({"age": 60})

    def test_unknown_operator_survives(self):
        """Stored operators this version does not know are kept verbatim."""
        condition = condition_from_json(
            {
                "id": "c1",
                "field": "age",
                "operator": "between",
                "value": 5,
                "createdAt": "2024-01-01T00:00:00+00:00",
            }
        )
        assert condition.evaluate({"age": 5}) is False
        assert condition_to_json(condition)["operator"] == "between"


class TestTransactionShape:
    """Transactions keep their audit trail through JSON."""

    def test_senior_transaction(self, statutory_engine):
        calculation = statutory_engine.calculate_total_with_discounts_and_vat(
            Money.of(100), {"age": 65}
        )
        data = transaction_to_json(calculation)
        assert data["originalAmount"] == {"value": 100}
        assert data["finalAmount"] == {"value": 100}
        assert data["appliedDiscounts"][0]["amount"] == {"value": 20}
        assert data["vatCalculation"]["isExempt"] is True
        assert data["vatCalculation"]["vatRate"] == 0
        assert data["vatCalculation"]["breakdown"]["exemptionReasons"] == [
            {"type": "senior", "name": "Senior Citizen Discount"}
        ]
        assert data["breakdown"]["totalDiscountAmount"] == {"value": 20}
        assert data["breakdown"]["totalSavings"] == {"value": 0}

    def test_round_trip_reproduces_amounts(self, make_custom_rule):
        """Decoding a stored transaction gives back the same figures."""
        engine = DiscountEngine(
            [
                make_custom_rule(
                    "Student Discount",
                    15,
                    conditions=(DiscountCondition.create("isStudent", "equals", True),),
                ),
                make_custom_rule("Loyalty", "2.5"),
            ]
        )
        calculation = engine.calculate_total_with_discounts_and_vat(
            Money.of("149.99"), {"isStudent": True}
        )
        restored = transaction_from_json(json.loads(json.dumps(transaction_to_json(calculation))))
        assert restored.final_amount == calculation.final_amount
        assert [d.amount for d in restored.applied_discounts] == [
            d.amount for d in calculation.applied_discounts
        ]
        assert restored.total_discount_amount == calculation.total_discount_amount
        assert restored.vat_calculation == calculation.vat_calculation

    def test_vat_calculation_round_trip(self):
        calculation = VATCalculator(Percentage.of("7.5")).calculate(Money.of("33.33"))
        data = vat_calculation_to_json(calculation)
        assert data["vatRate"] == 7.5
        assert vat_calculation_from_json(data) == calculation

    def test_rule_ids_are_strings(self):
        rule = DiscountRule.person_with_disability()
        assert isinstance(rule_to_json(rule)["id"], str)
