"""Canonical JSON projection of the discount domain.

Money fields serialize as ``{"value": number}``, percentages as bare numbers
and timestamps as ISO 8601 strings. Keys are camelCase, matching what the
reporting layer aggregates. Every ``*_from_json`` function accepts the output
of its ``*_to_json`` counterpart, so a transaction's audit trail survives a
round trip.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from discounts.domain.conditions import ConditionOperator, DiscountCondition
from discounts.domain.rules import AppliedDiscount, DiscountRule, DiscountType
from discounts.domain.transactions import TransactionCalculation
from discounts.domain.value_objects import Money, Percentage
from discounts.domain.vat import VATCalculation

JSON = dict[str, Any]


def _number(value: Decimal) -> int | float:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _timestamp(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def money_to_json(money: Money) -> JSON:
    return {"value": _number(money.amount)}


def money_from_json(data: JSON) -> Money:
    return Money.of(data["value"])


def condition_to_json(condition: DiscountCondition) -> JSON:
    return {
        "id": condition.id,
        "field": condition.field,
        "operator": condition.operator_name,
        "value": condition.value,
        "createdAt": condition.created_at.isoformat(),
    }


def condition_from_json(data: JSON) -> DiscountCondition:
    return DiscountCondition(
        id=data["id"],
        field=data["field"],
        operator=ConditionOperator.parse(data["operator"]),
        value=data["value"],
        created_at=_timestamp(data["createdAt"]),
    )


def rule_to_json(rule: DiscountRule) -> JSON:
    return {
        "id": rule.id,
        "name": rule.name,
        "type": rule.type.value,
        "percentage": _number(rule.percentage.value),
        "isVATExempt": rule.is_vat_exempt,
        "conditions": [condition_to_json(c) for c in rule.conditions],
        "isActive": rule.is_active,
        "createdAt": rule.created_at.isoformat(),
        "updatedAt": rule.updated_at.isoformat(),
    }


def rule_from_json(data: JSON) -> DiscountRule:
    return DiscountRule(
        id=data["id"],
        name=data["name"],
        type=DiscountType(data["type"]),
        percentage=Percentage.of(data["percentage"]),
        is_vat_exempt=data["isVATExempt"],
        conditions=tuple(condition_from_json(c) for c in data.get("conditions", [])),
        is_active=data.get("isActive", True),
        created_at=_timestamp(data["createdAt"]),
        updated_at=_timestamp(data["updatedAt"]),
    )


def applied_discount_to_json(discount: AppliedDiscount) -> JSON:
    return {
        "id": discount.id,
        "type": discount.type.value,
        "name": discount.name,
        "percentage": _number(discount.percentage.value),
        "amount": money_to_json(discount.amount),
        "isVATExempt": discount.is_vat_exempt,
        "appliedAt": discount.applied_at.isoformat(),
    }


def applied_discount_from_json(data: JSON) -> AppliedDiscount:
    return AppliedDiscount(
        id=data["id"],
        type=DiscountType(data["type"]),
        name=data["name"],
        percentage=Percentage.of(data["percentage"]),
        amount=money_from_json(data["amount"]),
        is_vat_exempt=data["isVATExempt"],
        applied_at=_timestamp(data["appliedAt"]),
    )


def vat_calculation_to_json(calculation: VATCalculation) -> JSON:
    return {
        "netAmount": money_to_json(calculation.net_amount),
        "vatAmount": money_to_json(calculation.vat_amount),
        "totalAmount": money_to_json(calculation.total_amount),
        "vatRate": _number(calculation.vat_rate.value),
        "isExempt": calculation.is_exempt,
        "exemptionReasons": [applied_discount_to_json(r) for r in calculation.exemption_reasons],
        "breakdown": {
            "netAmount": money_to_json(calculation.net_amount),
            "vatRate": _number(calculation.vat_rate.value),
            "vatAmount": money_to_json(calculation.vat_amount),
            "totalAmount": money_to_json(calculation.total_amount),
            "isExempt": calculation.is_exempt,
            "exemptionReasons": [
                {"type": r.type.value, "name": r.name} for r in calculation.exemption_reasons
            ],
        },
    }


def vat_calculation_from_json(data: JSON) -> VATCalculation:
    return VATCalculation(
        net_amount=money_from_json(data["netAmount"]),
        vat_amount=money_from_json(data["vatAmount"]),
        total_amount=money_from_json(data["totalAmount"]),
        vat_rate=Percentage.of(data["vatRate"]),
        is_exempt=data["isExempt"],
        exemption_reasons=tuple(
            applied_discount_from_json(r) for r in data.get("exemptionReasons", [])
        ),
    )


def transaction_to_json(transaction: TransactionCalculation) -> JSON:
    discounts = [applied_discount_to_json(d) for d in transaction.applied_discounts]
    return {
        "originalAmount": money_to_json(transaction.original_amount),
        "appliedDiscounts": discounts,
        "vatCalculation": vat_calculation_to_json(transaction.vat_calculation),
        "finalAmount": money_to_json(transaction.final_amount),
        "breakdown": {
            "originalAmount": money_to_json(transaction.original_amount),
            "discounts": discounts,
            "totalDiscountAmount": money_to_json(transaction.total_discount_amount),
            "netAmount": money_to_json(transaction.vat_calculation.net_amount),
            "vatAmount": money_to_json(transaction.vat_calculation.vat_amount),
            "finalAmount": money_to_json(transaction.final_amount),
            "totalSavings": money_to_json(transaction.savings_amount),
        },
    }


def transaction_from_json(data: JSON) -> TransactionCalculation:
    return TransactionCalculation(
        original_amount=money_from_json(data["originalAmount"]),
        applied_discounts=tuple(applied_discount_from_json(d) for d in data["appliedDiscounts"]),
        vat_calculation=vat_calculation_from_json(data["vatCalculation"]),
        final_amount=money_from_json(data["finalAmount"]),
    )
