"""Serializers for admin payloads and transaction projections.

Input serializers check payload format only. Business validation of rules
(statutory warnings, operator/value compatibility) happens in the service via
the advisor.
"""

from decimal import Decimal

from rest_framework import serializers

from discounts.domain import ConditionOperator, DiscountType, TransactionCalculation
from discounts.domain.advisor import ConditionDraft, RuleDraft
from discounts.domain.serialization import transaction_to_json


class DiscountConditionSerializer(serializers.Serializer):
    """Serializer for a rule condition payload."""

    field = serializers.CharField(max_length=100)
    operator = serializers.ChoiceField(choices=[op.value for op in ConditionOperator])
    value = serializers.JSONField()

    def validate_value(self, value):
        if value is None or not isinstance(value, (str, int, float, bool)):
            raise serializers.ValidationError(
                "Condition value must be a string, number or boolean."
            )
        return value


class DiscountRuleSerializer(serializers.Serializer):
    """Serializer for a discount rule creation payload."""

    name = serializers.CharField(max_length=255)
    type = serializers.ChoiceField(choices=[t.value for t in DiscountType])
    percentage = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal("0"), max_value=Decimal("100")
    )
    is_vat_exempt = serializers.BooleanField(default=False)
    conditions = DiscountConditionSerializer(many=True, required=False)
    is_active = serializers.BooleanField(default=True)

    def to_draft(self) -> RuleDraft:
        data = self.validated_data
        return RuleDraft(
            name=data["name"],
            type=data["type"],
            percentage=data["percentage"],
            is_vat_exempt=data["is_vat_exempt"],
            conditions=tuple(
                ConditionDraft(c["field"], c["operator"], c["value"])
                for c in data.get("conditions", [])
            ),
            is_active=data["is_active"],
        )


class QuoteRequestSerializer(serializers.Serializer):
    """Serializer for a checkout quote request."""

    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))
    context = serializers.DictField(default=dict)
    operator_id = serializers.UUIDField(allow_null=True, default=None)


class TransactionCalculationSerializer(serializers.BaseSerializer):
    """Read-only serializer rendering the canonical transaction projection."""

    def to_representation(self, instance: TransactionCalculation):
        return transaction_to_json(instance)


class VATConfigSerializer(serializers.Serializer):
    """Serializer for a VAT configuration creation payload."""

    name = serializers.CharField(max_length=100)
    rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=Decimal("0"), max_value=Decimal("100")
    )
    is_default = serializers.BooleanField(default=False)
    operator_id = serializers.UUIDField(allow_null=True, default=None)
