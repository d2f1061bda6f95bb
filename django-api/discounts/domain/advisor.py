"""Administrative helpers for discount rules.

Stateless functions used by back-office tooling: rule validation, eligibility
explanations, rule suggestions, impact estimates and conflict detection.
None of these run on the transaction path.

Validation separates errors from warnings. Errors block a rule from being
saved or activated; warnings are advisory. Conflict reports are advisory too:
deciding whether to reject a conflicting rule is up to the caller.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Self

from discounts.domain.conditions import (
    ConditionOperator,
    DiscountCondition,
    UserContext,
    is_number,
)
from discounts.domain.rules import STATUTORY_PERCENTAGE, DiscountRule, DiscountType
from discounts.domain.value_objects import HUNDRED, Percentage, to_decimal
from discounts.domain.vat import DEFAULT_VAT_RATE

ASSUMED_ADOPTION_RATE = Percentage.of(70)
SENIOR_MINIMUM_AGE = 60


# Validation


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ConditionDraft:
    """Unvalidated condition data, e.g. from an admin payload."""

    field: str | None
    operator: str | None
    value: Any = None

    @classmethod
    def from_condition(cls, condition: DiscountCondition) -> Self:
        return cls(condition.field, condition.operator_name, condition.value)

    def to_condition(self) -> DiscountCondition:
        return DiscountCondition.create(self.field or "", self.operator or "", self.value)


@dataclass(frozen=True)
class RuleDraft:
    """Unvalidated, possibly partial rule data."""

    name: str | None = None
    type: str | None = None
    percentage: Decimal | None = None
    is_vat_exempt: bool = False
    conditions: tuple[ConditionDraft, ...] = ()
    is_active: bool = True

    @classmethod
    def from_rule(cls, rule: DiscountRule) -> Self:
        return cls(
            name=rule.name,
            type=rule.type.value,
            percentage=rule.percentage.value,
            is_vat_exempt=rule.is_vat_exempt,
            conditions=tuple(ConditionDraft.from_condition(c) for c in rule.conditions),
            is_active=rule.is_active,
        )

    def to_rule(self) -> DiscountRule:
        """Build a rule. Validate the draft first; invalid data raises ValueError."""
        if self.percentage is None:
            raise ValueError("Discount percentage is required")
        return DiscountRule.create(
            name=(self.name or "").strip(),
            type=DiscountType(self.type),
            percentage=Percentage.of(self.percentage),
            is_vat_exempt=self.is_vat_exempt,
            conditions=tuple(c.to_condition() for c in self.conditions),
            is_active=self.is_active,
        )


def validate_discount_condition(condition: DiscountCondition | ConditionDraft) -> ValidationResult:
    if isinstance(condition, DiscountCondition):
        condition = ConditionDraft.from_condition(condition)

    errors: list[str] = []
    if not isinstance(condition.field, str) or not condition.field.strip():
        errors.append("Condition field is required")

    operator: ConditionOperator | str | None = None
    if not condition.operator:
        errors.append("Condition operator is required")
    else:
        operator = ConditionOperator.parse(condition.operator)
        if not isinstance(operator, ConditionOperator):
            errors.append(f"Unknown condition operator: {condition.operator}")

    if condition.value is None:
        errors.append("Condition value is required")
    elif isinstance(operator, ConditionOperator):
        if operator.is_numeric and not is_number(condition.value):
            errors.append(f"Operator {operator.value} requires a numeric value")
        if operator.is_textual and not isinstance(condition.value, str):
            errors.append(f"Operator {operator.value} requires a string value")

    return ValidationResult(errors=tuple(errors))


def validate_discount_rule(rule: DiscountRule | RuleDraft) -> ValidationResult:
    draft = RuleDraft.from_rule(rule) if isinstance(rule, DiscountRule) else rule
    errors: list[str] = []
    warnings: list[str] = []

    if not draft.name or not draft.name.strip():
        errors.append("Discount rule name is required")

    discount_type: DiscountType | None = None
    if not draft.type:
        errors.append("Discount type is required")
    else:
        try:
            discount_type = DiscountType(draft.type)
        except ValueError:
            errors.append(f"Unknown discount type: {draft.type}")

    if draft.percentage is None or not 0 <= draft.percentage <= HUNDRED:
        errors.append("Discount percentage must be between 0 and 100")

    for condition in draft.conditions:
        errors.extend(validate_discount_condition(condition).errors)

    if discount_type is not None and discount_type.is_statutory:
        label = discount_type.value
        if not draft.is_vat_exempt:
            warnings.append(f"{label} discounts are typically VAT exempt in the Philippines")
        if draft.percentage is not None and draft.percentage != STATUTORY_PERCENTAGE.value:
            warnings.append(f"{label} discounts are typically 20% in the Philippines")

    fields = {c.field for c in draft.conditions}
    if discount_type is DiscountType.SENIOR and "age" not in fields:
        warnings.append("Senior citizen discount should include age condition (typically >= 60)")
    if discount_type is DiscountType.PWD and "hasPWDId" not in fields:
        warnings.append("PWD discount should include PWD ID verification condition")

    return ValidationResult(errors=tuple(errors), warnings=tuple(warnings))


# Eligibility


@dataclass(frozen=True)
class EligibilityCheck:
    is_eligible: bool
    reason: str | None = None
    required_documents: tuple[str, ...] = ()
    missing_conditions: tuple[str, ...] = ()


def _senior_eligibility(context: UserContext) -> EligibilityCheck:
    missing: list[str] = []
    documents: list[str] = []

    age = context.get("age")
    if not is_number(age) or age < SENIOR_MINIMUM_AGE:
        missing.append("Must be 60 years old or above")
    if not context.get("hasSeniorId"):
        documents.append("Senior Citizen ID or Birth Certificate")

    return EligibilityCheck(
        is_eligible=not missing,
        reason=None if not missing else "Does not meet senior citizen requirements",
        required_documents=tuple(documents),
        missing_conditions=tuple(missing),
    )


def _pwd_eligibility(context: UserContext) -> EligibilityCheck:
    if context.get("hasPWDId"):
        return EligibilityCheck(is_eligible=True)
    return EligibilityCheck(
        is_eligible=False,
        reason="Does not meet PWD requirements",
        required_documents=("PWD ID or Medical Certificate",),
        missing_conditions=("Must have a valid PWD ID",),
    )


def check_discount_eligibility(
    discount_type: DiscountType | str, context: UserContext
) -> EligibilityCheck:
    """Explain whether a user qualifies for a discount category.

    This follows the statutory requirements for each category and ignores
    the conditions configured on any particular rule.
    """
    try:
        discount_type = DiscountType(discount_type)
    except ValueError:
        return EligibilityCheck(is_eligible=False, reason="Unknown discount type")

    if discount_type is DiscountType.SENIOR:
        return _senior_eligibility(context)
    if discount_type is DiscountType.PWD:
        return _pwd_eligibility(context)
    return EligibilityCheck(is_eligible=True)


# Suggestions


class OperatorType(Enum):
    STREET = "street"
    FACILITY = "facility"
    HOSTED = "hosted"


@dataclass(frozen=True)
class OperatorProfile:
    """Business context an operator supplies when asking for suggestions."""

    operator_type: OperatorType
    location: str = ""
    target_customers: tuple[str, ...] = ()


@dataclass(frozen=True)
class RuleSuggestion:
    name: str
    type: DiscountType
    percentage: Percentage
    is_vat_exempt: bool
    description: str
    conditions: tuple[ConditionDraft, ...] = ()

    def to_rule(self) -> DiscountRule:
        return DiscountRule.create(
            name=self.name,
            type=self.type,
            percentage=self.percentage,
            is_vat_exempt=self.is_vat_exempt,
            conditions=tuple(c.to_condition() for c in self.conditions),
        )


SENIOR_SUGGESTION = RuleSuggestion(
    name="Senior Citizen Discount",
    type=DiscountType.SENIOR,
    percentage=STATUTORY_PERCENTAGE,
    is_vat_exempt=True,
    description="Mandatory 20% discount for senior citizens (60+ years old) with VAT exemption",
    conditions=(ConditionDraft("age", "greater_than_or_equal", SENIOR_MINIMUM_AGE),),
)
PWD_SUGGESTION = RuleSuggestion(
    name="PWD Discount",
    type=DiscountType.PWD,
    percentage=STATUTORY_PERCENTAGE,
    is_vat_exempt=True,
    description="Mandatory 20% discount for persons with disabilities with VAT exemption",
    conditions=(ConditionDraft("hasPWDId", "equals", True),),
)
FIRST_TIME_GUEST_SUGGESTION = RuleSuggestion(
    name="First-Time Guest Discount",
    type=DiscountType.CUSTOM,
    percentage=Percentage.of(10),
    is_vat_exempt=False,
    description="Welcome discount for first-time guests",
    conditions=(ConditionDraft("totalBookings", "equals", 0),),
)
EARLY_BIRD_SUGGESTION = RuleSuggestion(
    name="Early Bird Discount",
    type=DiscountType.CUSTOM,
    percentage=Percentage.of(15),
    is_vat_exempt=False,
    description="Discount for bookings made before 6 AM",
    conditions=(ConditionDraft("bookingHour", "less_than", 6),),
)
STUDENT_SUGGESTION = RuleSuggestion(
    name="Student Discount",
    type=DiscountType.CUSTOM,
    percentage=Percentage.of(15),
    is_vat_exempt=False,
    description="Discount for verified students",
    conditions=(ConditionDraft("isStudent", "equals", True),),
)


def suggest_discount_rules(profile: OperatorProfile) -> list[RuleSuggestion]:
    """Statutory discounts first, then ones that fit the operator's business."""
    suggestions = [SENIOR_SUGGESTION, PWD_SUGGESTION]
    if profile.operator_type is OperatorType.HOSTED:
        suggestions.append(FIRST_TIME_GUEST_SUGGESTION)
    if profile.operator_type is OperatorType.FACILITY:
        suggestions.append(EARLY_BIRD_SUGGESTION)
    if "students" in profile.target_customers:
        suggestions.append(STUDENT_SUGGESTION)
    return suggestions


# Impact


@dataclass(frozen=True)
class HistoricalData:
    average_transaction_amount: Decimal
    monthly_transactions: int
    eligible_customer_percentage: Decimal


@dataclass(frozen=True)
class DiscountImpact:
    estimated_monthly_usage: int
    estimated_monthly_discount_amount: Decimal
    estimated_revenue_impact: Decimal
    vat_impact_amount: Decimal


def calculate_discount_impact(
    rule: DiscountRule,
    historical: HistoricalData,
    adoption_rate: Percentage = ASSUMED_ADOPTION_RATE,
    vat_rate: Percentage = DEFAULT_VAT_RATE,
) -> DiscountImpact:
    """Estimate the monthly cost of a rule from past transaction volume."""
    eligible = (
        to_decimal(historical.monthly_transactions)
        * to_decimal(historical.eligible_customer_percentage)
        / HUNDRED
    )
    usage = int((eligible * adoption_rate.as_decimal()).quantize(Decimal("1"), ROUND_HALF_UP))

    per_transaction = to_decimal(historical.average_transaction_amount) * rule.percentage.as_decimal()
    discount_amount = usage * per_transaction
    vat_impact = discount_amount * vat_rate.as_decimal() if rule.is_vat_exempt else Decimal("0")

    return DiscountImpact(
        estimated_monthly_usage=usage,
        estimated_monthly_discount_amount=discount_amount,
        estimated_revenue_impact=discount_amount + vat_impact,
        vat_impact_amount=vat_impact,
    )


# Conflicts


class ConflictType(Enum):
    DUPLICATE = "duplicate"
    OVERLAP = "overlap"


@dataclass(frozen=True)
class RuleConflict:
    conflict_type: ConflictType
    conflicting_rule: DiscountRule
    description: str


@dataclass(frozen=True)
class ConflictReport:
    conflicts: tuple[RuleConflict, ...] = ()

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    def of_type(self, conflict_type: ConflictType) -> list[RuleConflict]:
        return [c for c in self.conflicts if c.conflict_type is conflict_type]


def has_condition_overlap(first: DiscountRule, second: DiscountRule) -> bool:
    return any(a.matches(b) for a in first.conditions for b in second.conditions)


def validate_discount_rule_conflicts(
    new_rule: DiscountRule, existing_rules: Iterable[DiscountRule]
) -> ConflictReport:
    conflicts: list[RuleConflict] = []
    for existing in existing_rules:
        if existing.id == new_rule.id:
            continue

        if existing.name.lower() == new_rule.name.lower():
            conflicts.append(
                RuleConflict(
                    ConflictType.DUPLICATE,
                    existing,
                    "A discount rule with this name already exists",
                )
            )

        if existing.type is new_rule.type and new_rule.type.is_statutory:
            conflicts.append(
                RuleConflict(
                    ConflictType.DUPLICATE,
                    existing,
                    f"Only one {new_rule.type.value} discount rule should exist",
                )
            )

        if has_condition_overlap(new_rule, existing):
            conflicts.append(
                RuleConflict(
                    ConflictType.OVERLAP,
                    existing,
                    "This rule has overlapping conditions with an existing rule",
                )
            )

    return ConflictReport(conflicts=tuple(conflicts))
