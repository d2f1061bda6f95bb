"""Unit tests for the rule administration helpers.

Run with: pytest tests/test_advisor.py -v
"""

from decimal import Decimal

from discounts.domain import DiscountCondition, DiscountRule, DiscountType, Percentage
from discounts.domain.advisor import (
    ConditionDraft,
    ConflictType,
    HistoricalData,
    OperatorProfile,
    OperatorType,
    RuleDraft,
    calculate_discount_impact,
    check_discount_eligibility,
    suggest_discount_rules,
    validate_discount_condition,
    validate_discount_rule,
    validate_discount_rule_conflicts,
)


class TestValidateDiscountRule:
    """Errors block a rule; warnings do not."""

    def test_statutory_rules_are_valid(self, senior_rule, pwd_rule):
        """The built-in rules pass without errors or warnings."""
        for rule in (senior_rule, pwd_rule):
            result = validate_discount_rule(rule)
            assert result.is_valid
            assert result.errors == ()
            assert result.warnings == ()

    def test_missing_required_fields(self):
        """Missing name, type and percentage are all reported."""
        result = validate_discount_rule(RuleDraft(name="", type=None, percentage=None))
        assert not result.is_valid
        assert "Discount rule name is required" in result.errors
        assert "Discount type is required" in result.errors
        assert "Discount percentage must be between 0 and 100" in result.errors

    def test_percentage_out_of_range(self):
        """A percentage above 100 is an error."""
        result = validate_discount_rule(
            RuleDraft(name="Too much", type="custom", percentage=Decimal("120"))
        )
        assert result.errors == ("Discount percentage must be between 0 and 100",)

    def test_unknown_type(self):
        """A type outside the known categories is an error."""
        result = validate_discount_rule(RuleDraft(name="VIP", type="vip", percentage=Decimal(5)))
        assert result.errors == ("Unknown discount type: vip",)

    def test_non_standard_senior_rule_warns(self):
        """A 15% non-exempt senior rule is allowed but flagged."""
        result = validate_discount_rule(
            RuleDraft(
                name="Senior Discount",
                type="senior",
                percentage=Decimal(15),
                is_vat_exempt=False,
                conditions=(ConditionDraft("age", "greater_than_or_equal", 60),),
            )
        )
        assert result.is_valid
        assert "senior discounts are typically VAT exempt in the Philippines" in result.warnings
        assert "senior discounts are typically 20% in the Philippines" in result.warnings

    def test_senior_without_age_condition_warns(self):
        """A senior rule should test age."""
        result = validate_discount_rule(
            RuleDraft(name="Senior", type="senior", percentage=Decimal(20), is_vat_exempt=True)
        )
        assert result.warnings == (
            "Senior citizen discount should include age condition (typically >= 60)",
        )

    def test_pwd_without_id_condition_warns(self):
        """A PWD rule should test the PWD ID flag."""
        result = validate_discount_rule(
            RuleDraft(name="PWD", type="pwd", percentage=Decimal(20), is_vat_exempt=True)
        )
        assert result.warnings == ("PWD discount should include PWD ID verification condition",)

    def test_condition_errors_are_rule_errors(self):
        """Malformed conditions block the rule."""
        result = validate_discount_rule(
            RuleDraft(
                name="Early",
                type="custom",
                percentage=Decimal(10),
                conditions=(ConditionDraft("bookingHour", "less_than", "6"),),
            )
        )
        assert result.errors == ("Operator less_than requires a numeric value",)

    def test_validated_rule_can_be_built(self):
        """A clean draft turns into a domain rule."""
        rule = RuleDraft(
            name=" Student ",
            type="custom",
            percentage=Decimal(15),
            conditions=(ConditionDraft("isStudent", "equals", True),),
        ).to_rule()
        assert rule.name == "Student"
        assert rule.type is DiscountType.CUSTOM
        assert rule.can_apply_to_user({"isStudent": True})


class TestValidateDiscountCondition:
    """Tests for validate_discount_condition."""

    def test_missing_parts(self):
        """Field, operator and value are required."""
        result = validate_discount_condition(ConditionDraft(field=" ", operator=None, value=None))
        assert result.errors == (
            "Condition field is required",
            "Condition operator is required",
            "Condition value is required",
        )

    def test_unknown_operator(self):
        """Operators outside the known set are errors."""
        result = validate_discount_condition(ConditionDraft("age", "between", 1))
        assert result.errors == ("Unknown condition operator: between",)

    def test_text_operator_needs_string(self):
        """contains requires a string value."""
        result = validate_discount_condition(ConditionDraft("email", "contains", 5))
        assert result.errors == ("Operator contains requires a string value",)

    def test_numeric_operator_rejects_boolean(self):
        """Booleans are not numbers for ordering operators."""
        result = validate_discount_condition(ConditionDraft("age", "greater_than", True))
        assert not result.is_valid

    def test_domain_condition_is_accepted(self):
        """Domain conditions can be validated directly."""
        condition = DiscountCondition.create("age", "greater_than_or_equal", 60)
        assert validate_discount_condition(condition).is_valid


class TestCheckDiscountEligibility:
    """Tests for check_discount_eligibility."""

    def test_eligible_senior(self):
        """A 65 year old with an ID is eligible."""
        result = check_discount_eligibility("senior", {"age": 65, "hasSeniorId": True})
        assert result.is_eligible
        assert result.reason is None
        assert result.required_documents == ()

    def test_young_user_is_not_senior(self):
        """Age below 60 is a missing condition; no ID is a required document."""
        result = check_discount_eligibility(
            DiscountType.SENIOR, {"age": 45, "hasSeniorId": False}
        )
        assert not result.is_eligible
        assert result.reason == "Does not meet senior citizen requirements"
        assert result.missing_conditions == ("Must be 60 years old or above",)
        assert result.required_documents == ("Senior Citizen ID or Birth Certificate",)

    def test_senior_without_id_is_eligible_but_needs_documents(self):
        """Age alone decides eligibility; the ID is listed as a document."""
        result = check_discount_eligibility("senior", {"age": 70})
        assert result.is_eligible
        assert result.required_documents == ("Senior Citizen ID or Birth Certificate",)

    def test_pwd(self):
        """PWD eligibility hinges on the PWD ID flag."""
        assert check_discount_eligibility("pwd", {"hasPWDId": True}).is_eligible
        result = check_discount_eligibility("pwd", {"hasPWDId": False})
        assert not result.is_eligible
        assert result.reason == "Does not meet PWD requirements"
        assert result.missing_conditions == ("Must have a valid PWD ID",)
        assert result.required_documents == ("PWD ID or Medical Certificate",)

    def test_custom_is_always_eligible(self):
        """Custom discounts are generally available."""
        assert check_discount_eligibility("custom", {}).is_eligible

    def test_unknown_type(self):
        """Unknown categories are not eligible."""
        result = check_discount_eligibility("vip", {})
        assert not result.is_eligible
        assert result.reason == "Unknown discount type"


class TestSuggestDiscountRules:
    """Tests for suggest_discount_rules."""

    def test_street_operator_gets_statutory_only(self):
        """Senior and PWD are always suggested."""
        suggestions = suggest_discount_rules(OperatorProfile(OperatorType.STREET, "Makati"))
        assert [s.name for s in suggestions] == ["Senior Citizen Discount", "PWD Discount"]
        assert all(s.is_vat_exempt and s.percentage == Percentage.of(20) for s in suggestions)

    def test_hosted_operator(self):
        """Hosted operators get a first-time guest discount."""
        suggestions = suggest_discount_rules(OperatorProfile(OperatorType.HOSTED, "Cebu"))
        guest = suggestions[-1]
        assert guest.name == "First-Time Guest Discount"
        assert guest.percentage == Percentage.of(10)
        assert guest.conditions == (ConditionDraft("totalBookings", "equals", 0),)

    def test_facility_operator_targeting_students(self):
        """Facilities get early bird; student audiences get a student discount."""
        profile = OperatorProfile(OperatorType.FACILITY, "Quezon City", ("students", "commuters"))
        names = [s.name for s in suggest_discount_rules(profile)]
        assert names == [
            "Senior Citizen Discount",
            "PWD Discount",
            "Early Bird Discount",
            "Student Discount",
        ]

    def test_suggestion_becomes_working_rule(self):
        """to_rule builds a rule whose conditions evaluate."""
        profile = OperatorProfile(OperatorType.FACILITY, "Pasig")
        early_bird = suggest_discount_rules(profile)[-1].to_rule()
        assert early_bird.can_apply_to_user({"bookingHour": 5})
        assert not early_bird.can_apply_to_user({"bookingHour": 6})


class TestCalculateDiscountImpact:
    """Tests for calculate_discount_impact."""

    def test_vat_exempt_rule(self, senior_rule):
        """Exempt rules add the forgone VAT to the revenue impact."""
        impact = calculate_discount_impact(
            senior_rule,
            HistoricalData(
                average_transaction_amount=Decimal(200),
                monthly_transactions=1000,
                eligible_customer_percentage=Decimal(10),
            ),
        )
        # 1000 * 10% * 70% = 70 uses, 70 * 200 * 20% = 2800
        assert impact.estimated_monthly_usage == 70
        assert impact.estimated_monthly_discount_amount == Decimal("2800")
        assert impact.vat_impact_amount == Decimal("336")
        assert impact.estimated_revenue_impact == Decimal("3136")

    def test_non_exempt_rule(self, make_custom_rule):
        """Non-exempt rules have no VAT impact."""
        impact = calculate_discount_impact(
            make_custom_rule("Student", 15),
            HistoricalData(Decimal("150.50"), 300, Decimal(25)),
        )
        # 300 * 25% * 70% = 52.5, rounded half up to 53
        assert impact.estimated_monthly_usage == 53
        assert impact.estimated_monthly_discount_amount == Decimal("1196.475")
        assert impact.vat_impact_amount == 0
        assert impact.estimated_revenue_impact == impact.estimated_monthly_discount_amount


class TestValidateDiscountRuleConflicts:
    """Tests for validate_discount_rule_conflicts."""

    def test_duplicate_name(self, make_custom_rule):
        """A rule named like an existing one is a duplicate."""
        existing = make_custom_rule("Weekend Promo", 10)
        report = validate_discount_rule_conflicts(make_custom_rule("weekend promo", 5), [existing])
        assert report.has_conflicts
        [conflict] = report.conflicts
        assert conflict.conflict_type is ConflictType.DUPLICATE
        assert conflict.conflicting_rule is existing
        assert conflict.description == "A discount rule with this name already exists"

    def test_second_statutory_rule(self, senior_rule):
        """Only one senior rule should exist."""
        other = DiscountRule.create(
            name="Lolo Discount",
            type=DiscountType.SENIOR,
            percentage=Percentage.of(20),
            is_vat_exempt=True,
            conditions=(DiscountCondition.create("age", "greater_than", 59),),
        )
        report = validate_discount_rule_conflicts(other, [senior_rule])
        assert [c.description for c in report.conflicts] == [
            "Only one senior discount rule should exist"
        ]

    def test_condition_overlap(self, senior_rule, make_custom_rule):
        """Sharing a condition tuple is an overlap."""
        custom = make_custom_rule(
            "Senior Snacks",
            5,
            conditions=(DiscountCondition.create("age", "greater_than_or_equal", 60),),
        )
        report = validate_discount_rule_conflicts(custom, [senior_rule])
        assert [c.conflict_type for c in report.conflicts] == [ConflictType.OVERLAP]

    def test_all_kinds_are_reported(self, senior_rule):
        """A copy of the senior rule conflicts on name, type and conditions."""
        copy = DiscountRule.senior_citizen()
        report = validate_discount_rule_conflicts(copy, [senior_rule])
        assert len(report.of_type(ConflictType.DUPLICATE)) == 2
        assert len(report.of_type(ConflictType.OVERLAP)) == 1

    def test_rule_does_not_conflict_with_itself(self, senior_rule):
        """Re-validating an edited rule skips its own stored version."""
        edited = senior_rule.update_percentage(Percentage.of(25))
        assert not validate_discount_rule_conflicts(edited, [senior_rule]).has_conflicts

    def test_no_existing_rules(self, senior_rule):
        """Nothing to conflict with means no conflicts."""
        assert not validate_discount_rule_conflicts(senior_rule, []).has_conflicts
