"""Discount service - all business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any
from uuid import UUID

from django.core.cache import cache

from discounts.cache import snapshot_key
from discounts.conf import get_setting
from discounts.domain import (
    DiscountEngine,
    DiscountRule,
    DiscountRuleId,
    Money,
    Percentage,
    TransactionCalculation,
    UserContext,
    VATCalculator,
    VATConfig,
)
from discounts.domain.advisor import (
    ConditionDraft,
    ConflictReport,
    DiscountImpact,
    HistoricalData,
    RuleDraft,
    calculate_discount_impact,
    validate_discount_condition,
    validate_discount_rule,
    validate_discount_rule_conflicts,
)
from discounts.domain.errors import (
    DiscountConditionNotFoundError,
    DiscountRuleNotFoundError,
    InvalidAmountError,
    InvalidDiscountRuleError,
    InvalidDiscountRuleIdError,
    InvalidVATConfigError,
    InvalidVATConfigIdError,
    VATConfigNotFoundError,
)
from discounts.domain.value_objects import HUNDRED, to_decimal
from discounts.stores.interfaces import DiscountRuleStore

logger = logging.getLogger(__name__)

# Rates are stored as DECIMAL(5, 2)
RATE_PLACES = Decimal("0.01")
PERCENTAGE_PRECISION_ERROR = "Discount percentage must have at most 2 decimal places"


def _fits_rate_column(value: Decimal) -> bool:
    return value == value.quantize(RATE_PLACES)


@dataclass(frozen=True)
class RuleSnapshot:
    """Active rules and VAT rate in force for one operator."""

    rules: tuple[DiscountRule, ...]
    vat_rate: Percentage


@dataclass(frozen=True)
class RuleCreation:
    rule: DiscountRule
    warnings: tuple[str, ...]
    conflicts: ConflictReport


class DiscountService:
    """Service for discount administration and transaction quoting."""

    def __init__(self, store: DiscountRuleStore) -> None:
        self._store = store

    def list_rules(self, operator_id: UUID | None = None) -> list[DiscountRule]:
        """Return the active rules that apply to an operator's transactions."""
        return list(self._snapshot(operator_id).rules)

    def get_rule(self, rule_id: str) -> DiscountRule:
        """Return a rule by ID.

        Raises:
            InvalidDiscountRuleIdError: If the rule_id is not a valid UUID.
            DiscountRuleNotFoundError: If the rule does not exist.
        """
        rule = self._store.get_rule(self._parse_rule_id(rule_id))
        if rule is None:
            raise DiscountRuleNotFoundError(rule_id)
        return rule

    def create_rule(self, draft: RuleDraft, operator_id: UUID | None = None) -> RuleCreation:
        """Validate and persist a new rule.

        Warnings and conflicts are reported back but do not block creation.

        Raises:
            InvalidDiscountRuleError: If validation finds blocking errors.
        """
        validation = validate_discount_rule(draft)
        if not validation.is_valid:
            logger.warning("Rejected discount rule %r: %s", draft.name, "; ".join(validation.errors))
            raise InvalidDiscountRuleError(list(validation.errors))
        if not _fits_rate_column(to_decimal(draft.percentage)):
            raise InvalidDiscountRuleError([PERCENTAGE_PRECISION_ERROR])

        rule = draft.to_rule()
        existing = self._store.list_rules(operator_id, active_only=False)
        conflicts = validate_discount_rule_conflicts(rule, existing)
        for warning in validation.warnings:
            logger.warning("Discount rule %r: %s", rule.name, warning)
        for conflict in conflicts.conflicts:
            logger.warning(
                "Discount rule %r conflicts with %s (%s): %s",
                rule.name,
                conflict.conflicting_rule.id,
                conflict.conflict_type.value,
                conflict.description,
            )

        self._store.add_rule(rule, operator_id)
        logger.info("Created discount rule %s (%s)", rule.id, rule.name)
        return RuleCreation(rule=rule, warnings=validation.warnings, conflicts=conflicts)

    def set_rule_active(self, rule_id: str, is_active: bool) -> DiscountRule:
        if is_active:
            return self._update(rule_id, DiscountRule.activate)
        return self._update(rule_id, DiscountRule.deactivate)

    def update_rule_percentage(self, rule_id: str, percentage: Percentage) -> DiscountRule:
        if not _fits_rate_column(percentage.value):
            raise InvalidDiscountRuleError([PERCENTAGE_PRECISION_ERROR])
        return self._update(rule_id, lambda rule: rule.update_percentage(percentage))

    def update_rule_vat_exemption(self, rule_id: str, is_vat_exempt: bool) -> DiscountRule:
        return self._update(rule_id, lambda rule: rule.update_vat_exemption(is_vat_exempt))

    def rename_rule(self, rule_id: str, name: str) -> DiscountRule:
        name = name.strip()
        if not name:
            raise InvalidDiscountRuleError(["Discount rule name is required"])
        return self._update(rule_id, lambda rule: rule.rename(name))

    def add_rule_condition(self, rule_id: str, draft: ConditionDraft) -> DiscountRule:
        """Append a condition to a rule.

        Raises:
            InvalidDiscountRuleError: If the condition is malformed.
        """
        validation = validate_discount_condition(draft)
        if not validation.is_valid:
            raise InvalidDiscountRuleError(list(validation.errors))
        condition = draft.to_condition()
        return self._update(rule_id, lambda rule: rule.add_condition(condition))

    def remove_rule_condition(self, rule_id: str, condition_id: str) -> DiscountRule:
        def remove(rule: DiscountRule) -> DiscountRule:
            if not any(c.id == condition_id for c in rule.conditions):
                raise DiscountConditionNotFoundError(condition_id)
            return rule.remove_condition(condition_id)

        return self._update(rule_id, remove)

    def delete_rule(self, rule_id: str) -> None:
        if not self._store.delete_rule(self._parse_rule_id(rule_id)):
            raise DiscountRuleNotFoundError(rule_id)
        logger.info("Deleted discount rule %s", rule_id)

    def quote(
        self,
        amount: Money | Decimal | int | float | str,
        context: UserContext,
        operator_id: UUID | None = None,
    ) -> TransactionCalculation:
        """Apply every eligible rule and VAT to an amount.

        Raises:
            InvalidAmountError: If amount is negative or not a number.
        """
        money = self._to_money(amount)
        snapshot = self._snapshot(operator_id)
        engine = DiscountEngine(snapshot.rules)
        calculation = engine.calculate_total_with_discounts_and_vat(
            money, context, VATCalculator(snapshot.vat_rate)
        )
        logger.debug(
            "Quoted %s for operator %s: %d discount(s), final %s",
            money,
            operator_id,
            len(calculation.applied_discounts),
            calculation.final_amount,
        )
        return calculation

    def estimate_impact(self, rule_id: str, historical: HistoricalData) -> DiscountImpact:
        rule = self.get_rule(rule_id)
        return calculate_discount_impact(
            rule,
            historical,
            adoption_rate=Percentage.of(get_setting("ASSUMED_ADOPTION_RATE")),
            vat_rate=Percentage.of(get_setting("DEFAULT_VAT_RATE")),
        )

    def list_vat_configs(self, operator_id: UUID | None = None) -> list[VATConfig]:
        """Return the active VAT configurations visible to an operator."""
        return self._store.list_vat_configs(operator_id)

    def create_vat_config(
        self,
        name: str,
        rate: Decimal | int | float | str,
        is_default: bool = False,
        operator_id: UUID | None = None,
    ) -> VATConfig:
        """Validate and persist a VAT rate.

        A new default replaces the previous default of the same scope.

        Raises:
            InvalidVATConfigError: If the name is blank or the rate is invalid.
        """
        errors = self._vat_config_errors(name or "", rate)
        if errors:
            raise InvalidVATConfigError(errors)
        config = VATConfig.create(
            name=name.strip(),
            rate=Percentage.of(rate),
            is_default=is_default,
            operator_id=operator_id,
        )
        self._store.add_vat_config(config)
        logger.info("Created VAT configuration %s (%s at %s)", config.id, config.name, config.rate)
        return config

    def update_vat_config(
        self,
        config_id: str,
        *,
        name: str | None = None,
        rate: Decimal | int | float | str | None = None,
        is_default: bool | None = None,
        is_active: bool | None = None,
    ) -> VATConfig:
        """Change the given fields of a VAT configuration. None leaves a field as is.

        Raises:
            InvalidVATConfigIdError: If the config_id is not a valid UUID.
            InvalidVATConfigError: If the new name or rate is invalid.
            VATConfigNotFoundError: If the configuration does not exist.
        """
        current = self._store.get_vat_config(self._parse_config_id(config_id))
        if current is None:
            raise VATConfigNotFoundError(config_id)
        errors = self._vat_config_errors(name, rate)
        if errors:
            raise InvalidVATConfigError(errors)

        changes: dict[str, Any] = {}
        if name is not None:
            changes["name"] = name.strip()
        if rate is not None:
            changes["rate"] = Percentage.of(rate)
        if is_default is not None:
            changes["is_default"] = is_default
        if is_active is not None:
            changes["is_active"] = is_active

        updated = current.update(**changes)
        if not self._store.update_vat_config(updated):
            raise VATConfigNotFoundError(config_id)
        logger.info("Updated VAT configuration %s", updated.id)
        return updated

    def _update(
        self, rule_id: str, change: Callable[[DiscountRule], DiscountRule]
    ) -> DiscountRule:
        updated = change(self.get_rule(rule_id))
        validation = validate_discount_rule(updated)
        if updated.is_active and not validation.is_valid:
            logger.warning(
                "Rejected update of discount rule %s: %s", rule_id, "; ".join(validation.errors)
            )
            raise InvalidDiscountRuleError(list(validation.errors))
        for warning in validation.warnings:
            logger.warning("Discount rule %r: %s", updated.name, warning)
        if not self._store.update_rule(updated):
            raise DiscountRuleNotFoundError(rule_id)
        logger.info("Updated discount rule %s", updated.id)
        return updated

    def _snapshot(self, operator_id: UUID | None) -> RuleSnapshot:
        key = snapshot_key(operator_id)
        snapshot = cache.get(key)
        if snapshot is None:
            vat_rate = self._store.get_default_vat_rate(operator_id)
            if vat_rate is None:
                vat_rate = Percentage.of(get_setting("DEFAULT_VAT_RATE"))
            snapshot = RuleSnapshot(
                rules=tuple(self._store.list_rules(operator_id)),
                vat_rate=vat_rate,
            )
            cache.set(key, snapshot, get_setting("RULE_CACHE_TIMEOUT"))
        return snapshot

    @staticmethod
    def _parse_rule_id(rule_id: str) -> DiscountRuleId:
        try:
            return DiscountRuleId.from_string(rule_id)
        except (ValueError, AttributeError, TypeError):
            raise InvalidDiscountRuleIdError() from None

    @staticmethod
    def _parse_config_id(config_id: str) -> UUID:
        try:
            return UUID(config_id)
        except (ValueError, AttributeError, TypeError):
            raise InvalidVATConfigIdError() from None

    @staticmethod
    def _vat_config_errors(name: str | None, rate: Any) -> list[str]:
        errors: list[str] = []
        if name is not None and not name.strip():
            errors.append("VAT configuration name is required")
        if rate is not None:
            try:
                value = to_decimal(rate)
            except ValueError:
                errors.append("VAT rate must be a number")
            else:
                if not 0 <= value <= HUNDRED:
                    errors.append("VAT rate must be between 0 and 100")
                elif not _fits_rate_column(value):
                    errors.append("VAT rate must have at most 2 decimal places")
        return errors

    @staticmethod
    def _to_money(amount: Money | Decimal | int | float | str) -> Money:
        if isinstance(amount, Money):
            return amount
        try:
            return Money.of(amount)
        except ValueError:
            raise InvalidAmountError() from None
