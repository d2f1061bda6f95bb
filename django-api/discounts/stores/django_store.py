"""Django ORM implementation of the DiscountRuleStore."""

import logging
import uuid
from typing import Any
from uuid import UUID

from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from discounts import models
from discounts.domain import (
    ConditionOperator,
    DiscountCondition,
    DiscountRule,
    DiscountRuleId,
    DiscountType,
    Percentage,
    VATConfig,
)
from discounts.domain.serialization import condition_to_json
from discounts.stores.interfaces import DiscountRuleStore

logger = logging.getLogger(__name__)


def _scope(operator_id: UUID | None) -> Q:
    """Rows owned by the operator plus platform-wide rows."""
    if operator_id is None:
        return Q(operator_id__isnull=True)
    return Q(operator_id=operator_id) | Q(operator_id__isnull=True)


class DjangoDiscountRuleStore(DiscountRuleStore):
    """Database-backed rule store using Django ORM."""

    def list_rules(self, operator_id: UUID | None, active_only: bool = True) -> list[DiscountRule]:
        rows = models.DiscountRule.objects.filter(_scope(operator_id))
        if active_only:
            rows = rows.filter(is_active=True)
        return [self._to_domain(row) for row in rows.order_by("created_at")]

    def get_rule(self, rule_id: DiscountRuleId) -> DiscountRule | None:
        row = models.DiscountRule.objects.filter(pk=rule_id.value).first()
        return self._to_domain(row) if row is not None else None

    def add_rule(self, rule: DiscountRule, operator_id: UUID | None = None) -> None:
        models.DiscountRule.objects.create(
            id=UUID(rule.id),
            operator_id=operator_id,
            created_at=rule.created_at,
            **self._columns(rule),
        )

    def update_rule(self, rule: DiscountRule) -> bool:
        row = models.DiscountRule.objects.filter(pk=UUID(rule.id)).first()
        if row is None:
            return False
        for column, value in self._columns(rule).items():
            setattr(row, column, value)
        row.save()
        return True

    def delete_rule(self, rule_id: DiscountRuleId) -> bool:
        deleted, _ = models.DiscountRule.objects.filter(pk=rule_id.value).delete()
        return deleted > 0

    def get_default_vat_rate(self, operator_id: UUID | None) -> Percentage | None:
        defaults = models.VATConfig.objects.filter(is_active=True, is_default=True)
        row = None
        if operator_id is not None:
            row = defaults.filter(operator_id=operator_id).order_by("-updated_at").first()
        if row is None:
            row = defaults.filter(operator_id__isnull=True).order_by("-updated_at").first()
        return Percentage.of(row.rate) if row is not None else None

    def list_vat_configs(self, operator_id: UUID | None) -> list[VATConfig]:
        rows = models.VATConfig.objects.filter(_scope(operator_id), is_active=True)
        return [self._vat_config_to_domain(row) for row in rows.order_by("created_at")]

    def get_vat_config(self, config_id: UUID) -> VATConfig | None:
        row = models.VATConfig.objects.filter(pk=config_id).first()
        return self._vat_config_to_domain(row) if row is not None else None

    @transaction.atomic
    def add_vat_config(self, config: VATConfig) -> None:
        if config.is_default:
            self._clear_defaults(config)
        models.VATConfig.objects.create(
            id=UUID(config.id),
            created_at=config.created_at,
            **self._vat_columns(config),
        )

    @transaction.atomic
    def update_vat_config(self, config: VATConfig) -> bool:
        row = models.VATConfig.objects.filter(pk=UUID(config.id)).first()
        if row is None:
            return False
        if config.is_default:
            self._clear_defaults(config)
        for column, value in self._vat_columns(config).items():
            setattr(row, column, value)
        row.save()
        return True

    @staticmethod
    def _clear_defaults(config: VATConfig) -> None:
        # queryset.update() sends no post_save; the caller's save invalidates snapshots
        models.VATConfig.objects.filter(
            operator_id=config.operator_id, is_default=True
        ).exclude(pk=UUID(config.id)).update(is_default=False, updated_at=timezone.now())

    @staticmethod
    def _columns(rule: DiscountRule) -> dict[str, Any]:
        return {
            "name": rule.name,
            "type": rule.type.value,
            "percentage": rule.percentage.value,
            "is_vat_exempt": rule.is_vat_exempt,
            "conditions": [condition_to_json(c) for c in rule.conditions],
            "is_active": rule.is_active,
            "updated_at": rule.updated_at,
        }

    @staticmethod
    def _vat_columns(config: VATConfig) -> dict[str, Any]:
        return {
            "name": config.name,
            "rate": config.rate.value,
            "is_default": config.is_default,
            "operator_id": config.operator_id,
            "is_active": config.is_active,
            "updated_at": config.updated_at,
        }

    def _to_domain(self, row: models.DiscountRule) -> DiscountRule:
        conditions = []
        for data in row.conditions or []:
            if not isinstance(data, dict):
                logger.warning("Rule %s has a malformed condition %r; skipping it", row.id, data)
                continue
            conditions.append(self._condition_to_domain(row, data))
        return DiscountRule(
            id=str(row.id),
            name=row.name,
            type=DiscountType(row.type),
            percentage=Percentage.of(row.percentage),
            is_vat_exempt=row.is_vat_exempt,
            conditions=tuple(conditions),
            is_active=row.is_active,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    @staticmethod
    def _condition_to_domain(row: models.DiscountRule, data: dict[str, Any]) -> DiscountCondition:
        field = data.get("field")
        if not isinstance(field, str):
            logger.warning(
                "Rule %s has a condition with invalid field %r; it will never match", row.id, field
            )
            field = ""
        raw_operator = data.get("operator")
        operator = ConditionOperator.parse(raw_operator) if isinstance(raw_operator, str) else ""
        if not isinstance(operator, ConditionOperator):
            logger.warning(
                "Rule %s has a condition with unknown operator %r; it will never match",
                row.id,
                raw_operator,
            )
        raw_created_at = data.get("createdAt")
        created_at = parse_datetime(raw_created_at) if isinstance(raw_created_at, str) else None
        return DiscountCondition(
            id=str(data.get("id") or uuid.uuid4()),
            field=field,
            operator=operator,
            value=data.get("value"),
            created_at=created_at or row.created_at or timezone.now(),
        )

    @staticmethod
    def _vat_config_to_domain(row: models.VATConfig) -> VATConfig:
        return VATConfig(
            id=str(row.id),
            name=row.name,
            rate=Percentage.of(row.rate),
            is_default=row.is_default,
            is_active=row.is_active,
            operator_id=row.operator_id,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
