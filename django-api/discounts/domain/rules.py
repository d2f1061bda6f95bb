"""Discount rules and the discounts they produce.

Rules are immutable. Every "mutator" returns a new rule with ``updated_at``
bumped, so a rule snapshot can be shared between concurrent evaluations.
"""

import dataclasses
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Self

from discounts.domain.conditions import (
    ConditionOperator,
    DiscountCondition,
    UserContext,
)
from discounts.domain.value_objects import Money, Percentage

STATUTORY_PERCENTAGE = Percentage.of(20)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DiscountType(Enum):
    """Discount categories."""

    SENIOR = "senior"
    PWD = "pwd"
    CUSTOM = "custom"

    @property
    def is_statutory(self) -> bool:
        return self in (DiscountType.SENIOR, DiscountType.PWD)


@dataclass(frozen=True)
class AppliedDiscount:
    """Snapshot of a rule's effect on one transaction."""

    id: str
    type: DiscountType
    name: str
    percentage: Percentage
    amount: Money
    is_vat_exempt: bool
    applied_at: datetime = dataclasses.field(default_factory=utcnow)


@dataclass(frozen=True)
class DiscountRule:
    """A named percentage discount granted when all its conditions hold."""

    id: str
    name: str
    type: DiscountType
    percentage: Percentage
    is_vat_exempt: bool
    conditions: tuple[DiscountCondition, ...] = ()
    is_active: bool = True
    created_at: datetime = dataclasses.field(default_factory=utcnow)
    updated_at: datetime = dataclasses.field(default_factory=utcnow)

    @classmethod
    def create(
        cls,
        name: str,
        type: DiscountType,
        percentage: Percentage,
        is_vat_exempt: bool,
        conditions: tuple[DiscountCondition, ...] = (),
        is_active: bool = True,
    ) -> Self:
        now = utcnow()
        return cls(
            id=str(uuid.uuid4()),
            name=name,
            type=type,
            percentage=percentage,
            is_vat_exempt=is_vat_exempt,
            conditions=tuple(conditions),
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def senior_citizen(cls) -> Self:
        """Statutory Philippine senior citizen discount."""
        return cls.create(
            name="Senior Citizen Discount",
            type=DiscountType.SENIOR,
            percentage=STATUTORY_PERCENTAGE,
            is_vat_exempt=True,
            conditions=(
                DiscountCondition.create("age", ConditionOperator.GREATER_THAN_OR_EQUAL, 60),
            ),
        )

    @classmethod
    def person_with_disability(cls) -> Self:
        """Statutory Philippine PWD discount."""
        return cls.create(
            name="Person with Disability Discount",
            type=DiscountType.PWD,
            percentage=STATUTORY_PERCENTAGE,
            is_vat_exempt=True,
            conditions=(DiscountCondition.create("hasPWDId", ConditionOperator.EQUALS, True),),
        )

    def can_apply_to_user(self, context: UserContext) -> bool:
        if not self.is_active:
            return False
        return all(condition.evaluate(context) for condition in self.conditions)

    def calculate_discount(self, amount: Money) -> AppliedDiscount:
        """Compute this rule's discount on amount. Eligibility is not checked."""
        return AppliedDiscount(
            id=str(uuid.uuid4()),
            type=self.type,
            name=self.name,
            percentage=self.percentage,
            amount=self.percentage.apply(amount),
            is_vat_exempt=self.is_vat_exempt,
        )

    def _touch(self, **changes) -> "DiscountRule":
        return dataclasses.replace(self, updated_at=utcnow(), **changes)

    def activate(self) -> "DiscountRule":
        return self._touch(is_active=True)

    def deactivate(self) -> "DiscountRule":
        return self._touch(is_active=False)

    def rename(self, name: str) -> "DiscountRule":
        return self._touch(name=name)

    def update_percentage(self, percentage: Percentage) -> "DiscountRule":
        return self._touch(percentage=percentage)

    def update_vat_exemption(self, is_vat_exempt: bool) -> "DiscountRule":
        return self._touch(is_vat_exempt=is_vat_exempt)

    def add_condition(self, condition: DiscountCondition) -> "DiscountRule":
        return self._touch(conditions=self.conditions + (condition,))

    def remove_condition(self, condition_id: str) -> "DiscountRule":
        return self._touch(
            conditions=tuple(c for c in self.conditions if c.id != condition_id)
        )
