"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in discounts/domain/.
A null operator_id marks a platform-wide row that applies to every operator.
"""

import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

PERCENT_VALIDATORS = [MinValueValidator(0), MaxValueValidator(100)]


class DiscountRule(models.Model):
    """Persistence model for discount rules."""

    class Type(models.TextChoices):
        SENIOR = "senior", "Senior citizen"
        PWD = "pwd", "Person with disability"
        CUSTOM = "custom", "Custom"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=16, choices=Type.choices)
    percentage = models.DecimalField(
        max_digits=5, decimal_places=2, validators=PERCENT_VALIDATORS
    )
    is_vat_exempt = models.BooleanField(default=False)
    conditions = models.JSONField(default=list, blank=True)
    operator_id = models.UUIDField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "discount_rules"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["type"], name="discount_rules_type_idx"),
            models.Index(fields=["operator_id", "is_active"], name="discount_rules_operator_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.percentage}%)"


class VATConfig(models.Model):
    """Persistence model for VAT rates."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    rate = models.DecimalField(max_digits=5, decimal_places=2, validators=PERCENT_VALIDATORS)
    is_default = models.BooleanField(default=False)
    operator_id = models.UUIDField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "vat_config"
        indexes = [
            models.Index(fields=["operator_id", "is_default"], name="vat_config_operator_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} - {self.rate}%"
