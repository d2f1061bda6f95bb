import uuid

import django.core.validators
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="DiscountRule",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("senior", "Senior citizen"),
                            ("pwd", "Person with disability"),
                            ("custom", "Custom"),
                        ],
                        max_length=16,
                    ),
                ),
                (
                    "percentage",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                ("is_vat_exempt", models.BooleanField(default=False)),
                ("conditions", models.JSONField(blank=True, default=list)),
                ("operator_id", models.UUIDField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "discount_rules",
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["type"], name="discount_rules_type_idx"),
                    models.Index(
                        fields=["operator_id", "is_active"], name="discount_rules_operator_idx"
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="VATConfig",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("name", models.CharField(max_length=100)),
                (
                    "rate",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                ("is_default", models.BooleanField(default=False)),
                ("operator_id", models.UUIDField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "vat_config",
                "indexes": [
                    models.Index(
                        fields=["operator_id", "is_default"], name="vat_config_operator_idx"
                    ),
                ],
            },
        ),
    ]
