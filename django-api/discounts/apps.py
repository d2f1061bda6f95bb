from django.apps import AppConfig


class DiscountsConfig(AppConfig):
    name = "discounts"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self) -> None:
        from discounts import signals  # noqa: F401
