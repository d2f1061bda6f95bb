"""App settings, read from ``settings.DISCOUNTS`` with built-in defaults."""

from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    "DEFAULT_VAT_RATE": 12,
    "ASSUMED_ADOPTION_RATE": 70,
    "RULE_CACHE_TIMEOUT": 300,
}


def get_setting(name: str) -> Any:
    return getattr(settings, "DISCOUNTS", {}).get(name, DEFAULTS[name])
