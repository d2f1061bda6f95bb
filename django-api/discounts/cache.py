"""Cache keys for per-operator rule snapshots.

Keys embed a generation token. Any rule or VAT change replaces the token,
orphaning every operator's snapshot at once.
"""

import uuid
from uuid import UUID

from django.core.cache import cache

GENERATION_KEY = "discounts:generation"


def _generation() -> str:
    return cache.get_or_set(GENERATION_KEY, lambda: uuid.uuid4().hex, timeout=None)


def snapshot_key(operator_id: UUID | None) -> str:
    return f"discounts:{_generation()}:snapshot:{operator_id or 'platform'}"


def invalidate_snapshots() -> None:
    cache.set(GENERATION_KEY, uuid.uuid4().hex, timeout=None)
