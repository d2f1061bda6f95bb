"""Rule conditions and their evaluation against a user context.

A condition is a single predicate ``(field, operator, value)``. The field is a
dot-path into the context mapping, e.g. ``"booking.hour"``. Evaluation is
fail-closed: a missing field, a ``None`` value, a type mismatch or an unknown
operator all evaluate to ``False``, so a malformed rule never grants a
discount.
"""

import dataclasses
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Self

ConditionValue = str | int | float | bool
UserContext = Mapping[str, Any]

_MISSING = object()


class ConditionOperator(Enum):
    """Comparison operators a condition may use."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN = "less_than"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"

    @classmethod
    def parse(cls, raw: "ConditionOperator | str") -> "ConditionOperator | str":
        """Return the matching member, or the raw string when unknown."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(raw)
        except ValueError:
            return raw

    @property
    def is_numeric(self) -> bool:
        return self in NUMERIC_OPERATORS

    @property
    def is_textual(self) -> bool:
        return self in TEXT_OPERATORS


NUMERIC_OPERATORS = frozenset(
    {
        ConditionOperator.GREATER_THAN,
        ConditionOperator.GREATER_THAN_OR_EQUAL,
        ConditionOperator.LESS_THAN,
        ConditionOperator.LESS_THAN_OR_EQUAL,
    }
)
TEXT_OPERATORS = frozenset({ConditionOperator.CONTAINS, ConditionOperator.NOT_CONTAINS})


def resolve_field(context: UserContext, path: str) -> Any:
    """Walk a dot-path through nested mappings.

    Returns ``None`` when the path is empty or not a string, when any segment
    is missing, or when an intermediate value is not a mapping.
    """
    if not isinstance(path, str) or not path:
        return None
    value: Any = context
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part, _MISSING)
        if value is _MISSING:
            return None
    return value


def is_number(value: Any) -> bool:
    if isinstance(value, Decimal):
        return not value.is_nan()
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def strict_equals(left: Any, right: Any) -> bool:
    """Equality that never coerces between booleans, numbers and strings."""
    if is_number(left) and is_number(right):
        return left == right
    return type(left) is type(right) and left == right


@dataclass(frozen=True)
class DiscountCondition:
    """A single predicate of a discount rule."""

    id: str
    field: str
    operator: ConditionOperator | str
    value: ConditionValue
    created_at: datetime = dataclasses.field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(
        cls,
        field: str,
        operator: ConditionOperator | str,
        value: ConditionValue,
    ) -> Self:
        return cls(
            id=str(uuid.uuid4()),
            field=field,
            operator=ConditionOperator.parse(operator),
            value=value,
        )

    @property
    def operator_name(self) -> str:
        if isinstance(self.operator, ConditionOperator):
            return self.operator.value
        return str(self.operator)

    def matches(self, other: "DiscountCondition") -> bool:
        """True when both conditions test the same field, operator and value."""
        return (
            self.field == other.field
            and self.operator_name == other.operator_name
            and strict_equals(self.value, other.value)
        )

    def evaluate(self, context: UserContext) -> bool:
        actual = resolve_field(context, self.field)
        if actual is None:
            return False
        if not isinstance(self.operator, ConditionOperator):
            return False
        return _COMPARATORS[self.operator](actual, self.value)


def _numeric(test: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    return lambda actual, expected: is_number(actual) and is_number(expected) and test(
        actual, expected
    )


def _textual(test: Callable[[str, str], bool]) -> Callable[[Any, Any], bool]:
    return lambda actual, expected: (
        isinstance(actual, str)
        and isinstance(expected, str)
        and test(actual.lower(), expected.lower())
    )


_COMPARATORS: dict[ConditionOperator, Callable[[Any, Any], bool]] = {
    ConditionOperator.EQUALS: strict_equals,
    ConditionOperator.NOT_EQUALS: lambda actual, expected: not strict_equals(actual, expected),
    ConditionOperator.GREATER_THAN: _numeric(lambda a, b: a > b),
    ConditionOperator.GREATER_THAN_OR_EQUAL: _numeric(lambda a, b: a >= b),
    ConditionOperator.LESS_THAN: _numeric(lambda a, b: a < b),
    ConditionOperator.LESS_THAN_OR_EQUAL: _numeric(lambda a, b: a <= b),
    ConditionOperator.CONTAINS: _textual(lambda a, b: b in a),
    ConditionOperator.NOT_CONTAINS: _textual(lambda a, b: b not in a),
}
