"""Pytest configuration and shared fixtures."""

import pytest

from discounts.domain import DiscountEngine, DiscountRule, DiscountType, Percentage


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def senior_rule() -> DiscountRule:
    return DiscountRule.senior_citizen()


@pytest.fixture
def pwd_rule() -> DiscountRule:
    return DiscountRule.person_with_disability()


@pytest.fixture
def statutory_engine(senior_rule: DiscountRule, pwd_rule: DiscountRule) -> DiscountEngine:
    return DiscountEngine([senior_rule, pwd_rule])


@pytest.fixture
def make_custom_rule():
    """Factory for custom, by default non-exempt, rules."""

    def make(name: str, percentage, is_vat_exempt: bool = False, conditions=()) -> DiscountRule:
        return DiscountRule.create(
            name=name,
            type=DiscountType.CUSTOM,
            percentage=Percentage.of(percentage),
            is_vat_exempt=is_vat_exempt,
            conditions=conditions,
        )

    return make
