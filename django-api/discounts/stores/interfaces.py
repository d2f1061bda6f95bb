"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from discounts.domain import DiscountRule, DiscountRuleId, Percentage, VATConfig


class DiscountRuleStore(ABC):
    """Interface for discount rule and VAT configuration persistence."""

    @abstractmethod
    def list_rules(self, operator_id: UUID | None, active_only: bool = True) -> list[DiscountRule]:
        """Return the operator's rules plus platform-wide ones, oldest first.

        With no operator_id only platform-wide rules are returned.
        """
        ...

    @abstractmethod
    def get_rule(self, rule_id: DiscountRuleId) -> DiscountRule | None:
        """Return a rule by ID, or None if not found."""
        ...

    @abstractmethod
    def add_rule(self, rule: DiscountRule, operator_id: UUID | None = None) -> None:
        """Persist a new rule, owned by operator_id or platform-wide."""
        ...

    @abstractmethod
    def update_rule(self, rule: DiscountRule) -> bool:
        """Persist a new version of an existing rule. Returns False if absent."""
        ...

    @abstractmethod
    def delete_rule(self, rule_id: DiscountRuleId) -> bool:
        """Delete a rule. Returns False if absent."""
        ...

    @abstractmethod
    def get_default_vat_rate(self, operator_id: UUID | None) -> Percentage | None:
        """Return the operator's default VAT rate, else the platform default."""
        ...

    @abstractmethod
    def list_vat_configs(self, operator_id: UUID | None) -> list[VATConfig]:
        """Return active VAT configurations of the operator plus platform-wide ones."""
        ...

    @abstractmethod
    def get_vat_config(self, config_id: UUID) -> VATConfig | None:
        """Return a VAT configuration by ID, or None if not found."""
        ...

    @abstractmethod
    def add_vat_config(self, config: VATConfig) -> None:
        """Persist a new VAT configuration.

        A default configuration clears the default flag of the others in its scope.
        """
        ...

    @abstractmethod
    def update_vat_config(self, config: VATConfig) -> bool:
        """Persist a new version of a VAT configuration. Returns False if absent.

        A default configuration clears the default flag of the others in its scope.
        """
        ...
