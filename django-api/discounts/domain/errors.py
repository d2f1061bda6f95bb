"""Domain error codes for the discounts module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    DISCOUNT_RULE_NOT_FOUND = "DISCOUNT_RULE_NOT_FOUND"
    INVALID_DISCOUNT_RULE_ID = "INVALID_DISCOUNT_RULE_ID"
    INVALID_DISCOUNT_RULE = "INVALID_DISCOUNT_RULE"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    DISCOUNT_CONDITION_NOT_FOUND = "DISCOUNT_CONDITION_NOT_FOUND"
    VAT_CONFIG_NOT_FOUND = "VAT_CONFIG_NOT_FOUND"
    INVALID_VAT_CONFIG_ID = "INVALID_VAT_CONFIG_ID"
    INVALID_VAT_CONFIG = "INVALID_VAT_CONFIG"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class DiscountRuleNotFoundError(DomainError):
    """Raised when a discount rule is not found."""

    def __init__(self, rule_id: str) -> None:
        super().__init__(
            code=ErrorCode.DISCOUNT_RULE_NOT_FOUND,
            message="Discount rule not found",
        )
        self.rule_id = rule_id


class InvalidDiscountRuleIdError(DomainError):
    """Raised when a discount rule ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_DISCOUNT_RULE_ID,
            message="Invalid discount rule ID format",
        )


class InvalidDiscountRuleError(DomainError):
    """Raised when a rule fails validation with blocking errors."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(
            code=ErrorCode.INVALID_DISCOUNT_RULE,
            message="; ".join(errors),
        )
        self.errors = list(errors)


class InvalidAmountError(DomainError):
    """Raised when a transaction amount is negative or not a number."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_AMOUNT,
            message="Amount must be a non-negative number",
        )


class DiscountConditionNotFoundError(DomainError):
    """Raised when a rule has no condition with the given ID."""

    def __init__(self, condition_id: str) -> None:
        super().__init__(
            code=ErrorCode.DISCOUNT_CONDITION_NOT_FOUND,
            message="Discount condition not found",
        )
        self.condition_id = condition_id


class VATConfigNotFoundError(DomainError):
    """Raised when a VAT configuration is not found."""

    def __init__(self, config_id: str) -> None:
        super().__init__(
            code=ErrorCode.VAT_CONFIG_NOT_FOUND,
            message="VAT configuration not found",
        )
        self.config_id = config_id


class InvalidVATConfigIdError(DomainError):
    """Raised when a VAT configuration ID is invalid."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_VAT_CONFIG_ID,
            message="Invalid VAT configuration ID format",
        )


class InvalidVATConfigError(DomainError):
    """Raised when a VAT configuration fails validation."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(
            code=ErrorCode.INVALID_VAT_CONFIG,
            message="; ".join(errors),
        )
        self.errors = list(errors)
