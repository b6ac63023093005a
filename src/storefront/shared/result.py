"""Uniform success/failure values returned by every storefront operation.

Expected failures (missing rows, invalid input, broken business rules and
lost races) are reported as failed results rather than exceptions. Only
storage faults and misuse of the persistence contract raise.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from protean.exceptions import ValidationError

T = TypeVar("T")


class ErrorCategory(Enum):
    NOT_FOUND = "NotFound"
    VALIDATION_FAILURE = "ValidationFailure"
    BUSINESS_RULE_VIOLATION = "BusinessRuleViolation"
    CONCURRENCY_CONFLICT = "ConcurrencyConflict"


class ErrorKind(Enum):
    NOT_FOUND = "NotFound"
    VALIDATION_FAILURE = "ValidationFailure"
    EMPTY_CART = "EmptyCart"
    PRODUCT_UNAVAILABLE = "ProductUnavailable"
    INSUFFICIENT_STOCK = "InsufficientStock"
    INVALID_STATUS_TRANSITION = "InvalidStatusTransition"
    ADDRESS_MISMATCH = "AddressMismatch"
    PAYMENT_DECLINED = "PaymentDeclined"
    CONCURRENCY_CONFLICT = "ConcurrencyConflict"

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES[self]


_CATEGORIES = {
    ErrorKind.NOT_FOUND: ErrorCategory.NOT_FOUND,
    ErrorKind.VALIDATION_FAILURE: ErrorCategory.VALIDATION_FAILURE,
    ErrorKind.EMPTY_CART: ErrorCategory.BUSINESS_RULE_VIOLATION,
    ErrorKind.PRODUCT_UNAVAILABLE: ErrorCategory.BUSINESS_RULE_VIOLATION,
    ErrorKind.INSUFFICIENT_STOCK: ErrorCategory.BUSINESS_RULE_VIOLATION,
    ErrorKind.INVALID_STATUS_TRANSITION: ErrorCategory.BUSINESS_RULE_VIOLATION,
    ErrorKind.ADDRESS_MISMATCH: ErrorCategory.BUSINESS_RULE_VIOLATION,
    ErrorKind.PAYMENT_DECLINED: ErrorCategory.BUSINESS_RULE_VIOLATION,
    ErrorKind.CONCURRENCY_CONFLICT: ErrorCategory.CONCURRENCY_CONFLICT,
}


@dataclass(frozen=True)
class Result:
    """Outcome of an operation that carries no payload."""

    success: bool
    message: str = ""
    kind: ErrorKind | None = None

    def __post_init__(self):
        if self.success and self.kind is not None:
            raise ValueError("A successful result cannot carry an error kind")
        if not self.success and self.kind is None:
            raise ValueError("A failed result must carry an error kind")

    @property
    def failed(self) -> bool:
        return not self.success

    @classmethod
    def ok(cls, message: str = "") -> "Result":
        return cls(success=True, message=message)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> "Result":
        return cls(success=False, message=message, kind=kind)

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> "Result":
        return cls.fail(ErrorKind.VALIDATION_FAILURE, describe_validation_error(exc))


@dataclass(frozen=True)
class DataResult(Result, Generic[T]):
    """Outcome of an operation that returns a value on success."""

    data: T | None = None

    def __post_init__(self):
        super().__post_init__()
        if not self.success and self.data is not None:
            raise ValueError("A failed result cannot carry data")

    @classmethod
    def ok(cls, data: T = None, message: str = "") -> "DataResult[T]":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, kind: ErrorKind, message: str) -> "DataResult[T]":
        return cls(success=False, message=message, kind=kind)

    @classmethod
    def fail_from(cls, result: Result) -> "DataResult[T]":
        """Carry a failed result's kind and message over to a typed result."""
        if result.success:
            raise ValueError("Only a failed result can be re-typed")
        return cls(success=False, message=result.message, kind=result.kind)


def describe_validation_error(exc: ValidationError) -> str:
    messages = getattr(exc, "messages", None)
    if not isinstance(messages, dict) or not messages:
        return str(exc)

    parts = []
    for field_name, errors in messages.items():
        if isinstance(errors, (list, tuple)):
            text = "; ".join(str(error) for error in errors)
        else:
            text = str(errors)
        parts.append(f"{field_name}: {text}")
    return ", ".join(parts)
