"""Payment gateway port (abstract interface).

Order lifecycle code only ever talks to this contract. The gateway is an
external collaborator that reports whether a charge or refund went through.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PaymentOutcome:
    """Result of a charge or refund attempt."""

    success: bool
    transaction_id: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def charge(
        self,
        order_number: str,
        amount: float,
        currency: str,
        payment_method: str | None,
    ) -> PaymentOutcome:
        """Charge the customer for an order."""
        ...

    @abstractmethod
    def refund(
        self,
        order_number: str,
        amount: float,
        currency: str,
    ) -> PaymentOutcome:
        """Refund part or all of a previous charge."""
        ...
