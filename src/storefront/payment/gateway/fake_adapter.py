"""Configurable fake payment gateway for development and testing.

Simulates a gateway without any external calls. It can be told to succeed or
decline at runtime and records every call it receives.
"""

from uuid import uuid4

from storefront.payment.gateway.port import PaymentGateway, PaymentOutcome


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def charge(
        self,
        order_number: str,
        amount: float,
        currency: str,
        payment_method: str | None,
    ) -> PaymentOutcome:
        self.calls.append(
            {
                "method": "charge",
                "order_number": order_number,
                "amount": amount,
                "currency": currency,
                "payment_method": payment_method,
            }
        )

        if self.should_succeed:
            return PaymentOutcome(
                success=True,
                transaction_id=f"fake_txn_{uuid4().hex[:12]}",
                gateway_status="succeeded",
            )
        return PaymentOutcome(success=False, gateway_status="failed", failure_reason=self.failure_reason)

    def refund(self, order_number: str, amount: float, currency: str) -> PaymentOutcome:
        self.calls.append(
            {
                "method": "refund",
                "order_number": order_number,
                "amount": amount,
                "currency": currency,
            }
        )

        if self.should_succeed:
            return PaymentOutcome(
                success=True,
                transaction_id=f"fake_ref_{uuid4().hex[:12]}",
                gateway_status="succeeded",
            )
        return PaymentOutcome(success=False, gateway_status="failed", failure_reason=self.failure_reason)
