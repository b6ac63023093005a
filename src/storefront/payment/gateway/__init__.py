"""Process-wide payment gateway used by the order lifecycle.

`OrderLifecycle` looks the gateway up on every capture or refund, so a
gateway installed with set_gateway() applies to services that already exist.
With nothing installed the in-process FakeGateway approves every charge.
"""

from storefront.payment.gateway.fake_adapter import FakeGateway
from storefront.payment.gateway.port import PaymentGateway

_installed: PaymentGateway | None = None


def get_gateway() -> PaymentGateway:
    global _installed
    if _installed is None:
        _installed = FakeGateway()
    return _installed


def set_gateway(gateway: PaymentGateway) -> None:
    """Install `gateway` for every lifecycle without an explicit one."""
    global _installed
    _installed = gateway


def reset_gateway() -> None:
    """Drop the installed gateway; the next lookup creates a fresh FakeGateway."""
    global _installed
    _installed = None
