"""Order and OrderDetail aggregates.

An Order is written once at checkout. After that only its status, its
payment status and the audit fields may change, and only along the
transition tables below:

    Pending → Processing → Shipped → Delivered
    Pending / Processing → Cancelled

    Unpaid → Paid → Refunded / PartiallyRefunded

OrderDetail rows snapshot the product name and unit price at checkout time
and are never re-derived from the live Product.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(Enum):
    UNPAID = "Unpaid"
    PAID = "Paid"
    REFUNDED = "Refunded"
    PARTIALLY_REFUNDED = "PartiallyRefunded"


class PaymentMethod(Enum):
    CREDIT_CARD = "CreditCard"
    BANK_TRANSFER = "BankTransfer"
    CASH_ON_DELIVERY = "CashOnDelivery"
    DIGITAL_WALLET = "DigitalWallet"


# State machine transition maps
_VALID_STATUS_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

_VALID_PAYMENT_TRANSITIONS = {
    PaymentStatus.UNPAID: {PaymentStatus.PAID},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED, PaymentStatus.PARTIALLY_REFUNDED},
    PaymentStatus.REFUNDED: set(),  # Terminal
    PaymentStatus.PARTIALLY_REFUNDED: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    order_date = DateTime(default=lambda: datetime.now(UTC))
    user_id = String(required=True, max_length=450)
    total_amount = Float(required=True, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    tax_amount = Float(default=0.0, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.UNPAID.value)
    payment_method = String(choices=PaymentMethod)
    shipping_address_id = Identifier(required=True)
    billing_address_id = Identifier()
    notes = Text()
    created_date = DateTime(default=lambda: datetime.now(UTC))
    updated_date = DateTime()
    is_active = Boolean(default=True)
    is_deleted = Boolean(default=False)
    deleted_date = DateTime()
    row_version = Integer(default=0)

    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def current_payment_status(self) -> PaymentStatus:
        return PaymentStatus(self.payment_status)

    def can_transition_to(self, target_status: OrderStatus) -> bool:
        return target_status in _VALID_STATUS_TRANSITIONS[self.current_status]

    def transition_to(self, target_status: OrderStatus) -> None:
        self._assert_can_transition(target_status)
        self.status = target_status.value

    def can_transition_payment_to(self, target_status: PaymentStatus) -> bool:
        return target_status in _VALID_PAYMENT_TRANSITIONS[self.current_payment_status]

    def transition_payment_to(self, target_status: PaymentStatus) -> None:
        if not self.can_transition_payment_to(target_status):
            raise ValidationError(
                {
                    "payment_status": [
                        f"Cannot transition payment from {self.payment_status} to {target_status.value}"
                    ]
                }
            )
        self.payment_status = target_status.value

    def _assert_can_transition(self, target_status):
        """Validate that the requested state transition is allowed."""
        if not self.can_transition_to(target_status):
            raise ValidationError({"status": [f"Cannot transition from {self.status} to {target_status.value}"]})


@storefront.aggregate
class OrderDetail:
    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=200)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    sub_total = Float(required=True, min_value=0.0)
    created_date = DateTime(default=lambda: datetime.now(UTC))
    updated_date = DateTime()
    is_active = Boolean(default=True)
    is_deleted = Boolean(default=False)
    deleted_date = DateTime()
    row_version = Integer(default=0)
