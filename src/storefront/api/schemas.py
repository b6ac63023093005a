"""Pydantic request/response schemas for the Storefront API.

These are external contracts, kept separate from the protean aggregates and
the `PlaceOrder` command.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from storefront.cart.cart_item import CartItem
from storefront.order.order import Order, OrderDetail


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    user_id: str
    shipping_address_id: str
    billing_address_id: str | None = None
    payment_method: str
    shipping_cost: float = Field(ge=0, default=0.0)
    tax_amount: float = Field(ge=0, default=0.0)
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": "user-001",
                    "shipping_address_id": "8c1f0e0a-0000-4000-8000-000000000001",
                    "billing_address_id": None,
                    "payment_method": "CreditCard",
                    "shipping_cost": 5.0,
                    "tax_amount": 1.0,
                    "notes": "Leave at the door",
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: str


class UpdatePaymentStatusRequest(BaseModel):
    payment_status: str


class RefundPaymentRequest(BaseModel):
    amount: float | None = Field(gt=0, default=None)


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"
    message: str = ""


class OrderDetailResponse(BaseModel):
    detail_id: str
    product_id: str
    product_name: str
    quantity: int
    unit_price: float
    sub_total: float

    @classmethod
    def from_entity(cls, detail: OrderDetail) -> "OrderDetailResponse":
        return cls(
            detail_id=str(detail.id),
            product_id=str(detail.product_id),
            product_name=detail.product_name,
            quantity=detail.quantity,
            unit_price=detail.unit_price,
            sub_total=detail.sub_total,
        )


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    order_date: datetime | None = None
    user_id: str
    total_amount: float
    shipping_cost: float
    tax_amount: float
    status: str
    payment_status: str
    payment_method: str | None = None
    shipping_address_id: str
    billing_address_id: str | None = None
    notes: str | None = None

    @classmethod
    def from_entity(cls, order: Order) -> "OrderResponse":
        return cls(
            order_id=str(order.id),
            order_number=order.order_number,
            order_date=order.order_date,
            user_id=order.user_id,
            total_amount=order.total_amount,
            shipping_cost=order.shipping_cost,
            tax_amount=order.tax_amount,
            status=order.status,
            payment_status=order.payment_status,
            payment_method=order.payment_method,
            shipping_address_id=str(order.shipping_address_id),
            billing_address_id=str(order.billing_address_id) if order.billing_address_id else None,
            notes=order.notes,
        )


class CartItemResponse(BaseModel):
    cart_item_id: str
    product_id: str
    quantity: int

    @classmethod
    def from_entity(cls, item: CartItem) -> "CartItemResponse":
        return cls(cart_item_id=str(item.id), product_id=str(item.product_id), quantity=item.quantity)
