"""FastAPI routes for the Storefront: checkout, orders and carts.

Routes are thin: they call the application services and translate a failed
result into an HTTP error whose status follows the failure's category.
"""

import structlog
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from storefront.api.schemas import (
    AddToCartRequest,
    CartItemResponse,
    OrderDetailResponse,
    OrderResponse,
    PlaceOrderRequest,
    RefundPaymentRequest,
    StatusResponse,
    UpdateCartQuantityRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
)
from storefront.cart.management import CartManager
from storefront.order.lifecycle import OrderLifecycle
from storefront.order.placement import OrderPlacement
from storefront.order.queries import OrderQueries
from storefront.persistence.errors import StorageFault
from storefront.shared.result import ErrorCategory, Result

logger = structlog.get_logger(__name__)

_HTTP_STATUS_BY_CATEGORY = {
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.VALIDATION_FAILURE: 422,
    ErrorCategory.BUSINESS_RULE_VIOLATION: 409,
    ErrorCategory.CONCURRENCY_CONFLICT: 409,
}


def _raise_for_failure(result: Result) -> None:
    if result.success:
        return
    raise HTTPException(
        status_code=_HTTP_STATUS_BY_CATEGORY[result.kind.category],
        detail={"kind": result.kind.value, "message": result.message},
    )


async def storage_fault_handler(request: Request, exc: StorageFault) -> JSONResponse:
    logger.error("Storage fault", path=request.url.path, error=str(exc), exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "The store is unavailable, please retry later"})


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest) -> OrderResponse:
    result = OrderPlacement().place_order(**body.model_dump())
    _raise_for_failure(result)
    return OrderResponse.from_entity(result.data)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    result = OrderQueries().get_order(order_id)
    _raise_for_failure(result)
    return OrderResponse.from_entity(result.data)


@order_router.get("/{order_id}/details", response_model=list[OrderDetailResponse])
async def get_order_details(order_id: str) -> list[OrderDetailResponse]:
    result = OrderQueries().get_order_details(order_id)
    _raise_for_failure(result)
    return [OrderDetailResponse.from_entity(detail) for detail in result.data]


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> StatusResponse:
    result = OrderLifecycle().update_order_status(order_id, body.status)
    _raise_for_failure(result)
    return StatusResponse(message=result.message)


@order_router.put("/{order_id}/payment-status", response_model=StatusResponse)
async def update_payment_status(order_id: str, body: UpdatePaymentStatusRequest) -> StatusResponse:
    result = OrderLifecycle().update_payment_status(order_id, body.payment_status)
    _raise_for_failure(result)
    return StatusResponse(message=result.message)


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str) -> StatusResponse:
    result = OrderLifecycle().cancel_order(order_id)
    _raise_for_failure(result)
    return StatusResponse(message=result.message)


@order_router.post("/{order_id}/payment/capture", response_model=StatusResponse)
async def capture_payment(order_id: str) -> StatusResponse:
    result = OrderLifecycle().capture_payment(order_id)
    _raise_for_failure(result)
    return StatusResponse(message=result.message)


@order_router.post("/{order_id}/payment/refund", response_model=StatusResponse)
async def refund_payment(order_id: str, body: RefundPaymentRequest) -> StatusResponse:
    result = OrderLifecycle().refund_payment(order_id, body.amount)
    _raise_for_failure(result)
    return StatusResponse(message=result.message)


@order_router.delete("/{order_id}", response_model=StatusResponse)
async def delete_order(order_id: str) -> StatusResponse:
    result = OrderQueries().delete_order(order_id)
    _raise_for_failure(result)
    return StatusResponse(message=result.message)


# ---------------------------------------------------------------------------
# User Router
# ---------------------------------------------------------------------------
user_router = APIRouter(prefix="/users", tags=["users"])


@user_router.get("/{user_id}/orders", response_model=list[OrderResponse])
async def list_orders_for_user(user_id: str) -> list[OrderResponse]:
    result = OrderQueries().list_orders_for_user(user_id)
    _raise_for_failure(result)
    return [OrderResponse.from_entity(order) for order in result.data]


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/{user_id}", response_model=list[CartItemResponse])
async def get_cart(user_id: str) -> list[CartItemResponse]:
    result = CartManager().get_cart(user_id)
    _raise_for_failure(result)
    return [CartItemResponse.from_entity(item) for item in result.data]


@cart_router.post("/{user_id}/items", status_code=201, response_model=CartItemResponse)
async def add_cart_item(user_id: str, body: AddToCartRequest) -> CartItemResponse:
    result = CartManager().add_to_cart(user_id, body.product_id, body.quantity)
    _raise_for_failure(result)
    return CartItemResponse.from_entity(result.data)


@cart_router.put("/items/{cart_item_id}", response_model=StatusResponse)
async def update_cart_item_quantity(cart_item_id: str, body: UpdateCartQuantityRequest) -> StatusResponse:
    result = CartManager().update_quantity(cart_item_id, body.quantity)
    _raise_for_failure(result)
    return StatusResponse(message=result.message)


@cart_router.delete("/items/{cart_item_id}", response_model=StatusResponse)
async def remove_cart_item(cart_item_id: str) -> StatusResponse:
    result = CartManager().remove_item(cart_item_id)
    _raise_for_failure(result)
    return StatusResponse(message=result.message)


@cart_router.delete("/{user_id}", response_model=StatusResponse)
async def clear_cart(user_id: str) -> StatusResponse:
    result = CartManager().clear_cart(user_id)
    _raise_for_failure(result)
    return StatusResponse(message=result.message)
