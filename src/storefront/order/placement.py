"""Order placement: turns a user's cart into an Order.

Everything a checkout writes is staged in one unit of work: the Order, one
OrderDetail per cart line, a guarded stock decrement per line and the
soft delete of the consumed cart items. Nothing is durable until the commit
succeeds, and the commit re-checks stock against fresh rows so that two
concurrent checkouts cannot both take the last unit of a product.
"""

import structlog
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text

from storefront.domain import storefront
from storefront.order.numbering import generate_order_number
from storefront.order.order import Order, OrderDetail, OrderStatus, PaymentMethod, PaymentStatus
from storefront.persistence import get_store
from storefront.persistence.unit_of_work import DataStore, UnitOfWork
from storefront.shared.money import line_total, sum_money, to_money
from storefront.shared.result import DataResult, ErrorKind, Result

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = String(required=True, max_length=450)
    shipping_address_id = Identifier(required=True)
    billing_address_id = Identifier()
    payment_method = String(required=True, choices=PaymentMethod)
    shipping_cost = Float(default=0.0, min_value=0.0)
    tax_amount = Float(default=0.0, min_value=0.0)
    notes = Text()


class OrderPlacement:
    def __init__(self, store: DataStore | None = None) -> None:
        self._store = store or get_store()

    def place_order(
        self,
        user_id: str,
        shipping_address_id,
        payment_method,
        shipping_cost: float = 0.0,
        tax_amount: float = 0.0,
        billing_address_id=None,
        notes: str | None = None,
    ) -> DataResult[Order]:
        try:
            command = PlaceOrder(
                user_id=user_id,
                shipping_address_id=shipping_address_id,
                billing_address_id=billing_address_id,
                payment_method=payment_method.value if isinstance(payment_method, PaymentMethod) else payment_method,
                shipping_cost=shipping_cost,
                tax_amount=tax_amount,
                notes=notes,
            )
        except ValidationError as exc:
            return DataResult.fail_from(Result.from_validation_error(exc))

        with self._store.begin() as uow:
            result = self._stage_order(uow, command)
            if result.failed:
                return result

            order = result.data
            committed = uow.commit()

        if committed.failed:
            logger.warning(
                "Order placement rejected at commit",
                user_id=command.user_id,
                order_number=order.order_number,
                reason=committed.message,
            )
            return DataResult.fail_from(committed)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=order.user_id,
            total_amount=order.total_amount,
        )
        return DataResult.ok(order, f"Order {order.order_number} placed")

    def _stage_order(self, uow: UnitOfWork, command: PlaceOrder) -> DataResult[Order]:
        cart_items = uow.cart_items.get_all(user_id=command.user_id)
        if not cart_items:
            return DataResult.fail(ErrorKind.EMPTY_CART, f"The cart of user '{command.user_id}' is empty")

        address_check = self._check_addresses(uow, command)
        if address_check.failed:
            return DataResult.fail_from(address_check)

        # Validate every line before anything is staged
        lines = []
        for item in cart_items:
            product = uow.products.get_by_id(item.product_id)
            if product is None:
                return DataResult.fail(ErrorKind.PRODUCT_UNAVAILABLE, f"Product '{item.product_id}' is no longer available")
            if not product.is_available:
                return DataResult.fail(ErrorKind.PRODUCT_UNAVAILABLE, f"Product '{product.name}' is no longer available")
            if not product.has_stock_for(item.quantity):
                return DataResult.fail(
                    ErrorKind.INSUFFICIENT_STOCK,
                    f"Insufficient stock for product '{product.name}': "
                    f"{product.stock_quantity} available, {item.quantity} requested",
                )
            lines.append((item, product, line_total(product.price, item.quantity)))

        shipping_cost = to_money(command.shipping_cost or 0.0)
        tax_amount = to_money(command.tax_amount or 0.0)
        total_amount = sum_money(*(sub_total for _, _, sub_total in lines), shipping_cost, tax_amount)

        try:
            order = Order(
                order_number=generate_order_number(),
                user_id=command.user_id,
                total_amount=total_amount,
                shipping_cost=shipping_cost,
                tax_amount=tax_amount,
                status=OrderStatus.PENDING.value,
                payment_status=PaymentStatus.UNPAID.value,
                payment_method=command.payment_method,
                shipping_address_id=command.shipping_address_id,
                billing_address_id=command.billing_address_id,
                notes=command.notes,
            )
            details = [
                OrderDetail(
                    order_id=order.id,
                    product_id=product.id,
                    product_name=product.name,
                    quantity=item.quantity,
                    unit_price=to_money(product.price),
                    sub_total=sub_total,
                )
                for item, product, sub_total in lines
            ]
        except ValidationError as exc:
            return DataResult.fail_from(Result.from_validation_error(exc))

        uow.orders.add(order)
        uow.order_details.add_range(details)
        for item, product, _ in lines:
            uow.products.decrement_stock(product.id, item.quantity)
        uow.cart_items.soft_delete_range([item.id for item in cart_items])

        return DataResult.ok(order)

    def _check_addresses(self, uow: UnitOfWork, command: PlaceOrder) -> Result:
        for label, address_id in (("Shipping", command.shipping_address_id), ("Billing", command.billing_address_id)):
            if address_id is None:
                continue

            address = uow.addresses.get_by_id(address_id)
            if address is None:
                return Result.fail(ErrorKind.NOT_FOUND, f"{label} address '{address_id}' not found")
            if not address.belongs_to(command.user_id):
                return Result.fail(
                    ErrorKind.ADDRESS_MISMATCH,
                    f"{label} address '{address_id}' does not belong to user '{command.user_id}'",
                )

        return Result.ok()
