"""Order repository.

Orders are written once at checkout; afterwards only the status fields and
the audit fields may change. Deleting an order also deletes its details.
"""

from protean.exceptions import InvalidOperationError

from storefront.order.order import Order
from storefront.persistence.repository import SoftDeleteRepository

IMMUTABLE_ORDER_FIELDS = (
    "order_number",
    "order_date",
    "user_id",
    "total_amount",
    "shipping_cost",
    "tax_amount",
    "payment_method",
    "shipping_address_id",
    "billing_address_id",
    "notes",
)


class OrderRepository(SoftDeleteRepository[Order]):
    entity_cls = Order
    unique_fields = ("order_number",)

    def get_by_order_number(self, order_number: str) -> Order | None:
        return self.find_one(order_number=order_number)

    def soft_delete(self, identifier) -> bool:
        if not super().soft_delete(identifier):
            return False

        details = self._uow.order_details
        details.soft_delete_range([detail.id for detail in details.get_all(order_id=str(identifier))])
        return True

    def _check_mutable(self, current: Order, entity: Order) -> None:
        changed = [name for name in IMMUTABLE_ORDER_FIELDS if getattr(current, name) != getattr(entity, name)]
        if changed:
            raise InvalidOperationError(f"Order '{entity.id}' is immutable once placed; cannot change {', '.join(changed)}")
