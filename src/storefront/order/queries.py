"""Read side of orders, plus soft deletion."""

from storefront.order.order import Order, OrderDetail
from storefront.persistence import get_store
from storefront.persistence.unit_of_work import DataStore
from storefront.shared.result import DataResult, ErrorKind, Result


class OrderQueries:
    def __init__(self, store: DataStore | None = None) -> None:
        self._store = store or get_store()

    def get_order(self, order_id) -> DataResult[Order]:
        with self._store.begin() as uow:
            order = uow.orders.get_by_id(order_id)

        if order is None:
            return DataResult.fail(ErrorKind.NOT_FOUND, f"Order '{order_id}' not found")
        return DataResult.ok(order)

    def list_orders_for_user(self, user_id: str) -> DataResult[list[Order]]:
        """The user's orders, newest first."""
        with self._store.begin() as uow:
            orders = uow.orders.get_all(user_id=user_id)

        orders.sort(key=lambda order: order.order_date, reverse=True)
        return DataResult.ok(orders)

    def get_order_details(self, order_id) -> DataResult[list[OrderDetail]]:
        with self._store.begin() as uow:
            if uow.orders.get_by_id(order_id) is None:
                return DataResult.fail(ErrorKind.NOT_FOUND, f"Order '{order_id}' not found")
            return DataResult.ok(uow.order_details.get_all(order_id=str(order_id)))

    def delete_order(self, order_id) -> Result:
        """Soft-delete an order together with its details."""
        with self._store.begin() as uow:
            if not uow.orders.soft_delete(order_id):
                return Result.fail(ErrorKind.NOT_FOUND, f"Order '{order_id}' not found")
            return uow.commit()
