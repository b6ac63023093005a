"""Shopping cart operations.

A user's cart is the set of their active `CartItem` rows. Checkout consumes
the cart by soft-deleting those rows in the same unit of work that places
the order.
"""

import structlog
from protean.exceptions import ValidationError

from storefront.cart.cart_item import CartItem
from storefront.persistence import get_store
from storefront.persistence.unit_of_work import DataStore
from storefront.shared.result import DataResult, ErrorKind, Result

logger = structlog.get_logger(__name__)


class CartManager:
    def __init__(self, store: DataStore | None = None) -> None:
        self._store = store or get_store()

    def get_cart(self, user_id: str) -> DataResult[list[CartItem]]:
        with self._store.begin() as uow:
            return DataResult.ok(uow.cart_items.get_all(user_id=user_id))

    def add_to_cart(self, user_id: str, product_id, quantity: int = 1) -> DataResult[CartItem]:
        """Add a product to the cart, merging with an existing line for the same product."""
        with self._store.begin() as uow:
            product = uow.products.get_by_id(product_id)
            if product is None:
                return DataResult.fail(ErrorKind.NOT_FOUND, f"Product '{product_id}' not found")
            if not product.is_available:
                return DataResult.fail(ErrorKind.PRODUCT_UNAVAILABLE, f"Product '{product.name}' is not available")

            existing = uow.cart_items.find_line(user_id, product_id)
            try:
                if existing is not None:
                    existing.add_quantity(quantity)
                    item = uow.cart_items.update(existing)
                else:
                    item = uow.cart_items.add(CartItem(user_id=user_id, product_id=product_id, quantity=quantity))
            except ValidationError as exc:
                return DataResult.fail_from(Result.from_validation_error(exc))

            result = uow.commit()

        if result.failed:
            return DataResult.fail_from(result)

        logger.debug("Cart item added", user_id=user_id, product_id=str(product_id), quantity=item.quantity)
        return DataResult.ok(item, "Added to cart")

    def update_quantity(self, cart_item_id, quantity: int) -> Result:
        """Set a line's quantity. A quantity of zero or less removes the line."""
        with self._store.begin() as uow:
            item = uow.cart_items.get_by_id(cart_item_id)
            if item is None:
                return Result.fail(ErrorKind.NOT_FOUND, f"Cart item '{cart_item_id}' not found")

            if quantity <= 0:
                uow.cart_items.soft_delete(cart_item_id)
            else:
                item.quantity = quantity
                uow.cart_items.update(item)

            return uow.commit()

    def remove_item(self, cart_item_id) -> Result:
        with self._store.begin() as uow:
            if not uow.cart_items.soft_delete(cart_item_id):
                return Result.fail(ErrorKind.NOT_FOUND, f"Cart item '{cart_item_id}' not found")
            return uow.commit()

    def clear_cart(self, user_id: str) -> Result:
        with self._store.begin() as uow:
            items = uow.cart_items.get_all(user_id=user_id)
            uow.cart_items.soft_delete_range([item.id for item in items])
            return uow.commit()
