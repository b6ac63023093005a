"""Cart line repository. A user holds at most one active line per product."""

from storefront.cart.cart_item import CartItem
from storefront.persistence.repository import SoftDeleteRepository


class CartItemRepository(SoftDeleteRepository[CartItem]):
    entity_cls = CartItem
    unique_fields = (("user_id", "product_id"),)

    def find_line(self, user_id: str, product_id) -> CartItem | None:
        return self.find_one(user_id=user_id, product_id=product_id)
