"""Cart line aggregate. One active row per (user, product)."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.aggregate
class CartItem:
    user_id = String(required=True, max_length=450)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    created_date = DateTime(default=lambda: datetime.now(UTC))
    updated_date = DateTime()
    is_active = Boolean(default=True)
    is_deleted = Boolean(default=False)
    deleted_date = DateTime()
    row_version = Integer(default=0)

    def add_quantity(self, quantity: int) -> None:
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity to add must be at least 1"]})
        self.quantity = self.quantity + quantity
