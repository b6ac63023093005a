"""Product aggregate.

`stock_quantity` is never assigned by workflow code. It only moves through
the guarded deltas of `ProductRepository.decrement_stock` and
`ProductRepository.increment_stock`, which are applied when the unit of work
commits.
"""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.aggregate
class Product:
    name = String(required=True, max_length=200)
    description = Text()
    price = Float(required=True, min_value=0.0)
    discount_price = Float(min_value=0.0)
    image_url = String(max_length=500)
    sku = String(max_length=50)
    stock_quantity = Integer(default=0, min_value=0)
    category_id = Identifier()
    created_date = DateTime(default=lambda: datetime.now(UTC))
    updated_date = DateTime()
    is_active = Boolean(default=True)
    is_deleted = Boolean(default=False)
    deleted_date = DateTime()
    row_version = Integer(default=0)

    @property
    def is_available(self) -> bool:
        return self.is_active and not self.is_deleted

    def has_stock_for(self, quantity: int) -> bool:
        return self.stock_quantity >= quantity

    def update_details(self, **details):
        for field_name in ("name", "description", "price", "discount_price", "image_url", "sku", "category_id"):
            if field_name in details:
                setattr(self, field_name, details[field_name])
