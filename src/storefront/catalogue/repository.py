"""Product repository with guarded stock movements."""

from protean.exceptions import ValidationError

from storefront.catalogue.product import Product
from storefront.persistence.repository import SoftDeleteRepository


class ProductRepository(SoftDeleteRepository[Product]):
    entity_cls = Product

    def decrement_stock(self, product_id, quantity: int) -> None:
        """Stage a stock decrement.

        The decrement is checked against the product's current stock when the
        unit of work commits; if it would drive stock below zero the whole
        commit is rejected.
        """
        self._assert_positive(quantity)
        self._uow.stage_delta(Product, product_id, "stock_quantity", -quantity)

    def increment_stock(self, product_id, quantity: int) -> None:
        self._assert_positive(quantity)
        self._uow.stage_delta(Product, product_id, "stock_quantity", quantity)

    def projected_stock(self, product: Product) -> int:
        """Stock as it would be after this unit of work's pending deltas."""
        return product.stock_quantity + self._uow.pending_delta(Product, product.id, "stock_quantity")

    @staticmethod
    def _assert_positive(quantity: int) -> None:
        if not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError({"quantity": ["Stock movements must be a positive whole number"]})
