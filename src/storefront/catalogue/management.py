"""Catalogue management: categories, products and restocking."""

import structlog
from protean.exceptions import ValidationError

from storefront.catalogue.category import Category
from storefront.catalogue.product import Product
from storefront.persistence import get_store
from storefront.persistence.unit_of_work import DataStore
from storefront.shared.result import DataResult, ErrorKind, Result

logger = structlog.get_logger(__name__)

_PRODUCT_DETAIL_FIELDS = ("name", "description", "price", "discount_price", "image_url", "sku", "category_id")


class CatalogueManager:
    def __init__(self, store: DataStore | None = None) -> None:
        self._store = store or get_store()

    ###########################
    # Categories
    ###########################
    def add_category(self, name: str, description: str | None = None) -> DataResult[Category]:
        try:
            category = Category(name=name, description=description)
        except ValidationError as exc:
            return DataResult.fail_from(Result.from_validation_error(exc))

        with self._store.begin() as uow:
            uow.categories.add(category)
            result = uow.commit()

        if result.failed:
            return DataResult.fail_from(result)
        return DataResult.ok(category, "Category added")

    def update_category(self, category_id, name: str | None = None, description: str | None = None) -> DataResult[Category]:
        with self._store.begin() as uow:
            category = uow.categories.get_by_id(category_id)
            if category is None:
                return DataResult.fail(ErrorKind.NOT_FOUND, f"Category '{category_id}' not found")

            try:
                category.update_details(name=name, description=description)
            except ValidationError as exc:
                return DataResult.fail_from(Result.from_validation_error(exc))

            uow.categories.update(category)
            result = uow.commit()

        if result.failed:
            return DataResult.fail_from(result)
        return DataResult.ok(category, "Category updated")

    def get_category(self, category_id) -> DataResult[Category]:
        with self._store.begin() as uow:
            category = uow.categories.get_by_id(category_id)

        if category is None:
            return DataResult.fail(ErrorKind.NOT_FOUND, f"Category '{category_id}' not found")
        return DataResult.ok(category)

    def list_categories(self) -> DataResult[list[Category]]:
        with self._store.begin() as uow:
            return DataResult.ok(uow.categories.get_all())

    def delete_category(self, category_id) -> Result:
        with self._store.begin() as uow:
            if not uow.categories.soft_delete(category_id):
                return Result.fail(ErrorKind.NOT_FOUND, f"Category '{category_id}' not found")
            return uow.commit()

    ###########################
    # Products
    ###########################
    def add_product(
        self,
        name: str,
        price: float,
        category_id,
        description: str | None = None,
        discount_price: float | None = None,
        image_url: str | None = None,
        sku: str | None = None,
        stock_quantity: int = 0,
    ) -> DataResult[Product]:
        if not category_id:
            return DataResult.fail(ErrorKind.VALIDATION_FAILURE, "category_id: A category must be selected")

        try:
            product = Product(
                name=name,
                price=price,
                category_id=category_id,
                description=description,
                discount_price=discount_price,
                image_url=image_url,
                sku=sku,
                stock_quantity=stock_quantity,
            )
        except ValidationError as exc:
            return DataResult.fail_from(Result.from_validation_error(exc))

        with self._store.begin() as uow:
            if not uow.categories.exists(category_id):
                return DataResult.fail(ErrorKind.NOT_FOUND, f"Category '{category_id}' not found")

            uow.products.add(product)
            result = uow.commit()

        if result.failed:
            return DataResult.fail_from(result)

        logger.info("Product added", product_id=str(product.id), name=product.name)
        return DataResult.ok(product, "Product added")

    def update_product(self, product_id, **details) -> DataResult[Product]:
        unknown = set(details) - set(_PRODUCT_DETAIL_FIELDS)
        if unknown:
            return DataResult.fail(
                ErrorKind.VALIDATION_FAILURE,
                f"Cannot update product fields: {', '.join(sorted(unknown))}",
            )

        with self._store.begin() as uow:
            product = uow.products.get_by_id(product_id)
            if product is None:
                return DataResult.fail(ErrorKind.NOT_FOUND, f"Product '{product_id}' not found")

            if "category_id" in details and not uow.categories.exists(details["category_id"]):
                return DataResult.fail(ErrorKind.NOT_FOUND, f"Category '{details['category_id']}' not found")

            try:
                product.update_details(**details)
            except ValidationError as exc:
                return DataResult.fail_from(Result.from_validation_error(exc))

            uow.products.update(product)
            result = uow.commit()

        if result.failed:
            return DataResult.fail_from(result)
        return DataResult.ok(product, "Product updated")

    def get_product(self, product_id) -> DataResult[Product]:
        with self._store.begin() as uow:
            product = uow.products.get_by_id(product_id)

        if product is None:
            return DataResult.fail(ErrorKind.NOT_FOUND, f"Product '{product_id}' not found")
        return DataResult.ok(product)

    def list_products(self) -> DataResult[list[Product]]:
        with self._store.begin() as uow:
            return DataResult.ok(uow.products.get_all())

    def list_products_by_category(self, category_id) -> DataResult[list[Product]]:
        with self._store.begin() as uow:
            return DataResult.ok(uow.products.get_all(category_id=category_id))

    def delete_product(self, product_id) -> Result:
        with self._store.begin() as uow:
            if not uow.products.soft_delete(product_id):
                return Result.fail(ErrorKind.NOT_FOUND, f"Product '{product_id}' not found")
            return uow.commit()

    def restock_product(self, product_id, quantity: int) -> Result:
        with self._store.begin() as uow:
            if uow.products.get_by_id(product_id) is None:
                return Result.fail(ErrorKind.NOT_FOUND, f"Product '{product_id}' not found")

            try:
                uow.products.increment_stock(product_id, quantity)
            except ValidationError as exc:
                return Result.from_validation_error(exc)

            result = uow.commit()

        if result.success:
            logger.info("Product restocked", product_id=str(product_id), quantity=quantity)
        return result
