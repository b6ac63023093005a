import pytest
from storefront.catalogue.management import CatalogueManager
from storefront.catalogue.product import Product
from storefront.shared.result import ErrorKind


class TestCategories:
    def test_add_and_get(self):
        manager = CatalogueManager()
        category = manager.add_category(name="Shoes", description="Running shoes").data

        fetched = manager.get_category(category.id).data

        assert fetched.name == "Shoes"
        assert fetched.created_date is not None
        assert fetched.row_version == 1

    def test_name_is_required(self):
        result = CatalogueManager().add_category(name="")
        assert result.kind is ErrorKind.VALIDATION_FAILURE
        assert "name" in result.message

    def test_name_length_is_limited(self):
        result = CatalogueManager().add_category(name="x" * 101)
        assert result.kind is ErrorKind.VALIDATION_FAILURE

    def test_update(self, category):
        manager = CatalogueManager()

        result = manager.update_category(category.id, name="Tees")

        assert result.success
        fetched = manager.get_category(category.id).data
        assert fetched.name == "Tees"
        assert fetched.description == "Cotton shirts"
        assert fetched.updated_date is not None

    def test_update_missing(self):
        assert CatalogueManager().update_category("missing", name="Tees").kind is ErrorKind.NOT_FOUND

    def test_delete_hides_category(self, category):
        manager = CatalogueManager()

        assert manager.delete_category(category.id).success
        assert manager.get_category(category.id).kind is ErrorKind.NOT_FOUND
        assert manager.list_categories().data == []
        assert manager.delete_category(category.id).kind is ErrorKind.NOT_FOUND


class TestProducts:
    def test_add_product(self, category):
        result = CatalogueManager().add_product(
            name="Oxford Shirt",
            price=39.9,
            category_id=category.id,
            sku="OX-1",
            stock_quantity=12,
        )

        assert result.success
        assert result.data.stock_quantity == 12
        assert result.data.is_available

    def test_category_is_required(self):
        result = CatalogueManager().add_product(name="Oxford Shirt", price=39.9, category_id=None)
        assert result.kind is ErrorKind.VALIDATION_FAILURE

    def test_category_must_exist(self):
        result = CatalogueManager().add_product(name="Oxford Shirt", price=39.9, category_id="missing")
        assert result.kind is ErrorKind.NOT_FOUND

    @pytest.mark.parametrize(
        "overrides",
        [{"name": ""}, {"price": -1.0}, {"stock_quantity": -3}, {"name": "x" * 201}],
    )
    def test_invalid_product(self, category, overrides):
        fields = {"name": "Oxford Shirt", "price": 39.9, "category_id": category.id, **overrides}
        assert CatalogueManager().add_product(**fields).kind is ErrorKind.VALIDATION_FAILURE

    def test_update_details(self, make_product):
        product = make_product(price=10.0)
        manager = CatalogueManager()

        result = manager.update_product(product.id, price=12.5, description="Now in blue")

        assert result.success
        fetched = manager.get_product(product.id).data
        assert fetched.price == 12.5
        assert fetched.description == "Now in blue"

    def test_stock_cannot_be_set_directly(self, make_product):
        product = make_product(stock=3)
        result = CatalogueManager().update_product(product.id, stock_quantity=100)
        assert result.kind is ErrorKind.VALIDATION_FAILURE

    def test_moving_to_unknown_category(self, make_product):
        product = make_product()
        result = CatalogueManager().update_product(product.id, category_id="missing")
        assert result.kind is ErrorKind.NOT_FOUND

    def test_list_by_category(self, make_product):
        manager = CatalogueManager()
        make_product(name="A")
        make_product(name="B")
        other = manager.add_category(name="Hats").data
        manager.add_product(name="Cap", price=5.0, category_id=other.id)

        names = {product.name for product in manager.list_products_by_category(other.id).data}

        assert names == {"Cap"}
        assert len(manager.list_products().data) == 3

    def test_delete_hides_product(self, make_product):
        product = make_product()
        manager = CatalogueManager()

        assert manager.delete_product(product.id).success
        assert manager.get_product(product.id).kind is ErrorKind.NOT_FOUND
        assert manager.list_products().data == []


class TestRestock:
    def test_restock_adds_to_stock(self, make_product, reload):
        product = make_product(stock=2)

        assert CatalogueManager().restock_product(product.id, 5).success
        assert reload(Product, product.id).stock_quantity == 7

    @pytest.mark.parametrize("quantity", [0, -4])
    def test_quantity_must_be_positive(self, make_product, reload, quantity):
        product = make_product(stock=2)

        assert CatalogueManager().restock_product(product.id, quantity).kind is ErrorKind.VALIDATION_FAILURE
        assert reload(Product, product.id).stock_quantity == 2

    def test_restock_missing_product(self):
        assert CatalogueManager().restock_product("missing", 5).kind is ErrorKind.NOT_FOUND
