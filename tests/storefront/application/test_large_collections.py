"""Collections larger than the storage layer's default query page."""

import pytest
from storefront.cart.cart_item import CartItem
from storefront.catalogue.product import Product
from storefront.order.lifecycle import OrderLifecycle
from storefront.order.order import OrderDetail
from storefront.order.queries import OrderQueries

USER_ID = "user-001"
LINE_COUNT = 101


@pytest.fixture()
def many_products(make_product):
    return [make_product(name=f"Item {n:03d}", price=1.0, stock=5) for n in range(LINE_COUNT)]


@pytest.mark.slow
class TestLargeCollections:
    def test_fetch_all_returns_every_row(self, store, many_products):
        assert len(store.fetch_all(Product)) == LINE_COUNT

    def test_checkout_takes_every_cart_line(self, store, reload, place_order, fill_cart, many_products):
        fill_cart(*((product, 1) for product in many_products))

        result = place_order(shipping_cost=0.0, tax_amount=0.0)

        assert result.success, result.message
        order = result.data
        assert order.total_amount == 101.0
        assert len(store.fetch_all(OrderDetail, order_id=str(order.id))) == LINE_COUNT
        assert len(OrderQueries().get_order_details(order.id).data) == LINE_COUNT
        assert [item for item in store.fetch_all(CartItem, user_id=USER_ID) if not item.is_deleted] == []
        assert {reload(Product, product.id).stock_quantity for product in many_products} == {4}

    def test_cancelling_restocks_every_detail(self, reload, place_order, fill_cart, many_products):
        fill_cart(*((product, 2) for product in many_products))
        order = place_order().data

        result = OrderLifecycle().cancel_order(order.id)

        assert result.success, result.message
        assert {reload(Product, product.id).stock_quantity for product in many_products} == {5}
