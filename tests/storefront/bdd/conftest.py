"""Shared BDD fixtures and step definitions for checkout and orders."""

import pytest
from pytest_bdd import given, parsers, then, when
from storefront.cart.management import CartManager
from storefront.catalogue.product import Product
from storefront.order.order import Order

USER_ID = "user-001"


@pytest.fixture()
def products():
    """Products created by the scenario, keyed by name."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price:g} with {stock:d} in stock'))
def _(products, make_product, name, price, stock):
    products[name] = make_product(name=name, price=price, stock=stock)


@given("the customer has a shipping address", target_fixture="address")
def _(shipping_address):
    return shipping_address


@given(parsers.cfparse('the customer has {quantity:d} of "{name}" in the cart'))
def _(products, fill_cart, name, quantity):
    fill_cart((products[name], quantity))


@given("the customer has placed an order", target_fixture="order")
def _(place_order, address):
    result = place_order(address=address)
    assert result.success, result.message
    return result.data


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the customer checks out", target_fixture="result")
def _(place_order, address):
    return place_order(address=address)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the request fails with "{kind}"'))
def _(result, kind):
    assert result.failed
    assert result.kind.value == kind


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(products, reload, name, stock):
    assert reload(Product, products[name].id).stock_quantity == stock


@then("the cart is empty")
def _():
    assert CartManager().get_cart(USER_ID).data == []


@then(parsers.cfparse('the cart still holds {count:d} items'))
def _(count):
    assert len(CartManager().get_cart(USER_ID).data) == count


@then(parsers.cfparse('the order is "{status}"'))
def _(order, reload, status):
    assert reload(Order, order.id).status == status
