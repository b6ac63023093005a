import pytest


@pytest.fixture(scope="session")
def _storefront_domain():
    """Initialize the storefront domain once per session."""
    from storefront.domain import storefront

    storefront.init()
    return storefront


@pytest.fixture(scope="session", autouse=True)
def setup_db(_storefront_domain):
    from storefront.utils.db import drop_db, setup_db

    setup_db(_storefront_domain)

    yield

    drop_db(_storefront_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_storefront_domain):
    """Push domain context before each test, cleanup after."""
    from storefront.payment.gateway import reset_gateway
    from storefront.persistence import reset_store

    ctx = _storefront_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()

    reset_store()
    reset_gateway()


@pytest.fixture()
def store():
    from storefront.persistence import get_store

    return get_store()


@pytest.fixture()
def gateway():
    from storefront.payment.gateway import set_gateway
    from storefront.payment.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)
    return fake


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------
USER_ID = "user-001"


@pytest.fixture()
def category():
    from storefront.catalogue.management import CatalogueManager

    result = CatalogueManager().add_category(name="Shirts", description="Cotton shirts")
    assert result.success, result.message
    return result.data


@pytest.fixture()
def make_product(category):
    from storefront.catalogue.management import CatalogueManager

    def _make(name="Widget", price=10.0, stock=10, **details):
        result = CatalogueManager().add_product(
            name=name,
            price=price,
            category_id=category.id,
            stock_quantity=stock,
            **details,
        )
        assert result.success, result.message
        return result.data

    return _make


@pytest.fixture()
def make_address():
    from storefront.customer.management import AddressManager

    def _make(user_id=USER_ID, title="Home", **fields):
        fields.setdefault("address_line1", "Bagdat Cd. 12")
        fields.setdefault("city", "Istanbul")
        fields.setdefault("district", "Kadikoy")
        result = AddressManager().add_address(user_id=user_id, title=title, **fields)
        assert result.success, result.message
        return result.data

    return _make


@pytest.fixture()
def shipping_address(make_address):
    return make_address(address_type="Shipping")


@pytest.fixture()
def fill_cart():
    from storefront.cart.management import CartManager

    def _fill(*lines, user_id=USER_ID):
        for product, quantity in lines:
            result = CartManager().add_to_cart(user_id, product.id, quantity)
            assert result.success, result.message

    return _fill


@pytest.fixture()
def place_order(shipping_address):
    from storefront.order.placement import OrderPlacement

    def _place(user_id=USER_ID, address=None, payment_method="CreditCard", **kwargs):
        address = address or shipping_address
        return OrderPlacement().place_order(
            user_id=user_id,
            shipping_address_id=address.id,
            payment_method=payment_method,
            **kwargs,
        )

    return _place


@pytest.fixture()
def reload():
    """Read an entity straight from storage, bypassing any unit of work."""
    from storefront.persistence import get_store

    def _reload(entity_cls, identifier):
        return get_store().fetch(entity_cls, identifier)

    return _reload
