"""Integration tests for the order endpoints via TestClient."""

import pytest
from storefront.catalogue.product import Product
from storefront.order.order import Order, OrderStatus, PaymentStatus
from storefront.persistence.errors import StorageFault
from storefront.persistence.unit_of_work import DataStore

USER_ID = "user-001"


@pytest.fixture()
def product(make_product):
    return make_product(name="Product A", price=12.5, stock=4)


def _checkout(client, address, payment_method="CreditCard", **extra):
    return client.post(
        "/orders",
        json={
            "user_id": USER_ID,
            "shipping_address_id": str(address.id),
            "payment_method": payment_method,
            **extra,
        },
    )


def _placed_order(client, fill_cart, product, address, quantity=2):
    fill_cart((product, quantity))
    response = _checkout(client, address)
    assert response.status_code == 201, response.text
    return response.json()


class TestPlaceOrderEndpoint:
    def test_place_order(self, client, fill_cart, product, shipping_address, reload):
        fill_cart((product, 2))

        response = _checkout(client, shipping_address, shipping_cost=5.0, tax_amount=1.0)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == OrderStatus.PENDING.value
        assert body["payment_status"] == PaymentStatus.UNPAID.value
        assert body["total_amount"] == 31.0
        assert body["order_number"].startswith("ORD-")
        assert reload(Product, product.id).stock_quantity == 2

    def test_empty_cart_is_a_conflict(self, client, shipping_address):
        response = _checkout(client, shipping_address)

        assert response.status_code == 409
        assert response.json()["detail"]["kind"] == "EmptyCart"

    def test_insufficient_stock(self, client, fill_cart, product, shipping_address):
        fill_cart((product, 5))

        response = _checkout(client, shipping_address)

        assert response.status_code == 409
        assert response.json()["detail"]["kind"] == "InsufficientStock"

    def test_unknown_address(self, client, fill_cart, product):
        fill_cart((product, 1))

        response = client.post(
            "/orders",
            json={
                "user_id": USER_ID,
                "shipping_address_id": "00000000-0000-4000-8000-000000000000",
                "payment_method": "CreditCard",
            },
        )

        assert response.status_code == 404

    def test_unknown_payment_method(self, client, fill_cart, product, shipping_address):
        fill_cart((product, 1))

        response = _checkout(client, shipping_address, payment_method="Barter")

        assert response.status_code == 422
        assert response.json()["detail"]["kind"] == "ValidationFailure"

    def test_malformed_body(self, client):
        response = client.post("/orders", json={"user_id": USER_ID, "shipping_cost": -1})
        assert response.status_code == 422


class TestOrderReadEndpoints:
    def test_get_order(self, client, fill_cart, product, shipping_address):
        placed = _placed_order(client, fill_cart, product, shipping_address)

        response = client.get(f"/orders/{placed['order_id']}")

        assert response.status_code == 200
        assert response.json()["order_number"] == placed["order_number"]

    def test_get_missing_order(self, client):
        response = client.get("/orders/missing")

        assert response.status_code == 404
        assert response.json()["detail"]["kind"] == "NotFound"

    def test_get_order_details(self, client, fill_cart, product, shipping_address):
        placed = _placed_order(client, fill_cart, product, shipping_address, quantity=3)

        response = client.get(f"/orders/{placed['order_id']}/details")

        assert response.status_code == 200
        [detail] = response.json()
        assert detail["product_name"] == "Product A"
        assert detail["quantity"] == 3
        assert detail["sub_total"] == 37.5

    def test_list_orders_for_user(self, client, fill_cart, product, shipping_address):
        placed = _placed_order(client, fill_cart, product, shipping_address, quantity=1)

        response = client.get(f"/users/{USER_ID}/orders")

        assert response.status_code == 200
        assert [order["order_id"] for order in response.json()] == [placed["order_id"]]


class TestOrderStatusEndpoints:
    def test_advance_status(self, client, fill_cart, product, shipping_address, reload):
        placed = _placed_order(client, fill_cart, product, shipping_address)

        response = client.put(f"/orders/{placed['order_id']}/status", json={"status": "Processing"})

        assert response.status_code == 200
        assert reload(Order, placed["order_id"]).status == OrderStatus.PROCESSING.value

    def test_invalid_transition(self, client, fill_cart, product, shipping_address):
        placed = _placed_order(client, fill_cart, product, shipping_address)

        response = client.put(f"/orders/{placed['order_id']}/status", json={"status": "Delivered"})

        assert response.status_code == 409
        assert response.json()["detail"]["kind"] == "InvalidStatusTransition"

    def test_cancel_restocks(self, client, fill_cart, product, shipping_address, reload):
        placed = _placed_order(client, fill_cart, product, shipping_address)

        response = client.put(f"/orders/{placed['order_id']}/cancel")

        assert response.status_code == 200
        assert reload(Product, product.id).stock_quantity == 4

    def test_payment_status(self, client, fill_cart, product, shipping_address, reload):
        placed = _placed_order(client, fill_cart, product, shipping_address)

        response = client.put(f"/orders/{placed['order_id']}/payment-status", json={"payment_status": "Paid"})

        assert response.status_code == 200
        assert reload(Order, placed["order_id"]).payment_status == PaymentStatus.PAID.value


class TestPaymentEndpoints:
    def test_capture_and_refund(self, client, gateway, fill_cart, product, shipping_address, reload):
        placed = _placed_order(client, fill_cart, product, shipping_address)

        assert client.post(f"/orders/{placed['order_id']}/payment/capture").status_code == 200
        response = client.post(f"/orders/{placed['order_id']}/payment/refund", json={"amount": 5.0})

        assert response.status_code == 200
        assert reload(Order, placed["order_id"]).payment_status == PaymentStatus.PARTIALLY_REFUNDED.value

    def test_declined_capture(self, client, gateway, fill_cart, product, shipping_address):
        placed = _placed_order(client, fill_cart, product, shipping_address)
        gateway.configure(should_succeed=False)

        response = client.post(f"/orders/{placed['order_id']}/payment/capture")

        assert response.status_code == 409
        assert response.json()["detail"]["kind"] == "PaymentDeclined"


class TestDeleteOrderEndpoint:
    def test_delete(self, client, fill_cart, product, shipping_address):
        placed = _placed_order(client, fill_cart, product, shipping_address)

        assert client.delete(f"/orders/{placed['order_id']}").status_code == 200
        assert client.get(f"/orders/{placed['order_id']}").status_code == 404


class TestStorageFaults:
    def test_storage_fault_is_a_server_error(self, client, monkeypatch):
        def _unavailable(self, entity_cls, identifier):
            raise StorageFault("connection refused")

        monkeypatch.setattr(DataStore, "fetch", _unavailable)

        response = client.get("/orders/any-order")

        assert response.status_code == 500
        assert "unavailable" in response.json()["detail"]
