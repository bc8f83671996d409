"""Testy routow FastAPI."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.api.deps import get_lock_service, get_notification_service
from storefront.data.database import get_db
from storefront.main import create_app
from storefront.repos.cart_repo import CartRepo
from storefront.services.lock_service import LockService
from storefront.utils import settings
from tests.conftest import ADDRESS


@pytest.fixture
def client(session_factory, fake_redis, notifier):
    app = create_app()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: LockService(client=fake_redis)
    app.dependency_overrides[get_notification_service] = lambda: notifier

    # bez lifespan: tabele tworzy fixture engine
    return TestClient(app)


def checkout_body(**overrides):
    body = {
        "shipping_address": ADDRESS,
        "shipping_service": "jne",
        "payment_method": "ovo",
    }
    body.update(overrides)
    return body


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestCartRoutes:
    def test_add_and_snapshot(self, client, make_product):
        pid = make_product(name="Kopi", price="30000", stock=5)

        response = client.post("/cart/items", params={"user_id": 1}, json={"product_id": pid, "quantity": 2})
        assert response.status_code == 201
        assert response.json()["quantity"] == 2

        response = client.get("/cart", params={"user_id": 1})
        assert response.status_code == 200
        data = response.json()
        assert data["item_count"] == 2
        assert Decimal(data["subtotal"]) == Decimal("60000")
        assert data["items"][0]["product_name"] == "Kopi"

    def test_add_insufficient_stock(self, client, make_product):
        pid = make_product(stock=1)

        response = client.post("/cart/items", params={"user_id": 1}, json={"product_id": pid, "quantity": 3})

        assert response.status_code == 409
        data = response.json()
        assert data["error_type"] == "InsufficientStock"
        assert data["product_id"] == pid
        assert data["available"] == 1

    def test_add_unknown_product(self, client):
        response = client.post("/cart/items", params={"user_id": 1}, json={"product_id": 999, "quantity": 1})

        assert response.status_code == 404
        assert response.json()["error_type"] == "NotFound"

    def test_add_zero_quantity(self, client, make_product):
        pid = make_product()

        response = client.post("/cart/items", params={"user_id": 1}, json={"product_id": pid, "quantity": 0})

        assert response.status_code == 422

    def test_add_conflict_that_does_not_settle(self, client, make_product, monkeypatch):
        pid = make_product(stock=10)
        client.post("/cart/items", params={"user_id": 1}, json={"product_id": pid, "quantity": 1})
        monkeypatch.setattr(CartRepo, "get_user_line_for_update", lambda self, user_id, product_id: None)

        response = client.post("/cart/items", params={"user_id": 1}, json={"product_id": pid, "quantity": 1})

        assert response.status_code == 409
        data = response.json()
        assert data["error_type"] == "CartConflict"
        assert data["product_id"] == pid

    def test_update_other_users_line(self, client, make_product):
        pid = make_product()
        line_id = client.post(
            "/cart/items", params={"user_id": 1}, json={"product_id": pid, "quantity": 1}
        ).json()["id"]

        response = client.patch(f"/cart/items/{line_id}", params={"user_id": 2}, json={"quantity": 2})

        assert response.status_code == 403
        assert response.json()["error_type"] == "Forbidden"

    def test_update_and_remove(self, client, make_product):
        pid = make_product(stock=10)
        line_id = client.post(
            "/cart/items", params={"user_id": 1}, json={"product_id": pid, "quantity": 1}
        ).json()["id"]

        response = client.patch(f"/cart/items/{line_id}", params={"user_id": 1}, json={"quantity": 4})
        assert response.status_code == 200
        assert response.json()["quantity"] == 4

        assert client.delete(f"/cart/items/{line_id}", params={"user_id": 1}).status_code == 204
        assert client.delete(f"/cart/items/{line_id}", params={"user_id": 1}).status_code == 204
        assert client.get("/cart", params={"user_id": 1}).json()["items"] == []


class TestCheckoutRoutes:
    def test_preview(self, client, make_product):
        pid = make_product(stock=5)
        client.post("/cart/items", params={"user_id": 1}, json={"product_id": pid, "quantity": 1})

        response = client.get("/checkout", params={"user_id": 1})

        assert response.status_code == 200
        data = response.json()
        assert {s["code"] for s in data["shipping_services"]} == {"jne", "jnt", "sicepat", "pos"}
        assert data["payment_methods"] == ["bank_transfer", "ovo", "gopay", "dana", "credit_card"]

    def test_checkout_then_get_order(self, client, make_product, read_stock, notifier):
        shirt = make_product(name="Kemeja", price="50000", stock=10)
        coffee = make_product(name="Kopi", price="30000", stock=5)
        client.post("/cart/items", params={"user_id": 1}, json={"product_id": shirt, "quantity": 2})
        client.post("/cart/items", params={"user_id": 1}, json={"product_id": coffee, "quantity": 1})

        response = client.post("/checkout", params={"user_id": 1}, json=checkout_body())

        assert response.status_code == 201
        summary = response.json()
        assert Decimal(summary["total"]) == Decimal("145000")
        assert summary["status"] == "pending"
        assert read_stock(shirt) == 8
        assert read_stock(coffee) == 4
        assert len(notifier.sent) == 1

        response = client.get(f"/orders/{summary['order_id']}", params={"user_id": 1})
        assert response.status_code == 200
        order = response.json()
        assert order["order_number"] == summary["order_number"]
        assert order["shipping_address"] == ADDRESS
        assert [i["product_name"] for i in order["items"]] == ["Kemeja", "Kopi"]

        assert client.get(f"/orders/{summary['order_id']}", params={"user_id": 2}).status_code == 403
        assert [o["id"] for o in client.get("/orders", params={"user_id": 1}).json()] == [summary["order_id"]]

    def test_checkout_empty_cart(self, client):
        response = client.post("/checkout", params={"user_id": 1}, json=checkout_body())

        assert response.status_code == 400
        assert response.json()["error_type"] == "EmptyCart"

    def test_checkout_invalid_address(self, client, make_product):
        pid = make_product()
        client.post("/cart/items", params={"user_id": 1}, json={"product_id": pid, "quantity": 1})

        response = client.post(
            "/checkout", params={"user_id": 1}, json=checkout_body(shipping_address={**ADDRESS, "name": ""})
        )

        assert response.status_code == 422
        data = response.json()
        assert data["error_type"] == "ValidationFailed"
        assert data["errors"][0]["field"] == "name"

    def test_checkout_unknown_shipping_service(self, client, make_product):
        pid = make_product()
        client.post("/cart/items", params={"user_id": 1}, json={"product_id": pid, "quantity": 1})

        response = client.post("/checkout", params={"user_id": 1}, json=checkout_body(shipping_service="dhl"))

        assert response.status_code == 422
        assert response.json()["error_type"] == "InvalidShippingService"

    def test_checkout_insufficient_stock(self, client, make_product, set_product, read_stock):
        pid = make_product(stock=5)
        client.post("/cart/items", params={"user_id": 1}, json={"product_id": pid, "quantity": 5})
        set_product(pid, stock=3)

        response = client.post("/checkout", params={"user_id": 1}, json=checkout_body())

        assert response.status_code == 409
        assert response.json()["product_id"] == pid
        assert read_stock(pid) == 3
        assert client.get("/cart", params={"user_id": 1}).json()["item_count"] == 5

    def test_checkout_in_progress(self, client, make_product, fake_redis):
        pid = make_product()
        client.post("/cart/items", params={"user_id": 1}, json={"product_id": pid, "quantity": 1})
        fake_redis.store["checkout:1:lock"] = "another-tab"

        response = client.post("/checkout", params={"user_id": 1}, json=checkout_body())

        assert response.status_code == 409
        assert response.json()["error_type"] == "CheckoutInProgress"

    def test_checkout_without_lock(self, client, make_product, read_stock):
        pid = make_product(stock=2)
        client.post("/cart/items", params={"user_id": 1}, json={"product_id": pid, "quantity": 1})
        client.app.dependency_overrides[get_lock_service] = lambda: None

        response = client.post("/checkout", params={"user_id": 1}, json=checkout_body())

        assert response.status_code == 201
        assert read_stock(pid) == 1


class TestLockWiring:
    @pytest.fixture(autouse=True)
    def fresh_provider(self):
        get_lock_service.cache_clear()
        yield
        get_lock_service.cache_clear()

    def test_lock_disabled(self, monkeypatch):
        monkeypatch.setattr(settings, "CHECKOUT_LOCK_ENABLED", False)
        assert get_lock_service() is None

    def test_lock_enabled_shares_one_client(self, monkeypatch):
        monkeypatch.setattr(settings, "CHECKOUT_LOCK_ENABLED", True)
        lock_service = get_lock_service()
        assert isinstance(lock_service, LockService)
        assert get_lock_service() is lock_service


class TestOrderRoutes:
    def test_missing_order(self, client):
        response = client.get("/orders/123", params={"user_id": 1})

        assert response.status_code == 404
