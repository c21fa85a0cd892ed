"""HTTP-слой поверх in-memory unit of work."""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront_orders.main import app
from storefront_orders.presentation.api import get_unit_of_work
from storefront_orders.domain.models import CartLine, OrderStatus

from fakes import FakeUnitOfWork, InMemoryStore
from helpers import CUSTOMER_ID, OTHER_CUSTOMER_ID, ADMIN_ID, build_order


CUSTOMER = {"X-User-Id": CUSTOMER_ID}
OTHER = {"X-User-Id": OTHER_CUSTOMER_ID}
ADMIN = {"X-User-Id": ADMIN_ID, "X-User-Role": "ADMIN"}


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def client(store):
    fake = FakeUnitOfWork(store)
    app.dependency_overrides[get_unit_of_work] = lambda: fake
    # Без контекстного менеджера lifespan не стартует и не лезет в настоящую БД
    yield TestClient(app)
    app.dependency_overrides.clear()


def put_order(store, user_id, status):
    order = build_order(user_id, status)
    store.orders[order.id] = order.model_copy(update={"items": []})
    store.items[order.id] = list(order.items)
    return order


def test_checkout_returns_summary(client, store):
    store.carts[CUSTOMER_ID] = [CartLine(product_id="P1", name="Kopi", quantity=2, unit_price=Decimal("5000"))]

    response = client.post("/api/v1/orders", json={"addressId": "addr-1", "note": "pagi"}, headers=CUSTOMER)

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "PENDING"
    assert Decimal(body["totalPrice"]) == Decimal("10000")
    assert body["orderNumber"].startswith("ORD-")
    assert set(body) >= {"id", "orderNumber", "status", "totalPrice", "placedAt"}
    assert store.carts[CUSTOMER_ID] == []
    assert len(store.items[body["id"]]) == 1


def test_checkout_empty_cart(client, store):
    response = client.post("/api/v1/orders", json={"addressId": "addr-1"}, headers=CUSTOMER)

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "CART_EMPTY"
    assert store.orders == {}


def test_checkout_cart_clear_failure_is_order_failed(store):
    store.carts[CUSTOMER_ID] = [CartLine(product_id="P1", quantity=1, unit_price=Decimal("5000"))]
    fake = FakeUnitOfWork(store, fail_on_clear=True)
    app.dependency_overrides[get_unit_of_work] = lambda: fake
    try:
        response = TestClient(app).post("/api/v1/orders", json={"addressId": "addr-1"}, headers=CUSTOMER)
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json()["detail"]["code"] == "ORDER_FAILED"
    assert store.orders == {}
    assert len(store.carts[CUSTOMER_ID]) == 1


def test_checkout_requires_address_and_identity(client):
    assert client.post("/api/v1/orders", json={}, headers=CUSTOMER).status_code == 422
    assert client.post("/api/v1/orders", json={"addressId": "   "}, headers=CUSTOMER).status_code == 422
    assert client.post("/api/v1/orders", json={"addressId": "a"}).status_code == 401


def test_list_orders_envelope(client, store):
    for _ in range(3):
        put_order(store, CUSTOMER_ID, OrderStatus.PENDING)
    put_order(store, OTHER_CUSTOMER_ID, OrderStatus.PENDING)

    response = client.get("/api/v1/orders", params={"page": "1", "limit": "500"}, headers=CUSTOMER)

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"]["page"] == 1
    assert body["pagination"]["limit"] == 10
    assert body["pagination"]["total"] == 3
    assert len(body["orders"]) == 3


def test_detail_and_access(client, store):
    order = put_order(store, CUSTOMER_ID, OrderStatus.PENDING)

    response = client.get(f"/api/v1/orders/{order.id}", headers=CUSTOMER)
    assert response.status_code == 200
    body = response.json()
    assert body["userId"] == CUSTOMER_ID
    assert body["items"][0]["name"] == "Kopi Arabika"
    assert Decimal(body["items"][0]["subtotal"]) == Decimal("10000")

    assert client.get(f"/api/v1/orders/{order.id}", headers=OTHER).status_code == 401
    assert client.get("/api/v1/orders/not-a-uuid", headers=CUSTOMER).status_code == 400


def test_cancel_flow(client, store):
    pending = put_order(store, CUSTOMER_ID, OrderStatus.PENDING)
    completed = put_order(store, CUSTOMER_ID, OrderStatus.COMPLETED)

    ok = client.patch(f"/api/v1/orders/{pending.id}/cancel", headers=CUSTOMER)
    rejected = client.patch(f"/api/v1/orders/{completed.id}/cancel", headers=CUSTOMER)

    assert ok.status_code == 200
    assert store.orders[pending.id].status == OrderStatus.CANCELLED
    assert rejected.status_code == 400
    assert rejected.json()["detail"]["code"] == "CANNOT_CANCEL"
    assert store.orders[completed.id].status == OrderStatus.COMPLETED


def test_customer_completes_own_shipped_order(client, store):
    order = put_order(store, CUSTOMER_ID, OrderStatus.SHIPPED)

    foreign = client.patch(f"/api/v1/orders/{order.id}/complete", headers=OTHER)
    own = client.patch(f"/api/v1/orders/{order.id}/complete", headers=CUSTOMER)

    assert foreign.status_code == 401
    assert foreign.json()["detail"]["code"] == "UNAUTHORIZED"
    assert own.status_code == 200
    assert own.json()["status"] == "COMPLETED"


def test_admin_status_update_requires_receipt(client, store):
    order = put_order(store, CUSTOMER_ID, OrderStatus.PROCESSING)
    url = f"/api/v1/admin/orders/{order.id}/status"

    missing = client.patch(url, json={"status": "SHIPPED", "receiptNo": ""}, headers=ADMIN)
    assert missing.status_code == 400
    assert missing.json()["detail"]["code"] == "RECEIPT_REQUIRED"
    assert store.orders[order.id].status == OrderStatus.PROCESSING

    shipped = client.patch(url, json={"status": "SHIPPED", "receiptNo": "JNE-42"}, headers=ADMIN)
    assert shipped.status_code == 200
    assert shipped.json()["receiptNo"] == "JNE-42"

    invalid = client.patch(url, json={"status": "PAID"}, headers=ADMIN)
    assert invalid.json()["detail"]["code"] == "INVALID_STATUS_TRANSITION"


def test_admin_routes_forbidden_for_customers(client, store):
    order = put_order(store, CUSTOMER_ID, OrderStatus.PAID)

    assert client.get("/api/v1/admin/orders", headers=CUSTOMER).status_code == 403
    response = client.patch(
        f"/api/v1/admin/orders/{order.id}/status", json={"status": "PROCESSING"}, headers=CUSTOMER
    )
    assert response.status_code == 403


def test_admin_list_with_filters(client, store):
    put_order(store, CUSTOMER_ID, OrderStatus.PAID)
    put_order(store, OTHER_CUSTOMER_ID, OrderStatus.PENDING)

    response = client.get("/api/v1/admin/orders", params={"status": "PAID"}, headers=ADMIN)

    body = response.json()
    assert response.status_code == 200
    assert body["pagination"]["limit"] == 20
    assert body["pagination"]["status"] == "PAID"
    assert body["pagination"]["total"] == 1
    assert body["orders"][0]["status"] == "PAID"


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
