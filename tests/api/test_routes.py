"""HTTP surface: routing and error-to-status mapping."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from ordercore.api import create_app
from ordercore.api.dependencies import get_notification_service, get_product_client
from ordercore.data.database import get_db
from ordercore.services.notification_service import NotificationService
from tests.fakes import DRILL, LAMP, SAW, USER


@pytest.fixture
def client(session_factory, catalog, sink):
    app = create_app()

    def override_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_product_client] = lambda: catalog
    app.dependency_overrides[get_notification_service] = lambda: NotificationService(sink)

    with TestClient(app) as c:
        yield c


def _fill(client):
    client.post(f"/carts/{USER}/items", json={"product_id": DRILL, "quantity": 2})
    return client.post(f"/carts/{USER}/items", json={"product_id": SAW, "quantity": 1})


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


class TestCartRoutes:

    def test_add_and_read(self, client):
        resp = _fill(client)
        assert resp.status_code == 200
        body = resp.json()
        assert body["total_items"] == 3
        assert float(body["total_amount"]) == 250.0

        assert client.get(f"/carts/{USER}").json()["unique_items_count"] == 2

    def test_quantity_updates(self, client):
        _fill(client)
        assert client.put(f"/carts/{USER}/items/{SAW}", json={"quantity": 3}).json()["total_items"] == 5
        assert client.post(f"/carts/{USER}/items/{SAW}/decrement").json()["total_items"] == 4
        assert client.post(f"/carts/{USER}/items/{SAW}/increment").json()["total_items"] == 5
        assert client.delete(f"/carts/{USER}/items/{SAW}").json()["total_items"] == 2
        assert client.delete(f"/carts/{USER}/items").json()["items"] == []

    def test_sync_prices(self, client, catalog):
        _fill(client)
        catalog.set_price(DRILL, "80.00")
        assert float(client.post(f"/carts/{USER}/sync-prices").json()["total_amount"]) == 210.0

    def test_errors(self, client):
        assert client.post(f"/carts/{USER}/items", json={"product_id": DRILL, "quantity": 0}).status_code == 400
        assert client.post(f"/carts/{USER}/items", json={"product_id": 999, "quantity": 1}).status_code == 404
        assert client.post(f"/carts/{USER}/items", json={"product_id": LAMP, "quantity": 1}).status_code == 409

    def test_validate(self, client):
        assert client.post(f"/carts/{USER}/validate").status_code == 404
        _fill(client)
        assert client.post(f"/carts/{USER}/validate").json() == {
            "user_id": USER,
            "valid": True,
            "unique_items_count": 2,
        }


class TestOrderRoutes:

    def test_checkout_and_lifecycle(self, client, sink):
        _fill(client)
        resp = client.post("/orders/", json={"user_id": USER, "customer_comment": "hi"})
        assert resp.status_code == 201
        order = resp.json()
        assert order["status"] == "PENDING"
        assert [i["product_name"] for i in order["items"]] == ["Cordless Drill", "Hand Saw"]

        assert client.get(f"/orders/by-number/{order['order_number']}").json()["id"] == order["id"]

        assert client.post(f"/orders/{order['id']}/confirm", json={"note": "ok"}).json()["status"] == "CONFIRMED"

        bad = client.post(f"/orders/{order['id']}/complete")
        assert bad.status_code == 409
        assert "CONFIRMED" in bad.json()["detail"]

        resp = client.post(f"/orders/{order['id']}/transition", json={"status": "PROCESSING"})
        assert resp.json()["status"] == "PROCESSING"

        cancelled = client.post(f"/orders/{order['id']}/cancel", json={"reason": "no stock"}).json()
        assert cancelled["status"] == "CANCELLED"
        assert cancelled["manager_comment"] == "ok\nCANCELLED: no stock"

        assert [e["title"] for e in sink.events] == [
            "Order placed",
            "Order status changed",
            "Order status changed",
            "Order cancelled",
        ]

    def test_listing_and_statistics(self, client):
        _fill(client)
        order = client.post("/orders/", json={"user_id": USER}).json()

        assert [o["id"] for o in client.get("/orders/", params={"user_id": USER}).json()] == [order["id"]]
        assert client.get("/orders/statistics").json() == {
            "total_orders": 1,
            "status_counts": {"PENDING": 1},
        }

    def test_checkout_errors(self, client):
        assert client.post("/orders/", json={"user_id": USER}).status_code == 404
        client.post(f"/carts/{USER}/items", json={"product_id": DRILL, "quantity": 1})
        client.delete(f"/carts/{USER}/items")
        assert client.post("/orders/", json={"user_id": USER}).status_code == 409

    def test_unknown_order_and_step(self, client):
        assert client.get("/orders/999").status_code == 404
        assert client.post("/orders/999/confirm").status_code == 404
        assert client.post("/orders/1/ship").status_code == 400


class TestOrderQueries:

    def test_listing_without_filter_is_pending_queue(self, client):
        _fill(client)
        pending = client.post("/orders/", json={"user_id": USER}).json()
        client.post(f"/carts/{USER}/items", json={"product_id": SAW, "quantity": 1})
        confirmed = client.post("/orders/", json={"user_id": USER}).json()
        client.post(f"/orders/{confirmed['id']}/confirm")

        assert [o["id"] for o in client.get("/orders/").json()] == [pending["id"]]
        assert [o["id"] for o in client.get("/orders/", params={"status": "CONFIRMED"}).json()] == [confirmed["id"]]

    def test_search_and_date_range(self, client):
        _fill(client)
        order = client.post("/orders/", json={"user_id": USER, "customer_comment": "Leave at the gate"}).json()

        found = client.get("/orders/search", params={"q": "gate"}).json()
        assert [o["id"] for o in found] == [order["id"]]
        assert client.get("/orders/search", params={"q": "   "}).status_code == 400

        now = datetime.now(timezone.utc)
        params = {
            "start": (now - timedelta(hours=1)).isoformat(),
            "end": (now + timedelta(hours=1)).isoformat(),
        }
        assert [o["id"] for o in client.get("/orders/date-range", params=params).json()] == [order["id"]]

        reversed_range = {"start": params["end"], "end": params["start"]}
        assert client.get("/orders/date-range", params=reversed_range).status_code == 400
