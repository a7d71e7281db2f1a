"""Integration tests for Order API endpoints via TestClient."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from tailoring.api.routes import order_router, template_router


@pytest.fixture()
def client(app):
    app.include_router(order_router)
    app.include_router(template_router)
    return TestClient(app)


def _create_order(client, **overrides):
    payload = {
        "client_id": "client-api-001",
        "items": [{"garment_type": "Shirt", "quantity": 2, "price": 500.0, "cost": 200.0}],
        "services": [{"description": "Express stitching", "amount": 200.0, "cost": 50.0}],
        "advance": 400.0,
    }
    payload.update(overrides)
    response = client.post("/orders", json=payload)
    assert response.status_code == 201
    return response.json()["order_id"]


class TestCreateOrderAPI:
    def test_create_returns_201(self, client):
        order_id = _create_order(client)
        assert order_id

    def test_get_order(self, client):
        order_id = _create_order(
            client,
            discount=200.0,
            measurements={"Chest": "40", "Waist": "32"},
            special_requirements=[{"note": "Mandarin collar", "images": []}],
            trial_date="2026-11-02",
        )

        response = client.get(f"/orders/{order_id}")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Pending"
        assert data["order_number"].startswith("TD-")
        assert data["trial_date"] == "2026-11-02"
        assert data["bill"]["total"] == 1200.0
        assert data["bill"]["effective_amount"] == 1000.0
        assert data["bill"]["balance"] == 600.0
        assert data["profit"]["cost"] == 450.0
        assert data["items"][0]["subtotal"] == 1000.0
        assert data["special_requirements"][0]["note"] == "Mandarin collar"
        assert data["measurement_fields"] == [
            {"label": "Chest", "value": "40", "is_header": False},
            {"label": "Waist", "value": "32", "is_header": False},
        ]

    def test_get_missing_order_returns_404(self, client):
        response = client.get("/orders/does-not-exist")
        assert response.status_code == 404

    def test_zero_quantity_rejected(self, client):
        response = client.post(
            "/orders",
            json={"client_id": "client-api-001", "items": [{"garment_type": "Shirt", "quantity": 0, "price": 500.0}]},
        )
        assert response.status_code == 422

    def test_oversized_discount_returns_400(self, client):
        response = client.post(
            "/orders",
            json={
                "client_id": "client-api-001",
                "items": [{"garment_type": "Shirt", "quantity": 1, "price": 500.0}],
                "discount": 600.0,
            },
        )
        assert response.status_code == 400


class TestListOrdersAPI:
    def test_newest_first_with_pagination(self, client):
        first = _create_order(client)
        second = _create_order(client)
        third = _create_order(client)

        response = client.get("/orders", params={"limit": 2})

        assert response.status_code == 200
        data = response.json()
        assert [order["id"] for order in data["orders"]] == [third, second]
        assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

        second_page = client.get("/orders", params={"limit": 2, "page": 2}).json()
        assert [order["id"] for order in second_page["orders"]] == [first]

    def test_filter_by_client_and_status(self, client):
        mine = _create_order(client, client_id="client-a")
        _create_order(client, client_id="client-b")
        client.put(f"/orders/{mine}/status", json={"status": "InProgress"})

        by_client = client.get("/orders", params={"client_id": "client-a"}).json()
        assert [order["id"] for order in by_client["orders"]] == [mine]

        by_status = client.get("/orders", params={"status": "InProgress"}).json()
        assert [order["id"] for order in by_status["orders"]] == [mine]
        assert by_status["orders"][0]["balance"] == 800.0

    def test_filter_by_placement_date(self, client):
        _create_order(client)
        today = datetime.now(UTC).date()

        in_range = client.get("/orders", params={"start_date": today.isoformat(), "end_date": today.isoformat()})
        before = client.get("/orders", params={"end_date": (today - timedelta(days=1)).isoformat()})

        assert in_range.json()["pagination"]["total"] == 1
        assert before.json()["orders"] == []

    def test_invalid_status_returns_400(self, client):
        response = client.get("/orders", params={"status": "Shipped"})
        assert response.status_code == 400

    def test_page_size_bounds(self, client):
        assert client.get("/orders", params={"limit": 0}).status_code == 422
        assert client.get("/orders", params={"page": 0}).status_code == 422


class TestModifyOrderAPI:
    def test_revise_items(self, client):
        order_id = _create_order(client)
        response = client.put(
            f"/orders/{order_id}/items",
            json={"items": [{"garment_type": "Coat", "quantity": 1, "price": 3500.0}], "services": []},
        )
        assert response.status_code == 200
        assert client.get(f"/orders/{order_id}").json()["total_amount"] == 3500.0

    def test_adjust_bill(self, client):
        order_id = _create_order(client)
        response = client.put(f"/orders/{order_id}/bill", json={"final_amount": 1100.0})
        assert response.status_code == 200
        assert client.get(f"/orders/{order_id}").json()["bill"]["discount"] == 100.0

    def test_adjust_bill_needs_exactly_one_value(self, client):
        order_id = _create_order(client)
        response = client.put(f"/orders/{order_id}/bill", json={"discount": 100.0, "final_amount": 1100.0})
        assert response.status_code == 400

    def test_record_payment(self, client):
        order_id = _create_order(client)
        response = client.post(f"/orders/{order_id}/payments", json={"amount": 300.0})
        assert response.status_code == 200
        assert client.get(f"/orders/{order_id}").json()["advance"] == 700.0

    def test_schedule(self, client):
        order_id = _create_order(client)
        response = client.put(f"/orders/{order_id}/schedule", json={"delivery_date": "2026-12-01"})
        assert response.status_code == 200
        assert client.get(f"/orders/{order_id}").json()["delivery_date"] == "2026-12-01"


class TestStatusAPI:
    def test_delivery_held_for_payment(self, client):
        order_id = _create_order(client)
        response = client.put(f"/orders/{order_id}/status", json={"status": "Delivered"})

        assert response.status_code == 200
        data = response.json()
        assert data["committed"] is False
        assert data["payment_required"] == {"balance": 800.0}
        assert client.get(f"/orders/{order_id}").json()["status"] == "Pending"

    def test_delivery_with_received_amount(self, client):
        order_id = _create_order(client)
        response = client.put(f"/orders/{order_id}/status", json={"status": "Delivered", "received_amount": 800.0})

        data = response.json()
        assert data["committed"] is True
        assert data["status"] == "Delivered"
        assert data["notification"]["template_type"] == "PostDelivery"

        order = client.get(f"/orders/{order_id}").json()
        assert order["advance"] == 1200.0
        assert order["delivered_at"] is not None

    def test_delivery_with_skip(self, client):
        order_id = _create_order(client)
        response = client.put(f"/orders/{order_id}/status", json={"status": "Delivered", "skip_payment": True})

        assert response.json()["committed"] is True
        assert client.get(f"/orders/{order_id}").json()["bill"]["balance"] == 800.0

    def test_invalid_status_returns_400(self, client):
        order_id = _create_order(client)
        response = client.put(f"/orders/{order_id}/status", json={"status": "Shipped"})
        assert response.status_code == 400


class TestMeasurementsAPI:
    def test_replace_with_fields(self, client):
        order_id = _create_order(client)
        response = client.put(
            f"/orders/{order_id}/measurements",
            json={
                "fields": [
                    {"label": "SHIRT", "is_header": True},
                    {"label": "Chest", "value": "40"},
                ]
            },
        )
        assert response.status_code == 200
        assert client.get(f"/orders/{order_id}").json()["measurements"] == "=== SHIRT ===\nChest: 40"

    def test_add_garment_block(self, client):
        order_id = _create_order(client)
        response = client.post(f"/orders/{order_id}/measurements/garments", json={"garment_type": "Trouser"})
        assert response.status_code == 200

        fields = client.get(f"/orders/{order_id}").json()["measurement_fields"]
        assert fields[0] == {"label": "TROUSER", "value": "", "is_header": True}

    def test_unknown_garment_returns_400(self, client):
        order_id = _create_order(client)
        response = client.post(f"/orders/{order_id}/measurements/garments", json={"garment_type": "Cape"})
        assert response.status_code == 400


class TestNotesAPI:
    def test_special_requirement_lifecycle(self, client):
        order_id = _create_order(client)
        response = client.post(
            f"/orders/{order_id}/special-requirements",
            json={"note": "Peak lapel", "images": [{"url": "https://img.example.com/lapel.jpg", "key": "l.jpg"}]},
        )
        assert response.status_code == 201
        requirement_id = response.json()["id"]

        order = client.get(f"/orders/{order_id}").json()
        assert order["special_requirements"][0]["images"] == [
            {"url": "https://img.example.com/lapel.jpg", "key": "l.jpg"}
        ]

        response = client.delete(f"/orders/{order_id}/special-requirements/{requirement_id}")
        assert response.status_code == 200
        assert client.get(f"/orders/{order_id}").json()["special_requirements"] == []

    def test_trial_note(self, client):
        order_id = _create_order(client)
        response = client.post(f"/orders/{order_id}/trial-notes", json={"note": "Shorten sleeves by 1cm"})
        assert response.status_code == 201
        assert client.get(f"/orders/{order_id}").json()["trial_notes"][0]["note"] == "Shorten sleeves by 1cm"


class TestMessagesAPI:
    def test_compose_with_active_template(self, client):
        client.post(
            "/message-templates",
            json={
                "name": "Ready for pickup",
                "template_type": "OrderReady",
                "content": "Hi {{clientName}}, {{orderNumber}} is ready. Due: {{balance}}",
            },
        )
        order_id = _create_order(client)

        response = client.post(f"/orders/{order_id}/messages", json={"template_type": "OrderReady", "client_name": "Ravi"})

        assert response.status_code == 200
        data = response.json()
        assert data["from_default"] is False
        assert data["body"].startswith("Hi Ravi, TD-")
        assert data["body"].endswith("Due: 800.00")


class TestSweepsAPI:
    def test_reminders(self, client):
        _create_order(client, trial_date="2026-11-03")
        _create_order(client, delivery_date="2026-11-04")

        response = client.get("/orders/reminders", params={"today": "2026-11-01"})

        data = response.json()
        assert len(data["trials"]) == 1
        assert data["deliveries"] == []

    def test_inactive_clients(self, client):
        _create_order(client, client_id="client-sleepy")
        response = client.get("/orders/inactive-clients", params={"today": "2099-01-01"})
        assert response.json() == {"client_ids": ["client-sleepy"]}
