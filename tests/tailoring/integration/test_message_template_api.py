"""Integration tests for Message Template API endpoints via TestClient."""

import pytest
from fastapi.testclient import TestClient

from tailoring.api.routes import order_router, template_router


@pytest.fixture()
def client(app):
    app.include_router(template_router)
    app.include_router(order_router)
    return TestClient(app)


def _create_template(client, **overrides):
    payload = {
        "name": "Trial reminder",
        "template_type": "TrialReminder",
        "content": "Dear {{clientName}}, your trial for {{orderNumber}} is on {{trialDate}}.",
    }
    payload.update(overrides)
    response = client.post("/message-templates", json=payload)
    assert response.status_code == 201
    return response.json()["template_id"]


class TestCreateTemplateAPI:
    def test_create_and_get(self, client):
        template_id = _create_template(client)

        response = client.get(f"/message-templates/{template_id}")
        assert response.status_code == 200
        data = response.json()
        assert data["variables"] == ["clientName", "orderNumber", "trialDate"]
        assert data["is_active"] is True
        assert data["usage_count"] == 0

    def test_short_content_returns_400(self, client):
        response = client.post(
            "/message-templates",
            json={"name": "Too short", "template_type": "Custom", "content": "Hi"},
        )
        assert response.status_code == 400

    def test_unknown_type_returns_400(self, client):
        response = client.post(
            "/message-templates",
            json={"name": "Birthday", "template_type": "Birthday", "content": "Happy birthday {{clientName}}!"},
        )
        assert response.status_code == 400

    def test_missing_template_returns_404(self, client):
        assert client.get("/message-templates/nope").status_code == 404


class TestUpdateTemplateAPI:
    def test_update_recomputes_variables(self, client):
        template_id = _create_template(client)
        response = client.put(
            f"/message-templates/{template_id}",
            json={"content": "Reminder: trial on {{trialDate}} at {{shopName}}."},
        )
        assert response.status_code == 200
        assert client.get(f"/message-templates/{template_id}").json()["variables"] == ["trialDate", "shopName"]

    def test_deactivate_and_list(self, client):
        active_id = _create_template(client)
        inactive_id = _create_template(client, name="Old trial reminder")
        client.put(f"/message-templates/{inactive_id}/deactivate")

        response = client.get("/message-templates", params={"active": True})
        assert [t["id"] for t in response.json()] == [active_id]

        client.put(f"/message-templates/{inactive_id}/activate")
        response = client.get("/message-templates", params={"template_type": "TrialReminder"})
        assert len(response.json()) == 2


class TestPreviewAPI:
    def test_preview_with_context(self, client):
        template_id = _create_template(client)
        response = client.post(
            f"/message-templates/{template_id}/preview",
            json={"context": {"clientName": "Meera"}},
        )
        assert response.status_code == 200
        assert response.json()["rendered"] == "Dear Meera, your trial for {{orderNumber}} is on {{trialDate}}."

    def test_preview_against_order(self, client):
        template_id = _create_template(client)
        order_response = client.post(
            "/orders",
            json={
                "client_id": "client-preview",
                "items": [{"garment_type": "Jacket", "quantity": 1, "price": 2500.0}],
                "trial_date": "2026-11-05",
            },
        )
        order_id = order_response.json()["order_id"]

        response = client.post(
            f"/message-templates/{template_id}/preview",
            json={"order_id": order_id, "context": {"clientName": "Meera"}},
        )

        rendered = response.json()["rendered"]
        assert rendered.startswith("Dear Meera, your trial for TD-")
        assert rendered.endswith("is on 05 Nov 2026.")
