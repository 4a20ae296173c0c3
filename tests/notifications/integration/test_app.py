"""Integration tests for the application entry point."""

from fastapi.testclient import TestClient

from app import app


class TestApp:
    def test_health(self):
        client = TestClient(app)
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "environment": "test", "order_store": "memory"}

    def test_send_email_route_is_mounted(self):
        client = TestClient(app)
        resp = client.post("/send-email", json={"orderId": "ord-1"})
        assert resp.status_code == 401

    def test_send_email_uses_wired_dispatcher(self):
        client = TestClient(app)
        resp = client.post(
            "/send-email",
            json={"orderId": "ord-unknown", "type": "shipped"},
            headers={"Authorization": "Bearer tok"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Order ord-unknown not found"
