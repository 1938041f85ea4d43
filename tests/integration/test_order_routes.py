"""Integration tests for order API endpoints."""

import os
import time
from unittest.mock import MagicMock

import jwt
from fastapi.testclient import TestClient


def create_test_token(
    user_id: int = 7,
    exp_offset: int = 3600,
    secret: str | None = None,
) -> str:
    """Create a customer token signed like the storefront does."""
    now = int(time.time())
    payload = {"id": user_id, "tipo": "cliente", "exp": now + exp_offset, "iat": now}
    return jwt.encode(payload, secret or os.environ["JWT_SECRET"], algorithm="HS256")


class TestPaymentStatus:
    """Tests for GET /api/v1/orders/payment-status/{payment_link_id} endpoint."""

    def test_requires_authentication(self, client: TestClient) -> None:
        """Test that the endpoint requires a bearer token."""
        response = client.get("/api/v1/orders/payment-status/pl_9")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_rejects_expired_token(self, client: TestClient) -> None:
        token = create_test_token(exp_offset=-60)

        response = client.get(
            "/api/v1/orders/payment-status/pl_9",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401

    def test_rejects_token_with_wrong_secret(self, client: TestClient) -> None:
        token = create_test_token(secret="a-secret-this-service-does-not-know")

        response = client.get(
            "/api/v1/orders/payment-status/pl_9",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401

    def test_pending_until_webhook_processed(
        self, client: TestClient, mock_order_service: MagicMock
    ) -> None:
        """Test that unknown payment links report pending."""
        token = create_test_token()

        response = client.get(
            "/api/v1/orders/payment-status/pl_9",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 200
        assert response.json() == {"payment_link_id": "pl_9", "status": "pending", "order_id": None}
        mock_order_service.get_payment_status.assert_awaited_once_with("pl_9")

    def test_returns_order_status(
        self, client: TestClient, mock_order_service: MagicMock
    ) -> None:
        """Test that a fulfilled payment link reports its order."""
        mock_order_service.get_payment_status.return_value = ("paid", 31)
        token = create_test_token()

        response = client.get(
            "/api/v1/orders/payment-status/pl_9",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "paid"
        assert data["order_id"] == 31
