"""Health probe and request-id propagation across success and error responses."""
from uuid import uuid4

from fastapi.testclient import TestClient

from goalplanner.core.security import create_access_token
from goalplanner.main import app

client = TestClient(app)


def test_health_reports_ok_with_generated_request_id() -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers.get("X-Request-Id")


def test_each_request_gets_its_own_id() -> None:
    first = client.get("/health").headers["X-Request-Id"]
    second = client.get("/health").headers["X-Request-Id"]

    assert first != second


def test_error_payload_carries_supplied_request_id() -> None:
    response = client.delete(f"/api/goals/{uuid4()}", headers={"X-Request-Id": "req-denied-7"})

    assert response.status_code == 401
    assert response.headers["X-Request-Id"] == "req-denied-7"
    assert response.json()["request_id"] == "req-denied-7"


def test_invalid_token_error_echoes_request_id() -> None:
    token = create_access_token(uuid4())

    response = client.put(
        f"/api/goals/{uuid4()}",
        json={"roadmap": []},
        headers={"Authorization": f"Bearer {token}x", "X-Request-Id": "req-bad-token"},
    )

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token", "code": "AUTH_FAILED", "request_id": "req-bad-token"}
    assert response.headers["X-Request-Id"] == "req-bad-token"
