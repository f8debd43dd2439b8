"""Tests for health check endpoints."""
from sqlalchemy.exc import OperationalError

from user_storage.api.context import federation_context


def test_health_check(client):
    """Liveness never touches the store."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.data == b"ok"
    assert response.content_type.startswith("text/plain")


def test_readiness_check(client):
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.data == b"ready"
    assert response.content_type.startswith("text/plain")


def test_readiness_fails_when_store_unreachable(app, client, monkeypatch):
    def broken_ping():
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    with app.app_context():
        monkeypatch.setattr(federation_context().store, "ping", broken_ping)

    response = client.get("/ready")
    assert response.status_code == 503
    assert response.data == b"not ready"


def test_health_needs_no_token(client):
    assert client.get("/health").status_code == 200
