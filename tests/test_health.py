"""Health 엔드포인트 테스트."""

from tests.conftest import FakeDatabase


def test_health_returns_200(client):
    """GET /health → 200 + status, db, redis 키."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data == {"status": "ok", "db": "ok", "redis": "ok"}


def test_health_degraded_when_db_down(client):
    from app.main import app

    app.state.database = FakeDatabase(healthy=False)
    data = client.get("/health").json()
    assert data["status"] == "degraded"
    assert data["db"] == "error"


def test_health_without_database(client):
    from app.main import app

    app.state.database = None
    data = client.get("/health").json()
    assert data["db"] == "error"
