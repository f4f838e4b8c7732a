from fastapi.testclient import TestClient

from tailorshop.main import app


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "pass"
    assert data["service"] == "tailorshop-backoffice"


def test_liveness(client):
    assert client.get("/health/live").json() == {"status": "alive"}


def test_readiness_checks_database(client):
    resp = client.get("/health/ready")
    assert resp.status_code == 200
    data = resp.json()
    assert data["checks"]["database:connectivity"]["status"] == "pass"


def test_startup_warns_without_migrations(client):
    # Test schema is created without alembic, so the version table is absent
    resp = client.get("/health/startup")
    assert resp.status_code == 200
    assert resp.json()["checks"]["database:migrations"]["status"] == "warn"


def test_metrics(client):
    data = client.get("/metrics").json()
    assert data["service"] == "tailorshop-backoffice"
    assert "memory_rss_bytes" in data["system"]


def test_root_and_info(client):
    assert client.get("/").json()["status"] == "running"
    assert client.get("/info").json()["endpoints"]["orders"] == "/api/orders"


def test_request_id_is_echoed(client):
    resp = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"


def test_unknown_route_uses_error_body(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Not Found"}


def test_unexpected_failure_is_a_generic_500(engine, monkeypatch):
    from tailorshop.application import stats_service

    def explode(self, today=None):
        raise RuntimeError("connection reset by peer")

    monkeypatch.setattr(stats_service.StatsService, "stats", explode)
    client = TestClient(app, raise_server_exceptions=False)
    resp = client.get("/api/stats")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}
