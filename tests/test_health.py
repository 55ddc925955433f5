"""Health probes and response headers."""


def test_ready(client):
    res = client.get("/api/health/ready")
    assert res.status_code == 200
    assert res.get_json() == {"status": "ok"}


def test_live_checks_database(client):
    res = client.get("/api/health/live")
    assert res.status_code == 200
    body = res.get_json()
    assert body["status"] == "healthy"
    assert body["checks"]["database"]["status"] == "ok"


def test_request_id_header_echoed(client):
    res = client.get("/api/projects", headers={"X-Request-ID": "req-1"})
    assert res.headers["X-Request-ID"] == "req-1"
    assert "X-Request-Duration-Ms" in res.headers
