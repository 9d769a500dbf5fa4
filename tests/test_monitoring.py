"""Health and metrics endpoints."""


def test_root_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data == {"status": "healthy", "database": "connected", "cache": "memory"}


def test_api_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "ok"


def test_monitoring_health_is_public(client):
    response = client.get("/api/monitoring/health")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] in ("healthy", "degraded")
    assert data["uptime"] >= 0
    assert data["memory"]["rss_mb"] > 0
    assert data["ai"]["enabled"] is False
    assert "total_tokens_used" in data["ai"]


def test_metrics_require_authentication(client):
    assert client.get("/api/monitoring/metrics").status_code == 401


def test_metrics(auth_client):
    auth_client.get("/api/profile")
    response = auth_client.get("/api/monitoring/metrics")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["requests"]["total"] >= 2
    assert data["requests"]["by_method"]["GET"] >= 1
    assert "201" in data["requests"]["by_status"]
    assert set(data) == {"requests", "ai", "cache", "rate_limiter", "memory", "uptime"}
    assert data["rate_limiter"]["tracked_windows"] >= 1
