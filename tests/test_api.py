"""
Pytest tests for the TrustScan HTTP API (POST /api/analyze, GET /api/scans, GET /health).

Uses fake collectors and a temporary SQLite DB via conftest fixtures.
"""

from __future__ import annotations

URL = "https://example.com/login"


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_analyze_success(client):
    r = client.post("/api/analyze", json={"url": URL})
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "SUCCESS"
    assert "message" not in body
    data = body["data"]
    assert set(data) >= {
        "trustScore",
        "confidence",
        "classification",
        "summary",
        "indicators",
        "evidence",
        "computedAt",
        "tookMillis",
        "servedFromCache",
    }
    assert data["servedFromCache"] is False


def test_analyze_invalid_url_is_error_envelope_with_200(client):
    r = client.post("/api/analyze", json={"url": "javascript:alert(1)"})
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ERROR"
    assert body["message"]
    assert "data" not in body
    assert client.collectors.reputation.calls == []


def test_analyze_missing_url_field(client):
    r = client.post("/api/analyze", json={})
    assert r.status_code == 200
    assert r.json()["status"] == "ERROR"


def test_analyze_malformed_json_is_error_envelope_with_200(client):
    r = client.post(
        "/api/analyze",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ERROR"
    assert body["message"]
    assert "detail" not in body
    assert client.collectors.reputation.calls == []


def test_analyze_empty_body_is_error_envelope(client):
    r = client.post("/api/analyze", content=b"", headers={"content-type": "application/json"})
    assert r.status_code == 200
    assert r.json()["status"] == "ERROR"


def test_analyze_array_body_is_error_envelope(client):
    r = client.post("/api/analyze", json=[URL])
    assert r.status_code == 200
    assert r.json()["status"] == "ERROR"
    assert client.collectors.blocklist.calls == []


def test_analyze_bare_string_body_is_error_envelope(client):
    r = client.post("/api/analyze", json=URL)
    assert r.status_code == 200
    assert r.json()["status"] == "ERROR"
    assert client.collectors.blocklist.calls == []


def test_analyze_second_call_served_from_cache(client):
    client.post("/api/analyze", json={"url": URL})
    r = client.post("/api/analyze", json={"url": URL})
    assert r.json()["data"]["servedFromCache"] is True
    assert len(client.collectors.blocklist.calls) == 1


def test_scan_history_lists_analyses(client):
    client.post("/api/analyze", json={"url": URL})
    r = client.get("/api/scans", params={"url": URL})
    assert r.status_code == 200
    body = r.json()
    assert body["url"] == URL
    assert len(body["scans"]) == 1
    scan = body["scans"][0]
    assert scan["threatLevel"] == "safe"
    assert scan["isThreat"] is False
    assert scan["scanType"] == "comprehensive"


def test_scan_history_requires_url(client):
    r = client.get("/api/scans")
    assert r.status_code == 422


def test_cors_preflight_allows_any_origin(client):
    r = client.options(
        "/api/analyze",
        headers={
            "Origin": "https://app.example.org",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type, apikey",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"
