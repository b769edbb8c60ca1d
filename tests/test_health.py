"""
tests/test_health.py -- Integration tests for GET /api/v1/health.

Covers:
  - 200 response with status, version, and components fields
  - components.database reports the store round trip
  - No session required
"""

from __future__ import annotations

from unittest.mock import patch


def test_health_returns_200_with_components(api_client):
    resp = api_client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert "version" in data
    assert data["components"] == {"app": "ok", "database": "ok"}


def test_health_reports_degraded_store(api_client):
    with patch.object(api_client.app.state.datastore, "ping", return_value=False):
        data = api_client.get("/api/v1/health").json()
    assert data["status"] == "degraded"
    assert data["components"]["database"] == "error"


def test_health_no_auth_required(api_client):
    resp = api_client.get("/api/v1/health", headers={})
    assert resp.status_code == 200
