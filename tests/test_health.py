"""Tests for health endpoint."""

from main import API_VERSION


def test_health_returns_200(client):
    """Health endpoint returns 200."""
    r = client.get("/health")
    assert r.status_code == 200


def test_health_returns_expected_keys(client):
    """Health response contains status and version."""
    assert client.get("/health").json() == {"status": "ok", "version": API_VERSION}
