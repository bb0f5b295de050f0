"""
Unit tests for FastAPI application.
"""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def client():
    """Create a test client for the FastAPI application."""
    from app.main import app
    return TestClient(app)


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


def test_root_endpoint(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == "Hi, I'm the Bitbucket Task Bot!"


def test_request_id_header(client):
    response = client.get("/health", headers={"X-Request-Id": "abc"})
    assert response.headers["X-Request-Id"] == "abc"
