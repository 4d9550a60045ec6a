"""Tests for the health endpoint."""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from ebook_studio import __version__
from ebook_studio.api.main import app
from ebook_studio.db import mongo

client = TestClient(app)


def test_health_check():
    with patch.object(mongo, "ping", AsyncMock(return_value=True)):
        response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["error"] is None
    assert body["data"]["status"] == "healthy"
    assert body["data"]["database"] == "ok"
    assert body["data"]["service"] == "ebook-studio"
    assert body["data"]["version"] == __version__
    assert body["data"]["features"]["chapter_generation"] is True


def test_health_degraded_without_database():
    with patch.object(mongo, "ping", AsyncMock(return_value=False)):
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "degraded"
    assert response.json()["data"]["database"] == "unavailable"
