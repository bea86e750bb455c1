"""Tests for the /health endpoint."""

from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest

try:
    from fastapi.testclient import TestClient
except ModuleNotFoundError:
    pytest.skip("fastapi is not installed", allow_module_level=True)


@pytest.fixture
def client():
    """Create a test client with the scheduler disabled."""
    from regintel.web.main import app

    with patch("regintel.web.lifespan._start_scheduler", return_value=None):
        with TestClient(app) as c:
            yield c


class TestHealthEndpoint:
    def test_health_returns_200(self, client):
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_returns_json(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["version"]
        assert data["started_at"] is not None
        assert data["uptime_seconds"] >= 0

    def test_health_scheduler_not_running(self, client):
        data = client.get("/health").json()
        assert data["scheduler"] == {"running": False, "jobs": []}

    def test_health_lists_scheduler_jobs(self, client):
        job = MagicMock()
        job.id = "collection"
        job.name = "Regulatory Data Collection"
        job.next_run_time = datetime(2024, 6, 1, 12, 0)
        scheduler = MagicMock(running=True)
        scheduler.get_jobs.return_value = [job]

        client.app.state.scheduler = scheduler
        client.app.state.started_at = datetime.now() - timedelta(minutes=5)
        try:
            data = client.get("/health").json()
        finally:
            client.app.state.scheduler = None

        assert data["scheduler"]["running"] is True
        assert data["scheduler"]["jobs"] == [
            {"id": "collection", "name": "Regulatory Data Collection", "next_run": "2024-06-01 12:00:00"}
        ]
        assert data["uptime_seconds"] >= 300
