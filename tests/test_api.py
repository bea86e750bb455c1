"""Tests for the JSON API routes."""

from unittest.mock import MagicMock, patch

import pytest

try:
    from fastapi.testclient import TestClient
except ModuleNotFoundError:
    pytest.skip("fastapi is not installed", allow_module_level=True)

from fastapi import BackgroundTasks, HTTPException

from regintel.scraping.pipeline import CollectionResult
from regintel.web.dependencies import get_db
from regintel.web.main import app
from regintel.web.routes import collection


@pytest.fixture
def client(populated_db):
    """Test client backed by the populated temp database (lifespan not run)."""
    app.dependency_overrides[get_db] = lambda: populated_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def idle_jobs(monkeypatch):
    monkeypatch.setattr(collection, "collection_status", {"running": False, "last_result": None, "error": None})
    monkeypatch.setattr(collection, "enhancement_status", {"running": False, "last_result": None, "error": None})


class TestEnvelope:
    def test_success_envelope(self, client):
        body = client.get("/api/regulatory-updates").json()
        assert body["success"] is True
        assert "timestamp" in body
        assert len(body["data"]) == 4

    def test_root_redirects_to_docs(self, client):
        response = client.get("/", follow_redirects=False)
        assert response.status_code == 302
        assert response.headers["location"] == "/docs"


class TestRegulatoryUpdates:
    def test_filters(self, client):
        data = client.get("/api/regulatory-updates", params={"region": "EU"}).json()["data"]
        assert [u["title"] for u in data] == ["EU MDR Transition Extension"]

        data = client.get("/api/regulatory-updates", params={"priority": "critical"}).json()["data"]
        assert [u["id"] for u in data] == [3]

    def test_invalid_priority_suggests(self, client):
        response = client.get("/api/regulatory-updates", params={"priority": "hgh"})
        assert response.status_code == 400
        assert "Did you mean 'high'" in response.json()["detail"]

    @pytest.mark.parametrize("limit", [0, 1001])
    def test_limit_bounds(self, client, limit):
        assert client.get("/api/regulatory-updates", params={"limit": limit}).status_code == 422

    def test_recent(self, client):
        data = client.get("/api/regulatory-updates/recent", params={"limit": 2}).json()["data"]
        assert [u["id"] for u in data] == [1, 3]

    def test_search(self, client):
        data = client.get("/api/regulatory-updates/search", params={"q": "cybersecurity"}).json()["data"]
        assert [u["id"] for u in data] == [1]

    def test_search_requires_query(self, client):
        assert client.get("/api/regulatory-updates/search", params={"q": ""}).status_code == 422

    def test_get_and_404(self, client):
        assert client.get("/api/regulatory-updates/2").json()["data"]["region"] == "EU"
        response = client.get("/api/regulatory-updates/999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Regulatory update not found"

    def test_create(self, client):
        response = client.post(
            "/api/regulatory-updates",
            json={"title": "Swissmedic guidance", "region": "CH", "priority": "high", "categories": ["MedDO"]},
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["id"] == 5
        assert data["categories"] == ["MedDO"]

    def test_create_normalizes_case(self, client, populated_db):
        response = client.post(
            "/api/regulatory-updates",
            json={"title": "Notified body capacity survey", "priority": "HIGH", "region": "eu", "update_type": "Guidance"},
        )
        data = response.json()["data"]
        assert (data["priority"], data["region"], data["update_type"]) == ("high", "EU", "guidance")

        assert data["id"] in [u.id for u in populated_db.list_regulatory_updates(priority="high")]
        decision = client.post(f"/api/regulatory-updates/{data['id']}/evaluate").json()["data"]
        assert "Invalid priority assignment" not in decision["compliance_issues"]

    def test_patch_normalizes_case(self, client):
        data = client.patch("/api/regulatory-updates/2", json={"priority": "CRITICAL", "region": "de"}).json()["data"]
        assert data["priority"] == "critical"
        assert data["region"] == "DE"

    def test_list_filter_any_case(self, client):
        data = client.get("/api/regulatory-updates", params={"priority": "CRITICAL"}).json()["data"]
        assert [u["id"] for u in data] == [3]

    def test_create_rejects_invalid_region(self, client):
        response = client.post("/api/regulatory-updates", json={"title": "X", "region": "Mars"})
        assert response.status_code == 400

    def test_create_requires_title(self, client):
        assert client.post("/api/regulatory-updates", json={"region": "EU"}).status_code == 422

    def test_patch(self, client):
        response = client.patch("/api/regulatory-updates/2", json={"priority": "high", "keywords": ["mdr"]})
        data = response.json()["data"]
        assert data["priority"] == "high"
        assert data["keywords"] == ["mdr"]
        assert data["title"] == "EU MDR Transition Extension"

    def test_patch_null_title_rejected(self, client):
        assert client.patch("/api/regulatory-updates/2", json={"title": None}).status_code == 422

    def test_delete(self, client):
        assert client.delete("/api/regulatory-updates/4").json()["data"] == {"deleted": 4}
        assert client.delete("/api/regulatory-updates/4").status_code == 404

    def test_pdf(self, client):
        response = client.get("/api/regulatory-updates/1/pdf")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert "regulatory_update_FDA_Cybersecurity" in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")

    def test_evaluate(self, client):
        data = client.post("/api/regulatory-updates/1/evaluate").json()["data"]
        assert data["review_level"] in ("auto", "senior", "expert", "board")
        assert isinstance(data["reasoning"], list)
        assert "Missing device classification" in data["compliance_issues"]

    def test_enhance_once(self, client):
        first = client.post("/api/regulatory-updates/1/enhance").json()["data"]
        assert first["enhanced"] is True
        assert "## 1. Technical Specifications" in first["update"]["content"]

        second = client.post("/api/regulatory-updates/1/enhance").json()["data"]
        assert second["enhanced"] is False
        assert second["reason"] == "already enhanced"


class TestLegalCases:
    def test_list_filter(self, client):
        assert len(client.get("/api/legal-cases", params={"jurisdiction": "US"}).json()["data"]) == 1
        assert client.get("/api/legal-cases", params={"jurisdiction": "EU"}).json()["data"] == []

    def test_create_and_patch(self, client):
        response = client.post(
            "/api/legal-cases",
            json={"title": "Schmitt v TÜV Rheinland", "court": "CJEU", "jurisdiction": "EU"},
        )
        assert response.status_code == 201
        case_id = response.json()["data"]["id"]

        data = client.patch(f"/api/legal-cases/{case_id}", json={"case_number": "C-219/15"}).json()["data"]
        assert data["case_number"] == "C-219/15"
        assert client.patch(f"/api/legal-cases/{case_id}", json={"court": None}).status_code == 422

    def test_create_requires_court(self, client):
        assert client.post("/api/legal-cases", json={"title": "X", "jurisdiction": "US"}).status_code == 422

    def test_decision_text(self, client):
        data = client.get("/api/legal-cases/1/decision-text").json()["data"]
        assert data["id"] == 1
        assert "552 U.S. 312" in data["text"]

    def test_pdf(self, client):
        response = client.get("/api/legal-cases/1/pdf")
        assert response.headers["content-type"] == "application/pdf"
        assert "decision_552_U_S_312" in response.headers["content-disposition"]

    def test_evaluate(self, client):
        data = client.post("/api/legal-cases/1/evaluate").json()["data"]
        assert data["decision"]["review_level"] == "senior"
        assert "Product Liability" in data["analysis"]["themes"]

    def test_missing(self, client):
        assert client.get("/api/legal-cases/42/pdf").status_code == 404


class TestKnowledgeBase:
    def test_filters(self, client):
        assert len(client.get("/api/knowledge-base", params={"tag": "FDA"}).json()["data"]) == 1
        assert client.get("/api/knowledge-base", params={"tag": "MDR"}).json()["data"] == []

    def test_published_only(self, client):
        client.post("/api/knowledge-base", json={"title": "Draft", "content": "Not yet."})
        assert len(client.get("/api/knowledge-base").json()["data"]) == 2
        assert len(client.get("/api/knowledge-base", params={"published_only": True}).json()["data"]) == 1

    def test_search(self, client):
        data = client.get("/api/knowledge-base/search", params={"q": "premarket"}).json()["data"]
        assert [a["id"] for a in data] == [1]

    def test_patch_and_delete(self, client):
        data = client.patch("/api/knowledge-base/1", json={"tags": ["FDA"]}).json()["data"]
        assert data["tags"] == ["FDA"]
        assert client.delete("/api/knowledge-base/1").status_code == 200
        assert client.get("/api/knowledge-base/1").status_code == 404

    def test_pdf(self, client):
        response = client.get("/api/knowledge-base/1/pdf")
        assert response.content.startswith(b"%PDF")


class TestHistorical:
    def test_date_range(self, client):
        params = {"start_date": "2019-01-01", "end_date": "2019-12-31"}
        assert len(client.get("/api/historical/data", params=params).json()["data"]) == 1
        assert client.get("/api/historical/data", params={"start_date": "2020-01-01"}).json()["data"] == []

    def test_create_and_pdf(self, client):
        response = client.post("/api/historical/data", json={"title": "MEDDEV 2.7/1 rev 4", "region": "EU"})
        assert response.status_code == 201
        record_id = response.json()["data"]["id"]
        assert client.get(f"/api/historical/data/{record_id}/pdf").content.startswith(b"%PDF")

    def test_pdf_filename_uses_document_id(self, client):
        response = client.get("/api/historical/data/1/pdf")
        assert "historical_MDCG_2019_11" in response.headers["content-disposition"]


class TestCollection:
    def test_sources(self, client):
        data = client.get("/api/sources").json()["data"]
        assert data["sources"]
        assert data["feeds"]
        assert {"id", "name", "url"} <= set(data["feeds"][0])

    def test_source_stats(self, client):
        data = client.get("/api/sources/stats").json()["data"]
        assert data["rss_feeds"] > 0

    def test_run_in_background(self, client, idle_jobs):
        pipeline = MagicMock()
        pipeline.run.return_value = CollectionResult(run_id=7, sources_scraped=3, items_found=5, inserted=2)

        with patch("regintel.web.routes.collection.get_pipeline", return_value=pipeline):
            response = client.post("/api/collection/run", json={"include_rss": False})

        assert response.status_code == 202
        pipeline.run.assert_called_once_with(include_rss=False)
        status = client.get("/api/collection/status").json()
        assert status["running"] is False
        assert status["last_result"]["run_id"] == 7
        assert status["last_result"]["inserted"] == 2

    def test_run_without_body(self, client, idle_jobs):
        pipeline = MagicMock()
        pipeline.run.return_value = CollectionResult()

        with patch("regintel.web.routes.collection.get_pipeline", return_value=pipeline):
            assert client.post("/api/collection/run").status_code == 202

        pipeline.run.assert_called_once_with(include_rss=None)

    def test_failure_recorded(self, client, idle_jobs):
        with patch("regintel.web.routes.collection.get_pipeline", side_effect=RuntimeError("offline")):
            client.post("/api/collection/run")

        assert client.get("/api/collection/status").json()["error"] == "offline"

    def test_conflict_while_running(self, client, monkeypatch):
        monkeypatch.setattr(collection, "collection_status", {"running": True, "last_result": None, "error": None})
        assert client.post("/api/collection/run").status_code == 409

    @pytest.mark.asyncio
    async def test_second_start_conflicts_before_task_runs(self, idle_jobs, populated_db):
        tasks = BackgroundTasks()
        await collection.start_collection(tasks, None, populated_db)
        assert collection.collection_status["running"] is True

        with pytest.raises(HTTPException) as exc_info:
            await collection.start_collection(tasks, None, populated_db)

        assert exc_info.value.status_code == 409
        assert len(tasks.tasks) == 1

    def test_running_flag_cleared_after_task(self, idle_jobs, populated_db):
        with patch("regintel.web.routes.collection.get_pipeline", side_effect=RuntimeError("offline")):
            collection.collection_status["running"] = True
            collection.do_collection(populated_db)

        assert collection.collection_status["running"] is False
        assert collection.collection_status["error"] == "offline"

    @pytest.mark.asyncio
    async def test_second_enhancement_conflicts_before_task_runs(self, idle_jobs, populated_db):
        tasks = BackgroundTasks()
        await collection.start_enhancement(tasks, populated_db)

        with pytest.raises(HTTPException) as exc_info:
            await collection.start_enhancement(tasks, populated_db)

        assert exc_info.value.status_code == 409
        assert len(tasks.tasks) == 1

    def test_runs(self, client, populated_db):
        run_id = populated_db.create_collection_run()
        data = client.get("/api/collection/runs").json()["data"]
        assert data[0]["id"] == run_id

    def test_enhancement_run(self, client, idle_jobs, populated_db):
        assert client.post("/api/enhancement/run").status_code == 202
        status = client.get("/api/enhancement/status").json()
        assert status["last_result"] == {"enhanced": 4, "skipped": 0, "errors": 0}
        assert populated_db.get_statistics()["enhanced_updates"] == 4

    def test_enhancement_conflict(self, client, monkeypatch):
        monkeypatch.setattr(collection, "enhancement_status", {"running": True, "last_result": None, "error": None})
        assert client.post("/api/enhancement/run").status_code == 409


class TestDashboard:
    def test_stats(self, client):
        data = client.get("/api/dashboard/stats").json()["data"]
        assert data["total_updates"] == 4
        assert data["total_legal_cases"] == 1
        assert data["by_region"]["US"] == 1

    def test_trends(self, client):
        data = client.get("/api/dashboard/trends", params={"days": 90}).json()["data"]
        assert data["period_days"] == 90
        assert set(data["device_type_trends"]) == {"AI/ML Devices", "Digital Health", "Connected Devices"}

    def test_trends_days_bounds(self, client):
        assert client.get("/api/dashboard/trends", params={"days": 0}).status_code == 422

    def test_approval_metrics(self, client):
        data = client.get("/api/approval/metrics").json()["data"]
        assert data["service_name"] == "ApprovalService"
        assert "auto_approval" in data["thresholds"]

    def test_newsletter_with_ids(self, client):
        response = client.post("/api/newsletter/pdf", json={"update_ids": [1, 2, 999]})
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert "newsletter_Regulatory_Intelligence_Newsletter.pdf" in response.headers["content-disposition"]

    def test_newsletter_recent_by_region(self, client):
        response = client.post("/api/newsletter/pdf", json={"title": "EU weekly", "region": "EU", "limit": 5})
        assert response.content.startswith(b"%PDF")
        assert "newsletter_EU_weekly" in response.headers["content-disposition"]
