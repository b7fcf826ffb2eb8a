"""
Integration tests for the HTTP API.

The FastAPI app runs in-process through TestClient with the container's
Current RMS client replaced by an AsyncMock.
"""

import json

import pytest
from fastapi.testclient import TestClient

from avrisk.core.exceptions import UpstreamServiceError
from avrisk.main import app


pytestmark = pytest.mark.integration


@pytest.fixture
def client(test_container):
    return TestClient(app)


def _parse_sse(body: str) -> list[tuple[str, dict]]:
    events = []
    for block in body.strip().split("\n\n"):
        lines = dict(line.split(": ", 1) for line in block.splitlines())
        events.append((lines["event"], json.loads(lines["data"])))
    return events


class TestCatalogEndpoints:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_factors(self, client):
        data = client.get("/api/factors").json()

        assert len(data["factors"]) == 8
        assert data["total_weight"] == 8.0
        assert data["default_selection"]["budget_size"] == 3
        assert data["approval_roles"][-1] == "Executive Approval Required"
        assert [t["upper_bound"] for t in data["thresholds"]] == [2.0, 3.0, 4.0, None]

    def test_score_preview(self, client, all_threes):
        response = client.post("/api/assessments/score", json={"factors": all_threes})

        assert response.status_code == 200
        assert response.json()["score"] == 3.0
        assert response.json()["tier"] == "MEDIUM"
        assert response.json()["approval"] == "Senior Manager"

    def test_score_preview_invalid_selection(self, client, all_threes):
        all_threes["budget_size"] = 6

        response = client.post("/api/assessments/score", json={"factors": all_threes})

        assert response.status_code == 422
        assert response.json()["factor"] == "budget_size"


class TestDashboardEndpoints:

    def test_tiered_view(self, client):
        response = client.get("/api/opportunities")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 5
        assert [b["tier"] for b in data["buckets"]] == ["CRITICAL", "HIGH", "MEDIUM", "LOW", "UNSCORED"]
        assert data["meta"]["source"] == "current_rms"
        assert data["date_range"] == {"start": "2026-03-10", "end": "2026-04-09"}

    def test_filters_from_query(self, client):
        data = client.get(
            "/api/opportunities",
            params={"reviewed": "not_reviewed", "needs_reassessment": "true"},
        ).json()

        ids = [op["id"] for bucket in data["buckets"] for op in bucket["opportunities"]]
        assert ids == [5]

    def test_invalid_filter_value(self, client):
        response = client.get("/api/opportunities", params={"date_range": "90-120"})

        assert response.status_code == 422

    def test_demo_fallback_notice(self, client, mock_rms_client):
        mock_rms_client.list_opportunities.side_effect = UpstreamServiceError("Unauthorized", status_code=401)

        data = client.get("/api/opportunities").json()

        assert data["meta"]["source"] == "demo"
        assert "Unauthorized" in data["meta"]["notice"]

    def test_stream_events(self, client):
        response = client.get("/api/opportunities/stream")

        events = _parse_sse(response.text)
        kinds = [kind for kind, _ in events]
        assert response.headers["content-type"].startswith("text/event-stream")
        assert kinds == ["status", "page", "page", "page", "result"]
        assert [data["loaded"] for kind, data in events if kind == "page"] == [2, 4, 5]
        assert events[-1][1]["count"] == 5


class TestOpportunityEndpoints:

    def test_detail(self, client):
        client.get("/api/opportunities")

        data = client.get("/api/opportunities/3").json()

        assert data["opportunity"]["subject"] == "Festival"
        assert data["opportunity"]["tier"] == "HIGH"
        assert data["approval"] == "Operations Director"
        assert data["needs_reassessment"] is True
        assert data["form_selection"]["project_novelty"] == 3

    def test_unknown_id(self, client, mock_rms_client):
        mock_rms_client.get_opportunity.side_effect = UpstreamServiceError("Not found", status_code=404)

        response = client.get("/api/opportunities/999")

        assert response.status_code == 404

    def test_save_assessment(self, client, mock_rms_client, all_threes):
        client.get("/api/opportunities")

        response = client.put(
            "/api/opportunities/4/assessment",
            json={"factors": all_threes, "reviewed": True, "mitigation_plan": 2, "mitigation_notes": "done"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["assessment"]["tier"] == "MEDIUM"
        assert data["opportunity"]["risk"]["reviewed"] is True
        mock_rms_client.update_opportunity.assert_awaited_once()

    def test_save_upstream_failure_is_502(self, client, mock_rms_client, all_threes):
        client.get("/api/opportunities")
        mock_rms_client.update_opportunity.side_effect = UpstreamServiceError(
            "Custom field risk_score is invalid", status_code=422
        )

        response = client.put("/api/opportunities/4/assessment", json={"factors": all_threes})

        assert response.status_code == 502
        assert response.json()["detail"] == "Custom field risk_score is invalid"

    def test_save_invalid_selection_is_422(self, client, mock_rms_client, all_threes):
        del all_threes["team_experience"]

        response = client.put("/api/opportunities/4/assessment", json={"factors": all_threes})

        assert response.status_code == 422
        mock_rms_client.update_opportunity.assert_not_called()


class TestProxyEndpoint:

    def test_passthrough(self, client, mock_rms_client):
        mock_rms_client.call.return_value = {"members": []}

        response = client.post("/api/current-rms", json={"endpoint": "members", "method": "GET"})

        assert response.status_code == 200
        assert response.json() == {"members": []}
        mock_rms_client.call.assert_awaited_once_with("members", "GET", body=None)

    def test_method_not_allowed(self, client):
        response = client.post("/api/current-rms", json={"endpoint": "members", "method": "TRACE"})

        assert response.status_code == 422
