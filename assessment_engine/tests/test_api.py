"""
Tests: HTTP layer.

Run with:
    pytest assessment_engine/tests/test_api.py -v
"""

import pytest
from fastapi.testclient import TestClient

from assessment_engine.api import create_app
from assessment_engine.api.routes import get_assessment_service
from assessment_engine.persistence.assessment_repository import InMemoryAssessmentRepository
from assessment_engine.services import proposal_service, suggestion_service
from assessment_engine.services.assessment_service import AssessmentService


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(suggestion_service, "ai_available", lambda: False)
    monkeypatch.setattr(proposal_service, "ai_available", lambda: False)

    app = create_app()
    service = AssessmentService(InMemoryAssessmentRepository())
    app.dependency_overrides[get_assessment_service] = lambda: service
    return TestClient(app)


def _submit(client, answers=None) -> int:
    response = client.post("/api/assessment", json=answers or {"projectType": "web-app"})
    assert response.status_code == 200
    return response.json()["assessment"]["id"]


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestPricingEndpoint:
    def test_prices_answers(self, client):
        response = client.post(
            "/api/assessment/pricing",
            json={"projectType": "web-app", "features": ["Shopping Cart", "Payment Processing"]},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["pricing"]["subtotal"] == 26950
        assert body["pricing"]["estimatedRange"]["average"] == 26950
        assert len(body["pricing"]["lineItems"]) == 4

    def test_empty_object(self, client):
        body = client.post("/api/assessment/pricing", json={}).json()
        assert body["pricing"]["subtotal"] == 6000

    def test_non_object_body(self, client):
        response = client.post("/api/assessment/pricing", json=["not", "an", "object"])
        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to calculate pricing"}

    def test_infinite_count_is_priced(self, client):
        response = client.post(
            "/api/assessment/pricing",
            content=b'{"features": ["Integrations"], "integrations": Infinity}',
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 200
        assert response.json()["pricing"]["subtotal"] == 7000

    def test_invalid_json(self, client):
        response = client.post(
            "/api/assessment/pricing",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 500


class TestAssessmentEndpoints:
    def test_create_and_fetch(self, client):
        assessment_id = _submit(client)
        body = client.get(f"/api/assessment/{assessment_id}").json()
        assert body["assessment"]["assessmentData"] == {"projectType": "web-app"}
        assert body["assessment"]["pricingBreakdown"]["projectType"] == "web-app"
        assert body["assessment"]["status"] == "pending"

    def test_missing_assessment(self, client):
        assert client.get("/api/assessment/999").status_code == 404
        assert client.get("/api/assessment/999/proposal").status_code == 404

    def test_update_recalculates(self, client):
        assessment_id = _submit(client, {"projectType": "website"})
        response = client.put(
            f"/api/assessment/{assessment_id}",
            json={"projectType": "website", "features": ["Admin Panel"]},
        )
        assert response.status_code == 200
        assert response.json()["assessment"]["pricingBreakdown"]["subtotal"] == 6100

    def test_status_update(self, client):
        assessment_id = _submit(client)
        response = client.patch(f"/api/assessment/{assessment_id}/status", json={"status": "reviewed"})
        assert response.json()["assessment"]["status"] == "reviewed"

    def test_invalid_status(self, client):
        assessment_id = _submit(client)
        response = client.patch(f"/api/assessment/{assessment_id}/status", json={"status": "lost"})
        assert response.status_code == 400

    def test_list(self, client):
        _submit(client)
        _submit(client)
        body = client.get("/api/assessment").json()
        assert len(body["assessments"]) == 2
        assert client.get("/api/assessment?status=bogus").status_code == 400

    def test_suggestions(self, client):
        assessment_id = _submit(client)
        body = client.get(f"/api/assessment/{assessment_id}/suggestions").json()
        assert body["success"] is True
        assert body["suggestions"]

    def test_proposal(self, client):
        assessment_id = _submit(client, {"projectType": "website", "projectName": "Trailhead"})
        proposal = client.get(f"/api/assessment/{assessment_id}/proposal").json()["proposal"]
        assert proposal["title"] == "Professional Proposal: Trailhead"
        assert proposal["pricing"]["finalTotal"] == 3600
        assert proposal["generatedBy"] == "template"

    def test_budget_comparison(self, client):
        assessment_id = _submit(client, {"projectType": "website", "budgetRange": "5k-10k"})
        comparison = client.get(f"/api/assessment/{assessment_id}/budget-comparison").json()["comparison"]
        assert comparison["status"] == "under-budget"
        assert comparison["budgetMax"] == 10000


class TestAiAssist:
    def test_improve_description(self, client):
        response = client.post(
            "/api/assessment/ai-assist",
            json={"type": "improve-description", "context": "a booking site"},
        )
        assert response.status_code == 200
        assert response.json()["improvedText"].startswith("A booking site.")

    def test_suggest_features(self, client):
        response = client.post(
            "/api/assessment/ai-assist",
            json={"type": "suggest-features", "context": "website", "currentAnswers": {"mustHaveFeatures": ["Contact form"]}},
        )
        assert "Contact form" not in response.json()["suggestions"]

    def test_invalid_type(self, client):
        response = client.post("/api/assessment/ai-assist", json={"type": "do-everything"})
        assert response.status_code == 400


class TestExportEndpoint:
    def test_txt_download(self, client):
        assessment_id = _submit(client, {"projectType": "website", "projectName": "Trailhead"})
        response = client.get(f"/api/assessment/{assessment_id}/export?format=txt")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.headers["content-disposition"] == f'attachment; filename="proposal-{assessment_id}.txt"'
        assert response.text.startswith("Professional Proposal: Trailhead")
        assert "PROJECT SUGGESTIONS & RECOMMENDATIONS" in response.text

    def test_default_is_printable_html(self, client):
        assessment_id = _submit(client)
        response = client.get(f"/api/assessment/{assessment_id}/export")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert response.text.startswith("<!DOCTYPE html>")

    def test_unsupported_format(self, client):
        assessment_id = _submit(client)
        response = client.get(f"/api/assessment/{assessment_id}/export?format=docx")
        assert response.status_code == 400
        assert response.json() == {"detail": "Unsupported format"}

    def test_missing_assessment(self, client):
        assert client.get("/api/assessment/999/export?format=txt").status_code == 404
