"""
API routes — thin HTTP layer that delegates to the services.

Routes:
  GET   /health                                  → API health check
  POST  /api/assessment/pricing                  → Price a (partial) answer set
  POST  /api/assessment                          → Submit an assessment
  GET   /api/assessment                          → List assessments (optional ?status=)
  GET   /api/assessment/{id}                     → Fetch one assessment
  PUT   /api/assessment/{id}                     → Replace answers and re-price
  PATCH /api/assessment/{id}/status              → Status transition
  GET   /api/assessment/{id}/suggestions         → Project suggestions
  GET   /api/assessment/{id}/proposal            → Proposal document
  GET   /api/assessment/{id}/budget-comparison   → Budget vs estimate
  GET   /api/assessment/{id}/export?format=      → Proposal download (txt | html | pdf)
  POST  /api/assessment/ai-assist                → Wizard assistance helpers
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from pydantic import BaseModel

from assessment_engine.config import get_settings
from assessment_engine.models.schemas import CamelModel
from assessment_engine.services.assessment_service import AssessmentNotFoundError, AssessmentService
from assessment_engine.services.assist_service import assist
from assessment_engine.services.pricing_service import calculate_pricing
from assessment_engine.services.proposal_export import UnsupportedExportFormat

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
assessment_router = APIRouter()

_service: AssessmentService | None = None


def get_assessment_service() -> AssessmentService:
    global _service
    if _service is None:
        _service = AssessmentService()
    return _service


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True)


# ── Request schemas ──────────────────────────────────────
class StatusUpdate(BaseModel):
    status: str


class AssistRequest(CamelModel):
    type: str
    context: Any = ""
    current_answers: Optional[dict[str, Any]] = None


# ── Health ───────────────────────────────────────────────

@health_router.get("/health")
async def health_check():
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.app_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ── Pricing (stateless) ──────────────────────────────────

@assessment_router.post("/pricing")
async def price_answers(request: Request):
    try:
        body = await request.json()
        if not isinstance(body, dict):
            raise TypeError(f"Expected a JSON object, got {type(body).__name__}")
        breakdown = calculate_pricing(body)
    except Exception as e:
        logger.error(f"Error calculating pricing: {e}")
        raise HTTPException(status_code=500, detail="Failed to calculate pricing")
    return {"success": True, "pricing": _dump(breakdown)}


# ── Assistance ───────────────────────────────────────────

@assessment_router.post("/ai-assist")
async def ai_assist(body: AssistRequest):
    try:
        return assist(body.type, body.context, body.current_answers)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid assistance type")


# ── Stored assessments ───────────────────────────────────

@assessment_router.post("")
def submit_assessment(
    answers: dict[str, Any],
    service: AssessmentService = Depends(get_assessment_service),
):
    record = service.submit(answers)
    return {"success": True, "assessment": _dump(record)}


@assessment_router.get("")
def list_assessments(
    status: Optional[str] = None,
    service: AssessmentService = Depends(get_assessment_service),
):
    try:
        records = service.list_assessments(status)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid status: {status}")
    return {"success": True, "assessments": [_dump(r) for r in records]}


@assessment_router.get("/{assessment_id}")
def get_assessment(assessment_id: int, service: AssessmentService = Depends(get_assessment_service)):
    try:
        record = service.get(assessment_id)
    except AssessmentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "assessment": _dump(record)}


@assessment_router.put("/{assessment_id}")
def update_assessment(
    assessment_id: int,
    answers: dict[str, Any],
    service: AssessmentService = Depends(get_assessment_service),
):
    try:
        record = service.recalculate(assessment_id, answers)
    except AssessmentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "assessment": _dump(record)}


@assessment_router.patch("/{assessment_id}/status")
def update_status(
    assessment_id: int,
    body: StatusUpdate,
    service: AssessmentService = Depends(get_assessment_service),
):
    try:
        record = service.set_status(assessment_id, body.status)
    except AssessmentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid status: {body.status}")
    return {"success": True, "assessment": _dump(record)}


@assessment_router.get("/{assessment_id}/suggestions")
def get_suggestions(assessment_id: int, service: AssessmentService = Depends(get_assessment_service)):
    try:
        suggestions = service.suggestions_for(assessment_id)
    except AssessmentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "suggestions": suggestions}


@assessment_router.get("/{assessment_id}/proposal")
def get_proposal(assessment_id: int, service: AssessmentService = Depends(get_assessment_service)):
    try:
        proposal = service.proposal_for(assessment_id)
    except AssessmentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "proposal": _dump(proposal)}


@assessment_router.get("/{assessment_id}/budget-comparison")
def get_budget_comparison(assessment_id: int, service: AssessmentService = Depends(get_assessment_service)):
    try:
        comparison = service.budget_for(assessment_id)
    except AssessmentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True, "comparison": _dump(comparison)}


@assessment_router.get("/{assessment_id}/export")
def download_proposal(
    assessment_id: int,
    export_format: str = Query("pdf", alias="format"),
    service: AssessmentService = Depends(get_assessment_service),
):
    try:
        body, media_type, disposition = service.export_for(assessment_id, export_format)
    except UnsupportedExportFormat:
        raise HTTPException(status_code=400, detail="Unsupported format")
    except AssessmentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(content=body, media_type=media_type, headers={"Content-Disposition": disposition})
