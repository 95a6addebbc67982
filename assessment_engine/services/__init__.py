"""Services — pricing, suggestions, proposals, budget comparison, assistance, assessments."""

from assessment_engine.services.pricing_service import PricingService, calculate_pricing
from assessment_engine.services.suggestion_service import build_fact_sheet, generate_project_suggestions
from assessment_engine.services.proposal_service import generate_proposal
from assessment_engine.services.proposal_export import export_proposal
from assessment_engine.services.budget_service import compare_budget
from assessment_engine.services.assessment_service import AssessmentNotFoundError, AssessmentService

__all__ = [
    "PricingService",
    "calculate_pricing",
    "build_fact_sheet",
    "generate_project_suggestions",
    "generate_proposal",
    "export_proposal",
    "compare_budget",
    "AssessmentNotFoundError",
    "AssessmentService",
]
