"""
Assessment Service — wires the pricing engine to assessment storage.

  submit()          → price the answers and persist a new assessment
  recalculate()     → replace answers and pricing of an existing assessment
  set_status()      → storage-owned status transition
  suggestions_for() / proposal_for() / budget_for() → derived documents
  export_for()      → proposal download (txt or printable HTML)
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Mapping, Optional

from assessment_engine.models.enums import AssessmentStatus
from assessment_engine.models.schemas import BudgetComparison, ProjectAssessment, ProposalDocument
from assessment_engine.persistence.assessment_repository import AssessmentRepository, get_repository
from assessment_engine.services.budget_service import compare_budget
from assessment_engine.services.pricing_service import calculate_pricing
from assessment_engine.services.proposal_export import EXPORT_FORMATS, UnsupportedExportFormat, export_proposal
from assessment_engine.services.proposal_service import generate_proposal
from assessment_engine.services.suggestion_service import generate_project_suggestions

logger = logging.getLogger(__name__)


class AssessmentNotFoundError(LookupError):
    def __init__(self, assessment_id: int):
        super().__init__(f"Assessment {assessment_id} not found")
        self.assessment_id = assessment_id


class AssessmentService:
    def __init__(self, repository: AssessmentRepository | None = None):
        self.repository = repository or get_repository()

    def submit(self, answers: Mapping[str, Any]) -> ProjectAssessment:
        breakdown = calculate_pricing(answers)
        record = self.repository.create_assessment(dict(answers), breakdown)
        logger.info(f"Assessment {record.id} submitted — subtotal {breakdown.subtotal}")
        return record

    def get(self, assessment_id: int) -> ProjectAssessment:
        record = self.repository.get_assessment_by_id(assessment_id)
        if record is None:
            raise AssessmentNotFoundError(assessment_id)
        return record

    def recalculate(self, assessment_id: int, answers: Mapping[str, Any]) -> ProjectAssessment:
        """Re-price *answers*; the new breakdown replaces the stored one."""
        breakdown = calculate_pricing(answers)
        record = self.repository.update_assessment(assessment_id, dict(answers), breakdown)
        if record is None:
            raise AssessmentNotFoundError(assessment_id)
        return record

    def set_status(self, assessment_id: int, status: str | AssessmentStatus) -> ProjectAssessment:
        """Raises ValueError for an unknown status."""
        new_status = AssessmentStatus(status)
        record = self.repository.update_status(assessment_id, new_status)
        if record is None:
            raise AssessmentNotFoundError(assessment_id)
        return record

    def list_assessments(self, status: Optional[str] = None) -> list[ProjectAssessment]:
        return self.repository.list_assessments(AssessmentStatus(status) if status else None)

    def suggestions_for(self, assessment_id: int) -> list[str]:
        record = self.get(assessment_id)
        return generate_project_suggestions(record.assessment_data, record.pricing_breakdown)

    def proposal_for(self, assessment_id: int, today: date | None = None) -> ProposalDocument:
        record = self.get(assessment_id)
        return generate_proposal(
            record.assessment_data,
            record.id,
            today=today,
            breakdown=record.pricing_breakdown,
        )

    def budget_for(self, assessment_id: int) -> BudgetComparison:
        record = self.get(assessment_id)
        return compare_budget(record.assessment_data, record.pricing_breakdown)

    def export_for(
        self,
        assessment_id: int,
        export_format: str = "pdf",
        today: date | None = None,
    ) -> tuple[str, str, str]:
        """Proposal plus suggestions rendered for download; see export_proposal()."""
        if export_format not in EXPORT_FORMATS:
            raise UnsupportedExportFormat(export_format)
        record = self.get(assessment_id)
        proposal = generate_proposal(
            record.assessment_data,
            record.id,
            today=today,
            breakdown=record.pricing_breakdown,
        )
        suggestions = generate_project_suggestions(record.assessment_data, record.pricing_breakdown)
        return export_proposal(proposal, suggestions, export_format)
