"""
Data schemas produced by the pricing engine and its assembly services.

Attributes are snake_case in Python; ``model_dump(by_alias=True)`` yields the
camelCase shape the questionnaire front end consumes.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import (
    AssessmentStatus,
    BudgetAlignment,
    ContentSource,
    LineItemKind,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Pricing ──────────────────────────────────────────────


class LineItem(CamelModel):
    """One justified amount in a pricing breakdown."""
    label: str
    amount: float
    kind: LineItemKind
    feature_id: Optional[str] = None
    category: str = ""
    value: float = 0.0  # raw rule value: currency for additive, fraction for multiplicative


class EstimatedRange(CamelModel):
    low: int
    average: int
    high: int


class MarketComparison(CamelModel):
    low: int
    high: int
    average: int


class PricingBreakdown(CamelModel):
    """Result of one pricing calculation. Never mutated after creation."""
    model_config = ConfigDict(frozen=True)

    subtotal: int
    estimated_range: EstimatedRange
    line_items: list[LineItem] = []
    base_price: float
    total_multiplier: float = 1.0
    complexity_multiplier: float = 1.0
    project_type: str = "default"
    features: list[str] = []
    market_comparison: Optional[MarketComparison] = None
    currency: str = "USD"


# ── Storage ──────────────────────────────────────────────


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProjectAssessment(CamelModel):
    """Persisted assessment record (owned by the storage collaborator)."""
    id: int
    assessment_data: dict[str, Any] = {}
    pricing_breakdown: Optional[PricingBreakdown] = None
    status: AssessmentStatus = AssessmentStatus.PENDING
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


# ── Suggestions / proposal ───────────────────────────────


class ProjectFacts(CamelModel):
    """Structured facts handed to the text-generation collaborator."""
    project_name: str = ""
    project_type: str = ""
    project_type_label: str = ""
    description: str = ""
    target_audience: str = ""
    main_goals: list[str] = []
    features: list[str] = []  # display names, registration order
    timeline: str = ""
    budget_range: str = ""
    pricing: PricingBreakdown


class ProjectOverview(CamelModel):
    project_name: str = ""
    project_type: str = ""
    description: str = ""
    target_audience: str = ""
    main_goals: list[str] = []


class ScopeOfWork(CamelModel):
    features: list[str] = []
    nice_to_have_features: list[str] = []
    platforms: list[str] = []
    integrations: list[str] = []
    technical_requirements: list[str] = []


class TimelinePhase(CamelModel):
    phase: str
    weeks: int
    duration: str
    deliverables: list[str] = []


class ProposalTimeline(CamelModel):
    phases: list[TimelinePhase] = []
    total_weeks: int
    total_duration: str
    start_date: date


class PaymentMilestone(CamelModel):
    milestone: str
    amount: int
    due: str


class ProposalPricing(CamelModel):
    breakdown: PricingBreakdown
    final_total: int
    payment_schedule: list[PaymentMilestone] = []


class Expectations(CamelModel):
    client_responsibilities: list[str] = []
    our_commitments: list[str] = []
    communication: str = ""


class ProposalDocument(CamelModel):
    """Draft proposal assembled from the answers and the pricing breakdown."""
    assessment_id: int
    title: str
    client_name: str = ""
    client_email: str = ""
    proposal_date: date
    project_overview: ProjectOverview
    scope_of_work: ScopeOfWork
    timeline: ProposalTimeline
    pricing: ProposalPricing
    deliverables: list[str] = []
    expectations: Expectations
    next_steps: list[str] = []
    special_notes: Optional[str] = None
    narrative: str = ""
    facts: ProjectFacts
    generated_by: ContentSource = ContentSource.TEMPLATE


# ── Budget comparison ────────────────────────────────────


class ActionItem(CamelModel):
    type: str  # increase-budget | reduce-scope | phase-project | optimize-features
    priority: str  # high | medium | low
    title: str
    description: str
    impact: str = ""


class BudgetAlternative(CamelModel):
    feature: str
    alternative: str
    cost_savings: int


class BudgetComparison(CamelModel):
    selected: str = "discuss"
    budget_min: int = 0
    budget_max: Optional[int] = None  # None = open-ended
    estimated_total: int
    estimated_range: EstimatedRange
    status: BudgetAlignment
    percentage_difference: int = 0
    message: str = ""
    recommendation: str = ""
    budget_friendly_alternatives: list[BudgetAlternative] = []
    action_items: list[ActionItem] = []
