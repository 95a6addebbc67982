"""
Proposal Service — assembles a ProposalDocument from answers and pricing.

Everything except the narrative is deterministic.  The timeline scales the
project type's base weeks by its complexity and by the priced data-storage
rule.  The final total is the subtotal rounded to the configured step, and
the payment schedule splits that total by the configured shares with the
last milestone absorbing rounding.  The narrative is LLM prose when
available, otherwise a templated summary.
"""

from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Mapping

from assessment_engine.models.enums import ContentSource
from assessment_engine.models.schemas import (
    Expectations,
    PaymentMilestone,
    PricingBreakdown,
    ProjectFacts,
    ProjectOverview,
    ProposalDocument,
    ProposalPricing,
    ProposalTimeline,
    ScopeOfWork,
    TimelinePhase,
)
from assessment_engine.rules.modifier_rules import round_currency
from assessment_engine.rules.normalizer import LABEL_KEYS
from assessment_engine.rules.rules_config import PricingConfig
from assessment_engine.services.budget_service import budget_range
from assessment_engine.services.llm_service import ai_available, llm_text_call
from assessment_engine.services.pricing_service import get_pricing_service
from assessment_engine.services.suggestion_service import build_fact_sheet
from assessment_engine.utils.answers import fold_keys, get_bool, get_list, get_str
from assessment_engine.utils.formatting import money, weeks_label

logger = logging.getLogger(__name__)

_PROMPT_PATH = Path(__file__).resolve().parent.parent / "prompts" / "proposal_narrative_prompt.txt"

DEFAULT_BASE_WEEKS = 10
RUSH_TIMELINE_FACTOR = 0.8
RUSH_TIMELINES = ("asap", "1-3-months")
DATA_RULE_PREFIX = "data-"

BASE_WEEKS: dict[str, int] = {
    "website": 4,
    "web-app": 12,
    "mobile-app": 16,
    "ecommerce": 10,
    "saas": 20,
    "api": 8,
    "other": 10,
}

# (phase, share of total weeks, deliverables)
PHASES: tuple[tuple[str, float, tuple[str, ...]], ...] = (
    ("Discovery & Planning", 0.15, (
        "Project requirements document",
        "Technical architecture plan",
        "Design mockups and wireframes",
        "Project timeline and milestones",
    )),
    ("Design & Development", 0.6, (
        "UI/UX design implementation",
        "Core functionality development",
        "Integration setup",
        "Testing and quality assurance",
    )),
    ("Testing & Refinement", 0.15, (
        "Comprehensive testing",
        "Bug fixes and refinements",
        "Performance optimization",
        "Client review and feedback implementation",
    )),
    ("Launch & Handoff", 0.1, (
        "Production deployment",
        "Documentation delivery",
        "Training and knowledge transfer",
        "Post-launch support setup",
    )),
)

CLIENT_RESPONSIBILITIES = [
    "Provide timely feedback on designs and development milestones",
    "Supply all necessary content, images, and brand assets",
    "Respond to questions and requests within 2 business days",
    "Participate in scheduled review meetings",
    "Approve milestones before proceeding to next phase",
    "Provide access to necessary third-party services and accounts",
]

OUR_COMMITMENTS = [
    "Deliver high-quality code following industry best practices",
    "Meet agreed-upon milestones and deadlines",
    "Provide regular progress updates and communication",
    "Ensure responsive design across all devices",
    "Implement security best practices",
    "Provide comprehensive documentation",
    "Offer 30 days of post-launch support",
]

COMMUNICATION = (
    "We will communicate primarily via email with scheduled video calls for major "
    "milestones. Response time: within 24 hours on business days."
)

NEXT_STEPS = [
    "Review this proposal and discuss any questions or concerns",
    "Confirm project scope and timeline",
    "Sign the project agreement",
    "Provide initial payment to begin project kickoff",
    "Schedule kickoff meeting to discuss project details",
]


def _ceil(value: float) -> int:
    # 12 × 1.1 is 13.200000000000001 in floating point
    return math.ceil(round(value, 6))


# ── Sections ─────────────────────────────────────────────

def final_total(subtotal: int, step: int) -> int:
    """Subtotal rounded half up to the nearest *step*."""
    return round_currency(subtotal / step) * step


def data_complexity(breakdown: PricingBreakdown) -> float:
    """Schedule factor of the priced data-storage rule (1.0 when none applied)."""
    for item in breakdown.line_items:
        if item.feature_id and item.feature_id.startswith(DATA_RULE_PREFIX):
            return 1 + item.value
    return 1.0


def build_timeline(answers: Mapping[str, Any], breakdown: PricingBreakdown, start: date) -> ProposalTimeline:
    base_weeks = BASE_WEEKS.get(breakdown.project_type, DEFAULT_BASE_WEEKS)
    rush = get_str(answers, "preferred_timeline") in RUSH_TIMELINES
    total_weeks = _ceil(
        base_weeks
        * breakdown.complexity_multiplier
        * data_complexity(breakdown)
        * (RUSH_TIMELINE_FACTOR if rush else 1)
    )

    phases = []
    for name, share, deliverables in PHASES:
        weeks = _ceil(total_weeks * share)
        phases.append(TimelinePhase(
            phase=name,
            weeks=weeks,
            duration=weeks_label(weeks),
            deliverables=list(deliverables),
        ))

    return ProposalTimeline(
        phases=phases,
        total_weeks=total_weeks,
        total_duration=f"{weeks_label(total_weeks)} (approximately {_ceil(total_weeks / 4)} months)",
        start_date=start,
    )


def build_scope(answers: Mapping[str, Any], facts: ProjectFacts) -> ScopeOfWork:
    requested: list[str] = []
    for key in LABEL_KEYS:
        requested.extend(get_list(answers, key))
    features = list(dict.fromkeys(requested)) or facts.features

    technical: list[str] = []
    data_storage = get_str(answers, "data_storage")
    if data_storage:
        technical.append(f"Data Storage: {data_storage}")
    authentication = get_str(answers, "user_authentication")
    if authentication:
        technical.append(f"Authentication: {authentication}")
    if get_bool(answers, "payment_processing"):
        technical.append("Payment Processing Integration")
    if get_bool(answers, "real_time_features"):
        technical.append("Real-time Features")
    api = get_str(answers, "api_requirements")
    if api and api != "none":
        technical.append(f"API Requirements: {api}")
    cms = get_str(answers, "content_management")
    if cms:
        technical.append(f"Content Management: {cms}")
    if get_bool(answers, "responsive_design"):
        technical.append("Responsive Design (Mobile, Tablet, Desktop)")
    accessibility = get_str(answers, "accessibility_requirements")
    if accessibility:
        technical.append(f"Accessibility: {accessibility}")

    return ScopeOfWork(
        features=features,
        nice_to_have_features=get_list(answers, "nice_to_have_features"),
        platforms=get_list(answers, "platform"),
        integrations=get_list(answers, "integrations"),
        technical_requirements=technical,
    )


def build_deliverables(answers: Mapping[str, Any], breakdown: PricingBreakdown) -> list[str]:
    deliverables = [
        "Fully functional application/website",
        "Source code and documentation",
        "Deployment to production environment",
        "User documentation and guides",
        "Admin panel (if applicable)",
    ]
    if get_bool(answers, "has_brand_guidelines"):
        deliverables.append("Brand guideline implementation")
    if any(item.category == "Design" for item in breakdown.line_items):
        deliverables.append("Custom design system")
        deliverables.append("Design assets and style guide")
    cms = get_str(answers, "content_management")
    if cms and cms != "static":
        deliverables.append("Content management system setup")
    deliverables.append("Post-launch support (30 days)")
    return deliverables


def payment_schedule(total: int, config: PricingConfig) -> list[PaymentMilestone]:
    """Split *total* by the configured shares; the last milestone takes the remainder."""
    milestones: list[PaymentMilestone] = []
    paid = 0
    for index, (name, share, due) in enumerate(config.payment_schedule):
        if index == len(config.payment_schedule) - 1:
            amount = total - paid
        else:
            amount = round_currency(total * share)
            paid += amount
        milestones.append(PaymentMilestone(milestone=name, amount=amount, due=due))
    return milestones


def is_low_budget(answers: Mapping[str, Any], config: PricingConfig) -> bool:
    selected = get_str(answers, "budget_range")
    _, budget_max = budget_range(selected)
    return selected == "under-5k" or (budget_max is not None and budget_max < config.low_budget_threshold)


def build_next_steps(low_budget: bool) -> list[str]:
    steps = list(NEXT_STEPS)
    if low_budget:
        steps.insert(0, "Consider the realistic scope options provided for your budget")
        steps.append("Discuss phased approach if needed to fit budget constraints")
    return steps


def low_budget_notes(total: int, config: PricingConfig) -> str:
    currency = config.currency
    return "\n".join([
        "REALISTIC PROPOSAL FOR YOUR BUDGET",
        "",
        f"Your budget is under {money(config.low_budget_threshold, currency)}. To provide the best "
        "value and realistic expectations, we recommend one of the following approaches.",
        "",
        "Option 1: Phased Development Approach",
        f"  Phase 1: MVP (Minimum Viable Product) - {money(round_currency(total * 0.6), currency)}",
        "    Core functionality, essential features, basic design, launch-ready foundation",
        f"  Phase 2: Enhancements - {money(round_currency(total * 0.4), currency)}",
        "    Additional features, design refinements, performance optimization, advanced integrations",
        "",
        "Option 2: Simplified Scope",
        "  Core functionality, responsive design, basic integrations, standard design",
        "",
        "Option 3: Template-Based Solution",
        "  A customized professional template with your branding and content, "
        "delivered faster at lower cost",
        "",
        f"RECOMMENDED TOTAL: {money(total, currency)}",
    ])


# ── Narrative ────────────────────────────────────────────

def template_narrative(facts: ProjectFacts, total: int, timeline: ProposalTimeline) -> str:
    pricing = facts.pricing
    name = facts.project_name or "your project"
    audience = f" for {facts.target_audience}" if facts.target_audience else ""
    parts = [f"We propose to build {name}, a {facts.project_type_label.lower()}{audience}."]
    if facts.description:
        parts.append(facts.description.rstrip(".") + ".")
    if facts.features:
        parts.append(f"The scope includes {', '.join(facts.features)}.")
    parts.append(
        f"The investment is {money(total, pricing.currency)} "
        f"(estimated range {money(pricing.estimated_range.low, pricing.currency)} – "
        f"{money(pricing.estimated_range.high, pricing.currency)}), "
        f"delivered over {timeline.total_duration}."
    )
    return " ".join(parts)


def _ai_narrative(facts: ProjectFacts, total: int, timeline: ProposalTimeline) -> str:
    template = _PROMPT_PATH.read_text(encoding="utf-8")
    prompt = (
        template
        .replace("{facts}", facts.model_dump_json(by_alias=True, indent=2)[:8_000])
        .replace("{final_total}", money(total, facts.pricing.currency))
        .replace("{total_duration}", timeline.total_duration)
    )
    return llm_text_call(prompt, max_retries=1).strip()


# ── Public API ───────────────────────────────────────────

def generate_proposal(
    answers: Mapping[str, Any] | None,
    assessment_id: int,
    today: date | None = None,
    breakdown: PricingBreakdown | None = None,
) -> ProposalDocument:
    """Assemble the proposal for one assessment."""
    folded = fold_keys(answers)
    service = get_pricing_service()
    config = service.config
    breakdown = breakdown or service.calculate_pricing(folded)
    facts = build_fact_sheet(folded, breakdown)
    today = today or date.today()

    total = final_total(breakdown.subtotal, config.final_total_step)
    timeline = build_timeline(folded, breakdown, today + timedelta(days=config.start_offset_days))
    low_budget = is_low_budget(folded, config)

    narrative = ""
    generated_by = ContentSource.TEMPLATE
    if ai_available():
        try:
            narrative = _ai_narrative(facts, total, timeline)
            if narrative:
                generated_by = ContentSource.AI
        except Exception as e:
            logger.warning(f"LLM narrative call failed — using template fallback: {e}")
    if not narrative:
        narrative = template_narrative(facts, total, timeline)

    logger.info(
        f"Proposal assembled for assessment {assessment_id}: total={total} "
        f"weeks={timeline.total_weeks} low_budget={low_budget} narrative={generated_by.value}"
    )

    return ProposalDocument(
        assessment_id=assessment_id,
        title=f"Professional Proposal: {facts.project_name or facts.project_type_label}",
        client_name=get_str(folded, "name"),
        client_email=get_str(folded, "email"),
        proposal_date=today,
        project_overview=ProjectOverview(
            project_name=facts.project_name,
            project_type=get_str(folded, "project_type") or facts.project_type,
            description=facts.description,
            target_audience=facts.target_audience,
            main_goals=facts.main_goals,
        ),
        scope_of_work=build_scope(folded, facts),
        timeline=timeline,
        pricing=ProposalPricing(
            breakdown=breakdown,
            final_total=total,
            payment_schedule=payment_schedule(total, config),
        ),
        deliverables=build_deliverables(folded, breakdown),
        expectations=Expectations(
            client_responsibilities=list(CLIENT_RESPONSIBILITIES),
            our_commitments=list(OUR_COMMITMENTS),
            communication=COMMUNICATION,
        ),
        next_steps=build_next_steps(low_budget),
        special_notes=low_budget_notes(total, config) if low_budget else None,
        narrative=narrative,
        facts=facts,
        generated_by=generated_by,
    )
