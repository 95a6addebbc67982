"""
Suggestion Service — project suggestions built on the pricing facts.

The fact sheet is deterministic.  Suggestion text comes from the LLM when it
is configured; any failure (no key, network error, empty or unusable reply)
falls back to templated suggestions, so callers always get a non-empty list.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Mapping

from assessment_engine.models.schemas import PricingBreakdown, ProjectFacts
from assessment_engine.rules.base_prices import project_type_label
from assessment_engine.rules.feature_registry import default_registry
from assessment_engine.services.assist_service import generate_ideas, suggest_features
from assessment_engine.services.llm_service import ai_available, llm_text_call
from assessment_engine.services.pricing_service import calculate_pricing
from assessment_engine.utils.answers import fold_keys, get_list, get_str
from assessment_engine.utils.formatting import money

logger = logging.getLogger(__name__)

_PROMPT_PATH = Path(__file__).resolve().parent.parent / "prompts" / "suggestions_prompt.txt"

MAX_SUGGESTIONS = 8
_BULLET = re.compile(r"^\s*(?:[-*•]+|\d+[.)])\s*")


# ── Fact sheet ───────────────────────────────────────────

def build_fact_sheet(answers: Mapping[str, Any] | None, breakdown: PricingBreakdown) -> ProjectFacts:
    """Structured facts about the project, shared by suggestions and proposals."""
    folded = fold_keys(answers)
    return ProjectFacts(
        project_name=get_str(folded, "project_name"),
        project_type=breakdown.project_type,
        project_type_label=project_type_label(breakdown.project_type),
        description=get_str(folded, "project_description"),
        target_audience=get_str(folded, "target_audience"),
        main_goals=get_list(folded, "main_goals"),
        features=[default_registry.label_for(f) for f in breakdown.features],
        timeline=get_str(folded, "preferred_timeline"),
        budget_range=get_str(folded, "budget_range"),
        pricing=breakdown,
    )


# ── LLM path ─────────────────────────────────────────────

def _build_prompt(facts: ProjectFacts) -> str:
    template = _PROMPT_PATH.read_text(encoding="utf-8")
    return template.replace("{facts}", facts.model_dump_json(by_alias=True, indent=2)[:8_000])


def _parse_suggestions(raw: str) -> list[str]:
    """One suggestion per non-empty line, list markers stripped."""
    lines: list[str] = []
    for line in raw.splitlines():
        cleaned = _BULLET.sub("", line).strip().strip("*").strip()
        if cleaned and not cleaned.startswith("#"):
            lines.append(cleaned)
    return lines[:MAX_SUGGESTIONS]


def _ai_suggestions(facts: ProjectFacts) -> list[str]:
    raw = llm_text_call(_build_prompt(facts), max_retries=1)
    logger.debug(f"Raw suggestion response ({len(raw)} chars):\n{raw[:2000]}")
    return _parse_suggestions(raw)


# ── Template path ────────────────────────────────────────

def template_suggestions(answers: Mapping[str, Any] | None, facts: ProjectFacts) -> list[str]:
    folded = fold_keys(answers)
    pricing = facts.pricing
    estimated = pricing.estimated_range
    suggestions: list[str] = []

    current = get_list(folded, "must_have_features") + facts.features
    for feature in suggest_features(facts.project_type, current)[:3]:
        suggestions.append(f"Consider adding: {feature}")

    if facts.features:
        suggestions.append(f"Selected features: {', '.join(facts.features)}")

    suggestions.append(
        f"Estimated investment: {money(estimated.low, pricing.currency)} – "
        f"{money(estimated.high, pricing.currency)} "
        f"(most likely {money(estimated.average, pricing.currency)})"
    )

    timeline_items = [
        item for item in pricing.line_items
        if item.feature_id and item.feature_id.startswith("timeline-")
    ]
    if timeline_items:
        item = timeline_items[0]
        suggestions.append(f"Timeline: {item.label} adjusts the estimate by {item.value:+.0%}")
    else:
        suggestions.append("Timeline: a standard delivery window keeps the estimate free of rush premiums")

    suggestions.extend(generate_ideas(get_str(folded, "project_description"), facts.project_type))
    return list(dict.fromkeys(suggestions))


# ── Public API ───────────────────────────────────────────

def generate_project_suggestions(
    answers: Mapping[str, Any] | None,
    breakdown: PricingBreakdown | None = None,
) -> list[str]:
    """Suggestions for an answer set. Never raises for LLM errors, never empty."""
    breakdown = breakdown or calculate_pricing(answers)
    facts = build_fact_sheet(answers, breakdown)

    if ai_available():
        try:
            suggestions = _ai_suggestions(facts)
            if suggestions:
                logger.info(f"Generated {len(suggestions)} AI suggestions")
                return suggestions
            logger.warning("LLM returned no usable suggestions — using template fallback")
        except Exception as e:
            logger.warning(f"LLM suggestion call failed — using template fallback: {e}")

    return template_suggestions(answers, facts)
