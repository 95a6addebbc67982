"""
Budget Service — compares the client's selected budget range with the estimate.

Alignment of the estimated subtotal against [budget_min, budget_max]:
  aligned             min <= total <= max
  under-budget        total < min
  over-budget         max < total <= max × 1.2
  significantly-over  total > max × 1.2
  undisclosed         no budget range selected ("discuss" or unknown)
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from assessment_engine.models.enums import BudgetAlignment
from assessment_engine.models.schemas import (
    ActionItem,
    BudgetAlternative,
    BudgetComparison,
    PricingBreakdown,
)
from assessment_engine.rules.feature_registry import default_registry
from assessment_engine.rules.modifier_rules import default_rule_book, round_currency
from assessment_engine.services.pricing_service import calculate_pricing
from assessment_engine.utils.answers import fold_keys, get_str
from assessment_engine.utils.formatting import money

logger = logging.getLogger(__name__)

DISCUSS = "discuss"
OVER_BUDGET_TOLERANCE = 1.2
INCREASE_BUDGET_THRESHOLD = 50  # percent over the budget midpoint

BUDGET_RANGES: dict[str, tuple[int, Optional[int]]] = {
    "under-5k": (0, 5000),
    "1-2k": (1000, 2000),
    "2-5k": (2000, 5000),
    "5k-10k": (5000, 10000),
    "10k-25k": (10000, 25000),
    "25k-50k": (25000, 50000),
    "50k-100k": (50000, 100000),
    "100k+": (100000, 500000),
    DISCUSS: (0, None),
}

# Costly feature → cheaper feature that covers the same need
ALTERNATIVES: tuple[tuple[str, str, str], ...] = (
    ("custom-cms", "headless-cms", "Headless CMS (Contentful/Strapi)"),
    ("enterprise-sso", "social-login", "Social Login (Google/Facebook)"),
)


def budget_range(selected: str | None) -> tuple[int, Optional[int]]:
    """(min, max) for a budget option; max is None when open-ended."""
    return BUDGET_RANGES.get(selected or DISCUSS, BUDGET_RANGES[DISCUSS])


def _rule_value(feature_id: str) -> float:
    rule = default_rule_book.rule_for(feature_id)
    return rule.value if rule is not None else 0.0


def budget_friendly_alternatives(features: list[str]) -> list[BudgetAlternative]:
    selected = set(features)
    alternatives: list[BudgetAlternative] = []
    for costly, cheaper, description in ALTERNATIVES:
        if costly in selected:
            alternatives.append(BudgetAlternative(
                feature=default_registry.label_for(costly),
                alternative=description,
                cost_savings=round_currency(_rule_value(costly) - _rule_value(cheaper)),
            ))
    if {"ios-app", "android-app"} <= selected:
        alternatives.append(BudgetAlternative(
            feature="Native iOS + Android Apps",
            alternative="Progressive Web App (PWA)",
            cost_savings=round_currency(_rule_value("ios-app") + _rule_value("android-app")),
        ))
    return alternatives


def _action_items(
    status: BudgetAlignment,
    percentage_difference: int,
    alternatives: list[BudgetAlternative],
    currency: str,
) -> list[ActionItem]:
    items: list[ActionItem] = []

    if status in (BudgetAlignment.OVER_BUDGET, BudgetAlignment.SIGNIFICANTLY_OVER):
        items.append(ActionItem(
            type="phase-project",
            priority="high",
            title="Phase the Project",
            description="Break your project into multiple phases to fit your budget while maintaining quality.",
            impact="Could reduce initial cost by 40-60% while delivering core functionality first.",
        ))
        if alternatives:
            savings = sum(a.cost_savings for a in alternatives)
            items.append(ActionItem(
                type="optimize-features",
                priority="high",
                title="Use Budget-Friendly Alternatives",
                description="Replace expensive features with cost-effective alternatives that still meet your needs.",
                impact=f"Could save {money(savings, currency)} while maintaining core functionality.",
            ))
        items.append(ActionItem(
            type="reduce-scope",
            priority="medium",
            title="Reduce Project Scope",
            description="Prioritize must-have features and defer nice-to-have features to future updates.",
            impact="Could reduce cost by 20-30% by focusing on core functionality.",
        ))
        if percentage_difference > INCREASE_BUDGET_THRESHOLD:
            items.append(ActionItem(
                type="increase-budget",
                priority="medium",
                title="Consider Increasing Budget",
                description=(
                    "Your project needs significantly exceed your budget. "
                    "Consider increasing your budget to match your requirements."
                ),
                impact="Would allow you to include all desired features and maintain high quality standards.",
            ))
    elif status is BudgetAlignment.UNDER_BUDGET:
        items.append(ActionItem(
            type="optimize-features",
            priority="low",
            title="Enhance Project Scope",
            description="Your budget allows for additional features and enhancements.",
            impact="You could add premium features, enhanced design, or extended support within your budget.",
        ))

    return items


def compare_budget(
    answers: Mapping[str, Any] | None,
    breakdown: PricingBreakdown | None = None,
) -> BudgetComparison:
    """Compare the selected budget range with the estimated subtotal."""
    folded = fold_keys(answers)
    breakdown = breakdown or calculate_pricing(folded)
    selected = get_str(folded, "budget_range") or DISCUSS
    if selected not in BUDGET_RANGES:
        logger.debug(f"Unknown budget range '{selected}' — treated as undisclosed")
        selected = DISCUSS

    budget_min, budget_max = budget_range(selected)
    total = breakdown.subtotal
    currency = breakdown.currency
    alternatives = budget_friendly_alternatives(breakdown.features)

    if budget_max is None:
        return BudgetComparison(
            selected=selected,
            budget_min=budget_min,
            budget_max=None,
            estimated_total=total,
            estimated_range=breakdown.estimated_range,
            status=BudgetAlignment.UNDISCLOSED,
            message=(
                f"No budget range was selected. The estimated cost is {money(total, currency)} "
                f"({money(breakdown.estimated_range.low, currency)} – "
                f"{money(breakdown.estimated_range.high, currency)})."
            ),
            recommendation="Share a budget range so we can tailor the scope and phasing to it.",
            budget_friendly_alternatives=alternatives,
        )

    average = (budget_min + budget_max) / 2
    percentage_difference = round_currency((total - average) / average * 100)

    if budget_min <= total <= budget_max:
        status = BudgetAlignment.ALIGNED
        message = (
            f"Your budget aligns well with your project needs. The estimated cost "
            f"({money(total, currency)}) fits within your selected budget range."
        )
        recommendation = (
            "Your budget is well-aligned. You can proceed with confidence that your "
            "project scope matches your financial expectations."
        )
    elif total < budget_min:
        status = BudgetAlignment.UNDER_BUDGET
        message = (
            f"Great news! Your project needs ({money(total, currency)}) are below your minimum "
            f"budget ({money(budget_min, currency)}). You could save up to "
            f"{money(budget_min - total, currency)} or invest in additional features."
        )
        recommendation = (
            "Consider adding premium features, enhanced design, or additional "
            "integrations to maximize value within your budget."
        )
    elif total <= budget_max * OVER_BUDGET_TOLERANCE:
        status = BudgetAlignment.OVER_BUDGET
        message = (
            f"Your project needs ({money(total, currency)}) exceed your selected budget "
            f"({money(budget_max, currency)}) by approximately {money(total - budget_max, currency)}."
        )
        recommendation = (
            "Consider phasing the project, reducing scope, or increasing your budget "
            "to align with your requirements."
        )
    else:
        status = BudgetAlignment.SIGNIFICANTLY_OVER
        message = (
            f"Your project needs ({money(total, currency)}) significantly exceed your selected "
            f"budget ({money(budget_max, currency)}) by approximately "
            f"{money(total - budget_max, currency)}."
        )
        recommendation = (
            "We strongly recommend either significantly increasing your budget, phasing the "
            "project into multiple stages, or substantially reducing the project scope."
        )

    logger.debug(f"Budget {selected}: total={total} status={status.value} diff={percentage_difference}%")

    return BudgetComparison(
        selected=selected,
        budget_min=budget_min,
        budget_max=budget_max,
        estimated_total=total,
        estimated_range=breakdown.estimated_range,
        status=status,
        percentage_difference=percentage_difference,
        message=message,
        recommendation=recommendation,
        budget_friendly_alternatives=alternatives,
        action_items=_action_items(status, percentage_difference, alternatives, currency),
    )
