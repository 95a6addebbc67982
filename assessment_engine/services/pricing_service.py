"""
Pricing Service — turns questionnaire answers into a PricingBreakdown.

Pipeline: answers → FeatureIds → base tier → applicable rules → totals →
range + line items.  Pure and deterministic: the same answers always yield
the same breakdown, and partial or empty answers still price (default tier,
no modifiers) so the wizard can re-price after every step.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from assessment_engine.models.enums import LineItemKind, ModifierKind
from assessment_engine.models.schemas import (
    EstimatedRange,
    LineItem,
    MarketComparison,
    PricingBreakdown,
)
from assessment_engine.rules.base_prices import (
    BasePrice,
    base_for,
    market_comparison_for,
    project_type_label,
)
from assessment_engine.rules.modifier_rules import (
    ModifierRule,
    RuleBook,
    default_rule_book,
    round_currency,
)
from assessment_engine.rules.normalizer import AnswerNormalizer, default_normalizer
from assessment_engine.rules.rules_config import PricingConfig, PricingConfigStore
from assessment_engine.utils.answers import fold_keys

logger = logging.getLogger(__name__)


def _cents(amount: float) -> float:
    return round(amount, 2)


class PricingService:
    """Pricing aggregator over a normalizer, a rule book and a pricing config."""

    def __init__(
        self,
        normalizer: AnswerNormalizer = default_normalizer,
        rule_book: RuleBook = default_rule_book,
        config: PricingConfig | None = None,
    ):
        self.normalizer = normalizer
        self.rule_book = rule_book
        self._config = config

    @property
    def config(self) -> PricingConfig:
        if self._config is None:
            self._config = PricingConfigStore().get_pricing_config()
        return self._config

    def calculate_pricing(self, answers: Mapping[str, Any] | None) -> PricingBreakdown:
        folded = fold_keys(answers)
        registry = self.normalizer.registry

        features = self.normalizer.features_from_answers(folded)
        base = base_for(folded.get("project_type"))
        rules = self.rule_book.applicable_rules(features, folded)
        totals = self.rule_book.combine(base.base_price, base.complexity_multiplier, rules, folded)

        subtotal = totals.subtotal
        config = self.config
        estimated_range = EstimatedRange(
            low=round_currency(subtotal * config.range_low_factor),
            average=subtotal,
            high=round_currency(subtotal * config.range_high_factor),
        )

        line_items = self._line_items(base, rules, folded)
        market = market_comparison_for(base.tier)

        logger.debug(
            f"Priced tier={base.tier} features={len(features)} rules={len(rules)} "
            f"additive={totals.additive_total:.2f} multiplier={totals.total_multiplier:.4f} "
            f"complexity={base.complexity_multiplier} → subtotal={subtotal}"
        )

        return PricingBreakdown(
            subtotal=subtotal,
            estimated_range=estimated_range,
            line_items=line_items,
            base_price=base.base_price,
            total_multiplier=totals.total_multiplier,
            complexity_multiplier=base.complexity_multiplier,
            project_type=base.tier,
            features=registry.ordered(features),
            market_comparison=MarketComparison(
                low=market.low, high=market.high, average=market.average,
            ),
            currency=config.currency,
        )

    def _line_items(
        self,
        base: BasePrice,
        rules: list[ModifierRule],
        answers: Mapping[str, Any],
    ) -> list[LineItem]:
        """Base first, then each rule in registration order.

        Multiplicative items carry the amount they add to the running total
        when applied after all additive items, so the amounts sum to the
        unrounded subtotal.
        """
        registry = self.normalizer.registry
        items = [
            LineItem(
                label=f"Base price: {project_type_label(base.tier)}",
                amount=_cents(base.base_price),
                kind=LineItemKind.BASE,
                category="Base",
                value=base.base_price,
            )
        ]

        running = base.base_price
        for rule in rules:
            if rule.kind is ModifierKind.ADDITIVE:
                amount = rule.amount(answers)
                running += amount
                label = rule.label or registry.label_for(rule.feature_id)
                units = rule.units(answers)
                if rule.per_unit_of is not None:
                    label = f"{label} ({units})"
                items.append(LineItem(
                    label=label,
                    amount=_cents(amount),
                    kind=LineItemKind.ADDITIVE,
                    feature_id=rule.feature_id,
                    category=registry.category_for(rule.feature_id),
                    value=rule.value,
                ))

        # Listed after all additive items: the arithmetic applies them in that order
        for rule in rules:
            if rule.kind is ModifierKind.MULTIPLICATIVE:
                amount = running * rule.value
                running += amount
                items.append(LineItem(
                    label=rule.label or registry.label_for(rule.feature_id),
                    amount=_cents(amount),
                    kind=LineItemKind.MULTIPLICATIVE,
                    feature_id=rule.feature_id,
                    category=registry.category_for(rule.feature_id),
                    value=rule.value,
                ))

        if base.complexity_multiplier != 1.0:
            items.append(LineItem(
                label="Project complexity adjustment",
                amount=_cents(running * (base.complexity_multiplier - 1)),
                kind=LineItemKind.COMPLEXITY,
                category="Complexity",
                value=base.complexity_multiplier,
            ))

        return items


_default_service: PricingService | None = None


def get_pricing_service() -> PricingService:
    global _default_service
    if _default_service is None:
        _default_service = PricingService()
    return _default_service


def calculate_pricing(answers: Mapping[str, Any] | None) -> PricingBreakdown:
    """Price a (possibly partial) answer set with the default rule tables."""
    return get_pricing_service().calculate_pricing(answers)
