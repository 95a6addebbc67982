"""
Modifier Rules — price adjustments keyed by FeatureId.

Aggregation:
  additive_total   = base_price + Σ additive amounts
  total_multiplier = Π (1 + multiplicative value)
  subtotal         = round_currency(additive_total × total_multiplier × complexity)

Rounding happens once, on the final value.  Rules are listed in registration
order; order only affects how line items are listed, never the arithmetic.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional

from assessment_engine.models.enums import ModifierKind
from assessment_engine.rules.feature_registry import (
    FeatureRegistry,
    RuleTableError,
    default_registry,
)
from assessment_engine.utils.answers import count_of, fold_keys, get_str

logger = logging.getLogger(__name__)

Predicate = Callable[[Mapping[str, Any]], bool]


@dataclass(frozen=True)
class ModifierRule:
    feature_id: str
    kind: ModifierKind
    value: float
    applies_when: Optional[Predicate] = None
    per_unit_of: Optional[str] = None  # answer key whose count multiplies an additive value
    label: Optional[str] = None

    def applies(self, answers: Mapping[str, Any]) -> bool:
        if self.applies_when is None:
            return True
        return bool(self.applies_when(answers))

    def units(self, answers: Mapping[str, Any]) -> int:
        if self.per_unit_of is None:
            return 1
        # A feature picked by label still counts as one unit
        return max(1, count_of(answers, self.per_unit_of))

    def amount(self, answers: Mapping[str, Any]) -> float:
        """Currency amount of an additive rule for these answers."""
        return self.value * self.units(answers)


def round_currency(amount: float) -> int:
    """Round half up to a whole currency unit."""
    return int(math.floor(amount + 0.5))


# ── Predicates ───────────────────────────────────────────


def _below_enterprise_data(answers: Mapping[str, Any]) -> bool:
    # Enterprise data tier is already priced for scale
    return get_str(answers, "data_storage") != "enterprise"


def _add(feature_id: str, value: float, **kwargs: Any) -> ModifierRule:
    return ModifierRule(feature_id, ModifierKind.ADDITIVE, value, **kwargs)


def _mul(feature_id: str, value: float, **kwargs: Any) -> ModifierRule:
    return ModifierRule(feature_id, ModifierKind.MULTIPLICATIVE, value, **kwargs)


# Market-rate adjustments (USD for additive, fraction for multiplicative)
MODIFIER_RULES: tuple[ModifierRule, ...] = (
    # Authentication
    _add("basic-auth", 500),
    _add("social-login", 1000),
    _add("enterprise-sso", 3000),
    _add("custom-auth", 2000),
    # E-commerce
    _add("payment-processing", 2000),
    _add("shopping-cart", 1500),
    _add("inventory-management", 2500),
    _add("order-management", 1500),
    # Real-time
    _add("real-time-chat", 2000),
    _add("real-time-updates", 1500),
    _add("live-collaboration", 3000),
    # Content
    _add("basic-cms", 2000),
    _add("headless-cms", 3000),
    _add("custom-cms", 5000),
    # API
    _add("internal-api", 2000),
    _add("public-api", 4000),
    _add("api-documentation", 1500),
    # Advanced
    _add("search-functionality", 1500),
    _add("analytics-dashboard", 2000),
    _add("admin-panel", 2500),
    _add("multi-language", 2000),
    _add("notifications", 1000),
    # Platforms
    _add("ios-app", 8000),
    _add("android-app", 8000),
    _add("desktop-app", 10000),
    # Design
    _add("design-modern", 2000),
    _add("design-corporate", 3000),
    _add("design-creative", 4000),
    _add("design-custom", 5000),
    # Integrations
    _add("third-party-integrations", 1000, per_unit_of="integrations"),
    # Data complexity
    _mul("data-simple", -0.2),
    _mul("data-complex", 0.5),
    _mul("data-enterprise", 1.5),
    # Accessibility
    _mul("accessibility-wcag-aa", 0.05),
    _mul("accessibility-wcag-aaa", 0.12),
    # Scale
    _mul("high-traffic", 0.15, applies_when=_below_enterprise_data),
    # Timeline
    _mul("timeline-rush", 0.5),
    _mul("timeline-fast", 0.2),
    _mul("timeline-flexible", -0.1),
)


@dataclass(frozen=True)
class ModifierTotals:
    additive_total: float
    total_multiplier: float
    complexity_multiplier: float

    @property
    def raw_subtotal(self) -> float:
        return self.additive_total * self.total_multiplier * self.complexity_multiplier

    @property
    def subtotal(self) -> int:
        return round_currency(self.raw_subtotal)


class RuleBook:
    """An ordered, validated set of modifier rules."""

    def __init__(
        self,
        rules: Iterable[ModifierRule] = MODIFIER_RULES,
        registry: FeatureRegistry = default_registry,
    ):
        self.registry = registry
        self.rules: tuple[ModifierRule, ...] = tuple(rules)
        self._validate()

    def _validate(self) -> None:
        seen: set[str] = set()
        for rule in self.rules:
            if rule.feature_id not in self.registry:
                raise RuleTableError(f"Rule references unknown feature '{rule.feature_id}'")
            if rule.feature_id in seen:
                raise RuleTableError(f"Duplicate rule for feature '{rule.feature_id}'")
            seen.add(rule.feature_id)

            if not isinstance(rule.kind, ModifierKind):
                raise RuleTableError(f"Rule '{rule.feature_id}' has invalid kind {rule.kind!r}")
            if not math.isfinite(rule.value):
                raise RuleTableError(f"Rule '{rule.feature_id}' has non-finite value")

            if rule.kind is ModifierKind.ADDITIVE:
                if rule.value < 0:
                    raise RuleTableError(f"Additive rule '{rule.feature_id}' must be non-negative")
            else:
                if rule.value <= -1:
                    raise RuleTableError(
                        f"Multiplicative rule '{rule.feature_id}' must be greater than -100%"
                    )
                if rule.per_unit_of is not None:
                    raise RuleTableError(
                        f"Multiplicative rule '{rule.feature_id}' cannot be priced per unit"
                    )
                # Selectable features only ever add to the price
                if rule.value < 0 and self.registry.is_selectable(rule.feature_id):
                    raise RuleTableError(
                        f"Discount rule '{rule.feature_id}' must not be a selectable feature"
                    )

    def rule_for(self, feature_id: str) -> ModifierRule | None:
        for rule in self.rules:
            if rule.feature_id == feature_id:
                return rule
        return None

    def applicable_rules(
        self,
        features: Iterable[str],
        answers: Mapping[str, Any] | None = None,
    ) -> list[ModifierRule]:
        """Rules for the given features whose predicate holds, in registration order."""
        selected = set(features)
        folded = fold_keys(answers)
        applicable: list[ModifierRule] = []
        for rule in self.rules:
            if rule.feature_id not in selected:
                continue
            if not rule.applies(folded):
                logger.debug(f"Rule '{rule.feature_id}' skipped — predicate not met")
                continue
            applicable.append(rule)
        return applicable

    def combine(
        self,
        base_price: float,
        complexity_multiplier: float,
        rules: Iterable[ModifierRule],
        answers: Mapping[str, Any] | None = None,
    ) -> ModifierTotals:
        """Apply additive rules, then multiplicative rules, then complexity."""
        folded = fold_keys(answers)
        rules = list(rules)
        additive_total = base_price + sum(
            r.amount(folded) for r in rules if r.kind is ModifierKind.ADDITIVE
        )
        total_multiplier = math.prod(
            1 + r.value for r in rules if r.kind is ModifierKind.MULTIPLICATIVE
        )
        return ModifierTotals(
            additive_total=additive_total,
            total_multiplier=total_multiplier,
            complexity_multiplier=complexity_multiplier,
        )


default_rule_book = RuleBook()


def applicable_rules(
    features: Iterable[str],
    answers: Mapping[str, Any] | None = None,
) -> list[ModifierRule]:
    return default_rule_book.applicable_rules(features, answers)
