"""
Answer Normalizer — resolves questionnaire labels and answers to FeatureIds.

Label resolution order (first match wins):
  1. exact, case-sensitive match on a registry key (id, label or synonym)
  2. case-insensitive exact match (runs of whitespace collapsed)
  3. case-insensitive substring match in either direction; candidates are
     tried longest registry key first, then in alphabetical key order

Substring matching ignores pairs whose shorter side is below
MIN_SUBSTRING_LENGTH characters, so "ios" never matches inside "portfolios".
Unresolvable labels are dropped and logged at DEBUG; they never abort pricing.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping

from assessment_engine.rules.feature_registry import (
    FeatureRegistry,
    RuleTableError,
    default_registry,
)
from assessment_engine.utils.answers import fold_keys, get_bool, get_list, get_str

logger = logging.getLogger(__name__)

MIN_SUBSTRING_LENGTH = 4

# Multi-select keys whose values are free-form feature labels
LABEL_KEYS: tuple[str, ...] = ("features", "must_have_features", "selected_features")

# Single-choice / list answers: answer key -> {option value -> FeatureId}
OPTION_FEATURES: dict[str, dict[str, str]] = {
    "user_authentication": {
        "basic": "basic-auth",
        "social-login": "social-login",
        "enterprise-sso": "enterprise-sso",
        "custom": "custom-auth",
    },
    "content_management": {
        "basic-cms": "basic-cms",
        "headless-cms": "headless-cms",
        "custom-cms": "custom-cms",
    },
    "platform": {
        "ios": "ios-app",
        "android": "android-app",
        "desktop": "desktop-app",
    },
    "design_style": {
        "modern": "design-modern",
        "not-sure": "design-modern",
        "corporate": "design-corporate",
        "creative": "design-creative",
        "custom": "design-custom",
    },
    "data_storage": {
        "simple": "data-simple",
        "complex": "data-complex",
        "enterprise": "data-enterprise",
    },
    "accessibility_requirements": {
        "wcag-aa": "accessibility-wcag-aa",
        "wcag-aaa": "accessibility-wcag-aaa",
    },
    "expected_users": {
        "10000+": "high-traffic",
    },
    "preferred_timeline": {
        "asap": "timeline-rush",
        "1-3-months": "timeline-fast",
        "6-12-months": "timeline-flexible",
        "flexible": "timeline-flexible",
    },
}

# Options that are valid answers but carry no priced feature
NEUTRAL_OPTIONS: dict[str, frozenset[str]] = {
    "user_authentication": frozenset({"none"}),
    "content_management": frozenset({"static"}),
    "platform": frozenset({"web", "api-only"}),
    "design_style": frozenset({"minimalist"}),
    "data_storage": frozenset({"moderate"}),
    "accessibility_requirements": frozenset({"basic", "custom"}),
    "expected_users": frozenset({"0-100", "100-1000", "1000-10000", "unknown"}),
    "preferred_timeline": frozenset({"3-6-months"}),
}

# Boolean answers: answer key -> FeatureId when true
FLAG_FEATURES: dict[str, str] = {
    "payment_processing": "payment-processing",
    "real_time_features": "real-time-updates",
}

API_REQUIREMENT_FEATURES: dict[str, tuple[str, ...]] = {
    "internal": ("internal-api",),
    "public": ("public-api",),
    "both": ("internal-api", "public-api"),
    "none": (),
}

_WHITESPACE = re.compile(r"\s+")


def _fold(text: str) -> str:
    return _WHITESPACE.sub(" ", text.strip()).casefold()


class AnswerNormalizer:
    """Maps raw labels and answer sets onto a FeatureRegistry."""

    def __init__(self, registry: FeatureRegistry = default_registry):
        self.registry = registry
        self._exact: dict[str, str] = {}
        self._folded: dict[str, str] = {}

        for key, feature_id in registry.keys():
            self._exact.setdefault(key, feature_id)
            folded = _fold(key)
            existing = self._folded.get(folded)
            if existing is not None and existing != feature_id:
                raise RuleTableError(
                    f"Registry key '{key}' is ambiguous: maps to both "
                    f"'{existing}' and '{feature_id}'"
                )
            self._folded[folded] = feature_id

        # Longest key first, then alphabetical
        self._substring_candidates: list[tuple[str, str]] = sorted(
            ((k, f) for k, f in self._folded.items() if len(k) >= MIN_SUBSTRING_LENGTH),
            key=lambda pair: (-len(pair[0]), pair[0]),
        )

        for options in OPTION_FEATURES.values():
            for feature_id in options.values():
                if feature_id not in registry:
                    raise RuleTableError(f"Option table references unknown feature '{feature_id}'")
        for feature_id in FLAG_FEATURES.values():
            if feature_id not in registry:
                raise RuleTableError(f"Flag table references unknown feature '{feature_id}'")

    # ── Single label ─────────────────────────────────────

    def normalize(self, label: Any) -> str | None:
        """Resolve one raw label to a FeatureId, or None."""
        if not isinstance(label, str) or not label.strip():
            return None

        # 1. Exact, case-sensitive
        feature_id = self._exact.get(label) or self._exact.get(label.strip())
        if feature_id:
            return feature_id

        # 2. Case-insensitive exact
        folded = _fold(label)
        feature_id = self._folded.get(folded)
        if feature_id:
            return feature_id

        # 3. Substring, either direction
        if len(folded) >= MIN_SUBSTRING_LENGTH:
            for key, candidate in self._substring_candidates:
                if key in folded or folded in key:
                    logger.debug(f"Label '{label}' matched '{key}' by substring → {candidate}")
                    return candidate

        logger.debug(f"Unresolved feature label dropped: '{label}'")
        return None

    def normalize_feature_set(self, labels: Iterable[Any]) -> set[str]:
        """Resolve a batch of labels; unresolved labels are omitted."""
        resolved: set[str] = set()
        for label in labels:
            feature_id = self.normalize(label)
            if feature_id is not None:
                resolved.add(feature_id)
        return resolved

    # ── Whole answer set ─────────────────────────────────

    def features_from_answers(self, answers: Mapping[str, Any] | None) -> set[str]:
        """Collect every FeatureId implied by a (partial) answer set."""
        folded = fold_keys(answers)
        features: set[str] = set()

        for key in LABEL_KEYS:
            for feature_id in self.normalize_feature_set(get_list(folded, key)):
                # Timeline / data options only come from their own questions
                if self.registry.is_selectable(feature_id):
                    features.add(feature_id)
                else:
                    logger.debug(f"Option feature '{feature_id}' ignored in {key}")

        for key, feature_id in FLAG_FEATURES.items():
            if get_bool(folded, key):
                features.add(feature_id)

        api = get_str(folded, "api_requirements")
        if api:
            if api in API_REQUIREMENT_FEATURES:
                features.update(API_REQUIREMENT_FEATURES[api])
            else:
                logger.debug(f"Unknown api_requirements option dropped: '{api}'")

        if get_list(folded, "integrations"):
            features.add("third-party-integrations")

        for key, options in OPTION_FEATURES.items():
            for value in get_list(folded, key):
                if value in options:
                    features.add(options[value])
                elif value not in NEUTRAL_OPTIONS.get(key, frozenset()):
                    logger.debug(f"Unknown {key} option dropped: '{value}'")

        return features


default_normalizer = AnswerNormalizer()


def normalize(label: Any) -> str | None:
    return default_normalizer.normalize(label)


def normalize_feature_set(labels: Iterable[Any]) -> set[str]:
    return default_normalizer.normalize_feature_set(labels)


def features_from_answers(answers: Mapping[str, Any] | None) -> set[str]:
    return default_normalizer.features_from_answers(answers)
