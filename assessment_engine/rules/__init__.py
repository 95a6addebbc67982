"""
Rules — static registry, base price table and modifier rules.

Tables are validated at import; an inconsistent table raises RuleTableError
and stops the process before it serves a single estimate.
"""

from .feature_registry import FeatureDefinition, FeatureRegistry, RuleTableError, default_registry
from .normalizer import AnswerNormalizer, features_from_answers, normalize, normalize_feature_set
from .base_prices import BasePrice, base_for, market_comparison_for
from .modifier_rules import ModifierRule, RuleBook, applicable_rules, round_currency

__all__ = [
    "FeatureDefinition",
    "FeatureRegistry",
    "RuleTableError",
    "default_registry",
    "AnswerNormalizer",
    "features_from_answers",
    "normalize",
    "normalize_feature_set",
    "BasePrice",
    "base_for",
    "market_comparison_for",
    "ModifierRule",
    "RuleBook",
    "applicable_rules",
    "round_currency",
]
