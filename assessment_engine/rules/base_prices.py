"""
Base Price Table — starting price and complexity multiplier per project type.

Base prices start at 60% of the market average for the project type (the
remaining share is expected to come from features, platforms and design).
An unknown or missing project type resolves to DEFAULT_TIER so the wizard
can always show an estimate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from assessment_engine.rules.feature_registry import RuleTableError

logger = logging.getLogger(__name__)

DEFAULT_TIER = "default"
BASE_PRICE_SHARE = 0.6


@dataclass(frozen=True)
class MarketRange:
    low: int
    high: int
    average: int


@dataclass(frozen=True)
class BasePrice:
    tier: str
    base_price: float
    complexity_multiplier: float


# Industry averages (USD), used for base prices and the market comparison band
MARKET_COMPARISON: dict[str, MarketRange] = {
    "website": MarketRange(low=2000, high=15000, average=6000),
    "web-app": MarketRange(low=10000, high=100000, average=35000),
    "mobile-app": MarketRange(low=15000, high=150000, average=50000),
    "ecommerce": MarketRange(low=5000, high=50000, average=20000),
    "saas": MarketRange(low=20000, high=200000, average=75000),
    "api": MarketRange(low=5000, high=50000, average=20000),
    "other": MarketRange(low=5000, high=100000, average=30000),
    DEFAULT_TIER: MarketRange(low=5000, high=100000, average=10000),
}

COMPLEXITY_MULTIPLIERS: dict[str, float] = {
    "website": 1.0,
    "web-app": 1.1,
    "mobile-app": 1.15,
    "ecommerce": 1.05,
    "saas": 1.2,
    "api": 1.0,
    "other": 1.0,
    DEFAULT_TIER: 1.0,
}

PROJECT_TYPE_LABELS: dict[str, str] = {
    "website": "Website",
    "web-app": "Web Application",
    "mobile-app": "Mobile Application",
    "ecommerce": "E-commerce Store",
    "saas": "SaaS Platform",
    "api": "API / Backend Service",
    "other": "Custom Project",
    DEFAULT_TIER: "Custom Project",
}


def _build_table() -> dict[str, BasePrice]:
    if set(MARKET_COMPARISON) != set(COMPLEXITY_MULTIPLIERS):
        raise RuleTableError("Market comparison and complexity tables cover different project types")
    table: dict[str, BasePrice] = {}
    for tier, market in MARKET_COMPARISON.items():
        multiplier = COMPLEXITY_MULTIPLIERS[tier]
        if multiplier <= 0:
            raise RuleTableError(f"Complexity multiplier for '{tier}' must be positive")
        table[tier] = BasePrice(
            tier=tier,
            base_price=market.average * BASE_PRICE_SHARE,
            complexity_multiplier=multiplier,
        )
    return table


BASE_PRICE_TABLE: dict[str, BasePrice] = _build_table()


def resolve_tier(project_type: Any) -> str:
    """Table key for a project type answer (DEFAULT_TIER when unknown)."""
    if isinstance(project_type, str):
        key = project_type.strip().lower()
        if key in BASE_PRICE_TABLE and key != DEFAULT_TIER:
            return key
        if key:
            logger.info(f"Unknown project type '{project_type}' — using default tier")
    return DEFAULT_TIER


def base_for(project_type: Any) -> BasePrice:
    return BASE_PRICE_TABLE[resolve_tier(project_type)]


def market_comparison_for(project_type: Any) -> MarketRange:
    return MARKET_COMPARISON[resolve_tier(project_type)]


def project_type_label(project_type: Any) -> str:
    return PROJECT_TYPE_LABELS[resolve_tier(project_type)]
