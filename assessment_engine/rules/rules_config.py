"""
Pricing Config Store — loads pricing constants from MongoDB.

Company-level setting: configured once by an admin and cached.
Falls back to defaults (seeded from Settings) when MongoDB is not configured
or holds no override document.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, model_validator

from assessment_engine.config import get_settings

logger = logging.getLogger(__name__)


# ── Config model ─────────────────────────────────────────

class PricingConfig(BaseModel):
    """Estimation constants layered on top of the rule tables."""
    range_low_factor: float = 0.85
    range_high_factor: float = 1.25
    currency: str = "USD"
    final_total_step: int = 100  # proposals quote totals rounded to this step
    payment_schedule: list[tuple[str, float, str]] = [
        ("Project Kickoff", 0.3, "Upon contract signing"),
        ("Design Approval", 0.3, "Upon design phase completion"),
        ("Development Milestone", 0.3, "Upon development phase completion"),
        ("Final Delivery", 0.1, "Upon project completion and launch"),
    ]
    low_budget_threshold: int = 5000
    start_offset_days: int = 7

    @model_validator(mode="after")
    def _check_factors(self) -> "PricingConfig":
        if not 0 < self.range_low_factor <= 1 <= self.range_high_factor:
            raise ValueError("Range factors must satisfy 0 < low <= 1 <= high")
        if self.final_total_step < 1:
            raise ValueError("final_total_step must be at least 1")
        share = sum(part for _, part, _ in self.payment_schedule)
        if self.payment_schedule and abs(share - 1.0) > 1e-9:
            raise ValueError(f"Payment schedule shares sum to {share}, expected 1.0")
        return self


# ── Store class ──────────────────────────────────────────

class PricingConfigStore:
    """
    Loads the pricing config from MongoDB. Falls back to defaults.
    Cached after first load for the lifetime of the process.
    """

    def __init__(self):
        self.settings = get_settings()
        self._db = None
        self._cache: PricingConfig | None = None

    def _get_db(self):
        if self._db is not None or not self.settings.mongodb_uri:
            return self._db
        try:
            from pymongo import MongoClient
            client = MongoClient(
                self.settings.mongodb_uri,
                serverSelectionTimeoutMS=self.settings.mongodb_timeout_ms,
            )
            self._db = client[self.settings.mongodb_database]
        except Exception as e:
            logger.warning(f"MongoDB not available, using default pricing config: {e}")
            self._db = None
        return self._db

    def _defaults(self) -> PricingConfig:
        return PricingConfig(
            range_low_factor=self.settings.pricing_range_low_factor,
            range_high_factor=self.settings.pricing_range_high_factor,
            currency=self.settings.currency,
        )

    def get_pricing_config(self) -> PricingConfig:
        if self._cache is not None:
            return self._cache

        db = self._get_db()
        if db is not None:
            try:
                doc = db.rules_config.find_one({"rule_type": "pricing"})
                if doc and "config" in doc:
                    merged = self._defaults().model_dump()
                    merged.update(doc["config"])
                    self._cache = PricingConfig(**merged)
                    logger.info("Loaded pricing config override from MongoDB")
                    return self._cache
            except Exception as e:
                logger.warning(f"Failed loading pricing config from MongoDB: {e}")

        self._cache = self._defaults()
        return self._cache
