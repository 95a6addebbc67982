"""
Application configuration using Pydantic Settings.
All environment-specific values are centralized here.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── App ──────────────────────────────────────────────
    app_name: str = "Project Assessment Engine"
    debug: bool = False
    company_name: str = ""  # signs exported proposals when set
    company_contact: str = ""

    # ── LLM ──────────────────────────────────────────────
    ai_enabled: bool = True  # When False, suggestions/proposals use templates only
    groq_api_key: str = ""
    llm_model: str = "llama-3.3-70b-versatile"
    llm_temperature: float = 0.4
    llm_max_tokens: int = 2048

    # ── MongoDB ──────────────────────────────────────────
    mongodb_uri: str = ""  # empty = in-memory assessment store, default pricing config
    mongodb_database: str = "project_assessments"
    mongodb_timeout_ms: int = 2000

    # ── Pricing ──────────────────────────────────────────
    pricing_range_low_factor: float = 0.85
    pricing_range_high_factor: float = 1.25
    currency: str = "USD"

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
