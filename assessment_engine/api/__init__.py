"""
FastAPI application factory and API package.

Run with:
    uvicorn assessment_engine.api:app --reload --port 8000

Or via main.py:
    python -m assessment_engine --serve
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from assessment_engine.config import get_settings
from assessment_engine.api.routes import assessment_router, health_router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Application factory — create and configure the FastAPI instance."""
    settings = get_settings()

    application = FastAPI(
        title="Project Assessment API",
        description="Pricing, suggestions and proposals for project assessments",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
    )

    # CORS: allow the questionnaire front end
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(health_router, tags=["Health"])
    application.include_router(assessment_router, prefix="/api/assessment", tags=["Assessment"])

    logger.info(f"{settings.app_name} API configured")
    return application


# Module-level instance for `uvicorn assessment_engine.api:app`
app = create_app()
