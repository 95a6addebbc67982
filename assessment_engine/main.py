"""
Project Assessment Engine — Main Entry Point

Price an answer file (CLI):
    python -m assessment_engine answers.json

Run as an API server (for the questionnaire front end):
    python -m assessment_engine --serve
    # or: uvicorn assessment_engine.api:app --reload --port 8000

Or import and run programmatically:
    from assessment_engine.main import run
    breakdown = run("path/to/answers.json")
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from assessment_engine.config import get_settings
from assessment_engine.models.schemas import PricingBreakdown
from assessment_engine.services.pricing_service import calculate_pricing
from assessment_engine.utils.formatting import money
from assessment_engine.utils.logger import setup_logging


def run(file_path: str = "") -> PricingBreakdown:
    """Price the answers in *file_path* (stdin when empty) and print the breakdown JSON."""
    setup_logging(get_settings().log_level)
    logger = logging.getLogger(__name__)

    raw = Path(file_path).read_text(encoding="utf-8") if file_path else sys.stdin.read()
    answers = json.loads(raw)
    if not isinstance(answers, dict):
        raise ValueError("Answers file must contain a JSON object")

    breakdown = calculate_pricing(answers)
    _print_summary(breakdown)
    print(breakdown.model_dump_json(by_alias=True, indent=2))

    logger.debug(f"Priced {file_path or '<stdin>'}")
    return breakdown


def _print_summary(breakdown: PricingBreakdown) -> None:
    """Log a human-readable summary of the breakdown."""
    logger = logging.getLogger(__name__)
    currency = breakdown.currency

    logger.info("-" * 60)
    logger.info("  PRICING SUMMARY")
    logger.info("-" * 60)
    logger.info(f"  Project type:   {breakdown.project_type}")
    logger.info(f"  Features:       {len(breakdown.features)}")
    for item in breakdown.line_items:
        logger.info(f"    {item.label:<40} {money(item.amount, currency):>12}")
    logger.info(f"  Subtotal:       {money(breakdown.subtotal, currency)}")
    logger.info(
        f"  Range:          {money(breakdown.estimated_range.low, currency)} – "
        f"{money(breakdown.estimated_range.high, currency)}"
    )
    logger.info("-" * 60)


def serve(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the FastAPI server (for the questionnaire front end)."""
    import uvicorn

    setup_logging(get_settings().log_level)
    logger = logging.getLogger(__name__)
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("assessment_engine.api:app", host=host, port=port, reload=get_settings().debug)


def main(argv: list[str] | None = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    if "--serve" in args:
        serve()
    else:
        run(args[0] if args else "")


if __name__ == "__main__":
    main()
