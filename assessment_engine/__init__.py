"""
Project Assessment Engine — deterministic pricing for software project
questionnaires, with suggestion, proposal and budget assembly on top.
"""

from assessment_engine.services.pricing_service import calculate_pricing

__all__ = ["calculate_pricing"]
__version__ = "0.1.0"
