"""Persistence — MongoClient, assessment repositories."""

from assessment_engine.persistence.mongo_client import MongoClient
from assessment_engine.persistence.assessment_repository import (
    AssessmentRepository,
    InMemoryAssessmentRepository,
    MongoAssessmentRepository,
    get_repository,
)

__all__ = [
    "MongoClient",
    "AssessmentRepository",
    "InMemoryAssessmentRepository",
    "MongoAssessmentRepository",
    "get_repository",
]
