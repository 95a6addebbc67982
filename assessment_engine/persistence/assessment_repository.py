"""
Assessment Repository — storage for submitted assessments.

InMemoryAssessmentRepository is the default (and what the tests use);
MongoAssessmentRepository is selected when MONGODB_URI is configured.
Both hand out copies, so callers never mutate stored records.
"""

from __future__ import annotations

import copy
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Optional

from assessment_engine.models.enums import AssessmentStatus
from assessment_engine.models.schemas import PricingBreakdown, ProjectAssessment
from assessment_engine.persistence.mongo_client import MongoClient

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _copy(breakdown: Optional[PricingBreakdown]) -> Optional[PricingBreakdown]:
    return breakdown.model_copy(deep=True) if breakdown is not None else None


class AssessmentRepository(ABC):
    """Storage contract for ProjectAssessment records."""

    @abstractmethod
    def create_assessment(
        self,
        assessment_data: dict[str, Any],
        pricing_breakdown: Optional[PricingBreakdown] = None,
    ) -> ProjectAssessment: ...

    @abstractmethod
    def get_assessment_by_id(self, assessment_id: int) -> Optional[ProjectAssessment]: ...

    @abstractmethod
    def update_assessment(
        self,
        assessment_id: int,
        assessment_data: dict[str, Any],
        pricing_breakdown: Optional[PricingBreakdown],
    ) -> Optional[ProjectAssessment]: ...

    @abstractmethod
    def update_status(
        self,
        assessment_id: int,
        status: AssessmentStatus,
    ) -> Optional[ProjectAssessment]: ...

    @abstractmethod
    def list_assessments(self, status: Optional[AssessmentStatus] = None) -> list[ProjectAssessment]: ...


# ── In-memory ────────────────────────────────────────────

class InMemoryAssessmentRepository(AssessmentRepository):
    """Dict-backed store; sync FastAPI handlers share it across threads."""

    def __init__(self):
        self._records: dict[int, ProjectAssessment] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def create_assessment(self, assessment_data, pricing_breakdown=None):
        with self._lock:
            record = ProjectAssessment(
                id=self._next_id,
                assessment_data=copy.deepcopy(dict(assessment_data)),
                pricing_breakdown=_copy(pricing_breakdown),
            )
            self._records[record.id] = record
            self._next_id += 1
        logger.info(f"Saved assessment {record.id}")
        return record.model_copy(deep=True)

    def get_assessment_by_id(self, assessment_id):
        with self._lock:
            record = self._records.get(assessment_id)
            return record.model_copy(deep=True) if record else None

    def update_assessment(self, assessment_id, assessment_data, pricing_breakdown):
        with self._lock:
            record = self._records.get(assessment_id)
            if record is None:
                return None
            record = record.model_copy(update={
                "assessment_data": copy.deepcopy(dict(assessment_data)),
                "pricing_breakdown": _copy(pricing_breakdown),
                "updated_at": _now(),
            })
            self._records[assessment_id] = record
        logger.info(f"Updated assessment {assessment_id}")
        return record.model_copy(deep=True)

    def update_status(self, assessment_id, status):
        with self._lock:
            record = self._records.get(assessment_id)
            if record is None:
                return None
            record = record.model_copy(update={"status": status, "updated_at": _now()})
            self._records[assessment_id] = record
        logger.info(f"Assessment {assessment_id} status → {status.value}")
        return record.model_copy(deep=True)

    def list_assessments(self, status=None):
        with self._lock:
            records = [
                r.model_copy(deep=True) for r in self._records.values()
                if status is None or r.status == status
            ]
        return sorted(records, key=lambda r: r.created_at, reverse=True)


# ── MongoDB ──────────────────────────────────────────────

class MongoAssessmentRepository(AssessmentRepository):
    """
    Stores assessments in the ``assessments`` collection.
    Integer ids come from a counter document in ``counters``.
    """

    COLLECTION = "assessments"
    COUNTERS = "counters"

    def __init__(self, client: MongoClient | None = None):
        self._client = client or MongoClient()

    @property
    def _db(self):
        db = self._client.get_database()
        if db is None:
            raise RuntimeError("MongoDB is not configured — set MONGODB_URI")
        return db

    def _next_id(self) -> int:
        from pymongo import ReturnDocument

        counter = self._db[self.COUNTERS].find_one_and_update(
            {"_id": self.COLLECTION},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(counter["seq"])

    @staticmethod
    def _to_doc(record: ProjectAssessment) -> dict[str, Any]:
        doc = record.model_dump(mode="json")
        doc["_id"] = record.id
        return doc

    @staticmethod
    def _from_doc(doc: dict[str, Any] | None) -> Optional[ProjectAssessment]:
        if not doc:
            return None
        doc = dict(doc)
        doc.pop("_id", None)
        return ProjectAssessment.model_validate(doc)

    def create_assessment(self, assessment_data, pricing_breakdown=None):
        record = ProjectAssessment(
            id=self._next_id(),
            assessment_data=dict(assessment_data),
            pricing_breakdown=pricing_breakdown,
        )
        self._db[self.COLLECTION].insert_one(self._to_doc(record))
        logger.info(f"Saved assessment {record.id} to MongoDB")
        return record

    def get_assessment_by_id(self, assessment_id):
        return self._from_doc(self._db[self.COLLECTION].find_one({"_id": assessment_id}))

    def _update(self, assessment_id: int, fields: dict[str, Any]) -> Optional[ProjectAssessment]:
        from pymongo import ReturnDocument

        doc = self._db[self.COLLECTION].find_one_and_update(
            {"_id": assessment_id},
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        return self._from_doc(doc)

    def update_assessment(self, assessment_id, assessment_data, pricing_breakdown):
        updated = self._update(assessment_id, {
            "assessment_data": dict(assessment_data),
            "pricing_breakdown": pricing_breakdown.model_dump(mode="json") if pricing_breakdown else None,
            "updated_at": _now().isoformat(),
        })
        if updated is not None:
            logger.info(f"Updated assessment {assessment_id} in MongoDB")
        return updated

    def update_status(self, assessment_id, status):
        return self._update(assessment_id, {
            "status": status.value,
            "updated_at": _now().isoformat(),
        })

    def list_assessments(self, status=None):
        query = {"status": status.value} if status is not None else {}
        cursor = self._db[self.COLLECTION].find(query).sort("created_at", -1)
        return [self._from_doc(doc) for doc in cursor]


@lru_cache()
def get_repository() -> AssessmentRepository:
    """Process-wide repository: MongoDB when configured, in-memory otherwise."""
    client = MongoClient()
    if client.configured:
        logger.info("Using MongoDB assessment repository")
        return MongoAssessmentRepository(client)
    logger.info("Using in-memory assessment repository")
    return InMemoryAssessmentRepository()
