"""
Mongo Client — raw database connection management.
Only connects when MONGODB_URI is configured.
"""

from __future__ import annotations

import logging
from typing import Any

from assessment_engine.config import get_settings

logger = logging.getLogger(__name__)


class MongoClient:
    """
    Thin wrapper around pymongo.
    Without a configured URI get_database() returns None.
    """

    def __init__(self):
        self.settings = get_settings()
        self._client: Any = None
        self._db: Any = None

    @property
    def configured(self) -> bool:
        return bool(self.settings.mongodb_uri)

    def connect(self) -> None:
        """Establish the MongoDB connection (no-op without a URI)."""
        if not self.configured:
            logger.info("MONGODB_URI not set — MongoDB connection skipped")
            return

        from pymongo import MongoClient as PyMongoClient

        self._client = PyMongoClient(
            self.settings.mongodb_uri,
            serverSelectionTimeoutMS=self.settings.mongodb_timeout_ms,
        )
        self._db = self._client[self.settings.mongodb_database]
        logger.info(f"Connected to MongoDB: {self.settings.mongodb_database}")

    def get_database(self) -> Any:
        """Return the database handle."""
        if self._db is None and self.configured:
            self.connect()
        return self._db
