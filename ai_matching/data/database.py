"""
MongoDB connection manager for the matching engine.

The engine talks to MongoDB through a single lazily created Motor client.
Collections for applications, candidates and jobs are owned by the host
applicant tracker and are only read; ``match_scores`` and
``scoring_configs`` are owned here.
"""

from typing import Any, Optional
from urllib.parse import quote_plus

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError

from ai_matching.utils.config import AppSettings, get_settings
from ai_matching.utils.constants import (
    APPLICATIONS_COLLECTION,
    MATCH_SCORES_COLLECTION,
    SCORING_CONFIGS_COLLECTION,
)
from ai_matching.utils.logger import get_logger

logger = get_logger(__name__)

# collection -> [(keys, options)]
INDEXES: dict[str, list[tuple[Any, dict[str, Any]]]] = {
    MATCH_SCORES_COLLECTION: [
        # One score per application; concurrent upserts collide here
        ("application_id", {"unique": True}),
        ([("organization_id", ASCENDING), ("job_id", ASCENDING)], {}),
        ([("organization_id", ASCENDING), ("overall_score", DESCENDING)], {}),
        ("candidate_id", {}),
    ],
    SCORING_CONFIGS_COLLECTION: [
        ("organization_id", {"unique": True}),
    ],
    APPLICATIONS_COLLECTION: [
        ([("organization_id", ASCENDING), ("job_id", ASCENDING)], {}),
    ],
}


class DatabaseManager:
    """Owns the Motor client; repositories ask it for collections."""

    def __init__(self, settings: Optional[AppSettings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_name = self._settings.database.name
        self._uri = self._build_uri()
        self._client: Optional[AsyncIOMotorClient] = None

    def _build_uri(self) -> str:
        """Connection URI from settings, with credentials URL-encoded."""
        db_settings = self._settings.database
        if db_settings.uri:
            return db_settings.uri.get_secret_value()

        host = db_settings.host.strip()
        if not host or any(c in host for c in [";", "&", "|", "$", "`", "/", "@"]):
            raise ValueError(f"Invalid database host: {host}")

        auth = ""
        if db_settings.username and db_settings.password:
            auth = (
                f"{quote_plus(db_settings.username)}:"
                f"{quote_plus(db_settings.password.get_secret_value())}@"
            )
        return f"mongodb://{auth}{host}:{db_settings.port}"

    @property
    def database_name(self) -> str:
        return self._db_name

    def get_async_client(self) -> AsyncIOMotorClient:
        """Get or create the Motor client."""
        if self._client is None:
            db_settings = self._settings.database
            logger.info(f"Connecting to MongoDB database '{self._db_name}'")
            self._client = AsyncIOMotorClient(
                self._uri,
                serverSelectionTimeoutMS=db_settings.timeout_ms,
                connectTimeoutMS=db_settings.timeout_ms,
                maxPoolSize=db_settings.max_pool_size,
                tz_aware=True,
            )
        return self._client

    def get_async_database(self) -> AsyncIOMotorDatabase:
        return self.get_async_client()[self._db_name]

    def get_async_collection(self, collection_name: str) -> Any:
        return self.get_async_database()[collection_name]

    async def check_connection(self) -> bool:
        """Ping the server; False when it cannot be reached."""
        try:
            await self.get_async_client().admin.command("ping")
            return True
        except (ConnectionFailure, ServerSelectionTimeoutError) as e:
            logger.error(f"MongoDB connection check failed: {e}")
            return False

    def close_all(self) -> None:
        if self._client is not None:
            logger.debug("Closing MongoDB client")
            self._client.close()
            self._client = None

    async def ensure_indexes(self) -> None:
        """Create the indexes the scoring engine relies on (idempotent)."""
        for collection_name, indexes in INDEXES.items():
            collection = self.get_async_collection(collection_name)
            for keys, options in indexes:
                await collection.create_index(keys, **options)
            logger.info(f"Ensured {len(indexes)} index(es) on {collection_name}")


_db_manager: Optional[DatabaseManager] = None


def get_database_manager() -> DatabaseManager:
    """Get the process-wide database manager."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager
