"""
Base repository for the collections this engine owns.

Owned collections are keyed by a natural key (``application_id`` for
scores, ``organization_id`` for configs) and written with an atomic
save-or-replace, never with separate insert and update paths.
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, TypeVar

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from ai_matching.data.database import DatabaseManager, get_database_manager
from ai_matching.data.models.base import BaseDocument, utcnow
from ai_matching.utils.exceptions import PersistenceError
from ai_matching.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseDocument)


def id_variants(id_value: str | ObjectId) -> list[Any]:
    """
    Every stored form of an identifier.

    The host tracker writes references both as strings and as ObjectIds, so
    a hex id matches either form.
    """
    if isinstance(id_value, ObjectId):
        return [id_value, str(id_value)]
    if ObjectId.is_valid(id_value):
        return [id_value, ObjectId(id_value)]
    return [id_value]


def id_query(id_value: str | ObjectId) -> dict[str, Any]:
    """``_id`` filter matching any stored form of ``id_value``."""
    variants = id_variants(id_value)
    if len(variants) == 1:
        return {"_id": variants[0]}
    return {"_id": {"$in": variants}}


class BaseRepository(ABC, Generic[T]):
    """Async access to one owned collection, mapped onto a document model."""

    @property
    @abstractmethod
    def collection_name(self) -> str:
        """Name of the MongoDB collection."""

    @property
    @abstractmethod
    def model_class(self) -> type[T]:
        """Pydantic model stored in the collection."""

    def __init__(self, db_manager: Optional[DatabaseManager] = None) -> None:
        self._db_manager = db_manager or get_database_manager()

    def _get_async_collection(self) -> AsyncIOMotorCollection:
        return self._db_manager.get_async_collection(self.collection_name)

    def _to_model(self, document: Optional[dict[str, Any]]) -> Optional[T]:
        if document is None:
            return None
        return self.model_class.model_validate(document)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def find_async(
        self,
        query: dict[str, Any],
        skip: int = 0,
        limit: int = 0,
        sort_by: str = "created_at",
        sort_order: int = -1,
    ) -> list[T]:
        """Documents matching ``query`` (limit 0 means no limit)."""
        cursor = self._get_async_collection().find(query).skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        cursor = cursor.sort(sort_by, sort_order)
        documents = await cursor.to_list(length=limit or None)
        return [self._to_model(doc) for doc in documents if doc is not None]

    async def find_one_async(self, query: dict[str, Any]) -> Optional[T]:
        document = await self._get_async_collection().find_one(query)
        return self._to_model(document)

    async def distinct_async(self, field: str, query: Optional[dict[str, Any]] = None) -> list[Any]:
        return await self._get_async_collection().distinct(field, query or {})

    # -------------------------------------------------------------------------
    # Save-or-Replace
    # -------------------------------------------------------------------------

    async def upsert_async(self, key_query: dict[str, Any], model: T) -> T:
        """
        Atomically save-or-replace the single document matching ``key_query``.

        Every field of ``model`` is written in one operation, so readers see
        either the previous document or the new one. ``created_at`` survives
        replacement.
        """
        collection = self._get_async_collection()
        document = model.model_dump_mongo()
        document.pop("_id", None)
        created_at = document.pop("created_at", None) or utcnow()
        document["updated_at"] = utcnow()
        update = {"$set": document, "$setOnInsert": {"created_at": created_at}}

        async def write() -> Optional[dict[str, Any]]:
            return await collection.find_one_and_update(
                key_query,
                update,
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )

        try:
            try:
                saved = await write()
            except DuplicateKeyError:
                # Lost an insert race on the unique key; the row exists now
                saved = await write()
        except PyMongoError as e:
            logger.error(f"Upsert into {self.collection_name} failed for {key_query}: {e}")
            raise PersistenceError(
                f"Failed to save {self.collection_name} document",
                operation="upsert",
                collection=self.collection_name,
                cause=e,
            ) from e

        logger.debug(f"Upserted {self.collection_name} document: {key_query}")
        return self._to_model(saved)
