"""
Read-only access to the application, candidate and job collections.

These collections belong to the surrounding applicant tracker; this
repository never writes to them.
"""

from typing import Any, Optional

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from ai_matching.data.database import DatabaseManager, get_database_manager
from ai_matching.data.models.records import (
    ApplicationContext,
    ApplicationRecord,
    CandidateRecord,
    JobRecord,
)
from ai_matching.utils.constants import (
    APPLICATIONS_COLLECTION,
    CANDIDATES_COLLECTION,
    JOBS_COLLECTION,
)
from ai_matching.utils.exceptions import NotFoundError, PersistenceError
from ai_matching.utils.logger import get_logger

from .base import id_query, id_variants

logger = get_logger(__name__)


class ApplicationRepository:
    """Loads applications together with their candidate and job."""

    def __init__(self, db_manager: Optional[DatabaseManager] = None) -> None:
        self._db_manager = db_manager or get_database_manager()

    def _collection(self, name: str) -> Any:
        return self._db_manager.get_async_collection(name)

    async def _find_by_id(self, collection_name: str, id_value: str) -> Optional[dict[str, Any]]:
        try:
            return await self._collection(collection_name).find_one(id_query(id_value))
        except PyMongoError as e:
            raise PersistenceError(
                f"Failed to read {collection_name}",
                operation="find_one",
                collection=collection_name,
                cause=e,
            ) from e

    async def get_with_records(
        self, application_id: str, organization_id: str
    ) -> ApplicationContext:
        """
        Load an application of an organization with its candidate and job.

        Raises:
            NotFoundError: If the application, its candidate or its job is missing.
        """
        app_doc = await self._find_by_id(APPLICATIONS_COLLECTION, application_id)
        if app_doc is None or str(app_doc.get("organization_id")) != str(organization_id):
            raise NotFoundError(
                "Application not found",
                resource_type="application",
                resource_id=application_id,
            )

        try:
            application = ApplicationRecord.model_validate(app_doc)
        except ValidationError as e:
            raise NotFoundError(
                "Application record is incomplete",
                resource_type="application",
                resource_id=application_id,
                cause=e,
            ) from e

        candidate_doc = await self._find_by_id(CANDIDATES_COLLECTION, application.candidate_id)
        job_doc = await self._find_by_id(JOBS_COLLECTION, application.job_id)

        if candidate_doc is None:
            raise NotFoundError(
                "Missing candidate data",
                resource_type="candidate",
                resource_id=application.candidate_id,
            )
        if job_doc is None:
            raise NotFoundError(
                "Missing job data",
                resource_type="job",
                resource_id=application.job_id,
            )

        try:
            candidate = CandidateRecord.model_validate(candidate_doc)
            job = JobRecord.model_validate(job_doc)
        except ValidationError as e:
            raise NotFoundError(
                "Candidate or job record is incomplete",
                resource_type="application",
                resource_id=application_id,
                cause=e,
            ) from e

        return ApplicationContext(application=application, candidate=candidate, job=job)

    async def list_ids_for_job(self, job_id: str, organization_id: str) -> list[str]:
        """Ids of every application of a job, in insertion order."""
        try:
            cursor = self._collection(APPLICATIONS_COLLECTION).find(
                {
                    "job_id": {"$in": id_variants(job_id)},
                    "organization_id": {"$in": id_variants(organization_id)},
                },
                {"_id": 1},
            ).sort("_id", 1)
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise PersistenceError(
                "Failed to list applications",
                operation="find",
                collection=APPLICATIONS_COLLECTION,
                cause=e,
            ) from e
        logger.debug(f"Job {job_id} has {len(documents)} applications")
        return [str(doc["_id"]) for doc in documents]


# Singleton instance
_application_repository: Optional[ApplicationRepository] = None


def get_application_repository() -> ApplicationRepository:
    """Get the application repository singleton instance."""
    global _application_repository
    if _application_repository is None:
        _application_repository = ApplicationRepository()
    return _application_repository
