"""
Match score repository.

Provides the idempotent save of one score per application and the reads
that the batch poller and list views rely on.
"""

from typing import Iterable, Optional

from pymongo.errors import PyMongoError

from ai_matching.data.models.match_score import MatchScore, ScoreResult
from ai_matching.data.models.scoring_config import ScoringWeights
from ai_matching.utils.constants import MATCH_SCORES_COLLECTION
from ai_matching.utils.exceptions import PersistenceError
from ai_matching.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class MatchScoreRepository(BaseRepository[MatchScore]):
    """Repository for match score documents."""

    @property
    def collection_name(self) -> str:
        return MATCH_SCORES_COLLECTION

    @property
    def model_class(self) -> type[MatchScore]:
        return MatchScore

    # -------------------------------------------------------------------------
    # Write
    # -------------------------------------------------------------------------

    async def save(
        self,
        application_id: str,
        organization_id: str,
        candidate_id: str,
        job_id: str,
        scores: ScoreResult,
        weights_used: ScoringWeights,
        model_used: str,
    ) -> MatchScore:
        """
        Save or replace the score for an application.

        Calling this twice for the same application leaves exactly one
        document holding the latest values.
        """
        match_score = MatchScore.from_result(
            application_id=application_id,
            organization_id=organization_id,
            candidate_id=candidate_id,
            job_id=job_id,
            result=scores,
            weights=weights_used,
            model_used=model_used,
        )
        saved = await self.upsert_async({"application_id": application_id}, match_score)
        logger.debug(
            f"Saved match score for application {application_id}: {saved.overall_score}"
        )
        return saved

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    async def get_by_application(self, application_id: str) -> Optional[MatchScore]:
        """Get the score for one application, or None if it has not been scored."""
        try:
            return await self.find_one_async({"application_id": application_id})
        except PyMongoError as e:
            raise PersistenceError(
                "Failed to read match score",
                operation="find_one",
                collection=self.collection_name,
                cause=e,
            ) from e

    async def get_by_job(self, job_id: str, organization_id: str) -> list[MatchScore]:
        """Get all scores for a job, best first."""
        try:
            return await self.find_async(
                {"job_id": job_id, "organization_id": organization_id},
                sort_by="overall_score",
                sort_order=-1,
            )
        except PyMongoError as e:
            raise PersistenceError(
                "Failed to read match scores for job",
                operation="find",
                collection=self.collection_name,
                cause=e,
            ) from e

    async def get_by_applications(self, application_ids: Iterable[str]) -> list[MatchScore]:
        """Get the persisted scores among a set of applications."""
        ids = list(application_ids)
        if not ids:
            return []
        try:
            return await self.find_async(
                {"application_id": {"$in": ids}},
                sort_by="overall_score",
                sort_order=-1,
            )
        except PyMongoError as e:
            raise PersistenceError(
                "Failed to read match scores",
                operation="find",
                collection=self.collection_name,
                cause=e,
            ) from e

    async def scored_application_ids(self, job_id: str, organization_id: str) -> set[str]:
        """Ids of the applications of a job that already have a score."""
        try:
            ids = await self.distinct_async(
                "application_id",
                {"job_id": job_id, "organization_id": organization_id},
            )
        except PyMongoError as e:
            raise PersistenceError(
                "Failed to read scored applications",
                operation="distinct",
                collection=self.collection_name,
                cause=e,
            ) from e
        return {str(i) for i in ids}


# Singleton instance
_match_score_repository: Optional[MatchScoreRepository] = None


def get_match_score_repository() -> MatchScoreRepository:
    """Get the match score repository singleton instance."""
    global _match_score_repository
    if _match_score_repository is None:
        _match_score_repository = MatchScoreRepository()
    return _match_score_repository
