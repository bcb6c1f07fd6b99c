"""
Scoring configuration repository.
"""

from typing import Optional

from pymongo.errors import PyMongoError

from ai_matching.data.models.scoring_config import ScoringConfig
from ai_matching.utils.constants import SCORING_CONFIGS_COLLECTION
from ai_matching.utils.exceptions import PersistenceError
from ai_matching.utils.logger import get_logger

from .base import BaseRepository

logger = get_logger(__name__)


class ScoringConfigRepository(BaseRepository[ScoringConfig]):
    """Repository for per-organization scoring configuration."""

    @property
    def collection_name(self) -> str:
        return SCORING_CONFIGS_COLLECTION

    @property
    def model_class(self) -> type[ScoringConfig]:
        return ScoringConfig

    async def get_by_organization(self, organization_id: str) -> Optional[ScoringConfig]:
        """Get the stored configuration, or None when the organization has none."""
        try:
            return await self.find_one_async({"organization_id": organization_id})
        except PyMongoError as e:
            raise PersistenceError(
                "Failed to read scoring config",
                operation="find_one",
                collection=self.collection_name,
                cause=e,
            ) from e

    async def save(self, config: ScoringConfig) -> ScoringConfig:
        """Create or replace the configuration of an organization."""
        saved = await self.upsert_async({"organization_id": config.organization_id}, config)
        logger.info(f"Saved scoring config for organization {config.organization_id}")
        return saved


# Singleton instance
_scoring_config_repository: Optional[ScoringConfigRepository] = None


def get_scoring_config_repository() -> ScoringConfigRepository:
    """Get the scoring config repository singleton instance."""
    global _scoring_config_repository
    if _scoring_config_repository is None:
        _scoring_config_repository = ScoringConfigRepository()
    return _scoring_config_repository
