"""
Per-organization scoring configuration with lazy defaults.
"""

from typing import Mapping, Optional, Union

from pydantic import ValidationError

from ai_matching.data.models.scoring_config import ScoringConfig, ScoringWeights
from ai_matching.data.repositories.scoring_config_repository import ScoringConfigRepository
from ai_matching.utils.constants import AuditAction
from ai_matching.utils.exceptions import ConfigurationError
from ai_matching.utils.logger import LoggerMixin, audit_log

WeightsInput = Union[ScoringWeights, Mapping[str, float]]


class ScoringConfigResolver(LoggerMixin):
    """Reads and updates the scoring configuration of organizations."""

    def __init__(self, repository: ScoringConfigRepository):
        self.repository = repository

    async def get_config(self, organization_id: str) -> ScoringConfig:
        """Stored configuration, or the defaults when none was ever saved."""
        config = await self.repository.get_by_organization(organization_id)
        if config is None:
            return ScoringConfig.defaults_for(organization_id)
        return config

    async def require_enabled(self, organization_id: str) -> ScoringConfig:
        """
        Configuration of an organization that has scoring enabled.

        Raises:
            ConfigurationError: If AI scoring is disabled for the organization.
        """
        config = await self.get_config(organization_id)
        if not config.enabled:
            raise ConfigurationError(
                "AI scoring is disabled for this organization",
                setting="enabled",
                details={"organization_id": organization_id},
            )
        return config

    async def set_config(
        self,
        organization_id: str,
        weights: Optional[WeightsInput] = None,
        enabled: Optional[bool] = None,
        auto_score: Optional[bool] = None,
    ) -> ScoringConfig:
        """
        Update and persist the configuration of an organization.

        Fields left as None keep their current value. Weights given as a
        mapping may be partial.

        Raises:
            ConfigurationError: If a weight is outside 0..100 or all weights are 0.
        """
        current = await self.get_config(organization_id)
        updates: dict = {}

        if weights is not None:
            updates["weights"] = self._merge_weights(current.weights, weights)
        if enabled is not None:
            updates["enabled"] = enabled
        if auto_score is not None:
            updates["auto_score"] = auto_score

        config = current.model_copy(update=updates)
        saved = await self.repository.save(config)

        audit_log(
            AuditAction.CONFIG_UPDATED,
            {
                "organization_id": organization_id,
                "enabled": saved.enabled,
                "auto_score": saved.auto_score,
                "weights": saved.weights.as_dict(),
            },
            audit_type="CONFIG",
        )
        return saved

    @staticmethod
    def _merge_weights(current: ScoringWeights, weights: WeightsInput) -> ScoringWeights:
        if isinstance(weights, ScoringWeights):
            values = weights.as_dict()
        else:
            unknown = set(weights) - {"skill", "experience", "semantic"}
            if unknown:
                raise ConfigurationError(
                    f"Unknown scoring weights: {', '.join(sorted(unknown))}",
                    setting="weights",
                )
            values = {**current.as_dict(), **{k: v for k, v in weights.items() if v is not None}}

        try:
            merged = ScoringWeights.model_validate(values)
        except ValidationError as e:
            raise ConfigurationError(
                "Scoring weights must each be between 0 and 100",
                setting="weights",
                details={"weights": values},
                cause=e,
            ) from e

        if merged.total <= 0:
            raise ConfigurationError(
                "Scoring weights must not all be zero",
                setting="weights",
                details={"weights": values},
            )
        return merged
