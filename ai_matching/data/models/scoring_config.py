"""
Per-organization scoring configuration models.
"""

from pydantic import Field

from ai_matching.utils.constants import (
    DEFAULT_AUTO_SCORE,
    DEFAULT_SCORING_ENABLED,
    DEFAULT_SCORING_WEIGHTS,
    MAX_WEIGHT,
)

from .base import BaseDocument, EmbeddedModel


class ScoringWeights(EmbeddedModel):
    """Relative weights of the three sub-scores.

    The UI keeps these summing to 100, but the aggregator normalizes by the
    total so any positive total works.
    """

    skill: float = Field(DEFAULT_SCORING_WEIGHTS["skill"], ge=0, le=MAX_WEIGHT)
    experience: float = Field(DEFAULT_SCORING_WEIGHTS["experience"], ge=0, le=MAX_WEIGHT)
    semantic: float = Field(DEFAULT_SCORING_WEIGHTS["semantic"], ge=0, le=MAX_WEIGHT)

    @property
    def total(self) -> float:
        return self.skill + self.experience + self.semantic

    def as_dict(self) -> dict[str, float]:
        return {
            "skill": self.skill,
            "experience": self.experience,
            "semantic": self.semantic,
        }


class ScoringConfig(BaseDocument):
    """
    Scoring settings for one organization.

    A missing document resolves to these defaults; the document is only
    written on the first explicit update.
    """

    organization_id: str
    enabled: bool = DEFAULT_SCORING_ENABLED
    auto_score: bool = DEFAULT_AUTO_SCORE
    weights: ScoringWeights = Field(default_factory=ScoringWeights)

    @classmethod
    def defaults_for(cls, organization_id: str) -> "ScoringConfig":
        """Build the documented default configuration."""
        return cls(organization_id=organization_id)

    class Settings:
        """MongoDB collection settings."""

        name = "scoring_configs"
        indexes = ["organization_id"]  # unique
