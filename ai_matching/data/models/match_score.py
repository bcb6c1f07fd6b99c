"""
Match score data models.

Defines the persisted result of scoring one application and the value
objects that flow between the scoring stages.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ai_matching.utils.constants import MAX_SCORE, MIN_SCORE, Recommendation

from .base import BaseDocument, EmbeddedModel, as_utc, utcnow
from .scoring_config import ScoringWeights


class ScoreBreakdown(EmbeddedModel):
    """Detail returned by the analysis model alongside its scores."""

    skills_found: list[str] = Field(default_factory=list)
    skills_missing: list[str] = Field(default_factory=list)
    experience_details: str = ""


class ScoreResult(BaseModel):
    """Everything computed for one application, ready to persist."""

    overall_score: int = Field(..., ge=MIN_SCORE, le=MAX_SCORE)
    skill_score: int = Field(..., ge=MIN_SCORE, le=MAX_SCORE)
    experience_score: int = Field(..., ge=MIN_SCORE, le=MAX_SCORE)
    semantic_score: int = Field(..., ge=MIN_SCORE, le=MAX_SCORE)
    ai_summary: str = ""
    recommendation: Recommendation = Recommendation.MODERATE_MATCH
    strengths: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    breakdown: ScoreBreakdown = Field(default_factory=ScoreBreakdown)


class MatchScore(BaseDocument):
    """
    Persisted match score, one document per application.

    ``application_id`` is unique; re-scoring replaces the whole document.
    """

    # References
    organization_id: str
    application_id: str
    candidate_id: str
    job_id: str

    # Scores (0-100)
    overall_score: int = Field(0, ge=MIN_SCORE, le=MAX_SCORE)
    skill_score: int = Field(0, ge=MIN_SCORE, le=MAX_SCORE)
    experience_score: int = Field(0, ge=MIN_SCORE, le=MAX_SCORE)
    semantic_score: int = Field(0, ge=MIN_SCORE, le=MAX_SCORE)

    # AI-generated content
    ai_summary: str = ""
    recommendation: Recommendation = Recommendation.MODERATE_MATCH
    strengths: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    breakdown: ScoreBreakdown = Field(default_factory=ScoreBreakdown)

    # Weights used at time of scoring
    weights: ScoringWeights = Field(default_factory=ScoringWeights)

    # Processing info
    model_used: str = ""
    scored_at: datetime = Field(default_factory=utcnow)

    @field_validator("scored_at", mode="after")
    @classmethod
    def _scored_at_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    @classmethod
    def from_result(
        cls,
        *,
        application_id: str,
        organization_id: str,
        candidate_id: str,
        job_id: str,
        result: ScoreResult,
        weights: ScoringWeights,
        model_used: str,
        scored_at: Optional[datetime] = None,
    ) -> "MatchScore":
        """Assemble a document from a computed result."""
        return cls(
            organization_id=organization_id,
            application_id=application_id,
            candidate_id=candidate_id,
            job_id=job_id,
            overall_score=result.overall_score,
            skill_score=result.skill_score,
            experience_score=result.experience_score,
            semantic_score=result.semantic_score,
            ai_summary=result.ai_summary,
            recommendation=result.recommendation,
            strengths=list(result.strengths),
            concerns=list(result.concerns),
            breakdown=result.breakdown,
            weights=weights,
            model_used=model_used,
            scored_at=scored_at or utcnow(),
        )

    def summary_row(self) -> dict[str, Any]:
        """Flat view used by list displays."""
        return {
            "application_id": self.application_id,
            "candidate_id": self.candidate_id,
            "overall_score": self.overall_score,
            "skill_score": self.skill_score,
            "experience_score": self.experience_score,
            "semantic_score": self.semantic_score,
            "recommendation": self.recommendation,
            "scored_at": self.scored_at,
        }

    class Settings:
        """MongoDB collection settings."""

        name = "match_scores"
        indexes = [
            "application_id",  # unique
            [("organization_id", 1), ("job_id", 1)],
            [("organization_id", 1), ("overall_score", -1)],
            "candidate_id",
        ]
