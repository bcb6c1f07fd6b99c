"""
Validation schema for the analysis model's JSON output.

The model is asked for a fixed set of fields but is not trusted to honour
it: scores are coerced and clamped into 0..100, unknown recommendations fall
back to ``moderate_match`` and missing fields take defaults.
"""

import json
import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ai_matching.utils.constants import (
    ANALYSIS_SUMMARY_FALLBACK,
    MAX_SCORE,
    MIN_SCORE,
    Recommendation,
)
from ai_matching.utils.exceptions import ExternalServiceError


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upward (16.5 -> 17)."""
    return int(math.floor(value + 0.5))


def clamp_score(value: Any) -> int:
    """Coerce any value to an integer score in 0..100; junk becomes 0."""
    if isinstance(value, bool):
        return MIN_SCORE
    try:
        number = float(value)
    except (TypeError, ValueError):
        return MIN_SCORE
    if math.isnan(number) or math.isinf(number):
        return MIN_SCORE
    return int(max(MIN_SCORE, min(MAX_SCORE, round_half_up(number))))


def _string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]


class AnalysisResponse(BaseModel):
    """Normalized analysis produced by the language model."""

    model_config = ConfigDict(extra="ignore")

    skill_score: int = MIN_SCORE
    experience_score: int = MIN_SCORE
    summary: str = ANALYSIS_SUMMARY_FALLBACK
    recommendation: Recommendation = Recommendation.MODERATE_MATCH
    strengths: list[str] = Field(default_factory=list)
    concerns: list[str] = Field(default_factory=list)
    skills_found: list[str] = Field(default_factory=list)
    skills_missing: list[str] = Field(default_factory=list)
    experience_details: str = ""

    @field_validator("skill_score", "experience_score", mode="before")
    @classmethod
    def _clamp(cls, v: Any) -> int:
        return clamp_score(v)

    @field_validator("summary", mode="before")
    @classmethod
    def _summary(cls, v: Any) -> str:
        if v is None or not str(v).strip():
            return ANALYSIS_SUMMARY_FALLBACK
        return str(v)

    @field_validator("experience_details", mode="before")
    @classmethod
    def _details(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @field_validator("recommendation", mode="before")
    @classmethod
    def _recommendation(cls, v: Any) -> Recommendation:
        return Recommendation.parse(v)

    @field_validator("strengths", "concerns", "skills_found", "skills_missing", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> list[str]:
        return _string_list(v)


def parse_analysis(content: str | None, model: str | None = None) -> AnalysisResponse:
    """
    Parse raw model output into an AnalysisResponse.

    Raises:
        ExternalServiceError: If the output is empty, not JSON, or not a JSON object.
    """
    if content is None or not content.strip():
        raise ExternalServiceError("Empty response from analysis model", service="openai.chat", model=model)

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ExternalServiceError(
            f"Analysis model returned invalid JSON: {e}",
            service="openai.chat",
            model=model,
            cause=e,
        ) from e

    if not isinstance(data, dict):
        raise ExternalServiceError(
            f"Analysis model returned {type(data).__name__}, expected an object",
            service="openai.chat",
            model=model,
        )

    return AnalysisResponse.model_validate(data)
