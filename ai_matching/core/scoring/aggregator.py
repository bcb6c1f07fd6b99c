"""
Overall score aggregation.

The three sub-scores are combined as a weighted mean, then lifted by a
gentle upward curve that boosts the mid-range (60 -> 68, 70 -> 77,
80 -> 85) while leaving the extremes fixed (0 -> 0, 100 -> 100).
"""

from ai_matching.data.models.scoring_config import ScoringWeights
from ai_matching.ml.llm.schema import clamp_score, round_half_up
from ai_matching.utils.constants import MAX_SCORE, MIN_SCORE, SCORE_CURVE_EXPONENT


def _clamp(value: float) -> float:
    return max(float(MIN_SCORE), min(float(MAX_SCORE), value))


def weighted_mean(
    skill_score: float,
    experience_score: float,
    semantic_score: float,
    weights: ScoringWeights,
) -> float:
    """Weighted mean of the sub-scores; 0.0 when the weights sum to zero."""
    total = weights.total
    if total <= 0:
        return 0.0
    return (
        clamp_score(skill_score) * weights.skill
        + clamp_score(experience_score) * weights.experience
        + clamp_score(semantic_score) * weights.semantic
    ) / total


def apply_curve(raw: float) -> float:
    """Map a 0-100 raw score through ``100 * (raw / 100) ** 0.75``."""
    raw = _clamp(raw)
    return MAX_SCORE * (raw / MAX_SCORE) ** SCORE_CURVE_EXPONENT


def compute_overall_score(
    skill_score: float,
    experience_score: float,
    semantic_score: float,
    weights: ScoringWeights,
) -> int:
    """
    Combine sub-scores into the overall match score.

    Example:
        >>> compute_overall_score(80, 70, 60, ScoringWeights(skill=40, experience=30, semantic=30))
        77
    """
    raw = weighted_mean(skill_score, experience_score, semantic_score, weights)
    return round_half_up(_clamp(apply_curve(raw)))
