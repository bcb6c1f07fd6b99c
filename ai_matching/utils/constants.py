"""
Application-wide constants for the AI matching engine.

This module contains all constant values used throughout the application.
The scoring formula constants are part of the persisted contract: changing
them changes every score the engine produces.
"""

from enum import Enum
from typing import Final


# =============================================================================
# Application Constants
# =============================================================================

APP_NAME: Final[str] = "ai-matching"
APP_DISPLAY_NAME: Final[str] = "AI Candidate Matching Engine"
VERSION: Final[str] = "0.1.0"


# =============================================================================
# Collections
# =============================================================================

MATCH_SCORES_COLLECTION: Final[str] = "match_scores"
SCORING_CONFIGS_COLLECTION: Final[str] = "scoring_configs"
APPLICATIONS_COLLECTION: Final[str] = "applications"
CANDIDATES_COLLECTION: Final[str] = "candidates"
JOBS_COLLECTION: Final[str] = "jobs"


# =============================================================================
# Scoring Constants
# =============================================================================

# Default per-organization weights (UI convention: they sum to 100)
DEFAULT_SCORING_WEIGHTS: Final[dict[str, float]] = {
    "skill": 40,
    "experience": 30,
    "semantic": 30,
}
DEFAULT_SCORING_ENABLED: Final[bool] = True
DEFAULT_AUTO_SCORE: Final[bool] = True

MIN_SCORE: Final[int] = 0
MAX_SCORE: Final[int] = 100
MAX_WEIGHT: Final[float] = 100

# Upward curve applied to the weighted average: 100 * (raw / 100) ** exponent
SCORE_CURVE_EXPONENT: Final[float] = 0.75

# Cosine similarity rescale: 0.45 -> 0, 0.85 -> 100
SEMANTIC_SIMILARITY_FLOOR: Final[float] = 0.45
SEMANTIC_SIMILARITY_SCALE: Final[float] = 250.0

# Resume text is cut to this many characters before prompting
RESUME_MAX_CHARS: Final[int] = 8000

# Seconds between progress polls while a batch is in flight
DEFAULT_POLL_INTERVAL: Final[float] = 3.0

ANALYSIS_SUMMARY_FALLBACK: Final[str] = "Analysis unavailable"


# =============================================================================
# Enums
# =============================================================================


class Recommendation(str, Enum):
    """Categorical hiring recommendation returned by the analysis model."""

    STRONG_MATCH = "strong_match"
    GOOD_MATCH = "good_match"
    MODERATE_MATCH = "moderate_match"
    WEAK_MATCH = "weak_match"
    POOR_MATCH = "poor_match"

    @classmethod
    def parse(cls, value: object) -> "Recommendation":
        """Coerce a raw model value, falling back to moderate_match."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower().replace(" ", "_").replace("-", "_")
            for member in cls:
                if member.value == normalized:
                    return member
        return cls.MODERATE_MATCH


class AuditAction(str, Enum):
    """Types of actions that can be audited."""

    CANDIDATE_SCORED = "candidate_scored"
    BATCH_STARTED = "batch_started"
    BATCH_COMPLETED = "batch_completed"
    CONFIG_UPDATED = "scoring_config_updated"
