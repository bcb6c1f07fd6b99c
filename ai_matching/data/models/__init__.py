"""
Pydantic data models and schemas for the matching engine.

This module provides the persisted documents (match scores, scoring
configuration) and the read-only views of candidate/job/application records.
"""

# Base models
from .base import BaseDocument, EmbeddedModel, PyObjectId, as_utc, utcnow

# Scoring configuration
from .scoring_config import ScoringConfig, ScoringWeights

# Match score models
from .match_score import MatchScore, ScoreBreakdown, ScoreResult

# Foreign records
from .records import (
    ApplicationContext,
    ApplicationRecord,
    CandidateRecord,
    ExternalRecord,
    JobRecord,
)

__all__ = [
    # Base
    "BaseDocument",
    "EmbeddedModel",
    "PyObjectId",
    "as_utc",
    "utcnow",
    # Config
    "ScoringConfig",
    "ScoringWeights",
    # Match score
    "MatchScore",
    "ScoreBreakdown",
    "ScoreResult",
    # Records
    "ApplicationContext",
    "ApplicationRecord",
    "CandidateRecord",
    "ExternalRecord",
    "JobRecord",
]
