"""
Database repositories for the matching engine.

This module provides repository classes for the collections the engine
reads and writes, implementing the repository pattern for clean data access.
"""

# Base repository
from .base import BaseRepository

# Entity repositories
from .application_repository import ApplicationRepository, get_application_repository
from .match_score_repository import MatchScoreRepository, get_match_score_repository
from .scoring_config_repository import ScoringConfigRepository, get_scoring_config_repository

__all__ = [
    # Base
    "BaseRepository",
    # Applications (read-only)
    "ApplicationRepository",
    "get_application_repository",
    # Match scores
    "MatchScoreRepository",
    "get_match_score_repository",
    # Scoring config
    "ScoringConfigRepository",
    "get_scoring_config_repository",
]
