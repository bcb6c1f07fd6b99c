"""
Business services for the matching engine.

This module contains the high-level service facade that orchestrates
scoring across the data, ML and core components.
"""

from ai_matching.services.matching_service import (
    MatchingService,
    build_matching_service,
    create_poller,
)

__all__ = [
    "MatchingService",
    "build_matching_service",
    "create_poller",
]
