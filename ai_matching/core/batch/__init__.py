"""
Batch scoring: the background orchestrator and the client-side progress poller.
"""

from .orchestrator import BatchHandle, BatchOrchestrator, BatchResult
from .poller import (
    CancellationToken,
    PollerState,
    PollProgress,
    ScoringPoller,
)

__all__ = [
    "BatchHandle",
    "BatchOrchestrator",
    "BatchResult",
    "CancellationToken",
    "PollerState",
    "PollProgress",
    "ScoringPoller",
]
