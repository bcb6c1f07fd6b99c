"""
Progress poller for batch scoring.

The poller triggers a batch and then watches the persisted scores of the
batch's targets until every target is scored or the batch settles. It is a
small state machine::

    IDLE -> REQUESTED -> POLLING -> DONE -> IDLE

The loop belongs to the caller: cancelling its ``CancellationToken`` stops
the polling and returns the poller to IDLE without touching the batch.
"""

import asyncio
import inspect
from datetime import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Optional, Protocol, Union

from ai_matching.core.batch.orchestrator import BatchHandle
from ai_matching.data.models.base import utcnow
from ai_matching.data.models.match_score import MatchScore
from ai_matching.data.models.scoring_config import ScoringConfig
from ai_matching.utils.constants import DEFAULT_POLL_INTERVAL
from ai_matching.utils.exceptions import MatchingError
from ai_matching.utils.logger import LoggerMixin


class PollerState(str, Enum):
    IDLE = "idle"
    REQUESTED = "requested"
    POLLING = "polling"
    DONE = "done"


class CancellationToken:
    """Cooperative cancellation flag owned by whoever started the poller."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def sleep(self, seconds: float, wake: Optional[Awaitable[Any]] = None) -> bool:
        """
        Sleep up to ``seconds``, or until cancelled or ``wake`` completes.

        Returns True if cancelled meanwhile.
        """
        waiters = {asyncio.ensure_future(self._event.wait())}
        if wake is not None:
            waiters.add(asyncio.ensure_future(wake))
        try:
            await asyncio.wait(waiters, timeout=seconds, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()
        return self.cancelled


@dataclass(frozen=True)
class PollProgress:
    """Scores persisted so far for the batch's targets."""

    scored: int
    total: int
    scores: list[MatchScore] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.scored >= self.total


ProgressCallback = Callable[[PollProgress], Union[None, Awaitable[None]]]


class BatchScoringSource(Protocol):
    async def score_batch(
        self, job_id: str, organization_id: str, rescore: bool = False
    ) -> BatchHandle:
        ...

    async def get_scores_for_applications(
        self, application_ids: Iterable[str]
    ) -> list[MatchScore]:
        ...

    async def get_config(self, organization_id: str) -> ScoringConfig:
        ...


class ScoringPoller(LoggerMixin):
    """Triggers batch scoring for one job and reports progress until it settles."""

    def __init__(
        self,
        source: BatchScoringSource,
        job_id: str,
        organization_id: str,
        interval: float = DEFAULT_POLL_INTERVAL,
        on_progress: Optional[ProgressCallback] = None,
    ):
        if interval <= 0:
            raise ValueError("Poll interval must be positive")
        self.source = source
        self.job_id = job_id
        self.organization_id = organization_id
        self.interval = interval
        self.on_progress = on_progress

        self._state = PollerState.IDLE
        self._since: Optional[datetime] = None
        self.handle: Optional[BatchHandle] = None
        self.last_progress: Optional[PollProgress] = None

    @property
    def state(self) -> PollerState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is not PollerState.IDLE

    async def auto_score(
        self, token: Optional[CancellationToken] = None
    ) -> Optional[PollProgress]:
        """
        Score the job's unscored applications if the organization has
        automatic scoring on, and follow progress.

        Returns the final progress, or None when automatic scoring is off,
        a batch is already in flight, the batch could not start, or the
        token was cancelled.
        """
        if not await self._auto_score_enabled():
            return None
        return await self._run(rescore=False, token=token)

    async def score_unscored(
        self, token: Optional[CancellationToken] = None
    ) -> Optional[PollProgress]:
        """Score the job's unscored applications on request, whatever the auto-score flag."""
        return await self._run(rescore=False, token=token)

    async def rescore_all(
        self, token: Optional[CancellationToken] = None
    ) -> Optional[PollProgress]:
        """Re-score every application of the job and follow progress."""
        return await self._run(rescore=True, token=token)

    async def _auto_score_enabled(self) -> bool:
        try:
            config = await self.source.get_config(self.organization_id)
        except MatchingError as e:
            self.logger.error(f"Could not read scoring config for {self.organization_id}: {e.message}")
            return False
        if not config.auto_score:
            self.logger.debug(f"Automatic scoring is off for organization {self.organization_id}")
        return config.auto_score

    async def _run(
        self, rescore: bool, token: Optional[CancellationToken]
    ) -> Optional[PollProgress]:
        if self.is_active:
            self.logger.debug(f"Batch already in flight for job {self.job_id}, ignoring trigger")
            return None

        token = token or CancellationToken()
        self._state = PollerState.REQUESTED
        # On re-score, old rows do not count until they are rewritten
        self._since = None
        if rescore:
            started = utcnow()
            # Mongo keeps millisecond precision
            self._since = started.replace(microsecond=started.microsecond // 1000 * 1000)
        try:
            try:
                handle = await self.source.score_batch(
                    self.job_id, self.organization_id, rescore=rescore
                )
            except MatchingError as e:
                self.logger.error(f"Could not start batch for job {self.job_id}: {e.message}")
                return None
            except Exception:
                self.logger.exception(f"Could not start batch for job {self.job_id}")
                return None

            self.handle = handle
            self._state = PollerState.POLLING

            while handle.target_ids and not token.cancelled:
                progress = await self._fetch(handle.target_ids)
                if progress is not None:
                    await self._report(progress)
                    if progress.complete:
                        break
                if handle.done():
                    break
                if await token.sleep(self.interval, wake=handle.settled()):
                    break

            if token.cancelled:
                self.logger.info(f"Polling for job {self.job_id} cancelled")
                return None

            self._state = PollerState.DONE
            final = await self._fetch(handle.target_ids) or self.last_progress
            if final is None:
                final = PollProgress(scored=0, total=len(handle.target_ids))
            await self._report(final)

            if handle.done():
                result = handle.result
                for error in result.errors:
                    self.logger.warning(f"Batch error: {error}")
            return final
        finally:
            self._state = PollerState.IDLE

    async def _fetch(self, target_ids: list[str]) -> Optional[PollProgress]:
        if not target_ids:
            return PollProgress(scored=0, total=0)
        try:
            scores = await self.source.get_scores_for_applications(target_ids)
        except MatchingError as e:
            self.logger.warning(f"Could not read scores for job {self.job_id}: {e.message}")
            return None

        targets = set(target_ids)
        if self._since is not None:
            scores = [s for s in scores if s.scored_at >= self._since]
        scored = {score.application_id for score in scores if score.application_id in targets}
        return PollProgress(scored=len(scored), total=len(target_ids), scores=scores)

    async def _report(self, progress: PollProgress) -> None:
        self.last_progress = progress
        if self.on_progress is None:
            return
        outcome: Any = self.on_progress(progress)
        if inspect.isawaitable(outcome):
            await outcome
