"""
Background batch scoring for all applications of a job.

A batch is started with ``BatchOrchestrator.start``, which picks the target
applications and schedules the work as an asyncio task before returning.
One failing application never stops the others; failures are collected in
``BatchResult.errors`` as ``"<application_id>: <message>"`` entries.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Optional, Protocol

from ai_matching.data.models.match_score import MatchScore
from ai_matching.data.repositories.application_repository import ApplicationRepository
from ai_matching.data.repositories.match_score_repository import MatchScoreRepository
from ai_matching.utils.constants import AuditAction
from ai_matching.utils.exceptions import MatchingError
from ai_matching.utils.logger import LoggerMixin, audit_log


class SingleScorer(Protocol):
    async def score_one(self, application_id: str, organization_id: str) -> MatchScore:
        ...


@dataclass
class BatchResult:
    """Outcome of one batch run."""

    scored: int = 0
    total: int = 0
    errors: list[str] = field(default_factory=list)
    application_ids: list[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def failed(self) -> int:
        return len(self.errors)

    def to_dict(self) -> dict:
        data = {"scored": self.scored, "total": self.total}
        if self.errors:
            data["errors"] = list(self.errors)
        if self.cancelled:
            data["cancelled"] = True
        return data


class BatchHandle:
    """Handle on a running (or already settled) batch."""

    def __init__(
        self,
        job_id: str,
        organization_id: str,
        result: BatchResult,
        task: Optional[asyncio.Task] = None,
    ):
        self.job_id = job_id
        self.organization_id = organization_id
        self._result = result
        self._task = task

    @property
    def target_ids(self) -> list[str]:
        return list(self._result.application_ids)

    @property
    def result(self) -> BatchResult:
        """Result so far; complete once ``done()`` is true."""
        return self._result

    def done(self) -> bool:
        return self._task is None or self._task.done()

    async def settled(self) -> None:
        """Return once the batch task has finished, however it finished."""
        if self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    async def wait(self) -> BatchResult:
        """Wait for the batch to settle and return its result."""
        if self._task is not None:
            try:
                await asyncio.shield(self._task)
            except asyncio.CancelledError:
                if not self._task.cancelled():
                    raise
        return self._result

    def cancel(self) -> bool:
        """Stop scoring the remaining applications. Saved scores are kept."""
        if self._task is None or self._task.done():
            return False
        self._result.cancelled = True
        return self._task.cancel()


class BatchOrchestrator(LoggerMixin):
    """Schedules batch scoring runs."""

    def __init__(
        self,
        scorer: SingleScorer,
        applications: ApplicationRepository,
        scores: MatchScoreRepository,
        max_concurrency: int = 1,
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.scorer = scorer
        self.applications = applications
        self.scores = scores
        self.max_concurrency = max_concurrency

    async def target_application_ids(
        self,
        job_id: str,
        organization_id: str,
        rescore: bool = False,
    ) -> list[str]:
        """
        Applications a batch should score.

        Every application of the job when ``rescore`` is set, otherwise only
        the ones without a persisted score.
        """
        application_ids = await self.applications.list_ids_for_job(job_id, organization_id)
        if rescore or not application_ids:
            return application_ids

        scored = await self.scores.scored_application_ids(job_id, organization_id)
        return [app_id for app_id in application_ids if app_id not in scored]

    async def start(
        self,
        job_id: str,
        organization_id: str,
        rescore: bool = False,
    ) -> BatchHandle:
        """Pick the targets and schedule the batch; returns without waiting."""
        target_ids = await self.target_application_ids(job_id, organization_id, rescore)
        result = BatchResult(total=len(target_ids), application_ids=target_ids)

        if not target_ids:
            self.logger.info(f"No applications to score for job {job_id}")
            return BatchHandle(job_id, organization_id, result)

        audit_log(
            AuditAction.BATCH_STARTED,
            {
                "organization_id": organization_id,
                "job_id": job_id,
                "total": len(target_ids),
                "rescore": rescore,
            },
            audit_type="BATCH",
        )
        task = asyncio.create_task(
            self.run(job_id, organization_id, result),
            name=f"score-batch-{job_id}",
        )
        return BatchHandle(job_id, organization_id, result, task)

    async def run(self, job_id: str, organization_id: str, result: BatchResult) -> BatchResult:
        """Score every target of ``result`` in place."""
        start_time = time.time()
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def score(application_id: str) -> None:
            async with semaphore:
                try:
                    await self.scorer.score_one(application_id, organization_id)
                    result.scored += 1
                except MatchingError as e:
                    self.logger.warning(f"Failed to score application {application_id}: {e.message}")
                    result.errors.append(f"{application_id}: {e.message}")
                except Exception as e:
                    self.logger.exception(f"Unexpected error scoring application {application_id}")
                    result.errors.append(f"{application_id}: {e}")

        try:
            await asyncio.gather(*(score(app_id) for app_id in result.application_ids))
        except asyncio.CancelledError:
            result.cancelled = True
            self.logger.info(
                f"Batch for job {job_id} cancelled after {result.scored}/{result.total} scored"
            )
            raise
        finally:
            elapsed = time.time() - start_time
            audit_log(
                AuditAction.BATCH_COMPLETED,
                {
                    "organization_id": organization_id,
                    "job_id": job_id,
                    "scored": result.scored,
                    "total": result.total,
                    "failed": result.failed,
                    "cancelled": result.cancelled,
                    "elapsed_seconds": round(elapsed, 2),
                },
                audit_type="BATCH",
            )

        self.logger.info(
            f"Batch for job {job_id} finished: {result.scored}/{result.total} scored, "
            f"{result.failed} failed in {time.time() - start_time:.1f}s"
        )
        return result
