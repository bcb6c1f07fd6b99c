"""
Matching service facade.

The single entry point for callers: scoring one application, starting a
batch for a job, reading persisted scores and managing per-organization
scoring configuration. ``build_matching_service`` wires every component
from settings.
"""

from typing import Iterable, Mapping, Optional, Union

from ai_matching.core.batch import BatchHandle, BatchOrchestrator, ScoringPoller
from ai_matching.core.batch.poller import ProgressCallback
from ai_matching.core.resume_text import ResumeTextExtractor
from ai_matching.core.scoring import ScoringConfigResolver, ScoringPipeline
from ai_matching.data.database import DatabaseManager
from ai_matching.data.models.match_score import MatchScore
from ai_matching.data.models.scoring_config import ScoringConfig, ScoringWeights
from ai_matching.data.repositories import (
    ApplicationRepository,
    MatchScoreRepository,
    ScoringConfigRepository,
)
from ai_matching.ml.embeddings import SemanticSimilarityAdapter, create_embedding_backend
from ai_matching.ml.llm import LLMAnalysisAdapter, OpenAIClient
from ai_matching.data.document_store import create_document_store
from ai_matching.utils.config import AppSettings, get_settings
from ai_matching.utils.logger import LoggerMixin


class MatchingService(LoggerMixin):
    """High-level operations of the matching engine."""

    def __init__(
        self,
        pipeline: ScoringPipeline,
        orchestrator: BatchOrchestrator,
        config_resolver: ScoringConfigResolver,
        scores: MatchScoreRepository,
        poll_interval: float = 3.0,
    ):
        self.pipeline = pipeline
        self.orchestrator = orchestrator
        self.config_resolver = config_resolver
        self.scores = scores
        self.poll_interval = poll_interval

    # -------------------------------------------------------------------------
    # Scoring
    # -------------------------------------------------------------------------

    async def score_one(self, application_id: str, organization_id: str) -> MatchScore:
        """Score one application and persist the result (raises on failure)."""
        return await self.pipeline.score_one(application_id, organization_id)

    async def score_batch(
        self,
        job_id: str,
        organization_id: str,
        rescore: bool = False,
    ) -> BatchHandle:
        """Start scoring a job's applications in the background."""
        # Fail fast instead of recording one identical error per application
        await self.config_resolver.require_enabled(organization_id)
        return await self.orchestrator.start(job_id, organization_id, rescore=rescore)

    def create_poller(
        self,
        job_id: str,
        organization_id: str,
        interval: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ScoringPoller:
        """Poller that triggers batches for a job and follows their progress."""
        return ScoringPoller(
            self,
            job_id,
            organization_id,
            interval=interval or self.poll_interval,
            on_progress=on_progress,
        )

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_score(self, application_id: str) -> Optional[MatchScore]:
        return await self.scores.get_by_application(application_id)

    async def get_scores_for_job(self, job_id: str, organization_id: str) -> list[MatchScore]:
        return await self.scores.get_by_job(job_id, organization_id)

    async def get_scores_for_applications(
        self, application_ids: Iterable[str]
    ) -> list[MatchScore]:
        return await self.scores.get_by_applications(application_ids)

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    async def get_config(self, organization_id: str) -> ScoringConfig:
        return await self.config_resolver.get_config(organization_id)

    async def set_config(
        self,
        organization_id: str,
        weights: Optional[Union[ScoringWeights, Mapping[str, float]]] = None,
        enabled: Optional[bool] = None,
        auto_score: Optional[bool] = None,
    ) -> ScoringConfig:
        return await self.config_resolver.set_config(
            organization_id,
            weights=weights,
            enabled=enabled,
            auto_score=auto_score,
        )


def build_matching_service(
    settings: Optional[AppSettings] = None,
    db_manager: Optional[DatabaseManager] = None,
) -> MatchingService:
    """
    Wire a MatchingService from settings.

    Raises:
        ConfigurationError: If the OpenAI API key is missing.
    """
    settings = settings or get_settings()
    db_manager = db_manager or DatabaseManager(settings)

    client = OpenAIClient.from_settings(settings.openai)

    applications = ApplicationRepository(db_manager)
    scores = MatchScoreRepository(db_manager)
    configs = ScoringConfigRepository(db_manager)
    config_resolver = ScoringConfigResolver(configs)

    database = db_manager.get_async_database() if settings.storage.backend == "gridfs" else None
    store = create_document_store(settings.storage, database)
    resume_extractor = ResumeTextExtractor(
        store,
        bucket=settings.storage.bucket,
        max_chars=settings.scoring.resume_max_chars,
    )

    pipeline = ScoringPipeline(
        config_resolver=config_resolver,
        applications=applications,
        scores=scores,
        resume_extractor=resume_extractor,
        analysis=LLMAnalysisAdapter(client),
        semantic=SemanticSimilarityAdapter(create_embedding_backend(settings.ml, client)),
    )
    orchestrator = BatchOrchestrator(
        pipeline,
        applications,
        scores,
        max_concurrency=settings.scoring.max_concurrency,
    )
    return MatchingService(
        pipeline,
        orchestrator,
        config_resolver,
        scores,
        poll_interval=settings.scoring.poll_interval,
    )


def create_poller(
    service: MatchingService,
    job_id: str,
    organization_id: str,
    interval: Optional[float] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> ScoringPoller:
    """Module-level shortcut for ``MatchingService.create_poller``."""
    return service.create_poller(job_id, organization_id, interval=interval, on_progress=on_progress)
