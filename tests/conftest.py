"""
Shared test fixtures for the matching engine test suite.

Sets environment variables before any ai_matching imports to prevent config
failures, then provides record factories and in-memory fakes for the
repositories, model adapters and document store so no network or database
is needed.
"""

import os

# === Set environment BEFORE any ai_matching imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("DB_NAME", "ai_matching_test")
os.environ.setdefault("LOG_FILE_OUTPUT", "false")
os.environ.setdefault("OPENAI_API_KEY", "sk-test")

from dataclasses import dataclass
from typing import Any, Iterable, Optional

import numpy as np
import pytest
from bson import ObjectId

from ai_matching.core.batch import BatchOrchestrator
from ai_matching.core.resume_text import ResumeTextExtractor
from ai_matching.core.scoring import ScoringConfigResolver, ScoringPipeline
from ai_matching.data.models import (
    ApplicationContext,
    ApplicationRecord,
    CandidateRecord,
    JobRecord,
    MatchScore,
    ScoreResult,
    ScoringConfig,
    ScoringWeights,
)
from ai_matching.ml.embeddings import SemanticSimilarityAdapter
from ai_matching.ml.llm import AnalysisResponse
from ai_matching.services.matching_service import MatchingService
from ai_matching.utils.exceptions import ExternalServiceError, NotFoundError, PersistenceError


# ---------------------------------------------------------------------------
# Record factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_candidate():
    """Factory that returns a callable to build CandidateRecord instances."""

    def _factory(**overrides: Any) -> CandidateRecord:
        data = {
            "_id": str(ObjectId()),
            "first_name": "Jane",
            "last_name": "Smith",
            "email": "jane.smith@example.com",
            "current_company": "Acme Corp",
            "current_title": "Senior Software Engineer",
            "location": "San Francisco, CA",
            "resume_url": None,
            "resume_parsed_data": None,
            "tags": ["python", "django", "postgresql"],
            "notes": None,
        }
        data.update(overrides)
        return CandidateRecord.model_validate(data)

    return _factory


@pytest.fixture
def make_job():
    """Factory that returns a callable to build JobRecord instances."""

    def _factory(**overrides: Any) -> JobRecord:
        data = {
            "_id": str(ObjectId()),
            "title": "Backend Engineer",
            "department": "Engineering",
            "location": "Remote",
            "employment_type": "full_time",
            "description": "Build and run our scoring APIs.",
            "requirements": "5+ years of Python, experience with MongoDB.",
        }
        data.update(overrides)
        return JobRecord.model_validate(data)

    return _factory


@pytest.fixture
def make_score_result():
    """Factory that returns a callable to build ScoreResult instances."""

    def _factory(**overrides: Any) -> ScoreResult:
        data = {
            "overall_score": 77,
            "skill_score": 80,
            "experience_score": 70,
            "semantic_score": 60,
            "ai_summary": "Solid backend profile.",
            "recommendation": "good_match",
            "strengths": ["Python"],
            "concerns": ["No Go experience"],
        }
        data.update(overrides)
        return ScoreResult.model_validate(data)

    return _factory


# ---------------------------------------------------------------------------
# In-memory fakes
# ---------------------------------------------------------------------------


class FakeMatchScoreRepository:
    """Dict-backed stand-in for MatchScoreRepository."""

    def __init__(self) -> None:
        self.documents: dict[str, MatchScore] = {}
        self.save_calls = 0
        self.fail_save = False
        self.fail_reads = False

    async def save(
        self,
        application_id: str,
        organization_id: str,
        candidate_id: str,
        job_id: str,
        scores: ScoreResult,
        weights_used: ScoringWeights,
        model_used: str,
    ) -> MatchScore:
        self.save_calls += 1
        if self.fail_save:
            raise PersistenceError("write failed", operation="upsert", collection="match_scores")

        document = MatchScore.from_result(
            application_id=application_id,
            organization_id=organization_id,
            candidate_id=candidate_id,
            job_id=job_id,
            result=scores,
            weights=weights_used,
            model_used=model_used,
        )
        existing = self.documents.get(application_id)
        document.id = existing.id if existing else ObjectId()
        if existing:
            document.created_at = existing.created_at
        self.documents[application_id] = document
        return document

    async def get_by_application(self, application_id: str) -> Optional[MatchScore]:
        return self.documents.get(application_id)

    async def get_by_job(self, job_id: str, organization_id: str) -> list[MatchScore]:
        found = [
            d for d in self.documents.values()
            if d.job_id == job_id and d.organization_id == organization_id
        ]
        return sorted(found, key=lambda d: d.overall_score, reverse=True)

    async def get_by_applications(self, application_ids: Iterable[str]) -> list[MatchScore]:
        if self.fail_reads:
            raise PersistenceError("read failed", operation="find", collection="match_scores")
        ids = set(application_ids)
        return [d for d in self.documents.values() if d.application_id in ids]

    async def scored_application_ids(self, job_id: str, organization_id: str) -> set[str]:
        return {d.application_id for d in await self.get_by_job(job_id, organization_id)}


class FakeScoringConfigRepository:
    """Dict-backed stand-in for ScoringConfigRepository."""

    def __init__(self) -> None:
        self.configs: dict[str, ScoringConfig] = {}
        self.save_calls = 0

    async def get_by_organization(self, organization_id: str) -> Optional[ScoringConfig]:
        return self.configs.get(organization_id)

    async def save(self, config: ScoringConfig) -> ScoringConfig:
        self.save_calls += 1
        stored = config.model_copy(update={"id": config.id or ObjectId()})
        self.configs[config.organization_id] = stored
        return stored


class FakeApplicationRepository:
    """Holds applications with their candidates and jobs in memory."""

    def __init__(self) -> None:
        self.applications: dict[str, ApplicationRecord] = {}
        self.candidates: dict[str, CandidateRecord] = {}
        self.jobs: dict[str, JobRecord] = {}

    def add(
        self,
        candidate: CandidateRecord,
        job: JobRecord,
        organization_id: str = "org-1",
        application_id: Optional[str] = None,
    ) -> str:
        application_id = application_id or str(ObjectId())
        self.candidates[candidate.id] = candidate
        self.jobs[job.id] = job
        self.applications[application_id] = ApplicationRecord.model_validate(
            {
                "_id": application_id,
                "organization_id": organization_id,
                "candidate_id": candidate.id,
                "job_id": job.id,
            }
        )
        return application_id

    async def get_with_records(self, application_id: str, organization_id: str) -> ApplicationContext:
        application = self.applications.get(application_id)
        if application is None or application.organization_id != organization_id:
            raise NotFoundError("Application not found", resource_type="application", resource_id=application_id)
        candidate = self.candidates.get(application.candidate_id)
        if candidate is None:
            raise NotFoundError("Missing candidate data", resource_type="candidate")
        job = self.jobs.get(application.job_id)
        if job is None:
            raise NotFoundError("Missing job data", resource_type="job")
        return ApplicationContext(application=application, candidate=candidate, job=job)

    async def list_ids_for_job(self, job_id: str, organization_id: str) -> list[str]:
        return [
            app_id for app_id, app in self.applications.items()
            if app.job_id == job_id and app.organization_id == organization_id
        ]


class FakeAnalysisAdapter:
    """Returns a canned analysis; fails when the candidate text contains a marker."""

    model_name = "gpt-4o"

    def __init__(self, response: Optional[AnalysisResponse] = None) -> None:
        self.response = response or AnalysisResponse(
            skill_score=80,
            experience_score=70,
            summary="Strong backend engineer.",
            recommendation="good_match",
            strengths=["Python", "APIs"],
            concerns=["Limited cloud exposure"],
            skills_found=["python"],
            skills_missing=["kubernetes"],
            experience_details="Six years in similar roles.",
        )
        self.fail_markers: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    async def analyze(self, candidate_text: str, job_text: str) -> AnalysisResponse:
        self.calls.append((candidate_text, job_text))
        if any(marker in candidate_text for marker in self.fail_markers):
            raise ExternalServiceError("model unavailable", service="openai.chat", model=self.model_name)
        return self.response


class FakeEmbeddingBackend:
    """Returns fixed vectors whose cosine similarity is ``similarity``."""

    model_name = "text-embedding-3-small"

    def __init__(self, similarity: float = 0.69) -> None:
        self.similarity = similarity
        self.calls: list[list[str]] = []
        self.fail = False

    async def embed(self, texts: list[str]) -> list[np.ndarray]:
        self.calls.append(list(texts))
        if self.fail:
            raise ExternalServiceError("embedding unavailable", service="embeddings")
        a = np.array([1.0, 0.0])
        b = np.array([self.similarity, np.sqrt(max(0.0, 1 - self.similarity ** 2))])
        return [a, b]


class FakeDocumentStore:
    """Serves documents from a dict keyed by store path."""

    def __init__(self, documents: Optional[dict[str, bytes]] = None) -> None:
        self.documents = documents or {}
        self.fetched: list[str] = []

    async def fetch(self, path: str) -> bytes:
        self.fetched.append(path)
        if path not in self.documents:
            raise FileNotFoundError(path)
        return self.documents[path]


@dataclass
class ScoringHarness:
    """A fully wired service over in-memory fakes."""

    scores: FakeMatchScoreRepository
    configs: FakeScoringConfigRepository
    applications: FakeApplicationRepository
    analysis: FakeAnalysisAdapter
    embeddings: FakeEmbeddingBackend
    store: FakeDocumentStore
    pipeline: ScoringPipeline
    orchestrator: BatchOrchestrator
    service: MatchingService
    organization_id: str = "org-1"


@pytest.fixture
def fake_score_repository():
    return FakeMatchScoreRepository()


@pytest.fixture
def fake_config_repository():
    return FakeScoringConfigRepository()


@pytest.fixture
def make_harness():
    """Factory that builds a ScoringHarness; keyword args tweak the fakes."""

    def _factory(max_concurrency: int = 1, similarity: float = 0.69) -> ScoringHarness:
        scores = FakeMatchScoreRepository()
        configs = FakeScoringConfigRepository()
        applications = FakeApplicationRepository()
        analysis = FakeAnalysisAdapter()
        embeddings = FakeEmbeddingBackend(similarity)
        store = FakeDocumentStore()

        resolver = ScoringConfigResolver(configs)
        pipeline = ScoringPipeline(
            config_resolver=resolver,
            applications=applications,
            scores=scores,
            resume_extractor=ResumeTextExtractor(store),
            analysis=analysis,
            semantic=SemanticSimilarityAdapter(embeddings),
        )
        orchestrator = BatchOrchestrator(pipeline, applications, scores, max_concurrency=max_concurrency)
        service = MatchingService(pipeline, orchestrator, resolver, scores, poll_interval=0.01)
        return ScoringHarness(
            scores=scores,
            configs=configs,
            applications=applications,
            analysis=analysis,
            embeddings=embeddings,
            store=store,
            pipeline=pipeline,
            orchestrator=orchestrator,
            service=service,
        )

    return _factory


@pytest.fixture
def harness(make_harness):
    return make_harness()


@pytest.fixture
def make_document_store():
    """Factory for an in-memory document store holding ``documents``."""

    def _factory(documents: Optional[dict[str, bytes]] = None) -> FakeDocumentStore:
        return FakeDocumentStore(documents)

    return _factory
