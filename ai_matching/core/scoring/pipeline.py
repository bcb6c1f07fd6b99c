"""
Scoring pipeline for a single application.

Steps:
1. Check the organization has scoring enabled and read its weights
2. Load the application with its candidate and job
3. Extract resume text (degrades to empty, never fails)
4. Build the candidate and job text blocks
5. Run the LLM analysis and the semantic similarity concurrently
6. Aggregate the overall score
7. Upsert the result, keyed by application
"""

import asyncio
import time

from ai_matching.core.resume_text import ResumeTextExtractor
from ai_matching.core.scoring.aggregator import compute_overall_score
from ai_matching.core.scoring.config_resolver import ScoringConfigResolver
from ai_matching.core.text_builder import build_candidate_text, build_job_text
from ai_matching.data.models.match_score import MatchScore, ScoreBreakdown, ScoreResult
from ai_matching.data.repositories.application_repository import ApplicationRepository
from ai_matching.data.repositories.match_score_repository import MatchScoreRepository
from ai_matching.ml.embeddings.semantic_similarity import SemanticSimilarityAdapter
from ai_matching.ml.llm.analysis import AnalysisAdapter
from ai_matching.utils.constants import AuditAction
from ai_matching.utils.logger import LoggerMixin, audit_log


class ScoringPipeline(LoggerMixin):
    """Scores one application end to end and persists the result."""

    def __init__(
        self,
        config_resolver: ScoringConfigResolver,
        applications: ApplicationRepository,
        scores: MatchScoreRepository,
        resume_extractor: ResumeTextExtractor,
        analysis: AnalysisAdapter,
        semantic: SemanticSimilarityAdapter,
    ):
        self.config_resolver = config_resolver
        self.applications = applications
        self.scores = scores
        self.resume_extractor = resume_extractor
        self.analysis = analysis
        self.semantic = semantic

    async def score_one(self, application_id: str, organization_id: str) -> MatchScore:
        """
        Score an application and persist the result.

        Nothing is persisted unless both model calls succeed.

        Raises:
            ConfigurationError: If scoring is disabled for the organization.
            NotFoundError: If the application, candidate or job is missing.
            ExternalServiceError: If the analysis or embedding call fails.
            PersistenceError: If the score cannot be saved.
        """
        start_time = time.time()

        config = await self.config_resolver.require_enabled(organization_id)
        weights = config.weights

        context = await self.applications.get_with_records(application_id, organization_id)
        candidate, job = context.candidate, context.job

        resume_text = await self.resume_extractor.extract(candidate.resume_url)

        candidate_text = build_candidate_text(candidate, resume_text)
        job_text = build_job_text(job)

        analysis, semantic_score = await asyncio.gather(
            self.analysis.analyze(candidate_text, job_text),
            self.semantic.score(candidate_text, job_text),
        )

        overall_score = compute_overall_score(
            analysis.skill_score,
            analysis.experience_score,
            semantic_score,
            weights,
        )

        result = ScoreResult(
            overall_score=overall_score,
            skill_score=analysis.skill_score,
            experience_score=analysis.experience_score,
            semantic_score=semantic_score,
            ai_summary=analysis.summary,
            recommendation=analysis.recommendation,
            strengths=analysis.strengths,
            concerns=analysis.concerns,
            breakdown=ScoreBreakdown(
                skills_found=analysis.skills_found,
                skills_missing=analysis.skills_missing,
                experience_details=analysis.experience_details,
            ),
        )

        model_used = f"{self.analysis.model_name}+{self.semantic.model_name}"
        saved = await self.scores.save(
            application_id=application_id,
            organization_id=organization_id,
            candidate_id=context.application.candidate_id,
            job_id=context.application.job_id,
            scores=result,
            weights_used=weights,
            model_used=model_used,
        )

        elapsed_ms = int((time.time() - start_time) * 1000)
        self.logger.info(
            f"Scored application {application_id}: overall={overall_score} "
            f"(skill={result.skill_score}, experience={result.experience_score}, "
            f"semantic={semantic_score}) in {elapsed_ms}ms"
        )
        audit_log(
            AuditAction.CANDIDATE_SCORED,
            {
                "organization_id": organization_id,
                "application_id": application_id,
                "candidate_id": context.application.candidate_id,
                "job_id": context.application.job_id,
                "overall_score": overall_score,
                "recommendation": result.recommendation.value,
                "weights": weights.as_dict(),
                "model_used": model_used,
                "resume_included": bool(resume_text),
            },
        )
        return saved
