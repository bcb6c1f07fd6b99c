"""
LLM analysis of candidate-job fit.

Sends the candidate and job text blocks to the chat model and returns a
validated AnalysisResponse with skill and experience scores, a summary,
a recommendation and itemised strengths, concerns and skill lists.
"""

from typing import Optional, Protocol

from ai_matching.ml.llm.client import OpenAIClient
from ai_matching.ml.llm.schema import AnalysisResponse, parse_analysis
from ai_matching.utils.logger import LoggerMixin

ANALYSIS_SYSTEM_PROMPT = """You are an expert HR analyst evaluating candidate-job fit. Analyze the candidate profile against the job requirements and return a JSON response.

Return ONLY valid JSON with this exact structure:
{
  "skill_score": <0-100 integer>,
  "experience_score": <0-100 integer>,
  "summary": "<2-3 sentence summary of the match>",
  "recommendation": "<one of: strong_match, good_match, moderate_match, weak_match, poor_match>",
  "strengths": ["<strength 1>", "<strength 2>", ...],
  "concerns": ["<concern 1>", "<concern 2>", ...],
  "skills_found": ["<matching skill 1>", ...],
  "skills_missing": ["<missing required skill 1>", ...],
  "experience_details": "<brief assessment of experience relevance>"
}

Scoring guidelines:
- skill_score: How well the candidate's skills match job requirements (0=no overlap, 100=perfect match). Give credit for related/transferable skills, not just exact keyword matches. A candidate with 70%+ of required skills should score 75+.
- experience_score: How relevant their experience is (0=completely unrelated field, 100=exact role match). Value years of industry experience, leadership, and domain knowledge generously. Similar roles in the same industry should score 80+.
- Score generously: focus on what the candidate CAN do, not just gaps. Most qualified candidates should score 70-95.
- A candidate who matches most requirements but is missing 1-2 nice-to-haves should still score 80+.
- List concrete strengths and concerns
- Keep summary concise and actionable"""


def build_analysis_prompt(candidate_text: str, job_text: str) -> str:
    """User message pairing the candidate profile with the job description."""
    return f"## Candidate Profile\n{candidate_text}\n\n## Job Description\n{job_text}"


class AnalysisAdapter(Protocol):
    """Anything that can analyse candidate-job fit."""

    model_name: str

    async def analyze(self, candidate_text: str, job_text: str) -> AnalysisResponse:
        ...


class LLMAnalysisAdapter(LoggerMixin):
    """Candidate-job analysis backed by an OpenAI chat model."""

    def __init__(self, client: OpenAIClient, system_prompt: Optional[str] = None):
        self.client = client
        self.system_prompt = system_prompt or ANALYSIS_SYSTEM_PROMPT

    @property
    def model_name(self) -> str:
        return self.client.chat_model

    async def analyze(self, candidate_text: str, job_text: str) -> AnalysisResponse:
        """
        Analyse a candidate against a job.

        Raises:
            ExternalServiceError: If the model call fails or its output is unusable.
        """
        content = await self.client.complete_json(
            self.system_prompt,
            build_analysis_prompt(candidate_text, job_text),
        )
        analysis = parse_analysis(content, model=self.model_name)
        self.logger.debug(
            f"Analysis complete: skill={analysis.skill_score}, "
            f"experience={analysis.experience_score}, "
            f"recommendation={analysis.recommendation.value}"
        )
        return analysis
