"""
Language model access: the OpenAI client and the candidate analysis adapter.
"""

from .client import OpenAIClient
from .schema import AnalysisResponse, clamp_score, parse_analysis
from .analysis import (
    ANALYSIS_SYSTEM_PROMPT,
    AnalysisAdapter,
    LLMAnalysisAdapter,
    build_analysis_prompt,
)

__all__ = [
    "OpenAIClient",
    "AnalysisResponse",
    "clamp_score",
    "parse_analysis",
    "ANALYSIS_SYSTEM_PROMPT",
    "AnalysisAdapter",
    "LLMAnalysisAdapter",
    "build_analysis_prompt",
]
