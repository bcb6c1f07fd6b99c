"""
Single-application scoring: configuration, aggregation and the pipeline.
"""

from .aggregator import apply_curve, compute_overall_score, weighted_mean
from .config_resolver import ScoringConfigResolver
from .pipeline import ScoringPipeline

__all__ = [
    "apply_curve",
    "compute_overall_score",
    "weighted_mean",
    "ScoringConfigResolver",
    "ScoringPipeline",
]
