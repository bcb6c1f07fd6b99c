"""
Tests for ai_matching.utils.constants: recommendation parsing and defaults.
"""

import pytest

from ai_matching.utils.constants import (
    DEFAULT_SCORING_WEIGHTS,
    SEMANTIC_SIMILARITY_FLOOR,
    SEMANTIC_SIMILARITY_SCALE,
    AuditAction,
    Recommendation,
)


# ── Recommendation.parse() ──────────────────────────────────────────────────


class TestRecommendationParse:
    @pytest.mark.parametrize("member", list(Recommendation))
    def test_exact_values(self, member):
        assert Recommendation.parse(member.value) is member

    def test_member_passes_through(self):
        assert Recommendation.parse(Recommendation.STRONG_MATCH) is Recommendation.STRONG_MATCH

    def test_case_and_separators_normalized(self):
        assert Recommendation.parse("Strong Match") is Recommendation.STRONG_MATCH
        assert Recommendation.parse(" weak-match ") is Recommendation.WEAK_MATCH

    @pytest.mark.parametrize("raw", ["excellent", "", None, 5, ["good_match"]])
    def test_unknown_falls_back_to_moderate(self, raw):
        assert Recommendation.parse(raw) is Recommendation.MODERATE_MATCH


# ── Defaults ────────────────────────────────────────────────────────────────


class TestDefaults:
    def test_default_weights_sum_to_100(self):
        assert sum(DEFAULT_SCORING_WEIGHTS.values()) == 100

    def test_default_weights(self):
        assert DEFAULT_SCORING_WEIGHTS == {"skill": 40, "experience": 30, "semantic": 30}

    def test_semantic_rescale_span(self):
        # 0.45 maps to 0, 0.85 maps to 100
        assert (0.85 - SEMANTIC_SIMILARITY_FLOOR) * SEMANTIC_SIMILARITY_SCALE == pytest.approx(100)


class TestAuditAction:
    def test_values(self):
        assert {a.value for a in AuditAction} == {
            "candidate_scored",
            "batch_started",
            "batch_completed",
            "scoring_config_updated",
        }

    def test_is_str(self):
        assert AuditAction.CANDIDATE_SCORED == "candidate_scored"
