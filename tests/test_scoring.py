"""
Hybrid Scorer Tests

Source/category normalization, recency boost steps, engagement blend, the
page-aware non-personalized path, negative-signal filtering, and tie-breaks.

Run:
----
    pytest tests/test_scoring.py -v
"""

import pytest

from feedrank.models import NegativeSignals, UserProfile
from feedrank.models.item import EngagementCounters
from feedrank.stages.ranking import (
    category_score,
    rank_non_personalized,
    rank_personalized,
    score_candidate,
    score_non_personalized,
    source_score,
)
from feedrank.utils import engagement_score, recency_multiplier, recency_score


@pytest.fixture
def profile(now):
    return UserProfile(
        user_id="u1",
        interest_vector=[1.0, 0.0, 0.0, 0.0],
        source_affinity={"S1": 4.0, "S2": 2.0},
        category_affinity={"sports": 4.0, "news": 2.0},
        negative_signals=NegativeSignals(sources={"S9"}, categories={"gossip"}),
        last_computed_at=now,
    )


class TestAffinityScores:
    def test_source_score_normalized_by_strongest_source(self, profile, make_item):
        assert source_score(make_item("x", source="S1"), profile) == pytest.approx(1.0)
        assert source_score(make_item("x", source="S2"), profile) == pytest.approx(0.5)
        assert source_score(make_item("x", source="S3"), profile) == 0.0

    def test_category_score_mean_over_matching_tags(self, profile, make_item):
        item = make_item("x", categories=["sports", "news", "tech"])
        assert category_score(item, profile) == pytest.approx(0.75)
        assert category_score(make_item("y", categories=["tech"]), profile) == 0.0


class TestRecencyAndEngagement:
    @pytest.mark.parametrize(
        "days,expected", [(0, 1.5), (1, 1.5), (3, 1.5), (5, 1.3), (7, 1.3), (10, 1.1), (14, 1.1), (30, 1.0)]
    )
    def test_recency_multiplier_steps(self, config, days, expected):
        assert recency_multiplier(days, config.recency_boost_steps) == expected

    @pytest.mark.parametrize(
        "hours,expected", [(1, 1.0), (30, 0.8), (60, 0.6), (100, 0.4), (360, 0.5), (800, 0.0)]
    )
    def test_recency_score_taper(self, hours, expected):
        assert recency_score(hours) == pytest.approx(expected)

    def test_engagement_caps_and_weights(self, config):
        counters = EngagementCounters(views=20000, likes=500, completion_rate=0.5)
        assert engagement_score(counters, config) == pytest.approx(0.3 + 0.1 + 0.25)

    def test_engagement_clamps_completion_rate(self, config):
        counters = EngagementCounters(completion_rate=3.0)
        assert engagement_score(counters, config) == pytest.approx(0.5)


class TestScoreCandidate:
    def test_final_is_base_times_recency(self, profile, make_item, now, config):
        item = make_item("x", source="S2", categories=["sports"], age_days=5)

        scored = score_candidate(item, profile, 0.8, now, config)

        base = 0.5 * 0.8 + 0.3 * 0.5 + 0.2 * 1.0
        assert scored.final_score == pytest.approx(base * 1.3)
        assert scored.recency_multiplier == 1.3

    def test_similarity_is_clamped(self, profile, make_item, now, config):
        assert score_candidate(make_item("x"), profile, -0.4, now, config).similarity == 0.0
        assert score_candidate(make_item("x"), profile, 1.7, now, config).similarity == 1.0

    def test_non_personalized_blend_by_page(self, make_item, now, config):
        item = make_item("x", age_days=0.25)
        assert score_non_personalized(item, 1, now, config).final_score == pytest.approx(0.75)
        assert score_non_personalized(item, 4, now, config).final_score == pytest.approx(0.45)
        assert score_non_personalized(item, 9, now, config).final_score == pytest.approx(0.45)


class TestRanking:
    def test_negative_signals_filtered_before_scoring(self, profile, make_item, now, config):
        candidates = [
            (make_item("ok", source="S1"), 0.9),
            (make_item("bad_source", source="S9"), 0.99),
            (make_item("bad_tag", categories=["sports", "gossip"]), 0.99),
        ]
        ranked = rank_personalized(candidates, profile, now, config)
        assert [c.item_id for c in ranked] == ["ok"]

    def test_tie_break_newer_first_then_id(self, make_item, now, config):
        items = [
            make_item("b", age_days=0.5),
            make_item("a", age_days=0.5),
            make_item("c", age_days=0.4),
        ]
        # Same recency bucket and engagement → equal scores
        ranked = rank_non_personalized(items, 1, now, config)
        assert [c.item_id for c in ranked] == ["c", "a", "b"]

    def test_personalized_order_by_final_score(self, profile, make_item, now, config):
        candidates = [
            (make_item("far", source="S3", categories=[], age_days=30), 0.2),
            (make_item("near", source="S1", age_days=1), 0.9),
        ]
        ranked = rank_personalized(candidates, profile, now, config)
        assert [c.item_id for c in ranked] == ["near", "far"]
