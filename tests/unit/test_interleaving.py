"""
Unit tests for the interleaving pattern and review schedule report views.

Run: pytest tests/unit/test_interleaving.py -v
"""
import pytest

from chapterlens.analysis.interleaving import interleaving_pattern, interleaving_recommendation
from chapterlens.analysis.spacing import closest_target, review_patterns, review_schedule
from chapterlens.principles import interleaving


class TestInterleavingPattern:
    def test_blocked_run_then_long_gap(self, empty_chapter, make_graph):
        graph = make_graph({"a": [0, 100, 200, 5200]})
        pattern = interleaving_pattern(graph)

        assert pattern.blocking_ratio == 0.75
        assert pattern.concept_sequence == ("a", "a", "a", "a")
        assert pattern.topic_switches == 0
        assert pattern.avg_block_size == 2.0
        assert [(s.start_position, s.end_position, s.length) for s in pattern.blocking_segments] == [(0, 200, 3)]
        assert pattern.recommendation.startswith("Insufficient data")

        # The evaluator measures the same thing
        evaluation = interleaving.evaluate(empty_chapter, graph)
        assert evaluation.get_evidence("blocking_ratio").value == pattern.blocking_ratio

    def test_sequence_orders_by_position_then_id(self, make_graph):
        graph = make_graph({"b": [10, 30], "a": [10, 20]})
        assert interleaving_pattern(graph).concept_sequence == ("a", "b", "a", "b")

    def test_empty_graph(self, empty_graph):
        pattern = interleaving_pattern(empty_graph)
        assert pattern.blocking_ratio == 0.0
        assert pattern.avg_block_size == 0.0
        assert pattern.blocking_segments == ()

    @pytest.mark.parametrize("ratio,count,prefix", [
        (0.9, 2, "Insufficient data"),
        (0.6, 10, "High blocking"),
        (0.4, 10, "Moderate blocking"),
        (0.3, 10, "Good interleaving"),
    ])
    def test_recommendation_bands(self, ratio, count, prefix):
        assert interleaving_recommendation(ratio, count).startswith(prefix)


class TestReviewSchedule:
    def test_closest_target(self):
        assert closest_target(400) == 500
        assert closest_target(1800) == 2000
        assert closest_target(9000) == 5000

    def test_single_mention_concepts_are_skipped(self, make_graph):
        graph = make_graph({"a": [0], "b": [100, 600, 1100]})
        schedule = review_schedule(graph)

        assert [r.concept_id for r in schedule.concepts] == ["b"]
        review = schedule.concepts[0]
        assert review.gaps == (500, 500)
        assert review.average_gap == 500.0
        assert review.is_optimal
        assert schedule.optimal_spacing == 500.0
        assert schedule.current_avg_spacing == 500.0

    def test_uneven_gaps_are_not_optimal(self, make_graph):
        schedule = review_schedule(make_graph({"a": [0, 10, 20, 30, 10000]}))
        assert not schedule.concepts[0].is_optimal

    def test_median_and_mean_across_concepts(self, make_graph):
        graph = make_graph({"a": [0, 100], "b": [0, 200], "c": [0, 900]})
        schedule = review_schedule(graph)
        assert schedule.optimal_spacing == 200.0
        assert schedule.current_avg_spacing == 400.0

    def test_empty(self, empty_graph):
        schedule = review_schedule(empty_graph)
        assert schedule.concepts == ()
        assert schedule.optimal_spacing == 0.0

    def test_review_patterns(self, make_graph):
        patterns = review_patterns(make_graph({"a": [0, 2000, 7000], "b": [50]}))
        assert len(patterns) == 1
        assert patterns[0].review_points == (0, 2000, 7000)
        assert patterns[0].ideal_spacing == (2000, 5000)
        assert patterns[0].score == 1.0
