"""Tests for anomaly scoring and status classification."""

import pytest

from gallery_anomaly.models import AnomalyStatus, SimilarityRecord
from gallery_anomaly.scoring import (
    compute_anomaly_score, classify_status, score_similarities, rank_similarities,
)


class TestComputeAnomalyScore:
    """Tests for the max/mean similarity blend."""

    def test_empty_gallery_scores_one(self):
        assert compute_anomaly_score([]) == 1.0

    def test_perfect_unit_match_scores_zero(self):
        assert compute_anomaly_score([1.0]) == pytest.approx(0.0)

    def test_blends_max_and_mean(self):
        # max 0.8, mean 0.5 -> 1 - (0.56 + 0.15)
        assert compute_anomaly_score([0.8, 0.2, 0.5]) == pytest.approx(0.29)

    def test_not_clamped_below_zero(self):
        assert compute_anomaly_score([2.2, 2.2]) == pytest.approx(-1.2)

    def test_higher_similarity_lower_score(self):
        assert compute_anomaly_score([0.9]) < compute_anomaly_score([0.4])

    def test_custom_weights(self):
        assert compute_anomaly_score([0.5, 1.0], max_weight=1.0, avg_weight=0.0) == pytest.approx(0.0)


class TestClassifyStatus:
    """Tests for half-open status intervals."""

    @pytest.mark.parametrize("score,expected", [
        (-0.5, AnomalyStatus.NORMAL),
        (0.0, AnomalyStatus.NORMAL),
        (0.2999, AnomalyStatus.NORMAL),
        (0.3, AnomalyStatus.WARNING),
        (0.5999, AnomalyStatus.WARNING),
        (0.6, AnomalyStatus.ANOMALY_DETECTED),
        (1.0, AnomalyStatus.ANOMALY_DETECTED),
        (1.7, AnomalyStatus.ANOMALY_DETECTED),
    ])
    def test_boundaries(self, score, expected):
        assert classify_status(score) is expected

    def test_status_serializes_as_string(self):
        assert AnomalyStatus.ANOMALY_DETECTED.value == "anomaly_detected"


class TestScoreSimilarities:

    def test_returns_score_and_status(self):
        score, status = score_similarities([])
        assert score == 1.0
        assert status is AnomalyStatus.ANOMALY_DETECTED

    def test_self_match_is_normal(self):
        score, status = score_similarities([2.2])
        assert score < 0
        assert status is AnomalyStatus.NORMAL


class TestRankSimilarities:
    """Tests for top-match ranking."""

    def test_ranks_descending(self):
        records = [
            SimilarityRecord("a", 0.5),
            SimilarityRecord("b", 0.9),
            SimilarityRecord("c", 0.1),
        ]
        ranked = rank_similarities(records)
        assert [r.reference_id for r in ranked] == ["b", "a", "c"]

    def test_truncates_to_top_k(self):
        records = [SimilarityRecord(str(i), i / 10) for i in range(8)]
        ranked = rank_similarities(records, top_k=5)
        assert len(ranked) == 5
        assert ranked[0].similarity == 0.7

    def test_ties_keep_gallery_order(self):
        records = [SimilarityRecord("z", 0.5), SimilarityRecord("m", 0.9),
                   SimilarityRecord("a", 0.5)]
        ranked = rank_similarities(records)
        assert [r.reference_id for r in ranked] == ["m", "z", "a"]

    def test_empty_list(self):
        assert rank_similarities([]) == []
