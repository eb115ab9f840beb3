"""
Anomaly scoring: aggregate gallery similarities into a score and status.

The score blends the best match (how close the query is to any single
reference) with the mean match (how typical it is of the whole gallery):

    anomaly_score = 1 - (MAX_WEIGHT * max_sim + AVG_WEIGHT * avg_sim)

No clamping is applied, so a gallery of near-identical references can push
the score below zero. Status thresholds are upper bounds tested with ``<``.
"""

import os
import logging
from typing import List, Sequence, Tuple

from .models import AnomalyStatus, SimilarityRecord

logger = logging.getLogger(__name__)

MAX_WEIGHT = float(os.environ.get("SCORE_MAX_W", "0.7"))
AVG_WEIGHT = float(os.environ.get("SCORE_AVG_W", "0.3"))

WARNING_THRESHOLD = float(os.environ.get("STATUS_WARNING_THRESHOLD", "0.3"))
ANOMALY_THRESHOLD = float(os.environ.get("STATUS_ANOMALY_THRESHOLD", "0.6"))

DEFAULT_TOP_K = int(os.environ.get("ANOMALY_TOP_K", "5"))


def compute_anomaly_score(similarities: Sequence[float],
                          max_weight: float = None,
                          avg_weight: float = None) -> float:
    """
    Convert gallery similarities into an anomaly score.

    An empty sequence scores as if nothing matched (max = avg = 0),
    which yields 1.0.
    """
    max_weight = MAX_WEIGHT if max_weight is None else max_weight
    avg_weight = AVG_WEIGHT if avg_weight is None else avg_weight

    if len(similarities) == 0:
        max_sim = 0.0
        avg_sim = 0.0
    else:
        max_sim = max(similarities)
        avg_sim = sum(similarities) / len(similarities)

    return float(1 - (max_weight * max_sim + avg_weight * avg_sim))


def classify_status(anomaly_score: float) -> AnomalyStatus:
    """Map a score onto (-inf, 0.3) normal, [0.3, 0.6) warning, else anomaly."""
    if anomaly_score < WARNING_THRESHOLD:
        return AnomalyStatus.NORMAL
    if anomaly_score < ANOMALY_THRESHOLD:
        return AnomalyStatus.WARNING
    return AnomalyStatus.ANOMALY_DETECTED


def score_similarities(similarities: Sequence[float]) -> Tuple[float, AnomalyStatus]:
    """Score a list of similarities and classify the result."""
    anomaly_score = compute_anomaly_score(similarities)
    return anomaly_score, classify_status(anomaly_score)


def rank_similarities(records: List[SimilarityRecord],
                      top_k: int = DEFAULT_TOP_K) -> List[SimilarityRecord]:
    """
    Sort similarity records by similarity (descending) and keep the top_k.

    The sort is stable: tied records keep their gallery order.
    """
    ranked = sorted(records, key=lambda r: -r.similarity)
    return ranked[:top_k]
