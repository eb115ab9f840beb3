"""
Illustrative anomaly regions for visualization.

Regions are NOT localized from pixel data: their count and severity follow
the overall anomaly score and their placement is random. They exist so a
renderer has something proportionate to draw over the query image.

The random source is injectable; anything with a ``random()`` method
returning a float in [0, 1) works (random.Random, numpy Generator).
"""

import math
import random
import logging
from typing import List

from .models import Region, Severity

logger = logging.getLogger(__name__)

# Scores at or below this produce no regions
REGION_THRESHOLD = 0.3
REGIONS_PER_UNIT_SCORE = 3

HIGH_SEVERITY_ABOVE = 0.7
MEDIUM_SEVERITY_ABOVE = 0.5

# (offset, span) for uniform draws: value = offset + span * u
CENTER_RANGE = (0.1, 0.6)
SIZE_RANGE = (0.15, 0.2)
SCORE_JITTER = (0.7, 0.3)


def severity_for_score(anomaly_score: float) -> Severity:
    if anomaly_score > HIGH_SEVERITY_ABOVE:
        return Severity.HIGH
    if anomaly_score > MEDIUM_SEVERITY_ABOVE:
        return Severity.MEDIUM
    return Severity.LOW


def _draw(rng, bounds) -> float:
    offset, span = bounds
    return offset + span * rng.random()


def synthesize_regions(anomaly_score: float, rng=None) -> List[Region]:
    """
    Generate ceil(score * 3) regions sharing one severity tier.

    Args:
        anomaly_score: Overall anomaly score of the query image.
        rng: Random source with a ``random()`` method. Defaults to an
            unseeded random.Random.

    Returns:
        List of regions; empty when anomaly_score <= 0.3.
    """
    if anomaly_score <= REGION_THRESHOLD:
        return []

    rng = rng if rng is not None else random.Random()
    num_regions = math.ceil(anomaly_score * REGIONS_PER_UNIT_SCORE)
    severity = severity_for_score(anomaly_score)

    regions = []
    for _ in range(num_regions):
        regions.append(Region(
            x=_draw(rng, CENTER_RANGE),
            y=_draw(rng, CENTER_RANGE),
            width=_draw(rng, SIZE_RANGE),
            height=_draw(rng, SIZE_RANGE),
            severity=severity,
            score=anomaly_score * _draw(rng, SCORE_JITTER),
        ))

    logger.debug(f"Synthesized {num_regions} {severity.value} regions for score {anomaly_score:.3f}")
    return regions
