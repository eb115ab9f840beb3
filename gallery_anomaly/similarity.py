"""
Descriptor similarity: histogram intersection on color, cosine on texture.

The two measures are complementary. Intersection rewards matching color
mass regardless of layout, cosine rewards a matching edge profile
regardless of overall contrast. They are fused with a fixed weighted sum.

Note that the color intersection ranges over [0, 3] (one unit per channel)
while texture cosine ranges over [-1, 1] (in practice [0, 1], since all
texture features are non-negative). The fused value is not
rescaled; the anomaly scorer consumes it as-is.
"""

import os
import logging
from typing import Tuple

import numpy as np

from .models import ImageDescriptor

logger = logging.getLogger(__name__)

COLOR_WEIGHT = float(os.environ.get("SIM_COLOR_W", "0.6"))
TEXTURE_WEIGHT = float(os.environ.get("SIM_TEXTURE_W", "0.4"))


def histogram_intersection(hist_a: np.ndarray, hist_b: np.ndarray) -> float:
    """Sum of element-wise minimums of two non-negative vectors."""
    return float(np.minimum(hist_a, hist_b).sum())


def cosine_similarity(vec_a: np.ndarray, vec_b: np.ndarray) -> float:
    """
    Cosine of the angle between two vectors.

    Returns exactly 0.0 when either vector has zero norm instead of NaN.
    """
    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(vec_a, vec_b) / (norm_a * norm_b))


def similarity_breakdown(a: ImageDescriptor,
                         b: ImageDescriptor,
                         color_weight: float = None,
                         texture_weight: float = None) -> Tuple[float, float, float]:
    """
    Compute the individual and fused similarity of two descriptors.

    Returns:
        Tuple of (color_similarity, texture_similarity, combined).
    """
    color_weight = COLOR_WEIGHT if color_weight is None else color_weight
    texture_weight = TEXTURE_WEIGHT if texture_weight is None else texture_weight

    color_sim = histogram_intersection(a.color_histogram, b.color_histogram)
    texture_sim = cosine_similarity(a.texture_features, b.texture_features)
    combined = color_weight * color_sim + texture_weight * texture_sim

    return color_sim, texture_sim, combined


def compute_similarity(a: ImageDescriptor, b: ImageDescriptor) -> float:
    """Fused similarity of two descriptors (unclamped)."""
    return similarity_breakdown(a, b)[2]
