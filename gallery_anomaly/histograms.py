"""
Per-channel RGB color histogram extraction.

Each 8-bit channel is quantized into COLOR_BINS equal-width buckets
(value // 16) and normalized by the pixel count of the canonical grid, so
every channel's sub-histogram sums to 1.0. The three sub-histograms are
concatenated in R, G, B order.

The histogram ignores spatial layout: it captures the overall
color distribution of a sample, while the texture features carry the
structural signal.
"""

import numpy as np

from .preprocessing import resample_to_grid, CANONICAL_SIZE

COLOR_BINS = 16
COLOR_CHANNELS = 3
COLOR_DIM = COLOR_BINS * COLOR_CHANNELS

# 256 intensity levels / 16 bins
_BIN_WIDTH = 256 // COLOR_BINS


def extract_color_histogram(image_np: np.ndarray,
                            size: int = CANONICAL_SIZE) -> np.ndarray:
    """
    Extract the 48-dimensional normalized RGB histogram of an image.

    Args:
        image_np: RGB uint8 image of any resolution.
        size: Side of the canonical grid the image is resampled to.

    Returns:
        Float64 vector of COLOR_DIM values; each 16-value block sums to 1.0.
    """
    grid = resample_to_grid(image_np, size)
    total = grid.shape[0] * grid.shape[1]

    channel_hists = []
    for channel in range(COLOR_CHANNELS):
        buckets = grid[:, :, channel].ravel() // _BIN_WIDTH
        counts = np.bincount(buckets, minlength=COLOR_BINS)
        channel_hists.append(counts.astype(np.float64) / total)

    return np.concatenate(channel_hists)
