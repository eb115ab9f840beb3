"""
Edge-magnitude texture features.

The texture vector is 10-dimensional:
    [0]    mean edge magnitude / 255
    [1]    population std of edge magnitude / 255
    [2:10] 8-bin histogram of edge magnitudes (bin width 32, overflow
           clamped into the last bin), normalized by the sample count

Edges are central first differences of the luma channel over the interior
of the canonical grid (a 1-pixel border is excluded).
"""

import numpy as np

from .preprocessing import resample_to_grid, CANONICAL_SIZE

EDGE_BINS = 8
EDGE_BIN_WIDTH = 32
TEXTURE_DIM = 2 + EDGE_BINS

# ITU-R BT.601 luma coefficients
LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def compute_luma(image_np: np.ndarray) -> np.ndarray:
    """Convert an RGB image to a float64 luma plane."""
    rgb = image_np.astype(np.float64)
    r_w, g_w, b_w = LUMA_WEIGHTS
    return r_w * rgb[:, :, 0] + g_w * rgb[:, :, 1] + b_w * rgb[:, :, 2]


def compute_edge_magnitudes(luma: np.ndarray) -> np.ndarray:
    """
    Compute central-difference edge magnitudes for interior pixels.

    Returns:
        Flat float64 array of (h - 2) * (w - 2) magnitudes.
    """
    gx = luma[1:-1, 2:] - luma[1:-1, :-2]
    gy = luma[2:, 1:-1] - luma[:-2, 1:-1]
    return np.sqrt(gx * gx + gy * gy).ravel()


def extract_texture_features(image_np: np.ndarray,
                             size: int = CANONICAL_SIZE) -> np.ndarray:
    """
    Extract the 10-dimensional texture descriptor of an image.

    Args:
        image_np: RGB uint8 image of any resolution.
        size: Side of the canonical grid the image is resampled to.

    Returns:
        Float64 vector [mean, std, 8 normalized edge bins].
    """
    grid = resample_to_grid(image_np, size)
    edges = compute_edge_magnitudes(compute_luma(grid))

    mean_edge = edges.mean()
    std_edge = edges.std()

    bins = np.minimum((edges // EDGE_BIN_WIDTH).astype(np.int64), EDGE_BINS - 1)
    edge_hist = np.bincount(bins, minlength=EDGE_BINS).astype(np.float64) / edges.size

    return np.concatenate(([mean_edge / 255.0, std_edge / 255.0], edge_hist))
