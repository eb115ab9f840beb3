"""
Image loading and normalization for descriptor extraction.

Accepts decoded RGB arrays, encoded image bytes, or file paths and brings
them to a uint8 RGB buffer resampled onto the canonical grid, so that
descriptors are comparable regardless of source resolution or format.
"""

import os
import cv2
import numpy as np
import logging

from .exceptions import DecodeError, InvalidInputError

logger = logging.getLogger(__name__)

# Side length of the square grid every image is resampled to before
# feature extraction. Part of the stored descriptor contract.
CANONICAL_SIZE = 64


def normalize_image(image_np: np.ndarray) -> np.ndarray:
    """Ensure image is uint8 format."""
    if image_np.size == 0:
        raise InvalidInputError(f"Zero-size image with shape {image_np.shape}")
    if image_np.dtype != np.uint8:
        if np.issubdtype(image_np.dtype, np.floating) and image_np.max() <= 1.0:
            image_np = image_np * 255
        image_np = np.clip(image_np, 0, 255).astype(np.uint8)
    return image_np


def ensure_rgb(image_np: np.ndarray) -> np.ndarray:
    """
    Convert grayscale or RGBA input to a 3-channel RGB image.

    Raises:
        InvalidInputError: If the array is not a 2D or 3D image buffer.
    """
    if image_np.ndim == 2:
        return cv2.cvtColor(image_np, cv2.COLOR_GRAY2RGB)

    if image_np.ndim != 3:
        raise InvalidInputError(
            f"Expected a 2D or 3D image array, got shape {image_np.shape}"
        )

    channels = image_np.shape[2]
    if channels == 1:
        return cv2.cvtColor(image_np[:, :, 0], cv2.COLOR_GRAY2RGB)
    if channels == 3:
        return image_np
    if channels == 4:
        return cv2.cvtColor(image_np, cv2.COLOR_RGBA2RGB)

    raise InvalidInputError(f"Unsupported channel count: {channels}")


def decode_image_bytes(data: bytes) -> np.ndarray:
    """
    Decode encoded image bytes (PNG, JPEG, ...) into an RGB uint8 array.

    Raises:
        DecodeError: If the bytes are empty or not a decodable image.
    """
    buffer = np.frombuffer(bytes(data), dtype=np.uint8)
    if buffer.size == 0:
        raise DecodeError("Cannot decode an empty byte stream")

    try:
        image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    except cv2.error as e:
        raise DecodeError(f"OpenCV failed to decode image: {e}") from e

    if image is None:
        raise DecodeError(f"Unrecognized image data ({buffer.size} bytes)")

    return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)


def load_image(source) -> np.ndarray:
    """
    Load an image from any supported source as an RGB uint8 array.

    Args:
        source: RGB ndarray, encoded image bytes, or a filesystem path.

    Returns:
        RGB uint8 image of the source's native resolution.

    Raises:
        DecodeError: If bytes or file contents cannot be decoded.
        InvalidInputError: If the pixel buffer is empty or malformed.
    """
    if isinstance(source, np.ndarray):
        return ensure_rgb(normalize_image(source))

    if isinstance(source, (bytes, bytearray, memoryview)):
        return normalize_image(decode_image_bytes(source))

    if isinstance(source, (str, os.PathLike)):
        # Read via Python I/O: cv2.imread silently fails on non-ASCII paths
        try:
            with open(source, 'rb') as f:
                data = f.read()
        except OSError as e:
            raise DecodeError(f"Could not read image file {source}: {e}") from e
        return normalize_image(decode_image_bytes(data))

    raise InvalidInputError(f"Unsupported image source type: {type(source).__name__}")


def resample_to_grid(image_np: np.ndarray, size: int = CANONICAL_SIZE) -> np.ndarray:
    """
    Resample an RGB image onto a size×size grid.

    Area interpolation is used when shrinking, which averages source pixels
    rather than sampling them, keeping histograms stable across resolutions.
    """
    h, w = image_np.shape[:2]
    if h == 0 or w == 0:
        raise InvalidInputError(f"Zero-size image with shape {image_np.shape}")
    if (h, w) == (size, size):
        return image_np

    interpolation = cv2.INTER_AREA if (h > size or w > size) else cv2.INTER_LINEAR
    return cv2.resize(image_np, (size, size), interpolation=interpolation)
