"""
Error types raised by the anomaly-scoring pipeline.

All errors derive from ValueError so callers that already guard feature
extraction with ``except ValueError`` keep working.
"""


class GalleryAnomalyError(Exception):
    """Base class for all gallery_anomaly errors."""


class DecodeError(GalleryAnomalyError, ValueError):
    """Image bytes or file could not be decoded into a pixel buffer."""


class InvalidInputError(GalleryAnomalyError, ValueError):
    """Pixel data is empty or has an unsupported shape."""


class InvalidDescriptorError(GalleryAnomalyError, ValueError):
    """A descriptor vector has the wrong length for the color/texture split."""
