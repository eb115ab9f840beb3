"""
gallery_anomaly: Reference-gallery visual anomaly scoring.

Compares a query image against descriptors of known-normal reference
images using color histogram intersection and edge-texture cosine
similarity, then turns the fused similarities into an anomaly score,
a status, and illustrative anomaly regions.

Modules:
    engine           AnomalyEngine and the analyze() entry point
    features         Descriptor extraction (build_descriptor)
    histograms       Per-channel RGB histograms
    texture          Edge-magnitude texture features
    preprocessing    Image decoding and canonical resampling
    similarity       Histogram intersection + cosine fusion
    scoring          Anomaly score, status, and match ranking
    regions          Illustrative region synthesis
    gallery_builder  Batch gallery construction and JSON snapshots
    models           Descriptor, gallery, and report records
    exceptions       Error types
"""

from .engine import AnomalyEngine, analyze
from .exceptions import (
    GalleryAnomalyError, DecodeError, InvalidInputError, InvalidDescriptorError,
)
from .features import build_descriptor, extract_descriptor
from .models import (
    AnomalyReport, AnomalyStatus, GalleryEntry, ImageDescriptor, Region,
    Severity, SimilarityRecord,
)

__version__ = "1.0.0"

__all__ = [
    "AnomalyEngine", "analyze", "build_descriptor", "extract_descriptor",
    "AnomalyReport", "AnomalyStatus", "GalleryEntry", "ImageDescriptor",
    "Region", "Severity", "SimilarityRecord",
    "GalleryAnomalyError", "DecodeError", "InvalidInputError",
    "InvalidDescriptorError",
]
