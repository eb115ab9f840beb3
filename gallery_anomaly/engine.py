"""
Reference-gallery anomaly analysis.

Orchestrates the scoring pipeline for a single query image:
    1. Extract the query descriptor (color histogram + texture)
    2. Compare it against every usable gallery descriptor
    3. Aggregate similarities into an anomaly score and status
    4. Synthesize illustrative anomaly regions
    5. Assemble the report (summary + top matches)

A failure on the query image aborts the analysis. Gallery entries are
independent: an entry without a descriptor, or with a corrupt one, is
excluded and the remaining entries still contribute.
"""

import os
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, Tuple

from .exceptions import InvalidDescriptorError
from .features import build_descriptor
from .models import AnomalyReport, AnomalyStatus, GalleryEntry, ImageDescriptor, SimilarityRecord
from .regions import synthesize_regions
from .scoring import score_similarities, rank_similarities, DEFAULT_TOP_K
from .similarity import compute_similarity

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = int(os.environ.get("ANOMALY_MAX_WORKERS", "4"))

STAGE_EXTRACT = "Extracting image features..."
STAGE_COMPARE = "Comparing with reference dataset..."
STAGE_SCORE = "Calculating anomaly score..."
STAGE_REGIONS = "Synthesizing anomaly regions..."
STAGE_COMPLETE = "Analysis complete!"

NO_REFERENCES_SUMMARY = (
    "No reference images available for comparison. "
    "Please upload reference images first."
)

_SUMMARY_TEMPLATES = {
    AnomalyStatus.NORMAL: (
        "Image closely matches reference dataset ({pct:.1f}% similarity). "
        "No significant anomalies detected."
    ),
    AnomalyStatus.WARNING: (
        "Image shows some deviation from reference dataset ({pct:.1f}% similarity). "
        "Minor anomalies may be present."
    ),
    AnomalyStatus.ANOMALY_DETECTED: (
        "Image significantly differs from reference dataset ({pct:.1f}% similarity). "
        "Potential anomaly detected."
    ),
}

ProgressCallback = Callable[[str], None]


def build_summary(status: AnomalyStatus, reference_count: int, max_similarity: float) -> str:
    """Human-readable one-line verdict for the report."""
    if reference_count == 0:
        return NO_REFERENCES_SUMMARY
    return _SUMMARY_TEMPLATES[status].format(pct=max_similarity * 100)


def collect_references(gallery: Sequence[GalleryEntry]) -> List[Tuple[str, ImageDescriptor]]:
    """
    Resolve the usable (id, descriptor) pairs of a gallery.

    Entries without a descriptor are skipped silently; entries with a
    corrupt descriptor are skipped with a warning.
    """
    references = []
    for entry in gallery:
        try:
            descriptor = entry.resolve_descriptor()
        except InvalidDescriptorError as e:
            logger.warning(f"Skipping gallery entry {entry.id}: {e}")
            continue

        if descriptor is None:
            logger.debug(f"Gallery entry {entry.id} has no descriptor, skipping")
            continue

        references.append((entry.id, descriptor))
    return references


class AnomalyEngine:
    """
    Reference-gallery anomaly scorer.

    Holds the per-run settings (worker pool size, random source for region
    synthesis, report length) and analyzes query images against a gallery
    supplied per call.
    """

    def __init__(self,
                 max_workers: int = DEFAULT_MAX_WORKERS,
                 rng=None,
                 top_k: int = DEFAULT_TOP_K):
        """
        Args:
            max_workers: Thread pool size for gallery comparison.
            rng: Random source for region placement (``random()`` method).
                None uses an unseeded generator per call.
            top_k: Number of best matches kept in the report.
        """
        self.max_workers = max(1, max_workers)
        self.rng = rng
        self.top_k = top_k

    def compare(self,
                query: ImageDescriptor,
                references: List[Tuple[str, ImageDescriptor]]) -> List[SimilarityRecord]:
        """Compute the similarity of the query to each reference, in order."""
        if not references:
            return []

        descriptors = [descriptor for _, descriptor in references]
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            values = list(pool.map(lambda d: compute_similarity(query, d), descriptors))

        return [
            SimilarityRecord(reference_id=ref_id, similarity=value)
            for (ref_id, _), value in zip(references, values)
        ]

    def analyze(self,
                query_image,
                gallery: Sequence[GalleryEntry],
                on_progress: Optional[ProgressCallback] = None) -> AnomalyReport:
        """
        Analyze a query image against a gallery of normal references.

        Args:
            query_image: RGB ndarray, encoded image bytes, or a file path.
            gallery: Reference entries with pre-computed descriptors.
            on_progress: Optional callback receiving a stage message before
                each pipeline step.

        Returns:
            AnomalyReport with score, status, top matches, regions, summary.

        Raises:
            DecodeError: If the query image cannot be decoded.
            InvalidInputError: If the query image is empty or malformed.
        """
        def progress(stage: str):
            if on_progress is not None:
                on_progress(stage)

        # Step 1: Query descriptor (errors propagate)
        progress(STAGE_EXTRACT)
        query = build_descriptor(query_image)

        # Step 2: Similarity against each usable reference
        progress(STAGE_COMPARE)
        references = collect_references(gallery)
        records = self.compare(query, references)
        similarities = [r.similarity for r in records]

        # Step 3: Score + status
        progress(STAGE_SCORE)
        anomaly_score, status = score_similarities(similarities)

        # Step 4: Illustrative regions
        progress(STAGE_REGIONS)
        regions = synthesize_regions(anomaly_score, rng=self.rng)

        max_similarity = max(similarities) if similarities else 0.0
        report = AnomalyReport(
            anomaly_score=anomaly_score,
            status=status,
            top_similarities=rank_similarities(records, self.top_k),
            regions=regions,
            summary=build_summary(status, len(records), max_similarity),
        )

        logger.info(
            f"Analysis complete: {len(records)}/{len(gallery)} references, "
            f"score={anomaly_score:.3f}, status={status.value}"
        )
        progress(STAGE_COMPLETE)

        return report


def analyze(query_image,
            gallery: Sequence[GalleryEntry],
            on_progress: Optional[ProgressCallback] = None,
            rng=None) -> AnomalyReport:
    """Analyze a query image with default engine settings."""
    return AnomalyEngine(rng=rng).analyze(query_image, gallery, on_progress)
