"""
Domain records shared by extraction, scoring, and reporting.

Descriptors are stored as two named, read-only arrays instead of one flat
vector so the color/texture split cannot drift. The flat 58-value layout
(color first, texture from index 48) is only used at the persistence
boundary via ImageDescriptor.from_vector / to_vector.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from .exceptions import InvalidDescriptorError
from .histograms import COLOR_DIM
from .texture import TEXTURE_DIM

DESCRIPTOR_DIM = COLOR_DIM + TEXTURE_DIM


class AnomalyStatus(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    ANOMALY_DETECTED = "anomaly_detected"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _frozen_vector(values, expected: int, name: str) -> np.ndarray:
    vector = np.array(values, dtype=np.float64).ravel()
    if vector.size != expected:
        raise InvalidDescriptorError(
            f"{name} must have {expected} values, got {vector.size}"
        )
    if not np.all(np.isfinite(vector)):
        raise InvalidDescriptorError(f"{name} contains NaN or infinite values")
    vector.flags.writeable = False
    return vector


@dataclass(frozen=True, eq=False)
class ImageDescriptor:
    """Color + texture fingerprint of one image."""

    color_histogram: np.ndarray
    texture_features: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "color_histogram",
                           _frozen_vector(self.color_histogram, COLOR_DIM, "color_histogram"))
        object.__setattr__(self, "texture_features",
                           _frozen_vector(self.texture_features, TEXTURE_DIM, "texture_features"))

    @classmethod
    def from_vector(cls, vector: Sequence[float]) -> "ImageDescriptor":
        """
        Build a descriptor from the flat persisted layout.

        Raises:
            InvalidDescriptorError: If the vector is not finite numeric data or not
                exactly DESCRIPTOR_DIM values long.
        """
        try:
            flat = np.asarray(vector, dtype=np.float64).ravel()
        except (TypeError, ValueError) as e:
            raise InvalidDescriptorError(f"Descriptor is not numeric: {e}") from e

        if flat.size != DESCRIPTOR_DIM:
            raise InvalidDescriptorError(
                f"Descriptor must have {DESCRIPTOR_DIM} values, got {flat.size}"
            )
        return cls(color_histogram=flat[:COLOR_DIM], texture_features=flat[COLOR_DIM:])

    def to_vector(self) -> np.ndarray:
        return np.concatenate((self.color_histogram, self.texture_features))

    def to_list(self) -> List[float]:
        return [float(v) for v in self.to_vector()]

    def __eq__(self, other):
        if not isinstance(other, ImageDescriptor):
            return NotImplemented
        return (np.array_equal(self.color_histogram, other.color_histogram)
                and np.array_equal(self.texture_features, other.texture_features))


@dataclass
class GalleryEntry:
    """
    A reference sample of "normal" appearance.

    ``descriptor`` is normally an ImageDescriptor, but entries loaded from
    storage may carry the raw flat vector, or nothing at all when feature
    extraction never ran for the file.
    """

    id: str
    descriptor: Union[ImageDescriptor, Sequence[float], None]
    category: str = "default"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    file_name: Optional[str] = None

    def resolve_descriptor(self) -> Optional[ImageDescriptor]:
        """
        Return the entry's descriptor as an ImageDescriptor, or None.

        Raises:
            InvalidDescriptorError: If a stored raw vector is corrupt.
        """
        if self.descriptor is None or isinstance(self.descriptor, ImageDescriptor):
            return self.descriptor
        return ImageDescriptor.from_vector(self.descriptor)

    def to_dict(self) -> Dict[str, Any]:
        if isinstance(self.descriptor, ImageDescriptor):
            descriptor = self.descriptor.to_list()
        elif self.descriptor is None:
            descriptor = None
        else:
            descriptor = [float(v) for v in self.descriptor]

        return {
            "id": self.id,
            "file_name": self.file_name,
            "category": self.category,
            "embedding": descriptor,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GalleryEntry":
        """Rebuild an entry from to_dict() output; the descriptor stays raw."""
        created_at = data.get("created_at")
        if created_at:
            created_at = datetime.fromisoformat(created_at)
            # Timestamps stored without an offset are UTC
            if created_at.tzinfo is None:
                created_at = created_at.replace(tzinfo=timezone.utc)
        else:
            created_at = datetime.now(timezone.utc)

        return cls(
            id=str(data["id"]),
            descriptor=data.get("embedding"),
            category=data.get("category") or "default",
            created_at=created_at,
            file_name=data.get("file_name"),
        )


@dataclass(frozen=True)
class SimilarityRecord:
    reference_id: str
    similarity: float

    def to_dict(self) -> Dict[str, Any]:
        return {"referenceId": self.reference_id, "similarity": float(self.similarity)}


@dataclass(frozen=True)
class Region:
    """Illustrative anomaly region; coordinates are normalized to [0, 1]."""

    x: float
    y: float
    width: float
    height: float
    severity: Severity
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "severity": self.severity.value,
            "score": self.score,
        }


@dataclass
class AnomalyReport:
    """Result of analyzing one query image against a gallery."""

    anomaly_score: float
    status: AnomalyStatus
    top_similarities: List[SimilarityRecord] = field(default_factory=list)
    regions: List[Region] = field(default_factory=list)
    summary: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Flatten to JSON-compatible primitives for external renderers."""
        return {
            "anomalyScore": float(self.anomaly_score),
            "status": self.status.value,
            "topSimilarities": [r.to_dict() for r in self.top_similarities],
            "regions": [r.to_dict() for r in self.regions],
            "summary": self.summary,
        }
