"""
Batch construction of reference galleries.

Processes a directory (or explicit list) of "normal" sample images into
GalleryEntry records with pre-computed descriptors, and saves/loads
galleries as JSON snapshots:
    - one record per image: id, file_name, category, embedding, created_at
    - embedding is the flat 58-value descriptor (color first, texture
      from index 48)

Images that cannot be decoded are skipped with a warning and counted as
errors; they never abort the build.
"""

import os
import json
import uuid
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from .exceptions import GalleryAnomalyError
from .features import build_descriptor
from .models import GalleryEntry

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.webp'}

DEFAULT_MAX_WORKERS = int(os.environ.get("ANOMALY_MAX_WORKERS", "4"))


def list_images(image_dir: str) -> List[str]:
    """Sorted paths of supported image files directly inside image_dir."""
    return [
        os.path.join(image_dir, f)
        for f in sorted(os.listdir(image_dir))
        if os.path.splitext(f)[1].lower() in IMAGE_EXTENSIONS
    ]


def build_gallery_entry(image_path: str, category: str = "default") -> GalleryEntry:
    """
    Extract the descriptor of one image file and wrap it as a gallery entry.

    Raises:
        DecodeError: If the file cannot be read or decoded.
        InvalidInputError: If the decoded image is empty.
    """
    descriptor = build_descriptor(image_path)
    return GalleryEntry(
        id=str(uuid.uuid4()),
        descriptor=descriptor,
        category=category,
        created_at=datetime.now(timezone.utc),
        file_name=os.path.basename(image_path),
    )


def build_gallery(image_dir: Optional[str] = None,
                  image_paths: Optional[Iterable[str]] = None,
                  category: str = "default",
                  max_workers: int = None) -> dict:
    """
    Build gallery entries from reference images.

    Descriptors are extracted concurrently; output order follows input
    order.

    Args:
        image_dir: Directory to scan for images.
        image_paths: Explicit image file list (takes precedence over
                     image_dir).
        category: Category label assigned to every entry.
        max_workers: Extraction thread pool size.

    Returns:
        Dict with 'success', 'entries', 'processed', 'errors' and, on
        failure, 'error'.
    """
    if image_paths is not None:
        paths = list(image_paths)
    elif image_dir is not None:
        paths = list_images(image_dir)
    else:
        raise ValueError("Either image_dir or image_paths must be provided")

    max_workers = max(1, max_workers or DEFAULT_MAX_WORKERS)
    logger.info(f"Building gallery from {len(paths)} images (category={category})")

    entries = []
    errors = 0

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(build_gallery_entry, path, category) for path in paths]

        for i, (path, future) in enumerate(zip(paths, futures)):
            try:
                entries.append(future.result())
            except GalleryAnomalyError as e:
                logger.warning(f"Failed to process {os.path.basename(path)}: {e}")
                errors += 1

            if (i + 1) % 500 == 0:
                logger.info(f"Processed {i + 1}/{len(paths)} images")

    if not entries:
        return {
            "success": False,
            "error": "No valid images processed",
            "entries": [],
            "processed": 0,
            "errors": errors,
        }

    logger.info(f"Gallery built: {len(entries)} entries, {errors} errors")

    return {
        "success": True,
        "entries": entries,
        "processed": len(entries),
        "errors": errors,
    }


def filter_gallery(entries: Iterable[GalleryEntry],
                   category: Optional[str] = None) -> List[GalleryEntry]:
    """Entries of the given category (all if None), newest first."""
    selected = [e for e in entries if category is None or e.category == category]
    return sorted(selected, key=lambda e: e.created_at, reverse=True)


def remove_gallery_entry(entries: Iterable[GalleryEntry], entry_id: str) -> List[GalleryEntry]:
    """
    Entries without the one whose id is entry_id.

    Removing an unknown id is not an error; the gallery is returned
    unchanged. Deleting the source image file is left to the caller.
    """
    entries = list(entries)
    remaining = [e for e in entries if e.id != entry_id]

    if len(remaining) == len(entries):
        logger.warning(f"Gallery entry {entry_id} not found, nothing removed")
    else:
        logger.info(f"Removed gallery entry {entry_id}")
    return remaining


def save_gallery(entries: Iterable[GalleryEntry], path: str) -> str:
    """Write gallery entries to a JSON snapshot file."""
    records = [entry.to_dict() for entry in entries]

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(records, f)

    logger.info(f"Saved {len(records)} gallery entries to {path}")
    return path


def load_gallery(path: str) -> List[GalleryEntry]:
    """
    Read gallery entries from a JSON snapshot file.

    Descriptors are kept as raw vectors; corrupt ones are detected and
    skipped at analysis time.
    """
    with open(path, 'r', encoding='utf-8') as f:
        records = json.load(f)

    entries = [GalleryEntry.from_dict(record) for record in records]
    logger.info(f"Loaded {len(entries)} gallery entries from {path}")
    return entries
