"""Padded face crops for previews and export.

A crop is the face bounding box grown by a fraction of its own size on
each side and clipped to the image, so faces at the border still crop.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, List, Sequence, Tuple

import cv2
import numpy as np

from photo_finder.core.interfaces import BBox, MatchResult
from photo_finder.core.logging_config import get_logger
from photo_finder.core.utils import load_image

logger = get_logger(__name__)

DEFAULT_PADDING = 0.2


def padded_region(
    box: BBox,
    image_width: int,
    image_height: int,
    padding: float = DEFAULT_PADDING,
) -> Tuple[int, int, int, int]:
    """Compute the clipped pixel region of a padded face box.

    Each edge moves outwards by ``padding`` times the box width (left and
    right) or height (top and bottom). Fractional edges are widened to whole
    pixels. A box lying entirely outside the image clips to an empty region
    (``x1 == x2`` or ``y1 == y2``).

    Args:
        box: Face bounding box
        image_width: Image width in pixels
        image_height: Image height in pixels
        padding: Fraction of the box size added on each side (>= 0)

    Returns:
        Region as (x1, y1, x2, y2), with x2/y2 exclusive.

    Raises:
        ValueError: If padding is negative.

    Example:
        >>> padded_region(BBox(10, 10, 50, 50), 100, 100, padding=0.2)
        (0, 0, 70, 70)
    """
    if padding < 0:
        raise ValueError(f"Padding must be >= 0, got {padding}")

    pad_x = box.width * padding
    pad_y = box.height * padding

    x1 = min(image_width, max(0, int(math.floor(box.x - pad_x))))
    y1 = min(image_height, max(0, int(math.floor(box.y - pad_y))))
    x2 = max(x1, min(image_width, int(math.ceil(box.x2 + pad_x))))
    y2 = max(y1, min(image_height, int(math.ceil(box.y2 + pad_y))))

    return x1, y1, x2, y2


def crop_face(image: Any, box: BBox, padding: float = DEFAULT_PADDING) -> np.ndarray:
    """Crop a padded face region from an image.

    Args:
        image: Image handle - BGR array, file path, or encoded bytes
        box: Face bounding box in the image's pixel coordinates
        padding: Fraction of the box size added on each side

    Returns:
        Cropped region as a new array (the source is not shared). Empty
        when the box lies entirely outside the image.

    Raises:
        ImageDecodeError: If the image cannot be decoded.
        ValueError: If padding is negative.

    Example:
        >>> crop = crop_face(photo.image, face.box, padding=0.2)
    """
    frame = load_image(image)
    h, w = frame.shape[:2]
    x1, y1, x2, y2 = padded_region(box, w, h, padding)
    return frame[y1:y2, x1:x2].copy()


class FaceCropExporter:
    """Write padded crops of matched faces to disk.

    Attributes:
        padding: Fraction of the box size added on each side
        jpeg_quality: JPEG quality for saved crops (0-100)

    Example:
        >>> exporter = FaceCropExporter(padding=0.2)
        >>> paths = exporter.export_matches(results, "data/matches")
    """

    def __init__(self, padding: float = DEFAULT_PADDING, jpeg_quality: int = 95):
        if padding < 0:
            raise ValueError(f"Padding must be >= 0, got {padding}")
        if not 0 <= jpeg_quality <= 100:
            raise ValueError(f"JPEG quality must be in [0, 100], got {jpeg_quality}")

        self.padding = padding
        self.jpeg_quality = jpeg_quality

    def crop(self, image: Any, box: BBox) -> np.ndarray:
        """Crop a face with this exporter's padding."""
        return crop_face(image, box, self.padding)

    def save(self, image: Any, box: BBox, path: str | Path) -> Path:
        """Crop a face and save it as a JPEG file.

        Args:
            image: Image handle
            box: Face bounding box
            path: Output file path (parent directories are created)

        Returns:
            Path where the crop was saved.

        Raises:
            OSError: If the crop is empty or the file cannot be written.
        """
        crop = self.crop(image, box)
        if crop.size == 0:
            raise OSError(f"Nothing to write to {path}: {box} lies outside the image")

        save_path = Path(path)
        save_path.parent.mkdir(parents=True, exist_ok=True)

        if not cv2.imwrite(str(save_path), crop, [cv2.IMWRITE_JPEG_QUALITY, self.jpeg_quality]):
            raise OSError(f"Failed to write crop to {save_path}")

        logger.debug(f"Saved face crop to {save_path}")
        return save_path

    def export_matches(self, results: Sequence[MatchResult], out_dir: str | Path) -> List[Path]:
        """Save the matched face of each result, in ranking order.

        Files are named ``<rank>_<photo id>.jpg`` with 1-based ranks.

        Returns:
            Paths of the written crops.
        """
        out_dir = Path(out_dir)
        paths = []

        for rank, result in enumerate(results, 1):
            path = out_dir / f"{rank:04d}_{result.photo.id}.jpg"
            paths.append(self.save(result.photo.image, result.face.box, path))

        logger.info(f"Exported {len(paths)} face crops to {out_dir}")
        return paths

    def __repr__(self) -> str:
        """String representation of exporter."""
        return f"FaceCropExporter(padding={self.padding}, jpeg_quality={self.jpeg_quality})"
