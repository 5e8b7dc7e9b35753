"""Image helpers shared by the extraction and cropping code.

This module turns image handles into decoded BGR arrays and resizes images
before detection.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Tuple

import cv2
import numpy as np

from photo_finder.core.exceptions import ImageDecodeError
from photo_finder.core.logging_config import get_logger

logger = get_logger(__name__)


def load_image(handle: Any) -> np.ndarray:
    """Decode an image handle into a BGR array.

    Args:
        handle: One of
            - numpy array (grayscale [H, W], BGR [H, W, 3] or BGRA [H, W, 4])
            - path to an image file (str or Path)
            - encoded image bytes (JPEG, PNG, ...)

    Returns:
        Image in BGR format, shape [H, W, 3], dtype uint8.

    Raises:
        ImageDecodeError: If the handle cannot be decoded or its type is
            not supported (e.g. None).

    Example:
        >>> frame = load_image("photos/finish_line.jpg")
        >>> frame.shape
        (1080, 1920, 3)
    """
    if isinstance(handle, np.ndarray):
        image = handle
    elif isinstance(handle, (str, Path)):
        path = Path(handle)
        if not path.is_file():
            raise ImageDecodeError(f"Image file not found: {path}")
        image = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if image is None:
            raise ImageDecodeError(f"Could not decode image file: {path}")
    elif isinstance(handle, (bytes, bytearray, memoryview)):
        buffer = np.frombuffer(handle, dtype=np.uint8)
        image = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None
        if image is None:
            raise ImageDecodeError(f"Could not decode {buffer.size} bytes of image data")
    else:
        raise ImageDecodeError(f"Unsupported image handle type: {type(handle).__name__}")

    if image.size == 0:
        raise ImageDecodeError("Empty image")

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)

    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)

    if image.ndim != 3 or image.shape[2] != 3:
        raise ImageDecodeError(f"Expected 1, 3 or 4 channel image, got shape {image.shape}")

    return image


def resize_to_max_side(
    image: np.ndarray,
    max_size: int,
    interpolation: int = cv2.INTER_AREA,
) -> Tuple[np.ndarray, float]:
    """Downscale an image so its longest side is at most ``max_size``.

    Images already within the limit are returned unchanged.

    Args:
        image: Input image
        max_size: Maximum length of the longest side (0 disables resizing)
        interpolation: OpenCV interpolation method

    Returns:
        Tuple of (image, scale) where ``scale`` is new size / original size.

    Example:
        >>> small, scale = resize_to_max_side(frame, 800)
        >>> boxes = [box.scale(1 / scale) for box in detector.detect(small)]
    """
    h, w = image.shape[:2]

    if max_size <= 0 or max(h, w) <= max_size:
        return image, 1.0

    scale = max_size / max(h, w)
    new_w = max(1, int(round(w * scale)))
    new_h = max(1, int(round(h * scale)))

    resized = cv2.resize(image, (new_w, new_h), interpolation=interpolation)
    logger.debug(f"Resized image {w}x{h} -> {new_w}x{new_h}")

    return resized, scale
