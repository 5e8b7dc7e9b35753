"""Dlib face detector using the face_recognition library.

This module provides a face detector based on dlib's HOG or CNN models
via the face_recognition library.
"""

from __future__ import annotations

from typing import List, Literal

import cv2
import face_recognition
import numpy as np

from photo_finder.core.interfaces import BBox
from photo_finder.core.logging_config import get_logger

logger = get_logger(__name__)


class DlibDetector:
    """Face detector using dlib via the face_recognition library.

    Supports two detection models:
    - HOG: Faster, suitable for CPU, less accurate
    - CNN: More accurate, requires GPU for reasonable speed

    Attributes:
        model: Detection model ("hog" or "cnn")
        upsample: Number of times to upsample image (higher = detect smaller faces)

    Example:
        >>> detector = DlibDetector(model="hog")
        >>> boxes = detector.detect(frame)
        >>> print(f"Found {len(boxes)} faces")
    """

    def __init__(
        self,
        model: Literal["hog", "cnn"] = "hog",
        upsample: int = 1,
    ):
        """Initialize dlib detector.

        Args:
            model: Detection model to use.
                   "hog" - Histogram of Oriented Gradients (faster, CPU-friendly)
                   "cnn" - Convolutional Neural Network (more accurate, GPU preferred)
            upsample: Number of times to upsample image before detection.
                      Higher values detect smaller faces but are slower.

        Raises:
            ValueError: If model or upsample is invalid.
        """
        if model not in ("hog", "cnn"):
            raise ValueError(f"model must be 'hog' or 'cnn', got '{model}'")

        if upsample < 0:
            raise ValueError(f"upsample must be >= 0, got {upsample}")

        self.model = model
        self.upsample = upsample

        logger.info(f"Initialized dlib detector (model={model}, upsample={upsample})")

    def detect(self, frame_bgr: np.ndarray) -> List[BBox]:
        """Detect faces in an image.

        Args:
            frame_bgr: Input image in BGR format (OpenCV convention), shape [H, W, 3]

        Returns:
            Bounding boxes in detection order, clamped to the image.
            Empty list if no faces are detected.
        """
        # face_recognition expects RGB
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

        # Returns list of tuples: (top, right, bottom, left)
        face_locations = face_recognition.face_locations(
            frame_rgb,
            number_of_times_to_upsample=self.upsample,
            model=self.model,
        )

        h, w = frame_bgr.shape[:2]

        boxes = []
        for top, right, bottom, left in face_locations:
            # dlib may report boxes partly outside the image
            x1 = max(0, min(left, w - 1))
            y1 = max(0, min(top, h - 1))
            x2 = max(0, min(right, w))
            y2 = max(0, min(bottom, h))

            if x2 <= x1 or y2 <= y1:
                logger.debug(f"Dropping degenerate face location {(top, right, bottom, left)}")
                continue

            boxes.append(BBox.from_corners(x1, y1, x2, y2))

        if boxes:
            logger.debug(f"Detected {len(boxes)} faces (model={self.model})")

        return boxes

    def __repr__(self) -> str:
        """String representation of detector."""
        return f"DlibDetector(model='{self.model}', upsample={self.upsample})"
