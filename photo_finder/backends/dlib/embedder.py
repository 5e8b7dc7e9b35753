"""Dlib embedder for face feature extraction using the face_recognition library.

This module provides face embedding extraction using dlib's ResNet-34 model
via the face_recognition library. It converts face regions into
128-dimensional feature vectors.
"""

from __future__ import annotations

from typing import Literal, Sequence

import cv2
import face_recognition
import numpy as np

from photo_finder.core.interfaces import EMBEDDING_DIM, BBox
from photo_finder.core.logging_config import get_logger

logger = get_logger(__name__)


class DlibEmbedder:
    """Dlib embedder for extracting 128-D face features.

    This embedder uses dlib's ResNet-34 model (trained on ~3 million faces)
    to convert faces into 128-dimensional feature vectors. Embeddings are
    returned unnormalized: the standard 0.6 distance threshold is calibrated
    on raw dlib embeddings.

    Attributes:
        model: Landmark model size ("large" or "small")
        num_jitters: Number of times to re-sample face for encoding
        embedding_dim: Dimension of output embeddings (128 for dlib)

    Example:
        >>> embedder = DlibEmbedder(model="large")
        >>> embeddings = embedder.embed_faces(frame, boxes)
        >>> assert embeddings.shape == (len(boxes), 128)
    """

    def __init__(
        self,
        model: Literal["large", "small"] = "large",
        num_jitters: int = 1,
    ):
        """Initialize dlib embedder.

        Args:
            model: Landmark model used to align faces before encoding.
                   "large" - 68 points, more accurate (default)
                   "small" - 5 points, faster
            num_jitters: Number of times to re-sample the face when calculating
                        encoding. Higher values are more accurate but slower.

        Raises:
            ValueError: If model or num_jitters is invalid.
        """
        if model not in ("large", "small"):
            raise ValueError(f"model must be 'large' or 'small', got '{model}'")

        if num_jitters < 1:
            raise ValueError(f"num_jitters must be >= 1, got {num_jitters}")

        self.model = model
        self.num_jitters = num_jitters
        self.embedding_dim = EMBEDDING_DIM

        logger.info(
            f"Initialized dlib embedder (model={model}, num_jitters={num_jitters})"
        )

    def embed_faces(self, frame_bgr: np.ndarray, boxes: Sequence[BBox]) -> np.ndarray:
        """Compute embeddings for faces at known locations.

        Args:
            frame_bgr: Full frame in BGR format.
            boxes: Face boxes in frame coordinates.

        Returns:
            Embeddings array, shape [len(boxes), 128], dtype float64.

        Raises:
            ValueError: If the frame is empty.
            RuntimeError: If dlib returns an unexpected number of encodings.
        """
        if frame_bgr is None or frame_bgr.size == 0:
            raise ValueError("Empty frame provided")

        if not boxes:
            return np.zeros((0, self.embedding_dim), dtype=np.float64)

        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

        encodings = face_recognition.face_encodings(
            frame_rgb,
            known_face_locations=[box.to_css() for box in boxes],
            num_jitters=self.num_jitters,
            model=self.model,
        )

        if len(encodings) != len(boxes):
            raise RuntimeError(
                f"Expected {len(boxes)} encodings, got {len(encodings)}"
            )

        embeddings = np.stack([np.asarray(e, dtype=np.float64) for e in encodings])

        if embeddings.shape[1] != self.embedding_dim:
            raise RuntimeError(
                f"Unexpected embedding dimension {embeddings.shape[1]}, "
                f"expected {self.embedding_dim}"
            )

        return embeddings

    def __repr__(self) -> str:
        """String representation of embedder."""
        return (
            f"DlibEmbedder(model='{self.model}', "
            f"num_jitters={self.num_jitters}, dim={self.embedding_dim})"
        )
