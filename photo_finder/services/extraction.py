"""Face extraction built from a detector, an embedder and an optional
attribute estimator.

Supports the two pipeline variants behind the same FaceExtractor interface:
1. minimal: detect -> embed
2. enriched: detect -> embed -> estimate expressions, age and gender
"""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from photo_finder.core.exceptions import ExtractionError
from photo_finder.core.interfaces import (
    AttributeEstimator,
    BBox,
    DetectedFace,
    FaceDetector,
    FaceEmbedder,
)
from photo_finder.core.logging_config import get_logger
from photo_finder.core.utils import resize_to_max_side

logger = get_logger(__name__)


class PipelineFaceExtractor:
    """FaceExtractor that chains detection, embedding and attribute estimation.

    Images are downscaled so their longest side is at most ``max_image_size``
    before detection. Boxes are mapped back so they always refer to the
    image that was passed in.

    Attributes:
        detector: Face detector
        embedder: Embedding extractor
        attribute_estimator: Optional soft attribute estimator (enriched pipeline)
        max_image_size: Longest side used for detection (0 = no resize)

    Example:
        >>> extractor = PipelineFaceExtractor(DlibDetector(), DlibEmbedder())
        >>> faces = extractor.extract(frame)
        >>> print(f"Found {len(faces)} faces")
    """

    def __init__(
        self,
        detector: FaceDetector,
        embedder: FaceEmbedder,
        attribute_estimator: Optional[AttributeEstimator] = None,
        max_image_size: int = 800,
    ):
        if max_image_size < 0:
            raise ValueError(f"max_image_size must be >= 0, got {max_image_size}")

        self.detector = detector
        self.embedder = embedder
        self.attribute_estimator = attribute_estimator
        self.max_image_size = max_image_size

        logger.info(
            f"Initialized PipelineFaceExtractor "
            f"(pipeline={'enriched' if self.enriched else 'minimal'}, "
            f"max_image_size={max_image_size})"
        )

    @property
    def enriched(self) -> bool:
        """True if soft attributes are estimated for every face."""
        return self.attribute_estimator is not None

    def extract(self, image: np.ndarray) -> List[DetectedFace]:
        """Detect faces in an image and compute their embeddings.

        Args:
            image: Decoded BGR image, shape [H, W, 3]

        Returns:
            Detected faces in detection order, boxes in ``image`` coordinates.

        Raises:
            ExtractionError: If the image is invalid or a model fails.
        """
        if image is None or not isinstance(image, np.ndarray) or image.size == 0:
            raise ExtractionError("Empty image provided to face extractor")

        if image.ndim != 3 or image.shape[2] != 3:
            raise ExtractionError(f"Expected 3-channel image, got shape {image.shape}")

        try:
            frame, scale = resize_to_max_side(image, self.max_image_size)

            boxes = self.detector.detect(frame)
            if not boxes:
                logger.debug("No faces detected")
                return []

            embeddings = np.asarray(self.embedder.embed_faces(frame, boxes))
            if embeddings.ndim != 2 or embeddings.shape[0] != len(boxes):
                raise ExtractionError(
                    f"Embedder returned shape {embeddings.shape} for {len(boxes)} faces"
                )

            faces = []
            for box, embedding in zip(boxes, embeddings):
                attributes = None
                if self.attribute_estimator is not None:
                    attributes = self.attribute_estimator.estimate(frame, box)

                faces.append(
                    DetectedFace.with_attributes(
                        embedding=embedding,
                        box=self._to_source(box, scale),
                        attributes=attributes,
                    )
                )

        except ExtractionError:
            raise
        except Exception as e:
            logger.error(f"Face extraction failed: {e}")
            raise ExtractionError(f"Face extraction failed: {e}") from e

        logger.debug(f"Extracted {len(faces)} face(s)")
        return faces

    @staticmethod
    def _to_source(box: BBox, scale: float) -> BBox:
        """Map a box from the detection resolution back to the source image."""
        if scale == 1.0:
            return box
        return box.scale(1.0 / scale)

    def __repr__(self) -> str:
        """String representation of extractor."""
        return (
            f"PipelineFaceExtractor(detector={self.detector}, "
            f"embedder={self.embedder}, "
            f"attributes={self.attribute_estimator}, "
            f"max_image_size={self.max_image_size})"
        )
