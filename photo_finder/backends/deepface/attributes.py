"""Soft attribute estimation (expression, age, gender) using DeepFace.

This module backs the enriched extraction pipeline. DeepFace classifies each
face crop into 7 expressions, estimates an age and a gender, and reports
percentages that are converted here to probabilities.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence

import numpy as np

from photo_finder.core.interfaces import BBox, FaceAttributes, Gender, GenderEstimate
from photo_finder.core.logging_config import get_logger
from photo_finder.matching.crop import crop_face

logger = get_logger(__name__)

SUPPORTED_ACTIONS = ("emotion", "age", "gender")

# DeepFace emotion names -> expression names used by DetectedFace
EMOTION_NAMES = {
    "neutral": "neutral",
    "happy": "happy",
    "sad": "sad",
    "angry": "angry",
    "fear": "fearful",
    "disgust": "disgusted",
    "surprise": "surprised",
}

GENDER_NAMES = {
    "Man": Gender.MALE,
    "Woman": Gender.FEMALE,
}


def parse_expressions(emotion: Mapping[str, float]) -> Optional[Dict[str, float]]:
    """Convert DeepFace emotion percentages into a probability distribution.

    Returns:
        Mapping of expression name to probability, summing to 1, or None if
        DeepFace reported no usable scores.
    """
    scores = {
        EMOTION_NAMES[name]: max(0.0, float(value))
        for name, value in emotion.items()
        if name in EMOTION_NAMES
    }
    total = sum(scores.values())
    if total <= 0:
        return None
    return {name: value / total for name, value in scores.items()}


def parse_gender(gender: Mapping[str, float]) -> Optional[GenderEstimate]:
    """Convert DeepFace gender percentages into the most likely gender."""
    scores = {
        GENDER_NAMES[name]: float(value)
        for name, value in gender.items()
        if name in GENDER_NAMES
    }
    if not scores:
        return None

    best = max(scores, key=scores.get)
    probability = float(np.clip(scores[best] / 100.0, 0.0, 1.0))
    return GenderEstimate(gender=best, probability=probability)


def parse_analysis(result: Any) -> FaceAttributes:
    """Convert a DeepFace.analyze result into FaceAttributes.

    Handles both the list returned by current DeepFace releases and the
    single dict returned by older ones.
    """
    if isinstance(result, list):
        if not result:
            return FaceAttributes()
        result = result[0]

    expressions = None
    if "emotion" in result:
        expressions = parse_expressions(result["emotion"])

    age = None
    if result.get("age") is not None:
        age = max(0.0, float(result["age"]))

    gender = None
    if isinstance(result.get("gender"), Mapping):
        gender = parse_gender(result["gender"])

    return FaceAttributes(expressions=expressions, age=age, gender=gender)


class DeepFaceAttributeEstimator:
    """Estimate expression, age and gender for detected faces.

    Faces are analyzed on padded crops with DeepFace's own detection
    skipped, since the box is already known.

    Attributes:
        actions: DeepFace actions to run
        padding: Fraction of the box size added around the crop

    Example:
        >>> estimator = DeepFaceAttributeEstimator()
        >>> attributes = estimator.estimate(frame, box)
        >>> print(attributes.age, attributes.gender)
    """

    def __init__(
        self,
        actions: Sequence[str] = SUPPORTED_ACTIONS,
        padding: float = 0.2,
    ):
        """Initialize attribute estimator.

        Args:
            actions: Subset of ("emotion", "age", "gender")
            padding: Fraction of the box size added around the crop

        Raises:
            ValueError: If an action is not supported.
            ImportError: If deepface is not installed.
        """
        unknown = set(actions) - set(SUPPORTED_ACTIONS)
        if not actions or unknown:
            raise ValueError(
                f"actions must be a non-empty subset of {list(SUPPORTED_ACTIONS)}, "
                f"got {list(actions)}"
            )

        try:
            from deepface import DeepFace
        except ImportError as e:
            raise ImportError(
                "The enriched pipeline requires deepface: pip install 'photo-finder[enriched]'"
            ) from e

        self._deepface = DeepFace
        self.actions = tuple(actions)
        self.padding = padding

        logger.info(f"Initialized DeepFace attribute estimator (actions={list(self.actions)})")

    def estimate(self, frame_bgr: np.ndarray, box: BBox) -> FaceAttributes:
        """Estimate soft attributes for the face at ``box``.

        Args:
            frame_bgr: Image in BGR format
            box: Face bounding box in that image

        Returns:
            FaceAttributes with the fields for the configured actions.
        """
        face = crop_face(frame_bgr, box, self.padding)

        result = self._deepface.analyze(
            img_path=face,
            actions=list(self.actions),
            enforce_detection=False,
            detector_backend="skip",
            silent=True,
        )

        attributes = parse_analysis(result)
        logger.debug(f"Attributes for {box}: {attributes}")
        return attributes

    def __repr__(self) -> str:
        """String representation of estimator."""
        return f"DeepFaceAttributeEstimator(actions={list(self.actions)}, padding={self.padding})"
