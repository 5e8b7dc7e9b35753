"""DeepFace backend for soft attribute estimation (enriched pipeline)."""

from photo_finder.backends.deepface.attributes import DeepFaceAttributeEstimator

__all__ = ["DeepFaceAttributeEstimator"]
