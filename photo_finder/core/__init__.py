"""Core modules for the photo finder pipeline.

This package contains the shared data types, interfaces, configuration and
utilities used by the matching engine and the backends.
"""

from photo_finder.core.config import Config
from photo_finder.core.exceptions import (
    AnalysisCancelled,
    DimensionMismatch,
    ExtractionError,
    ImageDecodeError,
    NoFaceFound,
    PhotoFinderError,
)
from photo_finder.core.interfaces import (
    EMBEDDING_DIM,
    EXPRESSION_LABELS,
    EXPRESSION_SUM_TOLERANCE,
    AttributeEstimator,
    BBox,
    DetectedFace,
    FaceAttributes,
    FaceDetector,
    FaceEmbedder,
    FaceExtractor,
    Gender,
    GenderEstimate,
    MatchResult,
    Photo,
)
from photo_finder.core.logging_config import get_logger, setup_logging
from photo_finder.core.utils import load_image, resize_to_max_side

__all__ = [
    # Config
    "Config",
    # Errors
    "PhotoFinderError",
    "NoFaceFound",
    "DimensionMismatch",
    "ExtractionError",
    "ImageDecodeError",
    "AnalysisCancelled",
    # Interfaces
    "EMBEDDING_DIM",
    "EXPRESSION_LABELS",
    "EXPRESSION_SUM_TOLERANCE",
    "BBox",
    "Gender",
    "GenderEstimate",
    "FaceAttributes",
    "DetectedFace",
    "Photo",
    "MatchResult",
    "FaceDetector",
    "FaceEmbedder",
    "AttributeEstimator",
    "FaceExtractor",
    # Logging
    "setup_logging",
    "get_logger",
    # Utils
    "load_image",
    "resize_to_max_side",
]
