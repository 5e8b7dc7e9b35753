"""Backend factory for the photo finder pipeline.

This module builds the face extractor for a pipeline variant and owns the
loaded models through an explicit InferenceContext:
- minimal: dlib HOG/CNN detector + ResNet-34 embeddings (128-D)
- enriched: minimal + DeepFace expression, age and gender estimation

Usage:
    with create_inference_context(config) as context:
        faces = context.extractor.extract(frame)
"""

from __future__ import annotations

from typing import Literal, Optional

from photo_finder.core.config import PIPELINES, Config
from photo_finder.core.interfaces import FaceExtractor
from photo_finder.core.logging_config import get_logger

logger = get_logger(__name__)

# Pipeline type alias
PipelineType = Literal["minimal", "enriched"]


def create_extractor(
    pipeline: PipelineType = "minimal",
    config: Optional[Config] = None,
) -> FaceExtractor:
    """Create the face extractor for a pipeline variant.

    Backends are imported here so that the matching code can be used
    without the model libraries installed.

    Args:
        pipeline: "minimal" (faces and embeddings) or "enriched"
                  (plus expressions, age and gender)
        config: Configuration object. If None, loads from .env

    Returns:
        FaceExtractor instance.

    Raises:
        ValueError: If the pipeline is unknown.
    """
    if pipeline not in PIPELINES:
        raise ValueError(
            f"Unknown pipeline: '{pipeline}'. Supported pipelines: {list(PIPELINES)}"
        )

    if config is None:
        config = Config.from_env()

    logger.info(f"Creating {pipeline} pipeline (detector={config.detector_model})...")

    from photo_finder.backends.dlib.detector import DlibDetector
    from photo_finder.backends.dlib.embedder import DlibEmbedder
    from photo_finder.services.extraction import PipelineFaceExtractor

    detector = DlibDetector(model=config.detector_model, upsample=config.upsample)
    embedder = DlibEmbedder(model=config.embedder_model, num_jitters=config.num_jitters)

    attribute_estimator = None
    if pipeline == "enriched":
        from photo_finder.backends.deepface.attributes import DeepFaceAttributeEstimator

        attribute_estimator = DeepFaceAttributeEstimator()

    extractor = PipelineFaceExtractor(
        detector=detector,
        embedder=embedder,
        attribute_estimator=attribute_estimator,
        max_image_size=config.max_image_size,
    )

    logger.info(f"{pipeline.capitalize()} pipeline created successfully")
    return extractor


class InferenceContext:
    """Holds the loaded face models for the lifetime of a session.

    Models are loaded by ``initialize()`` and released by ``close()``.
    Nothing is loaded at import time and nothing is shared between
    contexts.

    Attributes:
        config: Configuration used to build the models
        pipeline: Pipeline variant ("minimal" or "enriched")

    Example:
        >>> context = InferenceContext(config).initialize()
        >>> try:
        ...     faces = context.extractor.extract(frame)
        ... finally:
        ...     context.close()
    """

    def __init__(self, config: Optional[Config] = None, pipeline: Optional[PipelineType] = None):
        """Create an uninitialized context.

        Args:
            config: Configuration object. If None, loads from .env
            pipeline: Overrides ``config.pipeline``

        Raises:
            ValueError: If the pipeline is unknown.
        """
        self.config = config if config is not None else Config.from_env()
        self.pipeline = pipeline or self.config.pipeline

        if self.pipeline not in PIPELINES:
            raise ValueError(
                f"Unknown pipeline: '{self.pipeline}'. Supported pipelines: {list(PIPELINES)}"
            )

        self._extractor: Optional[FaceExtractor] = None

    @property
    def is_initialized(self) -> bool:
        """True between initialize() and close()."""
        return self._extractor is not None

    @property
    def extractor(self) -> FaceExtractor:
        """The face extractor.

        Raises:
            RuntimeError: If the context has not been initialized.
        """
        if self._extractor is None:
            raise RuntimeError("Inference context not initialized. Call initialize() first.")
        return self._extractor

    def initialize(self) -> InferenceContext:
        """Load the models. Calling it again on a live context is a no-op."""
        if self._extractor is None:
            self._extractor = create_extractor(self.pipeline, self.config)
            logger.info(f"Inference context initialized ({self.pipeline})")
        return self

    def close(self) -> None:
        """Release the models."""
        if self._extractor is not None:
            self._extractor = None
            logger.info("Inference context closed")

    def __enter__(self) -> InferenceContext:
        return self.initialize()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        """String representation of context."""
        state = "initialized" if self.is_initialized else "not initialized"
        return f"InferenceContext(pipeline='{self.pipeline}', {state})"


def create_inference_context(
    config: Optional[Config] = None,
    pipeline: Optional[PipelineType] = None,
) -> InferenceContext:
    """Create an uninitialized InferenceContext.

    Example:
        >>> with create_inference_context(pipeline="enriched") as context:
        ...     faces = context.extractor.extract(frame)
    """
    return InferenceContext(config=config, pipeline=pipeline)
