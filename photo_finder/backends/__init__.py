"""Backend implementations for face extraction.

This package contains the model backends:
- dlib: HOG/CNN detector + ResNet-34 embeddings (128-D)
- deepface: expression, age and gender estimation (enriched pipeline)

Use the factory module to create an extractor or an inference context.
"""

from photo_finder.backends.factory import (
    InferenceContext,
    PipelineType,
    create_extractor,
    create_inference_context,
)

__all__ = [
    "InferenceContext",
    "PipelineType",
    "create_extractor",
    "create_inference_context",
]
