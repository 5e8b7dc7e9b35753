"""Unit tests for the pipeline face extractor."""

from __future__ import annotations

from unittest.mock import Mock

import numpy as np
import pytest

from photo_finder.core.exceptions import ExtractionError
from photo_finder.core.interfaces import BBox, FaceAttributes, FaceExtractor
from photo_finder.services.extraction import PipelineFaceExtractor


@pytest.fixture
def detector():
    """Mock detector returning two boxes."""
    mock = Mock()
    mock.detect.return_value = [BBox(10, 10, 30, 30), BBox(50, 20, 20, 20)]
    return mock


@pytest.fixture
def embedder():
    """Mock embedder returning one embedding per box."""
    mock = Mock()
    mock.embed_faces.side_effect = lambda frame, boxes: np.arange(
        len(boxes) * 128, dtype=np.float64
    ).reshape(len(boxes), 128)
    return mock


@pytest.fixture
def image():
    """Small BGR test image."""
    return np.zeros((100, 100, 3), dtype=np.uint8)


def test_implements_protocol(detector, embedder):
    """Test that the extractor satisfies the FaceExtractor protocol."""
    assert isinstance(PipelineFaceExtractor(detector, embedder), FaceExtractor)


def test_extract_minimal(detector, embedder, image):
    """Test detect then embed without attributes."""
    extractor = PipelineFaceExtractor(detector, embedder)

    faces = extractor.extract(image)

    assert not extractor.enriched
    assert len(faces) == 2
    assert faces[0].box == BBox(10, 10, 30, 30)
    assert faces[1].embedding[0] == 128
    assert not any(face.has_attributes for face in faces)
    detector.detect.assert_called_once()
    embedder.embed_faces.assert_called_once()


def test_extract_no_faces(embedder, image):
    """Test that an image without faces gives an empty list."""
    detector = Mock()
    detector.detect.return_value = []

    faces = PipelineFaceExtractor(detector, embedder).extract(image)

    assert faces == []
    embedder.embed_faces.assert_not_called()


def test_large_image_resized_and_boxes_mapped_back(embedder):
    """Test that detection runs at reduced size and boxes refer to the input."""
    detector = Mock()
    detector.detect.return_value = [BBox(100, 100, 50, 50)]
    extractor = PipelineFaceExtractor(detector, embedder, max_image_size=800)

    faces = extractor.extract(np.zeros((1200, 1600, 3), dtype=np.uint8))

    detected_frame = detector.detect.call_args[0][0]
    assert detected_frame.shape == (600, 800, 3)
    assert faces[0].box == BBox(200, 200, 100, 100)


def test_resize_disabled(detector, embedder):
    """Test that max_image_size=0 keeps the original resolution."""
    extractor = PipelineFaceExtractor(detector, embedder, max_image_size=0)

    extractor.extract(np.zeros((1200, 1600, 3), dtype=np.uint8))

    assert detector.detect.call_args[0][0].shape == (1200, 1600, 3)


def test_enriched_attributes(detector, embedder, image):
    """Test that the attribute estimator runs once per face."""
    estimator = Mock()
    estimator.estimate.return_value = FaceAttributes(expressions={"happy": 1.0}, age=30.0)
    extractor = PipelineFaceExtractor(detector, embedder, attribute_estimator=estimator)

    faces = extractor.extract(image)

    assert extractor.enriched
    assert estimator.estimate.call_count == 2
    assert faces[0].dominant_expression == ("happy", 1.0)
    assert faces[1].age == 30.0


def test_model_errors_wrapped(embedder, image):
    """Test that backend exceptions surface as ExtractionError."""
    detector = Mock()
    detector.detect.side_effect = RuntimeError("model crashed")

    with pytest.raises(ExtractionError, match="model crashed"):
        PipelineFaceExtractor(detector, embedder).extract(image)


def test_embedding_count_mismatch(detector, image):
    """Test that a wrong number of embeddings is an extraction error."""
    embedder = Mock()
    embedder.embed_faces.return_value = np.zeros((1, 128))

    with pytest.raises(ExtractionError, match="shape"):
        PipelineFaceExtractor(detector, embedder).extract(image)


@pytest.mark.parametrize(
    "bad_image",
    [None, np.zeros((0, 0, 3), dtype=np.uint8), np.zeros((10, 10), dtype=np.uint8)],
)
def test_invalid_image(detector, embedder, bad_image):
    """Test that empty or non-BGR images are rejected."""
    with pytest.raises(ExtractionError):
        PipelineFaceExtractor(detector, embedder).extract(bad_image)


def test_invalid_max_image_size(detector, embedder):
    """Test constructor validation."""
    with pytest.raises(ValueError):
        PipelineFaceExtractor(detector, embedder, max_image_size=-1)
