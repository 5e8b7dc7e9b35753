"""Shared test fixtures."""

from __future__ import annotations

from typing import Sequence

import numpy as np
import pytest

from photo_finder.core.interfaces import EMBEDDING_DIM, BBox, DetectedFace, Photo


def embedding_at(distance: float, axis: int = 0) -> np.ndarray:
    """Embedding exactly ``distance`` away from the zero reference."""
    embedding = np.zeros(EMBEDDING_DIM, dtype=np.float64)
    embedding[axis] = distance
    return embedding


def face_at(distance: float, box: BBox | None = None, axis: int = 0) -> DetectedFace:
    """Detected face whose embedding is ``distance`` away from the zero reference."""
    return DetectedFace(embedding=embedding_at(distance, axis), box=box or BBox(10, 10, 40, 40))


def analyzed_photo(photo_id: str, distances: Sequence[float]) -> Photo:
    """Analyzed photo with one face per distance."""
    photo = Photo(id=photo_id, image=np.zeros((100, 100, 3), dtype=np.uint8))
    return photo.with_faces([face_at(d) for d in distances])


@pytest.fixture
def reference() -> np.ndarray:
    """Zero reference embedding."""
    return np.zeros(EMBEDDING_DIM, dtype=np.float64)


@pytest.fixture
def gradient_image() -> np.ndarray:
    """A 100x200 BGR image where every pixel is distinguishable."""
    ys, xs = np.mgrid[0:100, 0:200]
    image = np.zeros((100, 200, 3), dtype=np.uint8)
    image[..., 0] = xs % 256
    image[..., 1] = ys
    image[..., 2] = (xs + ys) % 256
    return image
