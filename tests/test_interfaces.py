"""Unit tests for the core value types."""

from __future__ import annotations

import numpy as np
import pytest

from conftest import face_at
from photo_finder.core.interfaces import (
    BBox,
    DetectedFace,
    FaceAttributes,
    Gender,
    GenderEstimate,
    MatchResult,
    Photo,
)


def test_bbox_properties():
    """Test derived bounding box geometry."""
    box = BBox(x=10, y=20, width=30, height=40)

    assert box.x2 == 40
    assert box.y2 == 60
    assert box.area == 1200
    assert box.center == (25, 40)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"x": 0, "y": 0, "width": 0, "height": 10},
        {"x": 0, "y": 0, "width": 10, "height": -1},
        {"x": -1, "y": 0, "width": 10, "height": 10},
    ],
)
def test_bbox_invalid(kwargs):
    """Test that degenerate boxes are rejected."""
    with pytest.raises(ValueError):
        BBox(**kwargs)


def test_bbox_css_conversion():
    """Test conversion from and to (top, right, bottom, left)."""
    box = BBox.from_css((20, 40, 60, 10))

    assert box == BBox(x=10, y=20, width=30, height=40)
    assert box.to_css() == (20, 40, 60, 10)


def test_bbox_scale():
    """Test mapping a box to another resolution."""
    assert BBox(100, 50, 20, 10).scale(2.0) == BBox(200, 100, 40, 20)

    with pytest.raises(ValueError):
        BBox(0, 0, 10, 10).scale(0)


def test_face_embedding_is_read_only():
    """Test that a face's embedding cannot be modified."""
    source = np.ones(128, dtype=np.float32)
    face = DetectedFace(embedding=source, box=BBox(0, 0, 10, 10))

    assert face.embedding.dtype == np.float64
    assert face.dimension == 128
    with pytest.raises(ValueError):
        face.embedding[0] = 5.0

    source[0] = 5.0
    assert face.embedding[0] == 1.0


def test_face_rejects_bad_embedding():
    """Test that embeddings must be non-empty vectors."""
    with pytest.raises(ValueError):
        DetectedFace(embedding=np.zeros((2, 64)), box=BBox(0, 0, 10, 10))

    with pytest.raises(ValueError):
        DetectedFace(embedding=np.zeros(0), box=BBox(0, 0, 10, 10))


def test_face_without_attributes():
    """Test the minimal pipeline's face shape."""
    face = face_at(0.1)

    assert not face.has_attributes
    assert face.dominant_expression is None


def test_face_expressions_validated():
    """Test expression names and probability range."""
    with pytest.raises(ValueError, match="Unknown expression"):
        DetectedFace(embedding=np.zeros(128), box=BBox(0, 0, 10, 10), expressions={"bored": 0.5})

    with pytest.raises(ValueError, match="probability"):
        DetectedFace(embedding=np.zeros(128), box=BBox(0, 0, 10, 10), expressions={"happy": 1.5})


@pytest.mark.parametrize("expressions", [{"happy": 0.1}, {"happy": 0.7, "sad": 0.5}, {}])
def test_face_expressions_must_sum_to_one(expressions):
    """Test that partial or overfull distributions are rejected."""
    with pytest.raises(ValueError, match="sum to 1"):
        DetectedFace(embedding=np.zeros(128), box=BBox(0, 0, 10, 10), expressions=expressions)


def test_face_expressions_sum_tolerance():
    """Test that rounding in the distribution is accepted."""
    face = DetectedFace(
        embedding=np.zeros(128),
        box=BBox(0, 0, 10, 10),
        expressions={"happy": 0.62, "neutral": 0.35},
    )

    assert face.dominant_expression == ("happy", 0.62)


def test_face_expressions_are_read_only():
    """Test that the stored expression mapping cannot be changed."""
    expressions = {"happy": 0.7, "neutral": 0.3}
    face = DetectedFace(embedding=np.zeros(128), box=BBox(0, 0, 10, 10), expressions=expressions)

    expressions["happy"] = 0.0
    assert face.expressions["happy"] == 0.7

    with pytest.raises(TypeError):
        face.expressions["happy"] = 0.1


def test_dominant_expression_tie_goes_to_first():
    """Test that equal probabilities resolve to the first expression."""
    face = DetectedFace(
        embedding=np.zeros(128),
        box=BBox(0, 0, 10, 10),
        expressions={"sad": 0.4, "happy": 0.4, "neutral": 0.2},
    )

    assert face.dominant_expression == ("sad", 0.4)


def test_negative_age_rejected():
    """Test that ages must be non-negative."""
    with pytest.raises(ValueError):
        DetectedFace(embedding=np.zeros(128), box=BBox(0, 0, 10, 10), age=-1)


def test_with_attributes():
    """Test building a face from estimated attributes."""
    attributes = FaceAttributes(
        expressions={"happy": 0.9, "neutral": 0.1},
        age=31.0,
        gender=GenderEstimate(Gender.FEMALE, 0.8),
    )

    face = DetectedFace.with_attributes(np.zeros(128), BBox(0, 0, 10, 10), attributes)

    assert face.has_attributes
    assert face.age == 31.0
    assert face.gender.gender is Gender.FEMALE
    assert face.dominant_expression == ("happy", 0.9)


def test_gender_probability_validated():
    """Test that gender probabilities must be in [0, 1]."""
    with pytest.raises(ValueError):
        GenderEstimate(Gender.MALE, 1.2)


def test_photo_with_faces():
    """Test that analysis produces a new photo and only happens once."""
    photo = Photo(id="p1", image="photos/p1.jpg")
    faces = [face_at(0.1), face_at(0.2)]

    analyzed = photo.with_faces(faces)

    assert not photo.analyzed
    assert photo.faces == ()
    assert analyzed.analyzed
    assert analyzed.faces == tuple(faces)
    assert analyzed.name == "p1.jpg"

    with pytest.raises(RuntimeError):
        analyzed.with_faces([])


def test_photo_from_path_ids_unique(tmp_path):
    """Test that photos created from paths get distinct ids."""
    first = Photo.from_path(tmp_path / "a.jpg")
    second = Photo.from_path(tmp_path / "a.jpg")

    assert first.id != second.id
    assert first.name == "a.jpg"


def test_photo_name_falls_back_to_id():
    """Test the name of a photo backed by an array."""
    photo = Photo(id="abc", image=np.zeros((4, 4, 3), dtype=np.uint8))

    assert photo.name == "abc"


def test_match_result_from_distance():
    """Test score derivation and face lookup."""
    photo = Photo(id="p", image=None).with_faces([face_at(0.9), face_at(0.25)])

    result = MatchResult.from_distance(photo, 0.25, face_index=1)

    assert result.score == pytest.approx(0.75)
    assert result.face is photo.faces[1]
    assert MatchResult.from_distance(photo, 1.4).score == 0.0
