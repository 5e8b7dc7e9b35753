"""Unit tests for the photo matcher."""

from __future__ import annotations

import numpy as np
import pytest

from conftest import analyzed_photo, face_at
from photo_finder.core.exceptions import DimensionMismatch
from photo_finder.core.interfaces import BBox, DetectedFace, Photo
from photo_finder.matching.matcher import PhotoMatcher, find_matches


@pytest.fixture
def matcher():
    """Create a PhotoMatcher with the default threshold."""
    return PhotoMatcher()


def test_default_threshold(matcher):
    """Test that the default threshold is 0.6."""
    assert matcher.threshold == 0.6
    assert matcher.dimension == 128


def test_ranking_scenario(matcher, reference):
    """Test single-face, multi-face and faceless photos together."""
    photo_a = analyzed_photo("A", [0.3])
    photo_b = analyzed_photo("B", [0.8, 0.5])
    photo_c = analyzed_photo("C", [])

    results = matcher.find_matches(reference, [photo_a, photo_b, photo_c])

    assert [r.photo.id for r in results] == ["A", "B"]
    assert results[0].score == pytest.approx(0.7)
    assert results[0].distance == pytest.approx(0.3)
    assert results[1].score == pytest.approx(0.5)
    assert results[1].distance == pytest.approx(0.5)


def test_best_face_decides_photo(matcher, reference):
    """Test that the closest face gives the photo its distance and face index."""
    photo = analyzed_photo("B", [0.8, 0.5, 0.9])

    results = matcher.find_matches(reference, [photo])

    assert len(results) == 1
    assert results[0].face_index == 1
    assert results[0].face is photo.faces[1]


def test_threshold_is_inclusive(matcher, reference):
    """Test that a distance equal to the threshold is a match."""
    photo = analyzed_photo("D", [0.6])

    results = matcher.find_matches(reference, [photo], threshold=0.6)

    assert len(results) == 1
    assert results[0].distance == 0.6
    assert results[0].score == pytest.approx(0.4)


def test_above_threshold_excluded(matcher, reference):
    """Test that photos farther than the threshold are dropped."""
    photo = analyzed_photo("E", [0.61])

    assert matcher.find_matches(reference, [photo]) == []


@pytest.mark.parametrize("threshold", [0.0, 0.6, 10.0, 1e9])
def test_faceless_photos_never_match(matcher, reference, threshold):
    """Test that photos without faces are skipped for any threshold."""
    photos = [analyzed_photo("empty", []), Photo(id="unanalyzed", image=None)]

    assert matcher.find_matches(reference, photos, threshold=threshold) == []


def test_threshold_monotonicity(matcher, reference):
    """Test that a stricter threshold gives a subset of the matches."""
    rng = np.random.default_rng(7)
    photos = [
        analyzed_photo(f"P{i}", list(rng.uniform(0.0, 1.2, size=rng.integers(1, 4))))
        for i in range(30)
    ]
    thresholds = [0.0, 0.2, 0.4, 0.6, 0.8, 1.0, 1.3]

    match_sets = [
        {r.photo.id for r in matcher.find_matches(reference, photos, threshold=t)}
        for t in thresholds
    ]

    for stricter, looser in zip(match_sets, match_sets[1:]):
        assert stricter <= looser


def test_sorted_by_score_descending(matcher, reference):
    """Test that results are ordered best first."""
    photos = [analyzed_photo(f"P{i}", [d]) for i, d in enumerate([0.5, 0.1, 0.4, 0.2, 0.3])]

    results = matcher.find_matches(reference, photos)

    scores = [r.score for r in results]
    assert scores == sorted(scores, reverse=True)
    assert [r.photo.id for r in results] == ["P1", "P3", "P4", "P2", "P0"]


def test_equal_scores_keep_input_order(matcher, reference):
    """Test that ties are broken by input order."""
    photos = [
        analyzed_photo("first", [0.4]),
        analyzed_photo("better", [0.2]),
        analyzed_photo("second", [0.4]),
        analyzed_photo("third", [0.4]),
    ]

    results = matcher.find_matches(reference, photos)

    assert [r.photo.id for r in results] == ["better", "first", "second", "third"]


def test_equal_scores_from_different_faces_keep_input_order(reference):
    """Test stability when equal distances come from different embeddings."""
    matcher = PhotoMatcher()
    photos = [
        Photo(id=f"P{axis}", image=None).with_faces([face_at(0.3, axis=axis)])
        for axis in (5, 2, 9, 0)
    ]

    results = matcher.find_matches(reference, photos)

    assert [r.photo.id for r in results] == ["P5", "P2", "P9", "P0"]


def test_deterministic(matcher, reference):
    """Test that repeated runs give identical results."""
    photos = [analyzed_photo(f"P{i}", [0.1 * (i % 5), 0.9]) for i in range(12)]

    first = matcher.find_matches(reference, photos)
    second = matcher.find_matches(reference, photos)

    assert [(r.photo.id, r.distance, r.score) for r in first] == [
        (r.photo.id, r.distance, r.score) for r in second
    ]
    assert first is not second


def test_inputs_not_mutated(matcher, reference):
    """Test that photos, faces and the reference are left untouched."""
    photos = [analyzed_photo("A", [0.5, 0.2]), analyzed_photo("B", [0.1])]
    faces_before = [photo.faces for photo in photos]
    reference_before = reference.copy()

    matcher.find_matches(reference, photos)

    assert [photo.faces for photo in photos] == faces_before
    assert np.array_equal(reference, reference_before)
    assert not photos[0].faces[0].embedding.flags.writeable


def test_score_clipped_at_zero(matcher, reference):
    """Test that distances above 1 give a zero score with a loose threshold."""
    photo = analyzed_photo("far", [1.5])

    results = matcher.find_matches(reference, [photo], threshold=2.0)

    assert results[0].score == 0.0
    assert results[0].distance == 1.5


def test_negative_threshold_raises(matcher, reference):
    """Test that a negative threshold is rejected."""
    with pytest.raises(ValueError, match="Threshold"):
        matcher.find_matches(reference, [], threshold=-0.1)

    with pytest.raises(ValueError):
        PhotoMatcher(threshold=-1.0)


def test_reference_dimension_mismatch(matcher):
    """Test that a reference of the wrong size is fatal."""
    photo = analyzed_photo("A", [0.1])

    with pytest.raises(DimensionMismatch):
        matcher.find_matches(np.zeros(64), [photo])


def test_face_dimension_mismatch(reference):
    """Test that a face embedding of the wrong size is fatal."""
    matcher = PhotoMatcher()
    good = analyzed_photo("good", [0.1, 0.2])
    bad = Photo(id="bad", image=None).with_faces(
        [DetectedFace(embedding=np.zeros(64), box=BBox(0, 0, 10, 10))]
    )

    with pytest.raises(DimensionMismatch):
        matcher.find_matches(reference, [good, bad])


def test_photo_distance(matcher, reference):
    """Test the representative distance of a single photo."""
    assert matcher.photo_distance(reference, analyzed_photo("none", [])) is None

    distance, face_index = matcher.photo_distance(reference, analyzed_photo("P", [0.7, 0.3, 0.3]))
    assert distance == pytest.approx(0.3)
    assert face_index == 1


def test_find_matches_function(reference):
    """Test the module-level helper with the default threshold."""
    photos = [analyzed_photo("A", [0.65]), analyzed_photo("B", [0.55])]

    results = find_matches(reference, photos)

    assert [r.photo.id for r in results] == ["B"]


def test_find_matches_function_other_dimension():
    """Test that the helper takes the dimension from the reference."""
    reference = np.zeros(4)
    face = DetectedFace(embedding=np.array([0.2, 0.0, 0.0, 0.0]), box=BBox(0, 0, 10, 10))
    photo = Photo(id="small", image=None).with_faces([face])

    results = find_matches(reference, [photo], threshold=0.6)

    assert results[0].score == pytest.approx(0.8)


def test_repr(matcher):
    """Test string representation of matcher."""
    assert "threshold=0.6" in repr(matcher)
