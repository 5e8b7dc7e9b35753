"""Photo matcher: find and rank the photos that contain the reference face.

Every face in a photo is compared against the reference embedding and the
closest one decides for the whole photo: a photo matches if any face in it
looks like the reference. Photos closer than the threshold are ranked by
similarity score.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np

from photo_finder.core.exceptions import DimensionMismatch
from photo_finder.core.interfaces import EMBEDDING_DIM, MatchResult, Photo
from photo_finder.core.logging_config import get_logger
from photo_finder.matching.comparator import euclidean_distances

logger = get_logger(__name__)

DEFAULT_THRESHOLD = 0.6


def _validate_threshold(threshold: float) -> float:
    if threshold < 0:
        raise ValueError(f"Threshold must be >= 0, got {threshold}")
    return float(threshold)


class PhotoMatcher:
    """Rank photos by how closely their best face matches a reference.

    Attributes:
        threshold: Maximum distance admitted as a match (inclusive).
                   Lower values = stricter matching.
        dimension: Expected embedding dimension (128 for dlib)

    Example:
        >>> matcher = PhotoMatcher(threshold=0.6)
        >>> results = matcher.find_matches(reference, photos)
        >>> for result in results:
        ...     print(f"{result.photo.id}: {result.score:.2f}")
    """

    def __init__(self, threshold: float = DEFAULT_THRESHOLD, dimension: int = EMBEDDING_DIM):
        """Initialize photo matcher.

        Args:
            threshold: Distance threshold. Default 0.6 is standard for dlib
                       embeddings.
            dimension: Embedding dimension (default: 128 for dlib)
        """
        self.threshold = _validate_threshold(threshold)
        self.dimension = dimension

    def _check_reference(self, reference: np.ndarray) -> np.ndarray:
        reference = np.asarray(reference, dtype=np.float64)
        if reference.ndim == 2 and reference.shape[0] == 1:
            reference = reference.flatten()

        if reference.ndim != 1 or reference.shape[0] != self.dimension:
            raise DimensionMismatch(
                f"Expected reference embedding of dimension {self.dimension}, "
                f"got shape {reference.shape}"
            )
        return reference

    def photo_distance(
        self, reference: np.ndarray, photo: Photo
    ) -> Optional[Tuple[float, int]]:
        """Compute a photo's representative distance to the reference.

        Args:
            reference: Reference embedding, shape [D]
            photo: Photo with its detected faces

        Returns:
            Tuple of (distance, face_index) for the closest face, or None
            if the photo has no faces.
        """
        if not photo.faces:
            return None

        reference = self._check_reference(reference)

        for face in photo.faces:
            if face.dimension != self.dimension:
                raise DimensionMismatch(
                    f"Face in photo {photo.id} has embedding dimension "
                    f"{face.dimension}, expected {self.dimension}"
                )

        embeddings = np.stack([face.embedding for face in photo.faces])
        distances = euclidean_distances(reference, embeddings)

        # argmin returns the first of equal minima
        face_index = int(np.argmin(distances))
        return float(distances[face_index]), face_index

    def find_matches(
        self,
        reference: np.ndarray,
        photos: Sequence[Photo],
        threshold: Optional[float] = None,
    ) -> List[MatchResult]:
        """Find the photos containing the reference face.

        Args:
            reference: Reference embedding, shape [D]
            photos: Analyzed photos. Photos without faces are skipped.
            threshold: Overrides the matcher's threshold for this call.

        Returns:
            Matches sorted by score, highest first. Photos with equal scores
            keep their input order.

        Raises:
            DimensionMismatch: If any embedding has the wrong dimension.
        """
        threshold = self.threshold if threshold is None else _validate_threshold(threshold)
        reference = self._check_reference(reference)

        results: List[MatchResult] = []
        skipped = 0

        for photo in photos:
            best = self.photo_distance(reference, photo)
            if best is None:
                skipped += 1
                continue

            distance, face_index = best
            if distance <= threshold:
                results.append(MatchResult.from_distance(photo, distance, face_index))
            else:
                logger.debug(
                    f"Photo {photo.id} rejected (distance={distance:.3f} > {threshold:.3f})"
                )

        # list.sort is stable, also with reverse=True
        results.sort(key=lambda result: result.score, reverse=True)

        logger.debug(
            f"Matched {len(results)}/{len(photos)} photos "
            f"(threshold={threshold:.3f}, skipped without faces={skipped})"
        )

        return results

    def __repr__(self) -> str:
        """String representation of matcher."""
        return f"PhotoMatcher(threshold={self.threshold}, dimension={self.dimension})"


def find_matches(
    reference: np.ndarray,
    photos: Sequence[Photo],
    threshold: float = DEFAULT_THRESHOLD,
) -> List[MatchResult]:
    """Find and rank matching photos with a one-off :class:`PhotoMatcher`.

    The dimension is taken from the reference embedding itself.
    """
    dimension = int(np.asarray(reference).reshape(-1).shape[0])
    return PhotoMatcher(threshold=threshold, dimension=dimension).find_matches(reference, photos)
