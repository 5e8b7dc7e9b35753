"""Euclidean distance between face embeddings.

Lower distance means more similar faces. For dlib embeddings the same person
typically scores well under 0.6 and different people above it.
"""

from __future__ import annotations

import numpy as np

from photo_finder.core.exceptions import DimensionMismatch


def _as_vector(embedding: np.ndarray, name: str) -> np.ndarray:
    vector = np.asarray(embedding, dtype=np.float64)
    if vector.ndim != 1:
        raise DimensionMismatch(
            f"Expected 1-D embedding for '{name}', got shape {vector.shape}"
        )
    return vector


def euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Compute the Euclidean distance between two embeddings.

    Args:
        a: First embedding, shape [D]
        b: Second embedding, shape [D]

    Returns:
        ``sqrt(sum((a_i - b_i) ** 2))``. Symmetric, and zero exactly when
        the embeddings are equal element-wise.

    Raises:
        DimensionMismatch: If the embeddings differ in dimensionality.

    Example:
        >>> euclidean_distance(np.zeros(128), np.zeros(128))
        0.0
    """
    a = _as_vector(a, "a")
    b = _as_vector(b, "b")

    if a.shape != b.shape:
        raise DimensionMismatch(
            f"Cannot compare embeddings of dimension {a.shape[0]} and {b.shape[0]}"
        )

    return float(np.sqrt(np.sum((a - b) ** 2)))


def euclidean_distances(reference: np.ndarray, embeddings: np.ndarray) -> np.ndarray:
    """Compute the distance from one reference to many embeddings.

    Uses the same arithmetic as :func:`euclidean_distance`, so each entry
    equals ``euclidean_distance(reference, embeddings[i])`` exactly.

    Args:
        reference: Reference embedding, shape [D]
        embeddings: Embeddings to compare against, shape [N, D]

    Returns:
        Distances, shape [N].

    Raises:
        DimensionMismatch: If any row differs in dimensionality from the reference.
    """
    reference = _as_vector(reference, "reference")
    embeddings = np.asarray(embeddings, dtype=np.float64)

    if embeddings.ndim == 1:
        embeddings = embeddings.reshape(1, -1)

    if embeddings.ndim != 2 or embeddings.shape[1] != reference.shape[0]:
        raise DimensionMismatch(
            f"Expected embeddings shape [N, {reference.shape[0]}], got {embeddings.shape}"
        )

    return np.sqrt(np.sum((embeddings - reference) ** 2, axis=1))
