"""Selection of the reference face used as the search query."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from photo_finder.core.exceptions import NoFaceFound
from photo_finder.core.interfaces import DetectedFace
from photo_finder.core.logging_config import get_logger

logger = get_logger(__name__)


def select_reference_face(faces: Sequence[DetectedFace]) -> DetectedFace:
    """Pick the face that represents the person being searched for.

    A reference photo is expected to be a portrait, so the largest face wins.
    Equal areas are resolved in favour of the face detected first.

    Args:
        faces: All faces detected in the reference image, in detection order

    Returns:
        The selected face.

    Raises:
        NoFaceFound: If ``faces`` is empty.
    """
    if not faces:
        raise NoFaceFound("No face found in the reference image")

    # max() keeps the first of several equal keys
    selected = max(faces, key=lambda face: face.box.area)

    if len(faces) > 1:
        logger.debug(
            f"Reference image has {len(faces)} faces, "
            f"using the largest: {selected.box}"
        )

    return selected


def select_reference(faces: Sequence[DetectedFace]) -> np.ndarray:
    """Return the embedding of the face chosen by :func:`select_reference_face`.

    Raises:
        NoFaceFound: If ``faces`` is empty.
    """
    return select_reference_face(faces).embedding
