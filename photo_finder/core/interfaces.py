"""Core interfaces and data structures for the photo finder pipeline.

This module defines the value types passed between components (bounding
boxes, detected faces, photos, match results) and the Protocols that the
face extraction backends implement.

Matching code depends only on these abstractions, never on a concrete
detector or embedding model.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Protocol, Sequence, Tuple, runtime_checkable

import numpy as np

# Embedding size produced by dlib's ResNet face recognition model
EMBEDDING_DIM = 128

# Expression names recognized on DetectedFace.expressions
EXPRESSION_LABELS: Tuple[str, ...] = (
    "neutral",
    "happy",
    "sad",
    "angry",
    "fearful",
    "disgusted",
    "surprised",
)

# Allowed deviation of an expression distribution's sum from 1
EXPRESSION_SUM_TOLERANCE = 0.05


@dataclass(frozen=True)
class BBox:
    """Bounding box for a detected face.

    Coordinates are pixels of the source image.

    Attributes:
        x: Left edge x-coordinate
        y: Top edge y-coordinate
        width: Box width (> 0)
        height: Box height (> 0)
    """

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        """Validate box geometry."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"BBox width and height must be > 0, got {self.width}x{self.height}"
            )
        if self.x < 0 or self.y < 0:
            raise ValueError(
                f"BBox coordinates must be non-negative, got ({self.x}, {self.y})"
            )

    @classmethod
    def from_corners(cls, x1: float, y1: float, x2: float, y2: float) -> BBox:
        """Build a box from its top-left and bottom-right corners."""
        return cls(x=x1, y=y1, width=x2 - x1, height=y2 - y1)

    @classmethod
    def from_css(cls, location: Tuple[int, int, int, int]) -> BBox:
        """Build a box from a ``(top, right, bottom, left)`` tuple.

        This is the location format used by the face_recognition library.
        """
        top, right, bottom, left = location
        return cls.from_corners(left, top, right, bottom)

    def to_css(self) -> Tuple[int, int, int, int]:
        """Convert to an integer ``(top, right, bottom, left)`` tuple."""
        return (
            int(round(self.y)),
            int(round(self.x2)),
            int(round(self.y2)),
            int(round(self.x)),
        )

    @property
    def x2(self) -> float:
        """Right edge x-coordinate."""
        return self.x + self.width

    @property
    def y2(self) -> float:
        """Bottom edge y-coordinate."""
        return self.y + self.height

    @property
    def area(self) -> float:
        """Box area in square pixels."""
        return self.width * self.height

    @property
    def center(self) -> Tuple[float, float]:
        """Center point (x, y) of the box."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    def scale(self, factor: float) -> BBox:
        """Return the box mapped to an image resized by ``factor``.

        Args:
            factor: Resize factor (> 0). A box detected on an image that was
                downscaled by 0.5 maps back to the original with factor 2.0.

        Returns:
            New BBox in the target resolution.
        """
        if factor <= 0:
            raise ValueError(f"Scale factor must be > 0, got {factor}")
        return BBox(
            x=self.x * factor,
            y=self.y * factor,
            width=self.width * factor,
            height=self.height * factor,
        )

    def __repr__(self) -> str:
        """String representation of bounding box."""
        return (
            f"BBox(x={self.x:g}, y={self.y:g}, "
            f"width={self.width:g}, height={self.height:g})"
        )


class Gender(str, Enum):
    """Estimated gender of a detected face."""

    MALE = "male"
    FEMALE = "female"


@dataclass(frozen=True)
class GenderEstimate:
    """Gender estimate with the model's probability for it."""

    gender: Gender
    probability: float

    def __post_init__(self) -> None:
        if not 0.0 <= self.probability <= 1.0:
            raise ValueError(
                f"Gender probability must be in [0, 1], got {self.probability}"
            )


def _freeze_expressions(
    expressions: Optional[Mapping[str, float]],
) -> Optional[Mapping[str, float]]:
    """Validate an expression distribution and return a read-only copy."""
    if expressions is None:
        return None

    unknown = set(expressions) - set(EXPRESSION_LABELS)
    if unknown:
        raise ValueError(
            f"Unknown expression names {sorted(unknown)}, "
            f"expected a subset of {list(EXPRESSION_LABELS)}"
        )

    frozen = {}
    for name, probability in expressions.items():
        probability = float(probability)
        if not 0.0 <= probability <= 1.0:
            raise ValueError(
                f"Expression probability for '{name}' must be in [0, 1], "
                f"got {probability}"
            )
        frozen[name] = probability

    total = sum(frozen.values())
    if abs(total - 1.0) > EXPRESSION_SUM_TOLERANCE:
        raise ValueError(
            f"Expression probabilities must sum to 1 "
            f"(+/- {EXPRESSION_SUM_TOLERANCE}), got {total:.3f}"
        )

    return MappingProxyType(frozen)


@dataclass(frozen=True)
class FaceAttributes:
    """Soft attributes estimated for a face by the enriched pipeline.

    Every field is optional: an estimator fills in only what it computes.
    """

    expressions: Optional[Mapping[str, float]] = None
    age: Optional[float] = None
    gender: Optional[GenderEstimate] = None


@dataclass(frozen=True, eq=False)
class DetectedFace:
    """A face found in an image.

    Created once by the face extraction step and never mutated afterwards.

    Attributes:
        embedding: Identity embedding, shape [D] (read-only float64 array)
        box: Face bounding box in source image pixels
        expressions: Optional probabilities for the names in EXPRESSION_LABELS,
            summing to 1 within EXPRESSION_SUM_TOLERANCE
        age: Optional estimated age in years
        gender: Optional gender estimate

    Example:
        >>> face = DetectedFace(embedding=np.zeros(128), box=BBox(10, 10, 50, 60))
        >>> face.box.area
        3000
    """

    embedding: np.ndarray
    box: BBox
    expressions: Optional[Mapping[str, float]] = None
    age: Optional[float] = None
    gender: Optional[GenderEstimate] = None

    def __post_init__(self) -> None:
        """Freeze the embedding and validate the optional attributes."""
        embedding = np.array(self.embedding, dtype=np.float64)
        if embedding.ndim != 1 or embedding.size == 0:
            raise ValueError(
                f"Embedding must be a non-empty 1-D vector, got shape {embedding.shape}"
            )
        embedding.setflags(write=False)
        object.__setattr__(self, "embedding", embedding)
        object.__setattr__(self, "expressions", _freeze_expressions(self.expressions))

        if self.age is not None and self.age < 0:
            raise ValueError(f"Age must be >= 0, got {self.age}")

    @classmethod
    def with_attributes(
        cls,
        embedding: np.ndarray,
        box: BBox,
        attributes: Optional[FaceAttributes] = None,
    ) -> DetectedFace:
        """Create a face, copying soft attributes when they are available."""
        if attributes is None:
            return cls(embedding=embedding, box=box)
        return cls(
            embedding=embedding,
            box=box,
            expressions=attributes.expressions,
            age=attributes.age,
            gender=attributes.gender,
        )

    @property
    def dimension(self) -> int:
        """Embedding dimensionality."""
        return int(self.embedding.shape[0])

    @property
    def has_attributes(self) -> bool:
        """True if any soft attribute was estimated for this face."""
        return (
            self.expressions is not None
            or self.age is not None
            or self.gender is not None
        )

    @property
    def dominant_expression(self) -> Optional[Tuple[str, float]]:
        """Most probable expression as ``(name, probability)``.

        Ties go to the expression listed first. Returns None when the face
        carries no expression distribution.
        """
        if not self.expressions:
            return None
        return max(self.expressions.items(), key=lambda item: item[1])

    def __repr__(self) -> str:
        """String representation of detected face."""
        return f"DetectedFace(box={self.box}, dim={self.dimension})"


@dataclass(frozen=True, eq=False)
class Photo:
    """A photo to search through.

    Attributes:
        id: Opaque unique identifier
        image: Image handle - decoded BGR array, file path, or encoded bytes
        faces: Faces detected in the photo (empty until analyzed)
        analyzed: True once face extraction has run for this photo
    """

    id: str
    image: Any
    faces: Tuple[DetectedFace, ...] = field(default_factory=tuple)
    analyzed: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "faces", tuple(self.faces))

    @classmethod
    def from_path(cls, path: str | Path) -> Photo:
        """Create an unanalyzed photo for an image file."""
        return cls(id=uuid.uuid4().hex, image=Path(path))

    @property
    def name(self) -> str:
        """Human-readable name: the file name when backed by a path."""
        if isinstance(self.image, (str, Path)):
            return Path(self.image).name
        return self.id

    def with_faces(self, faces: Sequence[DetectedFace]) -> Photo:
        """Return an analyzed copy of this photo carrying ``faces``.

        Raises:
            RuntimeError: If the photo has already been analyzed.
        """
        if self.analyzed:
            raise RuntimeError(f"Photo {self.id} has already been analyzed")
        return replace(self, faces=tuple(faces), analyzed=True)

    def __repr__(self) -> str:
        """String representation of photo."""
        state = f"faces={len(self.faces)}" if self.analyzed else "not analyzed"
        return f"Photo(id='{self.id}', {state})"


@dataclass(frozen=True, eq=False)
class MatchResult:
    """A photo admitted by the matcher.

    Attributes:
        photo: The matched photo
        distance: Representative (minimum) distance to the reference
        score: Similarity in [0, 1], ``max(0, 1 - distance)``
        face_index: Index into ``photo.faces`` of the closest face
    """

    photo: Photo
    distance: float
    score: float
    face_index: int = 0

    @classmethod
    def from_distance(cls, photo: Photo, distance: float, face_index: int = 0) -> MatchResult:
        """Create a result, deriving the score from the distance."""
        return cls(
            photo=photo,
            distance=distance,
            score=max(0.0, 1.0 - distance),
            face_index=face_index,
        )

    @property
    def face(self) -> DetectedFace:
        """The face in the photo that matched the reference."""
        return self.photo.faces[self.face_index]

    def __repr__(self) -> str:
        """String representation of match result."""
        return (
            f"MatchResult(photo='{self.photo.id}', "
            f"distance={self.distance:.3f}, score={self.score:.3f})"
        )


@runtime_checkable
class FaceDetector(Protocol):
    """Protocol for face detection models.

    A FaceDetector takes an image and returns the bounding boxes of the
    faces it finds, in that image's pixel coordinates.
    """

    def detect(self, frame_bgr: np.ndarray) -> List[BBox]:
        """Detect faces in an image.

        Args:
            frame_bgr: Input image in BGR format (OpenCV convention), shape [H, W, 3]

        Returns:
            List of bounding boxes, one per detected face. May be empty.
        """
        ...


@runtime_checkable
class FaceEmbedder(Protocol):
    """Protocol for face embedding extraction."""

    def embed_faces(self, frame_bgr: np.ndarray, boxes: Sequence[BBox]) -> np.ndarray:
        """Compute one embedding per face location.

        Args:
            frame_bgr: Image the boxes were detected on, BGR [H, W, 3]
            boxes: Face locations in that image

        Returns:
            Embeddings array, shape [len(boxes), D].
        """
        ...


@runtime_checkable
class AttributeEstimator(Protocol):
    """Protocol for soft attribute estimation (expression, age, gender)."""

    def estimate(self, frame_bgr: np.ndarray, box: BBox) -> FaceAttributes:
        """Estimate soft attributes for the face at ``box``."""
        ...


@runtime_checkable
class FaceExtractor(Protocol):
    """Protocol for the face extraction boundary.

    Matching code never depends on which detector or model sits behind
    this interface, only on the shape of the returned faces.
    """

    def extract(self, image: np.ndarray) -> List[DetectedFace]:
        """Detect faces and compute their embeddings.

        Args:
            image: Decoded BGR image, shape [H, W, 3]

        Returns:
            Detected faces in detection order. May be empty.

        Raises:
            ExtractionError: If the image cannot be processed.
        """
        ...
