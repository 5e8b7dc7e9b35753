"""Drawing utilities for visualizing detected faces.

This module draws face boxes and attribute labels on images for previews
and saved result images.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import cv2
import numpy as np

from photo_finder.core.interfaces import BBox, DetectedFace

# Color palette (BGR format for OpenCV)
COLOR_GREEN = (0, 255, 0)
COLOR_RED = (0, 0, 255)
COLOR_WHITE = (255, 255, 255)
COLOR_BLACK = (0, 0, 0)


def _corners(bbox: BBox) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    return (int(round(bbox.x)), int(round(bbox.y))), (int(round(bbox.x2)), int(round(bbox.y2)))


def draw_bbox(
    frame: np.ndarray,
    bbox: BBox,
    color: Tuple[int, int, int] = COLOR_GREEN,
    thickness: int = 2,
) -> None:
    """Draw bounding box on frame (in-place).

    Args:
        frame: Image to draw on (modified in-place)
        bbox: Bounding box to draw
        color: BGR color tuple (default: green)
        thickness: Line thickness in pixels
    """
    top_left, bottom_right = _corners(bbox)
    cv2.rectangle(frame, top_left, bottom_right, color, thickness)


def draw_text(
    frame: np.ndarray,
    text: str,
    position: Tuple[int, int],
    color: Tuple[int, int, int] = COLOR_WHITE,
    font_scale: float = 0.6,
    thickness: int = 2,
    bg_color: Optional[Tuple[int, int, int]] = None,
) -> None:
    """Draw text with optional background on frame (in-place).

    Args:
        frame: Image to draw on (modified in-place)
        text: Text string to draw
        position: (x, y) position for bottom-left corner of text
        color: Text color in BGR (default: white)
        font_scale: Font size scale factor
        thickness: Text thickness in pixels
        bg_color: Optional background color for text box (BGR)
    """
    font = cv2.FONT_HERSHEY_SIMPLEX
    x, y = position

    if bg_color is not None:
        (text_width, text_height), baseline = cv2.getTextSize(text, font, font_scale, thickness)
        cv2.rectangle(
            frame,
            (x, y - text_height - baseline),
            (x + text_width, y + baseline),
            bg_color,
            -1,  # Filled rectangle
        )

    cv2.putText(frame, text, (x, y), font, font_scale, color, thickness, cv2.LINE_AA)


def draw_label(
    frame: np.ndarray,
    bbox: BBox,
    text: str,
    bg_color: Tuple[int, int, int] = COLOR_GREEN,
    text_color: Tuple[int, int, int] = COLOR_WHITE,
    font_scale: float = 0.6,
    thickness: int = 2,
) -> None:
    """Draw label text above bounding box (in-place).

    The label moves below the box when there is no room above it.
    """
    (x, y1), (_, y2) = _corners(bbox)
    y = y1 - 10

    if y < 20:
        y = y2 + 20

    draw_text(
        frame,
        text,
        (x, y),
        color=text_color,
        font_scale=font_scale,
        thickness=thickness,
        bg_color=bg_color,
    )


def describe_face(face: DetectedFace) -> str:
    """Short label with the face's soft attributes.

    Example:
        >>> describe_face(face)
        'happy 92% | 31y | female'
    """
    parts = []

    dominant = face.dominant_expression
    if dominant is not None:
        name, probability = dominant
        parts.append(f"{name} {probability:.0%}")

    if face.age is not None:
        parts.append(f"{round(face.age)}y")

    if face.gender is not None:
        parts.append(face.gender.gender.value)

    return " | ".join(parts) if parts else "face"


def draw_faces(
    frame: np.ndarray,
    faces: Sequence[DetectedFace],
    color: Tuple[int, int, int] = COLOR_GREEN,
    highlight: Optional[int] = None,
) -> None:
    """Draw every face with its attribute label (in-place).

    Args:
        frame: Image to draw on (modified in-place)
        faces: Faces to draw, boxes in ``frame`` coordinates
        color: Box color
        highlight: Optional index of a face drawn in red (e.g. the match)
    """
    for i, face in enumerate(faces):
        face_color = COLOR_RED if i == highlight else color
        draw_bbox(frame, face.box, color=face_color)
        draw_label(frame, face.box, describe_face(face), bg_color=face_color)
