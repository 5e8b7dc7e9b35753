#!/usr/bin/env python3
"""List the faces detected in an image with their soft attributes.

With the enriched pipeline every face shows its dominant expression,
estimated age and gender. The result can be saved with boxes and labels
drawn on the image.

Usage:
    python scripts/describe_faces.py --image group.jpg
    python scripts/describe_faces.py --image group.jpg --pipeline minimal --save out.jpg
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import cv2

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from photo_finder.backends import create_inference_context
from photo_finder.core.config import Config
from photo_finder.core.exceptions import ExtractionError, ImageDecodeError
from photo_finder.core.logging_config import setup_logging
from photo_finder.core.overlay import describe_face, draw_faces
from photo_finder.core.utils import load_image
from photo_finder.matching.reference import select_reference_face

logger = setup_logging(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Describe the faces detected in an image",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--image",
        type=str,
        required=True,
        help="Path to input image file",
    )

    parser.add_argument(
        "--pipeline",
        type=str,
        choices=["minimal", "enriched"],
        default="enriched",
        help="Extraction pipeline",
    )

    parser.add_argument(
        "--save",
        type=str,
        default=None,
        help="Path to save the image with faces drawn",
    )

    return parser.parse_args()


def main() -> int:
    """Main function."""
    args = parse_args()

    try:
        frame = load_image(args.image)
    except ImageDecodeError as e:
        print(f"Error: {e}")
        return 1

    h, w = frame.shape[:2]
    print(f"Image loaded: {w}x{h} pixels")

    config = Config.from_env()

    with create_inference_context(config, pipeline=args.pipeline) as context:
        try:
            faces = context.extractor.extract(frame)
        except ExtractionError as e:
            logger.error(f"Face extraction failed: {e}")
            print(f"Error: {e}")
            return 1

    print(f"Detected {len(faces)} face(s)")
    if not faces:
        return 0

    reference_index = faces.index(select_reference_face(faces))

    for i, face in enumerate(faces):
        marker = " (largest, used as reference)" if i == reference_index else ""
        print(f"Face {i + 1}{marker}:")
        print(f"  Box:        {face.box}")
        print(f"  Attributes: {describe_face(face)}")

    if args.save:
        draw_faces(frame, faces, highlight=reference_index)
        save_path = Path(args.save)
        cv2.imwrite(str(save_path), frame)
        print(f"Image saved: {save_path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
