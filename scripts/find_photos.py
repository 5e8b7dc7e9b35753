#!/usr/bin/env python3
"""Find the photos of one person in a folder of event photos.

This script extracts the reference face from a single photo, analyzes every
photo in a folder and prints the matching photos ranked by similarity.
Optionally exports a padded crop of the matched face from each photo.

Usage:
    python scripts/find_photos.py --reference me.jpg --photos race_photos/
    python scripts/find_photos.py --reference me.jpg --photos race_photos/ \\
        --threshold 0.5 --export-dir data/matches --workers 4
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from photo_finder.backends import create_inference_context
from photo_finder.core.config import Config
from photo_finder.core.exceptions import ExtractionError, ImageDecodeError, NoFaceFound
from photo_finder.core.interfaces import Photo
from photo_finder.core.logging_config import setup_logging
from photo_finder.matching.crop import FaceCropExporter
from photo_finder.services.analysis import AnalysisProgress, AnalysisService, AnalysisStatus

logger = setup_logging(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".webp"}


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Find the photos of one person using a reference photo",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--reference",
        type=str,
        required=True,
        help="Reference photo with the person's face",
    )

    parser.add_argument(
        "--photos",
        type=str,
        required=True,
        help="Directory of photos to search",
    )

    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Maximum face distance (lower=stricter, overrides .env THRESH value)",
    )

    parser.add_argument(
        "--pipeline",
        type=str,
        choices=["minimal", "enriched"],
        default=None,
        help="Extraction pipeline (overrides .env PIPELINE value)",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Photos analyzed in parallel (overrides .env MAX_WORKERS value)",
    )

    parser.add_argument(
        "--export-dir",
        type=str,
        default=None,
        help="Directory to save crops of the matched faces",
    )

    return parser.parse_args()


def print_section(title: str) -> None:
    """Print a section divider."""
    print()
    print("=" * 70)
    print(f"  {title}")
    print("=" * 70)


def list_photos(directory: Path) -> List[Path]:
    """List image files in a directory, sorted by name."""
    return sorted(
        path for path in directory.iterdir()
        if path.is_file() and path.suffix.lower() in IMAGE_EXTENSIONS
    )


def print_progress(progress: AnalysisProgress) -> None:
    """Print analysis progress on a single line."""
    end = "\n" if progress.current == progress.total else ""
    print(f"\r  Analyzing photos: {progress.current}/{progress.total}", end=end, flush=True)


def main() -> int:
    """Main function."""
    args = parse_args()

    print_section("Photo Finder")

    reference_path = Path(args.reference)
    photos_dir = Path(args.photos)

    if not reference_path.is_file():
        print(f"Error: Reference photo not found: {reference_path}")
        return 1

    if not photos_dir.is_dir():
        print(f"Error: Photo directory not found: {photos_dir}")
        return 1

    paths = list_photos(photos_dir)
    if not paths:
        print(f"Error: No photos found in {photos_dir}")
        return 1

    config = Config.from_env()
    threshold = args.threshold if args.threshold is not None else config.thresh
    workers = args.workers if args.workers is not None else config.max_workers

    print(f"Reference:     {reference_path}")
    print(f"Photos:        {len(paths)} in {photos_dir}")
    print(f"Threshold:     {threshold:.2f}")
    print(f"Workers:       {workers}")

    print_section("Step 1: Loading Models")

    with create_inference_context(config, pipeline=args.pipeline) as context:
        print(f"Pipeline loaded: {context.pipeline}")

        service = AnalysisService(
            extractor=context.extractor,
            threshold=threshold,
            max_workers=workers,
        )

        print_section("Step 2: Analyzing Photos")

        photos = [Photo.from_path(path) for path in paths]

        try:
            report = service.run(reference_path, photos, progress=print_progress)
        except NoFaceFound:
            print("No face found in the reference photo.")
            print("Please use a photo where your face is clearly visible and facing the camera.")
            return 2
        except (ExtractionError, ImageDecodeError) as e:
            logger.error(f"Failed to process reference photo: {e}")
            print(f"Error: Could not process the reference photo: {e}")
            return 1

    print_section("Step 3: Results")

    if report.failed_photo_ids:
        print(f"{len(report.failed_photo_ids)} photo(s) could not be analyzed and were skipped.")

    if report.status is AnalysisStatus.NO_FACES_IN_CORPUS:
        print("No faces found in any of the photos. Please try other photos.")
        return 0

    if report.status is AnalysisStatus.NO_MATCH:
        print(f"Faces found ({report.total_faces}), but none matched the reference.")
        print("Try another reference photo or a higher --threshold.")
        return 0

    print(f"{len(report.matches)} matching photo(s):")
    print()
    for rank, match in enumerate(report.matches, 1):
        print(
            f"  {rank:3d}. {match.photo.name:40s} "
            f"score={match.score:.3f}  distance={match.distance:.3f}"
        )

    if args.export_dir:
        print_section("Step 4: Exporting Face Crops")
        exporter = FaceCropExporter(padding=config.crop_padding)
        saved = exporter.export_matches(report.matches, args.export_dir)
        print(f"Saved {len(saved)} crop(s) to {args.export_dir}")

    print()
    logger.info(f"Search complete: {len(report.matches)} matches")
    return 0


if __name__ == "__main__":
    sys.exit(main())
