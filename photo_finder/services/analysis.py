"""Analysis service: find the photos of one person in a batch of photos.

An analysis run extracts the reference face, extracts faces from every
photo, and ranks the photos against the reference:

1. reference image -> faces -> largest face embedding
2. each photo -> faces (failures isolated: the photo counts as faceless)
3. all photos analyzed -> match and rank once

A run is atomic. It returns a complete report or raises; a cancelled run
never exposes partial results.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Tuple

import numpy as np

from photo_finder.core.exceptions import AnalysisCancelled, ExtractionError, ImageDecodeError
from photo_finder.core.interfaces import EMBEDDING_DIM, DetectedFace, FaceExtractor, MatchResult, Photo
from photo_finder.core.logging_config import get_logger
from photo_finder.core.utils import load_image
from photo_finder.matching.matcher import DEFAULT_THRESHOLD, PhotoMatcher
from photo_finder.matching.reference import select_reference

logger = get_logger(__name__)


class AnalysisStatus(str, Enum):
    """Outcome of an analysis run."""

    MATCHED = "matched"
    NO_MATCH = "no_match"
    NO_FACES_IN_CORPUS = "no_faces_in_corpus"


@dataclass(frozen=True)
class AnalysisProgress:
    """Number of photos analyzed so far out of the batch total."""

    current: int
    total: int


ProgressCallback = Callable[[AnalysisProgress], None]


@dataclass(frozen=True, eq=False)
class AnalysisReport:
    """Result of a completed analysis run.

    Attributes:
        status: MATCHED, NO_MATCH (faces found, none similar enough) or
                NO_FACES_IN_CORPUS (no face in any photo)
        matches: Matching photos, best first
        photos: All photos with their extracted faces, in input order
        total_faces: Number of faces found across all photos
        threshold: Distance threshold used for matching
        failed_photo_ids: Photos whose extraction failed (counted as faceless)
    """

    status: AnalysisStatus
    matches: Tuple[MatchResult, ...]
    photos: Tuple[Photo, ...]
    total_faces: int
    threshold: float
    failed_photo_ids: Tuple[str, ...] = ()

    def __repr__(self) -> str:
        """String representation of report."""
        return (
            f"AnalysisReport(status={self.status.value}, matches={len(self.matches)}, "
            f"photos={len(self.photos)}, faces={self.total_faces}, "
            f"failed={len(self.failed_photo_ids)})"
        )


class AnalysisService:
    """Service that runs complete photo searches.

    Attributes:
        extractor: Face extractor used for the reference and every photo
        matcher: Photo matcher holding the default threshold
        max_workers: Number of photos analyzed in parallel (1 = sequential)

    Example:
        >>> service = AnalysisService(extractor=context.extractor, threshold=0.6)
        >>> photos = [Photo.from_path(p) for p in sorted(Path("race").glob("*.jpg"))]
        >>> report = service.run("me.jpg", photos)
        >>> for match in report.matches:
        ...     print(f"{match.photo.name}: {match.score:.2f}")
    """

    def __init__(
        self,
        extractor: FaceExtractor,
        threshold: float = DEFAULT_THRESHOLD,
        max_workers: int = 1,
        dimension: int = EMBEDDING_DIM,
    ):
        """Initialize analysis service.

        Args:
            extractor: Face extractor instance
            threshold: Default distance threshold for matching
            max_workers: Number of photos analyzed in parallel
            dimension: Expected embedding dimension

        Raises:
            ValueError: If threshold or max_workers is out of range.
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")

        self.extractor = extractor
        self.matcher = PhotoMatcher(threshold=threshold, dimension=dimension)
        self.max_workers = max_workers

        logger.info(
            f"Initialized AnalysisService with threshold={self.matcher.threshold:.2f}, "
            f"max_workers={max_workers}"
        )

    @property
    def threshold(self) -> float:
        """Default distance threshold."""
        return self.matcher.threshold

    def extract_faces(self, image: Any) -> List[DetectedFace]:
        """Decode an image handle and extract its faces.

        Raises:
            ImageDecodeError: If the image cannot be decoded.
            ExtractionError: If face extraction fails.
        """
        return self.extractor.extract(load_image(image))

    def extract_reference(self, image: Any) -> np.ndarray:
        """Extract the reference embedding from the reference image.

        Args:
            image: Reference image handle

        Returns:
            Embedding of the largest face in the image.

        Raises:
            NoFaceFound: If the image contains no face.
            ImageDecodeError: If the image cannot be decoded.
            ExtractionError: If face extraction fails.
        """
        faces = self.extract_faces(image)
        logger.info(f"Reference image: {len(faces)} face(s) detected")
        return select_reference(faces)

    def analyze_photo(
        self,
        photo: Photo,
        cancel_event: Optional[threading.Event] = None,
    ) -> Tuple[Photo, bool]:
        """Extract the faces of a single photo.

        Extraction and decode failures are isolated: the photo is returned
        with zero faces and flagged as failed.

        Returns:
            Tuple of (analyzed photo, failed). Photos that were already
            analyzed are returned unchanged.

        Raises:
            AnalysisCancelled: If ``cancel_event`` is set.
        """
        if cancel_event is not None and cancel_event.is_set():
            raise AnalysisCancelled("Analysis cancelled")

        if photo.analyzed:
            return photo, False

        try:
            faces = self.extract_faces(photo.image)
        except (ExtractionError, ImageDecodeError) as e:
            logger.warning(f"Failed to analyze photo {photo.name}: {e}. Treating as no faces.")
            return photo.with_faces([]), True

        logger.debug(f"Photo {photo.name}: {len(faces)} face(s)")
        return photo.with_faces(faces), False

    def analyze_photos(
        self,
        photos: Sequence[Photo],
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Tuple[List[Photo], List[str]]:
        """Extract faces for every photo.

        Args:
            photos: Photos to analyze
            progress: Called with an AnalysisProgress after each photo
            cancel_event: Aborts the batch when set

        Returns:
            Tuple of (analyzed photos in input order, ids of failed photos).

        Raises:
            AnalysisCancelled: If ``cancel_event`` is set before the batch ends.
        """
        total = len(photos)

        if self.max_workers == 1 or total <= 1:
            outcomes = []
            for current, photo in enumerate(photos, 1):
                outcomes.append(self.analyze_photo(photo, cancel_event))
                if progress is not None:
                    progress(AnalysisProgress(current=current, total=total))
        else:
            outcomes = self._analyze_parallel(photos, progress, cancel_event)

        analyzed = [photo for photo, _ in outcomes]
        failed = [photo.id for photo, is_failed in outcomes if is_failed]
        return analyzed, failed

    def _analyze_parallel(
        self,
        photos: Sequence[Photo],
        progress: Optional[ProgressCallback],
        cancel_event: Optional[threading.Event],
    ) -> List[Tuple[Photo, bool]]:
        """Analyze photos on a thread pool, keeping input order."""
        total = len(photos)

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [pool.submit(self.analyze_photo, photo, cancel_event) for photo in photos]

            try:
                for current, future in enumerate(as_completed(futures), 1):
                    future.result()
                    if progress is not None:
                        progress(AnalysisProgress(current=current, total=total))
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

            return [future.result() for future in futures]

    def match(
        self,
        reference: np.ndarray,
        photos: Sequence[Photo],
        threshold: Optional[float] = None,
        failed_photo_ids: Sequence[str] = (),
    ) -> AnalysisReport:
        """Rank analyzed photos against the reference and build the report.

        Args:
            reference: Reference embedding
            photos: Analyzed photos
            threshold: Overrides the service threshold for this run
            failed_photo_ids: Ids of photos whose extraction failed

        Returns:
            AnalysisReport for the run.
        """
        threshold = self.threshold if threshold is None else threshold
        if threshold < 0:
            raise ValueError(f"Threshold must be >= 0, got {threshold}")

        total_faces = sum(len(photo.faces) for photo in photos)

        if total_faces == 0:
            matches: List[MatchResult] = []
            status = AnalysisStatus.NO_FACES_IN_CORPUS
        else:
            matches = self.matcher.find_matches(reference, photos, threshold)
            status = AnalysisStatus.MATCHED if matches else AnalysisStatus.NO_MATCH

        report = AnalysisReport(
            status=status,
            matches=tuple(matches),
            photos=tuple(photos),
            total_faces=total_faces,
            threshold=threshold,
            failed_photo_ids=tuple(failed_photo_ids),
        )

        logger.info(
            f"Analysis finished: {status.value}, {len(matches)} match(es) in "
            f"{len(photos)} photos ({total_faces} faces, "
            f"{len(failed_photo_ids)} failed)"
        )
        return report

    def run(
        self,
        reference_image: Any,
        photos: Sequence[Photo],
        threshold: Optional[float] = None,
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> AnalysisReport:
        """Run a complete analysis.

        Args:
            reference_image: Image handle of the reference photo
            photos: Photos to search through
            threshold: Overrides the service threshold for this run
            progress: Called with an AnalysisProgress after each photo
            cancel_event: Aborts the run when set

        Returns:
            AnalysisReport for the run.

        Raises:
            NoFaceFound: If the reference image contains no face.
            ExtractionError: If the reference image cannot be processed.
            ImageDecodeError: If the reference image cannot be decoded.
            AnalysisCancelled: If the run is cancelled.
        """
        reference = self.extract_reference(reference_image)
        analyzed, failed = self.analyze_photos(photos, progress, cancel_event)

        if cancel_event is not None and cancel_event.is_set():
            raise AnalysisCancelled("Analysis cancelled")

        return self.match(reference, analyzed, threshold, failed)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"AnalysisService(threshold={self.threshold:.2f}, "
            f"max_workers={self.max_workers}, extractor={self.extractor})"
        )
