"""Find the photos of one person in a batch of event photos.

Given a single reference photo, faces are extracted from every photo,
compared against the reference face and the matching photos are ranked
by similarity.

USAGE:
    from photo_finder import AnalysisService, Photo, create_inference_context

    with create_inference_context() as context:
        service = AnalysisService(context.extractor, threshold=0.6)
        report = service.run("me.jpg", [Photo.from_path(p) for p in paths])
"""

from photo_finder.backends import InferenceContext, create_inference_context
from photo_finder.core import (
    BBox,
    Config,
    DetectedFace,
    MatchResult,
    NoFaceFound,
    Photo,
)
from photo_finder.matching import (
    FaceCropExporter,
    PhotoMatcher,
    crop_face,
    euclidean_distance,
    find_matches,
    select_reference,
)
from photo_finder.services import AnalysisReport, AnalysisService, AnalysisStatus

__version__ = "0.1.0"
__all__ = [
    "AnalysisReport",
    "AnalysisService",
    "AnalysisStatus",
    "BBox",
    "Config",
    "DetectedFace",
    "FaceCropExporter",
    "InferenceContext",
    "MatchResult",
    "NoFaceFound",
    "Photo",
    "PhotoMatcher",
    "create_inference_context",
    "crop_face",
    "euclidean_distance",
    "find_matches",
    "select_reference",
]
