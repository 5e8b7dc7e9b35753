"""Face matching and ranking.

Components:
- euclidean_distance: Dissimilarity between two embeddings
- select_reference: Canonical embedding of the reference image
- PhotoMatcher: Threshold and rank photos against the reference
- crop_face / FaceCropExporter: Padded crops of matched faces
"""

from photo_finder.matching.comparator import euclidean_distance, euclidean_distances
from photo_finder.matching.crop import FaceCropExporter, crop_face, padded_region
from photo_finder.matching.matcher import DEFAULT_THRESHOLD, PhotoMatcher, find_matches
from photo_finder.matching.reference import select_reference, select_reference_face

__all__ = [
    "euclidean_distance",
    "euclidean_distances",
    "select_reference",
    "select_reference_face",
    "PhotoMatcher",
    "find_matches",
    "DEFAULT_THRESHOLD",
    "crop_face",
    "padded_region",
    "FaceCropExporter",
]
