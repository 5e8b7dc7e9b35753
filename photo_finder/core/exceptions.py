"""Exception types raised by the photo finder pipeline."""

from __future__ import annotations


class PhotoFinderError(Exception):
    """Base class for all photo finder errors."""


class NoFaceFound(PhotoFinderError):
    """The reference image contains no detectable face.

    Recoverable: the user should try another reference photo.
    """


class DimensionMismatch(PhotoFinderError, ValueError):
    """Two embeddings of different dimensionality were compared.

    This is a caller bug, not a runtime condition, and is never isolated.
    """


class ExtractionError(PhotoFinderError):
    """Face extraction failed for an image (corrupt input or model failure)."""


class ImageDecodeError(PhotoFinderError):
    """An image handle could not be decoded into pixels."""


class AnalysisCancelled(PhotoFinderError):
    """An analysis run was aborted before it completed."""
