"""High-level services for the photo finder pipeline.

This package contains the services that orchestrate face extraction
and matching.
"""

from photo_finder.services.analysis import (
    AnalysisProgress,
    AnalysisReport,
    AnalysisService,
    AnalysisStatus,
)
from photo_finder.services.extraction import PipelineFaceExtractor

__all__ = [
    "AnalysisService",
    "AnalysisReport",
    "AnalysisStatus",
    "AnalysisProgress",
    "PipelineFaceExtractor",
]
