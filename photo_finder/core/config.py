"""Configuration management for the photo finder pipeline.

This module loads configuration from environment variables (.env file) and
provides a Config class for accessing application settings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

PIPELINES = ("minimal", "enriched")
DETECTOR_MODELS = ("hog", "cnn")
EMBEDDER_MODELS = ("large", "small")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Application configuration loaded from environment variables.

    Attributes:
        thresh: Maximum embedding distance accepted as the same person
        crop_padding: Fraction of box width/height added around exported crops
        pipeline: Face extraction variant ("minimal" or "enriched")
        detector_model: dlib detector ("hog" or "cnn")
        embedder_model: dlib landmark model used for encoding ("large" or "small")
        upsample: Number of times to upsample images before detection
        num_jitters: Number of re-samples when computing an embedding
        max_image_size: Longest side images are downscaled to before
            detection (0 = keep original size)
        max_workers: Number of photos analyzed in parallel
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        output_dir: Default directory for exported face crops
        log_file: Optional file every package logger also writes to
    """

    thresh: float = 0.6
    crop_padding: float = 0.2
    pipeline: str = "minimal"
    detector_model: str = "hog"
    embedder_model: str = "large"
    upsample: int = 1
    num_jitters: int = 1
    max_image_size: int = 800
    max_workers: int = 1
    log_level: str = "INFO"
    output_dir: Path = Path("data") / "matches"
    log_file: Optional[Path] = None

    def __post_init__(self) -> None:
        """Validate settings."""
        if self.thresh < 0:
            raise ValueError(f"THRESH must be >= 0, got {self.thresh}")

        if self.crop_padding < 0:
            raise ValueError(f"CROP_PADDING must be >= 0, got {self.crop_padding}")

        if self.pipeline not in PIPELINES:
            raise ValueError(
                f"PIPELINE must be one of {list(PIPELINES)}, got {self.pipeline}"
            )

        if self.detector_model not in DETECTOR_MODELS:
            raise ValueError(
                f"DETECTOR_MODEL must be one of {list(DETECTOR_MODELS)}, "
                f"got {self.detector_model}"
            )

        if self.embedder_model not in EMBEDDER_MODELS:
            raise ValueError(
                f"EMBEDDER_MODEL must be one of {list(EMBEDDER_MODELS)}, "
                f"got {self.embedder_model}"
            )

        if self.upsample < 0:
            raise ValueError(f"UPSAMPLE must be >= 0, got {self.upsample}")

        if self.num_jitters < 1:
            raise ValueError(f"NUM_JITTERS must be >= 1, got {self.num_jitters}")

        if self.max_image_size < 0:
            raise ValueError(f"MAX_IMAGE_SIZE must be >= 0, got {self.max_image_size}")

        if self.max_workers < 1:
            raise ValueError(f"MAX_WORKERS must be >= 1, got {self.max_workers}")

        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"LOG_LEVEL must be one of {list(LOG_LEVELS)}, got {self.log_level}"
            )

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables.

        Returns:
            Config instance with values from environment or defaults.

        Raises:
            ValueError: If environment variables are invalid.
        """
        # Get project root (parent of photo_finder/)
        project_root = Path(__file__).resolve().parent.parent.parent

        return cls(
            thresh=float(os.getenv("THRESH", "0.6")),
            crop_padding=float(os.getenv("CROP_PADDING", "0.2")),
            pipeline=os.getenv("PIPELINE", "minimal").lower(),
            detector_model=os.getenv("DETECTOR_MODEL", "hog").lower(),
            embedder_model=os.getenv("EMBEDDER_MODEL", "large").lower(),
            upsample=int(os.getenv("UPSAMPLE", "1")),
            num_jitters=int(os.getenv("NUM_JITTERS", "1")),
            max_image_size=int(os.getenv("MAX_IMAGE_SIZE", "800")),
            max_workers=int(os.getenv("MAX_WORKERS", "1")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            output_dir=Path(os.getenv("OUTPUT_DIR", str(project_root / "data" / "matches"))),
            log_file=Path(os.environ["LOG_FILE"]) if os.getenv("LOG_FILE") else None,
        )

    def __repr__(self) -> str:
        """Return string representation of config."""
        return (
            f"Config(\n"
            f"  Pipeline: {self.pipeline},\n"
            f"  Threshold: {self.thresh},\n"
            f"  Crop Padding: {self.crop_padding},\n"
            f"  Detector: {self.detector_model} (upsample={self.upsample}),\n"
            f"  Embedder: {self.embedder_model} (jitters={self.num_jitters}),\n"
            f"  Max Image Size: {self.max_image_size},\n"
            f"  Workers: {self.max_workers},\n"
            f"  Log Level: {self.log_level},\n"
            f"  Log File: {self.log_file}\n"
            f")"
        )
