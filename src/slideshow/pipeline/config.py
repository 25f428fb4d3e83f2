"""
Pipeline Configuration
======================

Single responsibility: Configure the slideshow pipeline with validation.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from slideshow.core.exceptions import ValidationError
from slideshow.core.normalizer import DEFAULT_JPEG_QUALITY
from slideshow.encoding.ffmpeg import DEFAULT_VIDEO_CODEC, SECONDS_PER_IMAGE
from slideshow.encoding.filters import DEFAULT_PIXEL_FORMAT
from slideshow.utils.parallel import get_optimal_workers

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class SlideshowConfig:
    """
    Configuration for the slideshow pipeline.

    This dataclass encapsulates all settings of one pipeline run, with
    validation in __post_init__ to catch errors before any file is touched.

    Attributes:
        work_dir: Directory for the numbered frames (default: first image's directory)
        seconds_per_image: Display time of each image
        video_codec: ffmpeg video encoder
        pixel_format: Output pixel format
        jpeg_quality: Quality for images re-encoded to JPEG (1-95)
        max_workers: Threads for metadata extraction and normalization
        remove_sources: Delete originals once re-encoded to JPEG
        ffmpeg_path: ffmpeg executable (default: auto-detect)
        encoder_timeout: Optional limit in seconds for the ffmpeg run
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional session log written at DEBUG level

    Example:
        >>> config = SlideshowConfig(work_dir=Path("tmp/job-1"), jpeg_quality=90)
        >>> config.seconds_per_image
        3
    """

    # Working directory
    work_dir: Optional[Path] = None

    # Video settings
    seconds_per_image: int = SECONDS_PER_IMAGE
    video_codec: str = DEFAULT_VIDEO_CODEC
    pixel_format: str = DEFAULT_PIXEL_FORMAT

    # Normalization
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    remove_sources: bool = False

    # Performance
    max_workers: int = field(default_factory=lambda: get_optimal_workers("io"))

    # External tools
    ffmpeg_path: Optional[str] = None
    encoder_timeout: Optional[float] = None

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def __post_init__(self):
        """
        Validate and normalize configuration after initialization.

        Raises:
            ValidationError: If any configuration is invalid
        """
        if self.work_dir is not None:
            self.work_dir = Path(self.work_dir)
        if self.log_file is not None:
            self.log_file = Path(self.log_file)

        if self.seconds_per_image < 1:
            raise ValidationError(
                f"seconds_per_image must be >= 1, got {self.seconds_per_image}"
            )

        if not 1 <= self.jpeg_quality <= 95:
            raise ValidationError(
                f"jpeg_quality must be in range [1, 95], got {self.jpeg_quality}"
            )

        if self.max_workers < 1:
            raise ValidationError(f"max_workers must be >= 1, got {self.max_workers}")

        if self.encoder_timeout is not None and self.encoder_timeout <= 0:
            raise ValidationError(
                f"encoder_timeout must be positive, got {self.encoder_timeout}"
            )

        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ValidationError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got '{self.log_level}'"
            )

    def __repr__(self) -> str:
        return (
            f"SlideshowConfig(\n"
            f"  work_dir={self.work_dir},\n"
            f"  seconds_per_image={self.seconds_per_image},\n"
            f"  codec={self.video_codec}/{self.pixel_format},\n"
            f"  jpeg_quality={self.jpeg_quality},\n"
            f"  workers={self.max_workers}\n"
            f")"
        )
