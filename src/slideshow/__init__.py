"""Slideshow - Turn a batch of still images into a fixed-cadence video.

Images of mixed formats and sizes are scaled to the narrowest width, padded
onto one shared canvas and shown for 3 seconds each in an H.264 video.

Quick Start:
    >>> from slideshow import generate_slideshow
    >>> from slideshow.utils.logging import setup_logger
    >>>
    >>> setup_logger(verbose=True)
    >>> generate_slideshow(
    ...     [{"path": "uploads/a.png"}, {"path": "uploads/b.jpg"}],
    ...     "public/feed.mp4",
    ... )
    PosixPath('public/feed.mp4')

Modules:
    core: Metadata extraction, canvas geometry, JPEG sequence normalization
    encoding: Filter chain and ffmpeg invocation
    pipeline: Configuration and orchestration
    server: FastAPI upload endpoint
    cli: Command-line interface
    utils: Logging, worker pools, tool discovery
"""

__version__ = "1.0.0"
__license__ = "MIT"

from .core.exceptions import (
    SlideshowError,
    NoImagesError,
    ValidationError,
    MetadataError,
    ConversionError,
    EncodingError,
)

from .pipeline import (
    SlideshowConfig,
    PipelineResult,
    PipelineState,
    generate_slideshow,
    run_slideshow_pipeline,
)

from .utils.logging import setup_logger, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Entry points
    "generate_slideshow",
    "run_slideshow_pipeline",
    "SlideshowConfig",
    "PipelineResult",
    "PipelineState",
    # Exceptions
    "SlideshowError",
    "NoImagesError",
    "ValidationError",
    "MetadataError",
    "ConversionError",
    "EncodingError",
    # Logging
    "setup_logger",
    "get_logger",
]
