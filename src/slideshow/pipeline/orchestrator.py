"""
Slideshow Pipeline Orchestrator
===============================

Single responsibility: Sequence the pipeline stages and define the public
entry point.

The pipeline is a linear state machine:

    VALIDATE -> EXTRACT -> HARMONIZE -> NORMALIZE -> ENCODE -> DONE

Any stage failure moves straight to FAILED, carrying the originating error.
Nothing is retried.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence, Union

from slideshow.core.canvas import CanvasSpec
from slideshow.core.exceptions import SlideshowError
from slideshow.core.metadata import ImageInput
from slideshow.pipeline.config import SlideshowConfig
from slideshow.pipeline.stages import PipelineStages
from slideshow.utils.logging import close_logger, get_logger, setup_logger

logger = get_logger(__name__)

SESSION_LOGGER = "slideshow_session"


def session_logger_name() -> str:
    """Session logger of the calling thread, so concurrent runs keep separate log files."""
    return f"{SESSION_LOGGER}.{threading.get_ident()}"


class PipelineState(Enum):
    VALIDATE = "validate"
    EXTRACT = "extract"
    HARMONIZE = "harmonize"
    NORMALIZE = "normalize"
    ENCODE = "encode"
    DONE = "done"
    FAILED = "failed"


@dataclass
class PipelineResult:
    """
    Outcome of one pipeline run.

    Attributes:
        state: DONE or FAILED
        output_path: Written video (DONE only)
        canvas: Canvas geometry, once harmonization ran
        frame_count: Number of images in the slideshow
        failed_stage: Stage that raised (FAILED only)
        error: Originating error (FAILED only)
    """

    state: PipelineState
    output_path: Optional[Path] = None
    canvas: Optional[CanvasSpec] = None
    frame_count: int = 0
    failed_stage: Optional[PipelineState] = None
    error: Optional[SlideshowError] = None

    @property
    def ok(self) -> bool:
        return self.state is PipelineState.DONE


def run_slideshow_pipeline(
    images: Sequence[ImageInput],
    output_path: Union[str, Path],
    config: Optional[SlideshowConfig] = None
) -> PipelineResult:
    """
    Run the full pipeline and report the outcome as a value.

    Pipeline stages:
    1. Validate inputs (PipelineStages.validate)
    2. Extract image metadata (PipelineStages.extract)
    3. Harmonize canvas geometry (PipelineStages.harmonize)
    4. Normalize into a numbered JPEG sequence (PipelineStages.normalize)
    5. Encode the video with ffmpeg (PipelineStages.encode)

    Args:
        images: Ordered image records, only ``path`` is used
        output_path: Video file to write (overwritten)
        config: Optional SlideshowConfig (defaults otherwise)

    Returns:
        PipelineResult; ``result.error`` holds the failure when not ``ok``.
        Errors other than SlideshowError (bugs, KeyboardInterrupt) propagate.

    Example:
        >>> result = run_slideshow_pipeline(["a.png", "b.jpg"], "out.mp4")
        >>> result.state
        <PipelineState.DONE: 'done'>
    """
    config = config or SlideshowConfig()
    images = list(images) if images is not None else []

    state = PipelineState.VALIDATE
    canvas = None

    # The session log is only opened once the image list is known non-empty
    session_logger = None

    def log(message: str):
        """Log to both module logger and session logger."""
        logger.info(message)
        if session_logger is not None:
            session_logger.info(message)

    try:
        # ---------------------------------------------------------------------
        # STEP 1: Validate inputs
        # ---------------------------------------------------------------------

        output_path = PipelineStages.validate(images, output_path, logger.debug)

        if config.log_file is not None:
            session_logger = setup_logger(
                name=session_logger_name(),
                verbose=False,
                log_file=config.log_file,
                log_level=config.log_level
            )

        log("=" * 70)
        log("SLIDESHOW PIPELINE")
        log("=" * 70)
        log(f"Images: {len(images)}")
        log(f"Output: {output_path}")
        log("")

        # ---------------------------------------------------------------------
        # STEP 2: Extract metadata
        # ---------------------------------------------------------------------

        state = PipelineState.EXTRACT
        log("STEP 1: Reading image metadata...")
        descriptors = PipelineStages.extract(images, config, log)
        log("")

        # ---------------------------------------------------------------------
        # STEP 3: Harmonize dimensions
        # ---------------------------------------------------------------------

        state = PipelineState.HARMONIZE
        log("STEP 2: Computing canvas...")
        canvas = PipelineStages.harmonize(descriptors, log)
        log("")

        # ---------------------------------------------------------------------
        # STEP 4: Normalize formats and sequence
        # ---------------------------------------------------------------------

        state = PipelineState.NORMALIZE
        log("STEP 3: Normalizing images to a JPEG sequence...")
        work_dir, frames = PipelineStages.normalize(descriptors, config, log)
        log("")

        # ---------------------------------------------------------------------
        # STEP 5: Encode
        # ---------------------------------------------------------------------

        state = PipelineState.ENCODE
        log("STEP 4: Encoding video...")
        video = PipelineStages.encode(work_dir, canvas, len(frames), output_path, config, log)
        log("")

    except SlideshowError as e:
        logger.error(f"Slideshow failed during {state.value}: {e}")
        if session_logger is not None:
            session_logger.error(f"Slideshow failed during {state.value}: {e}")

        return PipelineResult(
            state=PipelineState.FAILED,
            canvas=canvas,
            frame_count=len(images),
            failed_stage=state,
            error=e,
        )

    else:
        log("=" * 70)
        log(f"SUCCESS! {len(frames)} images -> {video}")
        log("=" * 70)

        return PipelineResult(
            state=PipelineState.DONE,
            output_path=video,
            canvas=canvas,
            frame_count=len(frames),
        )

    finally:
        if session_logger is not None:
            close_logger(session_logger)


def generate_slideshow(
    images: Sequence[ImageInput],
    output_path: Union[str, Path],
    config: Optional[SlideshowConfig] = None
) -> Path:
    """
    Convert images into a slideshow video, each image shown for 3 seconds.

    Images are renamed (or re-encoded to JPEG) in place as ``1.jpg .. N.jpg``
    in their directory, or in ``config.work_dir`` when set. The caller owns
    that directory and should discard it afterwards.

    Args:
        images: Ordered image records. Each is a path, a mapping with a
            ``"path"`` key, or an object with a ``path`` attribute; any other
            fields are ignored.
        output_path: Video file to write, e.g. ``public/feed.mp4``

    Returns:
        Path to the written video

    Raises:
        NoImagesError: If ``images`` is empty (no file I/O happens)
        ValidationError: If ``output_path`` is unusable
        MetadataError: If an image cannot be read
        ConversionError: If an image cannot be normalized
        EncodingError: If ffmpeg fails
    """
    result = run_slideshow_pipeline(images, output_path, config)

    if result.error is not None:
        raise result.error

    return result.output_path
