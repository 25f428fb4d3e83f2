"""
Pipeline Stages
===============

Single responsibility: One method per pipeline stage, with clear inputs and
outputs, so the orchestrator only sequences them.
"""

from pathlib import Path
from typing import Callable, List, Sequence, Tuple

from slideshow.core.canvas import CanvasSpec, compute_canvas, scaled_height
from slideshow.core.metadata import ImageDescriptor, ImageInput, extract_metadata
from slideshow.core.normalizer import normalize_images
from slideshow.core.validator import validate_images, validate_output_path
from slideshow.encoding.ffmpeg import encode_slideshow
from slideshow.pipeline.config import SlideshowConfig
from slideshow.utils.logging import get_logger

logger = get_logger(__name__)


class PipelineStages:
    """Encapsulates individual stages of the slideshow pipeline."""

    @staticmethod
    def validate(
        images: Sequence[ImageInput],
        output_path: Path,
        log: Callable[[str], None]
    ) -> Path:
        """
        Check the inputs. The image list is checked first, with no file I/O.

        Raises:
            NoImagesError: If ``images`` is empty
            ValidationError: If ``output_path`` is not a usable video path
        """
        validate_images(images)
        output_path = validate_output_path(output_path)

        log(f"  Images: {len(images)}")
        log(f"  Output: {output_path}")
        return output_path

    @staticmethod
    def extract(
        images: Sequence[ImageInput],
        config: SlideshowConfig,
        log: Callable[[str], None]
    ) -> List[ImageDescriptor]:
        """
        Read metadata of every image, in input order.

        Raises:
            MetadataError: If any image cannot be read
        """
        descriptors = extract_metadata(images, max_workers=config.max_workers)

        for index, desc in enumerate(descriptors, start=1):
            log(f"  [{index}] {desc.path.name}: {desc.width}x{desc.height} {desc.format.value}")

        return descriptors

    @staticmethod
    def harmonize(
        descriptors: Sequence[ImageDescriptor],
        log: Callable[[str], None]
    ) -> CanvasSpec:
        """Compute the shared canvas."""
        canvas = compute_canvas(descriptors)

        heights = [scaled_height(d, canvas.scale_width) for d in descriptors]
        log(f"  Scale width: {canvas.scale_width}px")
        log(f"  Scaled heights: {heights}")
        log(f"  Canvas: {canvas.pad_width}x{canvas.pad_height}")
        return canvas

    @staticmethod
    def normalize(
        descriptors: Sequence[ImageDescriptor],
        config: SlideshowConfig,
        log: Callable[[str], None]
    ) -> Tuple[Path, List[Path]]:
        """
        Produce the numbered JPEG sequence.

        Returns:
            Tuple of (work_dir, frames)

        Raises:
            ConversionError: If any image cannot be converted or moved
        """
        work_dir = config.work_dir or descriptors[0].path.parent

        frames = normalize_images(
            descriptors,
            work_dir=work_dir,
            max_workers=config.max_workers,
            quality=config.jpeg_quality,
            remove_sources=config.remove_sources,
        )

        log(f"  Sequence: {frames[0].name} .. {frames[-1].name} in {work_dir}")
        return work_dir, frames

    @staticmethod
    def encode(
        work_dir: Path,
        canvas: CanvasSpec,
        frame_count: int,
        output_path: Path,
        config: SlideshowConfig,
        log: Callable[[str], None]
    ) -> Path:
        """
        Run ffmpeg over the sequence.

        Raises:
            EncodingError: If ffmpeg fails
        """
        log(f"  Frames: {frame_count} x {config.seconds_per_image}s")

        output = encode_slideshow(
            work_dir,
            canvas,
            output_path,
            frame_count=frame_count,
            ffmpeg_path=config.ffmpeg_path,
            seconds_per_image=config.seconds_per_image,
            video_codec=config.video_codec,
            pixel_format=config.pixel_format,
            timeout=config.encoder_timeout,
        )

        log(f"  Video: {output}")
        return output
