"""
Input Validation
================

Single responsibility: Validate pipeline inputs before any processing.
"""

from pathlib import Path
from typing import Sequence, Union

from slideshow.core.exceptions import NoImagesError, ValidationError

# Containers ffmpeg can mux H.264 into without extra options
VIDEO_EXTENSIONS = {'.mp4', '.m4v', '.mov', '.mkv'}


def validate_images(images: Sequence) -> Sequence:
    """
    Validate the image list is non-empty.

    Performs no file I/O.

    Raises:
        NoImagesError: If ``images`` is empty
    """
    if images is None or len(images) < 1:
        raise NoImagesError()

    return images


def validate_output_path(output_path: Union[str, Path]) -> Path:
    """
    Validate the output path of the slideshow video.

    Args:
        output_path: Target video file

    Returns:
        Path object

    Raises:
        ValidationError: If the extension is not a supported video container,
            the path is a directory, or its parent directory does not exist
    """
    output_path = Path(output_path)

    if output_path.suffix.lower() not in VIDEO_EXTENSIONS:
        raise ValidationError(
            f"Unsupported video extension: '{output_path.suffix}'\n"
            f"Supported: {', '.join(sorted(VIDEO_EXTENSIONS))}"
        )

    if output_path.is_dir():
        raise ValidationError(f"Output path is a directory: {output_path}")

    parent = output_path.parent
    if not parent.is_dir():
        raise ValidationError(f"Output directory does not exist: {parent}")

    return output_path
