"""Custom exceptions for slideshow generation.

Every failure the pipeline can report is a ``SlideshowError``. Each carries a
short ``kind`` discriminator plus the context needed to act on it: the
offending file ``path`` for per-image failures and the underlying ``cause``.
"""

from pathlib import Path
from typing import Optional, Union


class SlideshowError(Exception):
    """Base exception for all slideshow errors.

    All custom exceptions in the slideshow package inherit from this base
    class, so a caller can catch every pipeline failure with one clause.

    Attributes:
        kind: Short, stable identifier of the failure category
        path: File the failure relates to, if any
        cause: Underlying exception or message, if any

    Example:
        >>> try:
        ...     generate_slideshow(images, "out.mp4")
        ... except SlideshowError as e:
        ...     print(f"{e.kind}: {e}")
    """

    kind = "slideshow"

    def __init__(
        self,
        message: str,
        path: Optional[Union[str, Path]] = None,
        cause: Optional[BaseException] = None
    ):
        self.path = Path(path) if path is not None else None
        self.cause = cause
        super().__init__(message)


class NoImagesError(SlideshowError):
    """Raised when the pipeline is invoked with an empty image list.

    Checked before any file I/O takes place.
    """

    kind = "no_images"

    def __init__(self, message: str = "No images selected."):
        super().__init__(message)


class ValidationError(SlideshowError):
    """Raised when a configuration value or output path is invalid.

    Example:
        >>> if suffix not in VIDEO_EXTENSIONS:
        ...     raise ValidationError(f"Unsupported video extension: {suffix}")
    """

    kind = "validation"


class MetadataError(SlideshowError):
    """Raised when an image's metadata cannot be read.

    Common causes:
    - File not found or not readable
    - Not an image, or an encoding Pillow cannot decode (e.g. SVG)
    - Zero or negative dimensions in the header

    One failing image aborts the whole extraction batch.

    Example:
        >>> raise MetadataError(path, err)
        MetadataError: Error reading image metadata from uploads/b.png: cannot identify image file
    """

    kind = "metadata"

    def __init__(self, path: Union[str, Path], cause: Union[BaseException, str]):
        exc = cause if isinstance(cause, BaseException) else None
        super().__init__(
            f"Error reading image metadata from {path}: {cause}",
            path=path,
            cause=exc,
        )


class ConversionError(SlideshowError):
    """Raised when an image cannot be converted to JPEG or moved into sequence.

    One failing image aborts normalization; the encoder is never run on a
    half-normalized directory.

    Example:
        >>> raise ConversionError(path, err)
        ConversionError: Error converting image to jpeg: uploads/b.png: image file is truncated
    """

    kind = "conversion"

    def __init__(self, path: Union[str, Path], cause: Union[BaseException, str]):
        exc = cause if isinstance(cause, BaseException) else None
        super().__init__(
            f"Error converting image to jpeg: {path}: {cause}",
            path=path,
            cause=exc,
        )


class EncodingError(SlideshowError):
    """Raised when ffmpeg fails to produce the slideshow video.

    Causes include a missing ffmpeg binary, a non-zero exit status, a timeout,
    or a run that exits cleanly without writing the output file.

    Attributes:
        stderr: Tail of ffmpeg's error stream, when available
        returncode: ffmpeg's exit status, when it ran
    """

    kind = "encoding"

    def __init__(
        self,
        cause: Union[BaseException, str],
        stderr: Optional[str] = None,
        returncode: Optional[int] = None
    ):
        self.stderr = stderr
        self.returncode = returncode
        exc = cause if isinstance(cause, BaseException) else None

        msg = f"Error converting images to slideshow: {cause}"
        if stderr:
            msg += f"\n{stderr}"

        super().__init__(msg, cause=exc)
