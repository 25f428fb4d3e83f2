"""
Image Metadata Extraction
=========================

Single responsibility: Read width, height and format of each input image.

Pillow opens images lazily, so extraction only parses file headers; pixel
data is decoded later, and only for images that need re-encoding.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

from PIL import Image

from slideshow.core.exceptions import MetadataError, ValidationError
from slideshow.utils.logging import get_logger
from slideshow.utils.parallel import map_ordered

logger = get_logger(__name__)


class ImageFormat(str, Enum):
    """Image encodings the pipeline accepts as input."""

    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    GIF = "gif"
    AVIF = "avif"
    TIFF = "tiff"
    BMP = "bmp"

    @classmethod
    def from_pillow(cls, pillow_format: Optional[str]) -> "ImageFormat":
        """
        Map a Pillow ``Image.format`` string to an ImageFormat.

        Raises:
            ValueError: If the format is missing or not supported
        """
        if not pillow_format:
            raise ValueError("unrecognized image format")

        try:
            return _PILLOW_FORMATS[pillow_format.upper()]
        except KeyError:
            raise ValueError(f"unsupported image format: {pillow_format}") from None

    @property
    def extension(self) -> str:
        """Canonical file extension, without the dot."""
        return "jpg" if self is ImageFormat.JPEG else self.value


# MPO is a JPEG container with extra frames, common from phone cameras
_PILLOW_FORMATS = {
    "JPEG": ImageFormat.JPEG,
    "MPO": ImageFormat.JPEG,
    "PNG": ImageFormat.PNG,
    "WEBP": ImageFormat.WEBP,
    "GIF": ImageFormat.GIF,
    "AVIF": ImageFormat.AVIF,
    "TIFF": ImageFormat.TIFF,
    "BMP": ImageFormat.BMP,
}


@dataclass(frozen=True)
class ImageDescriptor:
    """
    Metadata of one input image.

    Attributes:
        path: Location of the source file
        width: Pixel width, always > 0
        height: Pixel height, always > 0
        format: Detected encoding
    """

    path: Path
    width: int
    height: int
    format: ImageFormat

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


ImageInput = Union[str, os.PathLike, Mapping, Any]


def coerce_image_path(image: ImageInput) -> Path:
    """
    Extract the file path from a caller-supplied image record.

    Accepts plain paths, mappings with a ``"path"`` key (e.g. decoded JSON)
    and objects with a ``path`` attribute (e.g. upload records). Any other
    fields are ignored.

    Raises:
        ValidationError: If no path can be found on the record
    """
    if isinstance(image, (str, os.PathLike)):
        return Path(image)

    if isinstance(image, Mapping):
        path = image.get("path")
    else:
        path = getattr(image, "path", None)

    if not path:
        raise ValidationError(f"Image record has no 'path': {image!r}")

    return Path(path)


def read_image_descriptor(path: Union[str, Path]) -> ImageDescriptor:
    """
    Read the metadata of a single image.

    Args:
        path: Image file path

    Returns:
        ImageDescriptor for the file

    Raises:
        MetadataError: If the file cannot be opened, its format is not
            supported, or its dimensions are not positive

    Example:
        >>> desc = read_image_descriptor("photos/beach.png")
        >>> desc.width, desc.height, desc.format
        (800, 600, <ImageFormat.PNG: 'png'>)
    """
    path = Path(path)

    try:
        with Image.open(path) as img:
            width, height = img.size
            image_format = ImageFormat.from_pillow(img.format)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise MetadataError(path, e) from e

    if width <= 0 or height <= 0:
        raise MetadataError(path, f"invalid dimensions {width}x{height}")

    logger.debug(f"{path.name}: {width}x{height} {image_format.value}")

    return ImageDescriptor(path=path, width=width, height=height, format=image_format)


def extract_metadata(
    images: Iterable[ImageInput],
    max_workers: Optional[int] = None
) -> List[ImageDescriptor]:
    """
    Read metadata for a batch of images, concurrently.

    The returned list is aligned with the input: ``result[i]`` describes
    ``images[i]``. A single unreadable image aborts the batch.

    Args:
        images: Ordered image records (paths, mappings or objects with ``path``)
        max_workers: Optional cap on concurrent reads

    Returns:
        Ordered list of ImageDescriptor

    Raises:
        MetadataError: On the first image (in input order) that fails
        ValidationError: If a record carries no path
    """
    paths = [coerce_image_path(image) for image in images]

    logger.debug(f"Reading metadata for {len(paths)} images")

    return map_ordered(read_image_descriptor, paths, max_workers=max_workers)
