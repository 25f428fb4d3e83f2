"""
Canvas Geometry
===============

Single responsibility: Derive one output canvas from a set of images.

Every image is scaled to the narrowest input width (never upscaled) and
padded onto a canvas tall enough for the tallest scaled image. The canvas
keeps a 2px margin on each axis so no image touches the frame edge.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

from slideshow.core.metadata import ImageDescriptor

# Added to both canvas dimensions
CANVAS_MARGIN = 2


@dataclass(frozen=True)
class CanvasSpec:
    """
    Shared scale and pad geometry for all frames.

    Attributes:
        scale_width: Width every image is resized to
        pad_width: Output frame width
        pad_height: Output frame height
    """

    scale_width: int
    pad_width: int
    pad_height: int

    def encoder_size(self, even: bool = True) -> Tuple[int, int]:
        """
        Canvas size handed to the encoder.

        Chroma-subsampled pixel formats such as yuv420p need even dimensions,
        so with ``even`` set an odd side is grown by one pixel.

        Returns:
            (width, height)
        """
        if not even:
            return self.pad_width, self.pad_height
        return _round_up_even(self.pad_width), _round_up_even(self.pad_height)


def _round_up_even(value: int) -> int:
    return value + (value % 2)


def scaled_height(descriptor: ImageDescriptor, scale_width: int) -> int:
    """
    Height of an image once scaled to ``scale_width``, rounded up.

    Integer arithmetic keeps this exact: an image already ``scale_width``
    wide keeps its height.

    Example:
        >>> scaled_height(ImageDescriptor(path, 800, 600, ImageFormat.PNG), 600)
        450
    """
    return -(-scale_width * descriptor.height // descriptor.width)


def compute_canvas(descriptors: Sequence[ImageDescriptor]) -> CanvasSpec:
    """
    Compute the canvas for a non-empty set of images.

    The result depends only on the multiset of (width, height) pairs, never on
    list order. The caller guarantees ``descriptors`` is non-empty.

    Args:
        descriptors: Metadata of every image in the slideshow

    Returns:
        CanvasSpec with:
        - scale_width = min(width)
        - pad_width = scale_width + 2
        - pad_height = max(ceil(scale_width / width * height)) + 2

    Example:
        >>> canvas = compute_canvas(descs)  # 800x600, 600x450, 1000x750
        >>> canvas
        CanvasSpec(scale_width=600, pad_width=602, pad_height=452)
    """
    scale_width = min(d.width for d in descriptors)
    tallest = max(scaled_height(d, scale_width) for d in descriptors)

    return CanvasSpec(
        scale_width=scale_width,
        pad_width=scale_width + CANVAS_MARGIN,
        pad_height=tallest + CANVAS_MARGIN,
    )
