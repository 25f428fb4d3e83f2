"""
Filter Chain Construction
=========================

Single responsibility: Build the per-frame ffmpeg filter chain.

The chain always applies, in order:

1. ``scale``  - resize to the canvas scale width, height keeps aspect ratio
2. ``pad``    - place onto the black canvas at offset ``x=1, y=-1``
3. ``format`` - convert to the output pixel format
"""

from typing import List, Tuple

from slideshow.core.canvas import CanvasSpec

DEFAULT_PIXEL_FORMAT = "yuv420p"
PAD_COLOR = "black"

# Offsets handed to the pad filter; a negative value makes ffmpeg center
# the image on that axis
PAD_X = 1
PAD_Y = -1

# Pixel formats whose chroma planes are subsampled horizontally and vertically
_SUBSAMPLED_FORMATS = {"yuv420p", "yuvj420p", "nv12", "yuv420p10le"}


def needs_even_dimensions(pixel_format: str) -> bool:
    return pixel_format in _SUBSAMPLED_FORMATS


def filter_steps(
    canvas: CanvasSpec,
    pixel_format: str = DEFAULT_PIXEL_FORMAT
) -> List[Tuple[str, str]]:
    """
    Filter chain as ``(filter, options)`` pairs.

    Example:
        >>> filter_steps(CanvasSpec(600, 602, 452))
        [('scale', '600:-1'), ('pad', '602:452:1:-1:black'), ('format', 'yuv420p')]
    """
    pad_width, pad_height = canvas.encoder_size(even=needs_even_dimensions(pixel_format))

    return [
        ("scale", f"{canvas.scale_width}:-1"),
        ("pad", f"{pad_width}:{pad_height}:{PAD_X}:{PAD_Y}:{PAD_COLOR}"),
        ("format", pixel_format),
    ]


def build_filter_chain(
    canvas: CanvasSpec,
    pixel_format: str = DEFAULT_PIXEL_FORMAT
) -> str:
    """
    Filter chain as the ``-vf`` argument string.

    Example:
        >>> build_filter_chain(CanvasSpec(600, 602, 452))
        'scale=600:-1,pad=602:452:1:-1:black,format=yuv420p'
    """
    return ",".join(f"{name}={options}" for name, options in filter_steps(canvas, pixel_format))
