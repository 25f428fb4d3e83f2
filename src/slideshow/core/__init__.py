"""Core slideshow assembly operations.

This module contains the fundamental steps of building a slideshow:
- Metadata extraction (width, height, format)
- Canvas harmonization (shared scale and pad geometry)
- Format & sequence normalization (numbered JPEG frames)
- Input validation
"""

from .metadata import (
    ImageFormat,
    ImageDescriptor,
    coerce_image_path,
    read_image_descriptor,
    extract_metadata,
)
from .canvas import CanvasSpec, compute_canvas, scaled_height
from .normalizer import (
    RenameOnly,
    Reencode,
    plan_normalization,
    apply_plan,
    normalize_images,
    verify_sequence,
)
from .validator import validate_images, validate_output_path, VIDEO_EXTENSIONS
from .exceptions import *

__all__ = [
    # Metadata
    "ImageFormat",
    "ImageDescriptor",
    "coerce_image_path",
    "read_image_descriptor",
    "extract_metadata",
    # Canvas
    "CanvasSpec",
    "compute_canvas",
    "scaled_height",
    # Normalization
    "RenameOnly",
    "Reencode",
    "plan_normalization",
    "apply_plan",
    "normalize_images",
    "verify_sequence",
    # Validation
    "validate_images",
    "validate_output_path",
    "VIDEO_EXTENSIONS",
]
