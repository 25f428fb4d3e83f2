"""
Format & Sequence Normalization
===============================

Single responsibility: Turn the input images into the numbered JPEG sequence
ffmpeg reads (``1.jpg``, ``2.jpg``, ...).

Each image is resolved once into a plan:

- ``RenameOnly``: already JPEG, moved to its sequence name as-is. Avoids a
  second lossy compression.
- ``Reencode``: any other format, decoded with Pillow and written as JPEG.

The sequence number is the image's 1-based position in the input list and is
passed explicitly into every plan, so plans can run in any order (or in
parallel) and still produce the same directory.
"""

import os
import shutil
import uuid
from dataclasses import dataclass, replace
from functools import partial
from pathlib import Path
from typing import List, Optional, Sequence, Union

from PIL import Image

from slideshow.core.exceptions import ConversionError
from slideshow.core.metadata import ImageDescriptor, ImageFormat
from slideshow.utils.logging import get_logger
from slideshow.utils.parallel import map_ordered

logger = get_logger(__name__)

# Format the encoder reads its input frames in
TARGET_FORMAT = ImageFormat.JPEG

DEFAULT_JPEG_QUALITY = 80

# Background for transparent pixels, matches the canvas padding
FLATTEN_BACKGROUND = (0, 0, 0)


@dataclass(frozen=True)
class RenameOnly:
    """Image already in the target format; moved, never re-encoded."""

    source: Path
    sequence: int
    target: Path


@dataclass(frozen=True)
class Reencode:
    """Image in another format; decoded and written in the target format."""

    source: Path
    sequence: int
    target: Path


NormalizationPlan = Union[RenameOnly, Reencode]


def sequence_path(
    work_dir: Path,
    sequence: int,
    target_format: ImageFormat = TARGET_FORMAT
) -> Path:
    """
    Working filename for a sequence number.

    Example:
        >>> sequence_path(Path("tmp"), 3)
        PosixPath('tmp/3.jpg')
    """
    return Path(work_dir) / f"{sequence}.{target_format.extension}"


def plan_normalization(
    descriptor: ImageDescriptor,
    sequence: int,
    work_dir: Path,
    target_format: ImageFormat = TARGET_FORMAT
) -> NormalizationPlan:
    """
    Decide how one image reaches its sequence slot.

    Args:
        descriptor: Image metadata
        sequence: 1-based display position
        work_dir: Directory holding the sequence
        target_format: Format the encoder reads

    Returns:
        RenameOnly if the image is already in ``target_format``, else Reencode

    Raises:
        ValueError: If ``sequence`` is not positive
    """
    if sequence < 1:
        raise ValueError(f"sequence numbers start at 1, got {sequence}")

    target = sequence_path(work_dir, sequence, target_format)

    if descriptor.format is target_format:
        return RenameOnly(source=descriptor.path, sequence=sequence, target=target)

    return Reencode(source=descriptor.path, sequence=sequence, target=target)


def _flatten_to_rgb(img: Image.Image) -> Image.Image:
    """Decode the current frame to RGB, compositing transparency onto black."""
    has_alpha = img.mode in ("RGBA", "LA", "PA") or (
        img.mode == "P" and "transparency" in img.info
    )

    if has_alpha:
        rgba = img.convert("RGBA")
        background = Image.new("RGB", rgba.size, FLATTEN_BACKGROUND)
        background.paste(rgba, mask=rgba.getchannel("A"))
        return background

    if img.mode != "RGB":
        return img.convert("RGB")

    # Copy so the result outlives the file handle
    return img.copy()


def _reencode(source: Path, target: Path, quality: int) -> None:
    # Frame 0 only: animated inputs become a single still
    with Image.open(source) as img:
        frame = _flatten_to_rgb(img)

    try:
        frame.save(target, format="JPEG", quality=quality)
    except Exception:
        target.unlink(missing_ok=True)
        raise


def apply_plan(
    plan: NormalizationPlan,
    quality: int = DEFAULT_JPEG_QUALITY,
    remove_source: bool = False
) -> Path:
    """
    Execute one normalization plan.

    Args:
        plan: RenameOnly or Reencode
        quality: JPEG quality for re-encoded images (1-95)
        remove_source: Delete the original after a successful re-encode

    Returns:
        Path of the sequenced file

    Raises:
        ConversionError: If the move or the re-encode fails
    """
    try:
        if isinstance(plan, RenameOnly):
            if plan.source != plan.target:
                shutil.move(str(plan.source), str(plan.target))
            logger.debug(f"{plan.source.name} -> {plan.target.name} (renamed)")

        elif isinstance(plan, Reencode):
            _reencode(plan.source, plan.target, quality)
            if remove_source and plan.source != plan.target:
                plan.source.unlink()
            logger.debug(f"{plan.source.name} -> {plan.target.name} (re-encoded)")

        else:
            raise TypeError(f"unknown normalization plan: {plan!r}")

    # Pillow reports broken chunks past the header as SyntaxError
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise ConversionError(plan.source, e) from e

    return plan.target


def _isolate_sources(plans: Sequence[NormalizationPlan]) -> List[NormalizationPlan]:
    """
    Give every plan a source no other plan writes to or moves.

    A source that is also another image's target (an upload literally named
    ``2.jpg`` in first position) is moved to a holding name first. A file
    listed more than once is copied for each repeat.
    """
    targets = {plan.target.resolve(): plan.sequence for plan in plans}
    # Where each listed file sits now, after any earlier move aside
    current = {}
    isolated = []

    for plan in plans:
        source = plan.source.resolve()
        owner = targets.get(source)

        duplicate = source in current
        collides = owner is not None and owner != plan.sequence
        current.setdefault(source, plan.source)

        if duplicate or collides:
            holding = plan.target.with_name(
                f".pending-{plan.sequence}-{uuid.uuid4().hex[:8]}{plan.source.suffix}"
            )
            try:
                if duplicate:
                    shutil.copy2(current[source], holding)
                else:
                    os.replace(plan.source, holding)
                    current[source] = holding
            except OSError as e:
                raise ConversionError(plan.source, e) from e

            logger.debug(f"Moved {plan.source.name} aside as {holding.name}")
            plan = replace(plan, source=holding)

        isolated.append(plan)

    return isolated


def verify_sequence(
    work_dir: Path,
    count: int,
    target_format: ImageFormat = TARGET_FORMAT
) -> None:
    """
    Check the directory holds exactly the frames ``1..count``.

    ffmpeg stops at the first gap and keeps reading past ``count`` if more
    numbered files exist, so both are errors.

    Raises:
        ConversionError: On a missing frame or a stray ``count + 1`` frame
    """
    for sequence in range(1, count + 1):
        path = sequence_path(work_dir, sequence, target_format)
        if not path.is_file():
            raise ConversionError(path, "missing from the frame sequence")

    stray = sequence_path(work_dir, count + 1, target_format)
    if stray.exists():
        raise ConversionError(stray, f"unexpected frame after the last of {count}")


def normalize_images(
    descriptors: Sequence[ImageDescriptor],
    work_dir: Optional[Union[str, Path]] = None,
    max_workers: Optional[int] = None,
    quality: int = DEFAULT_JPEG_QUALITY,
    remove_sources: bool = False
) -> List[Path]:
    """
    Normalize a batch of images into a numbered JPEG sequence.

    Args:
        descriptors: Ordered image metadata (display order)
        work_dir: Sequence directory, defaults to the first image's directory
        max_workers: Optional cap on concurrent conversions
        quality: JPEG quality for re-encoded images
        remove_sources: Delete originals after re-encoding

    Returns:
        Sequenced paths, ``result[i]`` is ``{i + 1}.jpg``

    Raises:
        ConversionError: On the first failing image; the directory must then
            be discarded, it is not a valid sequence

    Example:
        >>> normalize_images(descs, Path("tmp"))
        [PosixPath('tmp/1.jpg'), PosixPath('tmp/2.jpg'), PosixPath('tmp/3.jpg')]
    """
    if not descriptors:
        return []

    work_dir = Path(work_dir) if work_dir is not None else descriptors[0].path.parent
    work_dir.mkdir(parents=True, exist_ok=True)

    plans = [
        plan_normalization(descriptor, sequence, work_dir)
        for sequence, descriptor in enumerate(descriptors, start=1)
    ]

    renames = sum(1 for plan in plans if isinstance(plan, RenameOnly))
    logger.debug(
        f"Normalization plan: {renames} rename(s), "
        f"{len(plans) - renames} re-encode(s) into {work_dir}"
    )

    plans = _isolate_sources(plans)

    targets = map_ordered(
        partial(apply_plan, quality=quality, remove_source=remove_sources),
        plans,
        max_workers=max_workers,
    )

    verify_sequence(work_dir, len(plans))

    return targets
