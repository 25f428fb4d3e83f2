"""
Video Encoding
==============

Single responsibility: Run ffmpeg over a numbered JPEG sequence.

ffmpeg reads ``1.jpg, 2.jpg, ...`` at one frame per ``seconds_per_image``,
applies the filter chain from ``slideshow.encoding.filters`` and writes an
H.264 video without audio. The run is synchronous; its exit status and error
stream are captured and surfaced in ``EncodingError``.
"""

import json
import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from slideshow.core.canvas import CanvasSpec
from slideshow.core.exceptions import EncodingError
from slideshow.encoding.filters import DEFAULT_PIXEL_FORMAT, build_filter_chain
from slideshow.utils.logging import get_logger
from slideshow.utils.platform_utils import (
    get_ffmpeg_executable,
    get_ffmpeg_install_instructions,
    get_ffprobe_executable,
)

logger = get_logger(__name__)

SECONDS_PER_IMAGE = 3
DEFAULT_VIDEO_CODEC = "libx264"
SEQUENCE_PATTERN = "%d.jpg"

# Lines of ffmpeg stderr kept in error messages
STDERR_TAIL_LINES = 20


@dataclass(frozen=True)
class VideoInfo:
    """Summary of a video file as reported by ffprobe."""

    duration: float
    width: int
    height: int
    video_codec: Optional[str]
    has_audio: bool
    frame_count: Optional[int] = None


def _stderr_tail(stderr: Optional[str]) -> Optional[str]:
    if not stderr:
        return None
    lines = stderr.strip().splitlines()
    return "\n".join(lines[-STDERR_TAIL_LINES:])


def partial_output_path(output_path: Path) -> Path:
    """
    Temporary sibling the encoder writes to before the final rename.

    Keeps the extension so ffmpeg still picks the right container.

    Example:
        >>> partial_output_path(Path("public/feed.mp4"))
        PosixPath('public/.feed.partial.mp4')
    """
    return output_path.with_name(f".{output_path.stem}.partial{output_path.suffix}")


def build_ffmpeg_command(
    ffmpeg_path: str,
    sequence_dir: Path,
    canvas: CanvasSpec,
    output_path: Path,
    frame_count: Optional[int] = None,
    seconds_per_image: int = SECONDS_PER_IMAGE,
    video_codec: str = DEFAULT_VIDEO_CODEC,
    pixel_format: str = DEFAULT_PIXEL_FORMAT
) -> List[str]:
    """
    Build the ffmpeg argument list for a slideshow.

    Args:
        ffmpeg_path: ffmpeg executable
        sequence_dir: Directory holding ``1.jpg .. N.jpg``
        canvas: Shared frame geometry
        output_path: Video file to write
        frame_count: Optional number of frames to read (bounds the sequence)
        seconds_per_image: Display time of each image
        video_codec: ffmpeg video encoder
        pixel_format: Output pixel format

    Returns:
        Argument list for ``subprocess.run``
    """
    cmd = [
        ffmpeg_path,
        '-y',  # Overwrite output
        '-hide_banner',
        '-loglevel', 'error',
        '-framerate', f'1/{seconds_per_image}',
        '-start_number', '1',
        '-i', str(Path(sequence_dir) / SEQUENCE_PATTERN),
        '-vf', build_filter_chain(canvas, pixel_format),
        '-c:v', video_codec,
        '-an',
    ]

    if frame_count is not None:
        cmd += ['-frames:v', str(frame_count)]

    cmd.append(str(output_path))
    return cmd


def encode_slideshow(
    sequence_dir: Union[str, Path],
    canvas: CanvasSpec,
    output_path: Union[str, Path],
    frame_count: Optional[int] = None,
    ffmpeg_path: Optional[str] = None,
    seconds_per_image: int = SECONDS_PER_IMAGE,
    video_codec: str = DEFAULT_VIDEO_CODEC,
    pixel_format: str = DEFAULT_PIXEL_FORMAT,
    timeout: Optional[float] = None
) -> Path:
    """
    Encode the sequenced images into the slideshow video.

    ffmpeg writes to a hidden sibling of ``output_path`` which replaces the
    target only once ffmpeg has exited cleanly, so a failed run never leaves a
    truncated video behind (nor destroys an earlier one).

    Args:
        sequence_dir: Directory holding ``1.jpg .. N.jpg``
        canvas: Shared frame geometry
        output_path: Video file to write (overwritten)
        frame_count: Number of sequenced frames
        ffmpeg_path: Optional ffmpeg executable (auto-detected otherwise)
        seconds_per_image: Display time of each image
        video_codec: ffmpeg video encoder
        pixel_format: Output pixel format
        timeout: Optional limit in seconds for the ffmpeg run

    Returns:
        Path to the written video

    Raises:
        EncodingError: If ffmpeg is missing, fails, times out, or writes nothing
    """
    output_path = Path(output_path)

    executable = get_ffmpeg_executable(ffmpeg_path)
    if executable is None:
        raise EncodingError(f"ffmpeg not found\n{get_ffmpeg_install_instructions()}")

    partial = partial_output_path(output_path)
    cmd = build_ffmpeg_command(
        executable,
        Path(sequence_dir),
        canvas,
        partial,
        frame_count=frame_count,
        seconds_per_image=seconds_per_image,
        video_codec=video_codec,
        pixel_format=pixel_format,
    )

    logger.debug(f"Running: {shlex.join(cmd)}")

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            encoding='utf-8',
            errors='replace',
            timeout=timeout
        )
    except subprocess.TimeoutExpired as e:
        partial.unlink(missing_ok=True)
        raise EncodingError(f"ffmpeg timed out after {timeout}s") from e
    except OSError as e:
        partial.unlink(missing_ok=True)
        raise EncodingError(e) from e

    stderr = _stderr_tail(result.stderr)

    if result.returncode != 0:
        partial.unlink(missing_ok=True)
        raise EncodingError(
            f"ffmpeg exited with status {result.returncode}",
            stderr=stderr,
            returncode=result.returncode,
        )

    if not partial.is_file() or partial.stat().st_size == 0:
        partial.unlink(missing_ok=True)
        raise EncodingError("ffmpeg produced no output file", stderr=stderr, returncode=0)

    if stderr:
        logger.debug(f"ffmpeg: {stderr}")

    os.replace(partial, output_path)
    return output_path


def check_ffmpeg_available(ffmpeg_path: Optional[str] = None) -> bool:
    """
    Check if ffmpeg is installed and runs.

    Logs platform-specific installation instructions if not found.

    Returns:
        True if ffmpeg is available
    """
    executable = get_ffmpeg_executable(ffmpeg_path)

    if executable is None:
        logger.warning("ffmpeg not found - slideshows cannot be encoded")
        logger.info(get_ffmpeg_install_instructions())
        return False

    try:
        result = subprocess.run(
            [executable, '-version'],
            capture_output=True,
            timeout=5
        )
        if result.returncode == 0:
            logger.debug(f"ffmpeg found at: {executable}")
            return True
        else:
            logger.warning(f"ffmpeg found but not working: {executable}")
            return False
    except (OSError, subprocess.TimeoutExpired):
        logger.warning("ffmpeg check failed")
        return False


def probe_video(
    video_path: Union[str, Path],
    ffmpeg_path: Optional[str] = None,
    timeout: float = 30
) -> VideoInfo:
    """
    Inspect a video with ffprobe.

    Args:
        video_path: Video file
        ffmpeg_path: Optional configured ffmpeg, its sibling ffprobe is preferred
        timeout: Limit in seconds for the ffprobe run

    Returns:
        VideoInfo with duration, size, codec and audio presence

    Raises:
        EncodingError: If ffprobe is missing or cannot read the file
    """
    executable = get_ffprobe_executable(ffmpeg_path)
    if executable is None:
        raise EncodingError(f"ffprobe not found\n{get_ffmpeg_install_instructions()}")

    cmd = [
        executable,
        '-v', 'error',
        '-print_format', 'json',
        '-show_format',
        '-show_streams',
        str(video_path),
    ]

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise EncodingError(f"ffprobe failed: {e}") from e

    if result.returncode != 0:
        raise EncodingError(
            f"ffprobe exited with status {result.returncode}",
            stderr=_stderr_tail(result.stderr),
            returncode=result.returncode,
        )

    data = json.loads(result.stdout or "{}")
    streams = data.get("streams", [])
    video = next((s for s in streams if s.get("codec_type") == "video"), None)
    if video is None:
        raise EncodingError(f"No video stream in {video_path}")

    frames = video.get("nb_frames")

    return VideoInfo(
        duration=float(data.get("format", {}).get("duration", 0.0)),
        width=int(video["width"]),
        height=int(video["height"]),
        video_codec=video.get("codec_name"),
        has_audio=any(s.get("codec_type") == "audio" for s in streams),
        frame_count=int(frames) if frames and str(frames).isdigit() else None,
    )
