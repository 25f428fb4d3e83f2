"""Video encoding.

Filter chain construction and the ffmpeg invocation that turns a numbered
JPEG sequence into the slideshow video.
"""

from .filters import build_filter_chain, filter_steps
from .ffmpeg import (
    VideoInfo,
    build_ffmpeg_command,
    encode_slideshow,
    check_ffmpeg_available,
    probe_video,
)

__all__ = [
    "build_filter_chain",
    "filter_steps",
    "VideoInfo",
    "build_ffmpeg_command",
    "encode_slideshow",
    "check_ffmpeg_available",
    "probe_video",
]
