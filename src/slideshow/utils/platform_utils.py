"""
Platform-Specific Utilities
============================

Locate the external ffmpeg tools and explain how to install them.
"""

import platform
import shutil
from pathlib import Path
from typing import Optional

from slideshow.utils.logging import get_logger

logger = get_logger(__name__)


def _find_tool(name: str, explicit: Optional[str] = None) -> Optional[str]:
    if explicit:
        # An explicit path is honored as-is, or resolved through PATH
        if Path(explicit).is_file():
            return str(explicit)
        resolved = shutil.which(explicit)
        if resolved:
            return resolved
        logger.debug(f"{name} not found at configured path: {explicit}")
        return None

    resolved = shutil.which(name)
    if resolved:
        logger.debug(f"Found {name} at: {resolved}")
        return resolved

    logger.debug(f"{name} not found in PATH")
    return None


def get_ffmpeg_executable(explicit: Optional[str] = None) -> Optional[str]:
    """
    Locate ffmpeg.

    Args:
        explicit: Configured path or command name; PATH lookup otherwise

    Returns:
        Executable path, or None when ffmpeg cannot be found

    Example:
        >>> get_ffmpeg_executable("/opt/ffmpeg/bin/ffmpeg")
        '/opt/ffmpeg/bin/ffmpeg'
    """
    return _find_tool('ffmpeg', explicit)


def get_ffprobe_executable(ffmpeg_path: Optional[str] = None) -> Optional[str]:
    """
    Auto-detect ffprobe executable path.

    ffprobe ships with ffmpeg; when an ffmpeg path is configured, the
    sibling ``ffprobe`` in the same directory is tried first.
    """
    if ffmpeg_path:
        sibling = Path(ffmpeg_path).with_name('ffprobe' + Path(ffmpeg_path).suffix)
        if sibling.is_file():
            return str(sibling)
    return _find_tool('ffprobe')


_INSTALL_HINTS = {
    'Linux': [
        "Debian/Ubuntu: sudo apt install ffmpeg",
        "Fedora:        sudo dnf install ffmpeg-free",
        "Arch:          sudo pacman -S ffmpeg",
        "Alpine:        apk add ffmpeg",
    ],
    'Darwin': [
        "Homebrew:      brew install ffmpeg",
    ],
    'Windows': [
        "winget:        winget install Gyan.FFmpeg",
        "Chocolatey:    choco install ffmpeg",
        "Manual:        https://ffmpeg.org/download.html, then add bin/ to PATH",
    ],
}


def get_ffmpeg_install_instructions() -> str:
    """Installation hints for the current platform."""
    hints = _INSTALL_HINTS.get(platform.system())
    if not hints:
        return "Install ffmpeg (https://ffmpeg.org/download.html) and put it on PATH"
    return "Install ffmpeg:\n" + "\n".join(f"  {hint}" for hint in hints)
