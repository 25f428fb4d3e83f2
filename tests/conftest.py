"""Shared fixtures for the slideshow test suite."""

import logging
import os
import stat
import sys
from pathlib import Path

import pytest
from PIL import Image


@pytest.fixture(autouse=True)
def reset_loggers():
    """Drop handlers installed by setup_logger() so tests do not leak streams."""
    yield
    names = [
        name for name in logging.Logger.manager.loggerDict
        if name == "slideshow" or name.startswith("slideshow_session")
    ]
    for name in names:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        logger.propagate = True


@pytest.fixture
def make_image(tmp_path):
    """
    Factory writing a solid-color image with Pillow.

    The format is inferred from the extension unless ``fmt`` is given.
    """

    def _make(name, size=(80, 60), color=None, mode="RGB", fmt=None, directory=None):
        directory = Path(directory) if directory is not None else tmp_path
        directory.mkdir(parents=True, exist_ok=True)

        if color is None:
            color = (200, 40, 40, 255) if mode == "RGBA" else (200, 40, 40)
            if mode in ("L", "P"):
                color = 120

        path = directory / name
        Image.new(mode, size, color).save(path, format=fmt)
        return path

    return _make


@pytest.fixture
def make_corrupt_png(tmp_path):
    """Factory writing a PNG whose header parses but whose pixel data is cut short."""

    def _make(name, size=(64, 64), directory=None):
        directory = Path(directory) if directory is not None else tmp_path
        directory.mkdir(parents=True, exist_ok=True)

        path = directory / name
        noise = Image.frombytes("RGB", size, os.urandom(size[0] * size[1] * 3))
        noise.save(path, format="PNG")

        data = path.read_bytes()
        path.write_bytes(data[: len(data) // 2])
        return path

    return _make


@pytest.fixture
def make_broken_chunk_png(tmp_path):
    """
    Factory writing a PNG whose second IDAT chunk has a garbage chunk type.

    The header and first chunk are intact, so the file opens and reports its
    size; Pillow only fails once decoding reaches the damaged chunk.
    """

    def _make(name, size=(256, 256), directory=None):
        directory = Path(directory) if directory is not None else tmp_path
        directory.mkdir(parents=True, exist_ok=True)

        path = directory / name
        # Incompressible noise spreads the pixel data over several IDAT chunks
        noise = Image.frombytes("RGB", size, os.urandom(size[0] * size[1] * 3))
        noise.save(path, format="PNG")

        data = bytearray(path.read_bytes())
        first = data.index(b"IDAT")
        second = data.index(b"IDAT", first + 4)
        data[second:second + 4] = b"\x01\x02\x03\x04"
        path.write_bytes(bytes(data))
        return path

    return _make


FAKE_FFMPEG = """#!/bin/sh
if [ "$1" = "-version" ]; then
    echo "ffmpeg version fake"
    exit 0
fi
for arg in "$@"; do out="$arg"; done
printf '%s\\n' "$@" > "{args_file}"
{body}
"""

FAKE_BODIES = {
    "ok": "printf 'video' > \"$out\"\nexit 0",
    "fail": "echo 'Invalid data found when processing input' >&2\nexit 1",
    "silent": "exit 0",
    "hang": "exec sleep 5",
}


class FakeFFmpeg:
    """A shell script standing in for ffmpeg, recording its arguments."""

    def __init__(self, path: Path, args_file: Path):
        self.path = path
        self.args_file = args_file

    @property
    def called(self) -> bool:
        return self.args_file.exists()

    @property
    def args(self) -> list:
        return self.args_file.read_text().splitlines()


@pytest.fixture
def fake_ffmpeg(tmp_path):
    """Factory for fake ffmpeg executables: mode is ok, fail, silent or hang."""
    if sys.platform == "win32":
        pytest.skip("fake ffmpeg is a POSIX shell script")

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def _make(mode="ok"):
        args_file = bin_dir / f"{mode}.args"
        script = bin_dir / f"ffmpeg-{mode}"
        script.write_text(FAKE_FFMPEG.format(args_file=args_file, body=FAKE_BODIES[mode]))
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return FakeFFmpeg(script, args_file)

    return _make
