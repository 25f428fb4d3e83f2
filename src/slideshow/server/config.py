"""
Server Configuration
====================

Settings of the upload server, read from ``SLIDESHOW_*`` environment
variables when built with ``ServerConfig.from_env()``.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from slideshow.core.exceptions import ValidationError
from slideshow.core.validator import VIDEO_EXTENSIONS
from slideshow.pipeline.config import SlideshowConfig

DEFAULT_OUTPUT_NAME = "curation-feed.mp4"


@dataclass
class ServerConfig:
    """
    Configuration for the upload server.

    Attributes:
        public_dir: Directory served statically; the video is written here
        output_name: Filename of the produced video inside ``public_dir``
        tmp_root: Parent for per-request staging directories (default: system temp)
        host: Bind address for ``slideshow serve``
        port: Bind port for ``slideshow serve``
        pipeline: Settings forwarded to every pipeline run
    """

    public_dir: Path = Path("public")
    output_name: str = DEFAULT_OUTPUT_NAME
    tmp_root: Optional[Path] = None
    host: str = "127.0.0.1"
    port: int = 3000
    pipeline: SlideshowConfig = field(default_factory=SlideshowConfig)

    def __post_init__(self):
        self.public_dir = Path(self.public_dir)
        if self.tmp_root is not None:
            self.tmp_root = Path(self.tmp_root)

        if Path(self.output_name).name != self.output_name:
            raise ValidationError(f"output_name must be a bare filename, got '{self.output_name}'")
        if Path(self.output_name).suffix.lower() not in VIDEO_EXTENSIONS:
            raise ValidationError(f"output_name must be a video file, got '{self.output_name}'")

        if not 0 < self.port < 65536:
            raise ValidationError(f"port must be in range [1, 65535], got {self.port}")

    @property
    def output_path(self) -> Path:
        return self.public_dir / self.output_name

    @classmethod
    def from_env(cls, **overrides) -> "ServerConfig":
        """
        Build a config from the environment.

        Variables:
            SLIDESHOW_PUBLIC_DIR, SLIDESHOW_OUTPUT_NAME, SLIDESHOW_TMP_ROOT,
            SLIDESHOW_HOST, SLIDESHOW_PORT, SLIDESHOW_FFMPEG,
            SLIDESHOW_JPEG_QUALITY, SLIDESHOW_LOG_LEVEL

        Keyword arguments take precedence over the environment.
        """
        env = os.environ
        values = {
            "public_dir": Path(env.get("SLIDESHOW_PUBLIC_DIR", "public")),
            "output_name": env.get("SLIDESHOW_OUTPUT_NAME", DEFAULT_OUTPUT_NAME),
            "tmp_root": env.get("SLIDESHOW_TMP_ROOT") or None,
            "host": env.get("SLIDESHOW_HOST", "127.0.0.1"),
            "port": int(env.get("SLIDESHOW_PORT", "3000")),
        }

        if "pipeline" not in overrides:
            values["pipeline"] = SlideshowConfig(
                ffmpeg_path=env.get("SLIDESHOW_FFMPEG") or None,
                jpeg_quality=int(env.get("SLIDESHOW_JPEG_QUALITY", "80")),
                log_level=env.get("SLIDESHOW_LOG_LEVEL", "INFO"),
            )

        values.update(overrides)
        return cls(**values)
