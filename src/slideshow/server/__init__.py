"""HTTP upload server for the slideshow pipeline."""

from .app import create_app, stage_uploads
from .config import ServerConfig

__all__ = ["create_app", "stage_uploads", "ServerConfig"]
