"""High-level pipeline orchestration.

Contains configuration, the per-stage steps and the public entry point.
"""

from .config import SlideshowConfig
from .orchestrator import (
    PipelineResult,
    PipelineState,
    generate_slideshow,
    run_slideshow_pipeline,
)

__all__ = [
    'SlideshowConfig',
    'PipelineResult',
    'PipelineState',
    'generate_slideshow',
    'run_slideshow_pipeline',
]
