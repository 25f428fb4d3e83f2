"""Structured logging for the slideshow pipeline.

This module provides the single logging setup used by the library, the CLI
and the upload server. Modules obtain their logger with ``get_logger(__name__)``
and never print directly.
"""

import copy
import logging
import sys
from pathlib import Path
from typing import Optional, Union

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'


class ColoredFormatter(logging.Formatter):
    """Console formatter that colors the level name with ANSI codes.

    Colors are skipped when the stream is not a terminal, so piped CLI output
    and captured test output stay plain.
    """

    LEVEL_COLORS = {
        logging.DEBUG: '36',     # cyan
        logging.INFO: '32',      # green
        logging.WARNING: '33',   # yellow
        logging.ERROR: '31',     # red
        logging.CRITICAL: '35',  # magenta
    }

    def __init__(self, fmt: str = CONSOLE_FORMAT, use_color: bool = True):
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if not (self.use_color and color):
            return super().format(record)

        # The record is shared with the file handler
        record = copy.copy(record)
        record.levelname = f"\033[{color}m{record.levelname}\033[0m"
        return super().format(record)


def setup_logger(
    name: str = 'slideshow',
    verbose: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    log_level: str = "INFO"
) -> logging.Logger:
    """
    Configure logging for the slideshow package.

    The file handler (if any) always logs at DEBUG level, including the full
    ffmpeg stderr of every encode. The console handler respects ``log_level``
    and is only attached when ``verbose`` is set.

    Args:
        name: Logger name, 'slideshow' configures every module of the package
        verbose: Attach a console handler on stdout
        log_file: Optional session log, overwritten on each setup
        log_level: Console level, one of DEBUG, INFO, WARNING, ERROR

    Returns:
        Configured logger

    Example:
        >>> logger = setup_logger(log_level='DEBUG')
        >>> logger.info("Reading metadata for 3 images")
        INFO: Reading metadata for 3 images

    Notes:
        - Calling this again with the same name replaces the handlers
        - The logger does not propagate to the root logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    close_logger(logger)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    if verbose:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(getattr(logging, log_level.upper()))
        console.setFormatter(ColoredFormatter(use_color=sys.stdout.isatty()))
        logger.addHandler(console)

    return logger


def get_logger(name: str = 'slideshow') -> logging.Logger:
    """
    Get a logger by name.

    Module loggers are named after their module (``slideshow.core.metadata``)
    and so inherit the handlers ``setup_logger()`` installs on the
    ``slideshow`` parent. Without a prior setup call they fall back to
    Python's default logging behavior.
    """
    return logging.getLogger(name)


def close_logger(logger: logging.Logger) -> None:
    """Detach and close every handler of ``logger``, releasing open log files."""
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
