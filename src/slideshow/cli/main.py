"""
Command-Line Interface
======================

Single responsibility: Provide a user-friendly CLI for building slideshows
and running the upload server.
"""

import shutil
import sys
import tempfile
from pathlib import Path

import click

from slideshow import __version__
from slideshow.core.exceptions import SlideshowError
from slideshow.encoding.ffmpeg import check_ffmpeg_available
from slideshow.pipeline import SlideshowConfig, run_slideshow_pipeline
from slideshow.utils.logging import get_logger, setup_logger
from slideshow.utils.platform_utils import get_ffmpeg_install_instructions

logger = get_logger(__name__)


def stage_files(images, work_dir: Path) -> list:
    """
    Copy images into ``work_dir`` so the pipeline never renames user files.

    Copies are prefixed with their position, keeping order and avoiding
    clashes between equal basenames from different folders.
    """
    staged = []
    for index, image in enumerate(images, start=1):
        dest = work_dir / f"{index:04d}-{Path(image).name}"
        shutil.copy2(image, dest)
        staged.append(dest)
    return staged


@click.command()
@click.argument('images', nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    '-o', '--output',
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path('slideshow.mp4'),
    show_default=True,
    help='Output video path (.mp4, .m4v, .mov or .mkv)'
)
@click.option(
    '--work-dir',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Directory for the numbered frames (default: a temporary directory)'
)
@click.option(
    '--in-place',
    is_flag=True,
    help='Rename/convert the images inside their own directory instead of copying them'
)
@click.option(
    '--workers',
    type=click.IntRange(min=1),
    default=None,
    help='Parallel workers for metadata reads and conversions'
)
@click.option(
    '--quality',
    type=click.IntRange(1, 95),
    default=80,
    show_default=True,
    help='JPEG quality for images converted from other formats'
)
@click.option(
    '--remove-sources',
    is_flag=True,
    help='Delete non-JPEG originals after converting them'
)
@click.option(
    '--ffmpeg',
    type=str,
    default=None,
    help='Path to ffmpeg executable (default: auto-detect)'
)
@click.option(
    '--timeout',
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help='Abort encoding after this many seconds'
)
@click.option(
    '-q', '--quiet',
    is_flag=True,
    help='Suppress output'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    help='Logging level (default: INFO)'
)
@click.option(
    '--log-file',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Write a DEBUG-level session log to this file'
)
def create(images, output, work_dir, in_place, workers, quality, remove_sources,
           ffmpeg, timeout, quiet, log_level, log_file):
    """
    Build a slideshow video from IMAGES, 3 seconds per image.

    Images are shown in the order given. They are scaled to the narrowest
    width and padded onto a shared black canvas.

    \b
    Examples:
        # Three photos into a 9 second video
        slideshow create a.jpg b.png c.webp -o feed.mp4

        # Keep the numbered frames for inspection
        slideshow create photos/*.jpg --work-dir frames/ --log-level DEBUG
    """
    verbose = not quiet
    setup_logger(verbose=verbose, log_level=log_level.upper())

    if images and not check_ffmpeg_available(ffmpeg):
        click.secho("\n✗ ffmpeg not found", fg='red', bold=True)
        click.echo()
        click.echo(get_ffmpeg_install_instructions())
        sys.exit(1)

    try:
        settings = {
            'jpeg_quality': quality,
            'remove_sources': remove_sources,
            'ffmpeg_path': ffmpeg,
            'encoder_timeout': timeout,
            'log_level': log_level.upper(),
            'log_file': log_file,
        }
        if workers is not None:
            settings['max_workers'] = workers
        config = SlideshowConfig(**settings)
    except SlideshowError as e:
        click.secho(f"\n✗ Configuration error: {e}", fg='red', bold=True)
        sys.exit(1)

    try:
        if in_place:
            config.work_dir = work_dir
            result = run_slideshow_pipeline(list(images), output, config)
        else:
            with tempfile.TemporaryDirectory(prefix='slideshow-') as tmp:
                config.work_dir = work_dir or Path(tmp)
                config.work_dir.mkdir(parents=True, exist_ok=True)
                staged = stage_files(images, config.work_dir)
                result = run_slideshow_pipeline(staged, output, config)
    except KeyboardInterrupt:
        click.echo()
        click.secho("\n✗ Interrupted by user", fg='yellow')
        sys.exit(130)
    except OSError as e:
        click.secho(f"\n✗ Error: {e}", fg='red', bold=True)
        sys.exit(1)

    if not result.ok:
        click.secho(f"✗ Error: {result.error}", fg='red', bold=True)
        sys.exit(1)

    if verbose:
        canvas = result.canvas
        click.secho(
            f"✓ {result.frame_count} image(s), {canvas.pad_width}x{canvas.pad_height} "
            f"-> {result.output_path}",
            fg='green', bold=True
        )


@click.command()
@click.option('--host', type=str, default=None, help='Bind address (default: 127.0.0.1)')
@click.option('--port', type=click.IntRange(1, 65535), default=None, help='Bind port (default: 3000)')
@click.option(
    '--public-dir',
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help='Directory served statically, the video is written here (default: public/)'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    help='Logging level (default: INFO)'
)
def serve(host, port, public_dir, log_level):
    """
    Run the upload server.

    POST images as multipart field 'imagefiles' to
    /convert_images_to_slideshow; the video is then served from
    /curation-feed.mp4.
    """
    import uvicorn

    from slideshow.server import ServerConfig, create_app

    setup_logger(verbose=True, log_level=log_level.upper())

    overrides = {}
    if host is not None:
        overrides['host'] = host
    if port is not None:
        overrides['port'] = port
    if public_dir is not None:
        overrides['public_dir'] = public_dir

    try:
        config = ServerConfig.from_env(**overrides)
    except (SlideshowError, ValueError) as e:
        click.secho(f"\n✗ Configuration error: {e}", fg='red', bold=True)
        sys.exit(1)

    check_ffmpeg_available(config.pipeline.ffmpeg_path)

    click.secho(f"Server is running at http://{config.host}:{config.port}", fg='cyan', bold=True)
    uvicorn.run(create_app(config), host=config.host, port=config.port, log_level=log_level.lower())


@click.group()
@click.version_option(version=__version__, prog_name='slideshow')
def cli():
    """
    Slideshow - Turn still images into a fixed-cadence video.

    \b
    Examples:
        slideshow create a.jpg b.png c.gif -o feed.mp4
        slideshow serve --port 3000

    \b
    For more help on a specific command:
        slideshow create --help
        slideshow serve --help
    """
    pass


cli.add_command(create)
cli.add_command(serve)


def main():
    """Entry point for console_scripts."""
    cli()


if __name__ == '__main__':
    main()
