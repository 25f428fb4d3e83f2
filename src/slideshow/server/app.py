"""
Upload Server
=============

FastAPI application around the slideshow pipeline.

``POST /convert_images_to_slideshow`` takes a multipart batch of images
(field ``imagefiles``), stages them in a fresh temporary directory, runs the
pipeline into ``{public_dir}/{output_name}`` and always removes the staging
directory afterwards. The produced video is served statically from ``/``.
"""

import shutil
import tempfile
import threading
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, File, UploadFile
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from slideshow import __version__
from slideshow.pipeline import run_slideshow_pipeline
from slideshow.server.config import ServerConfig
from slideshow.utils.logging import get_logger

logger = get_logger(__name__)


def stage_uploads(uploads: List[UploadFile], staging_dir: Path) -> List[Path]:
    """
    Write uploaded files into ``staging_dir``, keeping upload order.

    Filenames are reduced to their basename and prefixed with the upload
    position, so repeated names and names like ``1.jpg`` never clash with each
    other or with the numbered frame sequence.

    Returns:
        Staged paths, in upload order
    """
    staged = []

    for index, upload in enumerate(uploads, start=1):
        name = Path(upload.filename or "upload").name
        dest = staging_dir / f"{index:04d}-{name}"

        with dest.open("wb") as out:
            shutil.copyfileobj(upload.file, out)

        staged.append(dest)

    return staged


def create_app(config: Optional[ServerConfig] = None) -> FastAPI:
    """
    Build the upload server.

    Args:
        config: Optional ServerConfig (read from the environment otherwise)

    Returns:
        FastAPI application
    """
    config = config or ServerConfig.from_env()
    config.public_dir.mkdir(parents=True, exist_ok=True)

    app = FastAPI(title="Slideshow", version=__version__)
    app.state.config = config

    # Every run writes the same output file
    run_lock = threading.Lock()

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.post("/convert_images_to_slideshow")
    def convert_images_to_slideshow(
        imagefiles: Optional[List[UploadFile]] = File(default=None),
    ):
        uploads = [f for f in (imagefiles or []) if f.filename]

        if not uploads:
            return JSONResponse({"error": "No image files provided."}, status_code=400)

        logger.info(f"Received {len(uploads)} image(s)")

        with tempfile.TemporaryDirectory(prefix="slideshow-", dir=config.tmp_root) as tmp:
            staging_dir = Path(tmp)

            try:
                staged = stage_uploads(uploads, staging_dir)
            except OSError as e:
                logger.error(f"Failed to stage uploads: {e}")
                return JSONResponse({"error": f"Failed to store uploads: {e}"}, status_code=500)

            try:
                with run_lock:
                    result = run_slideshow_pipeline(
                        staged,
                        config.output_path,
                        replace(config.pipeline, work_dir=staging_dir),
                    )
            except Exception as e:
                logger.exception("Unexpected error while building the slideshow")
                return JSONResponse({"error": f"Unexpected error: {e}"}, status_code=500)

        if not result.ok:
            return JSONResponse({"error": str(result.error)}, status_code=500)

        return {"msg": "Slideshow created.", "video": f"/{config.output_name}"}

    # Mounted last so it does not shadow the API routes
    app.mount("/", StaticFiles(directory=config.public_dir, check_dir=False), name="public")

    return app
