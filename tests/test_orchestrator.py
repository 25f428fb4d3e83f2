"""Tests for the pipeline orchestrator."""

import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from slideshow.core.canvas import CanvasSpec
from slideshow.core.exceptions import (
    ConversionError,
    EncodingError,
    MetadataError,
    NoImagesError,
    ValidationError,
)
from slideshow.pipeline import (
    PipelineState,
    SlideshowConfig,
    generate_slideshow,
    run_slideshow_pipeline,
)


@pytest.fixture
def three_images(make_image, tmp_path):
    images_dir = tmp_path / "images"
    return [
        make_image("a.jpg", size=(800, 600), directory=images_dir),
        make_image("b.png", size=(600, 450), directory=images_dir),
        make_image("c.webp", size=(1000, 750), directory=images_dir),
    ]


def test_empty_list_fails_before_any_io(monkeypatch, tmp_path):
    def must_not_run(*args, **kwargs):
        raise AssertionError("metadata extraction ran for an empty list")

    monkeypatch.setattr("slideshow.pipeline.stages.extract_metadata", must_not_run)
    log_file = tmp_path / "session.log"

    result = run_slideshow_pipeline([], tmp_path / "out.mp4", SlideshowConfig(log_file=log_file))

    assert result.state is PipelineState.FAILED
    assert result.failed_stage is PipelineState.VALIDATE
    assert isinstance(result.error, NoImagesError)
    assert str(result.error) == "No images selected."
    assert not log_file.exists()


def test_unsupported_output_extension(three_images, tmp_path):
    result = run_slideshow_pipeline(three_images, tmp_path / "out.gif")

    assert result.failed_stage is PipelineState.VALIDATE
    assert isinstance(result.error, ValidationError)


def test_missing_output_directory(three_images, tmp_path):
    result = run_slideshow_pipeline(three_images, tmp_path / "nope" / "out.mp4")

    assert isinstance(result.error, ValidationError)


def test_full_run(fake_ffmpeg, three_images, tmp_path):
    ffmpeg = fake_ffmpeg("ok")
    output = tmp_path / "feed.mp4"
    config = SlideshowConfig(ffmpeg_path=str(ffmpeg.path), max_workers=2)

    result = run_slideshow_pipeline(three_images, output, config)

    assert result.ok
    assert result.state is PipelineState.DONE
    assert result.output_path == output
    assert result.canvas == CanvasSpec(600, 602, 452)
    assert result.frame_count == 3
    assert output.read_bytes() == b"video"

    args = ffmpeg.args
    assert args[args.index("-vf") + 1] == "scale=600:-1,pad=602:452:1:-1:black,format=yuv420p"
    assert args[args.index("-frames:v") + 1] == "3"

    images_dir = three_images[0].parent
    assert sorted(p.name for p in images_dir.glob("[0-9]*.jpg")) == ["1.jpg", "2.jpg", "3.jpg"]


def test_accepts_upload_records(fake_ffmpeg, three_images, tmp_path):
    ffmpeg = fake_ffmpeg("ok")
    records = [
        {"path": str(p), "originalname": p.name, "mimetype": "image/*", "size": p.stat().st_size}
        for p in three_images
    ]

    result = run_slideshow_pipeline(records, tmp_path / "feed.mp4",
                                    SlideshowConfig(ffmpeg_path=str(ffmpeg.path)))

    assert result.ok


def test_work_dir_leaves_images_alone(fake_ffmpeg, three_images, tmp_path):
    ffmpeg = fake_ffmpeg("ok")
    work_dir = tmp_path / "frames"
    config = SlideshowConfig(ffmpeg_path=str(ffmpeg.path), work_dir=work_dir)

    result = run_slideshow_pipeline(three_images[1:], tmp_path / "feed.mp4", config)

    assert result.ok
    assert all(p.exists() for p in three_images[1:])
    assert sorted(p.name for p in work_dir.iterdir()) == ["1.jpg", "2.jpg"]


def test_unreadable_image_fails_extraction(fake_ffmpeg, three_images, tmp_path):
    ffmpeg = fake_ffmpeg("ok")
    bogus = three_images[0].parent / "notes.png"
    bogus.write_text("hello")

    result = run_slideshow_pipeline(
        [three_images[0], bogus], tmp_path / "feed.mp4",
        SlideshowConfig(ffmpeg_path=str(ffmpeg.path)),
    )

    assert result.failed_stage is PipelineState.EXTRACT
    assert isinstance(result.error, MetadataError)
    assert result.error.path == bogus
    assert result.canvas is None
    assert not ffmpeg.called


def test_conversion_failure_skips_encoder(fake_ffmpeg, make_image, make_corrupt_png, tmp_path):
    ffmpeg = fake_ffmpeg("ok")
    images = [make_image("a.jpg"), make_corrupt_png("b.png"), make_image("c.png")]
    output = tmp_path / "feed.mp4"

    result = run_slideshow_pipeline(images, output, SlideshowConfig(ffmpeg_path=str(ffmpeg.path)))

    assert result.failed_stage is PipelineState.NORMALIZE
    assert isinstance(result.error, ConversionError)
    assert result.error.path == images[1]
    assert result.canvas is not None
    assert not ffmpeg.called
    assert not output.exists()


def test_encoder_failure(fake_ffmpeg, three_images, tmp_path):
    ffmpeg = fake_ffmpeg("fail")
    output = tmp_path / "feed.mp4"

    result = run_slideshow_pipeline(three_images, output, SlideshowConfig(ffmpeg_path=str(ffmpeg.path)))

    assert result.failed_stage is PipelineState.ENCODE
    assert isinstance(result.error, EncodingError)
    assert not output.exists()


def test_session_log(fake_ffmpeg, three_images, tmp_path):
    ffmpeg = fake_ffmpeg("ok")
    log_file = tmp_path / "logs" / "session.log"
    config = SlideshowConfig(ffmpeg_path=str(ffmpeg.path), log_file=log_file)

    run_slideshow_pipeline(three_images, tmp_path / "feed.mp4", config)

    text = log_file.read_text()
    assert "SLIDESHOW PIPELINE" in text
    assert "Canvas: 602x452" in text
    assert "SUCCESS" in text


def test_generate_slideshow_returns_path(fake_ffmpeg, three_images, tmp_path):
    ffmpeg = fake_ffmpeg("ok")
    output = tmp_path / "feed.mp4"

    assert generate_slideshow(three_images, output, SlideshowConfig(ffmpeg_path=str(ffmpeg.path))) == output


def test_generate_slideshow_raises(tmp_path):
    with pytest.raises(NoImagesError):
        generate_slideshow([], tmp_path / "feed.mp4")


def test_config_validation():
    with pytest.raises(ValidationError):
        SlideshowConfig(jpeg_quality=0)
    with pytest.raises(ValidationError):
        SlideshowConfig(max_workers=0)
    with pytest.raises(ValidationError):
        SlideshowConfig(log_level="LOUD")
    assert SlideshowConfig(log_level="debug").log_level == "DEBUG"


def test_broken_chunk_mid_batch_fails_normalize(fake_ffmpeg, make_image, make_broken_chunk_png, tmp_path):
    ffmpeg = fake_ffmpeg("ok")
    images = [make_image("a.jpg"), make_broken_chunk_png("b.png"), make_image("c.png")]
    output = tmp_path / "feed.mp4"

    result = run_slideshow_pipeline(images, output, SlideshowConfig(ffmpeg_path=str(ffmpeg.path)))

    assert result.state is PipelineState.FAILED
    assert result.failed_stage is PipelineState.NORMALIZE
    assert isinstance(result.error, ConversionError)
    assert result.error.path == images[1]
    assert not ffmpeg.called
    assert not output.exists()


def session_handlers():
    return [
        handler
        for name, logger in logging.Logger.manager.loggerDict.items()
        if name.startswith("slideshow_session") and isinstance(logger, logging.Logger)
        for handler in logger.handlers
    ]


@pytest.mark.parametrize("mode", ["ok", "fail"])
def test_session_log_closed_after_run(fake_ffmpeg, three_images, tmp_path, mode):
    ffmpeg = fake_ffmpeg(mode)
    log_file = tmp_path / "session.log"
    config = SlideshowConfig(ffmpeg_path=str(ffmpeg.path), log_file=log_file)

    run_slideshow_pipeline(three_images, tmp_path / "feed.mp4", config)

    assert session_handlers() == []
    assert "SLIDESHOW PIPELINE" in log_file.read_text()


def test_concurrent_runs_keep_their_own_session_log(fake_ffmpeg, make_image, tmp_path):
    ffmpeg = fake_ffmpeg("ok")

    def run(job):
        job_dir = tmp_path / job
        image = make_image(f"{job}.png", directory=job_dir)
        config = SlideshowConfig(
            ffmpeg_path=str(ffmpeg.path),
            work_dir=job_dir / "frames",
            log_file=job_dir / "session.log",
        )
        return run_slideshow_pipeline([image], job_dir / "feed.mp4", config)

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(run, ["job1", "job2"]))

    assert all(result.ok for result in results)
    for job, other in (("job1", "job2"), ("job2", "job1")):
        text = (tmp_path / job / "session.log").read_text()
        assert f"{job}.png" in text
        assert f"{other}.png" not in text
