"""Tests for canvas harmonization."""

from itertools import permutations
from pathlib import Path

import pytest

from slideshow.core.canvas import CanvasSpec, compute_canvas, scaled_height
from slideshow.core.metadata import ImageDescriptor, ImageFormat


def desc(width, height, name="img"):
    return ImageDescriptor(path=Path(f"{name}.png"), width=width, height=height, format=ImageFormat.PNG)


def test_reference_batch():
    canvas = compute_canvas([desc(800, 600), desc(600, 450), desc(1000, 750)])

    assert canvas == CanvasSpec(scale_width=600, pad_width=602, pad_height=452)


def test_scale_width_is_narrowest_image():
    descriptors = [desc(1920, 1080), desc(640, 480), desc(1280, 720)]

    assert compute_canvas(descriptors).scale_width == 640


def test_pad_width_adds_margin():
    for width in (1, 99, 640, 1921):
        assert compute_canvas([desc(width, 100)]).pad_width == width + 2


def test_pad_height_uses_tallest_scaled_image():
    # 400x800 portrait scaled to 400 wide stays 800 tall
    canvas = compute_canvas([desc(800, 600), desc(400, 800)])

    assert canvas.scale_width == 400
    assert canvas.pad_height == 802


def test_scaled_height_rounds_up():
    # 600 * 333 / 1000 = 199.8
    assert scaled_height(desc(1000, 333), 600) == 200
    # 2 * 2 / 3 = 1.33
    assert scaled_height(desc(3, 2), 2) == 2


def test_scaled_height_exact_for_narrowest_image():
    assert scaled_height(desc(600, 451), 600) == 451


def test_equal_widths_keep_original_heights():
    descriptors = [desc(500, 300), desc(500, 700), desc(500, 200)]
    canvas = compute_canvas(descriptors)

    assert canvas.scale_width == 500
    assert [scaled_height(d, 500) for d in descriptors] == [300, 700, 200]
    assert canvas.pad_height == 702


def test_order_does_not_matter():
    descriptors = [desc(800, 600), desc(601, 999), desc(1000, 333), desc(750, 750)]
    expected = compute_canvas(descriptors)

    for ordering in permutations(descriptors):
        assert compute_canvas(list(ordering)) == expected


def test_single_image_canvas_is_image_plus_margin():
    assert compute_canvas([desc(640, 480)]) == CanvasSpec(640, 642, 482)


@pytest.mark.parametrize("canvas, even, expected", [
    (CanvasSpec(600, 602, 452), True, (602, 452)),
    (CanvasSpec(601, 603, 451), True, (604, 452)),
    (CanvasSpec(601, 603, 451), False, (603, 451)),
])
def test_encoder_size(canvas, even, expected):
    assert canvas.encoder_size(even=even) == expected
