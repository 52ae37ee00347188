"""Pixel filter tests."""

from __future__ import annotations

import numpy as np
import pytest

from modules.pipelines import pixel_filters
from modules.pipelines.pixel_filters import PixelBuffer


def make_buffer(width: int = 5, height: int = 4, seed: int = 7) -> PixelBuffer:
    rng = np.random.default_rng(seed)
    data = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    return PixelBuffer(data)


def solid(rgb, alpha: int = 255, size=(4, 4)) -> PixelBuffer:
    width, height = size
    data = np.zeros((height, width, 4), dtype=np.uint8)
    data[..., :3] = rgb
    data[..., 3] = alpha
    return PixelBuffer(data)


def test_buffer_is_read_only_copy():
    source = np.zeros((2, 2, 4), dtype=np.uint8)
    buffer = PixelBuffer(source)
    source[0, 0, 0] = 99

    assert buffer.pixel(0, 0)[0] == 0
    with pytest.raises(ValueError):
        buffer.data[0, 0, 0] = 1


def test_buffer_rejects_non_rgba():
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros((2, 2, 3), dtype=np.uint8))
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros((2, 2, 4), dtype=np.float32))


def test_invert_twice_is_identity():
    buffer = make_buffer()
    assert pixel_filters.invert(pixel_filters.invert(buffer)) == buffer


def test_invert_keeps_alpha():
    buffer = make_buffer()
    inverted = pixel_filters.invert(buffer)
    assert np.array_equal(inverted.data[..., 3], buffer.data[..., 3])
    assert inverted.pixel(1, 1)[0] == 255 - buffer.pixel(1, 1)[0]


def test_grayscale_is_idempotent():
    once = pixel_filters.grayscale(make_buffer())
    assert pixel_filters.grayscale(once) == once


def test_grayscale_uses_luminance_weights():
    result = pixel_filters.grayscale(solid((100, 150, 200)))
    # 0.299*100 + 0.587*150 + 0.114*200 = 140.75
    assert result.pixel(0, 0) == (141, 141, 141, 255)


def test_sepia_clamps_bright_pixels():
    result = pixel_filters.sepia(solid((255, 255, 255)))
    assert result.pixel(0, 0) == (255, 255, 239, 255)


def test_vintage_formula():
    result = pixel_filters.vintage(solid((100, 100, 100)))
    assert result.pixel(0, 0) == (150, 110, 80, 255)


def test_crop_to_square_dimensions_and_content():
    buffer = make_buffer(width=7, height=4)
    cropped = pixel_filters.crop_to_square(buffer)

    assert cropped.size == (4, 4)
    # offset is ((7 - 4) // 2, 0)
    assert np.array_equal(cropped.data, buffer.data[0:4, 1:5])


def test_crop_to_square_tall_image():
    buffer = make_buffer(width=3, height=8)
    cropped = pixel_filters.crop_to_square(buffer)
    assert cropped.size == (3, 3)
    assert np.array_equal(cropped.data, buffer.data[2:5, 0:3])


def test_sharpen_leaves_border_unchanged():
    buffer = make_buffer(width=6, height=5)
    sharpened = pixel_filters.sharpen(buffer)

    assert np.array_equal(sharpened.data[0], buffer.data[0])
    assert np.array_equal(sharpened.data[-1], buffer.data[-1])
    assert np.array_equal(sharpened.data[:, 0], buffer.data[:, 0])
    assert np.array_equal(sharpened.data[:, -1], buffer.data[:, -1])


def test_sharpen_reads_from_source():
    data = np.full((3, 3, 4), 100, dtype=np.uint8)
    data[1, 1, :3] = 120
    result = pixel_filters.sharpen(PixelBuffer(data))
    # 5*120 - 4*100 = 200
    assert result.pixel(1, 1) == (200, 200, 200, 100)


def test_sharpen_on_flat_image_is_identity():
    buffer = solid((80, 90, 100), size=(5, 5))
    assert pixel_filters.sharpen(buffer) == buffer


def test_sharpen_small_image_unchanged():
    buffer = make_buffer(width=2, height=2)
    assert pixel_filters.sharpen(buffer) == buffer


def test_background_threshold_boundaries_are_kept():
    assert pixel_filters.remove_background_naive(solid((240, 240, 240))).pixel(0, 0)[3] == 255
    assert pixel_filters.remove_background_naive(solid((15, 15, 15))).pixel(0, 0)[3] == 255


def test_background_just_outside_thresholds_is_transparent():
    assert pixel_filters.remove_background_naive(solid((241, 241, 241))).pixel(0, 0)[3] == 0
    assert pixel_filters.remove_background_naive(solid((14, 14, 14))).pixel(0, 0)[3] == 0


def test_all_white_image_becomes_fully_transparent():
    result = pixel_filters.remove_background_naive(solid((255, 255, 255)))
    assert result.size == (4, 4)
    assert not result.data[..., 3].any()
    assert np.array_equal(result.data[..., :3], np.full((4, 4, 3), 255, dtype=np.uint8))


def test_apply_effect_dispatch_and_unknown():
    buffer = make_buffer()
    assert pixel_filters.apply_effect(buffer, "invert") == pixel_filters.invert(buffer)
    with pytest.raises(KeyError):
        pixel_filters.apply_effect(buffer, "posterize")


def test_effects_do_not_modify_input():
    buffer = make_buffer()
    snapshot = buffer.copy_array()
    for name in pixel_filters.EFFECTS:
        pixel_filters.apply_effect(buffer, name)
    assert np.array_equal(buffer.data, snapshot)
