"""Tests for the per-pixel derivation operators."""

import numpy as np
import pytest

from logo_kit.derive.operators import BLACK, WHITE, invert, key_out_background, recolor
from logo_kit.pixels.buffer import PixelBuffer


@pytest.fixture
def mixed_buffer() -> PixelBuffer:
    """Opaque, translucent and fully transparent pixels side by side."""
    pixels = np.array(
        [
            [[255, 255, 255, 255], [250, 240, 235, 255], [200, 30, 30, 255]],
            [[12, 34, 56, 128], [90, 80, 70, 0], [255, 255, 255, 0]],
        ],
        dtype=np.uint8,
    )
    return PixelBuffer(pixels)


def test_invert_preserves_alpha(mixed_buffer) -> None:
    """The alpha channel survives inversion untouched."""
    result = invert(mixed_buffer)
    assert np.array_equal(result.pixels[:, :, 3], mixed_buffer.pixels[:, :, 3])


def test_invert_is_difference_against_white(mixed_buffer) -> None:
    """Each colour channel becomes 255 minus its value."""
    result = invert(mixed_buffer)
    assert result.get_pixel(2, 0) == (55, 225, 225, 255)
    assert result.get_pixel(0, 0) == (0, 0, 0, 255)
    expected = 255 - mixed_buffer.pixels[:, :, :3].astype(int)
    assert np.array_equal(result.pixels[:, :, :3], expected)


def test_invert_changes_visible_colour(mixed_buffer) -> None:
    """Visible non-gray pixels differ in at least one channel."""
    result = invert(mixed_buffer)
    for x, y in [(1, 0), (2, 0), (0, 1)]:
        assert result.get_pixel(x, y)[:3] != mixed_buffer.get_pixel(x, y)[:3]


def test_recolor_black(mixed_buffer) -> None:
    """Visible pixels turn black; transparent pixels are copied as-is."""
    result = recolor(mixed_buffer, BLACK)
    visible = mixed_buffer.pixels[:, :, 3] > 0
    assert np.all(result.pixels[visible][:, :3] == 0)
    assert np.array_equal(result.pixels[~visible], mixed_buffer.pixels[~visible])
    assert np.array_equal(result.pixels[:, :, 3], mixed_buffer.pixels[:, :, 3])


def test_recolor_white(mixed_buffer) -> None:
    """Translucent pixels count as visible."""
    result = recolor(mixed_buffer, WHITE)
    assert result.get_pixel(0, 1) == (255, 255, 255, 128)
    assert result.get_pixel(1, 1) == (90, 80, 70, 0)


def test_recolor_rejects_bad_colour(mixed_buffer) -> None:
    """Colours must be RGB triples in range."""
    with pytest.raises(ValueError):
        recolor(mixed_buffer, (0, 0, 300))
    with pytest.raises(ValueError):
        recolor(mixed_buffer, (0, 0))


def test_key_out_white_background(mixed_buffer) -> None:
    """Pixels within tolerance of the corner colour become transparent."""
    result = key_out_background(mixed_buffer, tolerance=30)
    assert result.get_pixel(0, 0)[3] == 0
    # within 30 of white on every channel
    assert result.get_pixel(1, 0) == (250, 240, 235, 0)
    # red is more than 30 away on two channels
    assert result.get_pixel(2, 0) == (200, 30, 30, 255)
    assert result.get_pixel(0, 1) == (12, 34, 56, 128)


def test_key_out_threshold_is_strict() -> None:
    """A channel exactly tolerance away is kept."""
    buffer = PixelBuffer(np.array([[[255, 255, 255, 255], [225, 255, 255, 255]]], dtype=np.uint8))
    result = key_out_background(buffer, tolerance=30)
    assert result.get_pixel(1, 0)[3] == 255
    assert key_out_background(buffer, tolerance=31).get_pixel(1, 0)[3] == 0


def test_key_out_property_grid() -> None:
    """Every pixel follows the per-channel rule against a white reference."""
    rng = np.random.default_rng(11)
    pixels = rng.integers(180, 256, size=(20, 20, 4), dtype=np.uint8)
    pixels[0, 0] = (255, 255, 255, 255)
    buffer = PixelBuffer(pixels)
    result = key_out_background(buffer, tolerance=30)
    near = np.all(np.abs(pixels[:, :, :3].astype(int) - 255) < 30, axis=2)
    assert np.all(result.pixels[near][:, 3] == 0)
    assert np.array_equal(result.pixels[~near], pixels[~near])


def test_key_out_foreground_corner() -> None:
    """A foreground-coloured corner keys out the foreground instead."""
    pixels = np.zeros((4, 4, 4), dtype=np.uint8)
    pixels[:, :] = (255, 255, 255, 255)
    pixels[0, 0] = (200, 30, 30, 255)
    pixels[2, 2] = (205, 35, 25, 255)
    result = key_out_background(PixelBuffer(pixels), tolerance=30)
    assert result.get_pixel(2, 2)[3] == 0
    assert result.get_pixel(1, 1)[3] == 255


def test_key_out_rejects_bad_tolerance(mixed_buffer) -> None:
    """Tolerance is a channel distance within 0..256."""
    with pytest.raises(ValueError):
        key_out_background(mixed_buffer, tolerance=-1)


def test_operators_leave_input_untouched(mixed_buffer) -> None:
    """No operator mutates the buffer it is given."""
    before = mixed_buffer.pixels.copy()
    invert(mixed_buffer)
    recolor(mixed_buffer, BLACK)
    key_out_background(mixed_buffer)
    assert np.array_equal(mixed_buffer.pixels, before)
