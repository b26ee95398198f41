"""Tests for the framebuffer and sprite drawing."""

import numpy as np
import pytest

from chip8vm.constants import DISPLAY_HEIGHT, DISPLAY_WIDTH
from chip8vm.display import Framebuffer

ZERO_GLYPH = [0xF0, 0x90, 0x90, 0x90, 0xF0]


def test_draw_sets_pixels_msb_first():
    fb = Framebuffer()
    assert fb.draw_sprite(0, 0, [0x80 | 0x01]) is False
    assert fb.pixels[0, 0] == 1
    assert fb.pixels[0, 7] == 1
    assert fb.pixels[0, 1:7].sum() == 0


def test_draw_twice_erases_and_collides():
    fb = Framebuffer()
    assert fb.draw_sprite(10, 5, ZERO_GLYPH) is False
    assert fb.pixels.sum() == 14
    assert fb.draw_sprite(10, 5, ZERO_GLYPH) is True
    assert fb.pixels.sum() == 0


def test_overlap_without_erasing_is_not_collision():
    fb = Framebuffer()
    fb.draw_sprite(0, 0, [0xF0])
    assert fb.draw_sprite(4, 0, [0xF0]) is False
    assert fb.pixels[0, :8].tolist() == [1] * 8


def test_clipped_at_right_and_bottom_edges():
    fb = Framebuffer()
    fb.draw_sprite(DISPLAY_WIDTH - 4, DISPLAY_HEIGHT - 2, [0xFF, 0xFF, 0xFF, 0xFF])
    assert fb.pixels.sum() == 4 * 2
    # nothing wrapped to the left column or top row
    assert fb.pixels[:, 0].sum() == 0
    assert fb.pixels[0, :].sum() == 0


@pytest.mark.parametrize("x, y", [(0, DISPLAY_HEIGHT), (DISPLAY_WIDTH, 0), (200, 200)])
def test_off_grid_start_draws_nothing(x, y):
    fb = Framebuffer()
    fb.pixels.fill(1)
    assert fb.draw_sprite(x, y, ZERO_GLYPH) is False
    assert fb.pixels.all()


def test_zero_height_sprite_is_noop():
    fb = Framebuffer()
    assert fb.draw_sprite(0, 0, []) is False
    assert fb.pixels.sum() == 0


def test_clear():
    fb = Framebuffer()
    fb.draw_sprite(0, 0, ZERO_GLYPH)
    fb.clear()
    assert fb.pixels.sum() == 0


def test_view_is_read_only():
    fb = Framebuffer()
    view = fb.view()
    assert view.shape == (DISPLAY_HEIGHT, DISPLAY_WIDTH)
    with pytest.raises(ValueError):
        view[0, 0] = 1
    fb.draw_sprite(0, 0, [0x80])
    assert view[0, 0] == 1


def test_as_text():
    fb = Framebuffer()
    fb.draw_sprite(0, 0, [0x80])
    lines = fb.as_text(on='#', off='.').splitlines()
    assert len(lines) == DISPLAY_HEIGHT
    assert lines[0] == '#' + '.' * (DISPLAY_WIDTH - 1)


def test_to_image_scales(tmp_path):
    fb = Framebuffer()
    fb.draw_sprite(0, 0, [0x80])
    image = fb.to_image(scale=2)
    assert image.size == (DISPLAY_WIDTH * 2, DISPLAY_HEIGHT * 2)
    pixels = np.asarray(image)
    assert pixels[:2, :2].tolist() == [[255, 255], [255, 255]]
    assert pixels[0, 2] == 0

    path = tmp_path / "screen.png"
    fb.save_png(path, scale=1)
    assert path.read_bytes()[:8] == b'\x89PNG\r\n\x1a\n'


def test_to_image_rejects_bad_scale():
    with pytest.raises(ValueError):
        Framebuffer().to_image(scale=0)
