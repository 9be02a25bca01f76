"""Tests for the Display module."""

import pytest
from chip8.display import Display, DISPLAY_WIDTH, DISPLAY_HEIGHT
from chip8.errors import BoundsError


def lit(display):
    return {
        (x, y)
        for y in range(DISPLAY_HEIGHT)
        for x in range(DISPLAY_WIDTH)
        if display.get_pixel(x, y)
    }


class TestDisplay:
    """Display module tests."""

    def test_starts_blank(self):
        """All pixels start off."""
        assert lit(Display()) == set()

    def test_draw_byte_msb_first(self):
        """Bit 7 lands in the leftmost column."""
        display = Display()
        collision = display.draw_byte(10, 3, 0b10000001)
        assert collision is False
        assert lit(display) == {(10, 3), (17, 3)}

    def test_draw_byte_wraps_horizontally(self):
        """Columns past 63 wrap to the left edge."""
        display = Display()
        display.draw_byte(60, 0, 0xFF)
        assert lit(display) == {(60, 0), (61, 0), (62, 0), (63, 0), (0, 0), (1, 0), (2, 0), (3, 0)}

    def test_draw_byte_wraps_vertically(self):
        """Rows past 31 wrap to the top."""
        display = Display()
        display.draw_byte(0, 33, 0x80)
        assert lit(display) == {(0, 1)}

    def test_draw_byte_wraps_large_start(self):
        """Starting coordinates are taken modulo the grid size."""
        display = Display()
        display.draw_byte(64 + 5, 32 + 2, 0x80)
        assert lit(display) == {(5, 2)}

    def test_collision_only_when_pixel_turns_off(self):
        """Collision requires a set pixel to be cleared."""
        display = Display()
        display.draw_byte(0, 0, 0b11000000)
        assert display.draw_byte(2, 0, 0b11000000) is False
        assert display.draw_byte(1, 0, 0b10000000) is True
        assert lit(display) == {(0, 0), (2, 0), (3, 0)}

    def test_zero_byte_never_collides(self):
        """Drawing zero bits leaves pixels and reports no collision."""
        display = Display()
        display.draw_byte(0, 0, 0xFF)
        assert display.draw_byte(0, 0, 0x00) is False
        assert len(lit(display)) == 8

    def test_draw_twice_cancels(self):
        """XOR drawing the same sprite twice restores the grid."""
        display = Display()
        display.draw_byte(30, 30, 0x0F)
        before = display.pixels()
        sprite = [0xF0, 0x90, 0x90, 0x90, 0xF0]
        assert display.draw_sprite(20, 10, sprite) is False
        assert display.draw_sprite(20, 10, sprite) is True
        assert display.pixels() == before

    def test_draw_sprite_rows(self):
        """Each sprite row lands one line below the previous."""
        display = Display()
        display.draw_sprite(0, 0, [0x80, 0x40])
        assert lit(display) == {(0, 0), (1, 1)}

    def test_clear(self):
        """Clear turns every pixel off."""
        display = Display()
        display.draw_sprite(5, 5, [0xFF] * 15)
        display.clear()
        assert lit(display) == set()

    def test_rows_and_pixels(self):
        """rows() and pixels() expose the row-major grid."""
        display = Display()
        display.draw_byte(0, 1, 0x80)
        assert len(display.pixels()) == DISPLAY_WIDTH * DISPLAY_HEIGHT
        assert display.pixels()[DISPLAY_WIDTH] is True
        rows = display.rows()
        assert len(rows) == DISPLAY_HEIGHT
        assert rows[1][0] is True

    def test_render_text(self):
        """Text rendering uses one line per row."""
        display = Display()
        display.draw_byte(0, 0, 0xA0)
        lines = display.render_text().splitlines()
        assert len(lines) == DISPLAY_HEIGHT
        assert lines[0].startswith("#.#.")
        assert set(lines[1]) == {"."}
        assert display.render_text(on="X", off=" ").splitlines()[0].startswith("X X ")

    def test_load_pixels(self):
        """A pixel image can be loaded back."""
        display = Display()
        display.draw_byte(3, 3, 0xFF)
        image = display.pixels()
        other = Display()
        other.load_pixels(image)
        assert other.pixels() == image

    def test_load_pixels_wrong_size(self):
        """Images of the wrong size are rejected."""
        with pytest.raises(BoundsError):
            Display().load_pixels([False] * 10)
