"""Monochrome framebuffer for the CHIP-8 virtual machine."""

from typing import Iterable
from .errors import BoundsError


DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32


class Display:
    """64x32 boolean pixels stored row-major in a flat list.

    Sprites are XORed onto the grid; every draw coordinate wraps on both
    axes. A draw reports a collision when it turns a set pixel off.
    """

    def __init__(self, width: int = DISPLAY_WIDTH, height: int = DISPLAY_HEIGHT):
        self.width = width
        self.height = height
        self._pixels: list[bool] = [False] * (width * height)

    def clear(self) -> None:
        self._pixels = [False] * (self.width * self.height)

    def get_pixel(self, x: int, y: int) -> bool:
        return self._pixels[y * self.width + x]

    def set_pixel(self, x: int, y: int, value: bool) -> bool:
        """XOR ``value`` into the pixel at wrapped (x, y).

        Returns True if the pixel was set and is now cleared.
        """
        offset = (y % self.height) * self.width + (x % self.width)
        current = self._pixels[offset]
        self._pixels[offset] = current ^ value
        return current and value

    def draw_byte(self, x: int, y: int, byte: int) -> bool:
        """Draw 8 horizontal pixels from ``byte``, most significant bit first."""
        collision = False
        for i in range(8):
            bit = bool((byte >> (7 - i)) & 1)
            collision |= self.set_pixel(x + i, y, bit)
        return collision

    def draw_sprite(self, x: int, y: int, rows: Iterable[int]) -> bool:
        """Draw consecutive sprite rows starting at (x, y)."""
        collision = False
        for offset, byte in enumerate(rows):
            collision |= self.draw_byte(x, y + offset, byte)
        return collision

    def pixels(self) -> list[bool]:
        """Return a row-major copy of the framebuffer."""
        return self._pixels.copy()

    def rows(self) -> list[list[bool]]:
        return [
            self._pixels[row * self.width:(row + 1) * self.width]
            for row in range(self.height)
        ]

    def load_pixels(self, pixels: Iterable[bool]) -> None:
        pixels = [bool(p) for p in pixels]
        if len(pixels) != self.width * self.height:
            raise BoundsError(
                f"Expected {self.width * self.height} pixels, got {len(pixels)}",
                index=len(pixels),
            )
        self._pixels = pixels

    def render_text(self, on: str = "#", off: str = ".") -> str:
        """Render the framebuffer as text, one line per row."""
        return "\n".join(
            "".join(on if p else off for p in row) for row in self.rows()
        )
