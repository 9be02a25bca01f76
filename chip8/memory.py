"""Memory model for the CHIP-8 virtual machine."""

from typing import Iterable
from .errors import BoundsError


MEMORY_SIZE = 0x1000
PROGRAM_START = 0x200
FONT_START = 0x000
GLYPH_SIZE = 5

# Canonical hexadecimal font, glyphs 0-F, five rows each.
FONT: tuple[int, ...] = (
    0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
    0x20, 0x60, 0x20, 0x20, 0x70,  # 1
    0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
    0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
    0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
    0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
    0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
    0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
    0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
    0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
    0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
    0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
    0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
    0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
    0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
    0xF0, 0x80, 0xF0, 0x80, 0x80,  # F
)


class Memory:
    """Flat byte-addressed memory with the font preloaded at 0x000."""

    def __init__(self, size: int = MEMORY_SIZE):
        self.size = size
        self._data: list[int] = [0] * size
        self._data[FONT_START:FONT_START + len(FONT)] = FONT

    def _check_bounds(self, addr: int) -> None:
        """Check if address is within valid range."""
        if addr < 0 or addr >= self.size:
            raise BoundsError(f"Memory address out of range: {addr:#05x}", index=addr)

    def read(self, addr: int) -> int:
        """Read byte from memory address."""
        self._check_bounds(addr)
        return self._data[addr]

    def write(self, addr: int, value: int) -> None:
        """Write byte (masked to 8 bits) to memory address."""
        self._check_bounds(addr)
        self._data[addr] = value & 0xFF

    def read_word(self, addr: int) -> int:
        """Read a big-endian 16-bit word."""
        return (self.read(addr) << 8) | self.read(addr + 1)

    def load(self, data: Iterable[int], start: int = PROGRAM_START) -> int:
        """Copy bytes verbatim starting at ``start``.

        Returns the number of bytes written.
        """
        data = bytes(data)
        if data:
            self._check_bounds(start)
            self._check_bounds(start + len(data) - 1)
        self._data[start:start + len(data)] = data
        return len(data)

    def snapshot(self) -> list[int]:
        """Return a copy of the entire memory."""
        return self._data.copy()

    def restore(self, data: Iterable[int]) -> None:
        """Replace memory contents with a previous snapshot."""
        data = list(data)
        if len(data) != self.size:
            raise BoundsError(f"Memory image has {len(data)} bytes, expected {self.size}", index=len(data))
        for addr, value in enumerate(data):
            if not 0 <= value <= 0xFF:
                raise BoundsError(f"Memory image byte at {addr:#05x} out of range: {value}", index=addr)
        self._data = data
