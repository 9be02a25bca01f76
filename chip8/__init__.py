"""CHIP-8 Virtual Machine Core Package."""

from .machine import Chip8, Running, WaitingForKey, Snapshot, make_random_byte
from .runner import run_rom, RunOptions, RunResult
from .errors import Chip8Error, UnknownInstruction, UnimplementedInstruction, BoundsError

__all__ = [
    "Chip8",
    "Running",
    "WaitingForKey",
    "Snapshot",
    "make_random_byte",
    "run_rom",
    "RunOptions",
    "RunResult",
    "Chip8Error",
    "UnknownInstruction",
    "UnimplementedInstruction",
    "BoundsError",
]
