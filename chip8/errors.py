"""Custom exceptions for the CHIP-8 virtual machine."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ErrorInfo:
    """Structured error information for API responses."""
    type: str
    message: str
    step: int
    pc: int
    instruction: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "message": self.message,
            "step": self.step,
            "pc": self.pc,
            "instruction": self.instruction,
        }


class Chip8Error(Exception):
    """Base exception for all CHIP-8 errors."""

    def __init__(
        self,
        message: str,
        step: int = 0,
        pc: int = 0,
        instruction: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.step = step
        self.pc = pc
        self.instruction = instruction

    def to_error_info(self) -> ErrorInfo:
        return ErrorInfo(
            type=self.__class__.__name__,
            message=self.message,
            step=self.step,
            pc=self.pc,
            instruction=self.instruction,
        )


class UnknownInstruction(Chip8Error):
    """No opcode or sub-opcode branch matches the instruction word."""

    def __init__(self, instruction: int, **kwargs):
        super().__init__(
            f"Unknown instruction: {instruction:04X}",
            instruction=instruction,
            **kwargs,
        )


class UnimplementedInstruction(Chip8Error):
    """Instruction belongs to an extension that is not implemented."""

    def __init__(self, instruction: int, **kwargs):
        super().__init__(
            f"Unimplemented instruction: {instruction:04X}",
            instruction=instruction,
            **kwargs,
        )


class BoundsError(Chip8Error):
    """Register, memory, stack or key index out of range."""

    def __init__(self, message: str, index: int, **kwargs):
        super().__init__(message, **kwargs)
        self.index = index
