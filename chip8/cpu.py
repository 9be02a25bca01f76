"""Register file for the CHIP-8 virtual machine."""

from .errors import BoundsError
from .memory import PROGRAM_START


REGISTER_COUNT = 16
STACK_SIZE = 16
VF = 0xF


class CPU:
    """General registers, index register, program counter, stack and timers."""

    def __init__(self, start_address: int = PROGRAM_START):
        self.v: list[int] = [0] * REGISTER_COUNT
        self.i: int = 0
        self.pc: int = start_address
        self.stack: list[int] = [0] * STACK_SIZE
        self.sp: int = 0
        self.dt: int = 0  # delay timer
        self.st: int = 0  # sound timer

    def get_v(self, index: int) -> int:
        """Read general register Vx."""
        return self.v[index]

    def set_v(self, index: int, value: int) -> None:
        """Write general register Vx, keeping the low 8 bits."""
        if index < 0 or index >= REGISTER_COUNT:
            raise BoundsError(f"Register index out of range: V{index}", index=index)
        self.v[index] = value & 0xFF

    def set_flag(self, condition: bool) -> None:
        """Set VF to 1 or 0."""
        self.set_v(VF, 1 if condition else 0)

    def set_i(self, value: int) -> None:
        self.i = value & 0xFFFF

    def set_pc(self, value: int) -> None:
        self.pc = value & 0xFFFF

    def advance(self, count: int = 1) -> None:
        """Move PC forward by ``count`` instructions."""
        self.set_pc(self.pc + 2 * count)

    def push(self, address: int) -> None:
        """Push a return address; overflow raises instead of wrapping."""
        if self.sp >= STACK_SIZE:
            raise BoundsError(f"Stack overflow: depth {self.sp}", index=self.sp)
        self.stack[self.sp] = address & 0xFFFF
        self.sp += 1

    def pop(self) -> int:
        """Pop a return address; underflow raises instead of wrapping."""
        if self.sp <= 0:
            raise BoundsError("Stack underflow: return with empty stack", index=self.sp - 1)
        self.sp -= 1
        return self.stack[self.sp]

    def tick_timers(self) -> None:
        """Decrement both timers by one unit, stopping at zero."""
        if self.dt > 0:
            self.dt -= 1
        if self.st > 0:
            self.st -= 1

    def get_state(self) -> dict:
        """Get current register state as dictionary."""
        return {
            "v": list(self.v),
            "i": self.i,
            "pc": self.pc,
            "sp": self.sp,
            "stack": list(self.stack),
            "dt": self.dt,
            "st": self.st,
        }

    def set_state(self, state: dict) -> None:
        """Restore registers from a ``get_state`` dictionary.

        Every field is validated before any register changes.
        """
        v = list(state["v"])
        stack = list(state["stack"])
        if len(v) != REGISTER_COUNT:
            raise BoundsError(f"Expected {REGISTER_COUNT} registers, got {len(v)}", index=len(v))
        if len(stack) != STACK_SIZE:
            raise BoundsError(f"Expected {STACK_SIZE} stack entries, got {len(stack)}", index=len(stack))
        if not 0 <= state["sp"] <= STACK_SIZE:
            raise BoundsError(f"Stack pointer out of range: {state['sp']}", index=state["sp"])
        _check_range("V", v, 0xFF)
        _check_range("stack", stack, 0xFFFF)
        for name, limit in (("i", 0xFFFF), ("pc", 0xFFFF), ("dt", 0xFF), ("st", 0xFF)):
            if not 0 <= state[name] <= limit:
                raise BoundsError(f"{name} out of range: {state[name]}", index=state[name])
        self.v = v
        self.stack = stack
        self.sp = state["sp"]
        self.i = state["i"]
        self.pc = state["pc"]
        self.dt = state["dt"]
        self.st = state["st"]


def _check_range(name: str, values: list[int], limit: int) -> None:
    for index, value in enumerate(values):
        if not 0 <= value <= limit:
            raise BoundsError(f"{name}[{index}] out of range: {value}", index=index)
