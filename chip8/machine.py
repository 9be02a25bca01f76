"""CHIP-8 virtual machine: fetch, decode and execute one instruction per step."""

import logging
import random
from dataclasses import dataclass
from typing import Callable, Optional, Union
from .cpu import CPU, REGISTER_COUNT
from .memory import Memory, PROGRAM_START
from .display import Display
from .instructions import Instruction, IOBus, execute_instruction
from .errors import Chip8Error, BoundsError


logger = logging.getLogger(__name__)

KEY_COUNT = 16


@dataclass(frozen=True)
class Running:
    """Normal fetch-decode-execute progression."""


@dataclass(frozen=True)
class WaitingForKey:
    """Fx0A is blocking until a key is latched into ``register``."""
    register: int


ExecutionState = Union[Running, WaitingForKey]


def make_random_byte(seed: Optional[int] = None) -> Callable[[], int]:
    """Return a byte source backed by its own ``random.Random``."""
    rng = random.Random(seed)
    return lambda: rng.getrandbits(8)


@dataclass(frozen=True)
class Snapshot:
    """Complete VM state, detached from the live machine."""
    memory: tuple[int, ...]
    v: tuple[int, ...]
    i: int
    pc: int
    sp: int
    stack: tuple[int, ...]
    dt: int
    st: int
    waiting_register: Optional[int]
    key: Optional[int]
    pixels: tuple[bool, ...]
    loaded: bool = False
    cycles: int = 0

    def to_dict(self) -> dict:
        return {
            "memory": list(self.memory),
            "v": list(self.v),
            "i": self.i,
            "pc": self.pc,
            "sp": self.sp,
            "stack": list(self.stack),
            "dt": self.dt,
            "st": self.st,
            "waiting_register": self.waiting_register,
            "key": self.key,
            "pixels": [int(p) for p in self.pixels],
            "loaded": self.loaded,
            "cycles": self.cycles,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Snapshot":
        return cls(
            memory=tuple(data["memory"]),
            v=tuple(data["v"]),
            i=data["i"],
            pc=data["pc"],
            sp=data["sp"],
            stack=tuple(data["stack"]),
            dt=data["dt"],
            st=data["st"],
            waiting_register=data.get("waiting_register"),
            key=data.get("key"),
            pixels=tuple(bool(p) for p in data["pixels"]),
            loaded=data.get("loaded", False),
            cycles=data.get("cycles", 0),
        )


class Chip8:
    """A CHIP-8 machine driven one instruction at a time by its host.

    Timers are tied to the number of executed steps rather than wall-clock
    time: each executed instruction decrements the delay and sound timers
    by one. A host that wants the conventional 60 Hz timer rate must call
    ``step`` at 60 Hz or scale accordingly.
    """

    def __init__(self, random_byte: Optional[Callable[[], int]] = None):
        self.cpu = CPU(start_address=PROGRAM_START)
        self.memory = Memory()
        self.display = Display()
        self.io = IOBus(self.display, random_byte or make_random_byte())
        self.state: ExecutionState = Running()
        self.loaded = False
        self.cycles = 0

    # Host-facing surface

    @property
    def key(self) -> Optional[int]:
        return self.io.key

    @key.setter
    def key(self, value: Optional[int]) -> None:
        if value is not None and not 0 <= value < KEY_COUNT:
            raise BoundsError(f"Key code out of range: {value}", index=value)
        self.io.key = value

    @property
    def dirty(self) -> bool:
        return self.io.dirty

    @property
    def pc(self) -> int:
        return self.cpu.pc

    @property
    def waiting_for_key(self) -> bool:
        return isinstance(self.state, WaitingForKey)

    def get_pixel(self, x: int, y: int) -> bool:
        return self.display.get_pixel(x, y)

    def load(self, rom: bytes) -> None:
        """Copy a ROM image into memory at 0x200. Allowed once per machine."""
        if self.loaded:
            raise Chip8Error("ROM already loaded", pc=self.cpu.pc)
        size = self.memory.load(rom, start=PROGRAM_START)
        self.loaded = True
        logger.info("Loaded %d byte ROM at %#05x", size, PROGRAM_START)

    def step(self) -> None:
        """Advance the machine by one step.

        While waiting for a key, a step either consumes the latched key
        or does nothing at all. Errors propagate to the caller and leave
        the program counter on the faulting instruction.
        """
        self.io.reset_step_signals()

        if isinstance(self.state, WaitingForKey):
            self._wait_for_key(self.state.register)
            return

        instr = Instruction.decode(self.memory.read_word(self.cpu.pc))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%#05x: %04X", self.cpu.pc, instr.word)

        new_pc = execute_instruction(instr, self.cpu, self.memory, self.io)
        self.cpu.tick_timers()
        self.cycles += 1

        if self.io.key_wait is not None:
            self.state = WaitingForKey(self.io.key_wait)
            logger.debug("Waiting for key into V%X", self.io.key_wait)

        if new_pc is not None:
            self.cpu.set_pc(new_pc)
        else:
            self.cpu.advance()

    def _wait_for_key(self, register: int) -> None:
        if self.io.key is None:
            return
        self.cpu.set_v(register, self.io.key)
        self.state = Running()
        self.cycles += 1
        logger.debug("Key %X latched into V%X", self.io.key, register)

    # Snapshots

    def snapshot(self) -> Snapshot:
        state = self.state
        return Snapshot(
            memory=tuple(self.memory.snapshot()),
            v=tuple(self.cpu.v),
            i=self.cpu.i,
            pc=self.cpu.pc,
            sp=self.cpu.sp,
            stack=tuple(self.cpu.stack),
            dt=self.cpu.dt,
            st=self.cpu.st,
            waiting_register=state.register if isinstance(state, WaitingForKey) else None,
            key=self.io.key,
            pixels=tuple(self.display.pixels()),
            loaded=self.loaded,
            cycles=self.cycles,
        )

    def restore(self, snapshot: Snapshot) -> None:
        """Replace the entire machine state with ``snapshot``.

        The snapshot is validated in full first; a rejected snapshot raises
        ``BoundsError`` and leaves the machine untouched.
        """
        register = snapshot.waiting_register
        if register is not None and not 0 <= register < REGISTER_COUNT:
            raise BoundsError(f"Register index out of range: V{register}", index=register)
        if snapshot.key is not None and not 0 <= snapshot.key < KEY_COUNT:
            raise BoundsError(f"Key code out of range: {snapshot.key}", index=snapshot.key)

        memory = Memory()
        memory.restore(snapshot.memory)
        cpu = CPU(start_address=PROGRAM_START)
        cpu.set_state({
            "v": snapshot.v,
            "i": snapshot.i,
            "pc": snapshot.pc,
            "sp": snapshot.sp,
            "stack": snapshot.stack,
            "dt": snapshot.dt,
            "st": snapshot.st,
        })
        display = Display()
        display.load_pixels(snapshot.pixels)

        self.memory = memory
        self.cpu = cpu
        self.display = display
        self.io.display = display
        self.state = Running() if register is None else WaitingForKey(register)
        self.io.key = snapshot.key
        self.io.dirty = True
        self.loaded = snapshot.loaded
        self.cycles = snapshot.cycles

    def get_state(self) -> dict:
        """Get registers and execution state as a dictionary."""
        state = self.cpu.get_state()
        state["waiting_register"] = (
            self.state.register if isinstance(self.state, WaitingForKey) else None
        )
        state["key"] = self.io.key
        return state
