"""Headless ROM runner with tracing for the CHIP-8 virtual machine."""

import logging
from dataclasses import dataclass, field
from typing import Optional
from .machine import Chip8, WaitingForKey, make_random_byte
from .disasm import mnemonic
from .errors import Chip8Error, ErrorInfo


logger = logging.getLogger(__name__)


@dataclass
class RunOptions:
    """Options for a headless run."""
    max_steps: int = 1000
    seed: Optional[int] = None
    trace: bool = True
    trace_limit: int = 1000
    keys: dict[int, Optional[int]] = field(default_factory=dict)
    stop_on_wait: bool = False


@dataclass
class TraceRow:
    """Single row of execution trace."""
    step: int
    pc: int
    word: Optional[int]
    instr_text: str
    v: list[int]
    i: int
    dirty: bool
    key: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "step": self.step,
            "pc": self.pc,
            "word": self.word,
            "instr_text": self.instr_text,
            "v": self.v,
            "i": self.i,
            "dirty": self.dirty,
            "key": self.key,
        }


@dataclass
class RunResult:
    """Result of a headless run."""
    status: str  # "ok" | "error"
    stop_reason: str  # "max_steps" | "waiting_for_key" | "error"
    steps_executed: int
    draws: int
    final_state: dict
    screen: str
    trace: list[dict]
    error: Optional[ErrorInfo] = None

    def to_dict(self) -> dict:
        result = {
            "status": self.status,
            "stop_reason": self.stop_reason,
            "steps_executed": self.steps_executed,
            "draws": self.draws,
            "final_state": self.final_state,
            "screen": self.screen,
            "trace": self.trace,
        }
        if self.error:
            result["error"] = self.error.to_dict()
        return result


def run_rom(
    rom: bytes,
    options: Optional[RunOptions] = None,
) -> RunResult:
    """Run a CHIP-8 ROM for a bounded number of steps.

    Args:
        rom: Program bytes, loaded at 0x200
        options: Execution options

    Returns:
        RunResult with execution status, final state, screen, and trace
    """
    if options is None:
        options = RunOptions()

    trace_rows: list[dict] = []
    error_info: Optional[ErrorInfo] = None
    steps_executed = 0
    draws = 0
    stop_reason = "max_steps"

    vm = Chip8(random_byte=make_random_byte(options.seed))

    try:
        vm.load(rom)

        while steps_executed < options.max_steps:
            # The latch only holds a key during the step it is scheduled for
            vm.key = options.keys.get(steps_executed + 1)

            if (
                options.stop_on_wait
                and isinstance(vm.state, WaitingForKey)
                and vm.key is None
            ):
                stop_reason = "waiting_for_key"
                break

            pc = vm.pc
            if isinstance(vm.state, WaitingForKey):
                word = None
                instr_text = f"WAIT V{vm.state.register:X}"
            else:
                word = vm.memory.read_word(pc)
                instr_text = mnemonic(word)

            vm.step()
            steps_executed += 1
            if vm.dirty:
                draws += 1

            if options.trace and len(trace_rows) < options.trace_limit:
                row = TraceRow(
                    step=steps_executed,
                    pc=pc,
                    word=word,
                    instr_text=instr_text,
                    v=list(vm.cpu.v),
                    i=vm.cpu.i,
                    dirty=vm.dirty,
                    key=vm.key,
                )
                trace_rows.append(row.to_dict())

    except Chip8Error as e:
        # Attach context to error
        e.step = steps_executed + 1
        e.pc = vm.pc
        error_info = e.to_error_info()
        stop_reason = "error"
        logger.warning("Run stopped at step %d, pc %#05x: %s", e.step, e.pc, e.message)

    logger.info("Run finished: %s after %d steps", stop_reason, steps_executed)

    return RunResult(
        status="ok" if error_info is None else "error",
        stop_reason=stop_reason,
        steps_executed=steps_executed,
        draws=draws,
        final_state=vm.get_state(),
        screen=vm.display.render_text(),
        trace=trace_rows,
        error=error_info,
    )
