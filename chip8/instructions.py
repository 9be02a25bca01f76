"""Instruction decoding and execution for the CHIP-8 virtual machine."""

from dataclasses import dataclass
from typing import Callable, Optional
from .cpu import CPU, VF
from .memory import Memory, GLYPH_SIZE, FONT_START
from .display import Display
from .errors import UnknownInstruction, UnimplementedInstruction


@dataclass(frozen=True)
class Instruction:
    """A 16-bit instruction word split into its nibble fields."""
    word: int
    opcode: int
    nnn: int
    n: int
    x: int
    y: int
    kk: int

    @classmethod
    def decode(cls, word: int) -> "Instruction":
        word &= 0xFFFF
        return cls(
            word=word,
            opcode=word >> 12,
            nnn=word & 0x0FFF,
            n=word & 0x000F,
            x=(word & 0x0F00) >> 8,
            y=(word & 0x00F0) >> 4,
            kk=word & 0x00FF,
        )


class IOBus:
    """Devices and per-step signals shared between the VM and its host.

    ``key`` is the single-slot key latch written by the host before each
    step. ``dirty`` is raised by draw and clear instructions.
    ``key_wait`` holds the target register when Fx0A asks to block.
    """

    def __init__(self, display: Display, random_byte: Callable[[], int]):
        self.display = display
        self.random_byte = random_byte
        self.key: Optional[int] = None
        self.dirty = False
        self.key_wait: Optional[int] = None

    def reset_step_signals(self) -> None:
        """Reset per-step signals for a new instruction."""
        self.dirty = False
        self.key_wait = None


# Instruction executor type
InstructionExecutor = Callable[[Instruction, CPU, Memory, IOBus], Optional[int]]


def _skip(cpu: CPU, condition: bool) -> Optional[int]:
    """Return the PC past the next instruction if ``condition`` holds."""
    if condition:
        return (cpu.pc + 4) & 0xFFFF
    return None


def execute_cls(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """00E0 CLS: clear the display"""
    io.display.clear()
    io.dirty = True
    return None


def execute_ret(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """00EE RET: resume after the matching CALL"""
    return (cpu.pop() + 2) & 0xFFFF


def execute_jp(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """1nnn JP addr: PC := nnn"""
    return instr.nnn


def execute_call(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """2nnn CALL addr: push PC, PC := nnn"""
    cpu.push(cpu.pc)
    return instr.nnn


def execute_se_byte(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """3xkk SE Vx, byte"""
    return _skip(cpu, cpu.get_v(instr.x) == instr.kk)


def execute_sne_byte(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """4xkk SNE Vx, byte"""
    return _skip(cpu, cpu.get_v(instr.x) != instr.kk)


def execute_se_reg(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """5xy0 SE Vx, Vy"""
    return _skip(cpu, cpu.get_v(instr.x) == cpu.get_v(instr.y))


def execute_sne_reg(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """9xy0 SNE Vx, Vy"""
    return _skip(cpu, cpu.get_v(instr.x) != cpu.get_v(instr.y))


def execute_ld_byte(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """6xkk LD Vx, byte"""
    cpu.set_v(instr.x, instr.kk)
    return None


def execute_add_byte(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """7xkk ADD Vx, byte: wraps, VF untouched"""
    cpu.set_v(instr.x, cpu.get_v(instr.x) + instr.kk)
    return None


# 8xy_ arithmetic and logic


def execute_ld_reg(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy0 LD Vx, Vy"""
    cpu.set_v(instr.x, cpu.get_v(instr.y))
    return None


def execute_or(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy1 OR Vx, Vy"""
    cpu.set_v(instr.x, cpu.get_v(instr.x) | cpu.get_v(instr.y))
    return None


def execute_and(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy2 AND Vx, Vy"""
    cpu.set_v(instr.x, cpu.get_v(instr.x) & cpu.get_v(instr.y))
    return None


def execute_xor(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy3 XOR Vx, Vy"""
    cpu.set_v(instr.x, cpu.get_v(instr.x) ^ cpu.get_v(instr.y))
    return None


def execute_add_reg(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy4 ADD Vx, Vy: VF := carry"""
    total = cpu.get_v(instr.x) + cpu.get_v(instr.y)
    cpu.set_v(instr.x, total)
    cpu.set_flag(total > 0xFF)
    return None


def execute_sub(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy5 SUB Vx, Vy: VF := NOT borrow"""
    vx, vy = cpu.get_v(instr.x), cpu.get_v(instr.y)
    cpu.set_v(instr.x, vx - vy)
    cpu.set_flag(vx > vy)
    return None


def execute_shr(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy6 SHR Vx: VF := bit shifted out"""
    vx = cpu.get_v(instr.x)
    cpu.set_v(VF, vx & 0x01)
    cpu.set_v(instr.x, vx >> 1)
    return None


def execute_subn(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xy7 SUBN Vx, Vy: Vx := Vy - Vx, VF := NOT borrow"""
    vx, vy = cpu.get_v(instr.x), cpu.get_v(instr.y)
    cpu.set_v(instr.x, vy - vx)
    cpu.set_flag(vy > vx)
    return None


def execute_shl(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """8xyE SHL Vx: VF := bit shifted out"""
    vx = cpu.get_v(instr.x)
    cpu.set_v(VF, (vx >> 7) & 0x01)
    cpu.set_v(instr.x, vx << 1)
    return None


def execute_ld_i(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Annn LD I, addr"""
    cpu.set_i(instr.nnn)
    return None


def execute_jp_v0(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Bnnn JP V0, addr"""
    return (instr.nnn + cpu.get_v(0)) & 0xFFFF


def execute_rnd(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Cxkk RND Vx, byte"""
    cpu.set_v(instr.x, (io.random_byte() & 0xFF) & instr.kk)
    return None


def execute_drw(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Dxyn DRW Vx, Vy, n: VF := collision on any row"""
    x, y = cpu.get_v(instr.x), cpu.get_v(instr.y)
    rows = [mem.read(cpu.i + row) for row in range(instr.n)]
    collision = io.display.draw_sprite(x, y, rows)
    cpu.set_flag(collision)
    io.dirty = True
    return None


def execute_skp(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Ex9E SKP Vx"""
    return _skip(cpu, io.key is not None and io.key == cpu.get_v(instr.x))


def execute_sknp(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """ExA1 SKNP Vx"""
    return _skip(cpu, io.key is None or io.key != cpu.get_v(instr.x))


def execute_ld_vx_dt(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx07 LD Vx, DT"""
    cpu.set_v(instr.x, cpu.dt)
    return None


def execute_ld_vx_k(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx0A LD Vx, K: block until a key is latched"""
    io.key_wait = instr.x
    return None


def execute_ld_dt_vx(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx15 LD DT, Vx"""
    cpu.dt = cpu.get_v(instr.x)
    return None


def execute_ld_st_vx(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx18 LD ST, Vx"""
    cpu.st = cpu.get_v(instr.x)
    return None


def execute_add_i(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx1E ADD I, Vx: no flag"""
    cpu.set_i(cpu.i + cpu.get_v(instr.x))
    return None


def execute_ld_f(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx29 LD F, Vx: I := glyph address"""
    cpu.set_i(FONT_START + GLYPH_SIZE * cpu.get_v(instr.x))
    return None


def execute_ld_b(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx33 LD B, Vx: BCD of Vx at I, I+1, I+2"""
    vx = cpu.get_v(instr.x)
    mem.write(cpu.i, vx // 100)
    mem.write(cpu.i + 1, (vx // 10) % 10)
    mem.write(cpu.i + 2, vx % 10)
    return None


def execute_ld_mem_regs(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx55 LD [I], Vx: store V0..Vx"""
    for r in range(instr.x + 1):
        mem.write(cpu.i + r, cpu.get_v(r))
    return None


def execute_ld_regs_mem(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
    """Fx65 LD Vx, [I]: load V0..Vx"""
    for r in range(instr.x + 1):
        cpu.set_v(r, mem.read(cpu.i + r))
    return None


# Secondary dispatch tables, keyed by the field that selects the operation.
SYSTEM_EXECUTORS: dict[int, InstructionExecutor] = {
    0x00E0: execute_cls,
    0x00EE: execute_ret,
}

ALU_EXECUTORS: dict[int, InstructionExecutor] = {
    0x0: execute_ld_reg,
    0x1: execute_or,
    0x2: execute_and,
    0x3: execute_xor,
    0x4: execute_add_reg,
    0x5: execute_sub,
    0x6: execute_shr,
    0x7: execute_subn,
    0xE: execute_shl,
}

KEY_EXECUTORS: dict[int, InstructionExecutor] = {
    0x9E: execute_skp,
    0xA1: execute_sknp,
}

MISC_EXECUTORS: dict[int, InstructionExecutor] = {
    0x07: execute_ld_vx_dt,
    0x0A: execute_ld_vx_k,
    0x15: execute_ld_dt_vx,
    0x18: execute_ld_st_vx,
    0x1E: execute_add_i,
    0x29: execute_ld_f,
    0x33: execute_ld_b,
    0x55: execute_ld_mem_regs,
    0x65: execute_ld_regs_mem,
}


def _dispatch(table: dict[int, InstructionExecutor], key_of: Callable[[Instruction], int]) -> InstructionExecutor:
    def execute_group(instr: Instruction, cpu: CPU, mem: Memory, io: IOBus) -> Optional[int]:
        executor = table.get(key_of(instr))
        if executor is None:
            raise UnknownInstruction(instr.word)
        return executor(instr, cpu, mem, io)
    return execute_group


# Instruction dispatch table, keyed by opcode (high nibble)
INSTRUCTION_EXECUTORS: dict[int, InstructionExecutor] = {
    0x0: _dispatch(SYSTEM_EXECUTORS, lambda instr: instr.word),
    0x1: execute_jp,
    0x2: execute_call,
    0x3: execute_se_byte,
    0x4: execute_sne_byte,
    0x5: execute_se_reg,
    0x6: execute_ld_byte,
    0x7: execute_add_byte,
    0x8: _dispatch(ALU_EXECUTORS, lambda instr: instr.n),
    0x9: execute_sne_reg,
    0xA: execute_ld_i,
    0xB: execute_jp_v0,
    0xC: execute_rnd,
    0xD: execute_drw,
    0xE: _dispatch(KEY_EXECUTORS, lambda instr: instr.kk),
    0xF: _dispatch(MISC_EXECUTORS, lambda instr: instr.kk),
}


def execute_instruction(
    instr: Instruction,
    cpu: CPU,
    mem: Memory,
    io: IOBus,
) -> Optional[int]:
    """Execute a single instruction.

    Returns:
        New PC value if instruction set the PC, None otherwise
    """
    executor = INSTRUCTION_EXECUTORS.get(instr.opcode)
    if executor is None:
        raise UnimplementedInstruction(instr.word)
    return executor(instr, cpu, mem, io)
