"""Mnemonic rendering and ROM listings for CHIP-8 instruction words."""

from typing import Iterator
from .instructions import Instruction
from .memory import PROGRAM_START


_ALU_MNEMONICS = {
    0x0: "LD",
    0x1: "OR",
    0x2: "AND",
    0x3: "XOR",
    0x4: "ADD",
    0x5: "SUB",
    0x7: "SUBN",
}

_MISC_FORMATS = {
    0x07: "LD V{x:X}, DT",
    0x0A: "LD V{x:X}, K",
    0x15: "LD DT, V{x:X}",
    0x18: "LD ST, V{x:X}",
    0x1E: "ADD I, V{x:X}",
    0x29: "LD F, V{x:X}",
    0x33: "LD B, V{x:X}",
    0x55: "LD [I], V{x:X}",
    0x65: "LD V{x:X}, [I]",
}


def mnemonic(word: int) -> str:
    """Render an instruction word in Cowgod-style assembly.

    Words that do not decode to a known instruction render as ``DW``.
    """
    instr = Instruction.decode(word)
    x, y, kk, nnn = instr.x, instr.y, instr.kk, instr.nnn
    op = instr.opcode

    if instr.word == 0x00E0:
        return "CLS"
    if instr.word == 0x00EE:
        return "RET"
    if op == 0x1:
        return f"JP {nnn:#05x}"
    if op == 0x2:
        return f"CALL {nnn:#05x}"
    if op == 0x3:
        return f"SE V{x:X}, {kk:#04x}"
    if op == 0x4:
        return f"SNE V{x:X}, {kk:#04x}"
    if op == 0x5:
        return f"SE V{x:X}, V{y:X}"
    if op == 0x6:
        return f"LD V{x:X}, {kk:#04x}"
    if op == 0x7:
        return f"ADD V{x:X}, {kk:#04x}"
    if op == 0x8:
        if instr.n in _ALU_MNEMONICS:
            return f"{_ALU_MNEMONICS[instr.n]} V{x:X}, V{y:X}"
        if instr.n == 0x6:
            return f"SHR V{x:X}"
        if instr.n == 0xE:
            return f"SHL V{x:X}"
    if op == 0x9:
        return f"SNE V{x:X}, V{y:X}"
    if op == 0xA:
        return f"LD I, {nnn:#05x}"
    if op == 0xB:
        return f"JP V0, {nnn:#05x}"
    if op == 0xC:
        return f"RND V{x:X}, {kk:#04x}"
    if op == 0xD:
        return f"DRW V{x:X}, V{y:X}, {instr.n}"
    if op == 0xE and kk == 0x9E:
        return f"SKP V{x:X}"
    if op == 0xE and kk == 0xA1:
        return f"SKNP V{x:X}"
    if op == 0xF and kk in _MISC_FORMATS:
        return _MISC_FORMATS[kk].format(x=x)
    return f"DW {instr.word:#06x}"


def disassemble(rom: bytes, start: int = PROGRAM_START) -> Iterator[tuple[int, int, str]]:
    """Yield ``(address, word, text)`` for each big-endian halfword in ``rom``.

    A trailing odd byte is listed as ``DB``.
    """
    for offset in range(0, len(rom) - 1, 2):
        word = (rom[offset] << 8) | rom[offset + 1]
        yield start + offset, word, mnemonic(word)
    if len(rom) % 2:
        last = rom[-1]
        yield start + len(rom) - 1, last, f"DB {last:#04x}"
