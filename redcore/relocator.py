"""Decoding and relocation of a small set of AArch64 instructions."""

from __future__ import annotations

import logging
import struct
from collections.abc import Callable
from dataclasses import dataclass

from redcore.textfmt import kformat

_log = logging.getLogger(__name__)

_MASK32 = (1 << 32) - 1
_MASK64 = (1 << 64) - 1


@dataclass(frozen=True)
class Layout:
    """Where a program's code and data live in memory."""

    code_base_start: int
    code_size: int
    data_start: int = 0
    data_size: int = 0


def _signed(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    return value - (1 << bits) if value >> (bits - 1) else value


def _in_code(layout: Layout, address: int) -> bool:
    return layout.code_base_start <= address < layout.code_base_start + layout.code_size


def _in_data(layout: Layout, address: int) -> bool:
    return layout.data_start <= address < layout.data_start + layout.data_size


# Unconditional branches (b, bl)

def _branch_target(instr: int, pc: int) -> int:
    return (pc + (_signed(instr & 0x03FFFFFF, 26) << 2)) & _MASK64


def _describe_branch(instr: int, pc: int) -> str:
    return kformat("%x /*pc = %x*/", [_branch_target(instr, pc), pc])


def _translate_branch(instr: int, pc: int, source: Layout, destination: Layout) -> int:
    target = _branch_target(instr, pc)
    if _in_code(source, target):
        return instr
    offset = (pc - source.code_base_start) & _MASK32
    dest_pc = destination.code_base_start + offset
    rel = _signed((target - dest_pc) & _MASK64, 64) >> 2
    if not -(1 << 25) <= rel < (1 << 25):
        _log.debug("branch at %#x out of range after relocation: %d", pc, rel)
    return (instr & 0xFC000000) | (rel & 0x03FFFFFF)


# Conditional branches

_COND_NAMES = (
    "eq", "ne", "cs", "cc", "mi", "pl", "vs", "vc",
    "hi", "ls", "ge", "lt", "gt", "le", "", "invalid",
)


def _cond_target(instr: int, pc: int) -> int:
    return (pc + (_signed((instr >> 5) & 0x7FFFF, 19) << 2)) & _MASK64


def _describe_cond_branch(instr: int, pc: int) -> str:
    return kformat("%x, %s", [_cond_target(instr, pc), _COND_NAMES[instr & 0xF]])


def _translate_cond_branch(instr: int, pc: int, source: Layout, destination: Layout) -> int:
    target = _cond_target(instr, pc)
    if _in_code(source, target):
        return instr
    offset = (pc - source.code_base_start) & _MASK32
    rel = _signed((target - (destination.code_base_start + offset)) & _MASK64, 64) >> 2
    return (instr & 0xFC000000) | (rel & 0x03FFFFFF)


# adrp

def _adrp_target(instr: int, pc: int) -> int:
    imm21 = (((instr >> 5) & 0x7FFFF) << 2) | ((instr >> 29) & 0x3)
    offset = _signed((imm21 << 44) & _MASK64, 64) >> 32
    return ((pc & ~0xFFF) + offset) & _MASK64


def _describe_adrp(instr: int, pc: int) -> str:
    return kformat("x%i, %x", [instr & 0x1F, _adrp_target(instr, pc)])


def _translate_adrp(instr: int, pc: int, source: Layout, destination: Layout) -> int:
    target = _adrp_target(instr, pc)
    if not _in_data(source, target):
        return instr
    pc_offset = (pc - source.code_base_start) & _MASK64
    new_target = destination.data_start + (target - source.data_start)
    dst_pc_page = ((destination.code_base_start + pc_offset) & _MASK64) & ~0xFFF
    new_offset = _signed((new_target - dst_pc_page) & _MASK64, 64)
    new_immhi = (new_offset >> 14) & 0x7FFFF
    new_immlo = (new_offset >> 12) & 0x3
    instr = (instr & ~0x60000000 & _MASK32) | (new_immlo << 29)
    instr = (instr & ~(0x7FFFF << 5) & _MASK32) | (new_immhi << 5)
    return instr


# Instructions that are only described

def _describe_add(instr: int, pc: int) -> str:
    imm = (instr >> 10) & 0xFFF
    if (instr >> 22) & 1:
        imm <<= 12
    return kformat("x%i, x%i, #%i", [instr & 0x1F, (instr >> 5) & 0x1F, imm])


def _describe_ldr_str(instr: int, pc: int) -> str:
    rt = instr & 0x1F
    rn = (instr >> 5) & 0x1F
    if rt == 31:
        return kformat("xzr, [x%i]", [rn])
    return kformat("x%i, [x%i, #%i]", [rt, rn, ((instr >> 10) & 0xFFF) << 3])


def _describe_stp_pre(instr: int, pc: int) -> str:
    imm7 = _signed((instr >> 15) & 0x7F, 7)
    return kformat(
        "x%i, x%i, [x%i, #%i]!",
        [instr & 0x1F, (instr >> 10) & 0x1F, (instr >> 5) & 0x1F, imm7 * 8],
    )


def _describe_movz(instr: int, pc: int) -> str:
    return kformat(
        "x%i, #%i, lsl #%i",
        [instr & 0x1F, (instr >> 5) & 0xFFFF, ((instr >> 21) & 0x3) * 16],
    )


def _describe_mov32(instr: int, pc: int) -> str:
    return kformat("w%i, #%i", [instr & 0x1F, (instr >> 5) & 0xFFFF])


def _describe_movr(instr: int, pc: int) -> str:
    return kformat("x%i, x%i", [instr & 0x1F, (instr >> 15) & 0x1F])


def _describe_cmp(instr: int, pc: int) -> str:
    return kformat("x%i, x%i", [(instr >> 5) & 0x1F, (instr >> 16) & 0x1F])


Translator = Callable[[int, int, Layout, Layout], int]


@dataclass(frozen=True)
class _Op:
    mask: int
    pattern: int
    mnemonic: str
    describe: Callable[[int, int], str]
    translate: Translator | None = None


_OPS = (
    _Op(0xFFC00000, 0xA9800000, "stp", _describe_stp_pre),
    _Op(0xFFC00000, 0x52800000, "mov", _describe_mov32),
    _Op(0xFFC00000, 0xD2800000, "movz", _describe_movz),
    _Op(0x9F000000, 0x90000000, "adrp", _describe_adrp, _translate_adrp),
    _Op(0x7F000000, 0x11000000, "add", _describe_add),
    _Op(0xFFF00000, 0xF9400000, "ldr", _describe_ldr_str),
    _Op(0xFFF00000, 0xF9000000, "str", _describe_ldr_str),
    _Op(0xFC000000, 0x94000000, "bl", _describe_branch, _translate_branch),
    _Op(0xFFFFFC1F, 0xEB00001F, "cmp", _describe_cmp),
    _Op(0xFC000000, 0x14000000, "b", _describe_branch, _translate_branch),
    _Op(0xFF000010, 0x54000000, "b.cond", _describe_cond_branch, _translate_cond_branch),
    _Op(0xFFC00000, 0xB9000000, "str", _describe_ldr_str),
    _Op(0xFFF00000, 0xB9400000, "ldr", _describe_ldr_str),
    _Op(0xFF800000, 0x72800000, "movk", _describe_movz),
    _Op(0xFF00001F, 0x6B00001F, "cmp", _describe_cmp),
    _Op(0xFFE00000, 0xAA000000, "mov", _describe_movr),
)


def _match(instruction: int) -> _Op | None:
    return next((op for op in _OPS if instruction & op.mask == op.pattern), None)


def disassemble(instruction: int, pc: int) -> str | None:
    """Describe a recognised instruction at ``pc``; None for any other."""
    instruction &= _MASK32
    op = _match(instruction)
    if op is None:
        return None
    return f"{op.mnemonic} {op.describe(instruction, pc)}"


def translate_instruction(
    instruction: int, pc: int, source: Layout, destination: Layout
) -> int:
    """Rewrite an instruction at ``pc`` in ``source`` so it works at ``destination``.

    Branches leaving the code and adrp into the data section are re-encoded;
    everything else is returned unchanged.
    """
    instruction &= _MASK32
    op = _match(instruction)
    if op is None or op.translate is None:
        return instruction
    return op.translate(instruction, pc, source, destination) & _MASK32


def relocate_code(
    code: bytes,
    src_base: int,
    dst_base: int,
    src_data_base: int,
    dst_data_base: int,
    data_size: int,
) -> bytes:
    """Translate little-endian code loaded at ``src_base`` to run at ``dst_base``."""
    if len(code) % 4:
        raise ValueError("code length must be a multiple of 4 bytes")
    size = len(code)
    source = Layout(src_base, size, src_data_base, data_size)
    destination = Layout(dst_base, size, dst_data_base, data_size)
    _log.debug("translating from %#x to %#x", src_base, dst_base)
    out = bytearray()
    for index, (instr,) in enumerate(struct.iter_unpack("<I", code)):
        src_pc = src_base + index * 4
        new = translate_instruction(instr, src_pc, source, destination)
        if _log.isEnabledFor(logging.DEBUG):
            _log.debug(
                "[%08X]: %s -> [%08X]: %s",
                instr, disassemble(instr, src_pc),
                new, disassemble(new, dst_base + index * 4),
            )
        out += struct.pack("<I", new)
    return bytes(out)