"""Reading the file header and first program header of a 64-bit ELF image."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass

_log = logging.getLogger(__name__)

_HEADER = struct.Struct("<4sBBBBQHHH2xQQQIHHHHHH")
_PROGRAM_HEADER = struct.Struct("<IIQQQQQQ")


@dataclass(frozen=True)
class ElfHeader:
    """The ELF file header fields the loader reads."""

    magic: bytes
    architecture: int
    endianness: int
    header_version: int
    abi: int
    padding: int
    type: int
    instruction_set: int
    elf_version: int
    program_entry_offset: int
    program_header_offset: int
    section_header_offset: int
    flags: int
    header_size: int
    program_header_entry_size: int
    program_header_num_entries: int
    section_entry_size: int
    section_num_entries: int
    string_table_section_index: int


@dataclass(frozen=True)
class ProgramHeader:
    """One ELF program header."""

    segment_type: int
    flags: int
    offset: int
    vaddr: int
    paddr: int
    file_size: int
    mem_size: int
    alignment: int


@dataclass(frozen=True)
class ElfImage:
    """An ELF file with its header and first program header decoded."""

    data: bytes
    header: ElfHeader
    program_header: ProgramHeader

    @property
    def entry(self) -> int:
        return self.header.program_entry_offset

    def first_segment(self) -> bytes:
        """Return the file contents of the first program segment."""
        start = self.program_header.offset
        end = start + self.program_header.file_size
        if end > len(self.data):
            raise ValueError("first segment extends past the end of the file")
        return self.data[start:end]


def parse_elf(data: bytes) -> ElfImage:
    """Decode the file header and the first program header of ``data``."""
    data = bytes(data)
    if len(data) < _HEADER.size:
        raise ValueError("data is too short for an ELF header")
    header = ElfHeader(*_HEADER.unpack_from(data))
    offset = header.program_header_offset
    if offset + _PROGRAM_HEADER.size > len(data):
        raise ValueError("program header lies outside the file")
    program = ProgramHeader(*_PROGRAM_HEADER.unpack_from(data, offset))
    _log.debug(
        "ELF version %#x, header version %#x (%#x), type %d for %#x, entry %#x",
        header.elf_version, header.header_version, header.header_size,
        header.type, header.instruction_set, header.program_entry_offset,
    )
    _log.debug(
        "program takes up %#x, begins at %#x, type %s, flags %s",
        program.file_size, program.offset,
        bin(program.segment_type), bin(program.flags),
    )
    return ElfImage(data, header, program)