"""A sparse byte-addressable memory with little-endian accessors."""

from __future__ import annotations

from collections.abc import Iterator

_CHUNK = 0x1000


class Memory:
    """Byte-addressable memory; bytes never written read as zero.

    With ``size`` set, any access that reaches ``size`` or beyond raises
    IndexError. Values written through the fixed-width accessors are
    truncated to their width.
    """

    def __init__(self, size: int | None = None) -> None:
        if size is not None and size < 0:
            raise ValueError("memory size must not be negative")
        self.size = size
        self._chunks: dict[int, bytearray] = {}

    def _check(self, addr: int, length: int) -> None:
        if addr < 0 or length < 0:
            raise IndexError(f"invalid access of {length} bytes at {addr:#x}")
        if self.size is not None and addr + length > self.size:
            raise IndexError(f"access at {addr:#x} runs past the end of memory")

    @staticmethod
    def _spans(addr: int, length: int) -> Iterator[tuple[int, int, int]]:
        end = addr + length
        while addr < end:
            index, offset = divmod(addr, _CHUNK)
            count = min(_CHUNK - offset, end - addr)
            yield index, offset, count
            addr += count

    def read_bytes(self, addr: int, size: int) -> bytes:
        """Copy ``size`` bytes starting at ``addr``."""
        self._check(addr, size)
        out = bytearray()
        for index, offset, count in self._spans(addr, size):
            chunk = self._chunks.get(index)
            out += bytes(count) if chunk is None else chunk[offset:offset + count]
        return bytes(out)

    def write_bytes(self, addr: int, data: bytes) -> None:
        """Store ``data`` starting at ``addr``."""
        data = bytes(data)
        self._check(addr, len(data))
        position = 0
        for index, offset, count in self._spans(addr, len(data)):
            chunk = self._chunks.setdefault(index, bytearray(_CHUNK))
            chunk[offset:offset + count] = data[position:position + count]
            position += count

    def fill(self, addr: int, value: int, size: int) -> None:
        """Set ``size`` bytes at ``addr`` to the low byte of ``value``."""
        if size < 0:
            raise ValueError("fill size must not be negative")
        self.write_bytes(addr, bytes([value & 0xFF]) * size)

    def _read(self, addr: int, width: int) -> int:
        return int.from_bytes(self.read_bytes(addr, width), "little")

    def _write(self, addr: int, width: int, value: int) -> None:
        mask = (1 << (8 * width)) - 1
        self.write_bytes(addr, (value & mask).to_bytes(width, "little"))

    def read8(self, addr: int) -> int:
        return self._read(addr, 1)

    def write8(self, addr: int, value: int) -> None:
        self._write(addr, 1, value)

    def read16(self, addr: int) -> int:
        return self._read(addr, 2)

    def write16(self, addr: int, value: int) -> None:
        self._write(addr, 2, value)

    def read32(self, addr: int) -> int:
        return self._read(addr, 4)

    def write32(self, addr: int, value: int) -> None:
        self._write(addr, 4, value)

    def read64(self, addr: int) -> int:
        return self._read(addr, 8)

    def write64(self, addr: int, value: int) -> None:
        self._write(addr, 8, value)