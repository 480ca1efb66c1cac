"""Page-granular bump allocators for kernel scratch memory and MMIO regions."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from redcore.memory import Memory

_log = logging.getLogger(__name__)

PAGE_SIZE = 0x1000
PCI_MMIO_BASE = 0x10010000
PCI_MMIO_LIMIT = 0x1FFFFFFF


def round_to_page(size: int) -> int:
    """Round ``size`` up to a multiple of 4 KiB."""
    if size < 0:
        raise ValueError("size must not be negative")
    return (size + 0xFFF) & ~0xFFF


class AllocatorOverflow(MemoryError):
    """Raised when an allocator has no room left below its limit."""


@dataclass
class _FreeBlock:
    address: int
    size: int


class TempAllocator:
    """Allocates whole pages between ``heap_bottom`` and ``heap_limit``.

    Freed blocks are reused first, most recently freed first, when large
    enough. Allocated memory is zeroed when a ``memory`` is attached.
    """

    def __init__(self, heap_bottom: int, heap_limit: int, memory: Memory | None = None) -> None:
        if heap_limit < heap_bottom:
            raise ValueError("heap limit lies below heap bottom")
        self.heap_bottom = heap_bottom
        self.heap_limit = heap_limit
        self.next_free = heap_bottom
        self.memory = memory
        self._free: list[_FreeBlock] = []

    def _zero(self, address: int, size: int) -> None:
        if self.memory is not None:
            self.memory.fill(address, 0, size)

    def alloc(self, size: int) -> int:
        """Return the address of a zeroed block of at least ``size`` bytes."""
        size = round_to_page(size)
        _log.debug("requested size %#x", size)
        for position, block in enumerate(self._free):
            if block.size >= size:
                del self._free[position]
                _log.debug("reusing free block at %#x", block.address)
                self._zero(block.address, size)
                return block.address
        if self.next_free + size > self.heap_limit:
            raise AllocatorOverflow(f"kernel allocator overflow at {self.next_free:#x}")
        address = self.next_free
        self.next_free += size
        _log.debug("allocated address %#x", address)
        self._zero(address, size)
        return address

    def free(self, address: int, size: int) -> None:
        """Return a block to the allocator."""
        size = round_to_page(size)
        _log.debug("freeing block at %#x size %#x", address, size)
        self._zero(address, size)
        self._free.insert(0, _FreeBlock(address, size))


class MmioAllocator:
    """Hands out page-aligned address ranges for device registers."""

    def __init__(self, base: int = PCI_MMIO_BASE, limit: int = PCI_MMIO_LIMIT) -> None:
        self.base = base
        self.limit = limit
        self.next_base = base

    def alloc(self, size: int) -> int:
        """Reserve ``size`` bytes, rounded up to a page, and return the start."""
        size = round_to_page(size)
        if self.next_base + size > self.limit:
            raise AllocatorOverflow(f"MMIO alloc overflow at {self.next_base + size:#x}")
        address = self.next_base
        self.next_base += size
        return address