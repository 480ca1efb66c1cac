"""A bitmap page allocator with small per-page heaps."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from redcore.memory import Memory

_log = logging.getLogger(__name__)

PAGE_SIZE = 4096
PAGES_PER_WORD = 64
HEADER_SIZE = 32

ALIGN_4KB = 0x1000
ALIGN_16B = 0x10
ALIGN_64B = 0x40

PageMapper = Callable[[int, bool, bool], None]


def count_pages(value: int, divisor: int) -> int:
    """Return how many ``divisor``-sized units cover ``value``."""
    return value // divisor + (value % divisor > 0)


class OutOfMemoryError(MemoryError):
    """Raised when no run of free pages is large enough."""


@dataclass
class HeapPage:
    """Bookkeeping for one page used as a small-object heap."""

    address: int
    next_free: int
    next: int | None = None
    free_list: list[tuple[int, int]] = field(default_factory=list)
    size: int = 0


class PageAllocator:
    """Allocates 4 KiB pages between ``ram_start`` and ``ram_end``.

    Pages are searched in groups of 64; a multi-page request must fit in one
    group. ``map_page(address, kernel, device)`` is called for every page
    handed out; ``device`` is only true for kernel device pages.
    """

    def __init__(
        self,
        ram_start: int,
        ram_end: int,
        memory: Memory | None = None,
        map_page: PageMapper | None = None,
    ) -> None:
        if ram_end < ram_start:
            raise ValueError("RAM end lies below RAM start")
        self.ram_start = ram_start
        self.ram_end = ram_end
        self.memory = memory
        self.map_page = map_page
        self.heap_pages: dict[int, HeapPage] = {}
        self._allocated: set[int] = set()

    def _zero(self, address: int, size: int) -> None:
        if self.memory is not None:
            self.memory.fill(address, 0, size)

    def _find_run(self, page_count: int) -> int:
        start = count_pages(self.ram_start, PAGE_SIZE)
        end = count_pages(self.ram_end, PAGE_SIZE)
        first_group = start // PAGES_PER_WORD
        last_group = count_pages(end, PAGES_PER_WORD)
        for group in range(first_group, last_group):
            base = group * PAGES_PER_WORD
            for bit in range(PAGES_PER_WORD - page_count + 1):
                first = base + bit
                if first < start or first + page_count > end:
                    continue
                if all(page not in self._allocated for page in range(first, first + page_count)):
                    return first
        raise OutOfMemoryError(f"could not allocate {page_count} pages")

    def alloc_page(self, size: int, kernel: bool, device: bool, full: bool) -> int:
        """Reserve enough pages for ``size`` bytes and return the first address.

        Unless ``full`` is set, each page is prepared as an empty heap page.
        """
        if size <= 0:
            raise ValueError("page allocation size must be positive")
        page_count = count_pages(size, PAGE_SIZE)
        first = self._find_run(page_count)
        for page in range(first, first + page_count):
            self._allocated.add(page)
            address = page * PAGE_SIZE
            if self.map_page is not None:
                self.map_page(address, kernel, device and kernel)
            if full:
                self.heap_pages.pop(address, None)
            else:
                self.heap_pages[address] = HeapPage(address, address + HEADER_SIZE)
        first_address = first * PAGE_SIZE
        _log.debug("final address %#x", first_address)
        return first_address

    def free_page(self, address: int) -> None:
        """Release the page holding ``address``."""
        page = address // PAGE_SIZE
        self._allocated.discard(page)
        self.heap_pages.pop(page * PAGE_SIZE, None)

    def is_allocated(self, address: int) -> bool:
        """Return True when the page holding ``address`` is in use."""
        return address // PAGE_SIZE in self._allocated

    def _heap(self, page: int) -> HeapPage:
        try:
            return self.heap_pages[page]
        except KeyError:
            raise ValueError(f"{page:#x} is not a heap page") from None

    def allocate_in_page(
        self,
        page: int,
        size: int,
        alignment: int = ALIGN_16B,
        kernel: bool = True,
        device: bool = False,
    ) -> int:
        """Allocate ``size`` zeroed bytes from the heap chain starting at ``page``.

        Requests of a page or more get whole pages of their own.
        """
        if alignment <= 0 or alignment & (alignment - 1):
            raise ValueError("alignment must be a power of two")
        if size < 0:
            raise ValueError("size must not be negative")
        size = (size + alignment - 1) & ~(alignment - 1)
        _log.debug("requested size %#x", size)

        if size >= PAGE_SIZE:
            first: int | None = None
            for _ in range(0, size, PAGE_SIZE):
                address = self.alloc_page(PAGE_SIZE, kernel, device, True)
                self._zero(address, PAGE_SIZE)
                if first is None:
                    first = address
            assert first is not None
            return first

        info = self._heap(page)
        while True:
            for position, (address, block_size) in enumerate(info.free_list):
                if block_size >= size:
                    del info.free_list[position]
                    _log.debug("reusing free block at %#x", address)
                    self._zero(address, size)
                    info.size += size
                    return address
            info.next_free = (info.next_free + alignment - 1) & ~(alignment - 1)
            if info.next_free + size > info.address + PAGE_SIZE:
                if info.next is None:
                    info.next = self.alloc_page(PAGE_SIZE, kernel, device, False)
                _log.debug("page full, moving to %#x", info.next)
                info = self._heap(info.next)
                continue
            address = info.next_free
            info.next_free += size
            _log.debug("allocated address %#x", address)
            self._zero(address, size)
            info.size += size
            return address

    def free_from_page(self, address: int, size: int) -> None:
        """Return a block obtained from :meth:`allocate_in_page` to its page."""
        info = self._heap(address & ~0xFFF)
        _log.debug("freeing block at %#x size %#x", address, size)
        self._zero(address, size)
        info.free_list.insert(0, (address, size))
        info.size -= size

    def heap_usage(self, page: int) -> int:
        """Return the bytes in use across the heap chain starting at ``page``."""
        total = 0
        current: int | None = page
        while current is not None:
            info = self._heap(current)
            total += info.size
            current = info.next
        return total