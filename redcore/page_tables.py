"""Four-level translation tables with 2 MiB blocks and 4 KiB pages."""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Union

from redcore.textfmt import hex_string

_log = logging.getLogger(__name__)

PD_TABLE = 0b11
PD_BLOCK = 0b01
PD_ACCESS = 1 << 10
GRANULE_4KB = 0x1000
GRANULE_2MB = 0x200000

_ADDR_MASK = 0xFFFFFFFFF000
_INDEX_MASK = 0x1FF
# Access permission bits for EL0, EL1 and shared pages.
_PERMISSIONS = {0: 0b01, 1: 0b00, 2: 0b10}

_Table = dict[int, Union["_Table", int]]


class MappingError(Exception):
    """Raised when a page cannot be mapped over an existing larger block."""


class MemoryAttr(IntEnum):
    """Memory attribute indices."""

    DEVICE = 0
    NORMAL = 1


def table_indices(va: int) -> tuple[int, int, int, int]:
    """Return the four table indices used to translate ``va``."""
    return (
        (va >> 37) & _INDEX_MASK,
        (va >> 30) & _INDEX_MASK,
        (va >> 21) & _INDEX_MASK,
        (va >> 12) & _INDEX_MASK,
    )


def _child(table: _Table, index: int) -> _Table:
    entry = table.get(index)
    if isinstance(entry, dict):
        return entry
    new: _Table = {}
    table[index] = new
    return new


class PageTables:
    """Translation tables; leaf entries hold hardware descriptors."""

    def __init__(self) -> None:
        self._root: _Table = {}

    def map_2mb(self, va: int, pa: int, attr_index: int) -> None:
        """Map a 2 MiB block, not executable from EL0."""
        i1, i2, i3, _ = table_indices(va)
        _log.debug("mapping 2mb memory %#x at [%d][%d][%d]", va, i1, i2, i3)
        l3 = _child(_child(self._root, i1), i2)
        attr = (1 << 54) | PD_ACCESS | (0b11 << 8) | (attr_index << 2) | PD_BLOCK
        l3[i3] = (pa & _ADDR_MASK) | attr

    def map_4kb(self, va: int, pa: int, attr_index: int, level: int) -> bool:
        """Map one 4 KiB page; ``level`` is 0 for EL0, 1 for EL1, 2 for shared.

        Returns False when the page is already mapped.
        """
        if level not in _PERMISSIONS:
            raise ValueError(f"unknown privilege level {level}")
        i1, i2, i3, i4 = table_indices(va)
        l3 = _child(_child(self._root, i1), i2)
        if isinstance(l3.get(i3), int):
            raise MappingError(
                f"region not mapped for address {va:#x}, already mapped at higher "
                f"granularity [{i1}][{i2}][{i3}][{i4}]"
            )
        l4 = _child(l3, i3)
        if i4 in l4:
            _log.warning("section already mapped %#x", va)
            return False
        permission = _PERMISSIONS[level]
        attr = (
            (int(level == 1) << 54) | PD_ACCESS | (0b11 << 8)
            | (permission << 6) | (attr_index << 2) | 0b11
        )
        _log.debug(
            "mapping 4kb memory %#x at [%d][%d][%d][%d] for EL%d = %#x | %#x",
            va, i1, i2, i3, i4, level, pa, attr,
        )
        l4[i4] = (pa & _ADDR_MASK) | attr
        return True

    def unmap(self, va: int) -> bool:
        """Remove the page or block covering ``va``; False when none was mapped."""
        i1, i2, i3, i4 = table_indices(va)
        l2 = self._root.get(i1)
        if not isinstance(l2, dict):
            return False
        l3 = l2.get(i2)
        if not isinstance(l3, dict):
            return False
        entry = l3.get(i3)
        if entry is None:
            return False
        if isinstance(entry, int):
            del l3[i3]
            return True
        return entry.pop(i4, None) is not None

    def lookup(self, va: int) -> int | None:
        """Return the leaf descriptor covering ``va``, or None."""
        i1, i2, i3, i4 = table_indices(va)
        l2 = self._root.get(i1)
        if not isinstance(l2, dict):
            return None
        l3 = l2.get(i2)
        if not isinstance(l3, dict):
            return None
        entry = l3.get(i3)
        if entry is None or isinstance(entry, int):
            return entry
        leaf = entry.get(i4)
        return leaf if isinstance(leaf, int) else None

    def describe(self, va: int) -> str:
        """Explain how ``va`` is mapped, one finding per line."""
        i1, i2, i3, i4 = table_indices(va)
        lines = [f"Address is meant to be mapped to [{i1}][{i2}][{i3}][{i4}]"]
        l2 = self._root.get(i1)
        if not isinstance(l2, dict):
            lines.append("L1 Table missing")
            return "\n".join(lines)
        l3 = l2.get(i2)
        if not isinstance(l3, dict):
            lines.append("L2 Table missing")
            return "\n".join(lines)
        entry = l3.get(i3)
        if entry is None:
            lines.append("L3 Table missing")
        elif isinstance(entry, int):
            lines.append("Mapped as 2MB memory in L3")
            lines.append(f"Entry: {hex_string(entry)}")
        elif i4 not in entry:
            lines.append("L4 Table entry missing")
        else:
            leaf = entry[i4]
            assert isinstance(leaf, int)
            lines.append(f"Entry: {hex_string(leaf)}")
        return "\n".join(lines)