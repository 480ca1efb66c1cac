"""Keyboard key codes, modifier flags and key-press reports."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, IntFlag

KEYS_PER_REPORT = 6


class Key(IntEnum):
    """HID usage codes of the keys the system reacts to."""

    ARROW_UP = 0x52
    ARROW_DOWN = 0x51
    ARROW_LEFT = 0x50
    ARROW_RIGHT = 0x4F
    BACKSPACE = 0x2A
    ENTER = 0x28
    ESC = 0x29


class Modifier(IntFlag):
    """Modifier bits of a key-press report."""

    NONE = 0
    CTRL = 0x1
    ALT = 0x4
    CMD = 0x8


_HID_CHARS: dict[int, str] = {
    **{0x04 + offset: chr(ord("a") + offset) for offset in range(26)},
    **{0x1E + offset: digit for offset, digit in enumerate("1234567890")},
    0x28: "\n",
    0x2C: " ",
    0x2D: "-",
    0x2E: "=",
    0x2F: "[",
    0x30: "]",
    0x31: "\\",
    0x33: ";",
    0x34: "'",
    0x35: "`",
    0x36: ",",
    0x37: ".",
    0x38: "/",
}


def hid_to_char(keycode: int) -> str | None:
    """Return the character a HID key code types, or None when it types nothing."""
    return _HID_CHARS.get(keycode & 0xFF)


@dataclass(frozen=True)
class KeyPress:
    """One keyboard report: a modifier mask and up to six pressed key codes."""

    modifier: int = 0
    keys: tuple[int, ...] = (0,) * KEYS_PER_REPORT

    def __post_init__(self) -> None:
        keys = tuple(self.keys)
        if len(keys) > KEYS_PER_REPORT:
            raise ValueError(f"a key press holds at most {KEYS_PER_REPORT} keys")
        object.__setattr__(self, "keys", keys + (0,) * (KEYS_PER_REPORT - len(keys)))

    def contains(self, key: int, modifier: int) -> bool:
        """Return True when ``key`` is pressed and the modifiers equal ``modifier``."""
        if self.modifier != modifier:
            return False
        return key in self.keys