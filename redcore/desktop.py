"""The launcher grid of user programs."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from redcore.geometry import Point, Rect, Size
from redcore.keys import Key
from redcore.textfmt import strcmp, truncate

USER_DIRECTORY = "/redos/user/"
EXECUTABLE_EXTENSION = ".elf"
MAX_COLS = 3
MAX_ROWS = 3
MAX_ENTRIES = 9
TILE_BORDER = 4


def find_extension(path: str) -> int:
    """Return the index of the first '.' in ``path``, or its length."""
    dot = path.find(".")
    return len(path) if dot < 0 else dot


@dataclass(frozen=True)
class LaunchEntry:
    name: str
    ext: str
    path: str


class Desktop:
    """A 3x3 grid of launchable programs with a keyboard-driven selection."""

    def __init__(self, file_names: Iterable[str], screen_size: Size) -> None:
        self.entries: list[LaunchEntry] = []
        for file in file_names:
            split = find_extension(file)
            ext = file[split:]
            if strcmp(ext, EXECUTABLE_EXTENSION) != 0 or len(self.entries) >= MAX_ENTRIES:
                continue
            self.entries.append(
                LaunchEntry(truncate(file, split), ext, USER_DIRECTORY + file)
            )
        self.tile_size = Size(
            screen_size.width // MAX_COLS - 20,
            screen_size.height // (MAX_ROWS + 1) - 20,
        )
        self.selected = Point()

    def handle_key(self, key: int) -> LaunchEntry | None:
        """Move the selection; on Enter return the entry to launch."""
        if key == Key.ENTER:
            return self.selected_entry()
        if key == Key.ARROW_RIGHT:
            self.selected.x = (self.selected.x + 1) % MAX_COLS
        elif key == Key.ARROW_LEFT:
            self.selected.x = (self.selected.x - 1 + MAX_COLS) % MAX_COLS
        elif key == Key.ARROW_DOWN:
            self.selected.y = (self.selected.y + 1) % MAX_ROWS
        elif key == Key.ARROW_UP:
            self.selected.y = (self.selected.y - 1 + MAX_ROWS) % MAX_ROWS
        return None

    def selected_entry(self) -> LaunchEntry | None:
        index = self.selected.y * MAX_COLS + self.selected.x
        return self.entries[index] if index < len(self.entries) else None

    def tile_rect(self, column: int, row: int) -> Rect:
        """Return the inner rectangle of a tile; the selected tile is inset."""
        selected = self.selected.x == column and self.selected.y == row
        border = TILE_BORDER if selected else 0
        width, height = self.tile_size.width, self.tile_size.height
        return Rect(
            Point(10 + (width + 10) * column + border, 50 + (height + 10) * row + border),
            Size(width - 2 * border, height - 2 * border),
        )