"""A text label placed and aligned inside a rectangle."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

from redcore.framebuffer import Framebuffer, char_size
from redcore.geometry import Point, Rect, Size


class HorizontalAlignment(IntEnum):
    LEADING = 1 << 1
    HORIZONTAL_CENTER = 1 << 2
    TRAILING = 1 << 3


class VerticalAlignment(IntEnum):
    TOP = 1 << 1
    BOTTOM = 1 << 2
    VERTICAL_CENTER = 1 << 3


@dataclass
class Label:
    """Text drawn over a filled background rectangle."""

    rect: Rect = field(default_factory=Rect)
    text: str = ""
    background_color: int = 0
    text_color: int = 0
    scale: int = 1
    horizontal_alignment: HorizontalAlignment = HorizontalAlignment.LEADING
    vertical_alignment: VerticalAlignment = VerticalAlignment.TOP

    def size(self) -> Size:
        """Return the pixel size the text takes: widest line by line count."""
        lines = self.text.split("\n")
        widest = max(len(line) for line in lines)
        cell = char_size(self.scale)
        return Size(cell * widest, cell * len(lines))

    def position(self) -> Point:
        """Return where the text starts so that it follows the alignment."""
        rect = self.rect
        x, y = rect.point.x, rect.point.y
        if self.horizontal_alignment is HorizontalAlignment.TRAILING:
            x = rect.point.x + rect.size.width - self.size().width
        elif self.horizontal_alignment is HorizontalAlignment.HORIZONTAL_CENTER:
            x = rect.point.x + rect.size.width // 2 - self.size().width // 2
        if self.vertical_alignment is VerticalAlignment.BOTTOM:
            y = rect.point.y + rect.size.height - self.size().height
        elif self.vertical_alignment is VerticalAlignment.VERTICAL_CENTER:
            y = rect.point.y + rect.size.height // 2 - self.size().height // 2
        return Point(x, y)

    def render(self, framebuffer: Framebuffer) -> None:
        """Fill the background and draw the aligned text."""
        rect = self.rect
        framebuffer.fill_rect(
            rect.point.x, rect.point.y, rect.size.width, rect.size.height,
            self.background_color,
        )
        origin = self.position()
        framebuffer.draw_string(self.text, origin.x, origin.y, self.scale, self.text_color)

    def adapt_to_size(self) -> None:
        """Shrink or grow the rectangle to exactly fit the text."""
        self.rect.size = self.size()