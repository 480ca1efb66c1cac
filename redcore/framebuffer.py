"""A 32-bit pixel framebuffer with line, rectangle and 8x8 text drawing."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from redcore.geometry import Point, Rect, Size

_BLANK_GLYPH = (0,) * 8


def char_size(scale: int) -> int:
    """Return the pixel size of one character cell at ``scale``."""
    return 8 * scale


def _half(value: int) -> int:
    return -((-value) // 2) if value < 0 else value // 2


class Framebuffer:
    """Pixels stored row by row, ``stride`` bytes per row, 4 bytes per pixel.

    ``font`` maps character codes to 8 rows of bits (bit 7 is the leftmost
    pixel); missing characters draw nothing. Pixels outside the bounds are ignored.
    """

    def __init__(
        self,
        width: int,
        height: int,
        stride: int | None = None,
        font: Mapping[int, Sequence[int]] | None = None,
    ) -> None:
        if width < 0 or height < 0:
            raise ValueError("framebuffer dimensions must not be negative")
        self.width = width
        self.height = height
        self.stride = width * 4 if stride is None else stride
        if self.stride % 4 or self.stride < width * 4:
            raise ValueError("stride must be a multiple of 4 covering the width")
        self._row = self.stride // 4
        self._pixels = [0] * (self._row * height)
        self._font = dict(font or {})

    def _contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def pixel(self, x: int, y: int) -> int:
        """Return the color at ``(x, y)``."""
        if not self._contains(x, y):
            raise IndexError(f"pixel ({x}, {y}) is outside the framebuffer")
        return self._pixels[y * self._row + x]

    def clear(self, color: int) -> None:
        """Fill the first ``width * height`` entries of the buffer with ``color``."""
        count = self.width * self.height
        self._pixels[:count] = [color] * count

    def draw_pixel(self, x: int, y: int, color: int) -> None:
        if self._contains(x, y):
            self._pixels[y * self._row + x] = color

    def fill_rect(self, x: int, y: int, width: int, height: int, color: int) -> None:
        for dy in range(height):
            for dx in range(width):
                self.draw_pixel(x + dx, y + dy, color)

    def draw_line(self, x0: int, y0: int, x1: int, y1: int, color: int) -> Rect:
        """Draw a Bresenham line and return the rectangle around its final point."""
        dx = abs(x1 - x0)
        sx = 1 if x0 < x1 else -1
        dy = abs(y1 - y0)
        sy = 1 if y0 < y1 else -1
        err = _half(dx if dx > dy else -dy)
        while True:
            self.draw_pixel(x0, y0, color)
            if x0 == x1 and y0 == y1:
                break
            e2 = err
            if e2 > -dx:
                err -= dy
                x0 += sx
            if e2 < dy:
                err += dx
                y0 += sy
        min_x, max_x = min(x0, x1), max(x0, x1)
        min_y, max_y = min(y0, y1), max(y0, y1)
        return Rect(Point(min_x, min_y), Size(max_x - min_x + 1, max_y - min_y + 1))

    def _glyph(self, code: int) -> tuple[int, ...]:
        rows = tuple(self._font.get(code, _BLANK_GLYPH))[:8]
        return rows + (0,) * (8 - len(rows))

    def draw_char(self, x: int, y: int, char: str | int, scale: int, color: int) -> None:
        code = (ord(char) if isinstance(char, str) else char) & 0xFF
        glyph = self._glyph(code)
        side = char_size(scale)
        for row in range(side):
            bits = glyph[row // scale]
            for col in range(side):
                if bits & (1 << (7 - col // scale)):
                    self.draw_pixel(x + col, y + row, color)

    def draw_string(self, text: str, x: int, y: int, scale: int, color: int) -> Size:
        """Draw ``text`` with '\\n' line breaks and return the area it covers."""
        cell = char_size(scale)
        line_height = cell + 2
        column = 0
        width = 0
        row_width = 0
        height = line_height
        for ch in text:
            if ch == "\n":
                y += line_height
                height += line_height
                width = max(width, row_width)
                row_width = 0
                column = 0
            else:
                self.draw_char(x + column * cell, y, ch, scale, color)
                column += 1
                row_width += cell
        return Size(max(width, row_width), height)