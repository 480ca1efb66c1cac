"""Fixed-size text formatting and C-style string helpers."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

_MASK64 = (1 << 64) - 1
_MASK32 = (1 << 32) - 1
_BUFFER_LIMIT = 255


def _c_str(text: str) -> str:
    """Return text up to its first NUL character."""
    end = text.find("\0")
    return text if end < 0 else text[:end]


def hex_string(value: int) -> str:
    """Render a 64-bit value as ``0x`` followed by upper-case hex digits."""
    return f"0x{value & _MASK64:X}"


def bin_string(value: int, top_bit: int = 63) -> str:
    """Render the bits of ``value`` from ``top_bit`` down to bit 0 as ``0b...``."""
    if not 0 <= top_bit <= 63:
        raise ValueError(f"top_bit must be between 0 and 63, got {top_bit}")
    bits = value & ((1 << (top_bit + 1)) - 1)
    return f"0b{bits:b}"


def tail(text: str, max_length: int) -> str:
    """Return at most the last ``max_length`` characters of ``text``."""
    text = _c_str(text)
    offset = max(len(text) - max_length, 0)
    return text[offset:]


def truncate(text: str, max_length: int) -> str:
    """Return at most ``max_length`` leading characters; 0 means no limit."""
    text = _c_str(text)
    return text if max_length == 0 else text[:max_length]


def repeat(symbol: str, amount: int) -> str:
    """Return ``symbol`` repeated ``amount`` times."""
    if len(symbol) != 1:
        raise ValueError("symbol must be a single character")
    if amount < 0:
        raise ValueError("amount must not be negative")
    return symbol * amount


def _signed32(value: int) -> str:
    value &= _MASK32
    if value >= 1 << 31:
        value -= 1 << 32
    return str(value)


def _char(value: Any) -> str:
    if isinstance(value, str):
        if len(value) != 1:
            raise ValueError("%c expects a single character")
        return value
    return chr(value & 0xFF)


def _text(value: Any) -> str:
    return _c_str(str(value))


def _fixed_point(value: float) -> str:
    value = float(value)
    sign = ""
    if value < 0:
        sign = "-"
        value = -value
    whole = int(value)
    fraction = value - float(whole)
    digits = []
    for _ in range(6):
        fraction *= 10
        digit = int(fraction)
        digits.append(chr(ord("0") + digit))
        fraction -= digit
    return f"{sign}{whole}." + "".join(digits)


_KERNEL_CONVERSIONS: Mapping[str, Callable[[Any], str]] = {
    "x": hex_string,
    "b": lambda value: bin_string(value, 60),
    "c": _char,
    "s": _text,
    "i": _signed32,
}

_SHARED_CONVERSIONS: Mapping[str, Callable[[Any], str]] = {
    "x": hex_string,
    "b": lambda value: bin_string(value, 63),
    "c": _char,
    "s": _text,
    "i": _signed32,
    "f": _fixed_point,
    "d": _fixed_point,
}


def _render(
    fmt: str,
    args: Sequence[Any],
    conversions: Mapping[str, Callable[[Any], str]],
    *,
    stop_when_exhausted: bool,
) -> str:
    pieces: list[str] = []
    size = 0
    supplied = iter(args)
    consumed = 0
    chars = iter(_c_str(fmt))
    for ch in chars:
        if size >= _BUFFER_LIMIT:
            break
        if ch == "%":
            spec = next(chars, None)
            if spec is None:
                piece = "%"
            else:
                if stop_when_exhausted and consumed >= len(args):
                    break
                convert = conversions.get(spec)
                if convert is None:
                    piece = "%" + spec
                else:
                    try:
                        arg = next(supplied)
                    except StopIteration:
                        raise ValueError(
                            f"not enough arguments for format {fmt!r}"
                        ) from None
                    consumed += 1
                    piece = convert(arg)
        else:
            piece = ch
        pieces.append(piece)
        size += len(piece)
    return "".join(pieces)[:_BUFFER_LIMIT]


def kformat(fmt: str, args: Iterable[Any]) -> str:
    """Format with ``%x %b %c %s %i``; stops at the first spec without an argument.

    Binary values show bits 60..0. The result holds at most 255 characters.
    """
    return _render(fmt, list(args), _KERNEL_CONVERSIONS, stop_when_exhausted=True)


def format_string(fmt: str, *args: Any) -> str:
    """Format with ``%x %b %c %s %i %f %d``; the result holds at most 255 characters.

    Raises ValueError when a conversion has no argument left.
    """
    return _render(fmt, args, _SHARED_CONVERSIONS, stop_when_exhausted=False)


def strcmp(a: str, b: str) -> int:
    """Compare like C ``strcmp``: difference of the first mismatching characters."""
    a, b = _c_str(a), _c_str(b)
    for x, y in zip(a, b):
        if x != y:
            return ord(x) - ord(y)
    if len(a) == len(b):
        return 0
    return ord(a[len(b)]) if len(a) > len(b) else -ord(b[len(a)])


def strstart(a: str, b: str) -> int:
    """Return 0 when one string is a prefix of the other, else the character difference."""
    for x, y in zip(_c_str(a), _c_str(b)):
        if x != y:
            return ord(x) - ord(y)
    return 0


def strend(a: str, b: str) -> int:
    """Return 0 when non-empty ``b`` ends ``a``, else 1."""
    a, b = _c_str(a), _c_str(b)
    return 0 if b and a.endswith(b) else 1


def strcont(a: str, b: str) -> bool:
    """Return True when non-empty ``a`` contains ``b``."""
    a, b = _c_str(a), _c_str(b)
    return bool(a) and b in a


def utf16_to_ascii(units: Iterable[int], max_len: int) -> str:
    """Convert NUL-terminated UTF-16 units to ASCII, replacing others with '?'.

    At most ``max_len - 1`` characters are produced.
    """
    out: list[str] = []
    for unit in units:
        if unit == 0 or len(out) + 1 >= max_len:
            break
        out.append(chr(unit) if unit <= 0x7F else "?")
    return "".join(out)


def memcmp(a: bytes, b: bytes, n: int) -> int:
    """Compare the first ``n`` bytes; return the difference of the first mismatch."""
    if n > len(a) or n > len(b):
        raise ValueError("n exceeds the length of an operand")
    for x, y in zip(bytes(a[:n]), bytes(b[:n])):
        if x != y:
            return x - y
    return 0