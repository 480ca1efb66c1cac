import pytest

from redcore.textfmt import (
    bin_string,
    format_string,
    hex_string,
    kformat,
    memcmp,
    repeat,
    strcmp,
    strcont,
    strend,
    strstart,
    tail,
    truncate,
    utf16_to_ascii,
)


def test_hex_zero_keeps_one_digit():
    assert hex_string(0) == "0x0"


@pytest.mark.parametrize("value", [1, 15, 255, 0xDEADBEEF, (1 << 64) - 1])
def test_hex_round_trip(value):
    text = hex_string(value)
    assert text.startswith("0x")
    assert int(text[2:], 16) == value
    assert text[2:] == text[2:].upper()
    assert len(text) == 3 or text[2] != "0"


def test_hex_masks_to_64_bits():
    assert int(hex_string(1 << 64 | 7)[2:], 16) == 7


@pytest.mark.parametrize("value", [0, 1, 5, 1 << 40, (1 << 64) - 1])
def test_bin_round_trip(value):
    text = bin_string(value, 63)
    assert text.startswith("0b")
    assert int(text[2:], 2) == value


def test_bin_from_bit_60_drops_high_bits():
    value = (1 << 63) | (1 << 60) | 3
    assert int(bin_string(value, 60)[2:], 2) == value & ((1 << 61) - 1)


def test_bin_rejects_bad_top_bit():
    with pytest.raises(ValueError):
        bin_string(1, 64)


def test_tail_and_truncate():
    assert tail("abcdef", 3) == "def"
    assert tail("ab", 5) == "ab"
    assert tail("abc", 0) == ""
    assert truncate("abcdef", 2) == "ab"
    assert truncate("abcdef", 0) == "abcdef"
    assert truncate("ab\0cd", 0) == "ab"


def test_repeat():
    assert repeat("*", 4) == "****"
    assert repeat("*", 0) == ""
    with pytest.raises(ValueError):
        repeat("ab", 2)


def test_kformat_hex_and_text():
    assert kformat("a%xb", [255]) == "a" + hex_string(255) + "b"
    assert kformat("name %s", ["kernel"]) == "name kernel"
    assert kformat("%c", [ord("Z")]) == "Z"


@pytest.mark.parametrize("value", [0, 7, -5, 123456])
def test_kformat_signed(value):
    assert kformat("%i", [value]) == str(value)


def test_kformat_binary_uses_bit_60():
    value = (1 << 62) | 1
    assert kformat("%b", [value]) == bin_string(value, 60)


def test_kformat_stops_when_arguments_run_out():
    assert kformat("x=%i y=%i", [1]) == "x=1 y="


def test_kformat_unknown_spec_is_kept():
    assert kformat("%q", [0]) == "%q"


def test_kformat_trailing_percent():
    assert kformat("50%", []) == "50%"


def test_kformat_caps_length():
    assert len(kformat("a" * 300, [])) == 255


def test_format_string_float():
    assert format_string("%f", 1.5) == "1.500000"
    assert format_string("%d", -2.25) == "-2.250000"


def test_format_string_values():
    assert format_string("hello %s", "world") == "hello world"
    assert format_string("%i", -7) == str(-7)
    assert format_string("%c", "A") == "A"
    assert format_string("%x", 4096) == hex_string(4096)
    assert format_string("%b", 5) == bin_string(5, 63)


def test_format_string_missing_argument():
    with pytest.raises(ValueError):
        format_string("%i and %i", 1)


def test_format_string_caps_long_expansion():
    result = format_string("%s%s", "a" * 200, "b" * 200)
    assert len(result) == 255
    assert result == ("a" * 200 + "b" * 200)[:255]


def test_strcmp():
    assert strcmp("abc", "abc") == 0
    assert strcmp("abc", "abd") < 0
    assert strcmp("abd", "abc") > 0
    assert strcmp("ab", "abc") == -ord("c")
    assert strcmp("abc", "ab") == ord("c")


def test_strstart():
    assert strstart("abc", "ab") == 0
    assert strstart("ab", "abc") == 0
    assert strstart("abc", "xb") == ord("a") - ord("x")


def test_strend():
    assert strend("hello.elf", ".elf") == 0
    assert strend("hello.elf", ".bin") == 1
    assert strend("x", "") == 1


def test_strcont():
    assert strcont("redos/user", "user") is True
    assert strcont("redos", "x") is False
    assert strcont("", "") is False
    assert strcont("a", "") is True


def test_utf16_to_ascii():
    units = [ord(c) for c in "hi"] + [0x263A, 0, ord("x")]
    assert utf16_to_ascii(units, 10) == "hi?"
    assert utf16_to_ascii([65, 66, 67], 3) == "AB"
    assert utf16_to_ascii([65], 0) == ""


def test_memcmp():
    assert memcmp(b"abc", b"abd", 3) == ord("c") - ord("d")
    assert memcmp(b"abc", b"abd", 2) == 0
    with pytest.raises(ValueError):
        memcmp(b"a", b"ab", 2)