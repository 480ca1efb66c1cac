import pytest

from redcore.keys import Key, KeyPress, Modifier, hid_to_char


def test_letters_and_digits_map_from_hid_codes():
    assert hid_to_char(0x04) == "a"
    assert hid_to_char(0x1D) == "z"
    assert hid_to_char(0x27) == "0"


def test_enter_types_newline():
    assert hid_to_char(Key.ENTER) == "\n"


@pytest.mark.parametrize("code", [0x00, Key.BACKSPACE, Key.ESC, Key.ARROW_UP, 0x32])
def test_unmapped_codes_type_nothing(code):
    assert hid_to_char(code) is None


def test_keycode_is_taken_as_a_byte():
    assert hid_to_char(0x104) == hid_to_char(0x04)


def test_keypress_is_padded_to_six_keys():
    kp = KeyPress(Modifier.NONE, (Key.ENTER,))
    assert kp.keys == (Key.ENTER, 0, 0, 0, 0, 0)


def test_keypress_rejects_too_many_keys():
    with pytest.raises(ValueError):
        KeyPress(0, (1, 2, 3, 4, 5, 6, 7))


def test_contains_requires_matching_modifier():
    kp = KeyPress(Modifier.ALT | Modifier.CMD, (0x15,))
    assert kp.contains(0x15, Modifier.ALT | Modifier.CMD)
    assert not kp.contains(0x15, Modifier.ALT)


def test_contains_checks_every_slot():
    kp = KeyPress(Modifier.NONE, (0x04, 0x05, 0x06, 0x07, 0x08, 0x09))
    assert kp.contains(0x09, Modifier.NONE)
    assert not kp.contains(0x0A, Modifier.NONE)