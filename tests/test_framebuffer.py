import pytest

from redcore.framebuffer import Framebuffer, char_size
from redcore.geometry import Point, Rect, Size

RED = 0xFF0000
FULL_BLOCK = {ord("a"): [0xFF] * 8}


def all_pixels(fb):
    return [fb.pixel(x, y) for y in range(fb.height) for x in range(fb.width)]


def test_char_size():
    assert char_size(3) == 24
    assert char_size(1) * 2 == char_size(2)


def test_new_buffer_is_zero_and_clear_fills():
    fb = Framebuffer(4, 3)
    assert set(all_pixels(fb)) == {0}
    fb.clear(RED)
    assert set(all_pixels(fb)) == {RED}


def test_clear_covers_width_times_height_linear_entries():
    fb = Framebuffer(2, 2, stride=16)
    fb.clear(RED)
    assert fb.pixel(0, 0) == RED
    assert fb.pixel(1, 0) == RED
    assert fb.pixel(0, 1) == 0


def test_bad_stride():
    with pytest.raises(ValueError):
        Framebuffer(4, 4, stride=8)


def test_pixel_out_of_range():
    fb = Framebuffer(2, 2)
    with pytest.raises(IndexError):
        fb.pixel(2, 0)


def test_out_of_bounds_pixel_is_ignored():
    fb = Framebuffer(3, 3)
    fb.draw_pixel(3, 3, RED)
    fb.draw_pixel(-1, 0, RED)
    assert set(all_pixels(fb)) == {0}


def test_fill_rect_is_clipped():
    fb = Framebuffer(5, 5)
    fb.fill_rect(1, 1, 2, 3, RED)
    assert all_pixels(fb).count(RED) == 6
    fb.fill_rect(4, 4, 10, 10, RED)
    assert all_pixels(fb).count(RED) == 7


def test_horizontal_line():
    fb = Framebuffer(10, 3)
    rect = fb.draw_line(2, 1, 7, 1, RED)
    assert [fb.pixel(x, 1) for x in range(2, 8)] == [RED] * 6
    assert all_pixels(fb).count(RED) == 6
    assert rect == Rect(Point(7, 1), Size(1, 1))


def test_diagonal_line_backwards():
    fb = Framebuffer(6, 6)
    fb.draw_line(5, 5, 0, 0, RED)
    assert all(fb.pixel(i, i) == RED for i in range(6))
    assert all_pixels(fb).count(RED) == 6


def test_draw_char_scaled_block():
    fb = Framebuffer(20, 20, font=FULL_BLOCK)
    fb.draw_char(1, 1, "a", 2, RED)
    assert all_pixels(fb).count(RED) == char_size(2) ** 2
    assert fb.pixel(1, 1) == RED
    assert fb.pixel(0, 0) == 0


def test_draw_char_uses_leftmost_bit():
    fb = Framebuffer(10, 10, font={ord("b"): [0x80]})
    fb.draw_char(2, 3, "b", 1, RED)
    assert all_pixels(fb) .count(RED) == 1
    assert fb.pixel(2, 3) == RED


def test_unknown_char_draws_nothing():
    fb = Framebuffer(10, 10, font=FULL_BLOCK)
    fb.draw_char(0, 0, "z", 1, RED)
    assert set(all_pixels(fb)) == {0}


def test_draw_string_size_single_line():
    fb = Framebuffer(40, 20)
    size = fb.draw_string("abc", 0, 0, 1, RED)
    assert size == Size(char_size(1) * 3, char_size(1) + 2)


def test_draw_string_size_with_newline():
    fb = Framebuffer(40, 40, font=FULL_BLOCK)
    size = fb.draw_string("aa\na", 0, 0, 1, RED)
    line = char_size(1) + 2
    assert size == Size(char_size(1) * 2, line * 2)
    assert fb.pixel(0, line) == RED
    assert fb.pixel(0, char_size(1)) == 0