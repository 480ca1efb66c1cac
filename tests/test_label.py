from redcore.framebuffer import Framebuffer, char_size
from redcore.geometry import Point, Rect, Size
from redcore.label import HorizontalAlignment, Label, VerticalAlignment


def _rect(x, y, w, h):
    return Rect(Point(x, y), Size(w, h))


def test_size_of_single_line():
    label = Label(text="abc", scale=2)
    assert label.size() == Size(char_size(2) * 3, char_size(2))


def test_size_uses_widest_line_and_line_count():
    label = Label(text="ab\ncde")
    assert label.size() == Size(char_size(1) * 3, char_size(1) * 2)


def test_empty_text_is_one_line_high():
    assert Label(text="").size() == Size(0, char_size(1))


def test_leading_top_starts_at_rect_origin():
    label = Label(rect=_rect(5, 7, 100, 50), text="hi")
    assert label.position() == Point(5, 7)


def test_trailing_bottom_ends_at_rect_edges():
    label = Label(
        rect=_rect(10, 20, 100, 60),
        text="hey",
        horizontal_alignment=HorizontalAlignment.TRAILING,
        vertical_alignment=VerticalAlignment.BOTTOM,
    )
    pos, size = label.position(), label.size()
    assert pos.x + size.width == 10 + 100
    assert pos.y + size.height == 20 + 60


def test_centered_text_has_equal_margins():
    label = Label(
        rect=_rect(0, 0, 100, 40),
        text="ab",
        horizontal_alignment=HorizontalAlignment.HORIZONTAL_CENTER,
        vertical_alignment=VerticalAlignment.VERTICAL_CENTER,
    )
    pos, size = label.position(), label.size()
    assert pos.x == 100 - (pos.x + size.width)
    assert pos.y == 40 - (pos.y + size.height)


def test_adapt_to_size_fits_rect_to_text():
    label = Label(rect=_rect(3, 4, 1, 1), text="one\ntwo!", scale=3)
    label.adapt_to_size()
    assert label.rect.size == label.size()
    assert label.rect.point == Point(3, 4)


def test_render_fills_background_and_draws_text():
    fb = Framebuffer(40, 20, font={ord("A"): [0xFF] * 8})
    label = Label(
        rect=_rect(0, 0, 40, 20),
        text="A",
        background_color=0x111111,
        text_color=0xFFFFFF,
    )
    label.render(fb)
    assert fb.pixel(0, 0) == 0xFFFFFF
    assert fb.pixel(7, 7) == 0xFFFFFF
    assert fb.pixel(20, 10) == 0x111111
    assert fb.pixel(39, 19) == 0x111111