import pytest

from freikino.transport_layout import (
    BAR_HEIGHT,
    BUTTON_SIZE,
    EDGE_PAD,
    compute_layout,
    format_time_ns,
    position_on_bar,
)


@pytest.fixture
def wide():
    return compute_layout(1280, 720)


def test_bar_spans_bottom_of_window(wide):
    assert wide.bar.left == 0.0
    assert wide.bar.right == 1280.0
    assert wide.bar.bottom == 720.0
    assert wide.bar.height == BAR_HEIGHT


def test_buttons_share_size_and_row(wide):
    for rect in (wide.play_button, wide.stop_button, wide.fs_button, wide.volume_button):
        assert rect.width == BUTTON_SIZE
        assert rect.height == BUTTON_SIZE
        assert (rect.top + rect.bottom) * 0.5 == wide.seek_y


def test_left_and_right_anchors(wide):
    assert wide.play_button.left == EDGE_PAD
    assert wide.fs_button.right == 1280.0 - EDGE_PAD
    assert wide.stop_button.left > wide.play_button.right
    assert wide.volume_button.right < wide.fs_button.left
    assert wide.time_text.right < wide.volume_button.left


def test_centers_are_inside_buttons(wide):
    pairs = [
        (wide.play_button, wide.play_center),
        (wide.stop_button, wide.stop_center),
        (wide.fs_button, wide.fs_center),
        (wide.volume_button, wide.volume_center),
    ]
    for rect, center in pairs:
        assert rect.contains(center.x, center.y)


def test_seek_bar_between_stop_and_time(wide):
    assert wide.stop_button.right < wide.seek_x0 < wide.seek_x1 < wide.time_text.left
    assert wide.seek_track.left == wide.seek_x0
    assert wide.seek_track.right == wide.seek_x1
    assert wide.seek_hit.contains(wide.seek_x0, wide.seek_y)
    assert wide.seek_hit.contains(wide.seek_x1, wide.seek_y)


def test_volume_popup_above_speaker(wide):
    panel = wide.volume_popup_panel
    hit = wide.volume_popup_hit
    assert panel.bottom < wide.volume_button.top
    assert hit.left < panel.left and hit.right > panel.right
    assert hit.bottom == wide.volume_button.bottom
    assert hit.contains(wide.volume_center.x, wide.volume_center.y)
    assert panel.top < wide.volume_slider_y0 < wide.volume_slider_y1 < panel.bottom
    assert wide.volume_slider_x == wide.volume_center.x


def test_narrow_window_collapses_seek_bar():
    layout = compute_layout(300, 200)
    assert layout.seek_x1 == layout.seek_x0
    assert position_on_bar(layout.seek_x0 + 100, layout) == 0.0


def test_position_on_bar_clamps_and_interpolates(wide):
    assert position_on_bar(0, wide) == 0.0
    assert position_on_bar(5000, wide) == 1.0
    assert position_on_bar(wide.seek_x0, wide) == 0.0
    assert position_on_bar(wide.seek_x1, wide) == 1.0
    mid = (wide.seek_x0 + wide.seek_x1) / 2
    assert position_on_bar(mid, wide) == pytest.approx(0.5)


def test_position_on_bar_is_monotonic(wide):
    xs = range(int(wide.seek_x0), int(wide.seek_x1), 25)
    values = [position_on_bar(x, wide) for x in xs]
    assert values == sorted(values)


def test_format_short_and_long():
    assert format_time_ns(0) == "0:00"
    assert format_time_ns(3_661 * 1_000_000_000) == "1:01:01"
    assert format_time_ns(3_599 * 1_000_000_000 + 999_999_999) == "59:59"


def test_format_negative_reads_as_zero():
    assert format_time_ns(-5_000_000_000) == format_time_ns(0)


def test_format_truncates_subsecond():
    assert format_time_ns(61_999_999_999) == format_time_ns(61_000_000_000)