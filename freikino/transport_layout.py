"""Geometry of the bottom transport bar and its time readout format."""

from __future__ import annotations

from dataclasses import dataclass

from freikino.scene import Point, Rect

BAR_HEIGHT = 96.0
EDGE_PAD = 24.0
BUTTON_SIZE = 44.0
BUTTON_GAP = 6.0
TIME_WIDTH = 140.0
SEEK_GAP = 16.0
TRACK_THICKNESS = 4.0
SEEK_HIT_HALF_HEIGHT = 12.0
MIN_SEEK_SPAN = 40.0

VOLUME_POPUP_WIDTH = 40.0
VOLUME_POPUP_HEIGHT = 140.0
VOLUME_POPUP_GAP = 14.0
VOLUME_POPUP_HIT_MARGIN = 20.0
VOLUME_SLIDER_THICKNESS = 4.0
VOLUME_SLIDER_PAD_Y = 14.0

_NS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True)
class TransportLayout:
    """Every rectangle and anchor of the transport bar for one window size.

    ``volume_popup_hit`` spans the popup, the gap below it and the speaker
    button, so moving between them keeps the popup open;
    ``volume_popup_panel`` is the drawn rectangle above the speaker.
    """

    bar: Rect
    play_button: Rect
    play_center: Point
    stop_button: Rect
    stop_center: Point
    seek_track: Rect
    seek_hit: Rect
    seek_x0: float
    seek_x1: float
    seek_y: float
    fs_button: Rect
    fs_center: Point
    volume_button: Rect
    volume_center: Point
    volume_popup_hit: Rect
    volume_popup_panel: Rect
    volume_slider_track: Rect
    volume_slider_x: float
    volume_slider_y0: float
    volume_slider_y1: float
    time_text: Rect


def _button_at(left: float, row_y: float) -> Rect:
    half = BUTTON_SIZE * 0.5
    return Rect(left, row_y - half, left + BUTTON_SIZE, row_y + half)


def _center(rect: Rect, row_y: float) -> Point:
    return Point((rect.left + rect.right) * 0.5, row_y)


def compute_layout(width: int, height: int) -> TransportLayout:
    """Lay out the bar for a client area of ``width`` x ``height`` pixels."""
    fw = float(width)
    fh = float(height)

    bar = Rect(0.0, fh - BAR_HEIGHT, fw, fh)
    row_y = fh - BAR_HEIGHT * 0.5

    play_button = _button_at(EDGE_PAD, row_y)
    play_center = Point(EDGE_PAD + BUTTON_SIZE * 0.5, row_y)

    stop_button = _button_at(play_button.right + BUTTON_GAP, row_y)
    stop_center = _center(stop_button, row_y)

    # The right-hand cluster reads [time] [volume] [fullscreen] and is
    # anchored on the window's right edge.
    fs_button = _button_at(fw - EDGE_PAD - BUTTON_SIZE, row_y)
    fs_center = _center(fs_button, row_y)

    volume_button = _button_at(fs_button.left - BUTTON_GAP - BUTTON_SIZE, row_y)
    volume_center = _center(volume_button, row_y)

    time_right = volume_button.left - 8.0
    time_text = Rect(time_right - TIME_WIDTH, row_y - 12.0, time_right, row_y + 12.0)

    panel_bottom = volume_button.top - VOLUME_POPUP_GAP
    volume_popup_panel = Rect(
        volume_center.x - VOLUME_POPUP_WIDTH * 0.5,
        panel_bottom - VOLUME_POPUP_HEIGHT,
        volume_center.x + VOLUME_POPUP_WIDTH * 0.5,
        panel_bottom,
    )
    volume_popup_hit = Rect(
        volume_popup_panel.left - VOLUME_POPUP_HIT_MARGIN,
        volume_popup_panel.top,
        volume_popup_panel.right + VOLUME_POPUP_HIT_MARGIN,
        volume_button.bottom,
    )

    slider_x = (volume_popup_panel.left + volume_popup_panel.right) * 0.5
    slider_y0 = volume_popup_panel.top + VOLUME_SLIDER_PAD_Y
    slider_y1 = volume_popup_panel.bottom - VOLUME_SLIDER_PAD_Y
    volume_slider_track = Rect(
        slider_x - VOLUME_SLIDER_THICKNESS * 0.5,
        slider_y0,
        slider_x + VOLUME_SLIDER_THICKNESS * 0.5,
        slider_y1,
    )

    seek_x0 = stop_button.right + SEEK_GAP
    seek_x1 = time_text.left - SEEK_GAP
    if seek_x1 < seek_x0 + MIN_SEEK_SPAN:
        # Too narrow for a scrub bar; collapse it.
        seek_x1 = seek_x0
    seek_y = row_y

    seek_track = Rect(
        seek_x0,
        seek_y - TRACK_THICKNESS * 0.5,
        seek_x1,
        seek_y + TRACK_THICKNESS * 0.5,
    )
    seek_hit = Rect(
        seek_x0 - 4.0,
        seek_y - SEEK_HIT_HALF_HEIGHT,
        seek_x1 + 4.0,
        seek_y + SEEK_HIT_HALF_HEIGHT,
    )

    return TransportLayout(
        bar=bar,
        play_button=play_button,
        play_center=play_center,
        stop_button=stop_button,
        stop_center=stop_center,
        seek_track=seek_track,
        seek_hit=seek_hit,
        seek_x0=seek_x0,
        seek_x1=seek_x1,
        seek_y=seek_y,
        fs_button=fs_button,
        fs_center=fs_center,
        volume_button=volume_button,
        volume_center=volume_center,
        volume_popup_hit=volume_popup_hit,
        volume_popup_panel=volume_popup_panel,
        volume_slider_track=volume_slider_track,
        volume_slider_x=slider_x,
        volume_slider_y0=slider_y0,
        volume_slider_y1=slider_y1,
        time_text=time_text,
    )


def position_on_bar(x: float, layout: TransportLayout) -> float:
    """Fraction 0..1 along the scrub bar under horizontal position ``x``."""
    span = layout.seek_x1 - layout.seek_x0
    if span <= 0.0:
        return 0.0
    t = (float(x) - layout.seek_x0) / span
    return min(max(t, 0.0), 1.0)


def format_time_ns(ns: int) -> str:
    """``m:ss`` below an hour, ``h:mm:ss`` from an hour on; negatives read as zero."""
    secs = max(ns, 0) // _NS_PER_SECOND
    hours, rest = divmod(secs, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"