"""Drawing commands for one frame of the transport bar."""

from __future__ import annotations

from typing import List, Optional, Tuple, Union

from freikino.scene import (
    WHITE,
    DrawBitmap,
    DrawLine,
    DrawText,
    FillEllipse,
    FillPolygon,
    FillRect,
    FillRoundedRect,
    Point,
    Rect,
)
from freikino.transport import PressedButton, TransportOverlay
from freikino.transport_layout import (
    TransportLayout,
    compute_layout,
    format_time_ns,
    position_on_bar,
)

BACKGROUND = (0.0, 0.0, 0.0, 0.60)
TRACK = (1.0, 1.0, 1.0, 0.30)
THUMB_BORDER = (1.0, 1.0, 1.0, 0.75)

TIME_FONT_SIZE = 14.0
HOVER_TIME_FONT_SIZE = 13.0

KNOB_RADIUS = 8.0
VOLUME_KNOB_RADIUS = 7.0
BUTTON_CORNER_RADIUS = 8.0
HOVER_TINT = 0.12
PRESSED_TINT = 0.25
IDLE_ICON_OPACITY = 0.85

MUTE_SLASH_WIDTH = 2.5
WAVE_TICK_WIDTH = 1.8

THUMB_BORDER_WIDTH = 2.0
THUMB_ABOVE_BAR = 28.0
THUMB_EDGE_GUARD = 8.0
LABEL_HALF_WIDTH = 50.0
LABEL_HEIGHT = 18.0

Command = Union[
    FillRect,
    FillRoundedRect,
    FillEllipse,
    FillPolygon,
    DrawLine,
    DrawText,
    DrawBitmap,
]


def _button_background(
    rect: Rect, hover: bool, pressed: bool, alpha: float
) -> List[Command]:
    if not hover and not pressed:
        return []
    tint = PRESSED_TINT if pressed else HOVER_TINT
    return [FillRoundedRect(rect, BUTTON_CORNER_RADIUS, BUTTON_CORNER_RADIUS, TRACK, alpha * tint)]


def _play_glyph(center: Point, paused: bool, opacity: float) -> List[Command]:
    cx, cy = center.x, center.y
    if paused:
        tw, th = 14.0, 16.0
        triangle = (
            Point(cx - tw * 0.35, cy - th * 0.5),
            Point(cx + tw * 0.65, cy),
            Point(cx - tw * 0.35, cy + th * 0.5),
        )
        return [FillPolygon(triangle, WHITE, opacity)]
    bw, bh, gap = 4.0, 16.0, 4.0
    return [
        FillRect(Rect(cx - gap * 0.5 - bw, cy - bh * 0.5, cx - gap * 0.5, cy + bh * 0.5), WHITE, opacity),
        FillRect(Rect(cx + gap * 0.5, cy - bh * 0.5, cx + gap * 0.5 + bw, cy + bh * 0.5), WHITE, opacity),
    ]


def _stop_glyph(center: Point, opacity: float) -> List[Command]:
    half = 7.0
    return [FillRect(Rect(center.x - half, center.y - half, center.x + half, center.y + half), WHITE, opacity)]


def _fullscreen_glyph(center: Point, opacity: float) -> List[Command]:
    cx, cy = center.x, center.y
    sz, th, arm = 14.0, 2.0, 6.0
    rects = (
        Rect(cx - sz, cy - sz, cx - sz + arm, cy - sz + th),
        Rect(cx - sz, cy - sz, cx - sz + th, cy - sz + arm),
        Rect(cx + sz - arm, cy - sz, cx + sz, cy - sz + th),
        Rect(cx + sz - th, cy - sz, cx + sz, cy - sz + arm),
        Rect(cx - sz, cy + sz - th, cx - sz + arm, cy + sz),
        Rect(cx - sz, cy + sz - arm, cx - sz + th, cy + sz),
        Rect(cx + sz - arm, cy + sz - th, cx + sz, cy + sz),
        Rect(cx + sz - th, cy + sz - arm, cx + sz, cy + sz),
    )
    return [FillRect(r, WHITE, opacity) for r in rects]


def _speaker_glyph(
    center: Point, muted: bool, volume: float, icon_opacity: float, alpha: float
) -> List[Command]:
    cx, cy = center.x, center.y
    body_h, body_w, cone_w, cone_h = 12.0, 6.0, 10.0, 18.0
    out: List[Command] = [
        FillRect(
            Rect(cx - cone_w * 0.5 - body_w, cy - body_h * 0.5, cx - cone_w * 0.5, cy + body_h * 0.5),
            WHITE,
            icon_opacity,
        ),
        FillPolygon(
            (
                Point(cx - cone_w * 0.5, cy - body_h * 0.5),
                Point(cx + cone_w * 0.5, cy - cone_h * 0.5),
                Point(cx + cone_w * 0.5, cy + cone_h * 0.5),
                Point(cx - cone_w * 0.5, cy + body_h * 0.5),
            ),
            WHITE,
            icon_opacity,
        ),
    ]
    if muted:
        out.append(
            DrawLine(
                Point(cx - cone_w, cy - cone_h * 0.5),
                Point(cx + cone_w, cy + cone_h * 0.5),
                MUTE_SLASH_WIDTH,
                WHITE,
                alpha,
            )
        )
        return out
    if volume > 0.66:
        ticks = 3
    elif volume > 0.33:
        ticks = 2
    elif volume > 0.01:
        ticks = 1
    else:
        ticks = 0
    for i in range(ticks):
        ox = cx + cone_w * 0.5 + 3.0 + i * 3.0
        oy = float(4 + i * 2)
        out.append(DrawLine(Point(ox, cy - oy), Point(ox, cy + oy), WAVE_TICK_WIDTH, WHITE, icon_opacity))
    return out


def _volume_popup(layout: TransportLayout, volume: float, alpha: float) -> List[Command]:
    clamped = min(max(volume, 0.0), 1.0)
    span = layout.volume_slider_y1 - layout.volume_slider_y0
    knob_y = layout.volume_slider_y1 - span * clamped
    track = layout.volume_slider_track
    return [
        FillRect(layout.volume_popup_panel, BACKGROUND, alpha * 0.85),
        FillRect(track, TRACK, alpha),
        FillRect(Rect(track.left, knob_y, track.right, track.bottom), WHITE, alpha),
        FillEllipse(Point(layout.volume_slider_x, knob_y), VOLUME_KNOB_RADIUS, VOLUME_KNOB_RADIUS, WHITE, alpha),
    ]


def _thumbnail(
    overlay: TransportOverlay, layout: TransportLayout, width: int, alpha: float
) -> Tuple[List[Command], Optional[Tuple[float, float]]]:
    """Preview image commands plus the anchor (centre x, bottom y) for the time label."""
    fw = float(width)
    thumb = overlay.thumbnail()
    if thumb is None:
        return [], (float(overlay.mouse_x), layout.seek_y - THUMB_ABOVE_BAR)

    bw = float(thumb.width)
    bh = float(thumb.height)
    tx = max(float(overlay.mouse_x) - bw * 0.5, THUMB_EDGE_GUARD)
    if tx + bw > fw - THUMB_EDGE_GUARD:
        tx = fw - THUMB_EDGE_GUARD - bw
    ty = max(layout.seek_y - THUMB_ABOVE_BAR - bh, THUMB_EDGE_GUARD)

    border = Rect(
        tx - THUMB_BORDER_WIDTH,
        ty - THUMB_BORDER_WIDTH,
        tx + bw + THUMB_BORDER_WIDTH,
        ty + bh + THUMB_BORDER_WIDTH,
    )
    commands: List[Command] = [
        FillRect(border, THUMB_BORDER, alpha * 0.85),
        DrawBitmap(Rect(tx, ty, tx + bw, ty + bh), thumb.pixels, thumb.width, thumb.height, alpha),
    ]
    return commands, (tx + bw * 0.5, ty - 4.0)


def _hover_label(
    overlay: TransportOverlay,
    layout: TransportLayout,
    anchor: Tuple[float, float],
    width: int,
    alpha: float,
) -> List[Command]:
    playback = overlay.playback
    if playback is None:
        return []
    dur = playback.duration_ns()
    if dur <= 0:
        return []
    hover_pts = int(position_on_bar(overlay.mouse_x, layout) * dur)
    cx, bottom = anchor
    left = cx - LABEL_HALF_WIDTH
    right = cx + LABEL_HALF_WIDTH
    fw = float(width)
    if left < THUMB_EDGE_GUARD:
        shift = THUMB_EDGE_GUARD - left
        left += shift
        right += shift
    elif right > fw - THUMB_EDGE_GUARD:
        shift = right - (fw - THUMB_EDGE_GUARD)
        left -= shift
        right -= shift
    rect = Rect(left, bottom - LABEL_HEIGHT, right, bottom)
    return [
        FillRect(rect, BACKGROUND, alpha * 0.7),
        DrawText(format_time_ns(hover_pts), rect, HOVER_TIME_FONT_SIZE, "center", WHITE, alpha),
    ]


def draw_transport(overlay: TransportOverlay, width: int, height: int) -> List[Command]:
    """Advance the overlay's fade and return the commands for this frame."""
    overlay.tick_animation()
    alpha = overlay.alpha()
    if alpha <= 0.001 or not overlay.has_source():
        return []

    layout = compute_layout(width, height)
    playback = overlay.playback
    out: List[Command] = [
        FillRect(layout.bar, BACKGROUND, alpha * 0.7),
        FillRect(layout.seek_track, TRACK, alpha),
    ]

    progress = overlay.current_progress()
    if progress > 0.0 and layout.seek_x1 > layout.seek_x0:
        track = layout.seek_track
        prog_right = layout.seek_x0 + (layout.seek_x1 - layout.seek_x0) * progress
        out.append(FillRect(Rect(track.left, track.top, prog_right, track.bottom), WHITE, alpha))
        if overlay.hover_seek or overlay.seek_dragging:
            out.append(FillEllipse(Point(prog_right, layout.seek_y), KNOB_RADIUS, KNOB_RADIUS, WHITE, alpha))

    pressed = overlay.pressed
    mx, my = overlay.mouse_x, overlay.mouse_y
    speaker_hover = mx >= 0 and my >= 0 and layout.volume_button.contains(mx, my)

    def icon_opacity(hover: bool) -> float:
        return alpha * (1.0 if hover else IDLE_ICON_OPACITY)

    out += _button_background(
        layout.play_button, overlay.hover_play, pressed is PressedButton.PLAY and overlay.hover_play, alpha
    )
    out += _play_glyph(layout.play_center, overlay.is_paused(), icon_opacity(overlay.hover_play))

    out += _button_background(
        layout.stop_button, overlay.hover_stop, pressed is PressedButton.STOP and overlay.hover_stop, alpha
    )
    out += _stop_glyph(layout.stop_center, icon_opacity(overlay.hover_stop))

    out += _button_background(
        layout.fs_button, overlay.hover_fs, pressed is PressedButton.FULLSCREEN and overlay.hover_fs, alpha
    )
    out += _fullscreen_glyph(layout.fs_center, icon_opacity(overlay.hover_fs))

    muted = playback is not None and playback.muted()
    volume = playback.volume() if playback is not None else 0.0
    out += _button_background(
        layout.volume_button, speaker_hover, pressed is PressedButton.VOLUME and speaker_hover, alpha
    )
    out += _speaker_glyph(layout.volume_center, muted, volume, icon_opacity(overlay.hover_volume), alpha)

    if (overlay.hover_volume or overlay.volume_dragging) and playback is not None:
        out += _volume_popup(layout, playback.volume(), alpha)

    if (overlay.hover_seek or overlay.seek_dragging) and mx >= 0:
        thumb_commands, anchor = _thumbnail(overlay, layout, width, alpha)
        out += thumb_commands
        if anchor is not None:
            out += _hover_label(overlay, layout, anchor, width, alpha)

    dur = playback.duration_ns() if playback is not None else 0
    if overlay.seek_dragging and dur > 0:
        cur = int(overlay.drag_progress * dur)
    else:
        cur = playback.current_time_ns() if playback is not None else 0
    line = f"{format_time_ns(cur)} / {format_time_ns(dur)}"
    out.append(DrawText(line, layout.time_text, TIME_FONT_SIZE, "trailing", WHITE, alpha))
    return out